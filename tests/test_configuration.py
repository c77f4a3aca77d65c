"""Tests for configuration, line building, logging and the CLI."""

import logging
import tempfile
import unittest
from pathlib import Path

import pandas as pd
import yaml

from configs import load_config, merge_configs, DEFAULT_CONFIG_PATH
from jobshopsim.core.exceptions import ConfigurationError
from jobshopsim.core.line_builder import build_simulator
from jobshopsim.main import main
from jobshopsim.models.line_config import LineConfig
from jobshopsim.models.machine import MachineState
from jobshopsim.reports.simulation_logger import SimulationLogger
from jobshopsim.scheduling.dispatching_rules import CriticalRatioRule
from jobshopsim.utils.logger import setup_logger
from jobshopsim.workload.distributions import TriangularDistribution


class TestConfigs(unittest.TestCase):
    """Test cases for configuration loading."""

    def test_default_config(self):
        config = load_config(DEFAULT_CONFIG_PATH)

        self.assertEqual(config['simulation']['run_length'], 1000.0)
        self.assertEqual(config['simulation']['random_seed'], 42)
        self.assertEqual([m['name'] for m in config['machines']],
                         ["Drill Press", "Lathe", "Mill", "Grinder"])
        self.assertEqual(config['workload']['routing']['standard_route'], [1, 2, 3, 4])

    def test_merge_configs(self):
        base = {'simulation': {'run_length': 10, 'random_seed': 1}, 'machines': [1]}
        merged = merge_configs(base, {'simulation': {'random_seed': 2}, 'machines': [2]})

        self.assertEqual(merged, {'simulation': {'run_length': 10, 'random_seed': 2}, 'machines': [2]})
        self.assertEqual(base['simulation']['random_seed'], 1)


class TestLineConfig(unittest.TestCase):
    """Test cases for LineConfig."""

    def setUp(self):
        """Set up test fixtures."""
        self.config = {
            'simulation': {'run_length': 100.0, 'random_seed': 5},
            'machines': [
                {'name': 'Drill', 'buffer_capacity': 4},
                {'name': 'Lathe', 'buffer_capacity': 2, 'quantity': 2, 'dispatching_rule': 'CR'},
                {'name': 'Mill', 'processing': {'type': 'Triangular', 'params': [1, 2, 3]}},
            ],
            'workload': {'num_parts': 10, 'routing': {'standard_route': [1, 2, 4]}},
        }

    def test_quantity_expansion(self):
        """Test machine types expand into numbered machines with consecutive ids."""
        machines = LineConfig.from_dict(self.config).expanded_machines()

        self.assertEqual([m.name for m in machines], ["Drill", "Lathe 1", "Lathe 2", "Mill"])
        self.assertEqual([m.machine_id for m in machines], [1, 2, 3, 4])
        self.assertEqual(machines[2].buffer_capacity, 2)

    def test_defaults(self):
        line = LineConfig.from_dict(self.config)

        self.assertEqual(line.retry_interval, 0.5)
        self.assertEqual(line.min_duration, 0.1)
        self.assertEqual(line.processing, {'type': 'Uniform', 'params': [2.0, 6.0]})
        self.assertEqual(line.workload['due_date_factor'], 3.0)

    def test_validation_errors(self):
        """Test each invalid setting raises ConfigurationError."""
        invalid = [
            {'machines': []},
            {'machines': [{'name': 'A', 'buffer_capacity': 0}]},
            {'machines': [{'name': 'A', 'quantity': 101}]},
            {'machines': [{'buffer_capacity': 3}]},
            {'machines': [{'name': 'A'}], 'simulation': {'run_length': 0}},
            {'machines': [{'name': 'A'}], 'simulation': {'retry_interval': -0.5}},
            {'machines': [{'name': 'A'}], 'workload': {'routing': {'standard_route': [1, 2]}}},
            {'machines': [{'name': 'A'}], 'workload': {'routing': {'standard_route': []}}},
        ]
        for config in invalid:
            with self.subTest(config=config):
                with self.assertRaises(ConfigurationError):
                    LineConfig.from_dict(config)

    def test_build_simulator(self):
        """Test a simulator is built with machines, rules and arrivals."""
        simulator = build_simulator(self.config)

        self.assertEqual(len(simulator.machines), 4)
        self.assertIsInstance(simulator.get_machine(2).dispatching_rule, CriticalRatioRule)
        self.assertIsInstance(simulator.processing_distribution_for(4), TriangularDistribution)
        self.assertEqual(simulator.buffers[1].capacity, 4)
        self.assertEqual(len(simulator.parts), 10)
        for part in simulator.parts.values():
            self.assertEqual(part.route, [1, 2, 4])
            self.assertIsNotNone(part.estimated_processing_time)

        stats = simulator.run_until(100.0)
        self.assertEqual(stats.total_parts_arrived - stats.total_parts_rejected,
                         stats.total_parts_completed + stats.current_wip)

    def test_build_is_deterministic(self):
        first = build_simulator(load_config()).run_until(300.0)
        second = build_simulator(load_config()).run_until(300.0)

        self.assertEqual(first.to_dict(), second.to_dict())
        self.assertEqual(first.total_parts_arrived, 20)


class TestSimulationLogger(unittest.TestCase):
    """Test cases for the structured simulation logs."""

    def setUp(self):
        """Set up test fixtures."""
        self.simulator = build_simulator(load_config())
        self.simulator.run_until(1000.0)
        self.sim_logger = self.simulator.sim_logger

    def test_dataframes(self):
        parts = self.sim_logger.parts_dataframe()
        events = self.sim_logger.events_dataframe()
        routing = self.sim_logger.routing_dataframe()

        self.assertEqual(len(parts), 20)
        self.assertEqual(parts.iloc[0]['route'], "1->2->3->4")
        self.assertTrue(events['time'].is_monotonic_increasing)
        self.assertEqual(len(routing), 4 * self.simulator.statistics().total_parts_completed)
        self.assertTrue((routing['buffer_wait_time'] >= 0).all())
        self.assertTrue((routing['processing_time'] > 1.99).all())

    def test_save_csv(self):
        with tempfile.TemporaryDirectory() as tmp:
            paths = self.sim_logger.save_csv(tmp)

            self.assertEqual(set(paths), {"parts", "events", "routing"})
            for path in paths.values():
                self.assertTrue(path.exists())
            self.assertEqual(len(pd.read_csv(paths["parts"])), 20)

    def test_disabled_logger_records_nothing(self):
        sim_logger = SimulationLogger(enabled=False)
        simulator = build_simulator(load_config(), sim_logger=sim_logger)
        simulator.run_until(100.0)

        self.assertEqual(sim_logger.events_dataframe().shape[0], 0)
        self.assertEqual(len(sim_logger.part_logs), 0)

    def test_reset_clears_logs(self):
        self.simulator.reset()
        self.assertEqual(len(self.sim_logger.event_logs), 0)
        for machine in self.simulator.machines.values():
            self.assertEqual(machine.state, MachineState.IDLE)


class TestLogger(unittest.TestCase):
    """Test cases for setup_logger."""

    def tearDown(self):
        setup_logger("TestLogger", level="INFO")

    def test_single_handler(self):
        first = setup_logger("TestLogger")
        second = setup_logger("TestLogger")

        self.assertIs(first, second)
        self.assertEqual(len(second.handlers), 1)

    def test_levels(self):
        logger = setup_logger("TestLogger", level="debug")
        self.assertEqual(logger.level, logging.DEBUG)

        with self.assertRaises(ValueError):
            setup_logger("TestLogger", level="LOUD")


class TestMain(unittest.TestCase):
    """Test cases for the command line entry point."""

    def test_run_with_replications(self):
        """Test a CLI run writes results, logs and plots."""
        with tempfile.TemporaryDirectory() as tmp:
            code = main(["--output-dir", tmp, "--run-length", "200", "--replications", "2",
                         "--save-logs", "--visualize"])

            self.assertEqual(code, 0)
            with open(Path(tmp) / "results.yaml") as f:
                results = yaml.safe_load(f)

            self.assertEqual(results['current_time'], 200.0)
            self.assertEqual(results['replication_summary']['replications'], 2)
            self.assertEqual(len(list((Path(tmp) / "logs").glob("*.csv"))), 3)
            self.assertTrue((Path(tmp) / "machine_utilization.png").exists())
            self.assertTrue((Path(tmp) / "gantt_chart.png").exists())

    def test_bad_config_returns_error(self):
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "bad.yaml"
            config_path.write_text("machines: []\n")

            self.assertEqual(main(["--config", str(config_path), "--output-dir", tmp]), 1)


if __name__ == '__main__':
    unittest.main()
