"""Build a ready-to-run simulator from configuration."""

from typing import Any, Dict, Optional, Union

import numpy as np

from .simulator import Simulator
from ..models.line_config import LineConfig
from ..models.machine import Machine
from ..reports.simulation_logger import SimulationLogger
from ..scheduling.dispatching_rules import DispatchingRuleRegistry
from ..utils.logger import setup_logger
from ..workload.distributions import DistributionRegistry
from ..workload.part_generator import PartGenerator

logger = setup_logger(__name__)


def build_simulator(config: Union[Dict[str, Any], LineConfig],
                    sim_logger: Optional[SimulationLogger] = None,
                    distribution_registry: Optional[DistributionRegistry] = None,
                    rule_registry: Optional[DispatchingRuleRegistry] = None) -> Simulator:
    """Create a simulator with machines added and arrivals scheduled.

    Args:
        config: Configuration dictionary or parsed LineConfig
        sim_logger: Structured record collector for the simulator
        distribution_registry: Registry for processing and arrival distributions
        rule_registry: Registry for dispatching rules

    Returns:
        Simulator at time zero with the generated parts scheduled
    """
    line = config if isinstance(config, LineConfig) else LineConfig.from_dict(config)
    line.validate()

    distributions = distribution_registry or DistributionRegistry()
    rules = rule_registry or DispatchingRuleRegistry()

    simulator = Simulator(
        random_seed=line.random_seed,
        processing_distribution=distributions.from_config(line.processing),
        retry_interval=line.retry_interval,
        min_duration=line.min_duration,
        rule_registry=rules,
        sim_logger=sim_logger,
    )

    for machine_config in line.expanded_machines():
        machine = Machine(
            machine_config.machine_id,
            machine_config.name,
            rules.get(machine_config.dispatching_rule),
        )
        processing = distributions.from_config(machine_config.processing) if machine_config.processing else None
        simulator.add_machine(machine, machine_config.buffer_capacity, processing)

    mean_processing_time = float(np.mean([
        simulator.processing_distribution_for(mid).mean for mid in simulator.machines
    ]))

    generator = PartGenerator(
        line.workload,
        list(simulator.machines),
        mean_processing_time=mean_processing_time,
        distribution_registry=distributions,
    )
    for part in generator.generate(simulator.rng, 0.0, line.run_length):
        simulator.schedule_arrival(part, part.arrival_time)

    logger.info(f"Built line with {len(simulator.machines)} machines and {len(simulator.parts)} parts")
    return simulator
