"""Main entry point for the JobShopSim simulator."""

import argparse
import sys
from pathlib import Path
from typing import Dict, List

import numpy as np
import yaml
from tqdm import tqdm

from jobshopsim.core.line_builder import build_simulator
from jobshopsim.core.statistics import SimulationStatistics
from jobshopsim.models.line_config import LineConfig
from jobshopsim.reports.simulation_logger import SimulationLogger
from jobshopsim.utils.logger import setup_logger
from jobshopsim.utils.visualization import plot_results
from configs import load_config, merge_configs, DEFAULT_CONFIG_PATH


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="JobShopSim: Discrete Event Simulator for Job-Shop Manufacturing Lines"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to configuration file",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="results",
        help="Directory to save results",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override the random seed",
    )
    parser.add_argument(
        "--run-length",
        type=float,
        default=None,
        help="Override the simulation run length",
    )
    parser.add_argument(
        "--replications",
        type=int,
        default=1,
        help="Number of independent replications (seed, seed+1, ...)",
    )
    parser.add_argument(
        "--visualize",
        action="store_true",
        help="Generate visualization plots",
    )
    parser.add_argument(
        "--save-logs",
        action="store_true",
        help="Write parts, events and routing logs as CSV",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def summarize_replications(snapshots: List[SimulationStatistics]) -> Dict:
    """Mean and standard deviation of key metrics across replications.

    Args:
        snapshots: Final statistics of each replication

    Returns:
        Summary dictionary
    """
    throughput = np.array([s.throughput for s in snapshots])
    flow_time = np.array([s.average_flow_time for s in snapshots])
    completed = np.array([s.total_parts_completed for s in snapshots])

    return {
        'replications': len(snapshots),
        'throughput_mean': float(np.mean(throughput)),
        'throughput_std': float(np.std(throughput)),
        'flow_time_mean': float(np.mean(flow_time)),
        'flow_time_std': float(np.std(flow_time)),
        'completed_mean': float(np.mean(completed)),
    }


def main(argv=None):
    """Main function."""
    args = parse_args(argv)

    # Setup logging
    log_level = "DEBUG" if args.verbose else "INFO"
    logger = setup_logger("JobShopSim", level=log_level)

    logger.info("=== JobShopSim: Job-Shop Manufacturing Line Simulator ===")
    logger.info(f"Loading configuration from {args.config}")

    try:
        if args.replications < 1:
            raise ValueError(f"--replications must be at least 1, got {args.replications}")

        overrides = {'simulation': {}}
        if args.seed is not None:
            overrides['simulation']['random_seed'] = args.seed
        if args.run_length is not None:
            overrides['simulation']['run_length'] = args.run_length
        config = merge_configs(load_config(args.config), overrides)

        line = LineConfig.from_dict(config)
        base_seed = line.random_seed if line.random_seed is not None else 0

        logger.info(f"Machines: {', '.join(m.name for m in line.expanded_machines())}")
        logger.info(f"Run length: {line.run_length}, seed: {base_seed}, replications: {args.replications}")

        snapshots = []
        first_logger = None
        for i in tqdm(range(args.replications), desc="Replications", disable=args.replications == 1):
            line.random_seed = base_seed + i
            sim_logger = SimulationLogger(enabled=(i == 0))
            simulator = build_simulator(line, sim_logger=sim_logger)
            snapshots.append(simulator.run_until(line.run_length))
            if i == 0:
                first_logger = sim_logger

        stats = snapshots[0]

        # Print results
        logger.info("\n" + simulator.metrics_collector.get_summary(stats))

        results = stats.to_dict()
        if args.replications > 1:
            results['replication_summary'] = summarize_replications(snapshots)
            summary = results['replication_summary']
            logger.info(f"Throughput: {summary['throughput_mean']:.4f} ± {summary['throughput_std']:.4f}")
            logger.info(f"Flow time: {summary['flow_time_mean']:.2f} ± {summary['flow_time_std']:.2f}")

        # Save results
        output_dir = Path(args.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        results_file = output_dir / "results.yaml"
        with open(results_file, 'w') as f:
            yaml.dump(results, f, default_flow_style=False)
        logger.info(f"Results saved to {results_file}")

        if args.save_logs:
            first_logger.save_csv(output_dir / "logs")

        # Generate visualizations
        if args.visualize:
            logger.info("Generating visualization plots...")
            plot_results(results, stats, output_dir, first_logger.routing_dataframe())
            logger.info(f"Plots saved to {output_dir}")

        logger.info("Simulation completed successfully!")
        return 0

    except Exception as e:
        logger.error(f"Simulation failed: {str(e)}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
