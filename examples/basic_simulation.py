"""Basic simulation example."""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from jobshopsim.core.line_builder import build_simulator
from jobshopsim.utils.logger import setup_logger
from configs import load_config, merge_configs


def main():
    """Run a basic simulation."""
    logger = setup_logger("BasicSimulation")

    logger.info("=== Basic Job-Shop Simulation ===")

    # Load configuration
    config = load_config()

    # Customize for this example
    config = merge_configs(config, {
        'simulation': {'run_length': 200.0},
        'workload': {'num_parts': 40, 'priority_range': [1, 3]},
    })
    config['machines'][1]['dispatching_rule'] = 'Priority'
    config['machines'][1]['buffer_capacity'] = 3

    logger.info(f"Running simulation for {config['simulation']['run_length']} time units")
    logger.info(f"Parts: {config['workload']['num_parts']}")

    # Create and run simulator
    simulator = build_simulator(config)
    stats = simulator.run_until(config['simulation']['run_length'])

    # Print results
    logger.info("\n=== Results ===")
    logger.info(f"Arrived: {stats.total_parts_arrived} (rejected {stats.total_parts_rejected})")
    logger.info(f"Completed: {stats.total_parts_completed}, WIP: {stats.current_wip}")
    logger.info(f"Throughput: {stats.throughput:.4f} parts per time unit")
    logger.info(f"\nFlow time:")
    logger.info(f"  Mean: {stats.average_flow_time:.2f}")
    logger.info(f"  Median: {stats.median_flow_time:.2f}")
    logger.info(f"  P95: {stats.p95_flow_time:.2f}")

    logger.info(f"\nMachines:")
    for ms in stats.machine_stats.values():
        logger.info(f"  {ms.machine_name}: utilization {ms.utilization:.1%}, "
                    f"blocked {ms.total_blocked_time:.1f}, processed {ms.parts_processed}")

    routing = simulator.sim_logger.routing_dataframe()
    logger.info(f"\nMean buffer wait: {routing['buffer_wait_time'].mean():.2f}")

    logger.info("\nSimulation complete!")


if __name__ == "__main__":
    main()
