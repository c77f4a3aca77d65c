"""Visualization utilities for simulation results."""

import matplotlib.pyplot as plt
import seaborn as sns
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Dict, List, Optional

from ..core.statistics import SimulationStatistics

sns.set_style("whitegrid")
sns.set_palette("husl")


def plot_results(results: Dict, statistics: SimulationStatistics, output_dir: Path,
                 routing: Optional[pd.DataFrame] = None) -> List[Path]:
    """Generate all visualization plots.

    Args:
        results: Results dictionary from the run (summary metrics)
        statistics: Final statistics snapshot
        output_dir: Directory to save plots
        routing: Routing log from ``SimulationLogger.routing_dataframe``

    Returns:
        Paths of the written figures
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = [output_dir / "machine_utilization.png"]
    plot_machine_utilization(statistics, written[0])

    written.append(output_dir / "summary.png")
    plot_summary(results, statistics, written[-1])

    # Gantt chart only when operations were logged
    if routing is not None and not routing.empty:
        written.append(output_dir / "gantt_chart.png")
        plot_gantt(routing, written[-1])

    return written


def plot_machine_utilization(statistics: SimulationStatistics, output_path: Path) -> None:
    """Plot busy, blocked and idle share per machine.

    Args:
        statistics: Statistics snapshot
        output_path: Output file path
    """
    machines = list(statistics.machine_stats.values())
    names = [m.machine_name for m in machines]
    elapsed = statistics.current_time if statistics.current_time > 0 else 1.0

    busy = np.array([m.total_busy_time / elapsed for m in machines])
    blocked = np.array([m.total_blocked_time / elapsed for m in machines])
    idle = np.clip(1.0 - busy - blocked, 0.0, 1.0)

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 5))

    ax1.bar(names, busy, label='Busy', color='steelblue')
    ax1.bar(names, blocked, bottom=busy, label='Blocked', color='coral')
    ax1.bar(names, idle, bottom=busy + blocked, label='Idle/Starved', color='lightgray')
    ax1.set_ylabel('Share of Time')
    ax1.set_title('Machine Time Breakdown')
    ax1.set_ylim([0, 1])
    ax1.legend()
    ax1.tick_params(axis='x', rotation=30)

    ax2.bar(names, [m.average_buffer_count for m in machines], color='lightgreen', label='Average')
    ax2.scatter(names, [m.buffer_capacity for m in machines], marker='_', s=400, color='black',
                label='Capacity')
    ax2.set_ylabel('Parts')
    ax2.set_title('Buffer Occupancy')
    ax2.legend()
    ax2.grid(axis='y', alpha=0.3)
    ax2.tick_params(axis='x', rotation=30)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close()


def plot_gantt(routing: pd.DataFrame, output_path: Path, max_parts: int = 30) -> None:
    """Plot a Gantt chart of operations per machine.

    Args:
        routing: Routing log with machine_name, part_id, start_time and end_time
        output_path: Output file path
        max_parts: Only the first parts to arrive are drawn
    """
    if routing.empty:
        return

    part_ids = list(dict.fromkeys(routing['part_id']))[:max_parts]
    data = routing[routing['part_id'].isin(part_ids)]

    machines = list(dict.fromkeys(data.sort_values('machine_id')['machine_name']))
    colors = dict(zip(part_ids, sns.color_palette("husl", len(part_ids))))

    fig, ax = plt.subplots(figsize=(14, 1 + 0.6 * len(machines)))

    for _, row in data.iterrows():
        y = machines.index(row['machine_name'])
        ax.barh(y, row['end_time'] - row['start_time'], left=row['start_time'],
                color=colors[row['part_id']], edgecolor='black', linewidth=0.5)
        if row['end_time'] - row['start_time'] > 1.0:
            ax.text(row['start_time'] + 0.1, y, row['part_id'], va='center', fontsize=7)

    ax.set_yticks(range(len(machines)))
    ax.set_yticklabels(machines)
    ax.invert_yaxis()
    ax.set_xlabel('Simulation Time')
    ax.set_title('Operation Schedule')
    ax.grid(axis='x', alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close()


def plot_summary(results: Dict, statistics: SimulationStatistics, output_path: Path) -> None:
    """Plot flow-time percentiles next to the headline numbers.

    Args:
        results: Results dictionary
        statistics: Statistics snapshot
        output_path: Output file path
    """
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))

    labels = ['Mean', 'Median', 'P95', 'Max']
    values = [
        statistics.average_flow_time,
        statistics.median_flow_time,
        statistics.p95_flow_time,
        statistics.max_flow_time,
    ]
    ax1.bar(labels, values, color='steelblue')
    ax1.set_ylabel('Flow Time')
    ax1.set_title('Part Flow Time')
    ax1.grid(axis='y', alpha=0.3)

    summary_text = [
        f"Run length: {statistics.current_time:.1f}",
        f"Arrived: {statistics.total_parts_arrived}",
        f"Rejected: {statistics.total_parts_rejected}",
        f"Completed: {statistics.total_parts_completed}",
        f"WIP: {statistics.current_wip}",
        f"Throughput: {statistics.throughput:.4f}",
    ]
    if 'replication_summary' in results:
        summary_text.append(f"Replications: {results['replication_summary']['replications']}")

    ax2.text(0.1, 0.5, '\n'.join(summary_text), fontsize=12,
             verticalalignment='center', family='monospace')
    ax2.axis('off')
    ax2.set_title('Summary Metrics')

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close()
