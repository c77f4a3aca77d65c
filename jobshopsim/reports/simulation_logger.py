"""Structured part and event records with CSV export."""

from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from ..models.part import Part
from ..utils.logger import setup_logger

PART_CREATED = "PartCreated"
PART_ARRIVAL = "PartArrival"
PART_REJECTED = "PartRejected"
PROCESSING_START = "ProcessingStart"
PROCESSING_COMPLETE = "ProcessingComplete"
PART_TRANSFER = "PartTransfer"
MACHINE_BLOCKED = "MachineBlocked"
PART_COMPLETE = "PartComplete"

ROUTING_COLUMNS = [
    "part_id", "operation_number", "machine_id", "machine_name",
    "start_time", "end_time", "processing_time", "buffer_wait_time",
]


@dataclass
class PartLogEntry:
    part_id: str
    route: str
    priority: int
    arrival_time: float
    due_date: float


@dataclass
class EventLogEntry:
    time: float
    event_type: str
    part_id: str
    machine_id: Optional[int] = None
    machine_name: str = ""
    target_machine_id: Optional[int] = None
    details: str = ""


class SimulationLogger:
    """Collects structured records of what happened during a run.

    The records are independent of simulation correctness; they exist for
    persistence (CSV) and Gantt-style reporting.
    """

    def __init__(self, enabled: bool = True):
        """Initialize simulation logger.

        Args:
            enabled: When False all record calls are ignored
        """
        self.enabled = enabled
        self.logger = setup_logger(self.__class__.__name__)
        self.part_logs: List[PartLogEntry] = []
        self.event_logs: List[EventLogEntry] = []

    def _event(self, time: float, event_type: str, part_id: str, **fields) -> None:
        if self.enabled:
            self.event_logs.append(EventLogEntry(time=time, event_type=event_type, part_id=part_id, **fields))

    def log_part_created(self, part: Part) -> None:
        if not self.enabled:
            return
        self.part_logs.append(PartLogEntry(
            part_id=part.part_id,
            route="->".join(str(m) for m in part.route),
            priority=part.priority,
            arrival_time=part.arrival_time,
            due_date=part.due_date,
        ))

    def log_part_arrival(self, time: float, part: Part, machine_id: int) -> None:
        self._event(time, PART_ARRIVAL, part.part_id, machine_id=machine_id,
                    details=f"Arrived at buffer for machine {machine_id}")

    def log_part_rejected(self, time: float, part: Part, machine_id: int) -> None:
        self._event(time, PART_REJECTED, part.part_id, machine_id=machine_id,
                    details=f"Buffer for machine {machine_id} full, part lost")

    def log_processing_start(self, time: float, machine, part: Part, processing_time: float) -> None:
        self._event(time, PROCESSING_START, part.part_id, machine_id=machine.machine_id,
                    machine_name=machine.name,
                    details=f"Operation {part.current_step + 1}/{part.route_length}, duration {processing_time:.2f}")

    def log_processing_complete(self, time: float, machine, part: Part) -> None:
        self._event(time, PROCESSING_COMPLETE, part.part_id, machine_id=machine.machine_id,
                    machine_name=machine.name,
                    details=f"Operation {part.current_step + 1}/{part.route_length} complete")

    def log_part_transfer(self, time: float, part: Part, from_machine: int, to_machine: int) -> None:
        self._event(time, PART_TRANSFER, part.part_id, machine_id=from_machine, target_machine_id=to_machine,
                    details=f"Transferred from machine {from_machine} to machine {to_machine} buffer")

    def log_machine_blocked(self, time: float, machine, part: Part, target_machine_id: int) -> None:
        self._event(time, MACHINE_BLOCKED, part.part_id, machine_id=machine.machine_id,
                    machine_name=machine.name, target_machine_id=target_machine_id,
                    details=f"Blocked sending to machine {target_machine_id} (buffer full)")

    def log_part_completed(self, time: float, part: Part, flow_time: float) -> None:
        self._event(time, PART_COMPLETE, part.part_id, details=f"All operations complete, flow time {flow_time:.2f}")

    def parts_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(e) for e in self.part_logs],
                            columns=["part_id", "route", "priority", "arrival_time", "due_date"])

    def events_dataframe(self) -> pd.DataFrame:
        columns = ["time", "event_type", "part_id", "machine_id", "machine_name", "target_machine_id", "details"]
        df = pd.DataFrame([asdict(e) for e in self.event_logs], columns=columns)
        # Records are appended in execution order; keep it for equal times
        return df.sort_values("time", kind="stable").reset_index(drop=True)

    def routing_dataframe(self) -> pd.DataFrame:
        """Per-operation routing history of every part.

        Returns:
            One row per finished operation with start/end, processing time
            and the time the part waited in the machine's buffer
        """
        rows = []
        entry_time: Dict[str, float] = {}
        started: Dict[str, EventLogEntry] = {}
        op_count: Dict[str, int] = {}

        for entry in self.event_logs:
            pid = entry.part_id
            if entry.event_type in (PART_ARRIVAL, PART_TRANSFER):
                entry_time[pid] = entry.time
            elif entry.event_type == PROCESSING_START:
                started[pid] = entry
            elif entry.event_type == PROCESSING_COMPLETE and pid in started:
                start = started.pop(pid)
                op_count[pid] = op_count.get(pid, 0) + 1
                rows.append({
                    "part_id": pid,
                    "operation_number": op_count[pid],
                    "machine_id": start.machine_id,
                    "machine_name": start.machine_name,
                    "start_time": start.time,
                    "end_time": entry.time,
                    "processing_time": entry.time - start.time,
                    "buffer_wait_time": start.time - entry_time.get(pid, start.time),
                })

        return pd.DataFrame(rows, columns=ROUTING_COLUMNS)

    def save_csv(self, directory: str = "logs") -> Dict[str, Path]:
        """Write parts, events and routing logs as timestamped CSV files.

        Args:
            directory: Output directory, created if missing

        Returns:
            Mapping of log kind to written path
        """
        out_dir = Path(directory)
        out_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        paths = {
            "parts": out_dir / f"parts_log_{stamp}.csv",
            "events": out_dir / f"events_log_{stamp}.csv",
            "routing": out_dir / f"routing_log_{stamp}.csv",
        }
        self.parts_dataframe().to_csv(paths["parts"], index=False, float_format="%.2f")
        self.events_dataframe().to_csv(paths["events"], index=False, float_format="%.2f")
        self.routing_dataframe().to_csv(paths["routing"], index=False, float_format="%.2f")

        self.logger.info(f"Logs saved to {out_dir.resolve()}")
        return paths

    def clear(self) -> None:
        self.part_logs.clear()
        self.event_logs.clear()
