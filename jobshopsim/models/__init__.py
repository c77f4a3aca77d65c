"""Line entities: parts, machines, buffers and line configuration."""

from .part import Part, PartState
from .machine import Machine, MachineState
from .buffer import Buffer
from .line_config import LineConfig, MachineConfig

__all__ = ["Part", "PartState", "Machine", "MachineState", "Buffer", "LineConfig", "MachineConfig"]
