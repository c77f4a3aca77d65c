"""Production line configuration."""

import copy
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from ..core.exceptions import ConfigurationError


DEFAULT_PROCESSING = {'type': 'Uniform', 'params': [2.0, 6.0]}

DEFAULT_WORKLOAD = {
    'num_parts': 20,
    'arrival': {'type': 'Exponential', 'params': [0.5]},
    'routing': {'use_standard_route': True},
    'priority_range': [0, 0],
    'due_date_factor': 3.0,
}


@dataclass
class MachineConfig:
    """Configuration of one machine type.

    Attributes:
        name: Display name
        buffer_capacity: Capacity of the machine's input buffer
        dispatching_rule: Rule name resolved through the rule registry
        quantity: Number of identical machines of this type
        processing: Optional processing distribution overriding the line default
        machine_id: Id assigned during expansion
    """
    name: str
    buffer_capacity: int = 10
    dispatching_rule: str = "FIFO"
    quantity: int = 1
    processing: Optional[Dict[str, Any]] = None
    machine_id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MachineConfig':
        if 'name' not in data:
            raise ConfigurationError(f"Machine entry needs a name: {data}")
        return cls(
            name=str(data['name']),
            buffer_capacity=data.get('buffer_capacity', 10),
            dispatching_rule=data.get('dispatching_rule', 'FIFO'),
            quantity=data.get('quantity', 1),
            processing=data.get('processing'),
        )

    def validate(self) -> None:
        cap = self.buffer_capacity
        if isinstance(cap, bool) or not isinstance(cap, int) or cap <= 0:
            raise ConfigurationError(f"{self.name}: buffer capacity must be a positive integer, got {cap!r}")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise ConfigurationError(f"{self.name}: quantity must be at least 1, got {self.quantity!r}")


@dataclass
class LineConfig:
    """Configuration of a complete simulation run.

    Built from the dictionary produced by ``configs.load_config``:

        simulation: {run_length, random_seed, retry_interval, min_duration}
        machines: [{name, buffer_capacity, dispatching_rule, quantity, processing}]
        processing: {type, params}
        workload: {num_parts, arrival, routing, priority_range, due_date_factor}
    """
    machines: List[MachineConfig]
    run_length: float = 1000.0
    random_seed: Optional[int] = 42
    retry_interval: float = 0.5
    min_duration: float = 0.1
    processing: Dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_PROCESSING))
    workload: Dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_WORKLOAD))

    MAX_MACHINES = 100

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'LineConfig':
        """Parse and validate a configuration dictionary.

        Args:
            config: Configuration dictionary

        Returns:
            Validated LineConfig

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        if not isinstance(config, dict):
            raise ConfigurationError("Configuration must be a mapping")

        sim = config.get('simulation') or {}
        machines = [MachineConfig.from_dict(m) for m in (config.get('machines') or [])]

        workload = copy.deepcopy(DEFAULT_WORKLOAD)
        workload.update(config.get('workload') or {})

        line = cls(
            machines=machines,
            run_length=float(sim.get('run_length', 1000.0)),
            random_seed=sim.get('random_seed', 42),
            retry_interval=float(sim.get('retry_interval', 0.5)),
            min_duration=float(sim.get('min_duration', 0.1)),
            processing=config.get('processing') or copy.deepcopy(DEFAULT_PROCESSING),
            workload=workload,
        )
        line.validate()
        return line

    def validate(self) -> None:
        """Check the configuration.

        Raises:
            ConfigurationError: On the first invalid setting found
        """
        if not self.machines:
            raise ConfigurationError("At least one machine is required")
        for machine in self.machines:
            machine.validate()

        total = sum(m.quantity for m in self.machines)
        if total > self.MAX_MACHINES:
            raise ConfigurationError(f"Number of machines must be between 1 and {self.MAX_MACHINES}, got {total}")

        if self.run_length <= 0:
            raise ConfigurationError(f"Run length must be positive, got {self.run_length}")
        if self.retry_interval <= 0:
            raise ConfigurationError(f"Retry interval must be positive, got {self.retry_interval}")
        if self.min_duration <= 0:
            raise ConfigurationError(f"Minimum duration must be positive, got {self.min_duration}")

        routing = self.workload.get('routing', {})
        route = routing.get('standard_route')
        if routing.get('use_standard_route', True):
            if route is not None and len(route) == 0:
                raise ConfigurationError("Standard route cannot be empty")
            unknown = [m for m in (route or []) if m not in range(1, total + 1)]
            if unknown:
                raise ConfigurationError(f"Standard route references unknown machines {unknown}")

    def expanded_machines(self) -> List[MachineConfig]:
        """Expand machine types into individual machines.

        A type with ``quantity > 1`` becomes numbered machines ("Lathe 1",
        "Lathe 2"). Ids are assigned consecutively from 1.

        Returns:
            One MachineConfig per physical machine, with ``machine_id`` set
        """
        expanded = []
        next_id = 1
        for machine in self.machines:
            for i in range(machine.quantity):
                name = f"{machine.name} {i + 1}" if machine.quantity > 1 else machine.name
                expanded.append(replace(machine, name=name, quantity=1, machine_id=next_id))
                next_id += 1
        return expanded
