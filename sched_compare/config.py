from __future__ import annotations

from dataclasses import dataclass

DEFAULT_QUANTUM = 2
DEFAULT_MAX_PROCESSES = 100


def check_positive_int(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return value


@dataclass(frozen=True)
class SimulationConfig:
    """
    Tunables shared by a comparison run.

    ``quantum`` only affects Round Robin; ``max_processes`` bounds the size of
    a process table.
    """

    quantum: int = DEFAULT_QUANTUM
    max_processes: int = DEFAULT_MAX_PROCESSES

    def __post_init__(self) -> None:
        check_positive_int("quantum", self.quantum)
        check_positive_int("max_processes", self.max_processes)
