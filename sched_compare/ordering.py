from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, TypeVar, Union

T = TypeVar("T")


class SortKey(Enum):
    ARRIVAL = "arrival"
    BURST = "burst"


_KEY_FUNCS: Dict[SortKey, Callable[[Any], int]] = {
    SortKey.ARRIVAL: lambda p: p.arrival_time,
    SortKey.BURST: lambda p: p.burst_time,
}


def sort_processes(
    processes: Iterable[T],
    key: Union[SortKey, Callable[[T], Any]] = SortKey.ARRIVAL,
) -> List[T]:
    """
    Return a new list of ``processes`` in ascending ``key`` order.

    The sort is stable, so processes with equal keys keep their input order.
    ``key`` is either a :class:`SortKey` or any one-argument callable.
    """
    key_func = _KEY_FUNCS[key] if isinstance(key, SortKey) else key
    return sorted(processes, key=key_func)
