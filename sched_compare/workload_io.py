from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Iterable, List, Mapping

from .config import DEFAULT_MAX_PROCESSES
from .errors import InvalidProcessSpec
from .models import Process, ProcessTable

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {"", ".txt", ".dat"}


def load_workload(path: str | Path, max_processes: int = DEFAULT_MAX_PROCESSES) -> ProcessTable:
    """
    Load a workload file into a validated ProcessTable.

    Supported formats: the plain text format (a process count followed by
    ``arrival,burst`` lines), JSON and CSV.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        processes = _load_json(path)
    elif suffix == ".csv":
        processes = _load_csv(path)
    elif suffix in TEXT_SUFFIXES:
        processes = _load_text(path)
    else:
        raise ValueError(f"Unsupported workload format: {suffix} (use .txt, .json or .csv)")

    table = ProcessTable.from_processes(processes, max_processes=max_processes)
    logger.info("Loaded %d processes from %s", len(table), path)
    return table


def _load_text(path: Path) -> List[Process]:
    # Keep file line numbers for error messages; blank lines are skipped.
    lines = [
        (lineno, line.strip())
        for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1)
        if line.strip()
    ]
    if not lines:
        raise ValueError(f"{path} is empty; expected a process count on the first line")

    count_lineno, count_text = lines[0]
    try:
        count = int(count_text)
    except ValueError as exc:
        raise ValueError(f"Invalid process count on line {count_lineno}: {count_text!r}") from exc
    if count < 0:
        raise ValueError(f"Invalid process count: {count}")

    entries = lines[1:]
    if len(entries) < count:
        raise ValueError(f"{path} declares {count} processes but lists {len(entries)}")
    if len(entries) > count:
        logger.warning("%s lists %d processes, reading the first %d", path, len(entries), count)

    processes: List[Process] = []
    for i, (lineno, entry) in enumerate(entries[:count], start=1):
        fields = [f.strip() for f in entry.split(",")]
        if len(fields) != 2:
            raise ValueError(f"Invalid process entry on line {lineno}: {entry!r}")
        processes.append(_process_from_mapping({"arrival_time": fields[0], "burst_time": fields[1]}, i))
    return processes


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of process objects")

    return _processes_from_mappings(raw)


def _load_csv(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        return _processes_from_mappings(reader)


def _processes_from_mappings(rows: Iterable[Mapping]) -> List[Process]:
    return [_process_from_mapping(row, i) for i, row in enumerate(rows, start=1)]


def _parse_time(value, pid: str, name: str) -> int:
    """
    Accept ints and integer strings. JSON floats and booleans are rejected
    rather than truncated.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidProcessSpec(pid, f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise InvalidProcessSpec(pid, f"{name} must be an integer, got {value!r}") from exc
    raise ValueError(f"Invalid {name} for {pid}: {value!r}")


def _process_from_mapping(mapping: Mapping, position: int) -> Process:
    if not isinstance(mapping, Mapping):
        raise ValueError(f"Invalid process entry: {mapping!r}")

    pid = mapping.get("pid")
    pid = str(pid) if pid not in (None, "") else f"P{position}"

    try:
        raw_arrival = mapping["arrival_time"]
        raw_burst = mapping["burst_time"]
    except KeyError as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc

    return Process(
        pid=pid,
        arrival_time=_parse_time(raw_arrival, pid, "arrival_time"),
        burst_time=_parse_time(raw_burst, pid, "burst_time"),
    )
