from __future__ import annotations

from typing import Dict, List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ScheduleResult, ScheduledSlice

COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


def build_rich_gantt(result: ScheduleResult) -> Panel:
    """
    Build a Rich Panel with a colored Gantt chart of ``result.timeline``.

    Idle stretches show as dots. Each boundary time is printed under the bar
    where it starts.
    """
    slices: List[ScheduledSlice] = sorted(result.timeline, key=lambda s: (s.start_time, s.end_time))
    title = f"Gantt Chart: {result.algorithm}"
    if not slices:
        return Panel("No execution", title=title)

    pid_to_color: Dict[str, str] = {}

    def pid_color(pid: str) -> str:
        if pid not in pid_to_color:
            pid_to_color[pid] = COLORS[len(pid_to_color) % len(COLORS)]
        return pid_to_color[pid]

    bar = Text()
    labels = Text()
    marks = Text()
    last_time = 0

    def mark(t: int, width: int) -> None:
        # Truncated when the slice is narrower than the number.
        marks.append(str(t).ljust(width)[:width])

    for sl in slices:
        idle_gap = sl.start_time - last_time
        if idle_gap > 0:
            bar.append("." * idle_gap, style="dim")
            labels.append(" " * idle_gap)
            mark(last_time, idle_gap)

        width = sl.end_time - sl.start_time
        bar.append(" " * width, style=f"on {pid_color(sl.pid)}")
        labels.append(sl.pid[:width].ljust(width), style="bold")
        mark(sl.start_time, width)
        last_time = sl.end_time

    marks.append(str(last_time))

    grid = Table.grid(padding=(0, 0))
    grid.add_row(bar)
    grid.add_row(labels)
    grid.add_row(marks)

    return Panel.fit(grid, title=title)
