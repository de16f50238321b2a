from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .algorithms import ALGORITHMS, run_algorithm, run_all
from .config import DEFAULT_MAX_PROCESSES, DEFAULT_QUANTUM, SimulationConfig
from .errors import SchedulerError
from .gantt import build_rich_gantt
from .metrics import summarize_process_metrics
from .models import ScheduleResult
from .workload_io import load_workload

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sched-compare",
        description="Compare mean turnaround time under FCFS, LCFS (NP), LCFS (P), RR and SJF.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every scheduling decision.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to a workload file (.txt count + arrival,burst lines, .json or .csv).",
    )
    common.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum for round-robin (default: {DEFAULT_QUANTUM}).",
    )
    common.add_argument(
        "--max-processes",
        type=int,
        default=DEFAULT_MAX_PROCESSES,
        help=f"Reject workloads with more processes than this (default: {DEFAULT_MAX_PROCESSES}).",
    )

    run_parser = subparsers.add_parser(
        "run",
        parents=[common],
        help="Run one scheduling algorithm and show its schedule.",
    )
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        choices=list(ALGORITHMS),
        help="Algorithm to use.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        parents=[common],
        help="Run several algorithms on the same workload and compare mean turnaround.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        choices=list(ALGORITHMS),
        default=list(ALGORITHMS),
        help="Algorithms to compare (default: all).",
    )
    compare_parser.add_argument(
        "--format",
        "-f",
        choices=["table", "plain", "json"],
        default="table",
        help="Output format (default: table).",
    )

    return parser


def _configure_logging(verbose: bool, console: Console) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _print_result(result: ScheduleResult, console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()
    console.print(build_rich_gantt(result))
    console.print()

    headers = ["PID", "Arrive", "Burst", "Start", "Complete", "Wait", "Turnaround", "Response"]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        proc_table.add_column(h, justify="center" if h == "PID" else "right")

    for p in result.processes:
        proc_table.add_row(
            p.pid,
            str(p.arrival_time),
            str(p.burst_time),
            str(p.start_time),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.response_time),
        )

    console.print(proc_table)
    console.print()

    summary = summarize_process_metrics(result.processes)
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{summary['avg_waiting']:.2f}")
    sys_table.add_row("Avg turnaround", f"{result.mean_turnaround:.2f}")
    sys_table.add_row("Avg response", f"{summary['avg_response']:.2f}")
    if result.system:
        sys = result.system
        sys_table.add_row("Makespan", str(sys.makespan))
        sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")
        sys_table.add_row("Starvation count", str(sys.starvation_count))

    console.print(sys_table)


def _print_comparison(results: Dict[str, ScheduleResult], fmt: str, console: Console) -> None:
    if fmt == "json":
        print(json.dumps({name: r.mean_turnaround for name, r in results.items()}, indent=2))
        return

    if fmt == "plain":
        for name, r in results.items():
            print(f"{name}: mean turnaround = {r.mean_turnaround:.2f}")
        return

    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg response", justify="right")

    for name, r in results.items():
        summary = summarize_process_metrics(r.processes)
        summary_table.add_row(
            name,
            "" if r.quantum is None else str(r.quantum),
            f"{r.mean_turnaround:.2f}",
            f"{summary['avg_waiting']:.2f}",
            f"{summary['avg_response']:.2f}",
        )

    console.print(summary_table)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    console = Console()
    _configure_logging(args.verbose, console)

    try:
        config = SimulationConfig(quantum=args.quantum, max_processes=args.max_processes)
        processes = load_workload(Path(args.workload), max_processes=config.max_processes)

        if args.command == "run":
            result = run_algorithm(args.algorithm, processes, quantum=config.quantum)
            _print_result(result, console)
            return 0

        if args.command == "compare":
            results = run_all(processes, config, algorithms=args.algorithms)
            _print_comparison(results, args.format, console)
            return 0
    except (SchedulerError, ValueError, OSError) as exc:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
