"""
Scheduling comparison package.

Simulates a fixed batch of processes under FCFS, LCFS (non-preemptive and
preemptive), Round Robin and SJF, and reports the mean turnaround time of
each discipline.
"""

from .algorithms import mean_turnarounds, run_algorithm, run_all
from .models import Process, ProcessTable

__all__ = ["Process", "ProcessTable", "mean_turnarounds", "run_algorithm", "run_all", "cli"]
