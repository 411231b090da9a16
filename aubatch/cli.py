"""Command-line entry point: an interactive batch job scheduler."""

from __future__ import annotations

import argparse
import sys
from typing import TextIO

from aubatch.commands import QuitRequested, Shell
from aubatch.engine import Scheduler
from aubatch.jobs import Policy, time_left


def _policy(text: str) -> Policy:
    return Policy.parse(text)


def _finish(scheduler: Scheduler, out: TextIO) -> None:
    """Wait for queued and running jobs, then stop and report."""
    if not scheduler.is_idle():
        running = scheduler.running_job
        scheduled = scheduler.scheduled_jobs()
        remaining = time_left(scheduled) + (running.cpu_time if running else 0.0)
        out.write("\nQuitting when no jobs left to run.\n")
        name = running.name if running is not None else "none"
        out.write(f"Running job is {name}, queue size is {len(scheduled)}\n")
        out.write(f"Approximate time left is {remaining:f} seconds.\n")
        out.flush()
        scheduler.wait_until_idle()
    scheduler.stop()
    out.write(scheduler.statistics_report())


def main(argv=None) -> int:
    """Read scheduler commands from standard input until quit or end of input."""
    parser = argparse.ArgumentParser(
        prog="aubatch", description="Interactive batch job scheduler."
    )
    parser.add_argument(
        "--policy",
        type=_policy,
        default=Policy.PRIORITY,
        help="initial scheduling policy: fcfs, sjf or priority",
    )
    parser.add_argument(
        "--data-dir", default="data", help="directory for performance results"
    )
    args = parser.parse_args(argv)

    out = sys.stdout
    scheduler = Scheduler(policy=args.policy)
    shell = Shell(scheduler, out=out, data_dir=args.data_dir)
    scheduler.start()
    out.write("Welcome to the AUbatch batch job scheduler Version 1.0\n")
    out.write("\nType 'help' to find more about AUbatch commands.\n")
    out.write(">")
    out.flush()
    try:
        for line in sys.stdin:
            if len(line) > 1:
                shell.execute(line)
            running = scheduler.running_job
            if running is not None:
                out.write(f"job running: {running.name}")
            out.write(">")
            out.flush()
    except QuitRequested as request:
        if request.immediate:
            scheduler.stop()
            return 0
    _finish(scheduler, out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())