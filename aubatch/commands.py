"""Interactive command set of the batch scheduler."""

from __future__ import annotations

import re
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence, TextIO

from aubatch.engine import MAX_JOBS, Scheduler
from aubatch.jobs import Job, Policy, time_left, waiting_time
from aubatch.performance import JOBS_PER_TEST, run_performance

HELP_MENU = (
    "run <job> <time> <pri>: submit a job named <job>,",
    "\t\t\texecution time is <time>,",
    "\t\t\tpriority is <pri>.",
    "list: display the job status.",
    "fcfs: change the scheduling policy to FCFS.",
    "sjf: change the scheduling policy to SJF.",
    "priority: change the scheduling policy to priority.",
    "test <benchmark> <policy> <num_of_jobs> <priority_levels>\n"
    "     <min_CPU_time> <max_CPU_time> <arrival rate>",
    "batch <benchmark> <policy> <num_of_jobs> <priority_levels>\n"
    "     <min_CPU_time> <max_CPU_time> <arrival rate>",
    "quit: exit AUbatch",
    "reset: clear the completed queue",
    "statistics: show statistics on the completed queue",
    "performance: run the automated performance test suite and output to file",
)

MAX_BENCHMARK_NAME = 20

_INT = re.compile(r"\s*[+-]?\d+")
_FLOAT = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class QuitRequested(Exception):
    """Raised by the quit command.

    ``immediate`` is True when the program should stop at once, and False
    when it should stop reading commands and wait for queued jobs to finish.
    """

    def __init__(self, immediate: bool) -> None:
        super().__init__("quit requested")
        self.immediate = immediate


class CommandError(Exception):
    """A command was given arguments it cannot accept."""


def _leading_int(text: str) -> int:
    match = _INT.match(text)
    return int(match.group()) if match else 0


def _leading_float(text: str) -> float:
    match = _FLOAT.match(text)
    return float(match.group()) if match else 0.0


def parse_words(line: str) -> list[str]:
    """Split a command line into words on whitespace."""
    return line.split()


@dataclass(frozen=True)
class BatchSpec:
    """Arguments of the ``test`` and ``batch`` commands."""

    benchmark: str
    policy: Policy
    num_of_jobs: int
    priority_levels: int
    min_cpu_time: float
    max_cpu_time: float
    arrival_rate: float = 0.0

    @classmethod
    def parse(cls, args: Sequence[str], command: str) -> "BatchSpec":
        """Parse the command words, ``args[0]`` being the command itself."""
        usage = [
            "Incorrect command. Format is:",
            f"{command} <benchmark> <policy> <num_of_jobs> <priority_levels> "
            "<min_CPU_time> <max_CPU_time> <arrival_rate>",
        ]
        if len(args) not in (7, 8):
            raise CommandError("\n".join(usage))
        errors: list[str] = []
        benchmark = args[1]
        if len(benchmark) > MAX_BENCHMARK_NAME:
            errors.append(
                f"<benchmark> must be less than {MAX_BENCHMARK_NAME} characters."
            )
        num_of_jobs = _leading_int(args[3])
        if not 1 <= num_of_jobs <= MAX_JOBS:
            errors.append(
                f"Number of jobs must be a positive integer less than {MAX_JOBS}."
            )
        priority_levels = _leading_int(args[4])
        if priority_levels < 0:
            errors.append("Priority levels must be a non-negative integer.")
        min_cpu = _leading_float(args[5])
        max_cpu = _leading_float(args[6])
        if min_cpu <= 0 or max_cpu <= 0 or min_cpu > max_cpu:
            errors.append(
                "CPU time must be greater than 0, and max CPU time must not be "
                "less than min CPU time."
            )
        arrival_rate = _leading_float(args[7]) if len(args) == 8 else 0.0
        if arrival_rate < 0:
            raise CommandError(
                "\n".join(errors + ["arrival rate must be a non-negative number"])
            )
        policy: Policy | None
        try:
            policy = Policy.parse(args[2])
        except ValueError as error:
            errors.append(str(error))
            policy = None
        if errors or policy is None:
            raise CommandError("\n".join(errors + usage))
        return cls(
            benchmark=benchmark,
            policy=policy,
            num_of_jobs=num_of_jobs,
            priority_levels=priority_levels,
            min_cpu_time=min_cpu,
            max_cpu_time=max_cpu,
            arrival_rate=arrival_rate,
        )


class Shell:
    """Runs user commands against a scheduler and writes their output."""

    def __init__(
        self,
        scheduler: Scheduler,
        out: TextIO | None = None,
        sleep: Callable[[float], object] = time.sleep,
        data_dir: str | Path = "data",
    ) -> None:
        self._scheduler = scheduler
        self._out = sys.stdout if out is None else out
        self._sleep = sleep
        self._data_dir = Path(data_dir)
        self._last_id = 0
        self._commands: dict[str, Callable[[Sequence[str]], None]] = {
            "": self.help,
            "?": self.help,
            "h": self.help,
            "help": self.help,
            "j": self.queue_size,
            "jobs": self.queue_size,
            "l": self.list_jobs,
            "list": self.list_jobs,
            "fcfs": self.change_policy,
            "sjf": self.change_policy,
            "priority": self.change_policy,
            "r": self.run_job,
            "run": self.run_job,
            "q": self.quit,
            "quit": self.quit,
            "test": self.test_benchmark,
            "reset": self.reset_queue,
            "batch": self.large_batch,
            "b": self.large_batch,
            "statistics": self.statistics,
            "s": self.statistics,
            "performance": self.performance,
            "p": self.performance,
        }

    def _write(self, text: str) -> None:
        self._out.write(text)

    def execute(self, line: str) -> bool:
        """Run one command line; return False when the command is unknown.

        Argument errors are written to the output. QuitRequested propagates.
        """
        words = parse_words(line) or [""]
        handler = self._commands.get(words[0])
        if handler is None:
            return False
        try:
            handler(words)
        except CommandError as error:
            self._write(f"{error}\n")
        return True

    def help(self, args: Sequence[str]) -> None:
        """Show the help menu."""
        for entry in HELP_MENU:
            self._write(f"{entry}\n")
        self._write("\n")

    def queue_size(self, args: Sequence[str]) -> None:
        """Show the number of jobs in each queue."""
        running = self._scheduler.running_job
        if running is not None:
            self._write(f"Current running job name: {running.name}\n")
        self._write(f"Submitted queue size: {len(self._scheduler.submitted_jobs())}\n")
        self._write(f"Scheduled queue size: {len(self._scheduler.scheduled_jobs())}\n")
        self._write(f"Completed queue size: {len(self._scheduler.completed_jobs())}\n")
        self._write("\n")

    def list_jobs(self, args: Sequence[str]) -> None:
        """List the running and queued jobs."""
        scheduler = self._scheduler
        self._write(
            f"Total number of jobs in the queue: {scheduler.pending_count()}\n"
        )
        self._write(f"Scheduling Policy: {scheduler.policy.describe()}\n")
        self._write("Name\tCPU_Time\tPri\tArrival_time\tProgress\n")
        running = scheduler.running_job
        if running is not None:
            self._write(self._job_line(running, "Running"))
        for job in scheduler.submitted_jobs():
            self._write(self._job_line(job, "Submit Queue"))
        for job in scheduler.scheduled_jobs():
            self._write(self._job_line(job, "Scheduled Queue"))
        self._write("\n")

    @staticmethod
    def _job_line(job: Job, progress: str) -> str:
        return (
            f"{job.name}\t{job.cpu_time:f}\t{job.priority}\t"
            f"{job.arrival_time:f}\t{progress}\n"
        )

    def change_policy(self, args: Sequence[str]) -> None:
        """Switch to the policy named by the command and reorder the queue."""
        try:
            wanted = Policy.parse(args[0])
        except ValueError as error:
            raise CommandError(str(error)) from error
        current = self._scheduler.policy
        self._write(f"{current.value} is current policy\n")
        if wanted is current:
            self._write("Scheduling policy not changed\n")
            return
        self._write(f"Changing Policy to {wanted.value}\n")
        self._write(f"resorting jobs with new policy {wanted.value}\n")
        self._scheduler.change_policy(wanted)

    def run_job(self, args: Sequence[str]) -> None:
        """Submit one job: run <job> <time> [<pri>]."""
        if not 3 <= len(args) <= 4:
            raise CommandError("incorrect input. Usage: run <job> <time> <pri>")
        priority = _leading_int(args[3]) if len(args) == 4 else 0
        if priority < 0:
            raise CommandError("<priority> must be a non-negative number")
        cpu_time = _leading_float(args[2])
        if cpu_time < 0:
            raise CommandError("<time> must be a positive number")
        scheduler = self._scheduler
        job = self._new_job(args[1], priority, cpu_time)
        scheduler.submit(job)
        self._write(f"Job {job.name} was submitted.\n")
        self._write(
            f"Total number of jobs in the queue: {scheduler.pending_count()}\n"
        )
        policy = scheduler.policy
        wait = waiting_time(scheduler.submitted_jobs(), job, policy) + waiting_time(
            scheduler.scheduled_jobs(), job, policy
        )
        running = scheduler.running_job
        if running is not None:
            wait += running.cpu_time
        self._write(f"Expected waiting time: {wait:f} seconds.\n")
        self._write(f"Scheduling Policy: {policy.value}.\n")

    def _new_job(self, name: str, priority: int, cpu_time: float) -> Job:
        self._last_id += 1
        return Job(
            id=self._last_id,
            name=name,
            priority=priority,
            cpu_time=cpu_time,
            arrival_time=self._scheduler.now(),
        )

    def quit(self, args: Sequence[str]) -> None:
        """Quit now when idle or forced, otherwise once the queues drain."""
        scheduler = self._scheduler
        running = scheduler.running_job
        jobs_qty = scheduler.pending_count() + (running is not None)
        forced = len(args) == 2 and args[1] in ("force", "f")
        if jobs_qty == 0 or forced:
            if jobs_qty == 0:
                self._write("No jobs in queue, no jobs running, quitting gracefully.\n")
            else:
                self._write("Quitting and terminating queued and running jobs\n")
                self.queue_size(args)
                if running is not None:
                    self._write(
                        "currently running job \n"
                        f"name: {running.name} priority: {running.priority} "
                        f"cpu_time: {running.cpu_time:f} "
                        f"starting_time: {running.starting_time:f}\n"
                    )
            self._write(scheduler.statistics_report())
            raise QuitRequested(immediate=True)
        self._write(
            "There are still jobs running. AUbatch will quit when jobs are done "
            "running.\n"
        )
        self._write(
            'Next time can type "quit force" or "q f" to force quit with jobs '
            "still running.\n"
        )
        raise QuitRequested(immediate=False)

    def _submit_batch(
        self, spec: BatchSpec, cpu_time: Callable[[int], float], pause: bool
    ) -> None:
        for index in range(spec.num_of_jobs):
            priority = index % spec.priority_levels if spec.priority_levels else 0
            job = self._new_job(spec.benchmark, priority, cpu_time(index))
            self._write(job.format_row() + " \n")
            self._scheduler.submit(job)
            if pause:
                self._sleep(spec.arrival_rate)

    def _write_time_left(self) -> None:
        remaining = time_left(self._scheduler.scheduled_jobs()) + time_left(
            self._scheduler.submitted_jobs()
        )
        self._write(f"Approximate time left is {remaining:f}\n")

    def test_benchmark(self, args: Sequence[str]) -> None:
        """Run a benchmark on a fresh completed queue and report on it."""
        spec = BatchSpec.parse(args, "test")
        self._write("Starting benchmark, deleting current completed queue\n")
        self._scheduler.reset_completed()
        self._last_id = 0
        self._scheduler.policy = spec.policy
        increment = (spec.max_cpu_time - spec.min_cpu_time) / spec.num_of_jobs
        self._submit_batch(
            spec,
            lambda index: spec.min_cpu_time + increment * (index % spec.num_of_jobs),
            pause=True,
        )
        self._write("done submitting jobs\n\n")
        self._write_time_left()
        self._scheduler.wait_until_idle()
        self._write(self._scheduler.statistics_report())

    def large_batch(self, args: Sequence[str]) -> None:
        """Submit a batch of jobs at once, keeping the completed queue."""
        spec = BatchSpec.parse(args, "batch")
        self._write("creating batch of jobs, not clearing completed queue\n")
        self._scheduler.policy = spec.policy
        increment = (spec.max_cpu_time - spec.min_cpu_time) / spec.num_of_jobs
        self._submit_batch(
            spec,
            lambda index: spec.min_cpu_time + increment * (index % 11),
            pause=False,
        )
        self._write_time_left()

    def reset_queue(self, args: Sequence[str]) -> None:
        """Clear the completed queue when nothing is queued or running."""
        scheduler = self._scheduler
        if scheduler.pending_count() or scheduler.running_job is not None:
            raise CommandError(
                "deleting completed queue not allowed while there are submitted "
                "or scheduled jobs."
            )
        self._write("deleting the completed queue\n")
        scheduler.reset_completed()

    def statistics(self, args: Sequence[str]) -> None:
        """Show statistics on the completed queue."""
        self._write(self._scheduler.statistics_report())

    def performance(self, args: Sequence[str]) -> None:
        """Run the automated performance suite and write its CSV file."""
        results = run_performance(
            self._scheduler,
            self._out,
            self._data_dir / "performance_data.csv",
            sleep=self._sleep,
        )
        if results:
            self._last_id = JOBS_PER_TEST