"""Job queues, the scheduling and dispatching threads, and completion statistics."""

from __future__ import annotations

import collections
import logging
import math
import subprocess
import sys
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable, MutableSequence

from aubatch.jobs import Job, Policy, insert_sorted, resort

MAX_JOBS = 500

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Statistics:
    """Summary figures of a set of completed jobs."""

    jobs: tuple[Job, ...]
    count: int
    average_turnaround: float
    average_cpu: float
    average_waiting: float
    throughput: float

    @classmethod
    def from_jobs(cls, jobs: Iterable[Job]) -> "Statistics":
        """Compute the statistics of ``jobs``, taken in the given order."""
        done = tuple(jobs)
        count = len(done)
        if not count:
            return cls(done, 0, 0.0, 0.0, 0.0, 0.0)
        turnaround = sum(job.finish_time - job.arrival_time for job in done) / count
        cpu = sum(job.cpu_time for job in done) / count
        waiting = sum(job.starting_time - job.arrival_time for job in done) / count
        throughput = 1 / turnaround if turnaround else math.inf
        return cls(done, count, turnaround, cpu, waiting, throughput)

    def report(self) -> str:
        """Per-job lines followed by the totals, as printed to the user."""
        if not self.count:
            return "\nNo jobs have been completed\n"
        lines = ["Individual Job Performance Report\n"]
        for job in self.jobs:
            wait = job.starting_time - job.arrival_time
            lines.append(
                f"name: {job.name} priority: {job.priority} "
                f"cpu time: {job.cpu_time:f} arrival: {job.arrival_time:f} "
                f"start: {job.starting_time:f} finish {job.finish_time:f} "
                f"wait:{wait:f}\n"
            )
        lines.append("\nTotal Performance Report\n")
        lines.append(f"Total number of job submitted: \t{self.count}\n")
        lines.append(f"Average turnaround time: \t{self.average_turnaround:f} seconds\n")
        lines.append(f"Average CPU time: \t\t{self.average_cpu:f} seconds\n")
        lines.append(f"Average waiting time: \t\t{self.average_waiting:f} seconds\n")
        lines.append(f"Throughput: \t\t\t{self.throughput:f} jobs/second\n\n")
        return "".join(lines)


def pick_next(queue: MutableSequence[Job], now: float) -> Job:
    """Remove and return the first job that has arrived by ``now``.

    When no job has arrived yet, the head of the queue is taken.
    """
    if not queue:
        raise IndexError("no scheduled jobs")
    index = next(
        (i for i, job in enumerate(queue) if not job.arrival_time > now), 0
    )
    return queue.pop(index)


def run_worker(cpu_time: float) -> int:
    """Run the work program for ``cpu_time`` seconds; return its exit status."""
    command = [sys.executable, "-m", "aubatch.worker", f"{cpu_time:f}"]
    return subprocess.run(command, check=False).returncode


class Scheduler:
    """Moves jobs from the submitted queue through the scheduled queue to completion.

    One thread orders submitted jobs into the scheduled queue by the current
    policy; another takes jobs from it, runs them and records them as completed.
    """

    def __init__(
        self,
        policy: Policy = Policy.PRIORITY,
        capacity: int = MAX_JOBS,
        runner: Callable[[float], object] = run_worker,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be a positive integer")
        if clock is None:
            origin = time.monotonic()

            def clock() -> float:
                return time.monotonic() - origin

        self.capacity = capacity
        self._policy = policy
        self._runner = runner
        self._clock = clock
        self._cond = threading.Condition()
        self._submitted: collections.deque[Job] = collections.deque()
        self._scheduled: list[Job] = []
        self._completed: list[Job] = []
        self._running: Job | None = None
        self._stopping = False
        self._wake = threading.Event()
        self._scheduling_thread: threading.Thread | None = None
        self._dispatch_thread: threading.Thread | None = None

    def __enter__(self) -> "Scheduler":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    @property
    def policy(self) -> Policy:
        """The current policy; setting it does not reorder queued jobs."""
        with self._cond:
            return self._policy

    @policy.setter
    def policy(self, policy: Policy) -> None:
        with self._cond:
            self._policy = policy

    @property
    def running_job(self) -> Job | None:
        """The job being run or waited for, if any."""
        with self._cond:
            return self._running

    def now(self) -> float:
        """Seconds since the scheduler's clock started."""
        return self._clock()

    def start(self) -> None:
        """Start the scheduling and dispatching threads."""
        with self._cond:
            if self._stopping or self._scheduling_thread is not None:
                raise RuntimeError("scheduler already started")
            self._scheduling_thread = threading.Thread(
                target=self._schedule_loop, name="aubatch-scheduler", daemon=True
            )
            self._dispatch_thread = threading.Thread(
                target=self._dispatch_loop, name="aubatch-dispatcher", daemon=True
            )
        self._scheduling_thread.start()
        self._dispatch_thread.start()

    def stop(self) -> None:
        """Stop both threads; a job already running is left to finish."""
        with self._cond:
            self._stopping = True
            busy = self._running is not None
            self._cond.notify_all()
        self._wake.set()
        if self._scheduling_thread is not None:
            self._scheduling_thread.join()
        if self._dispatch_thread is not None and not busy:
            self._dispatch_thread.join()

    def submit(self, job: Job) -> None:
        """Append ``job`` to the submitted queue, waiting while it is full."""
        with self._cond:
            while len(self._submitted) >= self.capacity and not self._stopping:
                self._cond.wait()
            if self._stopping:
                raise RuntimeError("scheduler is stopped")
            self._submitted.append(job)
            self._cond.notify_all()

    def change_policy(self, policy: Policy) -> bool:
        """Switch to ``policy`` and reorder the scheduled queue.

        Returns False when ``policy`` is already current.
        """
        with self._cond:
            if policy is self._policy:
                return False
            self._policy = policy
            self._scheduled[:] = resort(self._scheduled, policy)
            self._cond.notify_all()
            return True

    def reset_completed(self) -> None:
        """Forget all completed jobs."""
        with self._cond:
            self._completed.clear()
            self._cond.notify_all()

    def submitted_jobs(self) -> list[Job]:
        """Jobs waiting to be scheduled, oldest first."""
        with self._cond:
            return list(self._submitted)

    def scheduled_jobs(self) -> list[Job]:
        """Scheduled jobs in the order the policy will run them."""
        with self._cond:
            return list(self._scheduled)

    def completed_jobs(self) -> list[Job]:
        """Completed jobs in the order they finished."""
        with self._cond:
            return list(self._completed)

    def pending_count(self) -> int:
        """Number of jobs submitted or scheduled but not yet started."""
        with self._cond:
            return len(self._submitted) + len(self._scheduled)

    def is_idle(self) -> bool:
        """True when no job is queued or running."""
        with self._cond:
            return self._idle()

    def wait_until_idle(self, poll: float = 1.0) -> None:
        """Block until no job is queued or running."""
        with self._cond:
            while not self._idle():
                self._cond.wait(poll)

    def statistics_report(self) -> str:
        """Report on the completed queue."""
        return Statistics.from_jobs(self.completed_jobs()).report()

    def _idle(self) -> bool:
        return not self._submitted and not self._scheduled and self._running is None

    def _schedule_loop(self) -> None:
        with self._cond:
            while True:
                while not self._stopping and (
                    not self._submitted or len(self._scheduled) > self.capacity
                ):
                    self._cond.wait()
                if self._stopping:
                    return
                job = self._submitted.popleft()
                insert_sorted(self._scheduled, job, self._policy)
                self._cond.notify_all()

    def _dispatch_loop(self) -> None:
        while True:
            with self._cond:
                while not self._stopping and not self._scheduled:
                    self._cond.wait()
                if self._stopping:
                    return
                job = pick_next(self._scheduled, self.now())
                self._running = job
                self._cond.notify_all()

            delay = job.arrival_time - self.now()
            if delay > 0:
                _log.info(
                    "Waiting to run job id: %d waiting for %f seconds "
                    "until job arrival time - cpu idle",
                    job.id,
                    delay,
                )
                if self._wake.wait(delay):
                    return

            job.starting_time = self.now()
            try:
                self._runner(job.cpu_time)
            except OSError as error:
                _log.error("failed to run job %d: %s", job.id, error)
            else:
                job.finish_time = self.now()

            with self._cond:
                self._running = None
                while len(self._completed) >= self.capacity and not self._stopping:
                    self._cond.wait()
                self._completed.append(job)
                self._cond.notify_all()
                if self._stopping:
                    return