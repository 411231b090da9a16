"""Automated performance evaluation of the scheduling policies."""

from __future__ import annotations

import math
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, Sequence, TextIO

from aubatch.engine import Scheduler
from aubatch.jobs import Job, Policy, time_left

CSV_HEADER = (
    "testij,policy,arrival_rate,throughput,response_time_mean,"
    "max_response_time,min_response_time,response_deviation\n"
)
DEFAULT_PATH = Path("data") / "performance_data.csv"
DEFAULT_ARRIVAL_RATES = (0.1, 0.5, 1.0)
JOBS_PER_TEST = 25
PRIORITY_LEVELS = 3
MIN_CPU_TIME = 1.0
MAX_CPU_TIME = 3.0


@dataclass(frozen=True)
class PerformanceResult:
    """Response-time figures of one test run."""

    name: str
    policy: Policy
    arrival_rate: float
    throughput: float
    response_time_mean: float
    max_response_time: float
    min_response_time: float
    response_deviation: float

    @classmethod
    def from_jobs(
        cls, name: str, policy: Policy, arrival_rate: float, jobs: Iterable[Job]
    ) -> "PerformanceResult":
        """Compute the figures for a set of completed jobs."""
        done = list(jobs)
        if not done:
            raise ValueError("no completed jobs to evaluate")
        responses = [job.finish_time - job.arrival_time for job in done]
        count = len(responses)
        mean = sum(responses) / count
        deviation = math.sqrt(sum((r - mean) ** 2 for r in responses) / count)
        span = max(job.finish_time for job in done) - min(
            job.arrival_time for job in done
        )
        throughput = count / span if span else math.inf
        return cls(
            name=name,
            policy=policy,
            arrival_rate=arrival_rate,
            throughput=throughput,
            response_time_mean=mean,
            max_response_time=max(responses),
            min_response_time=min(responses),
            response_deviation=deviation,
        )

    def csv_row(self) -> str:
        """One line of the results file, newline included."""
        return (
            f"{self.name},{self.policy.value},{self.arrival_rate:f},"
            f"{self.throughput:f},{self.response_time_mean:f},"
            f"{self.max_response_time:f},{self.min_response_time:f},"
            f"{self.response_deviation:f}\n"
        )

    def summary(self) -> str:
        """Human-readable line describing the result."""
        return (
            f"{self.name} {self.policy.value} arrival rate: {self.arrival_rate:f} "
            f"throughput: {self.throughput:f} jobs/sec "
            f"mean response: {self.response_time_mean:f} sec "
            f"max: {self.max_response_time:f} sec "
            f"min response: {self.min_response_time:f} sec "
            f"std deviation: {self.response_deviation:f} sec\n"
        )


def performance_jobs(
    name: str,
    count: int = JOBS_PER_TEST,
    priority_levels: int = PRIORITY_LEVELS,
    min_cpu: float = MIN_CPU_TIME,
    max_cpu: float = MAX_CPU_TIME,
    start_id: int = 1,
    clock: Callable[[], float] = time.monotonic,
) -> Iterator[Job]:
    """Yield test jobs with CPU times falling from ``max_cpu`` to ``min_cpu``.

    Each job's arrival time is read from ``clock`` when it is yielded.
    """
    if count < 1:
        raise ValueError("count must be a positive integer")
    if priority_levels < 1:
        raise ValueError("priority_levels must be a positive integer")
    increment = (max_cpu - min_cpu) / (count - 1) if count > 1 else 0.0
    for offset in range(count):
        yield Job(
            id=start_id + offset,
            name=name,
            priority=offset % priority_levels,
            cpu_time=max_cpu - increment * offset,
            arrival_time=clock(),
        )


def run_performance(
    scheduler: Scheduler,
    out: TextIO | None = None,
    path: str | Path = DEFAULT_PATH,
    arrival_rates: Sequence[float] = DEFAULT_ARRIVAL_RATES,
    sleep: Callable[[float], object] = time.sleep,
) -> list[PerformanceResult]:
    """Run every policy at every arrival rate and write the results as CSV."""
    out = sys.stdout if out is None else out
    path = Path(path)
    policies = list(Policy)
    out.write(
        f"Starting performance test - {len(arrival_rates) * len(policies)} "
        "sets of data generated.\n"
    )
    out.write(f"A file of the results is available in {path}\n")
    path.parent.mkdir(parents=True, exist_ok=True)

    results: list[PerformanceResult] = []
    with path.open("w", encoding="utf-8") as csv_file:
        csv_file.write(CSV_HEADER)
        for rate_index, rate in enumerate(arrival_rates):
            for policy_index, policy in enumerate(policies):
                name = f"test{rate_index}{policy_index}"
                scheduler.reset_completed()
                scheduler.policy = policy
                out.write(f"{policy.value} & arrival rate: {rate:f} \n")
                out.write("ID\tname\tpri\tcpu\t\tarrival\n")
                for job in performance_jobs(name, clock=scheduler.now):
                    out.write(job.format_row() + " \n")
                    scheduler.submit(job)
                    sleep(rate)
                out.write("done submitting jobs\n\n")
                remaining = time_left(scheduler.scheduled_jobs()) + time_left(
                    scheduler.submitted_jobs()
                )
                out.write(f"Approximate time left is {remaining:f}\n")
                scheduler.wait_until_idle()
                out.write("jobs are done running, starting calculations\n")
                completed = scheduler.completed_jobs()
                for job in completed:
                    out.write(job.format_row() + " \n")
                result = PerformanceResult.from_jobs(name, policy, rate, completed)
                csv_file.write(result.csv_row())
                out.write(result.summary())
                out.write("\n\n")
                results.append(result)
    out.write("performance test is complete\n")
    return results