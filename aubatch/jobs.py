"""Jobs, scheduling policies and the ordering rules of job queues."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, MutableSequence


class Policy(enum.Enum):
    """Scheduling policy; the value is its display label."""

    FCFS = "FCFS"
    SJF = "SJF"
    PRIORITY = "Priority"

    @classmethod
    def parse(cls, text: str) -> "Policy":
        """Return the policy named by ``text``, ignoring case."""
        wanted = text.lower()
        for policy in cls:
            if policy.value.lower() == wanted:
                return policy
        raise ValueError("Policy must be one of: fcfs, sjf, priority.")

    def describe(self) -> str:
        """Long description used in job listings."""
        return _DESCRIPTIONS[self]

    def _key(self, job: "Job") -> float:
        if self is Policy.FCFS:
            return job.arrival_time
        if self is Policy.SJF:
            return job.cpu_time
        return job.priority


_DESCRIPTIONS = {
    Policy.FCFS: "FCFS-First Come First Served",
    Policy.SJF: "SJF-Shortest Job First",
    Policy.PRIORITY: "Priority-Lowest Priority Jobs First",
}


@dataclass(eq=False)
class Job:
    """A batch job; lower priority numbers run first. Times are in seconds."""

    id: int
    name: str
    priority: int
    cpu_time: float
    arrival_time: float
    starting_time: float = 0.0
    finish_time: float = 0.0

    def format_row(self) -> str:
        """Tab separated id, name, priority, CPU time and arrival time."""
        return (
            f"{self.id}\t{self.name}\t{self.priority}\t"
            f"{self.cpu_time:f}\t{self.arrival_time:f}"
        )


def insert_sorted(queue: MutableSequence[Job], job: Job, policy: Policy) -> None:
    """Insert ``job`` into ``queue`` at the place the policy gives it.

    The head is replaced only by a job whose key is strictly smaller; after
    the head, the job goes before the first job whose key is not smaller.
    """
    key = policy._key(job)
    if not queue or policy._key(queue[0]) > key:
        queue.insert(0, job)
        return
    position = next(
        (
            index
            for index, other in enumerate(queue[1:], start=1)
            if not policy._key(other) < key
        ),
        len(queue),
    )
    queue.insert(position, job)


def resort(queue: Iterable[Job], policy: Policy) -> list[Job]:
    """Return a new list of the jobs ordered by ``policy``."""
    ordered: list[Job] = []
    for job in queue:
        insert_sorted(ordered, job, policy)
    return ordered


def waiting_time(queue: Iterable[Job], job: Job, policy: Policy) -> float:
    """CPU time of the jobs in ``queue`` that would run before ``job``."""
    key = policy._key(job)
    total = 0.0
    for other in queue:
        if key < policy._key(other):
            break
        total += other.cpu_time
    return total


def time_left(queue: Iterable[Job]) -> float:
    """Total CPU time of the jobs in ``queue``."""
    return sum((job.cpu_time for job in queue), 0.0)