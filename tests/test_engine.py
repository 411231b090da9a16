import threading
import time

import pytest

from aubatch.engine import Scheduler, Statistics, pick_next, run_worker
from aubatch.jobs import Job, Policy

NOW = 100.0


def _clock():
    return NOW


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class GateRunner:
    def __init__(self):
        self.calls = []
        self.gate = threading.Event()

    def __call__(self, cpu_time):
        self.calls.append(cpu_time)
        self.gate.wait(5)
        return 0


def _job(job_id, name, cpu=1.0, priority=0, arrival=0.0):
    return Job(job_id, name, priority, cpu, arrival)


def test_pick_next_takes_head_when_arrived():
    queue = [_job(1, "a"), _job(2, "b")]
    picked = pick_next(queue, 5.0)
    assert picked.name == "a"
    assert [j.name for j in queue] == ["b"]


def test_pick_next_skips_jobs_not_yet_arrived():
    queue = [_job(1, "a", arrival=10.0), _job(2, "b", arrival=1.0), _job(3, "c")]
    picked = pick_next(queue, 5.0)
    assert picked.name == "b"
    assert [j.name for j in queue] == ["a", "c"]


def test_pick_next_falls_back_to_head():
    queue = [_job(1, "a", arrival=10.0), _job(2, "b", arrival=20.0)]
    picked = pick_next(queue, 5.0)
    assert picked.name == "a"
    assert [j.name for j in queue] == ["b"]


def test_pick_next_empty_queue():
    with pytest.raises(IndexError):
        pick_next([], 0.0)


def test_statistics_empty_report():
    stats = Statistics.from_jobs([])
    assert stats.count == 0
    assert stats.report() == "\nNo jobs have been completed\n"


def test_statistics_single_job():
    job = Job(1, "solo", 2, 2.0, 0.0, starting_time=0.0, finish_time=2.0)
    stats = Statistics.from_jobs([job])
    assert stats.count == 1
    assert stats.average_turnaround == pytest.approx(2.0)
    assert stats.average_cpu == pytest.approx(2.0)
    assert stats.average_waiting == pytest.approx(0.0)
    assert stats.throughput * stats.average_turnaround == pytest.approx(1.0)


def test_statistics_report_lines():
    jobs = [
        Job(1, "a", 0, 1.0, 0.0, starting_time=0.0, finish_time=1.0),
        Job(2, "b", 1, 1.0, 0.0, starting_time=1.0, finish_time=2.0),
    ]
    report = Statistics.from_jobs(jobs).report()
    assert report.startswith("Individual Job Performance Report\n")
    assert "Total number of job submitted: \t2\n" in report
    assert "name: a priority: 0" in report
    assert report.index("name: a") < report.index("name: b")
    assert report.endswith("jobs/second\n\n")


def test_run_worker_returns_exit_status():
    assert run_worker(0.0) == 0


def test_scheduler_rejects_bad_capacity():
    with pytest.raises(ValueError):
        Scheduler(capacity=0)


def test_sjf_orders_scheduled_queue():
    runner = GateRunner()
    scheduler = Scheduler(Policy.SJF, runner=runner, clock=_clock)
    scheduler.start()
    try:
        first = _job(1, "first", cpu=9.0)
        scheduler.submit(first)
        assert _wait_for(lambda: scheduler.running_job is first)
        for job_id, cpu in [(2, 5.0), (3, 1.0), (4, 3.0)]:
            scheduler.submit(_job(job_id, f"j{job_id}", cpu=cpu))
        assert _wait_for(lambda: len(scheduler.scheduled_jobs()) == 3)
        assert [j.cpu_time for j in scheduler.scheduled_jobs()] == [1.0, 3.0, 5.0]
        assert not scheduler.is_idle()
        runner.gate.set()
        scheduler.wait_until_idle(0.01)
        assert [j.name for j in scheduler.completed_jobs()] == ["first", "j3", "j4", "j2"]
    finally:
        runner.gate.set()
        scheduler.stop()


def test_change_policy_resorts_scheduled_jobs():
    runner = GateRunner()
    scheduler = Scheduler(Policy.FCFS, runner=runner, clock=_clock)
    scheduler.start()
    try:
        first = _job(1, "first", cpu=9.0)
        scheduler.submit(first)
        assert _wait_for(lambda: scheduler.running_job is first)
        for job_id, cpu in [(2, 5.0), (3, 1.0), (4, 3.0)]:
            scheduler.submit(_job(job_id, f"j{job_id}", cpu=cpu, arrival=float(job_id)))
        assert _wait_for(lambda: len(scheduler.scheduled_jobs()) == 3)
        assert [j.name for j in scheduler.scheduled_jobs()] == ["j2", "j3", "j4"]
        assert scheduler.change_policy(Policy.SJF) is True
        assert scheduler.policy is Policy.SJF
        assert [j.name for j in scheduler.scheduled_jobs()] == ["j3", "j4", "j2"]
        assert scheduler.change_policy(Policy.SJF) is False
    finally:
        runner.gate.set()
        scheduler.stop()


def test_policy_setter_keeps_order():
    scheduler = Scheduler(Policy.FCFS, runner=lambda cpu: 0, clock=_clock)
    scheduler.policy = Policy.PRIORITY
    assert scheduler.policy is Policy.PRIORITY


def test_submitted_jobs_before_start():
    scheduler = Scheduler(runner=lambda cpu: 0, clock=_clock)
    scheduler.submit(_job(1, "a"))
    scheduler.submit(_job(2, "b"))
    assert [j.name for j in scheduler.submitted_jobs()] == ["a", "b"]
    assert scheduler.pending_count() == 2
    assert scheduler.is_idle() is False


def test_reset_completed_and_report():
    scheduler = Scheduler(runner=lambda cpu: 0, clock=_clock)
    with scheduler:
        scheduler.submit(_job(1, "a"))
        scheduler.wait_until_idle(0.01)
        assert len(scheduler.completed_jobs()) == 1
        assert "Total number of job submitted: \t1\n" in scheduler.statistics_report()
        scheduler.reset_completed()
        assert scheduler.completed_jobs() == []
        assert scheduler.statistics_report() == "\nNo jobs have been completed\n"


def test_start_twice_raises():
    scheduler = Scheduler(runner=lambda cpu: 0, clock=_clock)
    scheduler.start()
    try:
        with pytest.raises(RuntimeError):
            scheduler.start()
    finally:
        scheduler.stop()


def test_submit_after_stop_raises():
    scheduler = Scheduler(runner=lambda cpu: 0, clock=_clock)
    scheduler.start()
    scheduler.stop()
    with pytest.raises(RuntimeError):
        scheduler.submit(_job(1, "late"))


def test_runner_os_error_still_completes():
    def failing(cpu):
        raise OSError("cannot start")

    scheduler = Scheduler(runner=failing, clock=_clock)
    with scheduler:
        scheduler.submit(_job(1, "broken"))
        scheduler.wait_until_idle(0.01)
        completed = scheduler.completed_jobs()
    assert [j.name for j in completed] == ["broken"]
    assert completed[0].starting_time == NOW
    assert completed[0].finish_time == 0.0