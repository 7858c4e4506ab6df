import threading
import time

import pytest
from data_maker_service.models.run_summary import FileOutcome
from data_maker_service.scheduler import ConcurrencyScheduler


def test_concurrency_bound_is_respected() -> None:
    lock = threading.Lock()
    active = 0
    peak = 0

    def worker(_task: int) -> FileOutcome:
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        time.sleep(0.01)
        with lock:
            active -= 1
        return FileOutcome.COMPLETED

    result = ConcurrencyScheduler(3, poll_interval=0.01).run(range(20), worker)

    assert peak <= 3
    assert result.dispatched == 20
    assert result.completed == 20


def test_failing_task_does_not_stop_siblings() -> None:
    def worker(task: int) -> FileOutcome:
        if task == 2:
            raise RuntimeError("boom")
        return FileOutcome.COMPLETED

    result = ConcurrencyScheduler(2, poll_interval=0.01).run(range(5), worker)

    assert result.dispatched == 5
    assert result.completed == 4
    assert result.failed == 1


def test_permit_released_when_worker_raises() -> None:
    def worker(_task: int) -> FileOutcome:
        raise RuntimeError("boom")

    result = ConcurrencyScheduler(1, poll_interval=0.01).run(range(3), worker)

    assert result.failed == 3


def test_outcomes_are_counted() -> None:
    outcomes = [FileOutcome.COMPLETED, FileOutcome.FAILED, FileOutcome.CANCELLED]

    result = ConcurrencyScheduler(2, poll_interval=0.01).run(
        range(3), lambda task: outcomes[task]
    )

    assert (result.completed, result.failed, result.cancelled) == (1, 1, 1)


def test_cancelled_before_start_dispatches_nothing() -> None:
    cancel_event = threading.Event()
    cancel_event.set()
    started: list[int] = []

    result = ConcurrencyScheduler(2, poll_interval=0.01).run(
        range(5),
        lambda task: started.append(task) or FileOutcome.COMPLETED,
        cancel_event,
    )

    assert result.dispatched == 0
    assert not started


def test_cancellation_drains_in_flight_tasks() -> None:
    cancel_event = threading.Event()
    gate = threading.Event()
    lock = threading.Lock()
    started: list[int] = []
    both_started = threading.Event()

    def worker(task: int) -> FileOutcome:
        with lock:
            started.append(task)
            if len(started) == 2:
                both_started.set()
        gate.wait(timeout=5)
        return FileOutcome.COMPLETED

    scheduler = ConcurrencyScheduler(2, poll_interval=0.01)
    results = []
    runner = threading.Thread(
        target=lambda: results.append(scheduler.run(range(5), worker, cancel_event))
    )
    runner.start()
    assert both_started.wait(timeout=5)

    cancel_event.set()
    gate.set()
    runner.join(timeout=5)

    assert not runner.is_alive()
    assert sorted(started) == [0, 1]
    assert results[0].dispatched == 2
    assert results[0].completed == 2


def test_invalid_concurrency_limit() -> None:
    with pytest.raises(ValueError):
        ConcurrencyScheduler(0)
