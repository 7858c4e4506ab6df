import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, Iterable, TypeVar

from .logger import logger
from .models.run_summary import FileOutcome

T = TypeVar("T")


@dataclass
class SchedulerResult:
    dispatched: int = 0
    outcomes: dict[FileOutcome, int] = field(
        default_factory=lambda: {outcome: 0 for outcome in FileOutcome}
    )

    @property
    def completed(self) -> int:
        return self.outcomes[FileOutcome.COMPLETED]

    @property
    def failed(self) -> int:
        return self.outcomes[FileOutcome.FAILED]

    @property
    def cancelled(self) -> int:
        return self.outcomes[FileOutcome.CANCELLED]


class ConcurrencyScheduler:
    """Runs one worker call per task with at most ``concurrency_limit`` in flight.

    A permit is taken before each task is dispatched and given back when
    its worker returns or raises. Once the cancellation event is set no
    further task is dispatched; ``run`` returns after every dispatched
    task has finished.
    """

    def __init__(self, concurrency_limit: int, poll_interval: float = 0.1) -> None:
        if concurrency_limit < 1:
            raise ValueError("concurrency_limit must be at least 1")
        self.concurrency_limit = concurrency_limit
        self.poll_interval = poll_interval
        self._semaphore = threading.BoundedSemaphore(concurrency_limit)

    def run(
        self,
        tasks: Iterable[T],
        worker: Callable[[T], FileOutcome],
        cancel_event: threading.Event | None = None,
    ) -> SchedulerResult:
        cancel_event = cancel_event or threading.Event()
        result = SchedulerResult()
        futures: list[Future[FileOutcome]] = []

        with ThreadPoolExecutor(
            max_workers=self.concurrency_limit, thread_name_prefix="data-maker"
        ) as executor:
            for task in tasks:
                if not self._acquire(cancel_event):
                    logger.info(
                        "Cancellation requested, no more files will be started",
                        extra={"dispatched": result.dispatched},
                    )
                    break
                try:
                    futures.append(executor.submit(self._run_task, worker, task))
                except BaseException:
                    self._semaphore.release()
                    raise
                result.dispatched += 1

            wait(futures)

        for future in futures:
            result.outcomes[future.result()] += 1
        return result

    def _acquire(self, cancel_event: threading.Event) -> bool:
        while not cancel_event.is_set():
            if self._semaphore.acquire(timeout=self.poll_interval):
                if cancel_event.is_set():
                    self._semaphore.release()
                    return False
                return True
        return False

    def _run_task(self, worker: Callable[[T], FileOutcome], task: T) -> FileOutcome:
        try:
            return worker(task)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Unhandled error in file task", extra={"task": task})
            return FileOutcome.FAILED
        finally:
            self._semaphore.release()
