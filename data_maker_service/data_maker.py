import random
import threading
import time
from typing import Callable, Iterator

from s3_service.s3_multipart import S3MultipartService

from .container_resolver import ContainerResolver
from .content import draw_object_size, new_object_name
from .exceptions import (
    BackendUnavailableError,
    NoTargetContainersError,
    OperationCancelledError,
)
from .local_storage import LocalArtifactStore
from .logger import logger
from .models.file_task import FileTask
from .models.run_parameters import RunParameters
from .models.run_summary import RunState, RunSummary
from .pipeline import FilePipeline
from .progress import BITS_PER_MEGABIT, ProgressTracker, format_elapsed
from .scheduler import ConcurrencyScheduler
from .upload_strategy import UploadStrategy

DEFAULT_CONTAINER_COUNT = 5


def container_index(file_count: int, sequence_number: int, container_count: int) -> int:
    return (file_count - sequence_number) % container_count


def build_file_tasks(
    params: RunParameters, containers: list[str], rng: random.Random
) -> Iterator[FileTask]:
    for sequence_number in range(params.file_count):
        index = container_index(params.file_count, sequence_number, len(containers))
        yield FileTask(
            sequence_number=sequence_number,
            container=containers[index],
            object_size=draw_object_size(
                params.min_file_size_bytes, params.max_file_size_bytes, rng
            ),
            object_name=new_object_name(),
            content_mode=params.content_mode,
        )


class DataMaker:
    """Runs one batch: resolve buckets, then generate and upload every file.

    State moves from IDLE to RUNNING and ends in COMPLETED, CANCELLED or
    FAULTED. Per-file failures are counted in the summary; only failures
    that affect the whole run (no buckets, no working directory) fault it.
    """

    # pylint: disable=too-many-arguments
    def __init__(
        self,
        storage: S3MultipartService,
        resolver: ContainerResolver,
        local_store: LocalArtifactStore,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        poll_interval: float = 0.1,
    ) -> None:
        self.storage = storage
        self.resolver = resolver
        self.local_store = local_store
        self.rng = rng or random.Random()
        self.clock = clock
        self.poll_interval = poll_interval
        self.state = RunState.IDLE
        self.progress: ProgressTracker | None = None

    def run(
        self, params: RunParameters, cancel_event: threading.Event | None = None
    ) -> RunSummary:
        if self.state is not RunState.IDLE:
            raise RuntimeError(f"DataMaker already used, state is {self.state.value}")
        cancel_event = cancel_event or threading.Event()
        self.state = RunState.RUNNING
        started_at = self.clock()
        logger.info("Processing starting", extra={"file_count": params.file_count})

        try:
            if not self.storage.is_alive():
                raise BackendUnavailableError("Storage backend is not reachable")
            containers = self.resolver.resolve_targets(
                DEFAULT_CONTAINER_COUNT, cancel_event
            )
            if not containers:
                raise NoTargetContainersError("No target containers resolved")
            self.local_store.ensure_root()
        except OperationCancelledError:
            logger.info("Run cancelled while resolving containers")
            return self._finish(params, started_at, RunState.CANCELLED)
        except Exception:
            self.state = RunState.FAULTED
            logger.exception("Run failed before any file was started")
            raise

        self.progress = ProgressTracker(
            params.file_count, params.report_interval, clock=self.clock
        )
        pipeline = FilePipeline(
            self.local_store,
            UploadStrategy(
                self.storage, self.local_store, params.part_chunk_size_bytes
            ),
            self.progress,
        )
        scheduler = ConcurrencyScheduler(params.concurrency_limit, self.poll_interval)
        result = scheduler.run(
            build_file_tasks(params, containers, self.rng),
            lambda task: pipeline.process(task, cancel_event),
            cancel_event,
        )

        state = RunState.COMPLETED
        if result.cancelled or result.dispatched < params.file_count:
            state = RunState.CANCELLED
        return self._finish(
            params,
            started_at,
            state,
            completed=result.completed,
            failed=result.failed,
            cancelled=result.cancelled,
            dispatched=result.dispatched,
        )

    # pylint: disable=too-many-arguments
    def _finish(
        self,
        params: RunParameters,
        started_at: float,
        state: RunState,
        completed: int = 0,
        failed: int = 0,
        cancelled: int = 0,
        dispatched: int = 0,
    ) -> RunSummary:
        self.state = state
        completed_bytes = 0
        if self.progress is not None:
            completed_bytes = self.progress.snapshot().completed_bytes
        summary = RunSummary(
            state=state,
            total_files=params.file_count,
            completed_files=completed,
            failed_files=failed,
            cancelled_files=cancelled,
            not_dispatched_files=params.file_count - dispatched,
            completed_bytes=completed_bytes,
            elapsed_seconds=self.clock() - started_at,
        )
        logger.info(
            "Processing finished %s of %s files after %s (%.2f Mbps)",
            f"{summary.completed_files:,}",
            f"{summary.total_files:,}",
            format_elapsed(summary.elapsed_seconds),
            summary.bits_per_second / BITS_PER_MEGABIT,
            extra={
                "state": state.value,
                "failed": failed,
                "cancelled": cancelled,
                "not_dispatched": summary.not_dispatched_files,
            },
        )
        return summary
