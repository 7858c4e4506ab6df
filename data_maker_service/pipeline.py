import threading

from .content import synthesize_chunks
from .exceptions import (
    BackendUploadError,
    LocalStorageError,
    ObjectTooLargeError,
    OperationCancelledError,
)
from .local_storage import LocalArtifactStore
from .logger import logger
from .models.file_task import FileTask
from .models.run_summary import FileOutcome
from .progress import ProgressTracker
from .upload_strategy import UploadStrategy


class FilePipeline:
    """Generate, hash and upload a single file, then count it as done."""

    def __init__(
        self,
        local_store: LocalArtifactStore,
        uploader: UploadStrategy,
        progress: ProgressTracker,
    ) -> None:
        self.local_store = local_store
        self.uploader = uploader
        self.progress = progress

    def process(
        self, task: FileTask, cancel_event: threading.Event | None = None
    ) -> FileOutcome:
        log_extra = {
            "file_num": task.sequence_number,
            "container": task.container,
            "key": task.object_name,
            "size": task.object_size,
        }
        logger.debug("Starting file", extra=log_extra)
        try:
            plan = self.uploader.plan(task)
            local_path = self.local_store.path_for(task.object_name)
            with self.local_store.artifact(local_path):
                self.local_store.write_chunks(
                    local_path,
                    synthesize_chunks(task.object_size, task.content_mode),
                    cancel_event,
                )
                digest = self.local_store.digest(local_path)
                self.uploader.upload(
                    task, local_path, task.build_metadata(digest), plan, cancel_event
                )
                self.progress.record_completed(task.object_size)
        except OperationCancelledError:
            logger.info("File cancelled before completion", extra=log_extra)
            return FileOutcome.CANCELLED
        except (ObjectTooLargeError, LocalStorageError, BackendUploadError):
            logger.exception("File failed", extra=log_extra)
            return FileOutcome.FAILED

        logger.debug("Finished file", extra=log_extra)
        return FileOutcome.COMPLETED
