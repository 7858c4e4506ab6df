import math
import threading

import botocore.exceptions

from s3_service.models.multipart_session_dto import MultipartSessionDto
from s3_service.models.upload_limits import UploadLimits
from s3_service.s3_multipart import S3MultipartService

from .exceptions import BackendUploadError, ObjectTooLargeError
from .local_storage import LocalArtifactStore, raise_if_cancelled
from .logger import logger
from .models.file_task import FileTask
from .models.upload_plan import MultipartPlan, SingleShotPlan, UploadPlan

BACKEND_ERRORS = (botocore.exceptions.BotoCoreError, botocore.exceptions.ClientError)


def choose_upload_plan(
    object_size: int, limits: UploadLimits, part_chunk_size: int
) -> UploadPlan:
    """Pick single-shot or multipart upload from the object size alone.

    Raises ObjectTooLargeError when even the largest multipart upload the
    backend accepts cannot hold the object.
    """
    if object_size > limits.max_multipart_bytes:
        raise ObjectTooLargeError(
            f"File too big {object_size:,} > {limits.max_multipart_bytes:,}"
        )
    if object_size < limits.max_single_upload_bytes:
        return SingleShotPlan()

    part_size = max(
        part_chunk_size,
        limits.min_part_bytes,
        math.ceil(object_size / limits.max_part_count),
    )
    part_size = min(part_size, limits.max_part_bytes)
    return MultipartPlan(
        part_size=part_size, part_count=math.ceil(object_size / part_size)
    )


class UploadStrategy:
    def __init__(
        self,
        storage: S3MultipartService,
        local_store: LocalArtifactStore,
        part_chunk_size: int,
    ) -> None:
        self.storage = storage
        self.local_store = local_store
        self.part_chunk_size = part_chunk_size

    def plan(self, task: FileTask) -> UploadPlan:
        return choose_upload_plan(
            task.object_size, self.storage.limits, self.part_chunk_size
        )

    def upload(
        self,
        task: FileTask,
        local_path: str,
        metadata: dict[str, str],
        plan: UploadPlan,
        cancel_event: threading.Event | None = None,
    ) -> None:
        raise_if_cancelled(cancel_event)
        logger.debug(
            "Starting upload",
            extra={
                "file_num": task.sequence_number,
                "size": task.object_size,
                "single_shot": isinstance(plan, SingleShotPlan),
            },
        )
        if isinstance(plan, MultipartPlan):
            self._upload_multipart(task, local_path, metadata, plan, cancel_event)
        else:
            self._upload_single_shot(task, local_path, metadata)

    def _upload_single_shot(
        self, task: FileTask, local_path: str, metadata: dict[str, str]
    ) -> None:
        with self.local_store.open_read(local_path) as fobj:
            try:
                self.storage.put_file(
                    fobj, bucket=task.container, key=task.object_name, metadata=metadata
                )
            except BACKEND_ERRORS as exception:
                raise BackendUploadError(
                    f"Upload of {task.object_name} failed"
                ) from exception

    def _upload_multipart(
        self,
        task: FileTask,
        local_path: str,
        metadata: dict[str, str],
        plan: MultipartPlan,
        cancel_event: threading.Event | None,
    ) -> None:
        # each part is staged through a temp file, never held in memory
        try:
            session = self.storage.start_multipart_upload(
                task.container, task.object_name, metadata
            )
        except BACKEND_ERRORS as exception:
            raise BackendUploadError(
                f"Cannot start upload of {task.object_name}"
            ) from exception

        staging_path = f"{local_path}.part"
        try:
            with self.local_store.open_read(local_path) as source:
                for length in plan.part_lengths(task.object_size):
                    with self.local_store.artifact(staging_path):
                        self.local_store.copy_range(
                            source, staging_path, length, cancel_event
                        )
                        raise_if_cancelled(cancel_event)
                        with self.local_store.open_read(staging_path) as body:
                            self.storage.upload_part(session, body)

            raise_if_cancelled(cancel_event)
            self.storage.complete_multipart_upload(session)
        except Exception as exception:
            self._abort(session)
            if isinstance(exception, BACKEND_ERRORS):
                raise BackendUploadError(
                    f"Upload of {task.object_name} failed after "
                    f"{len(session.parts)} of {plan.part_count} parts"
                ) from exception
            raise

        logger.debug(
            "Committed parts",
            extra={"key": task.object_name, "parts": len(session.parts)},
        )

    def _abort(self, session: MultipartSessionDto) -> None:
        try:
            self.storage.abort_multipart_upload(session)
        except BACKEND_ERRORS:
            logger.warning(
                "Could not abort upload", extra={"upload_id": session.upload_id}
            )
