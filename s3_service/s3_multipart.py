import logging
from typing import Any

from .models.s3_part import S3Part
from .s3 import S3Service
from .models.multipart_session_dto import MultipartSessionDto

logger = logging.getLogger("s3_service")


class S3MultipartService(S3Service):
    """S3 client that can also stage objects as ordered multipart uploads.

    A session is owned by a single caller: parts are uploaded one after
    another and completed in the order they were uploaded.
    """

    def start_multipart_upload(
        self, bucket: str, key: str, metadata: dict[str, str] | None = None
    ) -> MultipartSessionDto:
        """Initialize a multipart upload; the metadata lands on the final object."""
        try:
            logger.debug(
                "Initiating upload in parts", extra={"bucket": bucket, "key": key}
            )
            response = self.client.create_multipart_upload(
                Bucket=bucket, Key=key, Metadata=metadata or {}
            )
            session = MultipartSessionDto(
                bucket=bucket,
                key=key,
                upload_id=response["UploadId"],
            )
            logger.debug(
                "Upload initiated",
                extra={"bucket": bucket, "key": key, "upload_id": session.upload_id},
            )
            return session
        except Exception as exception:
            logger.exception(
                "Failed to initiate upload", extra={"bucket": bucket, "key": key}
            )
            raise exception

    def upload_part(self, session: MultipartSessionDto, body: Any) -> S3Part:
        """Upload the next part of the session and record it in upload order."""
        part_number = session.next_part_number
        if part_number > self.config.max_part_count:
            raise ValueError(
                f"Part number {part_number} exceeds {self.config.max_part_count}"
            )

        logger.debug(
            "Uploading part",
            extra={"key": session.key, "part_number": part_number},
        )
        response = self.client.upload_part(
            Bucket=session.bucket,
            Key=session.key,
            PartNumber=part_number,
            UploadId=session.upload_id,
            Body=body,
        )
        part = S3Part(PartNumber=part_number, ETag=response["ETag"])
        session.parts.append(part)
        logger.debug(
            "Uploaded part",
            extra={
                "key": session.key,
                "part_number": part_number,
                "upload_id": session.upload_id,
            },
        )
        return part

    def complete_multipart_upload(self, session: MultipartSessionDto) -> None:
        """Commit the parts in the order they were uploaded."""
        try:
            logger.debug(
                "Completing upload in parts",
                extra={
                    "key": session.key,
                    "bucket": session.bucket,
                    "upload_id": session.upload_id,
                    "parts": len(session.parts),
                },
            )
            self.client.complete_multipart_upload(
                Bucket=session.bucket,
                Key=session.key,
                UploadId=session.upload_id,
                MultipartUpload={
                    "Parts": [
                        {"PartNumber": part["PartNumber"], "ETag": part["ETag"]}
                        for part in session.parts
                    ]
                },
            )
            logger.debug(
                "Upload completed in parts",
                extra={"key": session.key, "upload_id": session.upload_id},
            )
        except Exception as exception:
            logger.exception(
                "Failed to complete upload", extra={"upload_id": session.upload_id}
            )
            raise exception

    def abort_multipart_upload(self, session: MultipartSessionDto) -> None:
        """Abort multipart upload in case of errors."""
        try:
            logger.debug("Aborting upload", extra={"upload_id": session.upload_id})
            self.client.abort_multipart_upload(
                Bucket=session.bucket,
                Key=session.key,
                UploadId=session.upload_id,
            )
            logger.info(
                "Upload aborted",
                extra={"key": session.key, "upload_id": session.upload_id},
            )
        except Exception as exception:
            logger.exception(
                "Failed to abort upload", extra={"upload_id": session.upload_id}
            )
            raise exception
