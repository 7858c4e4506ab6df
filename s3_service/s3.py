import logging
from dataclasses import dataclass
from typing import Any, BinaryIO

import boto3
import botocore.exceptions

from .exceptions import RequiredBucketNotFoundException
from .models.upload_limits import UploadLimits

logger = logging.getLogger("s3_service")

KiB = 1024
MiB = KiB * 1024
GiB = MiB * 1024


@dataclass
class S3ServiceConfig:
    # pylint: disable=too-many-instance-attributes
    s3_endpoint_url: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: str | None = None
    # documented S3 limits, override for other S3-compatible backends
    max_single_upload_bytes: int = 5 * GiB
    max_part_bytes: int = 5 * GiB
    max_part_count: int = 10_000
    min_part_bytes: int = 5 * MiB


class S3Service:
    client: Any = None

    def __init__(self, config: S3ServiceConfig) -> None:
        self.config = config
        self.client = boto3.client(
            "s3",
            endpoint_url=config.s3_endpoint_url,
            aws_access_key_id=config.s3_access_key,
            aws_secret_access_key=config.s3_secret_key,
        )
        logger.info("Initiated client", extra={"endpoint_url": config.s3_endpoint_url})

    @property
    def limits(self) -> UploadLimits:
        return UploadLimits(
            max_single_upload_bytes=self.config.max_single_upload_bytes,
            max_part_bytes=self.config.max_part_bytes,
            max_part_count=self.config.max_part_count,
            min_part_bytes=self.config.min_part_bytes,
        )

    def is_alive(self) -> bool:
        try:
            self.client.list_buckets()
            return True
        except Exception:  # pylint: disable=broad-exception-caught
            return False

    def has_bucket(self, bucket: str, throw: bool = False) -> bool:
        try:
            self.client.head_bucket(Bucket=bucket)
            return True
        except botocore.exceptions.ClientError as exception:
            if throw:
                logger.exception("Bucket not found", extra={"bucket": bucket})
                raise RequiredBucketNotFoundException from exception
            return False

    def create_bucket_if_not_exists(self, bucket: str) -> bool:
        """Create the bucket unless it is already there. Returns True if created."""
        if self.has_bucket(bucket):
            logger.debug("Bucket already exists", extra={"bucket": bucket})
            return False
        try:
            self.client.create_bucket(Bucket=bucket)
        except botocore.exceptions.ClientError as exception:
            code = exception.response.get("Error", {}).get("Code")
            if code in ("BucketAlreadyOwnedByYou", "BucketAlreadyExists"):
                logger.debug("Bucket created concurrently", extra={"bucket": bucket})
                return False
            logger.exception("Failed to create bucket", extra={"bucket": bucket})
            raise exception
        logger.info("Created bucket", extra={"bucket": bucket})
        return True

    def put_file(
        self,
        file_obj: BinaryIO,
        bucket: str,
        key: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Upload a file object in a single PutObject call."""
        try:
            logger.debug(
                "Uploading object in a single request",
                extra={"bucket": bucket, "key": key},
            )
            self.client.put_object(
                Bucket=bucket, Key=key, Body=file_obj, Metadata=metadata or {}
            )
            logger.debug("Uploaded object", extra={"bucket": bucket, "key": key})
        except Exception as exception:
            logger.exception(
                "Failed to upload object to S3", extra={"bucket": bucket, "key": key}
            )
            raise exception
