import logging
import os
import tempfile
from typing import Any

from pydantic import (
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from s3_service.s3 import S3ServiceConfig

from .logger import logger
from .models.run_parameters import ContentMode, RunParameters

MiB = 1024 * 1024


def default_thread_count() -> int:
    return (os.cpu_count() or 1) * 2


class DataMakerSettings(BaseSettings):
    """
    Class for storing settings of a data maker run.

    A value that cannot be parsed falls back to the field default, the
    same way a missing value does.
    """

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", populate_by_name=True
    )

    file_count: int = Field(
        default=100, alias="FileCount", ge=0, description="Number of files to create."
    )
    threads: int = Field(
        default_factory=default_thread_count,
        alias="Threads",
        ge=1,
        description="Maximum number of files generated and uploaded at the same time.",
    )
    max_file_size_mib: float = Field(default=100.0, alias="MaxFileSize", ge=0)
    min_file_size_mib: float = Field(default=4.0, alias="MinFileSize", ge=0)
    report_status_increment: int = Field(
        default=1000,
        alias="ReportStatusIncrement",
        ge=1,
        description="Log progress every time this many more files are completed.",
    )
    random_file_contents: bool = Field(default=False, alias="RandomFileContents")
    blob_containers: str | None = Field(
        default=None,
        alias="BlobContainers",
        description="Number of buckets to generate, or comma separated bucket names.",
    )
    part_chunk_size_mib: float = Field(default=8.0, alias="PartChunkSize", gt=0)
    working_directory: str = Field(
        default_factory=tempfile.gettempdir, alias="WorkingDirectory"
    )

    s3_endpoint_url: str | None = Field(default=None, alias="S3_ENDPOINT_URL")
    s3_access_key: str | None = Field(default=None, alias="S3_ACCESS_KEY")
    s3_secret_key: str | None = Field(default=None, alias="S3_SECRET_KEY")
    s3_max_single_upload_mib: int = Field(
        default=5 * 1024, alias="S3_MAX_SINGLE_UPLOAD_MIB", ge=1
    )
    s3_max_part_mib: int = Field(default=5 * 1024, alias="S3_MAX_PART_MIB", ge=1)
    s3_max_part_count: int = Field(default=10_000, alias="S3_MAX_PART_COUNT", ge=1)
    s3_min_part_mib: int = Field(default=5, alias="S3_MIN_PART_MIB", ge=0)

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level {value}")
        return level

    @field_validator("*", mode="wrap")
    @classmethod
    def fall_back_to_default(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        try:
            return handler(value)
        except ValidationError:
            field = cls.model_fields[info.field_name]
            default = field.get_default(call_default_factory=True)
            logger.warning(
                "%s = %s is invalid, using default %s",
                field.alias or info.field_name,
                value,
                default,
            )
            return default

    @model_validator(mode="after")
    def order_file_sizes(self) -> "DataMakerSettings":
        if self.min_file_size_mib > self.max_file_size_mib:
            logger.warning(
                "MinFileSize %s is greater than MaxFileSize %s, swapping them",
                self.min_file_size_mib,
                self.max_file_size_mib,
            )
            self.min_file_size_mib, self.max_file_size_mib = (
                self.max_file_size_mib,
                self.min_file_size_mib,
            )
        return self

    def log_effective_values(self) -> None:
        for name, field in type(self).model_fields.items():
            if name == "s3_secret_key":
                continue
            logger.info("%s = %s", field.alias or name, getattr(self, name))

    def to_run_parameters(self) -> RunParameters:
        return RunParameters(
            file_count=self.file_count,
            concurrency_limit=self.threads,
            min_file_size_bytes=int(self.min_file_size_mib * MiB),
            max_file_size_bytes=int(self.max_file_size_mib * MiB),
            report_interval=self.report_status_increment,
            content_mode=(
                ContentMode.RANDOMIZED
                if self.random_file_contents
                else ContentMode.SPARSE
            ),
            part_chunk_size_bytes=max(int(self.part_chunk_size_mib * MiB), 1),
        )

    def to_s3_config(self) -> S3ServiceConfig:
        return S3ServiceConfig(
            s3_endpoint_url=self.s3_endpoint_url,
            s3_access_key=self.s3_access_key,
            s3_secret_key=self.s3_secret_key,
            max_single_upload_bytes=self.s3_max_single_upload_mib * MiB,
            max_part_bytes=self.s3_max_part_mib * MiB,
            max_part_count=self.s3_max_part_count,
            min_part_bytes=self.s3_min_part_mib * MiB,
        )
