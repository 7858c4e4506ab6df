from enum import Enum

from pydantic import Field, model_validator
from pydantic.dataclasses import dataclass


class ContentMode(Enum):
    SPARSE = "sparse"
    RANDOMIZED = "randomized"


@dataclass(frozen=True)
class RunParameters:
    # pylint: disable=too-many-instance-attributes
    file_count: int = Field(ge=0)
    concurrency_limit: int = Field(ge=1)
    min_file_size_bytes: int = Field(ge=0)
    max_file_size_bytes: int = Field(ge=0)
    report_interval: int = Field(ge=1)
    content_mode: ContentMode = ContentMode.SPARSE
    part_chunk_size_bytes: int = Field(default=8 * 1024 * 1024, ge=1)

    @model_validator(mode="after")
    def check_size_bounds(self) -> "RunParameters":
        if self.min_file_size_bytes > self.max_file_size_bytes:
            raise ValueError(
                "min_file_size_bytes must not be greater than max_file_size_bytes"
            )
        return self
