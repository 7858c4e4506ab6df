from dataclasses import dataclass, field

from .s3_part import S3Part  # pylint: disable=relative-beyond-top-level


@dataclass
class MultipartSessionDto:
    bucket: str
    key: str
    upload_id: str
    parts: list[S3Part] = field(default_factory=list)

    @property
    def next_part_number(self) -> int:
        return len(self.parts) + 1
