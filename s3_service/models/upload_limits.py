from dataclasses import dataclass


@dataclass(frozen=True)
class UploadLimits:
    max_single_upload_bytes: int
    max_part_bytes: int
    max_part_count: int
    min_part_bytes: int = 0

    @property
    def max_multipart_bytes(self) -> int:
        return self.max_part_bytes * self.max_part_count
