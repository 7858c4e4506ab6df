from dataclasses import dataclass
from typing import Iterator, Union


@dataclass(frozen=True)
class SingleShotPlan:
    pass


@dataclass(frozen=True)
class MultipartPlan:
    part_size: int
    part_count: int

    def part_lengths(self, object_size: int) -> Iterator[int]:
        """Length of each consecutive part; only the last one may be shorter."""
        remaining = object_size
        while remaining > 0:
            length = min(self.part_size, remaining)
            remaining -= length
            yield length


UploadPlan = Union[SingleShotPlan, MultipartPlan]
