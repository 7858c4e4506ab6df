from dataclasses import dataclass
from enum import Enum


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAULTED = "faulted"


class FileOutcome(Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RunSummary:
    # pylint: disable=too-many-instance-attributes
    state: RunState
    total_files: int
    completed_files: int
    failed_files: int
    cancelled_files: int
    not_dispatched_files: int
    completed_bytes: int
    elapsed_seconds: float

    @property
    def bits_per_second(self) -> float:
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.completed_bytes * 8 / self.elapsed_seconds
