from dataclasses import dataclass


@dataclass(frozen=True)
class ProgressSnapshot:
    completed_files: int
    total_files: int
    completed_bytes: int
    elapsed_seconds: float
    percent_complete: float
    bits_per_second: float
    eta_seconds: float
