import time
from datetime import timedelta
from threading import Lock
from typing import Callable

from .logger import logger
from .models.progress_snapshot import ProgressSnapshot

BITS_PER_MEGABIT = 1_000_000


def format_elapsed(seconds: float) -> str:
    return str(timedelta(seconds=int(seconds)))


class ProgressTracker:
    """Completed file and byte counters shared by every file pipeline."""

    def __init__(
        self,
        total_files: int,
        report_interval: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if report_interval < 1:
            raise ValueError("report_interval must be at least 1")
        self.total_files = total_files
        self.report_interval = report_interval
        self._clock = clock
        self._started_at = clock()
        self._lock = Lock()
        self._completed_files = 0
        self._completed_bytes = 0

    @property
    def elapsed_seconds(self) -> float:
        return self._clock() - self._started_at

    def record_completed(self, size: int) -> ProgressSnapshot | None:
        """Count one fully uploaded file; returns a snapshot on report boundaries."""
        with self._lock:
            if self._completed_files >= self.total_files:
                raise ValueError("More files completed than scheduled")
            self._completed_files += 1
            self._completed_bytes += size
            if self._completed_files % self.report_interval != 0:
                return None
            snapshot = self._snapshot()

        logger.info(
            "Processed file %s of %s (%.1f%%) after %s (%.2f Mbps) estimated in %s",
            f"{snapshot.completed_files:,}",
            f"{snapshot.total_files:,}",
            snapshot.percent_complete,
            format_elapsed(snapshot.elapsed_seconds),
            snapshot.bits_per_second / BITS_PER_MEGABIT,
            format_elapsed(snapshot.eta_seconds),
        )
        return snapshot

    def snapshot(self) -> ProgressSnapshot:
        with self._lock:
            return self._snapshot()

    def _snapshot(self) -> ProgressSnapshot:
        elapsed = self.elapsed_seconds
        completed = self._completed_files
        percent = completed / self.total_files * 100 if self.total_files else 100.0
        bits_per_second = self._completed_bytes * 8 / elapsed if elapsed > 0 else 0.0
        eta = (
            elapsed / completed * (self.total_files - completed) if completed else 0.0
        )
        return ProgressSnapshot(
            completed_files=completed,
            total_files=self.total_files,
            completed_bytes=self._completed_bytes,
            elapsed_seconds=elapsed,
            percent_complete=percent,
            bits_per_second=bits_per_second,
            eta_seconds=eta,
        )
