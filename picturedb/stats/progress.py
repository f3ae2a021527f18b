"""Progress reporting for statistics rebuilds."""

import logging
import time
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class RebuildStats:
    """Outcome of a full statistics rebuild."""

    total_records: int = 0
    records_rebuilt: int = 0
    total_files: int = 0
    total_bytes: int = 0
    failures: dict[int, str] = field(default_factory=dict)
    start_time: float = field(default_factory=time.time)

    @property
    def elapsed_seconds(self) -> float:
        return time.time() - self.start_time

    @property
    def succeeded(self) -> bool:
        return not self.failures


class RebuildProgress:
    """Logs rebuild progress every ``interval`` records."""

    def __init__(self, interval: int = 100):
        self.interval = interval
        self._last_report_count = 0

    def report_if_needed(self, stats: RebuildStats) -> None:
        done = stats.records_rebuilt + len(stats.failures)
        if done - self._last_report_count >= self.interval:
            logger.info(
                "[%d/%d] Rebuilt statistics (%d files, %s)",
                done,
                stats.total_records,
                stats.total_files,
                format_bytes(stats.total_bytes),
            )
            self._last_report_count = done

    def report_completion(self, stats: RebuildStats) -> None:
        logger.info(
            "Rebuild complete: %d of %d records in %s, %d failed",
            stats.records_rebuilt,
            stats.total_records,
            format_duration(stats.elapsed_seconds),
            len(stats.failures),
        )


def format_duration(seconds: float) -> str:
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_bytes(size: int) -> str:
    size_f = float(size)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_f < 1024:
            return f"{size_f:.2f} {unit}"
        size_f /= 1024
    return f"{size_f:.2f} PB"
