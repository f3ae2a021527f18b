"""Derived per-record statistics: image count and total size."""

import logging
import os
from decimal import ROUND_HALF_UP, Decimal

from picturedb.catalog.store import CatalogStore
from picturedb.database import DerivedStats
from picturedb.errors import IOFailureError
from picturedb.navigator import DirectoryNavigator
from picturedb.stats.progress import RebuildProgress, RebuildStats

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024
STATS_TABLE = "pictures_ex"


def to_megabytes(total_bytes: int) -> int:
    """Round a byte count to whole megabytes, halves rounding up."""
    return int((Decimal(total_bytes) / BYTES_PER_MB).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def total_size(files: list[str]) -> int:
    """Sum of file sizes in bytes."""
    total = 0
    for path in files:
        try:
            total += os.stat(path).st_size
        except FileNotFoundError as e:
            raise IOFailureError(path, "File disappeared before it could be measured") from e
        except OSError as e:
            raise IOFailureError(path, str(e)) from e
    return total


class DerivedStatsManager:
    """Keeps pictures_ex in step with the directories behind the catalog."""

    def __init__(
        self,
        store: CatalogStore,
        navigator: DirectoryNavigator | None = None,
        progress_interval: int = 100,
    ):
        self.store = store
        self.db = store.db
        self.navigator = navigator or DirectoryNavigator()
        self.progress_interval = progress_interval

    def get(self, record_id: int) -> DerivedStats | None:
        row = self.db.fetchone(
            f"SELECT id, file_count, total_size FROM {STATS_TABLE} WHERE id = ?",
            (record_id,),
        )
        if row is None:
            return None
        return DerivedStats(id=row["id"], file_count=row["file_count"], total_size_mb=row["total_size"])

    def measure(self, directory: str) -> tuple[int, int]:
        """Return (image count, total bytes) for a directory."""
        files = self.navigator.list_images(directory)
        return len(files), total_size(files)

    def recompute(self, record_id: int) -> DerivedStats | None:
        """Recount one record's directory and store the result.

        Returns None when the id has no catalog record. IO failures propagate.
        """
        record = self.store.get_by_id(record_id)
        if record is None:
            logger.warning("No catalog record for id=%d, statistics not computed", record_id)
            return None

        file_count, total_bytes = self.measure(record.path)
        stats = DerivedStats(id=record_id, file_count=file_count, total_size_mb=to_megabytes(total_bytes))
        self._upsert(stats)
        return stats

    def _upsert(self, stats: DerivedStats) -> None:
        if self.get(stats.id) is None:
            self.db.execute(
                f"INSERT INTO {STATS_TABLE} (id, file_count, total_size) VALUES (?, ?, ?)",
                (stats.id, stats.file_count, stats.total_size_mb),
            )
            logger.debug("Inserted statistics for id=%d", stats.id)
        else:
            self.db.execute(
                f"UPDATE {STATS_TABLE} SET file_count = ?, total_size = ? WHERE id = ?",
                (stats.file_count, stats.total_size_mb, stats.id),
            )
            logger.debug("Updated statistics for id=%d", stats.id)

    def invalidate(self, record_id: int) -> bool:
        cursor = self.db.execute(f"DELETE FROM {STATS_TABLE} WHERE id = ?", (record_id,))
        return cursor.rowcount > 0

    def rebuild_all(self) -> RebuildStats:
        """Drop every statistics row and recompute one per catalog id.

        A record whose directory cannot be read is skipped and reported in
        ``RebuildStats.failures``; the rest are still rebuilt. Running it again
        over an unchanged catalog yields the same rows.
        """
        self.db.execute(f"DELETE FROM {STATS_TABLE}")
        record_ids = self.store.list_ids()

        stats = RebuildStats(total_records=len(record_ids))
        progress = RebuildProgress(interval=self.progress_interval)
        logger.info("Rebuilding statistics for %d records", len(record_ids))

        for record_id in record_ids:
            record = self.store.get_by_id(record_id)
            if record is None:
                # Deleted while the rebuild was running.
                stats.total_records -= 1
                continue
            try:
                file_count, total_bytes = self.measure(record.path)
            except IOFailureError as e:
                logger.warning("Skipping id=%d: %s", record_id, e)
                stats.failures[record_id] = str(e)
                continue

            self._upsert(
                DerivedStats(
                    id=record_id,
                    file_count=file_count,
                    total_size_mb=to_megabytes(total_bytes),
                )
            )
            stats.records_rebuilt += 1
            stats.total_files += file_count
            stats.total_bytes += total_bytes
            progress.report_if_needed(stats)

        progress.report_completion(stats)
        return stats
