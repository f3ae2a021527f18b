"""Removal of records marked for deletion with a negative fav."""

import logging
import shutil
from dataclasses import dataclass, field

from picturedb.catalog.store import CatalogStore
from picturedb.errors import IOFailureError
from picturedb.stats import DerivedStatsManager

logger = logging.getLogger(__name__)


@dataclass
class PurgeResult:
    """Records removed by a purge."""

    removed_ids: list[int] = field(default_factory=list)
    removed_paths: list[str] = field(default_factory=list)
    directories_deleted: list[str] = field(default_factory=list)
    failures: dict[int, str] = field(default_factory=dict)

    @property
    def removed_count(self) -> int:
        return len(self.removed_ids)


def remove_directory(path: str) -> bool:
    """Delete a directory tree. Returns False if it was already gone."""
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        logger.info("Directory already removed: %s", path)
        return False
    except OSError as e:
        raise IOFailureError(path, f"Could not remove directory ({e})") from e
    logger.info("Removed directory: %s", path)
    return True


def purge_negative_favorites(
    store: CatalogStore,
    stats: DerivedStatsManager,
    data_only: bool = True,
) -> PurgeResult:
    """Delete every record with fav < 0 and its statistics row.

    Unless ``data_only`` is set, the record's directory is removed from disk
    first. A record whose directory cannot be removed is kept and reported.
    """
    result = PurgeResult()

    for record in store.query_negative_fav():
        assert record.id is not None
        if not data_only:
            try:
                if remove_directory(record.path):
                    result.directories_deleted.append(record.path)
            except IOFailureError as e:
                logger.error("Keeping id=%d: %s", record.id, e)
                result.failures[record.id] = str(e)
                continue

        stats.invalidate(record.id)
        store.delete(record.id)
        result.removed_ids.append(record.id)
        result.removed_paths.append(record.path)

    logger.info("Purged %d records with negative fav", result.removed_count)
    return result
