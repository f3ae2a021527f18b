"""Registration and editing of catalog records."""

import logging
import os
from dataclasses import replace

from picturedb.catalog.store import CatalogStore
from picturedb.consistency.checker import ConsistencyChecker
from picturedb.database import CatalogRecord
from picturedb.errors import MissingDirectoryError
from picturedb.navigator import normalize_dir
from picturedb.stats import DerivedStatsManager

logger = logging.getLogger(__name__)


class Registry:
    """Adds, edits and scores catalog records.

    Adding a record and computing its statistics are two separate writes. If
    the second one fails, the record stays without statistics until the next
    rebuild.
    """

    def __init__(
        self,
        store: CatalogStore,
        stats: DerivedStatsManager,
        checker: ConsistencyChecker | None = None,
    ):
        self.store = store
        self.stats = stats
        self.checker = checker or ConsistencyChecker(store, stats)

    def register(self, record: CatalogRecord) -> CatalogRecord:
        """Insert a record for an existing, not yet registered directory."""
        if not os.path.isdir(record.path):
            raise MissingDirectoryError(record.path)

        record = _cleaned(record)
        self.checker.ensure_unique_path(record.path)

        record_id = self.store.insert(record)
        self.stats.recompute(record_id)

        created = self.store.get_by_id(record_id)
        assert created is not None
        logger.info('Registered id=%d "%s"', record_id, created.title)
        return created

    def update(self, record_id: int, record: CatalogRecord) -> CatalogRecord | None:
        """Overwrite a record's fields. Returns None if the id is unknown.

        A new path must be an existing directory; its statistics are
        recomputed after the write.
        """
        current = self.store.get_by_id(record_id)
        if current is None:
            return None

        record = _cleaned(record)
        moved = record.path != current.path
        if moved and not os.path.isdir(record.path):
            raise MissingDirectoryError(record.path)

        if not self.store.update(record_id, record):
            return None
        if moved:
            logger.info("Record id=%d moved to %s", record_id, record.path)
            self.stats.recompute(record_id)
        return self.store.get_by_id(record_id)

    def record_view(self, record_id: int) -> None:
        self.store.increment_count(record_id)

    def favorite(self, record_id: int) -> None:
        self.store.increment_fav(record_id, 1)

    def unfavorite(self, record_id: int) -> None:
        self.store.increment_fav(record_id, -1)


def _cleaned(record: CatalogRecord) -> CatalogRecord:
    return replace(
        record,
        path=normalize_dir(record.path),
        title=(record.title or "").strip(),
        info=(record.info or "").strip(),
    )
