"""Consistency checks between the catalog, its statistics and the disk."""

import logging
import os
from dataclasses import dataclass
from enum import Enum

from picturedb.catalog.store import CatalogStore
from picturedb.database import CatalogRecord, QueryTarget
from picturedb.errors import REBUILD_REMEDIATION, DriftDetectedError, DuplicatePathError
from picturedb.stats import DerivedStatsManager, RebuildStats

logger = logging.getLogger(__name__)


class DriftState(Enum):
    """Whether the combined view covers every catalog record."""

    CONSISTENT = "consistent"
    DRIFTED = "drifted"


@dataclass
class DriftReport:
    """Row counts behind a drift decision."""

    state: DriftState
    catalog_count: int
    view_count: int

    @property
    def missing_stats(self) -> int:
        return self.catalog_count - self.view_count

    @property
    def message(self) -> str:
        if self.state is DriftState.CONSISTENT:
            return f"Catalog and statistics are consistent ({self.catalog_count} records)."
        return (
            f"pictures and pictures_ex are out of sync: {self.catalog_count} records, "
            f"{self.view_count} with statistics. {REBUILD_REMEDIATION}"
        )


class ConsistencyChecker:
    """Detects missing directories, duplicate paths and statistics drift.

    Drift is reported, never repaired implicitly. The only way back to a
    consistent state is ``resolve_drift``, which runs a full rebuild.
    """

    def __init__(self, store: CatalogStore, stats: DerivedStatsManager):
        self.store = store
        self.stats = stats

    def sweep_missing(self, auto_delete: bool = False) -> list[str]:
        """Return catalog paths whose directory no longer exists.

        With ``auto_delete`` each such record is removed along with its
        statistics row.
        """
        missing: list[str] = []
        for record in self.store.query_all(QueryTarget.CATALOG):
            if os.path.isdir(record.path):
                continue
            missing.append(record.path)
            logger.warning("Missing directory for id=%s: %s", record.id, record.path)
            if auto_delete and record.id is not None:
                self.remove_record(record.id)
        return missing

    def remove_record(self, record_id: int) -> bool:
        """Delete a catalog record and its statistics row."""
        self.stats.invalidate(record_id)
        return self.store.delete(record_id)

    def find_duplicate(self, path: str) -> CatalogRecord | None:
        return self.store.get_by_path(path)

    def ensure_unique_path(self, path: str) -> None:
        existing = self.find_duplicate(path)
        if existing is not None:
            raise DuplicatePathError(path, existing.id, existing.title)

    def check_drift(self) -> DriftReport:
        catalog_count = self.store.count(QueryTarget.CATALOG)
        view_count = self.store.count(QueryTarget.COMBINED)
        state = DriftState.CONSISTENT if catalog_count == view_count else DriftState.DRIFTED
        report = DriftReport(state=state, catalog_count=catalog_count, view_count=view_count)
        if state is DriftState.DRIFTED:
            logger.warning(report.message)
        return report

    def ensure_consistent(self) -> DriftReport:
        report = self.check_drift()
        if report.state is DriftState.DRIFTED:
            raise DriftDetectedError(report.catalog_count, report.view_count)
        return report

    def resolve_drift(self) -> tuple[RebuildStats, DriftReport]:
        """Rebuild every statistics row, then check again."""
        rebuild = self.stats.rebuild_all()
        return rebuild, self.check_drift()
