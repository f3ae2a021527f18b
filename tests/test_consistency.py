"""Tests for consistency checks and the negative-fav purge."""

# pylint: disable=redefined-outer-name

from pathlib import Path

import pytest

from picturedb.catalog import CatalogStore
from picturedb.consistency import (
    ConsistencyChecker,
    DriftState,
    purge_negative_favorites,
    remove_directory,
)
from picturedb.database import CatalogRecord, Database
from picturedb.errors import REBUILD_REMEDIATION, DriftDetectedError, DuplicatePathError
from picturedb.stats import DerivedStatsManager


@pytest.fixture
def temp_db(tmp_path: Path):
    db = Database(tmp_path / "test.db")
    db.connect()
    yield db
    db.close()


@pytest.fixture
def store(temp_db: Database) -> CatalogStore:
    return CatalogStore(temp_db)


@pytest.fixture
def stats(store: CatalogStore) -> DerivedStatsManager:
    return DerivedStatsManager(store)


@pytest.fixture
def checker(store: CatalogStore, stats: DerivedStatsManager) -> ConsistencyChecker:
    return ConsistencyChecker(store, stats)


def _register(store: CatalogStore, stats: DerivedStatsManager, path: Path, fav: int = 0) -> int:
    record_id = store.insert(CatalogRecord(id=None, title=path.name, creator="c", path=str(path)))
    if fav:
        store.increment_fav(record_id, fav)
    if path.is_dir():
        stats.recompute(record_id)
    return record_id


def _image_dir(root: Path, name: str) -> Path:
    directory = root / name
    directory.mkdir()
    (directory / "a.jpg").write_bytes(b"x")
    return directory


class TestSweepMissing:
    """Tests for the existence sweep."""

    @pytest.fixture
    def catalog(self, tmp_path, store, stats):
        for i in range(1, 5):
            _register(store, stats, _image_dir(tmp_path, f"set{i}"))
        missing = tmp_path / "a" / "missing"
        missing.parent.mkdir()
        missing.mkdir()
        record_id = _register(store, stats, missing)
        missing.rmdir()
        assert record_id == 5
        return str(missing)

    def test_reports_without_deleting(self, checker, store, stats, catalog):
        assert checker.sweep_missing() == [catalog]
        assert store.get_by_id(5) is not None
        assert stats.get(5) is not None

    def test_auto_delete_removes_record_and_stats(self, checker, store, stats, catalog):
        assert checker.sweep_missing(auto_delete=True) == [catalog]
        assert store.get_by_id(5) is None
        assert stats.get(5) is None
        assert store.count() == 4

    def test_nothing_missing(self, tmp_path, checker, store, stats):
        _register(store, stats, _image_dir(tmp_path, "ok"))
        assert checker.sweep_missing(auto_delete=True) == []
        assert store.count() == 1


class TestRemoveRecord:
    """Tests for removing a record with its statistics."""

    def test_no_orphan_without_foreign_keys(self, tmp_path):
        with Database(tmp_path / "nofk.db", enforce_foreign_keys=False) as db:
            store = CatalogStore(db)
            stats = DerivedStatsManager(store)
            checker = ConsistencyChecker(store, stats)
            record_id = _register(store, stats, _image_dir(tmp_path, "set"))

            assert checker.remove_record(record_id) is True
            assert db.fetchone("SELECT count(*) FROM pictures_ex")[0] == 0

    def test_unknown_record(self, checker):
        assert checker.remove_record(123) is False


class TestDuplicatePath:
    """Tests for the duplicate-path check."""

    def test_find_duplicate(self, tmp_path, checker, store, stats):
        directory = _image_dir(tmp_path, "set")
        record_id = _register(store, stats, directory)

        assert checker.find_duplicate(str(directory)).id == record_id
        assert checker.find_duplicate(str(tmp_path / "other")) is None

    def test_ensure_unique_path(self, tmp_path, checker, store, stats):
        directory = _image_dir(tmp_path, "set")
        record_id = _register(store, stats, directory)

        with pytest.raises(DuplicatePathError) as excinfo:
            checker.ensure_unique_path(str(directory))
        assert excinfo.value.existing_id == record_id
        assert "set" in str(excinfo.value)

        checker.ensure_unique_path(str(tmp_path / "other"))


class TestDrift:
    """Tests for drift detection and resolution."""

    def test_consistent(self, tmp_path, checker, store, stats):
        _register(store, stats, _image_dir(tmp_path, "set"))

        report = checker.check_drift()
        assert report.state is DriftState.CONSISTENT
        assert report.catalog_count == report.view_count == 1
        assert checker.ensure_consistent() == report

    def test_empty_catalog_is_consistent(self, checker):
        assert checker.check_drift().state is DriftState.CONSISTENT

    def test_record_without_stats_is_drift(self, tmp_path, checker, store, stats):
        _register(store, stats, _image_dir(tmp_path, "one"))
        store.insert(CatalogRecord(id=None, title="t", creator="c", path=str(_image_dir(tmp_path, "two"))))

        report = checker.check_drift()
        assert report.state is DriftState.DRIFTED
        assert report.catalog_count == 2
        assert report.view_count == 1
        assert report.missing_stats == 1
        assert REBUILD_REMEDIATION in report.message

    def test_ensure_consistent_raises_with_remediation(self, tmp_path, checker, store):
        store.insert(CatalogRecord(id=None, title="t", creator="c", path=str(_image_dir(tmp_path, "one"))))

        with pytest.raises(DriftDetectedError) as excinfo:
            checker.ensure_consistent()
        assert excinfo.value.remediation == REBUILD_REMEDIATION
        assert REBUILD_REMEDIATION in str(excinfo.value)

    def test_drift_is_not_repaired_by_checking(self, tmp_path, checker, store):
        store.insert(CatalogRecord(id=None, title="t", creator="c", path=str(_image_dir(tmp_path, "one"))))

        checker.check_drift()
        assert checker.check_drift().state is DriftState.DRIFTED

    def test_resolve_drift(self, tmp_path, checker, store):
        store.insert(CatalogRecord(id=None, title="t", creator="c", path=str(_image_dir(tmp_path, "one"))))
        assert checker.check_drift().state is DriftState.DRIFTED

        rebuild, report = checker.resolve_drift()
        assert rebuild.records_rebuilt == 1
        assert report.state is DriftState.CONSISTENT

    def test_resolve_drift_with_missing_directory_stays_drifted(self, tmp_path, checker, store):
        store.insert(CatalogRecord(id=None, title="t", creator="c", path=str(tmp_path / "gone")))

        rebuild, report = checker.resolve_drift()
        assert rebuild.failures
        assert report.state is DriftState.DRIFTED


class TestPurge:
    """Tests for purge_negative_favorites."""

    @pytest.fixture
    def catalog(self, tmp_path, store, stats):
        keep = _image_dir(tmp_path, "keep")
        drop = _image_dir(tmp_path, "drop")
        _register(store, stats, keep, fav=2)
        drop_id = _register(store, stats, drop, fav=-1)
        return keep, drop, drop_id

    def test_data_only_keeps_directories(self, store, stats, catalog):
        keep, drop, drop_id = catalog

        result = purge_negative_favorites(store, stats, data_only=True)

        assert result.removed_ids == [drop_id]
        assert result.removed_count == 1
        assert result.directories_deleted == []
        assert store.get_by_id(drop_id) is None
        assert stats.get(drop_id) is None
        assert drop.exists()
        assert keep.exists()

    def test_removes_directories(self, store, stats, catalog):
        keep, drop, drop_id = catalog

        result = purge_negative_favorites(store, stats, data_only=False)

        assert result.removed_ids == [drop_id]
        assert result.directories_deleted == [str(drop)]
        assert not drop.exists()
        assert keep.exists()
        assert store.count() == 1

    def test_already_missing_directory(self, tmp_path, store, stats):
        record_id = _register(store, stats, tmp_path / "gone", fav=-3)

        result = purge_negative_favorites(store, stats, data_only=False)

        assert result.removed_ids == [record_id]
        assert result.directories_deleted == []

    def test_nothing_to_purge(self, store, stats):
        result = purge_negative_favorites(store, stats)
        assert result.removed_count == 0

    def test_directory_removal_failure_keeps_record(self, store, stats, catalog, monkeypatch):
        _, drop, drop_id = catalog

        def failing_rmtree(path):
            raise PermissionError(13, "Permission denied", path)

        monkeypatch.setattr("picturedb.consistency.purge.shutil.rmtree", failing_rmtree)
        result = purge_negative_favorites(store, stats, data_only=False)

        assert result.removed_ids == []
        assert drop_id in result.failures
        assert store.get_by_id(drop_id) is not None


class TestRemoveDirectory:
    """Tests for remove_directory."""

    def test_removes_tree(self, tmp_path):
        directory = _image_dir(tmp_path, "tree")
        (directory / "nested").mkdir()
        assert remove_directory(str(directory)) is True
        assert not directory.exists()

    def test_missing(self, tmp_path):
        assert remove_directory(str(tmp_path / "none")) is False
