"""Tests for the command line interface."""

# pylint: disable=redefined-outer-name

from pathlib import Path

import pytest
from click.testing import CliRunner

from picturedb.catalog import CatalogStore
from picturedb.cli import cli
from picturedb.database import CatalogRecord, Database, QueryTarget


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "pictures.db"


@pytest.fixture
def album(tmp_path: Path) -> Path:
    directory = tmp_path / "album"
    directory.mkdir()
    for name in ["01.jpg", "02.jpg", "03.png"]:
        (directory / name).write_bytes(b"x")
    return directory


def _invoke(runner: CliRunner, db_path: Path, *args: str, **kwargs):
    return runner.invoke(cli, [*args, "--database", str(db_path)], **kwargs)


class TestAdd:
    """Tests for the add command."""

    def test_add(self, runner, db_path, album):
        result = _invoke(runner, db_path, "add", str(album), "--title", "Trip")

        assert result.exit_code == 0, result.output
        assert 'id=1: "Trip" added.' in result.output
        assert "3 images" in result.output

    def test_add_duplicate(self, runner, db_path, album):
        _invoke(runner, db_path, "add", str(album), "--title", "Trip")
        result = _invoke(runner, db_path, "add", str(album) + "/", "--title", "Again")

        assert result.exit_code == 1
        assert "already registered" in result.output

    def test_add_missing_directory(self, runner, db_path, tmp_path):
        result = _invoke(runner, db_path, "add", str(tmp_path / "none"))

        assert result.exit_code == 1
        assert "Directory does not exist" in result.output


class TestQueries:
    """Tests for list, show and related commands."""

    def test_list(self, runner, db_path, album):
        _invoke(runner, db_path, "add", str(album), "--title", "Trip", "--mark", "red")

        result = _invoke(runner, db_path, "list", "--mark", "red")
        assert result.exit_code == 0
        assert "Trip" in result.output

        result = _invoke(runner, db_path, "list", "--mark", "blue")
        assert "No records found." in result.output

    def test_list_warns_on_drift(self, runner, db_path, album):
        with Database(db_path) as db:
            CatalogStore(db).insert(CatalogRecord(id=None, title="Raw", creator="", path=str(album)))

        result = _invoke(runner, db_path, "list")
        assert "picturedb refresh" in result.output

    def test_show_counts_view(self, runner, db_path, album):
        _invoke(runner, db_path, "add", str(album), "--title", "Trip")

        result = _invoke(runner, db_path, "show", "1")
        assert result.exit_code == 0
        assert "views:   1" in result.output

        with Database(db_path) as db:
            assert CatalogStore(db).get_by_id(1).count == 1

    def test_show_unknown(self, runner, db_path):
        result = _invoke(runner, db_path, "show", "9")
        assert result.exit_code == 1

    def test_images(self, runner, db_path, album):
        _invoke(runner, db_path, "add", str(album))

        result = _invoke(runner, db_path, "images", "1", "--desc")
        lines = result.output.splitlines()
        assert lines[1].endswith("03.png")
        assert lines[-1].endswith("01.jpg")

    def test_update_path_refreshes_stats(self, runner, db_path, album, tmp_path):
        other = tmp_path / "other"
        other.mkdir()
        (other / "only.gif").write_bytes(b"x")
        _invoke(runner, db_path, "add", str(album))

        result = _invoke(runner, db_path, "update", "1", "--path", str(other))
        assert result.exit_code == 0, result.output

        with Database(db_path) as db:
            combined = CatalogStore(db).get_by_id(1, QueryTarget.COMBINED)
        assert combined.path == str(other)
        assert combined.file_count == 1

    def test_update_to_missing_directory(self, runner, db_path, album, tmp_path):
        _invoke(runner, db_path, "add", str(album))

        result = _invoke(runner, db_path, "update", "1", "--path", str(tmp_path / "none"))
        assert result.exit_code == 1
        assert "Directory does not exist" in result.output

    def test_fav(self, runner, db_path, album):
        _invoke(runner, db_path, "add", str(album))
        result = _invoke(runner, db_path, "fav", "1", "--down")
        assert "fav=-1" in result.output

    def test_marks_and_creators(self, runner, db_path, album):
        _invoke(runner, db_path, "add", str(album), "--mark", "red", "--creator", "ann")

        assert _invoke(runner, db_path, "marks").output.strip() == "red"
        assert "ann" in _invoke(runner, db_path, "creators").output


class TestNav:
    """Tests for the nav command."""

    def test_next(self, runner, db_path, album):
        result = _invoke(runner, db_path, "nav", f"{album}/01.jpg", "--move", "next")
        assert result.exit_code == 0
        assert "2/3" in result.output
        assert "02.jpg" in result.output

    def test_next_at_end(self, runner, db_path, album):
        result = _invoke(runner, db_path, "nav", f"{album}/03.png", "--move", "next")
        assert "Already at the last image." in result.output
        assert "3/3" in result.output


class TestMaintenance:
    """Tests for refresh, check, status and purge."""

    def test_refresh_resolves_drift(self, runner, db_path, album):
        with Database(db_path) as db:
            CatalogStore(db).insert(CatalogRecord(id=None, title="Raw", creator="", path=str(album)))

        assert "drifted" in _invoke(runner, db_path, "status").output

        result = _invoke(runner, db_path, "refresh")
        assert result.exit_code == 0
        assert "consistent" in result.output
        assert "consistent" in _invoke(runner, db_path, "status").output

    def test_check(self, runner, db_path, album, tmp_path):
        _invoke(runner, db_path, "add", str(album))
        with Database(db_path) as db:
            CatalogStore(db).insert(
                CatalogRecord(id=None, title="Gone", creator="", path=str(tmp_path / "gone"))
            )

        result = _invoke(runner, db_path, "check")
        assert str(tmp_path / "gone") in result.output

        _invoke(runner, db_path, "check", "--auto-delete")
        with Database(db_path) as db:
            assert CatalogStore(db).count() == 1

    def test_purge_confirmed(self, runner, db_path, album):
        _invoke(runner, db_path, "add", str(album))
        _invoke(runner, db_path, "fav", "1", "--down")

        result = _invoke(runner, db_path, "purge", input="y\n")

        assert result.exit_code == 0
        assert "Done (1 items removed)." in result.output
        assert not album.exists()

    def test_purge_data_only(self, runner, db_path, album):
        _invoke(runner, db_path, "add", str(album))
        _invoke(runner, db_path, "fav", "1", "--down")

        result = _invoke(runner, db_path, "purge", "--data-only", "--yes")

        assert "Done (1 items removed)." in result.output
        assert album.exists()

    def test_purge_cancelled(self, runner, db_path, album):
        _invoke(runner, db_path, "add", str(album))
        _invoke(runner, db_path, "fav", "1", "--down")

        result = _invoke(runner, db_path, "purge", input="n\n")

        assert result.exit_code == 9
        assert album.exists()
        with Database(db_path) as db:
            assert CatalogStore(db).count() == 1
