"""Tests for the file mover."""
import errno
import pytest
from pathlib import Path
from unittest.mock import patch

from keysort.core.errors import DestinationUnwritable, SourceMissing, UndoConflict
from keysort.core.models import MoveRecord, VerifyMode
from keysort.persistence.database import SQLiteSessionStore
from keysort.services.mover import (
    FileMover,
    file_digest,
    files_match,
    partial_path,
    unique_path,
)
from .fixtures import make_image


@pytest.fixture
def source(tmp_path: Path) -> Path:
    return make_image(tmp_path / "source" / "a.png", "red")


@pytest.fixture
def dest(tmp_path: Path) -> Path:
    path = tmp_path / "dest1"
    path.mkdir()
    return path


class TestUniquePath:
    """Tests for collision naming."""

    def test_free_name(self, dest):
        assert unique_path(dest, "a.png") == dest / "a.png"

    def test_numbered_names(self, dest):
        """Test collisions get (2), (3), ... suffixes."""
        (dest / "a.png").write_text("1")
        assert unique_path(dest, "a.png") == dest / "a (2).png"
        (dest / "a (2).png").write_text("2")
        assert unique_path(dest, "a.png") == dest / "a (3).png"

    def test_partial_counts_as_taken(self, dest):
        partial_path(dest / "a.png").write_text("partial")
        assert unique_path(dest, "a.png") == dest / "a (2).png"

    def test_no_suffix(self, dest):
        (dest / "README").write_text("x")
        assert unique_path(dest, "README") == dest / "README (2)"


class TestFileMover:
    """Tests for same-volume moves."""

    @pytest.fixture
    def mover(self):
        return FileMover()

    def test_move(self, mover, source, dest):
        """Test a plain move keeps the filename."""
        content = source.read_bytes()

        result = mover.move(source, dest)

        assert result.final_path == dest / "a.png"
        assert result.cross_volume is False
        assert not source.exists()
        assert result.final_path.read_bytes() == content

    def test_collision_never_overwrites(self, mover, tmp_path, dest):
        """Test two same-named files both survive in one destination."""
        first = make_image(tmp_path / "one" / "a.png", "red")
        second = make_image(tmp_path / "two" / "a.png", "blue")
        first_bytes = first.read_bytes()
        second_bytes = second.read_bytes()

        r1 = mover.move(first, dest)
        r2 = mover.move(second, dest)

        assert r1.final_path == dest / "a.png"
        assert r2.final_path == dest / "a (2).png"
        assert r2.renamed
        assert r1.final_path.read_bytes() == first_bytes
        assert r2.final_path.read_bytes() == second_bytes

    def test_source_missing(self, mover, tmp_path, dest):
        with pytest.raises(SourceMissing):
            mover.move(tmp_path / "nope.png", dest)

    def test_destination_removed(self, mover, source, dest):
        """Test a deleted destination folder is reported and the file stays."""
        dest.rmdir()
        with pytest.raises(DestinationUnwritable):
            mover.move(source, dest)
        assert source.exists()

    def test_destination_not_writable(self, mover, source, dest):
        with patch("keysort.services.mover.os.access", return_value=False):
            with pytest.raises(DestinationUnwritable):
                mover.move(source, dest)
        assert source.exists()

    def test_rename_permission_error(self, mover, source, dest):
        with patch("keysort.services.mover.os.rename", side_effect=PermissionError("denied")):
            with pytest.raises(DestinationUnwritable):
                mover.move(source, dest)
        assert source.exists()

    def test_reverse(self, mover, source, dest):
        """Test reverse restores the original path."""
        content = source.read_bytes()
        result = mover.move(source, dest)
        record = MoveRecord("id", source, result.final_path)

        mover.reverse(record)

        assert source.read_bytes() == content
        assert not result.final_path.exists()

    def test_reverse_conflict(self, mover, source, dest):
        """Test reverse refuses to overwrite a new file at the original path."""
        result = mover.move(source, dest)
        source.write_text("someone else")
        record = MoveRecord("id", source, result.final_path)

        with pytest.raises(UndoConflict):
            mover.reverse(record)

        assert source.read_text() == "someone else"
        assert result.final_path.exists()

    def test_reverse_moved_file_missing(self, mover, source, dest):
        result = mover.move(source, dest)
        result.final_path.unlink()
        with pytest.raises(SourceMissing):
            mover.reverse(MoveRecord("id", source, result.final_path))

    def test_reverse_original_folder_gone(self, mover, tmp_path, dest):
        source = make_image(tmp_path / "gone" / "a.png")
        result = mover.move(source, dest)
        source.parent.rmdir()
        with pytest.raises(DestinationUnwritable):
            mover.reverse(MoveRecord("id", source, result.final_path))


class TestCrossVolumeMove:
    """Tests for copy-verify-delete moves."""

    @pytest.fixture
    def store(self, tmp_path: Path):
        store = SQLiteSessionStore(tmp_path / "session.db")
        yield store
        store.close()

    @pytest.fixture
    def mover(self, store):
        return FileMover(journal=store)

    @pytest.fixture(autouse=True)
    def other_volume(self):
        with patch("keysort.services.mover.same_volume", return_value=False):
            yield

    def test_copy_move(self, mover, store, source, dest):
        """Test a cross-volume move copies, verifies and deletes."""
        content = source.read_bytes()

        result = mover.move(source, dest)

        assert result.cross_volume is True
        assert not source.exists()
        assert result.final_path.read_bytes() == content
        assert not partial_path(result.final_path).exists()
        assert store.get_pending_operations() == []

    def test_size_verify_mode(self, store, source, dest):
        mover = FileMover(journal=store, verify_mode=VerifyMode.SIZE)
        result = mover.move(source, dest)
        assert result.final_path.exists()
        assert not source.exists()

    def test_exdev_fallback(self, store, source, dest):
        """Test a rename failing with EXDEV falls back to copying."""
        mover = FileMover(journal=store)
        with patch("keysort.services.mover.same_volume", return_value=True), \
                patch("keysort.services.mover.os.rename", side_effect=OSError(errno.EXDEV, "cross-device")):
            result = mover.move(source, dest)
        assert result.cross_volume is True
        assert result.final_path.exists()
        assert not source.exists()

    def test_verification_failure_keeps_original(self, mover, store, source, dest):
        """Test the original survives a copy that does not verify."""
        with patch("keysort.services.mover.files_match", return_value=False):
            with pytest.raises(DestinationUnwritable):
                mover.move(source, dest)

        assert source.exists()
        assert list(dest.iterdir()) == []
        assert store.get_pending_operations() == []

    def test_copy_failure_keeps_original(self, mover, source, dest):
        with patch("keysort.services.mover.shutil.copy2", side_effect=OSError(errno.ENOSPC, "disk full")):
            with pytest.raises(DestinationUnwritable):
                mover.move(source, dest)
        assert source.exists()
        assert list(dest.iterdir()) == []

    def test_original_not_deletable_rolls_back(self, mover, source, dest):
        """Test the copy is removed again if the original cannot be deleted."""
        real_unlink = Path.unlink

        def fake_unlink(self, missing_ok=False):
            if self == source:
                raise PermissionError("read-only source")
            return real_unlink(self, missing_ok=missing_ok)

        with patch.object(Path, "unlink", fake_unlink):
            with pytest.raises(DestinationUnwritable):
                mover.move(source, dest)

        assert source.exists()
        assert list(dest.iterdir()) == []

    def test_replace_failure_rolls_back(self, mover, store, source, dest):
        """Test a failing rename of the verified copy leaves no partial file behind."""
        with patch("keysort.services.mover.os.replace", side_effect=PermissionError(errno.EACCES, "denied")):
            with pytest.raises(DestinationUnwritable):
                mover.move(source, dest)

        assert source.exists()
        assert list(dest.iterdir()) == []
        assert store.get_pending_operations() == []

    def test_verify_read_failure_rolls_back(self, mover, store, source, dest):
        with patch("keysort.services.mover.files_match", side_effect=OSError(errno.EIO, "I/O error")):
            with pytest.raises(DestinationUnwritable):
                mover.move(source, dest)

        assert source.exists()
        assert list(dest.iterdir()) == []
        assert store.get_pending_operations() == []

    def test_reverse_across_volumes(self, mover, source, dest):
        content = source.read_bytes()
        result = mover.move(source, dest)
        mover.reverse(MoveRecord("id", source, result.final_path))
        assert source.read_bytes() == content
        assert not result.final_path.exists()


class TestVerification:
    """Tests for copy verification helpers."""

    def test_digest_differs(self, tmp_path):
        a = make_image(tmp_path / "a.png", "red")
        b = make_image(tmp_path / "b.png", "blue")
        assert file_digest(a) != file_digest(b)

    def test_files_match_hash(self, tmp_path):
        a = tmp_path / "a.bin"
        b = tmp_path / "b.bin"
        a.write_bytes(b"12345")
        b.write_bytes(b"12345")
        assert files_match(a, b, VerifyMode.HASH)
        b.write_bytes(b"12346")
        assert not files_match(a, b, VerifyMode.HASH)

    def test_files_match_size_differs(self, tmp_path):
        a = tmp_path / "a.bin"
        b = tmp_path / "b.bin"
        a.write_bytes(b"1234")
        b.write_bytes(b"12345")
        assert not files_match(a, b, VerifyMode.SIZE)
