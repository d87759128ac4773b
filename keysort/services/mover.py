"""File relocation service.

Moves one file at a time so that it either fully relocates or stays where
it was. On one volume this is a plain rename. Across volumes the file is
copied to a hidden partial name, verified, renamed into place, and only
then is the original deleted. Each cross-volume step is journaled so an
interrupted move can be finished or rolled back on the next start.
"""
from __future__ import annotations

import errno
import hashlib
import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from ..core.errors import (
    DestinationUnwritable,
    SortError,
    SourceMissing,
    UndoConflict,
)
from ..core.models import MoveRecord, MoveResult, VerifyMode
from ..core.protocols import OperationJournal


logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".keysort-partial"

# FAT/exFAT store mtimes with 2 second resolution
MTIME_TOLERANCE = 2.0

CHUNK_SIZE = 1024 * 1024


def partial_path(target: Path) -> Path:
    """Hidden name a cross-volume copy is written to before it is verified."""
    return target.with_name(f".{target.name}{PARTIAL_SUFFIX}")


def unique_path(directory: Path, name: str) -> Path:
    """Find the first free name in ``directory``.

    ``photo.png`` is tried first, then ``photo (2).png``, ``photo (3).png``
    and so on. A name whose partial copy exists counts as taken.
    """
    candidate = directory / name
    stem = Path(name).stem
    suffix = Path(name).suffix
    idx = 2
    while _occupied(candidate):
        candidate = directory / f"{stem} ({idx}){suffix}"
        idx += 1
    return candidate


def _occupied(path: Path) -> bool:
    return path.exists() or path.is_symlink() or partial_path(path).exists()


def file_digest(path: Path) -> str:
    """SHA-256 of a file's contents."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def files_match(original: Path, copy: Path, mode: VerifyMode = VerifyMode.HASH) -> bool:
    """Check that ``copy`` is a faithful copy of ``original``."""
    a = original.stat()
    b = copy.stat()
    if a.st_size != b.st_size:
        return False
    if mode == VerifyMode.SIZE:
        return abs(a.st_mtime - b.st_mtime) <= MTIME_TOLERANCE
    return file_digest(original) == file_digest(copy)


def same_volume(path: Path, directory: Path) -> bool:
    """Check if a rename from ``path`` into ``directory`` can stay on one device."""
    try:
        return path.stat().st_dev == directory.stat().st_dev
    except OSError:
        return False


class FileMover:
    """Relocates single files, never overwriting an existing one.

    Holds no state between calls apart from its collaborators.
    """

    def __init__(
        self,
        journal: Optional[OperationJournal] = None,
        verify_mode: VerifyMode = VerifyMode.HASH,
    ):
        """Initialize mover.

        Args:
            journal: Optional pending-operation journal for crash recovery.
            verify_mode: Check applied to cross-volume copies.
        """
        self._journal = journal
        self._verify_mode = verify_mode

    def move(self, source_path: Path, destination_dir: Path) -> MoveResult:
        """Move a file into a directory.

        The original filename is kept unless taken, in which case a
        numbered name is used (see ``unique_path``).

        Args:
            source_path: File to move.
            destination_dir: Directory to move it into.

        Returns:
            MoveResult with the path actually used.

        Raises:
            SourceMissing: The file no longer exists.
            DestinationUnwritable: The directory is gone, read-only, or the copy failed.
        """
        source_path = Path(source_path)
        destination_dir = Path(destination_dir)

        if not source_path.is_file():
            raise SourceMissing(f"File not found: {source_path}", source_path)
        if not destination_dir.is_dir():
            raise DestinationUnwritable(
                f"Destination folder is missing: {destination_dir}", destination_dir
            )
        if not os.access(destination_dir, os.W_OK | os.X_OK):
            raise DestinationUnwritable(
                f"Destination folder is not writable: {destination_dir}", destination_dir
            )

        target = unique_path(destination_dir, source_path.name)
        if target.name != source_path.name:
            logger.debug("Name collision in %s, using %s", destination_dir, target.name)

        cross_volume = self._relocate(source_path, target)
        logger.info("Moved %s -> %s", source_path, target)
        return MoveResult(source_path=source_path, final_path=target, cross_volume=cross_volume)

    def reverse(self, record: MoveRecord) -> None:
        """Move a file back to its original path.

        Raises:
            UndoConflict: Something now exists at the original path.
            SourceMissing: The moved file is no longer at its final path.
            DestinationUnwritable: The original folder is gone or read-only.
        """
        final_path = record.final_path
        original_path = record.original_path

        if original_path.exists() or original_path.is_symlink():
            raise UndoConflict(
                f"Cannot undo, file already exists: {original_path}", original_path
            )
        if not final_path.is_file():
            raise SourceMissing(f"Moved file not found: {final_path}", final_path)
        if not original_path.parent.is_dir():
            raise DestinationUnwritable(
                f"Original folder is missing: {original_path.parent}", original_path.parent
            )

        self._relocate(final_path, original_path)
        logger.info("Restored %s -> %s", final_path, original_path)

    # --- Internals ---

    def _relocate(self, source: Path, target: Path) -> bool:
        """Move ``source`` to the free path ``target``.

        Returns:
            True if the move crossed volumes.
        """
        if same_volume(source, target.parent):
            try:
                self._rename(source, target)
                return False
            except OSError as e:
                if e.errno != errno.EXDEV:
                    raise self._map_error(e, source, target) from e
                logger.debug("Rename crossed devices, falling back to copy: %s", source)
        self._copy_verify_delete(source, target)
        return True

    def _rename(self, source: Path, target: Path) -> None:
        if target.exists() or target.is_symlink():
            raise DestinationUnwritable(f"Target already exists: {target}", target)
        os.rename(source, target)

    def _copy_verify_delete(self, source: Path, target: Path) -> None:
        """Copy, verify, rename into place, then delete the original."""
        partial = partial_path(target)
        op_id = self._begin(source, target)

        try:
            try:
                shutil.copy2(source, partial)
                matched = files_match(source, partial, self._verify_mode)
            except OSError as e:
                self._discard(partial)
                raise self._map_error(e, source, target) from e

            if not matched:
                self._discard(partial)
                raise DestinationUnwritable(f"Copy verification failed: {target}", target)

            if target.exists():
                self._discard(partial)
                raise DestinationUnwritable(f"Target already exists: {target}", target)
            try:
                os.replace(partial, target)
            except OSError as e:
                self._discard(partial)
                raise self._map_error(e, source, target) from e

            try:
                source.unlink()
            except OSError as e:
                # Original still intact, roll the copy back
                self._discard(target)
                raise DestinationUnwritable(
                    f"Could not remove original {source}: {e}", source
                ) from e
        except SortError:
            self._finish(op_id)
            raise

        self._finish(op_id)

    def _begin(self, source: Path, target: Path) -> Optional[int]:
        if self._journal is None:
            return None
        return self._journal.add_pending_operation(str(source), str(target), "move")

    def _finish(self, op_id: Optional[int]) -> None:
        if self._journal is not None and op_id is not None:
            self._journal.complete_pending_operation(op_id)

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)

    @staticmethod
    def _map_error(error: OSError, source: Path, target: Path) -> SortError:
        """Translate an OSError into the matching sort error."""
        if isinstance(error, FileNotFoundError) and not source.exists():
            return SourceMissing(f"File not found: {source}", source)
        return DestinationUnwritable(f"Cannot write {target}: {error}", target)
