"""Source folder scanning service."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Optional

from ..core.config import DEFAULT_EXTENSIONS
from ..core.models import ImageEntry
from .mover import PARTIAL_SUFFIX


def is_image(path: Path, extensions: Iterable[str]) -> bool:
    """Check file extension against the accepted image suffixes (case-insensitive)."""
    return path.suffix.lower() in extensions


def is_partial(path: Path) -> bool:
    """Check if a file is a leftover cross-volume copy."""
    return path.name.startswith(".") and path.name.endswith(PARTIAL_SUFFIX)


class SourceScanner:
    """Lists the images waiting in a source folder.

    Only top-level regular files are considered; the queue is populated once
    per session from this listing. Symbolic links are skipped.
    """

    def __init__(self, extensions: Optional[Iterable[str]] = None):
        """Initialize the scanner.

        Args:
            extensions: Accepted suffixes with leading dot, lower case.
        """
        self._extensions = frozenset(e.lower() for e in (extensions or DEFAULT_EXTENSIONS))

    def iter_images(self, source_dir: Path) -> Iterator[Path]:
        """Yield image paths in a stable, case-insensitive name order."""
        if not source_dir.is_dir():
            raise NotADirectoryError(f"Not a directory: {source_dir}")

        files = []
        for entry in source_dir.iterdir():
            if entry.is_symlink():
                continue
            if not entry.is_file() or is_partial(entry):
                continue
            if is_image(entry, self._extensions):
                files.append(entry)

        files.sort(key=lambda p: (p.name.casefold(), p.name))
        yield from files

    def scan(self, source_dir: Path) -> list[ImageEntry]:
        """Build queue entries for every image in ``source_dir``."""
        return [ImageEntry(source_path=path) for path in self.iter_images(source_dir)]

    def count(self, source_dir: Path) -> int:
        return sum(1 for _ in self.iter_images(source_dir))
