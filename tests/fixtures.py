"""Test fixtures for sorting sessions.

Builds a source folder of small but real image files plus destination
folders, and knows how to snapshot the resulting file layout.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image


COLORS = ["red", "green", "blue", "yellow", "purple", "orange"]


def make_image(path: Path, color: str = "red", size: tuple[int, int] = (16, 16)) -> Path:
    """Write a small image; the format follows the file suffix."""
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new("RGB", size, color=color)
    fmt = "JPEG" if path.suffix.lower() in (".jpg", ".jpeg") else None
    img.save(path, format=fmt)
    return path


def snapshot(*roots: Path) -> dict[str, bytes]:
    """Map every file under ``roots`` to its contents, skipping session databases."""
    files = {}
    for root in roots:
        for path in sorted(root.rglob("*")):
            if path.is_file() and not path.name.startswith(".keysort"):
                files[str(path)] = path.read_bytes()
    return files


@dataclass
class SortWorkspace:
    """A source folder with images and a set of destination folders."""
    root: Path
    images: list[str] = field(default_factory=lambda: ["a.png", "b.png", "c.png"])
    destinations: list[str] = field(default_factory=lambda: ["dest1", "dest2"])

    def __post_init__(self) -> None:
        self.source = self.root / "source"
        self.source.mkdir(parents=True, exist_ok=True)
        for index, name in enumerate(self.images):
            make_image(self.source / name, COLORS[index % len(COLORS)])
        for name in self.destinations:
            (self.root / name).mkdir(parents=True, exist_ok=True)

    def dest(self, name: str) -> Path:
        return self.root / name

    def snapshot(self) -> dict[str, bytes]:
        return snapshot(self.source, *(self.dest(name) for name in self.destinations))
