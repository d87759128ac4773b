"""Session settings with validation."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .models import VerifyMode


DEFAULT_EXTENSIONS = [".jpg", ".jpeg", ".png", ".gif", ".webp"]

DB_FILENAME = ".keysort.sqlite"


class SortSettings(BaseModel):
    """Configuration for a sorting session.

    All options can also be supplied via CLI flags. CLI flags override
    config file values.
    """
    source_dir: Path = Field(
        ...,  # Required - no default
        description="Folder whose images are triaged"
    )
    db_path: Optional[Path] = Field(
        default=None,
        description="Path to SQLite session database (default: source_dir/.keysort.sqlite)"
    )
    extensions: List[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS),
        description="Image file suffixes picked up from the source folder"
    )
    next_key: str = Field(default="j", description="Key that shows the next image")
    previous_key: str = Field(default="k", description="Key that shows the previous image")
    undo_key: str = Field(default="u", description="Key that undoes the last move")
    history_limit: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum number of undoable moves kept (None=unbounded)"
    )
    verify_mode: VerifyMode = Field(
        default=VerifyMode.HASH,
        description="Check used before deleting the original of a cross-volume move"
    )
    persist_history: bool = Field(
        default=True,
        description="Keep move history in the database so undo survives a restart"
    )
    bindings: Dict[str, Path] = Field(
        default_factory=dict,
        description="Initial key -> destination folder bindings"
    )

    @field_validator("source_dir")
    @classmethod
    def expand_source(cls, value: Path) -> Path:
        return value.expanduser().resolve()

    @field_validator("db_path")
    @classmethod
    def expand_db_path(cls, value: Optional[Path]) -> Optional[Path]:
        if value is None:
            return None
        return value.expanduser().resolve()

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, value: List[str]) -> List[str]:
        normalized = []
        for ext in value:
            ext = ext.strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                ext = f".{ext}"
            if ext not in normalized:
                normalized.append(ext)
        if not normalized:
            raise ValueError("At least one image extension is required")
        return normalized

    @field_validator("bindings")
    @classmethod
    def expand_bindings(cls, value: Dict[str, Path]) -> Dict[str, Path]:
        return {key: Path(dest).expanduser() for key, dest in value.items()}

    @model_validator(mode="after")
    def check_navigation_keys(self) -> "SortSettings":
        keys = [self.next_key, self.previous_key, self.undo_key]
        if any(not key for key in keys):
            raise ValueError("Navigation keys must not be empty")
        if len(set(keys)) != len(keys):
            raise ValueError("next_key, previous_key and undo_key must be distinct")
        return self

    def resolve_db_path(self) -> Path:
        if self.db_path:
            return self.db_path
        return self.source_dir / DB_FILENAME


def load_settings(path: Optional[Path] = None, **overrides: Any) -> SortSettings:
    """Load settings from a JSON file and apply overrides.

    Args:
        path: Optional JSON settings file.
        **overrides: Values that replace file values; ``None`` values are ignored.

    Returns:
        Validated settings.
    """
    data: Dict[str, Any] = {}
    if path is not None:
        data = json.loads(Path(path).expanduser().read_text(encoding="utf-8"))
    data.update({key: value for key, value in overrides.items() if value is not None})
    return SortSettings.model_validate(data)
