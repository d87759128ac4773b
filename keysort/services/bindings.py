"""Key -> destination folder table."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from ..core.errors import InvalidDestination, ReservedKey
from ..core.models import Binding, Key
from ..core.protocols import BindingStore


logger = logging.getLogger(__name__)


class BindingTable:
    """Maps a single key to a destination directory.

    Keys are unique; binding a key again replaces its destination.
    Destinations are validated here and re-checked by the mover, since
    folders may be deleted after they were bound.
    """

    def __init__(
        self,
        store: Optional[BindingStore] = None,
        reserved_keys: Iterable[Key] = (),
    ):
        """Initialize the table.

        Args:
            store: Optional write-through persistence.
            reserved_keys: Keys that may never be bound (navigation keys).
        """
        self._bindings: dict[Key, Path] = {}
        self._store = store
        self._reserved = frozenset(reserved_keys)

    def bind(self, key: Key, destination: Path) -> None:
        """Insert or replace the binding for ``key``.

        Raises:
            ReservedKey: If the key is empty or used for navigation.
            InvalidDestination: If the destination is not an existing directory.
        """
        if not key:
            raise ReservedKey("Key must not be empty")
        if key in self._reserved:
            raise ReservedKey(f"Key {key!r} is reserved for navigation")

        destination = Path(destination).expanduser()
        if not destination.exists():
            raise InvalidDestination(f"Destination does not exist: {destination}", destination)
        if not destination.is_dir():
            raise InvalidDestination(f"Destination is not a directory: {destination}", destination)
        destination = destination.resolve()

        previous = self._bindings.get(key)
        self._bindings[key] = destination
        if self._store is not None:
            self._store.save_binding(key, destination)

        if previous is not None and previous != destination:
            logger.info("Rebound %r: %s -> %s", key, previous, destination)
        else:
            logger.info("Bound %r -> %s", key, destination)

    def unbind(self, key: Key) -> None:
        """Remove a binding; no-op if the key is not bound."""
        if self._bindings.pop(key, None) is None:
            return
        if self._store is not None:
            self._store.delete_binding(key)
        logger.info("Unbound %r", key)

    def resolve(self, key: Key) -> Optional[Binding]:
        """Look up a key without side effects."""
        destination = self._bindings.get(key)
        if destination is None:
            return None
        return Binding(key=key, destination=destination)

    def bindings(self) -> tuple[Binding, ...]:
        """All bindings, sorted by key for display."""
        return tuple(
            Binding(key=key, destination=dest)
            for key, dest in sorted(self._bindings.items())
        )

    def load(self) -> int:
        """Rehydrate from the store without re-validating destinations.

        A folder that vanished since it was bound is still loaded; the
        mover reports it when the key is used.

        Returns:
            Number of bindings loaded.
        """
        if self._store is None:
            return 0
        loaded = 0
        for key, destination in self._store.load_bindings().items():
            if key in self._reserved:
                logger.warning("Ignoring stored binding for reserved key %r", key)
                continue
            self._bindings[key] = destination
            loaded += 1
        return loaded

    def __contains__(self, key: object) -> bool:
        return key in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)
