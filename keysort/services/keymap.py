"""Translation of raw keys into controller commands."""
from __future__ import annotations

from ..core.models import Command, Key


class KeyMap:
    """Maps navigation keys to commands; every other key is a key press."""

    def __init__(self, next_key: Key = "j", previous_key: Key = "k", undo_key: Key = "u"):
        keys = (next_key, previous_key, undo_key)
        if any(not key for key in keys):
            raise ValueError("Navigation keys must not be empty")
        if len(set(keys)) != len(keys):
            raise ValueError("Navigation keys must be distinct")
        self._commands = {
            next_key: Command.next(),
            previous_key: Command.previous(),
            undo_key: Command.undo(),
        }

    @classmethod
    def from_settings(cls, settings) -> "KeyMap":
        return cls(settings.next_key, settings.previous_key, settings.undo_key)

    @property
    def reserved_keys(self) -> frozenset[Key]:
        return frozenset(self._commands)

    def is_reserved(self, key: Key) -> bool:
        return key in self._commands

    def translate(self, key: Key) -> Command:
        return self._commands.get(key) or Command.key_press(key)
