"""Key-value persistence abstractions."""

import json
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class StoredItem:
    """A key with its stored value, ``None`` when absent."""

    key: str
    value: Any


class KeyValueStore(Protocol):
    """Asynchronous key-value store holding JSON-compatible values."""

    async def get(self, key: str) -> Any | None:
        """Return the stored value, or None when the key is absent."""

    async def set(self, key: str, value: Any) -> None:
        """Store a value, replacing any previous one."""

    async def remove(self, key: str) -> None:
        """Remove a key if present."""

    async def get_multiple(self, keys: list[str]) -> list[StoredItem]:
        """Return one item per requested key, in request order."""

    async def remove_multiple(self, keys: list[str]) -> None:
        """Remove several keys at once."""


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store; values are serialized so callers never share state."""

    _values: dict[str, str]

    def __init__(self) -> None:
        self._values = {}

    async def get(self, key: str) -> Any | None:
        """Return a copy of the stored value."""
        raw = self._values.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        """Store a JSON-serialized copy of ``value``."""
        self._values[key] = json.dumps(value)

    async def remove(self, key: str) -> None:
        """Remove a key if present."""
        self._values.pop(key, None)

    async def get_multiple(self, keys: list[str]) -> list[StoredItem]:
        """Return stored values for several keys."""
        return [StoredItem(key=key, value=await self.get(key)) for key in keys]

    async def remove_multiple(self, keys: list[str]) -> None:
        """Remove several keys."""
        for key in keys:
            self._values.pop(key, None)
