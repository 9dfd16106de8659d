"""Key-Value Storage - Persistence for planner state.

This module handles all storage I/O. Each piece of state lives in its own
string-keyed slot; values are encoded according to their type. Nothing in
here raises past PersistedSlot: unreadable values fall back to defaults and
failed writes are logged.
"""

import json
import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel, TypeAdapter


logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


@dataclass
class StorageConfig:
    """Configuration for the storage medium.

    Attributes:
        path: JSON file holding all slots (None keeps state in memory only)
    """

    path: str | None = None


class KeyValueStore(Protocol):
    """String-keyed storage medium."""

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, raw: str) -> bool: ...


class MemoryKeyValueStore:
    """Dict-backed store; state lasts for the process lifetime."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.data.get(key)

    def write(self, key: str, raw: str) -> bool:
        self.data[key] = raw
        return True


class FileKeyValueStore:
    """Store keeping every slot in a single JSON object on disk.

    File structure:
        { "<key>": "<raw encoded string>", ... }
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        try:
            with self.path.open(encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Failed to read storage file %s: %s", self.path, str(e))
            return {}

        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: not a JSON object", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def read(self, key: str) -> str | None:
        logger.debug("Reading slot: %s", key)
        return self._load().get(key)

    def write(self, key: str, raw: str) -> bool:
        """Write one slot, rewriting the file atomically.

        Returns:
            True if successful
        """
        data = self._load()
        data[key] = raw
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
            return True
        except OSError as e:
            logger.error("Failed to write storage file %s: %s", self.path, str(e))
            return False


def create_store(config: StorageConfig | None = None) -> KeyValueStore:
    """Build the storage medium described by config."""
    config = config or StorageConfig()
    if config.path:
        logger.info("Using file storage at %s", config.path)
        return FileKeyValueStore(config.path)
    logger.info("Using in-memory storage")
    return MemoryKeyValueStore()


# ==================== Codecs ====================


class Codec(Protocol[T]):
    def encode(self, value: T) -> str: ...

    def decode(self, raw: str) -> T: ...


class NumberCodec:
    """Numbers as decimal strings: 2000, 40.5."""

    def encode(self, value: float) -> str:
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)

    def decode(self, raw: str) -> float:
        text = raw.strip()
        try:
            return int(text)
        except ValueError:
            value = float(text)
        if not math.isfinite(value):
            raise ValueError(f"Not a finite number: {raw!r}")
        return value


class BooleanCodec:
    """Booleans as JSON literals: true, false."""

    def encode(self, value: bool) -> str:
        return json.dumps(bool(value))

    def decode(self, raw: str) -> bool:
        value = json.loads(raw)
        if not isinstance(value, bool):
            raise ValueError(f"Not a boolean: {raw!r}")
        return value


class StringCodec:
    """Strings pass through unencoded."""

    def encode(self, value: str) -> str:
        return value

    def decode(self, raw: str) -> str:
        return raw


class JsonCodec:
    """Objects and arrays as JSON text."""

    def encode(self, value: Any) -> str:
        return json.dumps(value)

    def decode(self, raw: str) -> Any:
        return json.loads(raw)


class ModelListCodec(Generic[M]):
    """Lists of pydantic models as a JSON array of objects."""

    def __init__(self, model: type[M]) -> None:
        self._adapter = TypeAdapter(list[model])  # type: ignore[valid-type]

    def encode(self, value: list[M]) -> str:
        return self._adapter.dump_json(value).decode()

    def decode(self, raw: str) -> list[M]:
        return self._adapter.validate_json(raw)


def codec_for(default: Any) -> Codec:
    """Pick a codec from the runtime type of a slot's default value.

    bool is checked before numbers since it is a subclass of int.
    """
    if isinstance(default, bool):
        return BooleanCodec()
    if isinstance(default, (int, float)):
        return NumberCodec()
    if isinstance(default, str):
        return StringCodec()
    return JsonCodec()


# ==================== Persisted Slot ====================


class PersistedSlot(Generic[T]):
    """A single value remembered in a KeyValueStore.

    The value is loaded once on creation. Updates change the in-memory value
    first and then write through; the in-memory value stays authoritative
    even when the write fails.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        default: T,
        codec: Codec | None = None,
    ) -> None:
        """Initialize and load the slot.

        Args:
            store: Storage medium
            key: Slot name
            default: Value used when nothing valid is stored
            codec: Encoding to use (picked from default's type if omitted)
        """
        self.store = store
        self.key = key
        self.default = default
        self.codec = codec or codec_for(default)
        self._value = self._load()

    def _load(self) -> T:
        try:
            raw = self.store.read(self.key)
            if raw is None:
                return self.default
            return self.codec.decode(raw)
        except Exception as e:
            logger.debug("Using default for %s: %s", self.key, str(e))
            return self.default

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Update the value and persist it. Never raises on storage failure."""
        self._value = value
        try:
            ok = self.store.write(self.key, self.codec.encode(value))
        except Exception as e:
            logger.warning("Failed to save %s: %s", self.key, str(e))
            return
        if not ok:
            logger.warning("Failed to save %s", self.key)
