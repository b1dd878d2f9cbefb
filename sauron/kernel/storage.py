"""
Sauron Kernel — Snapshot Persistence

Serializes a build to a versioned JSON snapshot and back, and keeps it in a
key-value store. The snapshot mirrors BuildState 1:1 plus a `version` field.

This is where IO happens. The reducer is pure.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError as PartValidationError

from sauron.config import settings
from sauron.kernel.types import SNAPSHOT_VERSION, BuildState

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class SnapshotParseError(Exception):
    """Snapshot exists but its JSON or part data is malformed."""
    pass


class VersionNotSupported(Exception):
    """Snapshot version is not one this engine can read."""
    pass


# ---------------------------------------------------------------------------
# Storage protocol
# ---------------------------------------------------------------------------

class BuildStorage:
    """
    Abstract key-value storage interface.
    Implement with browser storage, Redis, etc., or in-memory for tests.
    """

    def get(self, key: str) -> str | None:
        """Fetch a stored snapshot. Returns None if not found."""
        raise NotImplementedError

    def put(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(BuildStorage):
    """In-memory storage for testing."""

    def __init__(self) -> None:
        self.items: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.items.get(key)

    def put(self, key: str, value: str) -> None:
        self.items[key] = value

    def delete(self, key: str) -> None:
        self.items.pop(key, None)


# ---------------------------------------------------------------------------
# Snapshot encoding
# ---------------------------------------------------------------------------

def state_to_dict(state: BuildState) -> dict[str, Any]:
    return state.to_dict()


def state_from_dict(data: dict[str, Any]) -> BuildState:
    """
    Rebuild a BuildState from a snapshot dict.
    Snapshots without a version are treated as version 1.
    """
    if not isinstance(data, dict):
        raise SnapshotParseError("Snapshot must be a JSON object")

    version = data.get("version", 1)
    if isinstance(version, bool) or not isinstance(version, int):
        raise VersionNotSupported(f"Snapshot version {version!r} not supported")
    if not 1 <= version <= SNAPSHOT_VERSION:
        raise VersionNotSupported(f"Snapshot version {version} not supported")

    try:
        return BuildState.from_dict(data)
    except (PartValidationError, AttributeError, TypeError, ValueError) as e:
        raise SnapshotParseError(f"Failed to parse snapshot: {e}") from e


def dumps(state: BuildState) -> str:
    return json.dumps(state_to_dict(state), sort_keys=True)


def loads(text: str) -> BuildState:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotParseError(f"Failed to parse snapshot: {e}") from e
    return state_from_dict(data)


# ---------------------------------------------------------------------------
# Key-value persistence
# ---------------------------------------------------------------------------

def save_build(storage: BuildStorage, state: BuildState, key: str | None = None) -> None:
    key = key or settings.SNAPSHOT_KEY
    storage.put(key, dumps(state))
    logger.info("storage: saved build key=%s parts=%d", key, len(state.selected_parts))


def load_build(storage: BuildStorage, key: str | None = None) -> BuildState | None:
    """Load a saved build. Returns None if nothing is stored under the key."""
    key = key or settings.SNAPSHOT_KEY
    text = storage.get(key)
    if text is None:
        return None
    state = loads(text)
    logger.info("storage: loaded build key=%s parts=%d", key, len(state.selected_parts))
    return state


def clear_saved_build(storage: BuildStorage, key: str | None = None) -> None:
    storage.delete(key or settings.SNAPSHOT_KEY)
