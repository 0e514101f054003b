"""
Versioned load and save of the collector state file.

The state file is a cache, not a system of record: anything unexpected in it
(wrong version, invalid entries, undecodable JSON) makes the loader discard
it and start empty instead of failing.

File layout::

    {
        "version": 1,
        "lastPerfBoundaries": [0.005, ..., "+Inf"] | null,
        "log": [ {...}, ... ]
    }
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..models.config import StorageConfig
from ..models.log import LogEntry, entries_from_json, entry_to_dict
from ..models.perf import PerfBoundaries, boundaries_from_json
from ..validation import ErrorSeverity, ValidationError, handle_file_error
from .base import StateStorage
from .json_storage import JsonStateStorage

logger = logging.getLogger(__name__)

STATS_FILE_VERSION = 1


@dataclass
class LoadedState:
    """Boundaries and log entries read from the state file."""

    boundaries: Optional[PerfBoundaries] = None
    entries: List[LogEntry] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.boundaries is None and not self.entries


def state_to_dict(boundaries: Optional[PerfBoundaries], entries: Sequence[LogEntry]) -> Dict[str, Any]:
    """Build the JSON document for the given boundaries and entries."""
    return {
        "version": STATS_FILE_VERSION,
        "lastPerfBoundaries": list(boundaries) if boundaries is not None else None,
        "log": [entry_to_dict(entry) for entry in entries],
    }


def state_from_dict(data: Any) -> LoadedState:
    """
    Validate a decoded state document.

    Raises:
        ValidationError: If the version is not supported or any part of the
            document does not match the schema
    """
    if not isinstance(data, dict):
        raise ValidationError("state file must contain an object", field_name="state", value=data)

    version = data.get("version")
    if version != STATS_FILE_VERSION:
        raise ValidationError(
            f"unsupported state file version {version!r}, expected {STATS_FILE_VERSION}",
            field_name="version",
            value=version,
        )

    raw_boundaries = data.get("lastPerfBoundaries")
    boundaries = None if raw_boundaries is None else boundaries_from_json(raw_boundaries)
    entries = entries_from_json(data.get("log"))
    return LoadedState(boundaries=boundaries, entries=entries)


class StatsPersistence:
    """
    Reads and writes the state file off the event loop.

    Disk I/O runs in the loop's default executor. ``write`` takes an already
    built document, so whatever the caller does to its log after scheduling
    a write cannot leak into the file.
    """

    def __init__(self, config: StorageConfig, storage: Optional[StateStorage] = None):
        self.config = config
        self.storage = storage or JsonStateStorage()

    @property
    def path(self):
        return self.config.state_file

    async def load(self) -> LoadedState:
        """
        Load the state file.

        Returns:
            The stored state, or an empty LoadedState if the file is missing,
            unreadable, of another version or invalid.
        """
        loop = asyncio.get_running_loop()
        file_name = self.config.file_name
        try:
            data = await loop.run_in_executor(None, self.storage.load_dict, self.path)
        except FileNotFoundError:
            logger.debug(f"{file_name} not found, starting with empty stats.")
            return LoadedState()
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load {file_name} with message: {e}")
            logger.warning("Since this is not a critical file, it will be reset.")
            return LoadedState()

        try:
            state = state_from_dict(data)
        except ValidationError as e:
            logger.warning(f"Failed to load {file_name} due to invalid data: {e}")
            logger.warning("Since this is not a critical file, it will be reset.")
            return LoadedState()

        logger.info(f"Loaded {len(state.entries)} performance snapshots from cache")
        return state

    async def write(self, document: Dict[str, Any]) -> bool:
        """
        Write a state document built by ``state_to_dict``.

        Failures are logged and reported through the return value, never
        raised.

        Returns:
            True if the file was written
        """
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.storage.save_dict, document, self.path)
            return True
        except Exception as e:
            handle_file_error(
                error=e,
                context=f"saving {self.config.file_name}",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
            return False

    def get_info(self) -> Dict[str, Any]:
        return {
            "path": str(self.path),
            "exists": self.storage.file_exists(self.path),
            "size_bytes": self.storage.get_file_size(self.path),
        }
