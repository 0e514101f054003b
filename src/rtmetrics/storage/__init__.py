"""
Storage module for the collector state file.

This module provides the storage backend abstraction, the atomic JSON
backend, the versioned state file (de)serialization and the throttle used to
coalesce saves.
"""

from .base import StateStorage
from .json_storage import JsonStateStorage
from .persistence import (
    STATS_FILE_VERSION,
    LoadedState,
    StatsPersistence,
    state_from_dict,
    state_to_dict,
)
from .throttle import ThrottledCall

__all__ = [
    "StateStorage",
    "JsonStateStorage",
    "STATS_FILE_VERSION",
    "LoadedState",
    "StatsPersistence",
    "state_from_dict",
    "state_to_dict",
    "ThrottledCall",
]
