"""
Stats log entry models.

The stats log is a time-ordered list of three kinds of entries:

- ``BootEntry`` (``svBoot``): the server finished booting.
- ``CloseEntry`` (``svClose``): the server was stopped.
- ``DataEntry`` (``data``): one persisted performance data point.

``LogEntry`` is the closed union of the three. Code that walks the log
matches on the concrete class; ``entry_to_dict`` raises ``TypeError`` for
anything else so that a new variant cannot be silently ignored.

Timestamps are integer epoch milliseconds. Memory values are MiB.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional, Union

from ..validation import (
    ValidationError,
    require_non_negative_int,
    require_number,
    require_string,
)
from .perf import PerfCounts


@dataclass(frozen=True)
class BootEntry:
    ts: int
    duration: float
    type: ClassVar[str] = "svBoot"


@dataclass(frozen=True)
class CloseEntry:
    ts: int
    reason: str
    type: ClassVar[str] = "svClose"


@dataclass(frozen=True)
class DataEntry:
    """
    A persisted data point.

    Attributes:
        ts: Epoch milliseconds when the point was materialized.
        players: Online player count at that time.
        fxs_memory: Resident memory of the server process in MiB, if known.
        node_memory: Host runtime heap usage in MiB, if known.
        perf: Per-thread tick deltas since the previous persisted point.
    """

    ts: int
    players: int
    fxs_memory: Optional[float]
    node_memory: Optional[float]
    perf: PerfCounts
    type: ClassVar[str] = "data"


LogEntry = Union[BootEntry, CloseEntry, DataEntry]
ENTRY_TYPES = (BootEntry.type, CloseEntry.type, DataEntry.type)


def entry_to_dict(entry: LogEntry) -> Dict[str, Any]:
    """Convert a log entry to its JSON object form."""
    if isinstance(entry, DataEntry):
        return {
            "ts": entry.ts,
            "type": entry.type,
            "players": entry.players,
            "fxsMemory": entry.fxs_memory,
            "nodeMemory": entry.node_memory,
            "perf": entry.perf.to_dict(),
        }
    if isinstance(entry, BootEntry):
        return {"ts": entry.ts, "type": entry.type, "duration": entry.duration}
    if isinstance(entry, CloseEntry):
        return {"ts": entry.ts, "type": entry.type, "reason": entry.reason}
    raise TypeError(f"Unknown stats log entry: {entry!r}")


def entry_from_dict(data: Any, field_name: str = "log") -> LogEntry:
    """
    Parse and validate one log entry from its JSON object form.

    Raises:
        ValidationError: If the object is not a valid entry
    """
    if not isinstance(data, dict):
        raise ValidationError(f"{field_name} must be an object", field_name=field_name, value=data)

    entry_type = data.get("type")
    ts = require_non_negative_int(data.get("ts"), f"{field_name}.ts")

    if entry_type == DataEntry.type:
        return DataEntry(
            ts=ts,
            players=require_non_negative_int(data.get("players"), f"{field_name}.players"),
            fxs_memory=require_number(data.get("fxsMemory"), f"{field_name}.fxsMemory", allow_none=True),
            node_memory=require_number(data.get("nodeMemory"), f"{field_name}.nodeMemory", allow_none=True),
            perf=PerfCounts.from_dict(data.get("perf"), f"{field_name}.perf"),
        )
    if entry_type == BootEntry.type:
        duration = require_number(data.get("duration"), f"{field_name}.duration")
        return BootEntry(ts=ts, duration=duration)
    if entry_type == CloseEntry.type:
        return CloseEntry(ts=ts, reason=require_string(data.get("reason"), f"{field_name}.reason"))

    raise ValidationError(
        f"{field_name}.type must be one of {list(ENTRY_TYPES)}, got {entry_type!r}",
        field_name=f"{field_name}.type",
        value=entry_type,
    )


def entries_from_json(data: Any, field_name: str = "log") -> List[LogEntry]:
    if not isinstance(data, list):
        raise ValidationError(f"{field_name} must be a list", field_name=field_name, value=data)
    return [entry_from_dict(item, f"{field_name}[{i}]") for i, item in enumerate(data)]
