"""
In-memory stats log.

The log is the authoritative history of the collector: a list of boot, close
and data entries in append order. Appends never re-sort. Boot and close
appends apply the collapsing rules below so that restarts which never
produced any data do not leave noise behind:

- a boot directly after a boot replaces it (the server never closed);
- a close directly after a close is dropped;
- a close directly after a boot removes that boot and appends nothing.
"""

import logging
from typing import Iterator, List, Optional, Sequence

from ..models.log import BootEntry, CloseEntry, DataEntry, LogEntry

logger = logging.getLogger(__name__)


class StatsLog:
    """Append-only, time-ordered list of stats log entries."""

    def __init__(self, entries: Optional[Sequence[LogEntry]] = None):
        self._entries: List[LogEntry] = list(entries) if entries else []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    @property
    def last(self) -> Optional[LogEntry]:
        return self._entries[-1] if self._entries else None

    def entries(self) -> List[LogEntry]:
        """Return a shallow copy of the entries, safe to hand to another task."""
        return list(self._entries)

    def append_boot(self, ts: int, duration: float) -> None:
        """Append a boot entry, replacing a trailing boot if there is one."""
        if isinstance(self.last, BootEntry):
            logger.debug("Replacing dangling boot entry")
            self._entries.pop()
        self._entries.append(BootEntry(ts=ts, duration=duration))

    def append_close(self, ts: int, reason: str) -> bool:
        """
        Append a close entry following the collapsing rules.

        Args:
            ts: Epoch milliseconds of the close
            reason: Human-readable close reason

        Returns:
            True if the log changed (an entry was appended or a dangling boot
            was removed), False if the close was dropped as a duplicate.
        """
        last = self.last
        if isinstance(last, CloseEntry):
            logger.debug("Dropping duplicate close entry")
            return False
        if isinstance(last, BootEntry):
            logger.debug("Removing dangling boot entry instead of logging close")
            self._entries.pop()
            return True
        self._entries.append(CloseEntry(ts=ts, reason=reason))
        return True

    def append_data(self, entry: DataEntry) -> None:
        self._entries.append(entry)

    def replace(self, entries: Sequence[LogEntry]) -> None:
        """Swap in a new entry list, e.g. the output of the log optimizer."""
        self._entries = list(entries)

    def clear(self) -> None:
        self._entries = []
