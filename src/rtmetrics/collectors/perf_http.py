"""
HTTP fetcher for the server's tick-time histograms.

The server exposes its counters in the Prometheus text format at
``http://<endpoint>/perf/``. Only the ``tickTime`` histogram matters here::

    tickTime_bucket{name="svMain",le="0.005"} 4511
    tickTime_bucket{name="svMain",le="+Inf"} 4600
    tickTime_count{name="svMain"} 4600

Prometheus buckets are cumulative (each ``le`` bucket counts every tick at
or below that edge). The parser converts them to per-bucket counts so that
the bucket list of a thread sums to its tick count.
"""

import logging
import math
import re
from typing import Dict, List, Tuple

from ..models.perf import INF_BOUNDARY, THREAD_NAMES, Boundary, PerfBoundaries, PerfCounts, ThreadPerf
from ..validation import PerfParseError
from .base import AbstractPerfFetcher, RawPerfData
from .http_client import HttpFetcher

logger = logging.getLogger(__name__)

_METRIC_LINE = re.compile(r"^tickTime_(bucket|count)\{([^}]*)\}\s+(\S+)")
_LABEL = re.compile(r'(\w+)="([^"]*)"')


def _parse_number(raw: str, line_no: int) -> int:
    try:
        value = float(raw)
    except ValueError:
        raise PerfParseError(f"line {line_no}: invalid sample value {raw!r}")
    if not math.isfinite(value) or value < 0:
        raise PerfParseError(f"line {line_no}: invalid sample value {raw!r}")
    return int(value)


def _parse_boundary(raw: str, line_no: int) -> Boundary:
    if raw == INF_BOUNDARY:
        return INF_BOUNDARY
    try:
        return float(raw)
    except ValueError:
        raise PerfParseError(f"line {line_no}: invalid bucket edge {raw!r}")


def parse_raw_perf(text: str) -> RawPerfData:
    """
    Parse the ``tickTime`` histogram out of a Prometheus text payload.

    Args:
        text: The body returned by the ``/perf/`` endpoint

    Returns:
        The boundaries and per-thread counts

    Raises:
        PerfParseError: If a thread is missing, the threads disagree on
            their boundaries, or the cumulative buckets are inconsistent
    """
    cumulative: Dict[str, List[Tuple[Boundary, int]]] = {name: [] for name in THREAD_NAMES}
    counts: Dict[str, int] = {}

    for line_no, line in enumerate(text.splitlines(), start=1):
        match = _METRIC_LINE.match(line.strip())
        if not match:
            continue
        kind, raw_labels, raw_value = match.groups()
        labels = dict(_LABEL.findall(raw_labels))
        thread = labels.get("name")
        if thread not in cumulative:
            continue

        value = _parse_number(raw_value, line_no)
        if kind == "count":
            counts[thread] = value
        else:
            if "le" not in labels:
                raise PerfParseError(f"line {line_no}: bucket without an 'le' label")
            cumulative[thread].append((_parse_boundary(labels["le"], line_no), value))

    boundaries: PerfBoundaries = [edge for edge, _ in cumulative[THREAD_NAMES[0]]]
    if not boundaries:
        raise PerfParseError(f"no tickTime buckets found for {THREAD_NAMES[0]}")

    threads = {}
    for name in THREAD_NAMES:
        if name not in counts:
            raise PerfParseError(f"no tickTime count found for {name}")
        edges = [edge for edge, _ in cumulative[name]]
        if edges != boundaries:
            raise PerfParseError(f"{name} boundaries {edges} differ from {boundaries}")

        buckets = []
        previous = 0
        for _, value in cumulative[name]:
            if value < previous:
                raise PerfParseError(f"{name} cumulative buckets are not monotonic")
            buckets.append(value - previous)
            previous = value
        threads[name] = ThreadPerf(count=counts[name], buckets=tuple(buckets))

    return RawPerfData(boundaries=boundaries, perf=PerfCounts(**threads))


class HttpPerfFetcher(HttpFetcher, AbstractPerfFetcher):
    """Fetches and parses ``http://<endpoint>/perf/``."""

    async def fetch_raw_perf(self, endpoint: str) -> RawPerfData:
        url = f"http://{endpoint}/perf/"
        text = await self._get_text(url)
        data = parse_raw_perf(text)
        logger.debug(f"Fetched perf counters from {url}: svMain count {data.perf.svMain.count}")
        return data
