"""
Unit tests for the tickTime histogram parser and HTTP fetcher.
"""

from unittest.mock import AsyncMock, patch

import pytest

from rtmetrics.collectors.perf_http import HttpPerfFetcher, parse_raw_perf
from rtmetrics.models import ThreadPerf
from rtmetrics.validation import CollectionError, PerfParseError

EDGES = ["0.005", "0.01", "0.05", "+Inf"]


def histogram(name, cumulative, count, edges=EDGES):
    lines = [f'tickTime_bucket{{name="{name}",le="{le}"}} {value}' for le, value in zip(edges, cumulative)]
    lines.append(f'tickTime_count{{name="{name}"}} {count}')
    lines.append(f'tickTime_sum{{name="{name}"}} 12.5')
    return lines


def payload(**overrides):
    threads = {
        "svMain": histogram("svMain", [4000, 4500, 4590, 4600], 4600),
        "svNetwork": histogram("svNetwork", [9000, 9000, 9000, 9000], 9000),
        "svSync": histogram("svSync", [100, 200, 300, 400], 400),
    }
    threads.update(overrides)
    lines = [
        "# HELP tickTime Time spent on server ticks",
        "# TYPE tickTime histogram",
        'otherMetric{name="svMain"} 17',
    ]
    for thread_lines in threads.values():
        lines.extend(thread_lines)
    return "\n".join(lines) + "\n"


@pytest.mark.unit
class TestParseRawPerf:
    """Test cases for parse_raw_perf."""

    def test_parse_success(self):
        data = parse_raw_perf(payload())

        assert data.boundaries == [0.005, 0.01, 0.05, "+Inf"]
        assert data.perf.svMain == ThreadPerf(4600, (4000, 500, 90, 10))
        assert data.perf.svNetwork == ThreadPerf(9000, (9000, 0, 0, 0))
        assert data.perf.svSync == ThreadPerf(400, (100, 100, 100, 100))

    def test_buckets_sum_to_count(self):
        data = parse_raw_perf(payload())

        for _, perf in data.perf.threads():
            assert sum(perf.buckets) == perf.count

    def test_unknown_threads_are_ignored(self):
        text = payload() + "\n".join(histogram("svGame", [1, 2, 3, 4], 4))

        assert parse_raw_perf(text).perf.svMain.count == 4600

    def test_scientific_notation_values(self):
        text = payload(svNetwork=histogram("svNetwork", ["9e3", "9e3", "9e3", "9e3"], "9e3"))

        assert parse_raw_perf(text).perf.svNetwork.count == 9000

    def test_missing_histogram_raises(self):
        with pytest.raises(PerfParseError):
            parse_raw_perf("# nothing here\n")

    def test_missing_thread_count_raises(self):
        with pytest.raises(PerfParseError, match="svSync"):
            parse_raw_perf(payload(svSync=histogram("svSync", [1, 2, 3, 4], 4)[:-2]))

    def test_mismatched_boundaries_raise(self):
        edges = ["0.005", "0.01", "0.1", "+Inf"]

        with pytest.raises(PerfParseError, match="differ"):
            parse_raw_perf(payload(svSync=histogram("svSync", [1, 2, 3, 4], 4, edges=edges)))

    def test_decreasing_cumulative_buckets_raise(self):
        with pytest.raises(PerfParseError, match="monotonic"):
            parse_raw_perf(payload(svSync=histogram("svSync", [10, 5, 20, 30], 30)))

    def test_invalid_sample_value_raises(self):
        with pytest.raises(PerfParseError):
            parse_raw_perf(payload(svSync=histogram("svSync", [1, 2, "NaN", 4], 4)))

    def test_parse_error_is_a_collection_error(self):
        assert issubclass(PerfParseError, CollectionError)


@pytest.mark.unit
class TestHttpPerfFetcher:
    """Test cases for HttpPerfFetcher."""

    @pytest.mark.asyncio
    async def test_fetch_builds_url_and_parses(self):
        fetcher = HttpPerfFetcher(timeout_seconds=2.0)

        with patch.object(fetcher, "_get_text", new=AsyncMock(return_value=payload())) as mock_get:
            data = await fetcher.fetch_raw_perf("127.0.0.1:30120")

        mock_get.assert_awaited_once_with("http://127.0.0.1:30120/perf/")
        assert data.perf.svMain.count == 4600

    @pytest.mark.asyncio
    async def test_fetch_propagates_collection_errors(self):
        fetcher = HttpPerfFetcher()

        with patch.object(fetcher, "_get_text", new=AsyncMock(side_effect=CollectionError("refused"))):
            with pytest.raises(CollectionError):
                await fetcher.fetch_raw_perf("127.0.0.1:30120")
