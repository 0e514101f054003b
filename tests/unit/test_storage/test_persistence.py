"""
Unit tests for loading and saving the collector state file.
"""

import json
import logging

import pytest

from rtmetrics.models import BootEntry, CloseEntry, StorageConfig
from rtmetrics.storage.persistence import (
    STATS_FILE_VERSION,
    LoadedState,
    StatsPersistence,
    state_from_dict,
    state_to_dict,
)
from rtmetrics.validation import ValidationError

BOUNDARIES = [0.01, 0.05, 0.1, "+Inf"]


@pytest.fixture
def storage_config(temp_dir):
    return StorageConfig(data_dir=temp_dir / "data", file_name="stats.json")


@pytest.mark.unit
class TestStateDocument:
    """Test cases for the state document conversion."""

    def test_state_to_dict_layout(self, test_utils):
        entries = [BootEntry(ts=1000, duration=3.5), test_utils.make_data_entry(ts=2000, players=4)]

        document = state_to_dict(BOUNDARIES, entries)

        assert document["version"] == STATS_FILE_VERSION
        assert document["lastPerfBoundaries"] == BOUNDARIES
        assert document["log"][0] == {"ts": 1000, "type": "svBoot", "duration": 3.5}
        assert document["log"][1]["type"] == "data"
        assert document["log"][1]["perf"]["svMain"] == {"count": 1000, "buckets": [1000, 0, 0, 0]}

    def test_state_from_dict_parses_document(self, test_utils):
        entries = [
            BootEntry(ts=1000, duration=3.5),
            test_utils.make_data_entry(ts=2000, players=4, fxs_memory=300.25),
            CloseEntry(ts=3000, reason="stopped"),
        ]

        state = state_from_dict(json.loads(json.dumps(state_to_dict(BOUNDARIES, entries))))

        assert state.boundaries == BOUNDARIES
        assert state.entries == entries

    def test_null_boundaries(self):
        state = state_from_dict({"version": 1, "lastPerfBoundaries": None, "log": []})

        assert state.boundaries is None
        assert state.is_empty

    def test_other_version_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            state_from_dict({"version": 2, "lastPerfBoundaries": None, "log": []})

        assert exc_info.value.field_name == "version"

    def test_non_object_is_rejected(self):
        with pytest.raises(ValidationError):
            state_from_dict([1, 2, 3])

    def test_invalid_entry_is_rejected(self):
        document = {"version": 1, "lastPerfBoundaries": None, "log": [{"ts": 5, "type": "svReboot"}]}

        with pytest.raises(ValidationError):
            state_from_dict(document)


@pytest.mark.unit
class TestStatsPersistence:
    """Test cases for StatsPersistence."""

    @pytest.mark.asyncio
    async def test_missing_file_loads_empty(self, storage_config):
        state = await StatsPersistence(storage_config).load()

        assert state == LoadedState()
        assert state.is_empty

    @pytest.mark.asyncio
    async def test_round_trip(self, storage_config, test_utils):
        persistence = StatsPersistence(storage_config)
        entries = [BootEntry(ts=1000, duration=2.0), test_utils.make_data_entry(ts=2000, node_memory=64.0)]

        assert await persistence.write(state_to_dict(BOUNDARIES, entries)) is True
        state = await persistence.load()

        assert state.boundaries == BOUNDARIES
        assert state.entries == entries
        assert persistence.get_info()["exists"] is True

    @pytest.mark.asyncio
    async def test_other_version_resets(self, storage_config, caplog):
        storage_config.data_dir.mkdir(parents=True)
        storage_config.state_file.write_text(
            json.dumps({"version": 2, "lastPerfBoundaries": BOUNDARIES, "log": []}), encoding="utf-8"
        )

        with caplog.at_level(logging.WARNING):
            state = await StatsPersistence(storage_config).load()

        assert state.is_empty
        assert "invalid data" in caplog.text
        assert "will be reset" in caplog.text

    @pytest.mark.asyncio
    async def test_invalid_entries_reset(self, storage_config):
        storage_config.data_dir.mkdir(parents=True)
        storage_config.state_file.write_text(
            json.dumps({"version": 1, "lastPerfBoundaries": None, "log": [{"ts": -1, "type": "data"}]}),
            encoding="utf-8",
        )

        state = await StatsPersistence(storage_config).load()

        assert state.is_empty

    @pytest.mark.asyncio
    async def test_undecodable_file_resets(self, storage_config, caplog):
        storage_config.data_dir.mkdir(parents=True)
        storage_config.state_file.write_text("\x00garbage{", encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            state = await StatsPersistence(storage_config).load()

        assert state.is_empty
        assert "Failed to load stats.json" in caplog.text

    @pytest.mark.asyncio
    async def test_write_failure_returns_false(self, storage_config):
        # A regular file where the data directory should be.
        storage_config.data_dir.parent.mkdir(parents=True, exist_ok=True)
        storage_config.data_dir.write_text("not a directory", encoding="utf-8")

        result = await StatsPersistence(storage_config).write(state_to_dict(None, []))

        assert result is False
