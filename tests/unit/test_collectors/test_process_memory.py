"""
Unit tests for the psutil memory fetcher.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import psutil
import pytest

from rtmetrics.collectors.process_memory import PsutilMemoryFetcher, read_rss_mib
from rtmetrics.validation import CollectionError


@pytest.mark.unit
class TestReadRssMib:
    """Test cases for read_rss_mib."""

    @patch("rtmetrics.collectors.process_memory.psutil.Process")
    def test_converts_to_mib(self, mock_process_class):
        mock_process = MagicMock()
        mock_process.memory_info.return_value = SimpleNamespace(rss=1536 * 1024 * 1024 + 5000)
        mock_process_class.return_value = mock_process

        assert read_rss_mib(1234) == 1536.0
        mock_process_class.assert_called_once_with(1234)

    @patch("rtmetrics.collectors.process_memory.psutil.Process")
    def test_missing_process(self, mock_process_class):
        mock_process_class.side_effect = psutil.NoSuchProcess(1234)

        with pytest.raises(CollectionError, match="1234"):
            read_rss_mib(1234)

    @patch("rtmetrics.collectors.process_memory.psutil.Process")
    def test_access_denied(self, mock_process_class):
        mock_process = MagicMock()
        mock_process.memory_info.side_effect = psutil.AccessDenied(1234)
        mock_process_class.return_value = mock_process

        with pytest.raises(CollectionError):
            read_rss_mib(1234)


@pytest.mark.unit
class TestPsutilMemoryFetcher:
    """Test cases for PsutilMemoryFetcher."""

    @pytest.mark.asyncio
    async def test_reads_own_process(self):
        import os

        memory = await PsutilMemoryFetcher().fetch_memory(os.getpid())

        assert memory > 0

    @pytest.mark.asyncio
    @patch("rtmetrics.collectors.process_memory.psutil.Process")
    async def test_errors_propagate(self, mock_process_class):
        mock_process_class.side_effect = psutil.NoSuchProcess(999999)

        with pytest.raises(CollectionError):
            await PsutilMemoryFetcher().fetch_memory(999999)
