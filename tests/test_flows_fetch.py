"""
Tests for the fetch flow module.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import Mock, patch

import pytest
import requests

from reef_fish_explorer.cache import open_cache
from reef_fish_explorer.flows import fetch
from reef_fish_explorer.schemas import QueryParams

if TYPE_CHECKING:
    from pathlib import Path

DATASET = "2ae2a2db-ff13-4c01-b5ab-2ec2a6a1ec4f"

SAMPLE_RECORDS: list[dict] = [
    {
        "id": "occ-1",
        "eventID": "e1",
        "island": "Midway",
        "mof": [{"measurementType": "length", "measurementValue": "10"}],
    },
    {"id": "occ-2", "eventID": "e2", "island": "Kure", "mof": []},
]


class TestFetchOccurrencesCached:
    """Test the cached fetch task."""

    def test_miss_then_hit(self, tmp_path: Path) -> None:
        fetcher = Mock(return_value=SAMPLE_RECORDS)
        params = QueryParams(dataset_id=DATASET)

        with open_cache(tmp_path) as cache:
            first, first_hit = fetch.fetch_occurrences_cached(params, cache, fetcher)
            second, second_hit = fetch.fetch_occurrences_cached(params, cache, fetcher)

        assert (first_hit, second_hit) == (False, True)
        assert first == second == SAMPLE_RECORDS
        fetcher.assert_called_once_with(DATASET, True)

    @patch("reef_fish_explorer.flows.fetch.obis.fetch_occurrences")
    def test_defaults_to_obis(self, mock_fetch: Mock, tmp_path: Path) -> None:
        mock_fetch.return_value = SAMPLE_RECORDS
        params = QueryParams(dataset_id=DATASET, include_measurements=False)

        with open_cache(tmp_path) as cache:
            fetch.fetch_occurrences_cached(params, cache)

        mock_fetch.assert_called_once_with(DATASET, False)

    def test_stores_source(self, tmp_path: Path) -> None:
        params = QueryParams(dataset_id=DATASET)
        with open_cache(tmp_path) as cache:
            fetch.fetch_occurrences_cached(params, cache, Mock(return_value=[]))
            path = cache.path_for(params)

        meta = json.loads(path.read_text())["meta"]
        assert meta["source"] == "api.obis.org"


class TestFetchAll:
    """Test the complete fetch flow."""

    def test_fetch_all_miss(self, tmp_path: Path) -> None:
        fetcher = Mock(return_value=SAMPLE_RECORDS)

        result = fetch.fetch_all(DATASET, cache_dir=tmp_path, fetcher=fetcher)

        assert result["records"] == 2
        assert result["cache_hit"] is False
        assert result["cache_path"].startswith(str(tmp_path))
        fetcher.assert_called_once_with(DATASET, True)

    def test_second_run_makes_no_request(self, tmp_path: Path) -> None:
        fetcher = Mock(return_value=SAMPLE_RECORDS)

        fetch.fetch_all(DATASET, cache_dir=tmp_path, fetcher=fetcher)
        result = fetch.fetch_all(DATASET, cache_dir=tmp_path, fetcher=fetcher)

        assert result["cache_hit"] is True
        assert result["records"] == 2
        fetcher.assert_called_once()

    def test_measurement_flag_is_separate_entry(self, tmp_path: Path) -> None:
        fetcher = Mock(return_value=SAMPLE_RECORDS)

        fetch.fetch_all(DATASET, cache_dir=tmp_path, fetcher=fetcher)
        result = fetch.fetch_all(
            DATASET, include_measurements=False, cache_dir=tmp_path, fetcher=fetcher
        )

        assert result["cache_hit"] is False
        assert fetcher.call_count == 2
        fetcher.assert_called_with(DATASET, False)

    def test_failure_leaves_cache_empty(self, tmp_path: Path) -> None:
        fetcher = Mock(side_effect=requests.ConnectionError("offline"))

        with pytest.raises(requests.ConnectionError):
            fetch.fetch_all(DATASET, cache_dir=tmp_path, fetcher=fetcher)

        with open_cache(tmp_path) as cache:
            assert cache.keys() == []

    def test_retry_after_failure_fetches(self, tmp_path: Path) -> None:
        fetcher = Mock(side_effect=[requests.ConnectionError("offline"), SAMPLE_RECORDS])

        with pytest.raises(requests.ConnectionError):
            fetch.fetch_all(DATASET, cache_dir=tmp_path, fetcher=fetcher)
        result = fetch.fetch_all(DATASET, cache_dir=tmp_path, fetcher=fetcher)

        assert result["cache_hit"] is False
        assert result["records"] == 2
