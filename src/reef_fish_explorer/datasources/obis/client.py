"""
OBIS API client.

Low-level HTTP client for the OBIS API v3.
Handles request building and cursor pagination.

API docs: https://api.obis.org/
Pagination: ``size`` is capped at 10,000 per request; further pages are
requested with ``after=<id of the last record>`` on the same query.
"""

from __future__ import annotations

from typing import Any

from reef_fish_explorer.services.http import session

# ---------------------------------------------------------------------------
# API configuration
# ---------------------------------------------------------------------------
API_BASE = "https://api.obis.org/v3"
MAX_PAGE_SIZE = 10_000  # API maximum for /occurrence


def _get(endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    """Make a GET request to the OBIS API v3."""
    url = f"{API_BASE}/{endpoint}"
    resp = session.get(url, params=params or {})
    resp.raise_for_status()
    data: dict[str, Any] = resp.json()
    return data


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def get_occurrences(params: dict[str, Any]) -> dict[str, Any]:
    """GET /occurrence: search occurrences."""
    return _get("occurrence", params)


def get_occurrences_paginated(
    params: dict[str, Any],
    *,
    page_size: int = MAX_PAGE_SIZE,
    max_pages: int | None = None,
) -> list[dict[str, Any]]:
    """
    Fetch every occurrence matching ``params`` using the ``after`` cursor.

    Stops on an empty page, on a page shorter than ``page_size``, or after
    ``max_pages`` pages when given.  Any HTTP error propagates; there is no
    partial result.

    Returns a flat list of occurrence dicts (``results`` concatenated).
    """
    size = min(page_size, MAX_PAGE_SIZE)
    after: str | None = None
    all_results: list[dict[str, Any]] = []
    pages = 0
    while max_pages is None or pages < max_pages:
        page_params = {**params, "size": size}
        if after is not None:
            page_params["after"] = after
        data = get_occurrences(page_params)
        pages += 1
        results: list[dict[str, Any]] = data.get("results", [])
        if not results:
            break
        all_results.extend(results)
        if len(results) < size:
            break
        after = str(results[-1]["id"])
    return all_results
