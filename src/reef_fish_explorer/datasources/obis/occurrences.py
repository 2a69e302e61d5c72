"""Dataset occurrence fetching."""

from __future__ import annotations

from typing import Any

from reef_fish_explorer.datasources.obis import client

OCCURRENCE_SOURCE = "api.obis.org"


def fetch_occurrences(
    dataset_id: str,
    include_measurements: bool = True,
) -> list[dict[str, Any]]:
    """
    Fetch every occurrence record of one OBIS dataset.

    Args:
        dataset_id: OBIS dataset UUID.
        include_measurements: Embed the measurement-or-fact records of each
            occurrence under its ``mof`` key.

    Returns:
        List of raw occurrence dicts, in API order.

    Raises:
        ValueError: If ``dataset_id`` is empty.
        requests.RequestException: On any network or HTTP failure.
    """
    if not dataset_id:
        msg = "dataset_id must not be empty"
        raise ValueError(msg)

    params: dict[str, Any] = {"datasetid": dataset_id}
    if include_measurements:
        params["mof"] = "true"

    return client.get_occurrences_paginated(params)

