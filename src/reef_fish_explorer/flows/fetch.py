"""
Prefect flow for fetching OBIS occurrences through the result cache.

The first run for a (dataset, include-measurements) pair pages through the
whole dataset and stores it; later runs with the same pair read the stored
copy and make no network call.  A failed fetch aborts the flow and leaves
the cache untouched; rerun to try again.

Run locally:
    python -m reef_fish_explorer.flows.fetch <dataset-id>
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from prefect import flow, task
from prefect.cache_policies import NO_CACHE

from reef_fish_explorer.cache import Fetcher, ResultCache, cached_fetch, open_cache
from reef_fish_explorer.config import get_settings
from reef_fish_explorer.datasources import obis
from reef_fish_explorer.schemas import QueryParams


@task(name="fetch-occurrences-cached", cache_policy=NO_CACHE)
def fetch_occurrences_cached(
    params: QueryParams,
    cache: ResultCache,
    fetcher: Fetcher | None = None,
) -> tuple[list[dict[str, Any]], bool]:
    """Return the occurrences for ``params``, hitting OBIS only on a cache miss.

    No task-level retries: a network failure fails the run.
    """
    return cached_fetch(
        fetcher or obis.fetch_occurrences,
        params,
        cache,
        source=obis.OCCURRENCE_SOURCE,
    )


@flow(name="fetch-data", log_prints=True, validate_parameters=False)
def fetch_all(
    dataset_id: str,
    include_measurements: bool = True,
    cache_dir: Path | None = None,
    fetcher: Fetcher | None = None,
) -> dict[str, Any]:
    """
    Fetch one OBIS dataset, memoized on disk.

    Args:
        dataset_id: OBIS dataset UUID.
        include_measurements: Also fetch measurement-or-fact records.
        cache_dir: Cache directory (defaults to ``Settings.cache_dir``).
        fetcher: Called on a cache miss (defaults to the OBIS client).

    Returns:
        Dict with ``records`` count, ``cache_hit`` flag and ``cache_path``.
    """
    params = QueryParams(dataset_id=dataset_id, include_measurements=include_measurements)
    base = cache_dir or get_settings().cache_dir

    with open_cache(base) as cache:
        if cache.contains(params):
            print(f"Occurrences for {dataset_id} are cached, skipping fetch.")
        else:
            print(f"Fetching OBIS occurrences for {dataset_id} (mof={include_measurements})...")

        records, hit = fetch_occurrences_cached(params, cache, fetcher)
        cache_path = cache.path_for(params)

    if not hit:
        print(f"Saved {len(records)} occurrences to {cache_path}")

    return {"records": len(records), "cache_hit": hit, "cache_path": str(cache_path)}


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: python -m reef_fish_explorer.flows.fetch <dataset-id>", file=sys.stderr)
        sys.exit(1)
    result = fetch_all(sys.argv[1])
    print(f"Flow complete: {result}")
