"""
Prefect flows for the data pipeline.

Flows:
- fetch: Download OBIS occurrences for a dataset, memoized in the result cache
- build: Flatten, recode and summarize the cached records into an HTML report

Usage (local):
    python -m reef_fish_explorer.flows.fetch <dataset-id>
    python -m reef_fish_explorer.flows.build <dataset-id>

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    reef-fish-explorer refresh --dataset-id <dataset-id>
"""
