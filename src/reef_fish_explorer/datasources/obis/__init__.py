"""OBIS (Ocean Biodiversity Information System) occurrence data source.

Fetches occurrence records for a single dataset, optionally with the
extended measurement-or-fact records (``mof``) embedded in each occurrence.

Public API:
  - client: Low-level HTTP (cursor pagination over /occurrence)
  - occurrences: fetch_occurrences
"""

from reef_fish_explorer.datasources.obis.occurrences import (
    OCCURRENCE_SOURCE,
    fetch_occurrences,
)

__all__ = [
    "OCCURRENCE_SOURCE",
    "fetch_occurrences",
]
