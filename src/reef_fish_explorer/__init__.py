"""Reef Fish Explorer - exploratory analysis of OBIS reef fish survey records.

Architecture::

    datasources/   External APIs (OBIS occurrence + measurement-or-fact records)
    cache.py       Disk-backed memoization of fetch results, keyed by query params
    analysis/      Flatten measurements, recode trophic codes, grouped statistics
    renderers/     Pure data → HTML (charts, tables, occurrence map)
    flows/         Prefect orchestration (fetch goes through the cache, build renders report)
    services/      Shared utilities (HTTP client with retry)

Data flow: datasources → cache → analysis → renderers → site/report.html

Extension points (see each package's docstring for step-by-step guides):
  - New data source:   datasources/__init__.py
  - New analysis:      analysis/__init__.py
  - New UI module:     renderers/__init__.py
"""

__version__ = "0.1.0"

from reef_fish_explorer.config import Settings
from reef_fish_explorer.schemas import QueryParams

__all__ = ["QueryParams", "Settings", "__version__"]
