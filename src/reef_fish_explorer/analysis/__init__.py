"""Flattening, recoding, and grouped statistics over OBIS result sets.

Each module is a set of pure functions over raw occurrence dicts or pandas
frames. This is the domain logic layer.

Dependency rule: analysis/ never fetches data, touches the cache, or
produces HTML.

Modules:
  - flatten: occurrence records + embedded mof -> flat measurement table
  - recode: short trophic/consumer codes -> descriptive labels
  - aggregate: counts, individual-weighted fractions, weighted length stats

Adding an analysis module
-------------------------
1. Create ``analysis/{name}.py`` with a pure function::

       import pandas as pd

       def summarize_something(table: pd.DataFrame) -> pd.DataFrame:
           ...

2. Rules:
   - Take records or frames as arguments (never call fetch functions here).
   - No I/O, no HTTP, no Prefect decorators.
   - Return frames or dataclasses that renderers can consume.

3. Wire into the pipeline (see ``flows/build.py``):
   - Call your function after flattening.
   - Pass the result to a renderer.

4. Re-export in ``__init__.py`` and add tests in ``tests/test_{name}.py``.
"""

from reef_fish_explorer.analysis.aggregate import (
    count_records,
    expand_weighted,
    island_summary,
    numeric_measurements,
    order_groups,
    records_per_year,
    top_species,
    weighted_fractions,
    weighted_stats,
)
from reef_fish_explorer.analysis.flatten import (
    DEFAULT_PARENT_FIELDS,
    FlattenError,
    FlattenResult,
    flatten_measurements,
    numeric_values,
    occurrences_frame,
)
from reef_fish_explorer.analysis.recode import (
    CONSUMER_LABELS,
    TROPHIC_LABELS,
    recode,
    recode_value,
)

__all__ = [
    "CONSUMER_LABELS",
    "DEFAULT_PARENT_FIELDS",
    "TROPHIC_LABELS",
    "FlattenError",
    "FlattenResult",
    "count_records",
    "expand_weighted",
    "flatten_measurements",
    "island_summary",
    "numeric_measurements",
    "numeric_values",
    "occurrences_frame",
    "order_groups",
    "recode",
    "recode_value",
    "records_per_year",
    "top_species",
    "weighted_fractions",
    "weighted_stats",
]
