"""Recode short survey codes to descriptive labels.

Values with no entry in the mapping pass through unchanged, so recoding is
total and never fails.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pandas as pd

# Trophic guild codes used by the reef fish survey.
TROPHIC_LABELS: dict[str, str] = {
    "H": "herbivore",
    "Pisc": "piscivore",
    "PLK": "planktivore",
    "SI": "secondary invertivore",
    "MI": "mobile invertivore",
    "Cor": "corallivore",
    "Om": "omnivore",
}

# Consumer level codes.
CONSUMER_LABELS: dict[str, str] = {
    "Prim": "primary consumer",
    "Sec": "secondary consumer",
    "Apex": "apex predator",
}


def recode_value(value: Any, mapping: Mapping[Any, str]) -> Any:
    """Return the mapped label for ``value``, or ``value`` itself if unmapped."""
    try:
        return mapping.get(value, value)
    except TypeError:  # unhashable values cannot be keys
        return value


def recode(
    table: pd.DataFrame,
    mapping: Mapping[Any, str],
    column: str = "measurementValue",
    *,
    measurement_type: str | None = None,
) -> pd.DataFrame:
    """Replace coded values in ``column`` with their labels.

    Args:
        table: Flat measurement table.
        mapping: Code -> label.
        column: Column to recode.
        measurement_type: When given, only rows whose ``measurementType``
            equals it are recoded.

    Returns:
        A recoded copy; ``table`` is left untouched.
    """
    result = table.copy()
    if column not in result.columns or result.empty:
        return result

    if measurement_type is None:
        rows = pd.Series(True, index=result.index)
    elif "measurementType" in result.columns:
        rows = result["measurementType"] == measurement_type
    else:
        return result

    result[column] = result[column].astype(object)
    result.loc[rows, column] = [recode_value(v, mapping) for v in result.loc[rows, column]]
    return result
