"""Grouped summaries of occurrences and flattened measurements.

Weighting follows the survey's individual counts: a measurement row with
``individualCount == k`` stands for ``k`` fish, so it contributes ``k``
times to every weighted statistic.  Rows whose value or count is missing or
not numeric are skipped.  Groups left without rows are omitted from the
output rather than reported as zero or NaN.

Ordering of the returned frames is for presentation only.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

from reef_fish_explorer.analysis.flatten import numeric_values

WEIGHT_COLUMN = "individualCount"
VALUE_COLUMN = "measurementValue"

FRACTION_COLUMNS = ["individuals", "fraction"]
STATS_COLUMNS = ["n", "mean", "median", "q1", "q3", "std"]


def _rows_of_type(table: pd.DataFrame, measurement_type: str) -> pd.DataFrame:
    if table.empty or "measurementType" not in table.columns:
        return table.iloc[0:0]
    return table[table["measurementType"] == measurement_type]


# =============================================================================
# Occurrence-level summaries
# =============================================================================


def count_records(table: pd.DataFrame, by: str = "island") -> pd.DataFrame:
    """Number of rows per group, most frequent first (ties by name)."""
    if table.empty or by not in table.columns:
        return pd.DataFrame(columns=[by, "records"])
    counts = table.groupby(by).size().reset_index(name="records")
    return counts.sort_values(["records", by], ascending=[False, True], ignore_index=True)


def records_per_year(occurrences: pd.DataFrame) -> pd.DataFrame:
    """Records and individuals per survey year, oldest first."""
    frame = occurrences.dropna(subset=["year"])
    if frame.empty:
        return pd.DataFrame(columns=["year", "records", "individuals"])
    per_year = (
        frame.groupby("year")
        .agg(records=(WEIGHT_COLUMN, "size"), individuals=(WEIGHT_COLUMN, "sum"))
        .reset_index()
        .sort_values("year", ignore_index=True)
    )
    per_year["year"] = per_year["year"].astype(int)
    return per_year


def island_summary(occurrences: pd.DataFrame) -> pd.DataFrame:
    """Per-island records, individuals, island group and centroid.

    Ordered by descending record count.
    """
    columns = ["island", "island_group", "records", "individuals", "latitude", "longitude"]
    frame = occurrences.dropna(subset=["island"])
    if frame.empty:
        return pd.DataFrame(columns=columns)
    details = (
        frame.groupby("island")
        .agg(
            island_group=("islandGroup", "first"),
            individuals=(WEIGHT_COLUMN, "sum"),
            latitude=("decimalLatitude", "mean"),
            longitude=("decimalLongitude", "mean"),
        )
        .reset_index()
    )
    # Left merge keeps count_records' ordering.
    summary = count_records(frame, by="island").merge(details, on="island", how="left")
    return summary[columns]


def top_species(occurrences: pd.DataFrame, n: int = 15) -> pd.DataFrame:
    """Species ranked by total individuals counted."""
    frame = occurrences.dropna(subset=["scientificName"])
    if frame.empty:
        return pd.DataFrame(columns=["scientificName", "records", "individuals"])
    ranked = (
        frame.groupby("scientificName")
        .agg(records=(WEIGHT_COLUMN, "size"), individuals=(WEIGHT_COLUMN, "sum"))
        .reset_index()
        .sort_values(
            ["individuals", "records", "scientificName"],
            ascending=[False, False, True],
            ignore_index=True,
        )
    )
    return ranked.head(n)


# =============================================================================
# Measurement summaries
# =============================================================================


def numeric_measurements(
    table: pd.DataFrame,
    measurement_type: str,
    *,
    group: str = "island",
    value: str = VALUE_COLUMN,
    weight: str = WEIGHT_COLUMN,
) -> pd.DataFrame:
    """Rows of one measurement type with numeric ``value`` and ``weight``.

    Returns a frame with columns ``group``, ``value``, ``weight``; rows where
    either number is missing, or the weight is negative, are dropped.
    """
    rows = _rows_of_type(table, measurement_type)
    if rows.empty:
        return pd.DataFrame(columns=[group, "value", "weight"])
    frame = pd.DataFrame(
        {
            group: rows[group],
            "value": numeric_values(rows[value]),
            "weight": numeric_values(rows[weight]),
        }
    ).dropna()
    return frame[frame["weight"] >= 0]


def weighted_fractions(
    table: pd.DataFrame,
    measurement_type: str,
    *,
    group: str = "island",
    category: str = VALUE_COLUMN,
    weight: str = WEIGHT_COLUMN,
) -> pd.DataFrame:
    """Share of individuals per category within each group.

    ``fraction`` is the summed individual count of a (group, category) pair
    divided by the summed individual count of the group, so fractions within
    a group add up to 1.

    Returns:
        Frame with columns ``group``, ``category``, ``individuals``,
        ``fraction``, sorted by group then category.
    """
    columns = [group, category, *FRACTION_COLUMNS]
    rows = _rows_of_type(table, measurement_type)
    if rows.empty:
        return pd.DataFrame(columns=columns)

    frame = rows[[group, category]].assign(_weight=numeric_values(rows[weight]))
    frame = frame.dropna(subset=[group, category, "_weight"])
    frame = frame[frame["_weight"] >= 0]
    if frame.empty:
        return pd.DataFrame(columns=columns)

    sums = frame.groupby([group, category])["_weight"].sum().reset_index(name="individuals")
    totals = sums.groupby(group)["individuals"].transform("sum")
    sums = sums[totals > 0].copy()
    sums["fraction"] = sums["individuals"] / totals[totals > 0]
    return sums.reset_index(drop=True)[columns]


def expand_weighted(values: Any, weights: Any) -> np.ndarray:
    """Repeat each value by its (rounded) weight.

    ``expand_weighted([10, 20], [2, 1])`` -> ``[10, 10, 20]``.  Pairs with a
    missing or non-positive weight, or a missing value, contribute nothing.
    """
    vals = np.asarray(values, dtype=float)
    counts = np.asarray(weights, dtype=float)
    keep = ~np.isnan(vals) & ~np.isnan(counts) & (counts > 0)
    return np.repeat(vals[keep], np.rint(counts[keep]).astype(int))


def weighted_stats(
    table: pd.DataFrame,
    measurement_type: str,
    *,
    group: str = "island",
    value: str = VALUE_COLUMN,
    weight: str = WEIGHT_COLUMN,
) -> pd.DataFrame:
    """Distribution of a numeric measurement per group, weighted by count.

    Statistics are computed on the logical expansion of the rows (see
    ``expand_weighted``): ``n`` is the number of individuals, ``std`` is the
    sample standard deviation, ``q1``/``q3`` use linear interpolation.

    Returns:
        Frame with columns ``group``, ``n``, ``mean``, ``median``, ``q1``,
        ``q3``, ``std``, sorted by group.
    """
    frame = numeric_measurements(table, measurement_type, group=group, value=value, weight=weight)

    records: list[dict[str, Any]] = []
    for name, sub in frame.groupby(group, sort=True):
        expanded = pd.Series(expand_weighted(sub["value"], sub["weight"]))
        if expanded.empty:
            continue
        records.append(
            {
                group: name,
                "n": len(expanded),
                "mean": expanded.mean(),
                "median": expanded.median(),
                "q1": expanded.quantile(0.25),
                "q3": expanded.quantile(0.75),
                "std": expanded.std(),
            }
        )
    return pd.DataFrame(records, columns=[group, *STATS_COLUMNS])


def order_groups(frame: pd.DataFrame, by: str, *, ascending: bool = False) -> pd.DataFrame:
    """Reorder rows by a column for display; values are untouched."""
    return frame.sort_values(by, ascending=ascending, kind="stable", ignore_index=True)
