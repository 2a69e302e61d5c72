"""Summary tables rendered as HTML.

Each builder picks the columns of one analysis frame, formats the cells,
and renders ``table.html.j2``.
"""

from __future__ import annotations

from typing import Any, NamedTuple

import pandas as pd

from reef_fish_explorer.renderers import render_template


class Column(NamedTuple):
    """One displayed column: frame key, header label, number format."""

    key: str
    label: str
    fmt: str = "{}"


def format_cell(value: Any, fmt: str = "{}") -> str:
    """Format a cell; missing values render as an em dash."""
    if value is None or (pd.api.types.is_scalar(value) and pd.isna(value)):
        return "—"
    try:
        return fmt.format(value)
    except (ValueError, TypeError):
        return str(value)


def build_table_html(
    title: str,
    frame: pd.DataFrame,
    columns: list[Column],
    *,
    caption: str = "",
    limit: int | None = None,
) -> str:
    """Render selected columns of ``frame`` as an HTML table fragment."""
    if frame.empty:
        return render_template("table.html.j2", title=title, headers=[], rows=[], caption="")

    shown = frame if limit is None else frame.head(limit)
    rows = [
        [format_cell(record.get(col.key), col.fmt) for col in columns]
        for record in shown.to_dict(orient="records")
    ]
    return render_template(
        "table.html.j2",
        title=title,
        headers=[col.label for col in columns],
        rows=rows,
        caption=caption,
    )


def build_year_table_html(per_year: pd.DataFrame) -> str:
    return build_table_html(
        "Records per Year",
        per_year,
        [
            Column("year", "Year"),
            Column("records", "Records", "{:,}"),
            Column("individuals", "Individuals", "{:,.0f}"),
        ],
    )


def build_island_table_html(islands: pd.DataFrame) -> str:
    return build_table_html(
        "Islands",
        islands,
        [
            Column("island", "Island"),
            Column("island_group", "Island group"),
            Column("records", "Records", "{:,}"),
            Column("individuals", "Individuals", "{:,.0f}"),
            Column("latitude", "Lat", "{:.3f}"),
            Column("longitude", "Lon", "{:.3f}"),
        ],
        caption="Ordered by number of records.",
    )


def build_species_table_html(species: pd.DataFrame) -> str:
    return build_table_html(
        "Most Counted Species",
        species,
        [
            Column("scientificName", "Species"),
            Column("records", "Records", "{:,}"),
            Column("individuals", "Individuals", "{:,.0f}"),
        ],
    )


def build_fraction_table_html(
    fractions: pd.DataFrame,
    *,
    title: str = "Trophic Composition",
    group: str = "island",
    category: str = "measurementValue",
) -> str:
    """Long-form table of (group, category) individual fractions."""
    return build_table_html(
        title,
        fractions,
        [
            Column(group, group.replace("_", " ").capitalize()),
            Column(category, "Category"),
            Column("individuals", "Individuals", "{:,.0f}"),
            Column("fraction", "Fraction", "{:.1%}"),
        ],
    )


def build_length_table_html(stats: pd.DataFrame, *, group: str = "island", unit: str = "cm") -> str:
    """Weighted length statistics per group."""
    return build_table_html(
        "Fish Length Statistics",
        stats,
        [
            Column(group, group.replace("_", " ").capitalize()),
            Column("n", "Fish", "{:,}"),
            Column("mean", f"Mean ({unit})", "{:.1f}"),
            Column("median", f"Median ({unit})", "{:.1f}"),
            Column("q1", f"Q1 ({unit})", "{:.1f}"),
            Column("q3", f"Q3 ({unit})", "{:.1f}"),
            Column("std", f"SD ({unit})", "{:.1f}"),
        ],
        caption="Each length record counts once per individual.",
    )
