"""Static matplotlib charts embedded in the report as PNG data URIs.

Figures are built with the object-oriented ``Figure`` API so no pyplot
state leaks between charts.  Each ``*_chart`` function returns an HTML
``<figure>`` fragment, or a short notice when there is nothing to plot.
"""

from __future__ import annotations

import base64
import io
from typing import TYPE_CHECKING

import numpy as np
from matplotlib.figure import Figure
from matplotlib.patches import Patch

from reef_fish_explorer.renderers import render_template
from reef_fish_explorer.renderers.palette import FALLBACK_COLOR, CategoryStyle, build_palette

if TYPE_CHECKING:
    import pandas as pd

FIGURE_DPI = 110
JITTER_SEED = 42


def figure_to_data_uri(fig: Figure) -> str:
    """Encode a figure as a base64 PNG data URI."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=FIGURE_DPI, bbox_inches="tight")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def _figure_html(title: str, fig: Figure, caption: str = "") -> str:
    return render_template(
        "figure.html.j2",
        title=title,
        src=figure_to_data_uri(fig),
        caption=caption,
    )


def _empty_html(title: str) -> str:
    return render_template("figure.html.j2", title=title, src="", caption="No data to plot.")


# =============================================================================
# Time and space
# =============================================================================


def records_per_year_chart(per_year: pd.DataFrame) -> str:
    """Bar chart of occurrence records per survey year."""
    title = "Records per Year"
    if per_year.empty:
        return _empty_html(title)

    fig = Figure(figsize=(8, 3.5))
    ax = fig.subplots()
    ax.bar(per_year["year"].astype(str), per_year["records"], color="#4363d8")
    ax.set_xlabel("Year")
    ax.set_ylabel("Records")
    ax.tick_params(axis="x", labelrotation=45)
    ax.grid(axis="y", alpha=0.3)
    return _figure_html(title, fig, f"{int(per_year['records'].sum())} records")


def records_per_island_chart(
    islands: pd.DataFrame,
    palette: dict[str, CategoryStyle] | None = None,
) -> str:
    """Horizontal bar chart of records per island, most surveyed on top.

    Bars are colored by island group.
    """
    title = "Records per Island"
    if islands.empty:
        return _empty_html(title)

    groups = [str(g) for g in islands["island_group"].fillna("unknown")]
    if palette is None:
        palette = build_palette(groups)
    group_colors = {g: palette[g].color if g in palette else FALLBACK_COLOR for g in groups}
    colors = [group_colors[g] for g in groups]

    fig = Figure(figsize=(8, max(2.5, 0.3 * len(islands))))
    ax = fig.subplots()
    # barh draws bottom-up; reverse so the first row ends on top
    ax.barh(islands["island"][::-1].astype(str), islands["records"][::-1], color=colors[::-1])
    ax.set_xlabel("Records")
    ax.grid(axis="x", alpha=0.3)
    if len(group_colors) > 1:
        handles = [Patch(facecolor=c) for c in group_colors.values()]
        ax.legend(
            handles, list(group_colors), title="Island group", fontsize="small", loc="lower right"
        )
    return _figure_html(title, fig)


# =============================================================================
# Trophic composition
# =============================================================================


def trophic_composition_chart(
    fractions: pd.DataFrame,
    *,
    group: str = "island",
    category: str = "measurementValue",
    order: list[str] | None = None,
    title: str = "Trophic Composition by Island",
) -> str:
    """Stacked horizontal bars of individual-weighted fractions per group.

    Args:
        fractions: Output of ``analysis.weighted_fractions``.
        group: Group column (one bar per value).
        category: Category column (one segment per value).
        order: Display order of groups, top to bottom. Defaults to sorted.
        title: Figure title.
    """
    if fractions.empty:
        return _empty_html(title)

    table = fractions.pivot_table(
        index=group, columns=category, values="fraction", aggfunc="sum", fill_value=0.0
    )
    rows = [g for g in (order or sorted(table.index)) if g in table.index]
    table = table.loc[rows[::-1]]
    palette = build_palette(str(c) for c in table.columns)

    fig = Figure(figsize=(8, max(2.5, 0.35 * len(rows))))
    ax = fig.subplots()
    left = np.zeros(len(table))
    for column in table.columns:
        widths = table[column].to_numpy(dtype=float)
        ax.barh(
            table.index.astype(str),
            widths,
            left=left,
            color=palette[str(column)].color,
            label=str(column),
        )
        left += widths
    ax.set_xlim(0, 1)
    ax.set_xlabel("Fraction of individuals")
    ax.legend(fontsize="small", loc="center left", bbox_to_anchor=(1.0, 0.5))
    return _figure_html(title, fig)


# =============================================================================
# Fish length
# =============================================================================


def length_stats_chart(
    stats: pd.DataFrame,
    *,
    group: str = "island",
    unit: str = "cm",
) -> str:
    """Error-bar plot of weighted length statistics per group.

    Points mark the mean with +/- one standard deviation, the thick bar
    spans the interquartile range and the diamond marks the median.  Rows
    are drawn in the order given (sort with ``analysis.order_groups``).
    """
    title = "Fish Length by Island"
    if stats.empty:
        return _empty_html(title)

    frame = stats.iloc[::-1]
    y = np.arange(len(frame))

    fig = Figure(figsize=(8, max(2.5, 0.35 * len(frame))))
    ax = fig.subplots()
    ax.hlines(y, frame["q1"], frame["q3"], color="#9ecae1", linewidth=6, label="IQR")
    ax.errorbar(
        frame["mean"],
        y,
        xerr=frame["std"].fillna(0.0),
        fmt="o",
        color="#08519c",
        capsize=3,
        label="mean ± sd",
    )
    ax.scatter(frame["median"], y, marker="D", color="#e6550d", zorder=3, label="median")
    ax.set_yticks(y, frame[group].astype(str))
    ax.set_xlabel(f"Length ({unit})")
    ax.grid(axis="x", alpha=0.3)
    ax.legend(fontsize="small", loc="lower right")
    return _figure_html(title, fig, f"Weighted by individual count ({int(stats['n'].sum())} fish)")


def length_jitter_chart(
    lengths: pd.DataFrame,
    *,
    group: str = "island",
    order: list[str] | None = None,
    unit: str = "cm",
    seed: int = JITTER_SEED,
) -> str:
    """Jittered scatter of individual length records per group.

    Marker area grows with the record's individual count.

    Args:
        lengths: Output of ``analysis.numeric_measurements`` (``value``,
            ``weight`` columns).
        group: Group column.
        order: Display order of groups, top to bottom.
        unit: Length unit for the axis label.
        seed: Jitter seed, so reruns draw the same picture.
    """
    title = "Fish Length Records"
    if lengths.empty:
        return _empty_html(title)

    rows = [g for g in (order or sorted(lengths[group].unique())) if g in set(lengths[group])]
    position = {name: i for i, name in enumerate(reversed(rows))}
    frame = lengths[lengths[group].isin(position)]

    rng = np.random.default_rng(seed)
    y = frame[group].map(position).to_numpy(dtype=float) + rng.uniform(-0.3, 0.3, len(frame))
    sizes = 6 + 4 * np.sqrt(frame["weight"].to_numpy(dtype=float))

    fig = Figure(figsize=(8, max(2.5, 0.35 * len(rows))))
    ax = fig.subplots()
    ax.scatter(frame["value"], y, s=sizes, alpha=0.4, color="#3182bd", edgecolors="none")
    ax.set_yticks(list(position.values()), list(position.keys()))
    ax.set_xlabel(f"Length ({unit})")
    ax.grid(axis="x", alpha=0.3)
    return _figure_html(title, fig, f"{len(frame)} length records")
