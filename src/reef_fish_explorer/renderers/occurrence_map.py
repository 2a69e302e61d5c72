"""Leaflet map renderer for survey sites.

Occurrences are collapsed to one marker per surveyed coordinate, carrying
structured data for popups (island, records, individuals, species, years).
Markers are colored by island group.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from reef_fish_explorer.renderers import render_template
from reef_fish_explorer.renderers.palette import FALLBACK_COLOR, CategoryStyle, build_palette

if TYPE_CHECKING:
    import pandas as pd


def _json_for_script(value: Any) -> str:
    """JSON that is safe to inline inside a <script> element."""
    return json.dumps(value, separators=(",", ":")).replace("</", "<\\/")


def year_range(years: pd.Series) -> str:
    """Year range label, e.g. '2010–2017'."""
    clean = years.dropna()
    if clean.empty:
        return "all years"
    first, last = int(clean.min()), int(clean.max())
    if first == last:
        return str(first)
    return f"{first}–{last}"


def site_markers(
    occurrences: pd.DataFrame,
    palette: dict[str, CategoryStyle],
) -> list[dict[str, Any]]:
    """One marker dict per distinct (lat, lon) with aggregated counts."""
    located = occurrences.dropna(subset=["decimalLatitude", "decimalLongitude"])
    if located.empty:
        return []

    sites = (
        located.fillna({"island": "unknown", "islandGroup": "unknown"})
        .groupby(["decimalLatitude", "decimalLongitude"], sort=False)
        .agg(
            island=("island", "first"),
            island_group=("islandGroup", "first"),
            records=("individualCount", "size"),
            individuals=("individualCount", "sum"),
            species=("scientificName", "nunique"),
            first_year=("year", "min"),
            last_year=("year", "max"),
        )
        .reset_index()
    )

    markers: list[dict[str, Any]] = []
    for site in sites.to_dict(orient="records"):
        group = str(site["island_group"])
        style = palette.get(group)
        years = [y for y in (site["first_year"], site["last_year"]) if y == y]  # drop NaN
        markers.append(
            {
                "lat": round(float(site["decimalLatitude"]), 5),
                "lon": round(float(site["decimalLongitude"]), 5),
                "island": str(site["island"]),
                "group": group,
                "records": int(site["records"]),
                "individuals": int(site["individuals"]),
                "species": int(site["species"]),
                "years": "–".join(str(int(y)) for y in dict.fromkeys(years)),
                "color": style.color if style else FALLBACK_COLOR,
            }
        )
    return markers


def build_occurrence_map_html(
    occurrences: pd.DataFrame,
    palette: dict[str, CategoryStyle] | None = None,
) -> tuple[str, str]:
    """Build an interactive Leaflet map of survey sites.

    Args:
        occurrences: Frame from ``analysis.occurrences_frame``.
        palette: Island group -> style. Built from the data when omitted.

    Returns a (map_div_html, map_script_js) tuple.
    """
    if palette is None:
        groups = occurrences["islandGroup"].dropna().astype(str).unique().tolist()
        palette = build_palette(groups)

    markers = site_markers(occurrences, palette)
    if not markers:
        return (
            "<h2>Survey Sites</h2><p>No located occurrences available for the map.</p>",
            "",
        )

    legend = [
        {"label": name, "color": style.color}
        for name, style in palette.items()
        if any(m["group"] == name for m in markers)
    ]

    map_div = render_template(
        "occurrence_map.html.j2",
        years=year_range(occurrences["year"]),
        site_count=len(markers),
        record_count=len(occurrences),
        legend=legend,
    )
    map_script = render_template(
        "occurrence_map_script.html.j2",
        markers_json=_json_for_script(markers),
    )
    return (map_div, map_script)
