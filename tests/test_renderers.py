"""
Tests for the renderer modules: palette, tables, charts and map.
"""

from __future__ import annotations

import json
import re

import numpy as np
import pandas as pd
import pytest

from reef_fish_explorer.renderers.charts import (
    length_jitter_chart,
    length_stats_chart,
    records_per_island_chart,
    records_per_year_chart,
    trophic_composition_chart,
)
from reef_fish_explorer.renderers.occurrence_map import (
    build_occurrence_map_html,
    site_markers,
    year_range,
)
from reef_fish_explorer.renderers.palette import FALLBACK_COLOR, build_palette
from reef_fish_explorer.renderers.tables import (
    Column,
    build_fraction_table_html,
    build_length_table_html,
    build_table_html,
    build_year_table_html,
    format_cell,
)


@pytest.fixture
def occurrences() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "eventID": ["e1", "e2", "e3", "e4"],
            "scientificName": ["A a", "B b", "A a", "C c"],
            "year": [2010.0, 2010.0, 2012.0, np.nan],
            "individualCount": [3.0, 1.0, 5.0, 2.0],
            "decimalLatitude": [28.2, 28.2, 28.4, np.nan],
            "decimalLongitude": [-177.3, -177.3, -178.3, np.nan],
            "island": ["Midway", "Midway", "Kure", "Kure"],
            "islandGroup": ["NWHI", "NWHI", "NWHI", "NWHI"],
        }
    )


# =============================================================================
# palette
# =============================================================================


class TestPalette:
    """Test category colors."""

    def test_assigns_in_order(self) -> None:
        palette = build_palette(["herbivore", "piscivore"])
        assert list(palette) == ["herbivore", "piscivore"]
        assert palette["herbivore"].color != palette["piscivore"].color

    def test_duplicates_keep_first(self) -> None:
        palette = build_palette(["a", "b", "a"])
        assert list(palette) == ["a", "b"]

    def test_cycles_colors(self) -> None:
        palette = build_palette(str(i) for i in range(20))
        assert palette["0"].color == palette["12"].color


# =============================================================================
# tables
# =============================================================================


class TestTables:
    """Test HTML table rendering."""

    def test_format_cell_missing(self) -> None:
        assert format_cell(None) == "—"
        assert format_cell(float("nan"), "{:.1f}") == "—"

    def test_format_cell_fmt(self) -> None:
        assert format_cell(0.25, "{:.1%}") == "25.0%"

    def test_format_cell_bad_fmt_falls_back(self) -> None:
        assert format_cell("abc", "{:.1f}") == "abc"

    def test_build_table(self) -> None:
        frame = pd.DataFrame({"island": ["Midway"], "records": [1234]})
        html = build_table_html(
            "Islands", frame, [Column("island", "Island"), Column("records", "Records", "{:,}")]
        )
        assert "<table" in html
        assert "Island" in html
        assert "1,234" in html

    def test_build_table_escapes(self) -> None:
        frame = pd.DataFrame({"island": ["<script>"]})
        html = build_table_html("T", frame, [Column("island", "Island")])
        assert "<script>" not in html

    def test_build_table_limit(self) -> None:
        frame = pd.DataFrame({"island": ["a", "b", "c"]})
        html = build_table_html("T", frame, [Column("island", "Island")], limit=2)
        assert "<td>a</td>" in html
        assert "<td>c</td>" not in html

    def test_year_table(self) -> None:
        per_year = pd.DataFrame({"year": [2010], "records": [2], "individuals": [4.0]})
        html = build_year_table_html(per_year)
        assert "Records per Year" in html
        assert "2010" in html

    def test_fraction_table(self) -> None:
        fractions = pd.DataFrame(
            {
                "island": ["Midway"],
                "measurementValue": ["herbivore"],
                "individuals": [3.0],
                "fraction": [0.75],
            }
        )
        html = build_fraction_table_html(fractions)
        assert "herbivore" in html
        assert "75.0%" in html

    def test_length_table_unit(self) -> None:
        stats = pd.DataFrame(
            {
                "island": ["Midway"],
                "n": [3],
                "mean": [13.333],
                "median": [10.0],
                "q1": [10.0],
                "q3": [15.0],
                "std": [5.77],
            }
        )
        html = build_length_table_html(stats, unit="mm")
        assert "Mean (mm)" in html
        assert "13.3" in html

    def test_empty_table(self) -> None:
        html = build_year_table_html(pd.DataFrame(columns=["year", "records", "individuals"]))
        assert "Records per Year" in html


# =============================================================================
# charts
# =============================================================================


def _image_src(html: str) -> str:
    match = re.search(r'src="([^"]+)"', html)
    assert match is not None
    return match.group(1)


class TestCharts:
    """Test matplotlib chart fragments."""

    def test_year_chart_embeds_png(self) -> None:
        per_year = pd.DataFrame({"year": [2010, 2012], "records": [2, 1], "individuals": [4, 5]})
        html = records_per_year_chart(per_year)
        assert _image_src(html).startswith("data:image/png;base64,")
        assert "3 records" in html

    def test_empty_chart_notice(self) -> None:
        html = records_per_year_chart(pd.DataFrame(columns=["year", "records"]))
        assert "No data to plot." in html
        assert "<img" not in html

    def test_island_chart(self) -> None:
        islands = pd.DataFrame(
            {
                "island": ["Midway", "Hawaii"],
                "island_group": ["NWHI", "MHI"],
                "records": [5, 3],
            }
        )
        assert "data:image/png" in records_per_island_chart(islands)

    def test_trophic_chart(self) -> None:
        fractions = pd.DataFrame(
            {
                "island": ["Midway", "Midway", "Kure"],
                "measurementValue": ["herbivore", "piscivore", "herbivore"],
                "individuals": [3.0, 1.0, 2.0],
                "fraction": [0.75, 0.25, 1.0],
            }
        )
        html = trophic_composition_chart(fractions, order=["Kure", "Midway", "Laysan"])
        assert "data:image/png" in html
        assert "Trophic Composition by Island" in html

    def test_trophic_chart_custom_title(self) -> None:
        html = trophic_composition_chart(
            pd.DataFrame(columns=["island", "measurementValue", "fraction"]), title="Consumers"
        )
        assert "Consumers" in html
        assert "No data to plot." in html

    def test_length_stats_chart(self) -> None:
        stats = pd.DataFrame(
            {
                "island": ["Midway", "Kure"],
                "n": [3, 1],
                "mean": [13.3, 12.0],
                "median": [10.0, 12.0],
                "q1": [10.0, 12.0],
                "q3": [15.0, 12.0],
                "std": [5.77, np.nan],
            }
        )
        html = length_stats_chart(stats)
        assert "data:image/png" in html
        assert "4 fish" in html

    def test_length_jitter_deterministic(self) -> None:
        lengths = pd.DataFrame(
            {
                "island": ["Midway", "Midway", "Kure"],
                "value": [10.0, 20.0, 12.0],
                "weight": [2, 1, 1],
            }
        )
        first = length_jitter_chart(lengths)
        second = length_jitter_chart(lengths)
        assert first == second
        assert "3 length records" in first


# =============================================================================
# occurrence map
# =============================================================================


class TestYearRange:
    """Test year range labels."""

    def test_range(self) -> None:
        assert year_range(pd.Series([2012.0, 2010.0, np.nan])) == "2010–2012"

    def test_single_year(self) -> None:
        assert year_range(pd.Series([2012.0])) == "2012"

    def test_no_years(self) -> None:
        assert year_range(pd.Series([np.nan])) == "all years"


class TestOccurrenceMap:
    """Test the Leaflet map of survey sites."""

    def test_one_marker_per_site(self, occurrences: pd.DataFrame) -> None:
        markers = site_markers(occurrences, build_palette(["NWHI"]))
        assert len(markers) == 2
        midway = next(m for m in markers if m["island"] == "Midway")
        assert midway["records"] == 2
        assert midway["individuals"] == 4
        assert midway["species"] == 2
        assert midway["years"] == "2010"

    def test_unknown_group_uses_fallback(self, occurrences: pd.DataFrame) -> None:
        markers = site_markers(occurrences, {})
        assert all(m["color"] == FALLBACK_COLOR for m in markers)

    def test_build_map(self, occurrences: pd.DataFrame) -> None:
        div, script = build_occurrence_map_html(occurrences)
        assert 'id="occurrence-map"' in div
        assert "2 sites" in div
        assert "NWHI" in div
        payload = re.search(r"var markers = (\[.*?\]);", script, re.DOTALL)
        assert payload is not None
        assert len(json.loads(payload.group(1))) == 2

    def test_script_safe_island_names(self, occurrences: pd.DataFrame) -> None:
        occurrences.loc[0, "island"] = "</script><b>"
        _, script = build_occurrence_map_html(occurrences)
        assert "</script><b>" not in script

    def test_no_located_records(self, occurrences: pd.DataFrame) -> None:
        located = occurrences.assign(decimalLatitude=np.nan)
        div, script = build_occurrence_map_html(located)
        assert "No located occurrences" in div
        assert script == ""
