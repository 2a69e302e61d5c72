"""
Prefect flow for building the HTML report from cached occurrences.

Reads the result set stored by the fetch flow, flattens the embedded
measurements, recodes trophic codes, computes the grouped summaries and
renders everything into a single self-contained page.

Run locally:
    python -m reef_fish_explorer.flows.build <dataset-id>
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from prefect import flow, task
from prefect.cache_policies import NO_CACHE

from reef_fish_explorer.analysis import (
    CONSUMER_LABELS,
    TROPHIC_LABELS,
    FlattenResult,
    flatten_measurements,
    island_summary,
    numeric_measurements,
    occurrences_frame,
    order_groups,
    recode,
    records_per_year,
    top_species,
    weighted_fractions,
    weighted_stats,
)
from reef_fish_explorer.cache import open_cache
from reef_fish_explorer.config import Settings, get_settings
from reef_fish_explorer.renderers import render_template
from reef_fish_explorer.renderers.charts import (
    length_jitter_chart,
    length_stats_chart,
    records_per_island_chart,
    records_per_year_chart,
    trophic_composition_chart,
)
from reef_fish_explorer.renderers.occurrence_map import build_occurrence_map_html
from reef_fish_explorer.renderers.palette import build_palette
from reef_fish_explorer.renderers.tables import (
    build_fraction_table_html,
    build_island_table_html,
    build_length_table_html,
    build_species_table_html,
    build_year_table_html,
)
from reef_fish_explorer.schemas import QueryParams

REPORT_NAME = "report.html"


@dataclass
class Summaries:
    """Every table the report shows, computed once."""

    occurrences: pd.DataFrame
    per_year: pd.DataFrame
    islands: pd.DataFrame
    species: pd.DataFrame
    trophic: pd.DataFrame
    consumer: pd.DataFrame
    lengths: pd.DataFrame
    length_stats: pd.DataFrame


# =============================================================================
# Data loading and analysis tasks
# =============================================================================


@task(name="load-occurrences", cache_policy=NO_CACHE)
def load_occurrences(params: QueryParams, cache_dir: Path) -> dict[str, Any] | None:
    """Load the cached envelope (meta + data) for ``params``, or None."""
    with open_cache(cache_dir) as cache:
        return cache.get_raw(params)


@task(name="flatten-measurements", cache_policy=NO_CACHE)
def flatten(
    records: list[dict[str, Any]],
    settings: Settings,
    strict: bool = False,
) -> FlattenResult:
    """Flatten embedded measurements and recode trophic/consumer codes."""
    result = flatten_measurements(records, strict=strict)
    table = recode(result.table, TROPHIC_LABELS, measurement_type=settings.trophic_type)
    table = recode(table, CONSUMER_LABELS, measurement_type=settings.consumer_type)
    return FlattenResult(table=table, total=result.total, unmatched=result.unmatched)


@task(name="summarize", cache_policy=NO_CACHE)
def summarize(
    records: list[dict[str, Any]],
    measurements: pd.DataFrame,
    settings: Settings,
) -> Summaries:
    """Compute the time, space, species, trophic and length summaries."""
    occurrences = occurrences_frame(records)
    islands = island_summary(occurrences)

    length_stats = order_groups(weighted_stats(measurements, settings.length_type), "mean")

    return Summaries(
        occurrences=occurrences,
        per_year=records_per_year(occurrences),
        islands=islands,
        species=top_species(occurrences),
        trophic=weighted_fractions(measurements, settings.trophic_type),
        consumer=weighted_fractions(measurements, settings.consumer_type),
        lengths=numeric_measurements(measurements, settings.length_type),
        length_stats=length_stats,
    )


# =============================================================================
# Rendering tasks
# =============================================================================


@task(name="build-html", cache_policy=NO_CACHE)
def build_html(
    summaries: Summaries,
    flattened: FlattenResult,
    meta: dict[str, Any],
) -> str:
    """Render the full report page."""
    island_order = summaries.islands["island"].tolist()
    length_order = summaries.length_stats["island"].tolist()
    palette = build_palette(
        str(g) for g in summaries.islands["island_group"].fillna("unknown").tolist()
    )

    map_html, map_script = build_occurrence_map_html(summaries.occurrences, palette)
    params = meta.get("params", {})

    return render_template(
        "report.html.j2",
        title="Reef Fish Survey Explorer",
        dataset_id=params.get("dataset_id", ""),
        fetched_at=meta.get("fetched_at", ""),
        record_count=len(summaries.occurrences),
        measurement_count=len(flattened.table),
        unmatched=flattened.unmatched,
        year_chart=records_per_year_chart(summaries.per_year),
        year_table=build_year_table_html(summaries.per_year),
        occurrence_map=map_html,
        map_script=map_script,
        island_chart=records_per_island_chart(summaries.islands, palette),
        island_table=build_island_table_html(summaries.islands),
        species_table=build_species_table_html(summaries.species),
        trophic_chart=trophic_composition_chart(summaries.trophic, order=island_order),
        consumer_chart=trophic_composition_chart(
            summaries.consumer, order=island_order, title="Consumer Level by Island"
        ),
        trophic_table=build_fraction_table_html(summaries.trophic),
        length_chart=length_stats_chart(summaries.length_stats),
        length_jitter=length_jitter_chart(summaries.lengths, order=length_order),
        length_table=build_length_table_html(summaries.length_stats),
    )


@task(name="write-report", cache_policy=NO_CACHE)
def write_report(html: str, output_dir: Path) -> Path:
    """Write the report page to the output directory."""
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / REPORT_NAME
    with output_path.open("w", encoding="utf-8") as f:
        f.write(html)
    return output_path


@flow(name="build-report", log_prints=True, validate_parameters=False)
def build_all(
    dataset_id: str,
    include_measurements: bool = True,
    cache_dir: Path | None = None,
    output_dir: Path | None = None,
    strict: bool = False,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """
    Build the HTML report from cached occurrences.

    Args:
        dataset_id: OBIS dataset UUID.
        include_measurements: Which cache entry to read (must match the fetch).
        cache_dir: Cache directory (defaults to ``Settings.cache_dir``).
        output_dir: Report directory (defaults to ``Settings.output_dir``).
        strict: Fail instead of dropping measurements without a parent.
        settings: Measurement type names and default directories
            (defaults to ``get_settings()``).
    """
    settings = settings or get_settings()
    params = QueryParams(dataset_id=dataset_id, include_measurements=include_measurements)

    print("Loading cached occurrences...")
    envelope = load_occurrences(params, cache_dir or settings.cache_dir)
    if envelope is None:
        print("No cached occurrences found. Run fetch flow first.")
        return {"error": "no data"}

    records: list[dict[str, Any]] = envelope.get("data", [])
    meta: dict[str, Any] = envelope.get("meta", {})

    print(f"Flattening measurements of {len(records)} occurrences...")
    flattened = flatten(records, settings, strict=strict)
    if flattened.unmatched:
        print(
            f"Warning: dropped {flattened.unmatched} of {flattened.total} measurements "
            "with no matching occurrence."
        )

    print("Summarizing...")
    summaries = summarize(records, flattened.table, settings)

    print("Building HTML...")
    html = build_html(summaries, flattened, meta)

    print("Writing report...")
    output_path = write_report(html, output_dir or settings.output_dir)

    print(f"Report built: {output_path}")
    return {
        "records": len(records),
        "measurements": len(flattened.table),
        "unmatched": flattened.unmatched,
        "output": str(output_path),
    }


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: python -m reef_fish_explorer.flows.build <dataset-id>", file=sys.stderr)
        sys.exit(1)
    result = build_all(sys.argv[1])
    print(f"Flow complete: {result}")
