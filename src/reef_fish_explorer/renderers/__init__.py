"""Pure rendering functions: structured data -> HTML strings.

All renderers follow the same pattern:
  - Input: pandas frame, dict, or dataclass (from analysis/)
  - Output: str (HTML fragment, not a full page)
  - No side effects, no I/O, no Prefect decorators

Used by flows/build.py which orchestrates the rendering pipeline.

Public API:
  - charts: records_per_year_chart, records_per_island_chart,
    trophic_composition_chart, length_stats_chart, length_jitter_chart
  - tables: build_table_html
  - occurrence_map: build_occurrence_map_html
  - palette: CategoryStyle, build_palette

Adding a renderer (UI module)
-----------------------------
1. Create ``renderers/{name}.py`` with a build function::

       from reef_fish_explorer.renderers import render_template

       def build_mywidget_html(frame: pd.DataFrame) -> str:
           rows = [...]
           return render_template("mywidget.html.j2", rows=rows)

2. Create a Jinja2 template in ``templates/{name}.html.j2``.
   Templates produce HTML fragments (no <html>/<body> tags).
   CSS goes in ``templates/report.html.j2`` within the <style> block.

3. Wire into ``flows/build.py``:
   - Import your build function.
   - Call it in ``build_html()`` and pass the result to
     ``render_template("report.html.j2", ..., mywidget=result)``.
   - Add the ``{{ mywidget }}`` placeholder in ``report.html.j2``.

4. Add tests: call your build function with sample data and assert
   the returned HTML contains expected content.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jinja2

# Shared Jinja2 environment for all renderers
_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
_jinja_env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=True,
)


def render_template(template_name: str, **kwargs: Any) -> str:
    """Render a Jinja2 template by name."""
    return _jinja_env.get_template(template_name).render(**kwargs)
