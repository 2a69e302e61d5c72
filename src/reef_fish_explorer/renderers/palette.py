"""Category visual styling: colors and labels.

Shared by the map (island groups) and the charts (trophic guilds).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

_CATEGORY_COLORS = [
    "#4363d8",  # blue
    "#e6194b",  # red
    "#3cb44b",  # green
    "#f58231",  # orange
    "#911eb4",  # purple
    "#42d4f4",  # cyan
    "#f032e6",  # magenta
    "#bfef45",  # lime
    "#469990",  # teal
    "#9a6324",  # brown
    "#ffe119",  # yellow
    "#808000",  # olive
]

FALLBACK_COLOR = "#888"


@dataclass
class CategoryStyle:
    """Visual style for one category on the map and in charts."""

    color: str
    label: str


def build_palette(categories: Iterable[str]) -> dict[str, CategoryStyle]:
    """Assign a color to each category, in order given.

    Duplicates keep their first assignment.
    """
    palette: dict[str, CategoryStyle] = {}
    for name in categories:
        if name in palette:
            continue
        color = _CATEGORY_COLORS[len(palette) % len(_CATEGORY_COLORS)]
        palette[name] = CategoryStyle(color=color, label=name)
    return palette
