"""Disk-backed memoization of fetch results.

One JSON file per distinct ``QueryParams`` lives under the cache directory,
named after ``QueryParams.cache_key()``.  Every file is wrapped in a metadata
envelope::

    {"meta": {"source": ..., "fetched_at": ..., "key": ..., "params": {...}},
     "data": [...]}

Entries never expire and are never updated in place: a rerun with the same
parameters reads the stored result, a change of parameters produces a new
key, and the only way to refresh is ``delete()``/``clear()`` (or removing
the file by hand).

Writes go to a temporary sibling file that is renamed into place, so a
failed fetch or an interrupted write never leaves a partial entry behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003
from typing import Any

from reef_fish_explorer.schemas import QueryParams

#: Signature of a fetcher: (dataset_id, include_measurements) -> records.
Fetcher = Callable[[str, bool], list[dict[str, Any]]]

ENTRY_SUFFIX = ".json"


class ResultCache:
    """Key-value store of fetch results on disk, keyed by query parameters."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir
        self._closed = False

    # -- scoped acquisition --------------------------------------------------

    def __enter__(self) -> ResultCache:
        self._check_open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the cache handle; further operations raise ``RuntimeError``."""
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    # -- lookups -------------------------------------------------------------

    def path_for(self, params: QueryParams) -> Path:
        """Absolute location of the entry for ``params`` (may not exist yet)."""
        return self._resolve(Path(params.cache_key() + ENTRY_SUFFIX))

    def contains(self, params: QueryParams) -> bool:
        self._check_open()
        return self.path_for(params).exists()

    def get(self, params: QueryParams) -> list[dict[str, Any]] | None:
        """Read the stored result for ``params``.

        Returns the ``data`` payload, or None if there is no entry.
        """
        envelope = self.get_raw(params)
        if envelope is None:
            return None
        data: list[dict[str, Any]] = envelope["data"]
        return data

    def get_raw(self, params: QueryParams) -> dict[str, Any] | None:
        """Read the full envelope (meta + data) for ``params``."""
        self._check_open()
        full = self.path_for(params)
        if not full.exists():
            return None
        with full.open(encoding="utf-8") as f:
            envelope: dict[str, Any] = json.load(f)
        return envelope

    def keys(self) -> list[str]:
        """Cache keys of every stored entry, sorted."""
        self._check_open()
        if not self.base.exists():
            return []
        return sorted(p.stem for p in self.base.glob("*" + ENTRY_SUFFIX))

    # -- mutation ------------------------------------------------------------

    def put(
        self,
        params: QueryParams,
        data: list[dict[str, Any]],
        source: str,
    ) -> Path:
        """Store ``data`` for ``params`` wrapped in a metadata envelope.

        Args:
            params: Query parameters; their cache key names the file.
            data: Result set to store under the ``data`` key.
            source: Data source identifier (e.g. ``"api.obis.org"``).

        Returns:
            Absolute path of the written entry.
        """
        self._check_open()
        full = self.path_for(params)
        full.parent.mkdir(parents=True, exist_ok=True)

        envelope = {
            "meta": {
                "source": source,
                "fetched_at": datetime.now(UTC).isoformat(),
                "key": params.cache_key(),
                "params": params.model_dump(),
                "records": len(data),
            },
            "data": data,
        }

        fd, tmp_name = tempfile.mkstemp(dir=full.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(envelope, f)
            os.replace(tmp_name, full)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        return full

    def delete(self, params: QueryParams) -> bool:
        """Remove the entry for ``params``. Returns True if one existed."""
        self._check_open()
        full = self.path_for(params)
        if not full.exists():
            return False
        full.unlink()
        return True

    def clear(self) -> int:
        """Remove every entry. Returns the number of entries removed."""
        removed = 0
        for key in self.keys():
            self._resolve(Path(key + ENTRY_SUFFIX)).unlink()
            removed += 1
        return removed

    # -- internals -----------------------------------------------------------

    def _check_open(self) -> None:
        if self._closed:
            msg = f"Cache at {self.base} is closed"
            raise RuntimeError(msg)

    def _resolve(self, path: Path) -> Path:
        full = self.base / path if not path.is_absolute() else path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes cache directory: {path}"
            raise ValueError(msg) from None
        return full


@contextmanager
def open_cache(base_dir: Path) -> Iterator[ResultCache]:
    """Yield a ``ResultCache`` rooted at ``base_dir``, closing it on every exit path."""
    cache = ResultCache(base_dir)
    try:
        yield cache
    finally:
        cache.close()


def cached_fetch(
    fetcher: Fetcher,
    params: QueryParams,
    cache: ResultCache,
    *,
    source: str,
) -> tuple[list[dict[str, Any]], bool]:
    """Return the result of ``fetcher`` for ``params``, memoized in ``cache``.

    On a hit the stored result is returned unchanged and ``fetcher`` is not
    called.  On a miss ``fetcher(dataset_id, include_measurements)`` runs and
    its result is stored before being returned.  If ``fetcher`` raises,
    nothing is written and the exception propagates.

    Returns:
        ``(records, hit)`` where ``hit`` tells whether the cache answered.
    """
    stored = cache.get(params)
    if stored is not None:
        return stored, True

    data = fetcher(params.dataset_id, params.include_measurements)
    cache.put(params, data, source=source)
    return data, False
