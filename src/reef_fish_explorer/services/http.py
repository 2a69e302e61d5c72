"""
Shared HTTP client with automatic retry and backoff.

Provides a pre-configured ``requests.Session`` that retries on transient
HTTP statuses (429/502/503/504) with exponential backoff.  Anything else,
including connection failures that outlast the adapter, surfaces to the
caller.  Datasource modules should use this instead of bare ``requests.get``.

Usage::

    from reef_fish_explorer.services.http import session

    resp = session.get("https://api.obis.org/v3/occurrence", params={...})
    resp.raise_for_status()
"""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from reef_fish_explorer import __version__

#: Default retry strategy: transient server-side statuses only.
DEFAULT_RETRY = Retry(
    total=3,
    backoff_factor=2,  # 0s, 2s, 4s between retries
    status_forcelist=[429, 502, 503, 504],
    allowed_methods=["GET", "HEAD"],
    raise_on_status=False,  # let resp.raise_for_status() handle it
)

# OBIS pages of 10k records with mof can take a while to assemble server-side.
DEFAULT_TIMEOUT = 120  # seconds


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> requests.Session:
    """
    Build a ``requests.Session`` with retry adapter mounted.

    Args:
        retry: Custom retry strategy (defaults to ``DEFAULT_RETRY``).
        timeout: Default timeout applied to every request.
    """
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=retry or DEFAULT_RETRY)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = f"reef-fish-explorer/{__version__}"
    s.headers["Accept"] = "application/json"

    # Inject a default timeout so callers don't need to pass ``timeout=``.
    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: object
    ) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return _original_send(prepared, **kwargs)  # type: ignore[arg-type]

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s


#: Module-level session, import and use directly.
session: requests.Session = create_session()
