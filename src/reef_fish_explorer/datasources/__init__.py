"""External data source integrations.

Each subdirectory is one data source with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # API URLs, constants, pagination
    └── {feature}.py      # Fetch functions (one per endpoint/concept)

Adding a new datasource
-----------------------
1. Create ``datasources/{name}/`` with files above.
   See ``obis/`` for an example.

2. Write fetch functions that return plain dicts/lists::

       from reef_fish_explorer.services.http import session

       def fetch_something(dataset_id) -> list[dict[str, Any]]:
           resp = session.get(API_URL, params={...})
           resp.raise_for_status()
           return resp.json()["results"]

3. Re-export public API in ``__init__.py`` with ``__all__``.

4. Wire into the pipeline (see ``flows/fetch.py``):
   - Build a ``QueryParams``-like key for the call
   - Route the call through ``cache.cached_fetch`` so reruns skip the network

5. Add tests in ``tests/test_{name}.py``.
"""
