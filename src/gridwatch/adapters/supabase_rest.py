"""Supabase PostgREST query adapter.

Implements the core QueryPort with predicate-scoped GET requests.
"""

from __future__ import annotations

import asyncio
import json
import urllib.error
import urllib.parse
import urllib.request

from gridwatch.core.collections import Collection

SELECT_COLUMNS = "id,title,body,created_at"


def build_query_url(base_url: str, collection: Collection, value: str) -> str:
    """Return the PostgREST URL for one collection scoped to a recipient value."""

    params = [
        ("select", SELECT_COLUMNS),
        (collection.filter_column, f"eq.{value}"),
    ]
    params.extend((column, f"eq.{expected}") for column, expected in collection.extra_filters)
    params.append(("order", "created_at.asc"))
    return f"{base_url.rstrip('/')}/rest/v1/{collection.table}?{urllib.parse.urlencode(params)}"


class SupabaseQueryClient:
    """QueryPort adapter over the Supabase REST API."""

    def __init__(self, base_url: str, api_key: str, access_token: str, timeout: float = 10.0) -> None:
        self._base_url = base_url
        self._api_key = api_key
        self._access_token = access_token
        self._timeout = timeout

    async def fetch(self, collection: Collection, value: str) -> list[dict]:
        # urllib is blocking; keep it off the event loop.
        return await asyncio.to_thread(self._fetch_sync, collection, value)

    def _fetch_sync(self, collection: Collection, value: str) -> list[dict]:
        request = urllib.request.Request(build_query_url(self._base_url, collection, value), method="GET")
        request.add_header("apikey", self._api_key)
        request.add_header("Authorization", f"Bearer {self._access_token}")
        request.add_header("Accept", "application/json")
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                payload = json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"Supabase query error {e.code} on {collection.table}: {body}") from e

        if not isinstance(payload, list):
            raise RuntimeError(f"Unexpected response for {collection.table}: {payload!r}")
        return payload
