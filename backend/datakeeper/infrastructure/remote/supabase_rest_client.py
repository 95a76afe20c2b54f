"""Supabase REST client — implements the RemoteDataClient interface.

Talks to the PostgREST endpoint of a Supabase project
(``<project>/rest/v1/app_data``) with httpx. One row per category and owner;
the row's ``data`` column holds the snake_case representation.
"""

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from datakeeper.application.interfaces import RemoteDataClient, RemoteSnapshot
from datakeeper.domain.entities import parse_timestamp
from datakeeper.domain.exceptions import RemoteBackendError
from datakeeper.domain.field_names import keys_to_camel, keys_to_snake

logger = logging.getLogger(__name__)

_TABLE = "app_data"


class SupabaseRestClient(RemoteDataClient):
    """Infrastructure adapter — connects to the Supabase REST API.

    Accepts an injected ``httpx.AsyncClient`` (shared pool, or a
    ``MockTransport`` in tests); otherwise a client is created per call.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        data_id: str = "default",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._data_id = data_id
        self._http_client = http_client
        self._timeout = timeout

    @property
    def backend_name(self) -> str:
        return "supabase"

    @property
    def _table_url(self) -> str:
        return f"{self._base_url}/rest/v1/{_TABLE}"

    def _get_headers(self, prefer: str | None = None) -> dict[str, str]:
        """Standard headers for PostgREST requests."""
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _row_filter(self, category: str) -> dict[str, str]:
        return {"type": f"eq.{category}", "data_id": f"eq.{self._data_id}"}

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def _request(
        self,
        method: str,
        *,
        params: dict[str, str],
        prefer: str | None = None,
        json: Any = None,
    ) -> Any:
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            response = await client.request(
                method,
                self._table_url,
                params=params,
                headers=self._get_headers(prefer),
                json=json,
            )
        except httpx.HTTPError as exc:
            raise RemoteBackendError(self.backend_name, 503, str(exc)) from exc
        finally:
            if should_close:
                await client.aclose()

        if response.status_code >= 400:
            self._raise_backend_error(response)
        if not response.content:
            return None
        return response.json()

    def _raise_backend_error(self, response: httpx.Response) -> None:
        """Parse a PostgREST error body and raise RemoteBackendError."""
        try:
            body = response.json()
            message = body.get("message") or body.get("error") or response.text
        except ValueError:
            message = response.text or response.reason_phrase
        raise RemoteBackendError(self.backend_name, response.status_code, message)

    def _to_snapshot(self, row: dict[str, Any]) -> RemoteSnapshot:
        return RemoteSnapshot(
            data=keys_to_camel(row.get("data")),
            updated_at=parse_timestamp(row.get("updated_at")),
        )

    async def fetch(self, category: str) -> RemoteSnapshot | None:
        params = {
            **self._row_filter(category),
            "select": "data,updated_at",
            "order": "updated_at.desc",
            "limit": "1",
        }
        rows = await self._request("GET", params=params)
        if not rows:
            return None
        return self._to_snapshot(rows[0])

    async def save(self, category: str, data: Any) -> RemoteSnapshot:
        row = {
            "type": category,
            "data_id": self._data_id,
            "data": keys_to_snake(data),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        rows = await self._request(
            "POST",
            params={"on_conflict": "type,data_id"},
            prefer="resolution=merge-duplicates,return=representation",
            json=row,
        )
        logger.debug("Upserted %s to Supabase for %s", category, self._data_id)
        return self._to_snapshot(rows[0] if rows else row)

    async def delete(self, category: str) -> bool:
        rows = await self._request(
            "DELETE",
            params=self._row_filter(category),
            prefer="return=representation",
        )
        return bool(rows)
