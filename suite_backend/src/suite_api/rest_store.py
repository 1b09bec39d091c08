"""
RestStore - StoreClient backed by the hosted store's REST endpoints.

Tables go through the PostgREST interface (/rest/v1), sessions through
/auth/v1/user and objects through /storage/v1/object. Uses httpx; there are
no retries, every failure surfaces as a StoreError.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote

import httpx

from .settings import Settings
from .store import Query, Row, StoreClient, StoreError

logger = logging.getLogger(__name__)

Param = Tuple[str, str]


def _literal(value: Any) -> str:
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _eq_params(eq: Mapping[str, Any]) -> List[Param]:
    params: List[Param] = []
    for key, value in eq.items():
        if value is None:
            params.append((key, "is.null"))
        else:
            params.append((key, f"eq.{_literal(value)}"))
    return params


def _in_param(values: Sequence[Any]) -> str:
    quoted = ",".join('"{}"'.format(_literal(v).replace('"', '\\"')) for v in values)
    return f"in.({quoted})"


def build_select_params(query: Query) -> List[Param]:
    """Translate a Query into PostgREST query-string parameters."""
    params: List[Param] = [("select", query.columns)]
    params.extend(_eq_params(query.eq))
    for key, values in query.in_.items():
        params.append((key, _in_param(values)))
    for key, bound in query.gte.items():
        params.append((key, f"gte.{_literal(bound)}"))

    field_name, descending = query.sort_field()
    if field_name:
        params.append(("order", f"{field_name}.{'desc' if descending else 'asc'}"))
    if query.limit is not None:
        params.append(("limit", str(max(query.limit, 0))))
    return params


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or f"Store error {response.status_code}"
    if isinstance(body, dict):
        for key in ("message", "error_description", "msg", "error"):
            if body.get(key):
                return str(body[key])
    return f"Store error {response.status_code}"


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise StoreError(
            f"Store returned a malformed response ({response.status_code})", response.status_code
        ) from e


def _rows(response: httpx.Response) -> List[Row]:
    if not response.content:
        return []
    body = _json(response)
    if body is None:
        return []
    if isinstance(body, dict):
        return [body]
    if not isinstance(body, list):
        raise StoreError(
            f"Store returned a malformed response ({response.status_code})", response.status_code
        )
    return body


def _parse_content_range(response: httpx.Response) -> int:
    # "0-24/3573" or "*/0"
    value = response.headers.get("Content-Range")
    total = value.rsplit("/", 1)[1].strip() if value and "/" in value else ""
    if not total.isdigit():
        raise StoreError("Store did not return a row count", response.status_code)
    return int(total)


class RestStore(StoreClient):
    """StoreClient talking to the hosted store over HTTP."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        service_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._service_key = service_key or api_key
        self._client = httpx.Client(
            base_url=self._base_url,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "RestStore":
        if not settings.store_url:
            raise StoreError("STORE_URL is not configured")
        return cls(
            base_url=settings.store_url,
            api_key=settings.store_anon_key,
            service_key=settings.store_service_key or None,
            timeout=settings.store_timeout,
        )

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[List[Param]] = None,
        json: Any = None,
        content: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        try:
            response = self._client.request(
                method, path, params=params, json=json, content=content, headers=headers
            )
        except httpx.HTTPError as e:
            logger.error("Store request %s %s failed: %s", method, path, e)
            raise StoreError(f"Store request failed: {e}") from e

        if response.status_code >= 400:
            message = _error_message(response)
            logger.error("Store returned %s for %s %s: %s", response.status_code, method, path, message)
            raise StoreError(message, response.status_code)
        return response

    def select(self, query: Query) -> List[Row]:
        response = self._request("GET", f"/rest/v1/{query.table}", params=build_select_params(query))
        return _rows(response)

    def insert(self, table: str, values: Mapping[str, Any]) -> Row:
        response = self._request(
            "POST",
            f"/rest/v1/{table}",
            json=dict(values),
            headers={"Prefer": "return=representation"},
        )
        rows = _rows(response)
        if not rows:
            raise StoreError(f"Insert into {table} returned no row")
        return rows[0]

    def update(self, table: str, values: Mapping[str, Any], eq: Mapping[str, Any]) -> List[Row]:
        response = self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=_eq_params(eq),
            json=dict(values),
            headers={"Prefer": "return=representation"},
        )
        return _rows(response)

    def delete(self, table: str, eq: Mapping[str, Any]) -> int:
        response = self._request(
            "DELETE",
            f"/rest/v1/{table}",
            params=_eq_params(eq),
            headers={"Prefer": "return=representation"},
        )
        return len(_rows(response))

    def count(self, table: str, eq: Mapping[str, Any]) -> int:
        response = self._request(
            "HEAD",
            f"/rest/v1/{table}",
            params=[("select", "*"), *_eq_params(eq)],
            headers={"Prefer": "count=exact"},
        )
        return _parse_content_range(response)

    def get_user(self, token: str) -> Optional[Row]:
        try:
            response = self._client.get(
                "/auth/v1/user", headers={"Authorization": f"Bearer {token}"}
            )
        except httpx.HTTPError as e:
            raise StoreError(f"Store request failed: {e}") from e

        if response.status_code in (401, 403):
            return None
        if response.status_code >= 400:
            raise StoreError(_error_message(response), response.status_code)
        user = _json(response)
        return user if isinstance(user, dict) else None

    def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        object_path = quote(path.lstrip("/"))
        self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{object_path}",
            content=content,
            headers={
                "Authorization": f"Bearer {self._service_key}",
                "Content-Type": content_type,
                "x-upsert": "true",
            },
        )
        return f"{self._base_url}/storage/v1/object/public/{bucket}/{object_path}"
