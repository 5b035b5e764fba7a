"""Thin PostgREST client (no supabase-py).

Talks to the Supabase REST endpoint (/rest/v1) with httpx.AsyncClient so
calls never block the event loop. Supports the subset of the query language
the portal uses: select with embedded resources, eq / neq / in / is filters,
order, limit, single-row reads, exact counts and insert / update / delete
with returned representation.

Every failure is raised as a domain exception: transport errors and 5xx as
StoreUnavailableException, 4xx as StoreRequestException carrying the
PostgREST (or Postgres SQLSTATE) code.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from legality.domain.exceptions import StoreRequestException, StoreUnavailableException

logger = logging.getLogger(__name__)

# .single() matched zero rows (or more than one).
NO_ROWS = "PGRST116"
# Postgres unique_violation.
UNIQUE_VIOLATION = "23505"

_SINGLE_OBJECT = "application/vnd.pgrst.object+json"


def _error_from_response(resp: httpx.Response) -> StoreRequestException:
    try:
        body = resp.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    message = (
        body.get("message")
        or body.get("msg")
        or body.get("error_description")
        or body.get("error")
        or resp.reason_phrase
        or f"HTTP {resp.status_code}"
    )
    code = body.get("code") if isinstance(body.get("code"), str) else body.get("error_code")
    return StoreRequestException(
        str(message), code=code, status_code=resp.status_code, hint=body.get("hint")
    )


async def _request_async(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: list[tuple[str, str]] | None = None,
    body: Any = None,
) -> httpx.Response:
    """Perform an async HTTP request and map failures to domain exceptions."""
    try:
        resp = await client.request(method, url, headers=headers, params=params, json=body)
    except httpx.HTTPError as exc:
        logger.warning("Store request %s %s failed: %s", method, url, exc)
        raise StoreUnavailableException(f"Remote store unreachable: {exc}") from exc
    if resp.status_code >= 500:
        logger.warning("Store request %s %s returned %s", method, url, resp.status_code)
        raise StoreUnavailableException(
            f"Remote store error (HTTP {resp.status_code})", status_code=resp.status_code
        )
    if resp.status_code >= 400:
        raise _error_from_response(resp)
    return resp


def _json_body(resp: httpx.Response) -> Any:
    """Decoded JSON body of a successful response.

    Raises:
        StoreUnavailableException: The body is not JSON (an HTML error page
            from a proxy, for instance).
    """
    try:
        return resp.json()
    except ValueError as exc:
        logger.warning(
            "Store response (HTTP %s, %s) is not JSON",
            resp.status_code,
            resp.headers.get("content-type"),
        )
        raise StoreUnavailableException(
            "Remote store returned an unreadable response", status_code=resp.status_code
        ) from exc


def _format_value(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _format_in_item(value: Any) -> str:
    text = _format_value(value)
    if any(ch in text for ch in ',()"'):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def _parse_count(content_range: str | None) -> int | None:
    """Total from a Content-Range header such as '0-9/42' or '*/0'."""
    if not content_range or "/" not in content_range:
        return None
    total = content_range.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


@dataclass(frozen=True)
class QueryResult:
    """Rows (list, or dict for single reads) and the exact count when requested."""

    data: Any
    count: int | None = None


class _Query:
    """Fluent request builder for one table; run with execute()."""

    def __init__(
        self,
        table: "TableReference",
        method: str = "GET",
        *,
        body: Any = None,
        returning: bool = False,
    ):
        self._table = table
        self._method = method
        self._body = body
        self._params: list[tuple[str, str]] = []
        self._prefer: list[str] = []
        self._single = False
        self._head = False
        self._count: str | None = None
        if returning:
            self._prefer.append("return=representation")

    def select(
        self, columns: str = "*", *, count: str | None = None, head: bool = False
    ) -> "_Query":
        self._params.append(("select", "".join(columns.split())))
        if count:
            self._count = count
            self._prefer.append(f"count={count}")
        self._head = head
        return self

    def eq(self, column: str, value: Any) -> "_Query":
        self._params.append((column, f"eq.{_format_value(value)}"))
        return self

    def neq(self, column: str, value: Any) -> "_Query":
        self._params.append((column, f"neq.{_format_value(value)}"))
        return self

    def in_(self, column: str, values: list[Any]) -> "_Query":
        joined = ",".join(_format_in_item(v) for v in values)
        self._params.append((column, f"in.({joined})"))
        return self

    def is_(self, column: str, value: Any) -> "_Query":
        self._params.append((column, f"is.{_format_value(value)}"))
        return self

    def order(self, column: str, *, desc: bool = False) -> "_Query":
        self._params.append(("order", f"{column}.{'desc' if desc else 'asc'}"))
        return self

    def limit(self, n: int) -> "_Query":
        self._params.append(("limit", str(n)))
        return self

    def single(self) -> "_Query":
        """Expect exactly one row; zero rows raise StoreRequestException(code=NO_ROWS)."""
        self._single = True
        return self

    async def execute(self) -> QueryResult:
        client = self._table._client
        headers = client._headers()
        if self._prefer:
            headers["Prefer"] = ",".join(self._prefer)
        if self._single:
            headers["Accept"] = _SINGLE_OBJECT
        method = "HEAD" if self._head and self._method == "GET" else self._method
        resp = await _request_async(
            client._http,
            method,
            self._table.url,
            headers=headers,
            params=self._params,
            body=self._body,
        )
        count = _parse_count(resp.headers.get("content-range")) if self._count else None
        if method == "HEAD" or resp.status_code == 204 or not resp.content:
            data: Any = None if self._single else []
        else:
            data = _json_body(resp)
        return QueryResult(data=data, count=count)


class TableReference:
    """Reference to a table; entry point for reads and writes."""

    def __init__(self, client: "PostgrestClient", name: str):
        self._client = client
        self.name = name

    @property
    def url(self) -> str:
        return f"{self._client.rest_url}/{self.name}"

    def select(
        self, columns: str = "*", *, count: str | None = None, head: bool = False
    ) -> _Query:
        return _Query(self).select(columns, count=count, head=head)

    def insert(self, row: dict[str, Any] | list[dict[str, Any]], *, returning: bool = True) -> _Query:
        return _Query(self, "POST", body=row, returning=returning)

    def update(self, patch: dict[str, Any], *, returning: bool = True) -> _Query:
        return _Query(self, "PATCH", body=patch, returning=returning)

    def delete(self) -> _Query:
        return _Query(self, "DELETE")


TokenSource = str | Callable[[], str | None] | None


class PostgrestClient:
    """Lightweight PostgREST client bound to an anon key and, optionally, a user token.

    access_token may be a callable so the token follows a session that
    changes after the client was built (sign-in within the same request).
    """

    def __init__(
        self,
        rest_url: str,
        anon_key: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        access_token: TokenSource = None,
        timeout: float = 30.0,
    ) -> None:
        self.rest_url = rest_url.rstrip("/")
        self._anon_key = anon_key
        self._access_token = access_token
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    def with_token(self, access_token: TokenSource) -> "PostgrestClient":
        """Client sharing this one's HTTP pool but acting as the given user (row-level rules apply)."""
        return PostgrestClient(
            self.rest_url,
            self._anon_key,
            http_client=self._http,
            access_token=access_token,
        )

    def _headers(self) -> dict[str, str]:
        token = self._access_token() if callable(self._access_token) else self._access_token
        return {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {token or self._anon_key}",
        }

    def table(self, name: str) -> TableReference:
        return TableReference(self, name)
