"""Backend Client - HTTP client for the managed storefront backend.

Talks to the backend's row-level REST API (tables `products`,
`categories`, `product_sizes`, `orders`, `order_items`, `user_roles`,
`profiles`) and to its auth API. Every failure is raised as BackendError;
nothing is swallowed here.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any

import httpx

from storefront.infra.logging import get_logger

logger = get_logger(__name__)

Row = dict[str, Any]


class BackendError(Exception):
    """Raised when the backend rejects a request or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        details: str | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details
        super().__init__(message)


class NotFoundError(BackendError):
    """Raised when exactly one row was expected and none matched."""


def _encode(value: Any) -> str:
    """Encode a filter value the way the REST API expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


@dataclass(frozen=True)
class Query:
    """Immutable description of a filtered table read or write.

    Each builder method returns a new Query; the original is unchanged.
    """

    table: str
    columns: str = "*"
    filters: tuple[tuple[str, str], ...] = ()
    ordering: tuple[str, ...] = ()
    row_limit: int | None = None

    def select(self, columns: str) -> Query:
        """Columns to return, embedded relations allowed (`*,category:categories(*)`)."""
        return replace(self, columns=columns)

    def eq(self, column: str, value: Any) -> Query:
        if value is None:
            return self._filter(column, "is.null")
        return self._filter(column, f"eq.{_encode(value)}")

    def neq(self, column: str, value: Any) -> Query:
        if value is None:
            return self._filter(column, "not.is.null")
        return self._filter(column, f"neq.{_encode(value)}")

    def gte(self, column: str, value: Any) -> Query:
        return self._filter(column, f"gte.{_encode(value)}")

    def ilike(self, column: str, pattern: str) -> Query:
        """Case-insensitive match; `%` in the pattern is a wildcard."""
        return self._filter(column, f"ilike.{pattern.replace('%', '*')}")

    def contains_text(self, column: str, term: str) -> Query:
        """Case-insensitive substring search."""
        return self.ilike(column, f"%{term}%")

    def order(self, column: str, *, descending: bool = False) -> Query:
        direction = "desc" if descending else "asc"
        return replace(self, ordering=(*self.ordering, f"{column}.{direction}"))

    def limit(self, count: int) -> Query:
        if count < 0:
            raise ValueError("limit must be >= 0")
        return replace(self, row_limit=count)

    def params(self, *, include_columns: bool = True) -> list[tuple[str, str]]:
        """Render as query-string parameters."""
        params: list[tuple[str, str]] = []
        if include_columns:
            params.append(("select", self.columns))
        params.extend(self.filters)
        if self.ordering:
            params.append(("order", ",".join(self.ordering)))
        if self.row_limit is not None:
            params.append(("limit", str(self.row_limit)))
        return params

    def _filter(self, column: str, expression: str) -> Query:
        return replace(self, filters=(*self.filters, (column, expression)))


class BackendClient:
    """Async HTTP client for the managed backend."""

    def __init__(
        self,
        rest_url: str,
        auth_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize backend client.

        Args:
            rest_url: Root of the REST API (`.../rest/v1`)
            auth_url: Root of the auth API (`.../auth/v1`)
            api_key: Public anon key
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used to stub the backend)
        """
        self.rest_url = rest_url.rstrip("/")
        self.auth_url = auth_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._access_token: str | None = None
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Content-Type": "application/json", "apikey": self.api_key},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def set_access_token(self, token: str | None) -> None:
        """Use a signed-in user's token for row-level security, or None for anon."""
        self._access_token = token

    def table(self, name: str) -> Query:
        return Query(table=name)

    # =========================================================================
    # REST
    # =========================================================================

    async def select(self, query: Query) -> list[Row]:
        response = await self._request("GET", self._table_url(query.table), params=query.params())
        return self._json(response)

    async def select_one(self, query: Query) -> Row:
        """Fetch exactly one row.

        Raises:
            NotFoundError: If no row matches
        """
        rows = await self.select(query.limit(1) if query.row_limit is None else query)
        if not rows:
            raise NotFoundError(f"No row in '{query.table}' matched", status_code=404)
        return rows[0]

    async def count(self, query: Query) -> int:
        """Exact row count without transferring rows."""
        response = await self._request(
            "HEAD",
            self._table_url(query.table),
            params=query.params(),
            headers={"Prefer": "count=exact"},
        )
        content_range = response.headers.get("content-range", "")
        _, _, total = content_range.partition("/")
        if not total.isdigit():
            raise BackendError(
                f"Backend returned no exact count for '{query.table}'",
                status_code=response.status_code,
                details=content_range or None,
            )
        return int(total)

    async def insert(self, table: str, rows: Row | list[Row]) -> list[Row]:
        """Insert one or many rows and return them as stored."""
        response = await self._request(
            "POST",
            self._table_url(table),
            json=rows,
            headers={"Prefer": "return=representation"},
        )
        return self._json(response)

    async def update(self, query: Query, values: Row) -> list[Row]:
        """Update rows matched by the query's filters and return them."""
        response = await self._request(
            "PATCH",
            self._table_url(query.table),
            params=query.params(include_columns=False),
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return self._json(response)

    async def upsert(self, table: str, rows: list[Row], on_conflict: str) -> list[Row]:
        """Insert rows, merging into existing ones on the conflict columns."""
        response = await self._request(
            "POST",
            self._table_url(table),
            params=[("on_conflict", on_conflict)],
            json=rows,
            headers={"Prefer": "resolution=merge-duplicates,return=representation"},
        )
        return self._json(response)

    async def delete(self, query: Query) -> None:
        if not query.filters:
            raise ValueError(f"Refusing to delete from '{query.table}' without filters")
        await self._request(
            "DELETE",
            self._table_url(query.table),
            params=query.params(include_columns=False),
        )

    # =========================================================================
    # Auth
    # =========================================================================

    async def auth_post(
        self,
        path: str,
        payload: Row | None = None,
        params: dict[str, str] | None = None,
    ) -> Row:
        response = await self._request(
            "POST",
            f"{self.auth_url}/{path.lstrip('/')}",
            params=params,
            json=payload or {},
        )
        if not response.content:
            return {}
        return self._json(response)

    async def auth_get(self, path: str) -> Row:
        response = await self._request("GET", f"{self.auth_url}/{path.lstrip('/')}")
        return self._json(response)

    # =========================================================================
    # Internals
    # =========================================================================

    def _table_url(self, table: str) -> str:
        return f"{self.rest_url}/{table}"

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: list[tuple[str, str]] | dict[str, str] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        client = await self._get_client()

        request_headers = {"Authorization": f"Bearer {self._access_token or self.api_key}"}
        if headers:
            request_headers.update(headers)

        try:
            response = await client.request(
                method,
                url,
                params=params,
                json=json,
                headers=request_headers,
            )
            response.raise_for_status()

        except httpx.HTTPStatusError as e:
            message, code, details = self._parse_error(e.response)
            logger.error(
                "Backend returned error",
                method=method,
                url=url,
                status_code=e.response.status_code,
                error=message,
                code=code,
            )
            raise BackendError(
                message,
                status_code=e.response.status_code,
                code=code,
                details=details,
            ) from e

        except httpx.HTTPError as e:
            logger.error(
                "Failed to reach backend",
                method=method,
                url=url,
                error=str(e),
            )
            raise BackendError(f"Backend unreachable: {e}") from e

        logger.debug(
            "Backend request completed",
            method=method,
            url=url,
            status_code=response.status_code,
        )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(
                "Backend returned a non-JSON body",
                status_code=response.status_code,
                details=response.text[:500],
            ) from e

    @staticmethod
    def _parse_error(response: httpx.Response) -> tuple[str, str | None, str | None]:
        """Pull message/code/details out of a REST or auth error body."""
        try:
            body = response.json()
        except ValueError:
            return (response.text[:500] or response.reason_phrase, None, None)

        if not isinstance(body, dict):
            return (str(body)[:500], None, None)

        message = (
            body.get("message")
            or body.get("msg")
            or body.get("error_description")
            or body.get("error")
            or response.reason_phrase
        )
        code = body.get("code") or body.get("error_code")
        return (str(message), str(code) if code is not None else None, body.get("details"))
