"""
Table Gateway.

Authenticated HTTP access to the form platform's table REST API:
- GET {base_url}/api/v1/tables            -> {"items": [TableSummary, ...]}
- GET {base_url}/api/v1/tables/{id}/data  -> {"items": [row, ...]}

Resolving a table by name costs two round trips (list, then data).
Queries reference a handful of tables, so nothing is batched or cached.
"""

from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from formassist.errors import NetworkError, NotFoundError, ParseError
from formassist.models import AuthSession, TableSnapshot, TableSummary
from formassist.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 60.0


class TableGateway:
    """
    Async client for the table API.

    The gateway owns an ``httpx.AsyncClient`` unless one is injected.
    Tests inject a client built on ``httpx.MockTransport``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def list_tables(self, session: AuthSession) -> list[TableSummary]:
        """
        List every table visible to the session.

        Raises:
            AuthError: No usable bearer token.
            NetworkError: Transport failure or non-2xx response.
            ParseError: Body is not JSON or items do not validate.
        """
        body = await self._get_json(session, session.api_url("tables"))
        items = self._items(body, "table list")

        try:
            tables = [TableSummary.model_validate(item) for item in items]
        except PydanticValidationError as e:
            raise ParseError(f"Malformed table list: {e.error_count()} invalid field(s)") from e

        logger.debug(f"Listed {len(tables)} tables")
        return tables

    async def get_table(self, session: AuthSession, table_name: str) -> TableSnapshot:
        """
        Fetch one table's schema and rows by name or display name.

        Args:
            session: Authenticated session.
            table_name: Name or display name, matched case-insensitively.

        Returns:
            TableSnapshot with all rows of the table.

        Raises:
            NotFoundError: No listed table matches ``table_name``.
            AuthError, NetworkError, ParseError: As for ``list_tables``.
        """
        summary = self.find_table(await self.list_tables(session), table_name)
        if summary is None:
            raise NotFoundError(f"Table '{table_name}' not found", table_name=table_name)

        body = await self._get_json(session, session.api_url(f"tables/{summary.id}/data"))
        rows = self._items(body, f"data of table '{table_name}'")
        if not all(isinstance(row, dict) for row in rows):
            raise ParseError(f"Rows of table '{table_name}' are not objects", table_name=table_name)

        logger.debug(f"Fetched table {summary.name} (id={summary.id}): {len(rows)} rows")
        return TableSnapshot.from_summary(summary, rows)

    @staticmethod
    def find_table(tables: list[TableSummary], table_name: str) -> TableSummary | None:
        """First table whose name or display name equals ``table_name``, ignoring case."""
        index: dict[str, TableSummary] = {}
        for table in tables:
            # setdefault keeps the first match
            index.setdefault(table.name.lower(), table)
            index.setdefault(table.display_name.lower(), table)
        return index.get(table_name.strip().lower())

    async def _get_json(self, session: AuthSession, url: str) -> Any:
        token = await session.resolve_token()

        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

        logger.debug(f"GET {url}")
        try:
            response = await self._get_client().get(url, headers=headers)
        except httpx.RequestError as e:
            logger.warning(f"Table API request failed: {e}")
            raise NetworkError(f"Request to {url} failed: {e}") from e

        if not response.is_success:
            logger.warning(f"Table API returned HTTP {response.status_code} for {url}")
            raise NetworkError(
                f"Table API returned HTTP {response.status_code} for {url}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ParseError(f"Response from {url} is not valid JSON") from e

    @staticmethod
    def _items(body: Any, what: str) -> list[Any]:
        if not isinstance(body, dict) or not isinstance(body.get("items"), list):
            raise ParseError(f"Malformed {what}: expected an object with an 'items' array")
        return body["items"]

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "TableGateway":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
