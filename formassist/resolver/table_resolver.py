"""
Table Resolver

Turns caller-declared table references into the concrete, aliased list of
tables to load. When nothing is declared, every table the session can see
is used, aliased by its display name.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from formassist.errors import ValidationError
from formassist.models import AuthSession, TableReference
from formassist.utils.logger import get_logger

if TYPE_CHECKING:
    from formassist.gateway import TableGateway

logger = get_logger(__name__)


class TableResolver:
    """Resolves declared references against the table API."""

    def __init__(self, gateway: "TableGateway"):
        self._gateway = gateway

    async def resolve(
        self,
        declared_refs: list[TableReference],
        session: AuthSession,
    ) -> list[TableReference]:
        """
        Resolve the tables to load for one question.

        Declared references are returned unchanged; whether they exist is
        checked later, when each table is fetched. With no declared
        references the table list is fetched once and every table is used.

        Args:
            declared_refs: References in prompt order; may be empty.
            session: Authenticated session.

        Returns:
            List of references with aliases filled in.
        """
        if declared_refs:
            logger.debug(f"Using {len(declared_refs)} declared table reference(s)")
            return list(declared_refs)

        summaries = await self._gateway.list_tables(session)
        refs = [
            TableReference(table_name=summary.name, alias=summary.display_name)
            for summary in summaries
        ]
        logger.info(f"No tables declared, discovered {len(refs)}: {[r.alias for r in refs]}")
        return refs


def parse_table_references(raw: str | Iterable[Any] | None) -> list[TableReference]:
    """
    Parse table references from the form control's property value.

    Accepts a JSON array string (``'[{"tableName": "Orders", "alias": "o"}]'``),
    an already-decoded list, or None. Bare strings name a table without an alias.

    Raises:
        ValidationError: If the value is not an array of references.
    """
    if raw is None:
        return []

    if isinstance(raw, str):
        if not raw.strip():
            return []
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Table references are not valid JSON: {e.msg}") from e

    if isinstance(raw, (dict, str)) or not isinstance(raw, Iterable):
        raise ValidationError("Table references must be a JSON array")

    refs: list[TableReference] = []
    for item in raw:
        if isinstance(item, TableReference):
            refs.append(item)
            continue
        if isinstance(item, str):
            item = {"tableName": item}
        try:
            refs.append(TableReference.model_validate(item))
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid table reference {item!r}: {e.errors()[0]['msg']}") from e
    return refs
