"""
Context Assembler.

Loads every resolved table through the gateway into one QueryContext.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from formassist.errors import FormAssistError
from formassist.models import AuthSession, QueryContext, TableReference
from formassist.utils.logger import get_logger

if TYPE_CHECKING:
    from formassist.gateway import TableGateway

logger = get_logger(__name__)


class ContextAssembler:
    """
    Builds the per-question QueryContext.

    Tables are fetched one after another, in reference order. Assembly is
    all-or-nothing: the first failing table aborts the call, its error is
    tagged with the table name, and no later table is requested.
    """

    def __init__(self, gateway: "TableGateway"):
        self._gateway = gateway

    async def assemble(
        self,
        refs: list[TableReference],
        session: AuthSession,
    ) -> QueryContext:
        """
        Fetch all referenced tables.

        Args:
            refs: Resolved references, in prompt order.
            session: Authenticated session.

        Returns:
            QueryContext keyed by alias. A repeated alias keeps the last snapshot.

        Raises:
            FormAssistError: The first table fetch failure, with ``table_name`` set.
        """
        context = QueryContext()

        for ref in refs:
            alias = ref.resolved_alias
            try:
                snapshot = await self._gateway.get_table(session, ref.table_name)
            except FormAssistError as e:
                logger.warning(f"Failed to load table '{ref.table_name}': {e.message}")
                raise e.with_table(ref.table_name)

            if alias in context.tables:
                logger.debug(f"Alias '{alias}' declared more than once, keeping '{ref.table_name}'")
            context.add(alias, snapshot)

        logger.info(f"Assembled context with {len(context.tables)} table(s)")
        return context
