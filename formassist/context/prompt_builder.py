"""
Prompt Builder.

Renders a QueryContext and a question into a system prompt and a user prompt.

The system prompt describes each table's schema and row count. The user
prompt carries every table's full schema and rows as JSON, then the question.
Output is deterministic for identical input and is never truncated, so
large tables produce large prompts; filter data before assembly to bound it.
"""

import json
from typing import Optional

from formassist.errors import BuildContextError
from formassist.models import QueryContext, TableSnapshot

from .models import PromptPair
from .templates import PromptTemplate


class PromptBuilder:
    """
    Builds the two prompts sent to the completion endpoint.

    Usage:
        builder = PromptBuilder()
        prompts = builder.build_prompts(context, "what is the total?")
        answer = await client.complete(
            api_key, model, prompts.system_prompt, prompts.user_prompt
        )
    """

    def __init__(self, template: Optional[PromptTemplate] = None):
        self._template = template or PromptTemplate.default()

    def build_prompts(self, context: QueryContext, question: str) -> PromptPair:
        """
        Build system and user prompts.

        Args:
            context: Assembled tables.
            question: User's question, inserted verbatim.

        Returns:
            PromptPair with both prompts.

        Raises:
            BuildContextError: If the context holds no tables.
        """
        if context.is_empty():
            raise BuildContextError("No tables available to answer the question")

        blocks = [
            self._template.render_table_block(
                alias=alias,
                columns=self.describe_columns(context.tables[alias]),
                row_count=context.tables[alias].row_count,
            )
            for alias in context.table_names
        ]
        system_prompt = self._template.render_system(blocks)

        row_counts = "\n".join(
            f"{alias} - Row count: {snapshot.row_count}"
            for alias, snapshot in context.tables.items()
        )
        user_prompt = self._template.render_user(
            data=self.serialize_tables(context),
            row_counts=row_counts,
            question=question,
        )

        return PromptPair(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            metadata={
                "tables": list(context.tables),
                "rows": sum(s.row_count for s in context.tables.values()),
            },
        )

    @staticmethod
    def describe_columns(snapshot: TableSnapshot) -> str:
        return ", ".join(column.describe() for column in snapshot.columns)

    @staticmethod
    def serialize_tables(context: QueryContext) -> str:
        """JSON of every table keyed by alias, schema and rows included."""
        payload = {
            alias: snapshot.model_dump(mode="json", by_alias=True)
            for alias, snapshot in context.tables.items()
        }
        return json.dumps(payload, ensure_ascii=False, indent=2, default=str)
