"""
Prompt Templates for the Prompt Builder.

Provides the default and customizable prompt text for table question answering.
"""

from dataclasses import dataclass


DEFAULT_SYSTEM_PREAMBLE = """You are an assistant that can analyze the following tables and answer questions about their data.

Rules:
1. Only use the tables and rows provided by the user, never assume data that is not present
2. If the data needed to answer is missing, say which table or column is missing
3. Show the figures your answer is based on when you compute totals, averages or counts
4. Answer concisely"""

DEFAULT_TABLE_BLOCK = """Table: {alias}
Columns: {columns}
Row count: {row_count}"""

DEFAULT_USER_PROMPT_TEMPLATE = """Here is the data from the tables, as JSON:
{data}

{row_counts}

Question: {question}"""


@dataclass
class PromptTemplate:
    """
    Prompt template configuration.

    Attributes:
        system_preamble: Fixed text opening the system prompt.
        table_block: Per-table schema block with {alias}, {columns} and {row_count} placeholders.
        user_template: User prompt with {data}, {row_counts} and {question} placeholders.
        block_separator: Separator between table blocks.
    """

    system_preamble: str = DEFAULT_SYSTEM_PREAMBLE
    table_block: str = DEFAULT_TABLE_BLOCK
    user_template: str = DEFAULT_USER_PROMPT_TEMPLATE
    block_separator: str = "\n\n"

    @classmethod
    def default(cls) -> "PromptTemplate":
        return cls()

    def render_table_block(self, alias: str, columns: str, row_count: int) -> str:
        return self.table_block.format(alias=alias, columns=columns, row_count=row_count)

    def render_system(self, blocks: list[str]) -> str:
        """
        Render system prompt.

        Args:
            blocks: Rendered table blocks, in prompt order.

        Returns:
            Rendered system prompt.
        """
        return self.block_separator.join([self.system_preamble.strip(), *blocks])

    def render_user(self, data: str, row_counts: str, question: str) -> str:
        """
        Render user prompt.

        Args:
            data: JSON serialization of every table.
            row_counts: One "Row count" line per table.
            question: User's question, verbatim.

        Returns:
            Rendered user prompt.
        """
        return self.user_template.format(data=data, row_counts=row_counts, question=question)
