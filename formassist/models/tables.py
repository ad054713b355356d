"""
Table data models.

Mirrors the form platform's table API payloads:
- TableSummary: one entry of GET /api/v1/tables
- TableSnapshot: a table's schema plus the rows of GET /api/v1/tables/{id}/data
- TableReference: a caller-declared table to load, with the alias used in prompts
- QueryContext: every snapshot loaded for one question, keyed by alias
"""

from typing import Any

from pydantic import ConfigDict, Field, model_validator

from .base import BaseModel


class ColumnMeta(BaseModel):
    """Column metadata as reported by the table API."""

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str = Field(default="", alias="displayName")
    type: str = ""

    @model_validator(mode="after")
    def default_display_name(self) -> "ColumnMeta":
        if not self.display_name:
            object.__setattr__(self, "display_name", self.name)
        return self

    def describe(self) -> str:
        """Render as ``displayName (type)``."""
        return f"{self.display_name} ({self.type})"


class TableSummary(BaseModel):
    """A table as listed by the table API, without rows."""

    model_config = ConfigDict(frozen=True)

    id: str | int
    name: str
    display_name: str = Field(default="", alias="displayName")
    columns: list[ColumnMeta] = Field(default_factory=list)

    @model_validator(mode="after")
    def default_display_name(self) -> "TableSummary":
        if not self.display_name:
            object.__setattr__(self, "display_name", self.name)
        return self


class TableSnapshot(BaseModel):
    """Point-in-time, read-only copy of one table's schema and rows."""

    model_config = ConfigDict(frozen=True)

    id: str | int
    name: str
    display_name: str = Field(default="", alias="displayName")
    columns: list[ColumnMeta] = Field(default_factory=list)
    rows: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: TableSummary, rows: list[dict[str, Any]]) -> "TableSnapshot":
        return cls(
            id=summary.id,
            name=summary.name,
            display_name=summary.display_name,
            columns=list(summary.columns),
            rows=rows,
        )

    @property
    def row_count(self) -> int:
        return len(self.rows)


class TableReference(BaseModel):
    """
    Caller-declared table to load.

    ``alias`` is the name the table appears under in prompts and defaults to
    ``table_name``. Accepts the platform's ``{"tableName": ..., "alias": ...}``
    shape.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    table_name: str = Field(..., min_length=1, alias="tableName")
    alias: str | None = None

    @model_validator(mode="after")
    def default_alias(self) -> "TableReference":
        if not self.alias:
            object.__setattr__(self, "alias", self.table_name)
        return self

    @property
    def resolved_alias(self) -> str:
        return self.alias or self.table_name


class QueryContext(BaseModel):
    """
    Every table snapshot loaded for one question.

    ``table_names`` keeps aliases in declaration order, repeats included;
    ``tables`` holds the last snapshot written for each alias.
    """

    tables: dict[str, TableSnapshot] = Field(default_factory=dict)
    table_names: list[str] = Field(default_factory=list, alias="tableNames")

    @model_validator(mode="after")
    def check_aliases(self) -> "QueryContext":
        if set(self.tables) != set(self.table_names):
            raise ValueError("tables and table_names must cover the same aliases")
        return self

    def add(self, alias: str, snapshot: TableSnapshot) -> None:
        """Record a snapshot under ``alias``; a repeated alias overwrites the earlier snapshot."""
        self.tables[alias] = snapshot
        self.table_names.append(alias)

    def is_empty(self) -> bool:
        return not self.tables
