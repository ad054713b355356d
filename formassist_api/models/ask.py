from __future__ import annotations

from pydantic import BaseModel, Field

from formassist.models import PipelineStage, TokenUsage


class TableReferenceIn(BaseModel):
    table_name: str = Field(..., min_length=1, alias="tableName")
    alias: str | None = Field(default=None)

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}


class AskRequest(BaseModel):
    question: str = Field(..., max_length=4000)
    tables: list[TableReferenceIn] = Field(default_factory=list)
    model: str | None = Field(default=None, description="Completion model; default from settings")
    token: str | None = Field(default=None, description="Table API bearer token for this call")


class AskResponse(BaseModel):
    ok: bool
    answer: str | None = None
    usage: TokenUsage | None = None
    stage: PipelineStage | None = None
    error_type: str | None = None
    message: str | None = None
    table_name: str | None = None
    display_text: str | None = None
