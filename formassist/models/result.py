"""
Pipeline result models.
"""

from enum import Enum
from typing import Literal, Union

from pydantic import ConfigDict

from .base import BaseModel


class PipelineStage(str, Enum):
    """Phase of the pipeline a failure is attributed to."""

    VALIDATE = "validate"
    RESOLVE_TABLES = "resolve_tables"
    FETCH_TABLE = "fetch_table"
    BUILD_CONTEXT = "build_context"
    CALL_MODEL = "call_model"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()


class PipelineState(str, Enum):
    """Lifecycle of one run. Strictly linear."""

    IDLE = "idle"
    RESOLVING = "resolving"
    ASSEMBLING = "assembling"
    PROMPTING = "prompting"
    CALLING = "calling"
    DONE = "done"


class TokenUsage(BaseModel):
    """Token counters passed through from the completion endpoint."""

    model_config = ConfigDict(extra="allow")

    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


class CompletionResult(BaseModel):
    answer: str
    usage: TokenUsage | None = None


class PipelineOk(BaseModel):
    ok: Literal[True] = True
    answer: str
    usage: TokenUsage | None = None


class PipelineErr(BaseModel):
    ok: Literal[False] = False
    stage: PipelineStage
    message: str
    error_type: str = "FormAssistError"
    table_name: str | None = None

    def display_text(self) -> str:
        """Message prefixed by the failing stage, for shells to render verbatim."""
        return f"[{self.stage.label}] Error: {self.message}"


PipelineResult = Union[PipelineOk, PipelineErr]
