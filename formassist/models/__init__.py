"""
Data models for FormAssist.
"""

from .base import BaseModel
from .result import (
    CompletionResult,
    PipelineErr,
    PipelineOk,
    PipelineResult,
    PipelineStage,
    PipelineState,
    TokenUsage,
)
from .session import AuthSession, TokenProvider
from .tables import ColumnMeta, QueryContext, TableReference, TableSnapshot, TableSummary

__all__ = [
    "BaseModel",
    # Tables
    "ColumnMeta",
    "TableSummary",
    "TableSnapshot",
    "TableReference",
    "QueryContext",
    # Auth
    "AuthSession",
    "TokenProvider",
    # Results
    "TokenUsage",
    "CompletionResult",
    "PipelineStage",
    "PipelineState",
    "PipelineOk",
    "PipelineErr",
    "PipelineResult",
]
