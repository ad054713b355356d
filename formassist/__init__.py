"""
FormAssist - Ask questions about form platform data tables

Fetches tables through the platform's REST API, assembles them into an
LLM prompt and returns the chat completion's answer.
"""

__version__ = "0.1.0"
__author__ = "FormAssist Team"

from formassist.config import Settings, get_settings
from formassist.models import AuthSession, PipelineErr, PipelineOk, PipelineResult, TableReference
from formassist.pipeline import QueryPipeline

__all__ = [
    "Settings",
    "get_settings",
    "AuthSession",
    "TableReference",
    "PipelineOk",
    "PipelineErr",
    "PipelineResult",
    "QueryPipeline",
    "__version__",
]
