"""
LLM Module for FormAssist.

Chat completion access for answering questions over table data.
"""

from .completion_client import ANSWER_TEMPERATURE, CompletionClient

__all__ = ["ANSWER_TEMPERATURE", "CompletionClient"]
