"""
Context construction for FormAssist.

Loads table snapshots into a QueryContext and renders it into LLM prompts.
"""

from .assembler import ContextAssembler
from .models import PromptPair
from .prompt_builder import PromptBuilder
from .templates import PromptTemplate

__all__ = [
    "ContextAssembler",
    "PromptBuilder",
    "PromptPair",
    "PromptTemplate",
]
