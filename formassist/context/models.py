"""
Prompt data structures.
"""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class PromptPair:
    """
    Prompts ready for the completion endpoint.

    Attributes:
        system_prompt: Schema description, no row data.
        user_prompt: Serialized table data followed by the question.
        metadata: Additional information about the rendered context.
    """
    system_prompt: str
    user_prompt: str
    metadata: Dict[str, Any] = field(default_factory=dict)
