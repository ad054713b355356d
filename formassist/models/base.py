"""
Base model definitions for FormAssist.

Provides the common base class for all data models.
"""

from typing import Any

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict


class BaseModel(PydanticBaseModel):
    """
    Base model with common configuration for all FormAssist models.

    Features:
    - Accepts both field names and the platform's camelCase aliases
    - Dict serialization using the platform's field names
    - Validation on assignment
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
        arbitrary_types_allowed=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

