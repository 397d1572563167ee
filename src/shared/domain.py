"""Base classes for commands and value objects.

Both are immutable pydantic models: fields are declared with their
constraints and an invalid instance cannot be constructed.
"""

from pydantic import BaseModel, ConfigDict


class ValueObject(BaseModel):
    """Immutable, compared by value."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class Command(BaseModel):
    """An intention to change the system, addressed to one handler."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)
