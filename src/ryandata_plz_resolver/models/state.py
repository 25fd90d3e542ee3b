"""Form state containers.

FieldState and UiState are mutable and owned by a single
AddressFormSession. FormView is the frozen projection handed to a
presentation layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class EchoToken:
    """Single-use marker for a programmatic write to a field.

    The next firing of that field's flow consumes the token and is
    suppressed only when it observes exactly ``value``.
    """

    value: str

    def matches(self, observed: str) -> bool:
        return self.value == observed


@dataclass
class FieldState:
    """Raw input values and touched flags of the two fields."""

    locality_value: str = ""
    postal_code_value: str = ""
    locality_touched: bool = False
    postal_code_touched: bool = False


@dataclass
class UiState:
    """Loading, error and disambiguation state merged across both flows."""

    dropdown_mode: bool = False
    postal_code_options: list[str] = field(default_factory=list)
    is_loading: bool = False
    error_message: str = ""


class FormView(BaseModel):
    """Everything a presentation layer needs to render the form."""

    model_config = ConfigDict(frozen=True)

    locality: str
    postal_code: str
    postal_code_widget: Literal["text", "select"]
    postal_code_options: tuple[str, ...]
    is_loading: bool
    error_message: str
    validated: bool
    status_message: str

    def to_dict(self) -> dict:
        """Convert to a plain dictionary (useful for JSON serialisation)."""
        data = self.model_dump()
        data["postal_code_options"] = list(self.postal_code_options)
        return data
