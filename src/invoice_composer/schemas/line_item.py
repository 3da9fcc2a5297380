"""Line item schema.

A line item is one editable row of an invoice being composed. The printed
invoice description is modelled as a tagged union so that "never touched",
"filled in by a suggestion" and "typed by the user" are distinct states.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CodeKind(str, Enum):
    """Tax classification scheme."""

    HSN = "HSN"  # Goods
    SAC = "SAC"  # Services


class ClassificationCode(BaseModel):
    """An HSN or SAC code."""

    model_config = ConfigDict(frozen=True)

    kind: CodeKind = Field(description="Classification scheme")
    value: str = Field(description="Code value, e.g. 9983")

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: str) -> str:
        """Strip whitespace and reject empty codes."""
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("Classification code cannot be empty")
        return cleaned

    @classmethod
    def hsn(cls, value: str) -> ClassificationCode:
        return cls(kind=CodeKind.HSN, value=value)

    @classmethod
    def sac(cls, value: str) -> ClassificationCode:
        return cls(kind=CodeKind.SAC, value=value)

    def __str__(self) -> str:
        return f"{self.kind.value} {self.value}"


class UnsetDescription(BaseModel):
    """Invoice description that has never been assigned."""

    model_config = ConfigDict(frozen=True)

    state: Literal["unset"] = "unset"

    @property
    def value(self) -> None:
        return None

    @property
    def is_sticky(self) -> bool:
        return False


class AutoDescription(BaseModel):
    """Invoice description assigned once by a suggestion."""

    model_config = ConfigDict(frozen=True)

    state: Literal["auto"] = "auto"
    value: str = Field(description="Text filled in from the selected suggestion")

    @property
    def is_sticky(self) -> bool:
        return True


class UserDescription(BaseModel):
    """Invoice description typed by the user, possibly empty."""

    model_config = ConfigDict(frozen=True)

    state: Literal["user"] = "user"
    value: str = Field(description="Text entered by the user")

    @property
    def is_sticky(self) -> bool:
        return True


InvoiceDescription = Annotated[
    UnsetDescription | AutoDescription | UserDescription,
    Field(discriminator="state"),
]


class SearchState(BaseModel):
    """Search cursor of a line item; lives only for the session."""

    query: str = Field(default="", description="Text last typed into the search box")
    is_open: bool = Field(default=False, description="Whether the suggestion list is shown")


class LineItem(BaseModel):
    """One row of an invoice being composed."""

    model_config = ConfigDict(extra="forbid")

    description: str = Field(default="", description="Free text shown in the editor")
    invoice_description: InvoiceDescription = Field(
        default_factory=UnsetDescription,
        description="Text printed on the invoice",
    )
    classification_code: ClassificationCode | None = Field(
        default=None,
        description="HSN code for goods or SAC code for services",
    )
    gst_rate: float = Field(default=0.0, ge=0.0, description="GST rate as percentage")
    unit: str = Field(default="Nos", description="Unit of measure")
    quantity: float = Field(default=1.0, description="Quantity")
    rate: float = Field(default=0.0, ge=0.0, description="Price per unit")
    discount_percent: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Discount as percentage of the line value",
    )
    template_id: int | None = Field(
        default=None,
        description="Template this item was filled from, if any",
    )
    search_state: SearchState = Field(default_factory=SearchState)

    @property
    def hsn_code(self) -> str:
        code = self.classification_code
        return code.value if code is not None and code.kind == CodeKind.HSN else ""

    @property
    def sac_code(self) -> str:
        code = self.classification_code
        return code.value if code is not None and code.kind == CodeKind.SAC else ""

    @property
    def printed_description(self) -> str:
        """Text that ends up on the invoice."""
        value = self.invoice_description.value
        return self.description if value is None else value

    def to_payload(self) -> dict[str, Any]:
        """Convert to the body expected by the persistence API."""
        payload: dict[str, Any] = {
            "description": self.description,
            "hsn_code": self.hsn_code,
            "sac_code": self.sac_code,
            "gst_rate": self.gst_rate,
            "quantity": self.quantity,
            "unit": self.unit,
            "rate": self.rate,
            "discount_percent": self.discount_percent,
        }
        if self.invoice_description.value is not None:
            payload["invoice_description"] = self.invoice_description.value
        if self.template_id is not None:
            payload["template_id"] = self.template_id
        return payload
