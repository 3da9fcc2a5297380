"""Template schema.

A template is a reusable line-item blueprint owned by the user's business
profile. Templates are created explicitly through the template manager or
learned from submitted invoices; they are never deleted automatically.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from invoice_composer.schemas.line_item import ClassificationCode, CodeKind, LineItem


class TemplateKind(str, Enum):
    """What a template describes."""

    SERVICE = "service"
    PRODUCT = "product"


class Template(BaseModel):
    """A persisted, reusable line-item blueprint.

    Example:
        ```python
        from invoice_composer import ClassificationCode, Template, TemplateKind

        template = Template(
            name="Logo Design",
            description="Logo design and brand guidelines",
            code=ClassificationCode.sac("998391"),
            gst_rate=18,
            base_rate=5000,
            kind=TemplateKind.SERVICE,
        )
        ```
    """

    id: int | None = Field(default=None, description="Server id, None until persisted")
    name: str = Field(description="Short name used when picking the template")
    description: str = Field(default="", description="Description printed on invoices")
    code: ClassificationCode | None = Field(default=None, description="HSN or SAC code")
    gst_rate: float = Field(default=0.0, ge=0.0, description="GST rate as percentage")
    unit: str = Field(default="Nos", description="Unit of measure")
    base_rate: float = Field(default=0.0, ge=0.0, description="Default price per unit")
    kind: TemplateKind = Field(default=TemplateKind.SERVICE, description="Service or product")
    is_active: bool = Field(default=True, description="Whether the template is offered")
    is_default: bool = Field(default=False, description="Whether the template is preselected")
    currency: str = Field(default="INR", description="Currency code")
    payment_terms: str = Field(default="Net 30 days", description="Payment terms")
    min_quantity: float = Field(default=1.0, ge=0.0, description="Minimum billable quantity")
    max_quantity: float | None = Field(default=None, description="Maximum billable quantity")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate template name is non-empty."""
        if not v or not v.strip():
            raise ValueError("Template name cannot be empty")
        return v.strip()

    @property
    def hsn_code(self) -> str:
        return self.code.value if self.code is not None and self.code.kind == CodeKind.HSN else ""

    @property
    def sac_code(self) -> str:
        return self.code.value if self.code is not None and self.code.kind == CodeKind.SAC else ""

    @classmethod
    def from_line_item(
        cls,
        item: LineItem,
        currency: str = "INR",
        payment_terms: str = "Net 30 days",
    ) -> Template:
        """Build a template blueprint from an invoice line item.

        Items carrying an HSN code become product templates, everything
        else becomes a service template.
        """
        description = item.description.strip()
        code = item.classification_code
        kind = (
            TemplateKind.PRODUCT
            if code is not None and code.kind == CodeKind.HSN
            else TemplateKind.SERVICE
        )
        return cls(
            name=description,
            description=description,
            code=code,
            gst_rate=item.gst_rate,
            unit=item.unit,
            base_rate=item.rate,
            kind=kind,
            currency=currency,
            payment_terms=payment_terms,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert template to a flat dictionary for serialization."""
        data = self.model_dump(mode="json", exclude={"code"})
        data["hsn_code"] = self.hsn_code
        data["sac_code"] = self.sac_code
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Template:
        """Create template from a flat dictionary.

        Accepts the ``hsn_code``/``sac_code`` pair used by the persistence
        API as well as a nested ``code`` mapping.
        """
        values = dict(data)
        hsn = values.pop("hsn_code", None) or ""
        sac = values.pop("sac_code", None) or ""
        if "code" not in values or values["code"] is None:
            if hsn.strip():
                values["code"] = ClassificationCode.hsn(hsn)
            elif sac.strip():
                values["code"] = ClassificationCode.sac(sac)
            else:
                values.pop("code", None)
        if "template_name" in values and "name" not in values:
            values["name"] = values.pop("template_name")
        if "template_type" in values and "kind" not in values:
            values["kind"] = values.pop("template_type")
        return cls.model_validate(values)
