"""Suggestion candidate schema."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from invoice_composer.schemas.line_item import ClassificationCode
from invoice_composer.schemas.template import Template


class CandidateOrigin(str, Enum):
    """Where a suggestion came from; also its display group."""

    USER_TEMPLATE = "user_template"
    SERVICE_CATALOG = "service_catalog"
    PRODUCT_CATALOG = "product_catalog"


class Candidate(BaseModel):
    """A suggestion returned by the suggestion source."""

    origin: CandidateOrigin = Field(description="Source of the suggestion")
    name: str = Field(description="Short display name")
    description: str = Field(default="", description="Longer description")
    code: ClassificationCode | None = Field(default=None, description="HSN or SAC code")
    gst_rate: float = Field(default=0.0, ge=0.0, description="GST rate as percentage")
    default_unit: str = Field(default="Nos", description="Unit suggested for the item")
    default_rate: float | None = Field(
        default=None,
        ge=0.0,
        description="Price suggested for the item, if the source knows one",
    )
    template_id: int | None = Field(
        default=None,
        description="Originating template id for user templates",
    )
    catalog_id: str | None = Field(
        default=None,
        description="Catalog key used for usage analytics",
    )

    @property
    def is_user_template(self) -> bool:
        return self.origin == CandidateOrigin.USER_TEMPLATE

    @classmethod
    def from_template(cls, template: Template) -> Candidate:
        """Wrap a user template as a suggestion."""
        return cls(
            origin=CandidateOrigin.USER_TEMPLATE,
            name=template.name,
            description=template.description or template.name,
            code=template.code,
            gst_rate=template.gst_rate,
            default_unit=template.unit,
            default_rate=template.base_rate,
            template_id=template.id,
        )
