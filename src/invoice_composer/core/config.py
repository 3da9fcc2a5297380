"""Configuration classes for invoice composition."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, model_validator

from invoice_composer.core.exceptions import ConfigurationError

DEFAULT_GENERIC_WORDS = ["test", "sample", "demo", "item", "product", "service"]


class ComposerConfig(BaseModel):
    """Configuration for the composition engine.

    Shared by the full invoice builder, the quick invoice builder and the
    template manager. Use :meth:`quick` for the quick builder's defaults.

    Example:
        ```python
        from invoice_composer import ComposerConfig, CompositionSession

        config = ComposerConfig(debounce_seconds=0.2, auto_save_templates=False)
        session = CompositionSession(catalog, templates, invoices, config=config)
        ```
    """

    model_config = ConfigDict(frozen=True)

    # Suggestion settings
    min_query_length: int = Field(
        default=2,
        ge=1,
        description="Minimum query length before the catalog is searched",
    )
    debounce_seconds: float = Field(
        default=0.3,
        ge=0.0,
        le=5.0,
        description="Debounce window applied to keystroke-driven searches",
    )
    search_limit: int = Field(
        default=10,
        ge=1,
        description="Maximum number of catalog results requested per query",
    )
    max_template_suggestions: int = Field(
        default=3,
        ge=0,
        description="Cap on user templates shown ahead of catalog results",
    )

    # Line item defaults
    default_unit: str = Field(
        default="Nos",
        min_length=1,
        description="Unit assigned to new line items",
    )
    default_gst_rate: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="GST percentage assigned to new line items",
    )
    default_quantity: float = Field(
        default=1.0,
        gt=0.0,
        description="Quantity assigned to new line items",
    )

    # Template learning settings
    auto_save_templates: bool = Field(
        default=True,
        description="Learn templates from submitted invoices",
    )
    min_template_description_length: int = Field(
        default=3,
        ge=0,
        description="Trimmed descriptions must be longer than this to be learned",
    )
    generic_description_words: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GENERIC_WORDS),
        description="Trailing placeholder words that make a description too generic",
    )

    # Invoice defaults
    payment_due_days: int = Field(
        default=30,
        ge=0,
        description="Days between issue and due date when no due date is given",
    )
    default_currency: str = Field(default="INR", description="Currency for new templates")
    default_payment_terms: str = Field(
        default="Net 30 days",
        description="Payment terms for new templates",
    )

    @model_validator(mode="after")
    def _validate_generic_words(self) -> ComposerConfig:
        """Reject blank placeholder words, which would match every description."""
        for word in self.generic_description_words:
            if not word or not word.strip():
                raise ConfigurationError("generic_description_words cannot contain blank words")
        return self

    @property
    def generic_description_pattern(self) -> re.Pattern[str]:
        """Pattern matching a description that ends in a placeholder word."""
        if not self.generic_description_words:
            return re.compile(r"(?!)")
        words = "|".join(re.escape(w.strip()) for w in self.generic_description_words)
        return re.compile(rf"\b(?:{words})$", re.IGNORECASE)

    @classmethod
    def quick(cls, **overrides: object) -> ComposerConfig:
        """Return the quick invoice builder preset."""
        values: dict[str, object] = {"default_gst_rate": 18.0}
        values.update(overrides)
        return cls.model_validate(values)
