"""Client-side tax preview.

The preview is an estimate for display while composing. It does not split
CGST/SGST from IGST, which depends on buyer and seller state and is
computed by the server on submit. Running totals are kept unrounded;
rounding happens only when formatting for display.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, Field

from invoice_composer.schemas.line_item import LineItem

DISPLAY_PLACES = 2


class LinePreview(BaseModel):
    """Preview figures for one line item."""

    index: int = Field(description="Position of the item in the draft")
    taxable_value: float = Field(description="Quantity x rate after discount")
    tax: float = Field(description="Estimated GST on the taxable value")


class TaxPreview(BaseModel):
    """Provisional subtotal, tax and total for a draft.

    Example:
        ```python
        preview = compute_tax_preview(store.items)
        print(preview.display())  # {'subtotal': '245.00', 'tax': '38.25', 'total': '283.25'}
        ```
    """

    subtotal: float = Field(default=0.0, description="Sum of taxable values")
    tax: float = Field(default=0.0, description="Sum of estimated GST")
    lines: list[LinePreview] = Field(default_factory=list, description="Per-item figures")
    is_provisional: bool = Field(
        default=True,
        description="Always True; the server's totals are authoritative",
    )

    @property
    def total(self) -> float:
        return self.subtotal + self.tax

    def rounded(self) -> dict[str, float]:
        """Totals rounded for display."""
        return {
            "subtotal": round(self.subtotal, DISPLAY_PLACES),
            "tax": round(self.tax, DISPLAY_PLACES),
            "total": round(self.total, DISPLAY_PLACES),
        }

    def display(self) -> dict[str, str]:
        """Totals formatted with two decimals."""
        return {key: f"{value:.{DISPLAY_PLACES}f}" for key, value in self.rounded().items()}


def taxable_value(item: LineItem) -> float:
    """Quantity x rate, less the item's discount."""
    return item.quantity * item.rate * (1 - item.discount_percent / 100)


def compute_tax_preview(items: Iterable[LineItem]) -> TaxPreview:
    """Derive the provisional totals for items."""
    lines: list[LinePreview] = []
    subtotal = 0.0
    tax = 0.0
    for i, item in enumerate(items):
        value = taxable_value(item)
        item_tax = value * item.gst_rate / 100
        subtotal += value
        tax += item_tax
        lines.append(LinePreview(index=i, taxable_value=value, tax=item_tax))
    return TaxPreview(subtotal=subtotal, tax=tax, lines=lines)
