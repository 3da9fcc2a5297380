"""Line item editing: autofill policy, item store and tax preview."""

from invoice_composer.items.autofill import apply_candidate, apply_user_edit, merge_item
from invoice_composer.items.store import LineItemStore, ValidationResult
from invoice_composer.items.tax import LinePreview, TaxPreview, compute_tax_preview

__all__ = [
    "apply_candidate",
    "apply_user_edit",
    "merge_item",
    "LineItemStore",
    "ValidationResult",
    "TaxPreview",
    "LinePreview",
    "compute_tax_preview",
]
