"""Data model for invoice composition.

Line items, suggestion candidates, templates, invoice drafts and the
server's submission receipt.
"""

from invoice_composer.schemas.candidate import Candidate, CandidateOrigin
from invoice_composer.schemas.invoice import ComplianceFlags, InvoiceDraft, SubmissionReceipt
from invoice_composer.schemas.line_item import (
    AutoDescription,
    ClassificationCode,
    CodeKind,
    InvoiceDescription,
    LineItem,
    SearchState,
    UnsetDescription,
    UserDescription,
)
from invoice_composer.schemas.template import Template, TemplateKind

__all__ = [
    # Line items
    "LineItem",
    "ClassificationCode",
    "CodeKind",
    "InvoiceDescription",
    "UnsetDescription",
    "AutoDescription",
    "UserDescription",
    "SearchState",
    # Suggestions
    "Candidate",
    "CandidateOrigin",
    # Templates
    "Template",
    "TemplateKind",
    # Invoices
    "InvoiceDraft",
    "ComplianceFlags",
    "SubmissionReceipt",
]
