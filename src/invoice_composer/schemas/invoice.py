"""Invoice draft and submission receipt schemas."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from pydantic import BaseModel, Field

from invoice_composer.schemas.line_item import LineItem


class ComplianceFlags(BaseModel):
    """GST compliance options for an invoice."""

    reverse_charge: bool = Field(default=False, description="Tax payable by the recipient")
    export_type: str | None = Field(default=None, description="Export category, if any")
    ecommerce_gstin: str | None = Field(
        default=None,
        description="GSTIN of the e-commerce operator, if sold through one",
    )


class InvoiceDraft(BaseModel):
    """The invoice being composed.

    Owned by the active composition session and handed to the persistence
    collaborator as a whole on submit.
    """

    buyer_id: int | None = Field(default=None, description="Customer the invoice is billed to")
    issue_date: date | None = Field(default=None, description="Invoice date")
    due_date: date | None = Field(default=None, description="Payment due date")
    items: list[LineItem] = Field(default_factory=list, description="Ordered line items")
    compliance: ComplianceFlags = Field(default_factory=ComplianceFlags)
    terms_and_conditions: str | None = Field(default=None, description="Free-text terms")

    def with_default_dates(self, today: date, due_in_days: int = 30) -> InvoiceDraft:
        """Fill in missing issue and due dates."""
        issue = self.issue_date or today
        due = self.due_date or issue + timedelta(days=due_in_days)
        return self.model_copy(update={"issue_date": issue, "due_date": due})

    def to_payload(self) -> dict[str, Any]:
        """Convert to the body expected by the persistence API.

        Optional fields are only included when set.
        """
        body: dict[str, Any] = {
            "buyer_id": self.buyer_id,
            "items": [item.to_payload() for item in self.items],
        }
        if self.issue_date:
            body["date"] = self.issue_date.isoformat()
        if self.due_date:
            body["due_date"] = self.due_date.isoformat()
        if self.compliance.reverse_charge:
            body["reverse_charge"] = True
        if self.compliance.ecommerce_gstin:
            body["ecommerce_gstin"] = self.compliance.ecommerce_gstin
        if self.compliance.export_type:
            body["export_type"] = self.compliance.export_type
        if self.terms_and_conditions:
            body["terms_and_conditions"] = self.terms_and_conditions
        return body


class SubmissionReceipt(BaseModel):
    """Authoritative totals returned by the server for a created invoice."""

    id: int = Field(description="Invoice id")
    invoice_number: str = Field(description="Invoice number assigned by the server")
    subtotal: float = Field(description="Taxable value")
    cgst: float = Field(default=0.0, description="Central GST (intra-state)")
    sgst: float = Field(default=0.0, description="State GST (intra-state)")
    igst: float = Field(default=0.0, description="Integrated GST (inter-state)")
    total: float = Field(description="Grand total")

    @property
    def tax(self) -> float:
        return self.cgst + self.sgst + self.igst
