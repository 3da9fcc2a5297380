"""Collaborator interfaces consumed by the composition engine.

The engine never talks to the network itself; callers inject objects
implementing these protocols.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from invoice_composer.schemas.candidate import Candidate
from invoice_composer.schemas.invoice import InvoiceDraft, SubmissionReceipt
from invoice_composer.schemas.template import Template

CatalogKind = str  # "service" or "product"


class CatalogSearch(Protocol):
    """Service and product (HSN/SAC) catalog."""

    async def search_catalog(
        self,
        query: str,
        kinds: Sequence[CatalogKind],
        limit: int,
    ) -> list[Candidate]: ...


@runtime_checkable
class UsageRecorder(Protocol):
    """Optional catalog capability: record that a suggestion was used."""

    async def record_usage(self, catalog_id: str) -> None: ...


class TemplateLookup(Protocol):
    """Local, in-memory filter over the user's templates."""

    def search(self, query: str) -> list[Template]: ...


class TemplateRepository(Protocol):
    """Persistence for the user's templates."""

    async def list_templates(self) -> list[Template]: ...

    async def create_template(self, template: Template) -> Template: ...

    async def update_template(self, template_id: int, template: Template) -> Template: ...

    async def delete_template(self, template_id: int) -> None: ...


class InvoiceRepository(Protocol):
    """Persistence for invoices; authoritative for totals and numbering."""

    async def submit_invoice(self, draft: InvoiceDraft) -> SubmissionReceipt: ...


class Notifier(Protocol):
    """Non-blocking user notifications (toasts)."""

    def notify(self, message: str, level: str = "info") -> None: ...
