"""Composition session: one invoice being built from search to submit."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from invoice_composer.core.config import ComposerConfig
from invoice_composer.core.exceptions import DraftValidationError, SubmissionError
from invoice_composer.core.ports import (
    CatalogSearch,
    InvoiceRepository,
    Notifier,
    TemplateRepository,
)
from invoice_composer.items.autofill import apply_candidate
from invoice_composer.items.store import LineItemStore, ValidationResult
from invoice_composer.items.tax import TaxPreview, compute_tax_preview
from invoice_composer.schemas.candidate import Candidate
from invoice_composer.schemas.invoice import ComplianceFlags, InvoiceDraft, SubmissionReceipt
from invoice_composer.schemas.line_item import LineItem, SearchState
from invoice_composer.suggestions.debounce import DebouncedSearch
from invoice_composer.suggestions.source import SuggestionSource
from invoice_composer.templates.catalog import TemplateCatalog
from invoice_composer.templates.learning import LearningReport, TemplateLearningEngine

logger = logging.getLogger(__name__)


class CompositionSession:
    """Drives one invoice draft for the full or quick invoice builder.

    Keystrokes go through a per-item debounced search, selections through
    the autofill policy, and every store mutation refreshes the tax
    preview. On submit the draft is validated and handed to the invoice
    repository; template learning then runs in the background.

    Example:
        ```python
        session = CompositionSession(catalog, templates, invoices, notifier=toasts)
        await session.load_templates()

        session.buyer_id = 42
        session.search(0, "web dev")
        await session.wait_for_suggestions()
        session.select_candidate(0, session.suggestions_for(0)[0])
        session.edit_item(0, quantity=2)

        print(session.preview.display())
        receipt = await session.submit()
        ```
    """

    def __init__(
        self,
        catalog: CatalogSearch,
        templates: TemplateRepository,
        invoices: InvoiceRepository,
        notifier: Notifier | None = None,
        config: ComposerConfig | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        """Initialize the session.

        Args:
            catalog: Service and product catalog collaborator.
            templates: Template persistence collaborator.
            invoices: Invoice persistence collaborator.
            notifier: Receives non-blocking notifications.
            config: Composer configuration.
            today: Clock used to default invoice dates.
        """
        self.config = config or ComposerConfig()
        self.template_repository = templates
        self.invoices = invoices
        self.notifier = notifier
        self._today = today

        self.template_catalog = TemplateCatalog()
        self.source = SuggestionSource(catalog, self.template_catalog, self.config)
        self.learning = TemplateLearningEngine(templates, notifier, self.config)

        self.store = LineItemStore(config=self.config)
        self.buyer_id: int | None = None
        self.issue_date: date | None = None
        self.due_date: date | None = None
        self.compliance = ComplianceFlags()
        self.terms_and_conditions: str | None = None

        self.preview: TaxPreview = compute_tax_preview(self.store.items)
        self.final_totals: SubmissionReceipt | None = None
        self.learning_task: asyncio.Task[LearningReport] | None = None
        self.is_submitting = False
        self._templates_loaded = False

        self._suggestions: dict[int, list[Candidate]] = {}
        self._searches: dict[int, DebouncedSearch[list[Candidate]]] = {}
        self._unsubscribe = self.store.subscribe(self._on_items_changed)

    # =========================================================================
    # Templates
    # =========================================================================

    async def load_templates(self) -> int:
        """Load the user's templates for local suggestions.

        Failures are logged and leave the catalog as it was.

        Returns:
            Number of templates in the catalog.
        """
        try:
            templates = await self.template_repository.list_templates()
        except Exception as e:
            logger.warning("Failed to load templates: %s", e)
            return len(self.template_catalog)
        self.template_catalog.replace_all(templates)
        self._templates_loaded = True
        return len(self.template_catalog)

    # =========================================================================
    # Items
    # =========================================================================

    @property
    def items(self) -> tuple[LineItem, ...]:
        return self.store.items

    def add_item(self) -> int:
        return self.store.add_item()

    def remove_item(self, index: int) -> bool:
        """Remove an item; its pending search is dropped."""
        if not self.store.remove_item(index):
            return False
        self._reindex_after_removal(index)
        return True

    def edit_item(self, index: int, **fields: Any) -> LineItem:
        """Apply a direct user edit.

        Editing the description directly abandons any pending search for
        the item.
        """
        item = self.store.edit_item(index, **fields)
        if "description" in fields:
            self._drop_search(index)
        return item

    def select_candidate(self, index: int, candidate: Candidate) -> LineItem:
        """Fill an item from a selected suggestion and close its list."""
        item = apply_candidate(self.store[index], candidate)
        self._drop_search(index)
        logger.debug("Applied %s candidate %r to item %d", candidate.origin.value, candidate.name, index)
        return self.store.replace_item(index, item)

    # =========================================================================
    # Suggestions
    # =========================================================================

    def search(self, index: int, query: str) -> asyncio.Task[list[Candidate] | None] | None:
        """Record typed text for an item and schedule a debounced search.

        Must be called from a running event loop.
        """
        self.store.patch_item(
            index,
            {"description": query, "search_state": SearchState(query=query, is_open=True)},
        )
        return self._search_for(index).submit(query)

    def suggestions_for(self, index: int) -> list[Candidate]:
        """Candidates currently shown for an item."""
        return list(self._suggestions.get(index, []))

    def close_suggestions(self, index: int) -> None:
        item = self.store[index]
        self._suggestions.pop(index, None)
        if item.search_state.is_open:
            self.store.patch_item(
                index, {"search_state": SearchState(query=item.search_state.query, is_open=False)}
            )

    async def wait_for_suggestions(self) -> None:
        """Wait until all pending searches have settled."""
        for search in list(self._searches.values()):
            await search.wait()

    # =========================================================================
    # Submission
    # =========================================================================

    def validate(self) -> ValidationResult:
        return self.store.validate_for_submit(self.buyer_id)

    def build_draft(self) -> InvoiceDraft:
        """Snapshot the current state as an invoice draft."""
        draft = InvoiceDraft(
            buyer_id=self.buyer_id,
            issue_date=self.issue_date,
            due_date=self.due_date,
            items=list(self.store.items),
            compliance=self.compliance,
            terms_and_conditions=self.terms_and_conditions,
        )
        return draft.with_default_dates(self._today(), self.config.payment_due_days)

    async def submit(self) -> SubmissionReceipt:
        """Validate and submit the draft.

        On success the server's totals replace the preview, the draft is
        discarded and template learning starts in the background. On any
        failure the draft is kept as it was so the user can retry.

        Raises:
            DraftValidationError: If the draft fails validation.
            SubmissionError: If a submission is already in progress or the
                invoice repository fails.
        """
        if self.is_submitting:
            raise SubmissionError("Invoice submission already in progress")

        result = self.validate()
        if not result.is_valid:
            raise DraftValidationError(result)

        draft = self.build_draft()
        self.is_submitting = True
        try:
            receipt = await self.invoices.submit_invoice(draft)
        except Exception as e:
            logger.error("Invoice submission failed: %s", e)
            raise SubmissionError(f"Failed to create invoice: {e}", last_error=e) from e
        finally:
            self.is_submitting = False

        logger.debug("Invoice %s created (id=%s)", receipt.invoice_number, receipt.id)
        self.final_totals = receipt
        submitted_items = list(draft.items)
        self._discard_draft()

        if self.config.auto_save_templates:
            self.learning_task = asyncio.get_running_loop().create_task(
                self._learn(submitted_items)
            )
        return receipt

    async def _learn(self, items: list[LineItem]) -> LearningReport:
        if not self._templates_loaded:
            await self.load_templates()
        # Without a loaded catalog the engine lists templates itself
        catalog = self.template_catalog if self._templates_loaded else None
        try:
            return await self.learning.learn(items, catalog)
        except Exception as e:
            logger.warning("Template learning failed: %s", e)
            return LearningReport()

    # =========================================================================
    # Internals
    # =========================================================================

    def _on_items_changed(self, items: tuple[LineItem, ...]) -> None:
        self.preview = compute_tax_preview(items)

    def _search_for(self, index: int) -> DebouncedSearch[list[Candidate]]:
        search = self._searches.get(index)
        if search is None:
            search = DebouncedSearch(
                self.source.search,
                on_result=lambda query, candidates: self._show_suggestions(index, query, candidates),
                on_clear=lambda query: self._suggestions.pop(index, None),
                delay=self.config.debounce_seconds,
                min_length=self.config.min_query_length,
            )
            self._searches[index] = search
        return search

    def _show_suggestions(self, index: int, query: str, candidates: list[Candidate]) -> None:
        if index >= len(self.store):
            return
        item = self.store[index]
        if item.search_state.query != query or item.description != query:
            return
        self._suggestions[index] = candidates

    def _drop_search(self, index: int) -> None:
        search = self._searches.pop(index, None)
        if search is not None:
            search.cancel()
        self._suggestions.pop(index, None)

    def _reindex_after_removal(self, removed: int) -> None:
        # Searches are bound to their index; rows that shifted start fresh
        for index in [i for i in self._searches if i >= removed]:
            self._drop_search(index)
        self._suggestions = {i: c for i, c in self._suggestions.items() if i < removed}

    def _discard_draft(self) -> None:
        for index in list(self._searches):
            self._drop_search(index)
        self.store.reset()
        self.buyer_id = None
        self.issue_date = None
        self.due_date = None
        self.compliance = ComplianceFlags()
        self.terms_and_conditions = None
