"""Example: Composing and submitting a GST invoice with invoice-composer."""

import asyncio
import itertools
import logging
import os

from dotenv import load_dotenv

from invoice_composer import (
    Candidate,
    CandidateOrigin,
    ClassificationCode,
    ComposerConfig,
    CompositionSession,
    DraftValidationError,
    InvoiceDraft,
    SubmissionReceipt,
    SuggestionCursor,
    Template,
    TemplateManager,
    compute_tax_preview,
)

# Load environment variables
load_dotenv()

logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING"))


# In-memory collaborators standing in for the HTTP API
class DemoCatalog:
    """Service and product catalog with a handful of entries."""

    ENTRIES = [
        Candidate(
            origin=CandidateOrigin.SERVICE_CATALOG,
            name="Website development",
            description="Design and development of a business website",
            code=ClassificationCode.sac("998314"),
            gst_rate=18,
            catalog_id="svc-998314",
        ),
        Candidate(
            origin=CandidateOrigin.SERVICE_CATALOG,
            name="Website hosting",
            description="Shared website hosting",
            code=ClassificationCode.sac("998315"),
            gst_rate=18,
            default_unit="Month",
            catalog_id="svc-998315",
        ),
        Candidate(
            origin=CandidateOrigin.PRODUCT_CATALOG,
            name="Web camera",
            description="USB web camera, 1080p",
            code=ClassificationCode.hsn("8525"),
            gst_rate=18,
            default_rate=2499,
        ),
    ]

    async def search_catalog(
        self, query: str, kinds: tuple[str, ...], limit: int
    ) -> list[Candidate]:
        await asyncio.sleep(0.05)
        needle = query.strip().lower()
        return [c for c in self.ENTRIES if needle in c.name.lower()][:limit]

    async def record_usage(self, catalog_id: str) -> None:
        print(f"  (usage recorded for {catalog_id})")


class DemoTemplates:
    """Template store keeping everything in a list."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.templates: list[Template] = []

    async def list_templates(self) -> list[Template]:
        return list(self.templates)

    async def create_template(self, template: Template) -> Template:
        saved = template.model_copy(update={"id": next(self._ids)})
        self.templates.append(saved)
        return saved

    async def update_template(self, template_id: int, template: Template) -> Template:
        saved = template.model_copy(update={"id": template_id})
        self.templates = [saved if t.id == template_id else t for t in self.templates]
        return saved

    async def delete_template(self, template_id: int) -> None:
        self.templates = [t for t in self.templates if t.id != template_id]


class DemoInvoices:
    """Invoice endpoint computing intra-state CGST/SGST."""

    def __init__(self) -> None:
        self._numbers = itertools.count(1)

    async def submit_invoice(self, draft: InvoiceDraft) -> SubmissionReceipt:
        preview = compute_tax_preview(draft.items)
        number = next(self._numbers)
        half = round(preview.tax / 2, 2)
        return SubmissionReceipt(
            id=number,
            invoice_number=f"INV-{number:04d}",
            subtotal=round(preview.subtotal, 2),
            cgst=half,
            sgst=half,
            total=round(preview.subtotal + 2 * half, 2),
        )


class PrintNotifier:
    def notify(self, message: str, level: str = "info") -> None:
        print(f"  [{level}] {message}")


async def example_full_invoice(templates: DemoTemplates) -> None:
    """Demonstrate search, autofill, preview and submit."""
    print("=" * 60)
    print("Example 1: Full Invoice")
    print("=" * 60)

    session = CompositionSession(DemoCatalog(), templates, DemoInvoices(), notifier=PrintNotifier())
    await session.load_templates()

    # Type into the first row and pick a suggestion with the keyboard
    session.search(0, "web")
    await session.wait_for_suggestions()
    cursor = SuggestionCursor(session.suggestions_for(0))
    print("Suggestions:")
    for candidate in cursor.candidates:
        print(f"  - [{candidate.origin.value}] {candidate.name}")
    cursor.move_next()
    session.select_candidate(0, cursor.current)
    session.edit_item(0, quantity=12, rate=1200)

    # A second row typed by hand
    session.add_item()
    session.edit_item(1, description="Annual maintenance contract", gst_rate=18, rate=12000)

    print(f"\nPreview: {session.preview.display()}")

    try:
        await session.submit()
    except DraftValidationError as e:
        print(f"Validation: {e}")

    session.buyer_id = 42
    receipt = await session.submit()
    print(f"\nCreated {receipt.invoice_number}: total {receipt.total:.2f} (tax {receipt.tax:.2f})")

    report = await session.learning_task
    print(f"Templates learned: {[t.name for t in report.saved]}")


async def example_quick_invoice(templates: DemoTemplates) -> None:
    """Demonstrate the quick builder reusing a learned template."""
    print("\n" + "=" * 60)
    print("Example 2: Quick Invoice from a Template")
    print("=" * 60)

    session = CompositionSession(
        DemoCatalog(),
        templates,
        DemoInvoices(),
        config=ComposerConfig.quick(),
    )
    await session.load_templates()

    session.search(0, "maint")
    await session.wait_for_suggestions()
    template = session.suggestions_for(0)[0]
    item = session.select_candidate(0, template)
    print(f"Autofilled: {item.description} @ {item.rate:.2f} (template {item.template_id})")

    session.buyer_id = 7
    receipt = await session.submit()
    print(f"Created {receipt.invoice_number}: total {receipt.total:.2f}")
    await session.learning_task


async def example_template_manager(templates: DemoTemplates) -> None:
    """Demonstrate explicit template maintenance."""
    print("\n" + "=" * 60)
    print("Example 3: Template Manager")
    print("=" * 60)

    manager = TemplateManager(templates, DemoCatalog())
    await manager.refresh()

    form = Template(name="draft", base_rate=1500)
    suggestions = await manager.suggest("hosting")
    form = manager.apply_candidate(form, suggestions[0])
    saved = await manager.create(form)
    await manager.wait_for_usage()

    print(f"Saved template #{saved.id}: {saved.name} ({saved.sac_code}) @ {saved.base_rate:.2f}")
    print("\nTemplate library as YAML:")
    print(manager.templates.to_yaml())


async def main() -> None:
    templates = DemoTemplates()
    await example_full_invoice(templates)
    await example_quick_invoice(templates)
    await example_template_manager(templates)


if __name__ == "__main__":
    asyncio.run(main())
