"""Template manager: explicit create, edit and delete of templates."""

from __future__ import annotations

import asyncio
import logging

from invoice_composer.core.config import ComposerConfig
from invoice_composer.core.exceptions import TemplateSaveError
from invoice_composer.core.ports import CatalogSearch, TemplateRepository, UsageRecorder
from invoice_composer.schemas.candidate import Candidate, CandidateOrigin
from invoice_composer.schemas.line_item import LineItem
from invoice_composer.schemas.template import Template, TemplateKind
from invoice_composer.suggestions.source import SuggestionSource
from invoice_composer.templates.catalog import TemplateCatalog

logger = logging.getLogger(__name__)


def apply_candidate_to_template(
    template: Template,
    candidate: Candidate,
    default_unit: str = "Nos",
) -> Template:
    """Fill a template form from a catalog suggestion.

    Name, description, code and GST rate come from the candidate, the unit
    is reset to the default and the kind follows the candidate's origin.
    The base rate is left as entered.
    """
    kind = (
        TemplateKind.PRODUCT
        if candidate.origin == CandidateOrigin.PRODUCT_CATALOG
        else TemplateKind.SERVICE
    )
    return template.model_copy(
        update={
            "name": candidate.name,
            "description": candidate.description or candidate.name,
            "code": candidate.code,
            "gst_rate": candidate.gst_rate,
            "unit": default_unit,
            "kind": kind,
        }
    )


class TemplateManager:
    """Explicit template maintenance backed by a TemplateRepository.

    Keeps a TemplateCatalog in step with the repository so suggestion
    sources sharing the catalog see changes immediately.

    Example:
        ```python
        manager = TemplateManager(repository, catalog_client)
        await manager.refresh()

        form = Template(name="draft")
        for candidate in await manager.suggest("web design"):
            form = manager.apply_candidate(form, candidate)
            break
        saved = await manager.create(form)
        ```
    """

    def __init__(
        self,
        repository: TemplateRepository,
        catalog: CatalogSearch | None = None,
        templates: TemplateCatalog | None = None,
        config: ComposerConfig | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            repository: Template persistence collaborator.
            catalog: Service/product catalog for form suggestions.
            templates: Shared in-memory catalog to keep up to date.
            config: Composer configuration.
        """
        self.repository = repository
        self.catalog = catalog
        self.templates = templates if templates is not None else TemplateCatalog()
        self.config = config or ComposerConfig()
        self._usage_tasks: set[asyncio.Task[None]] = set()
        self._source: SuggestionSource | None = None
        if catalog is not None:
            self._source = SuggestionSource(catalog, config=self.config)

    async def refresh(self) -> list[Template]:
        """Reload the catalog from the repository."""
        templates = await self.repository.list_templates()
        self.templates.replace_all(templates)
        logger.debug("Loaded %d templates", len(templates))
        return list(templates)

    async def create(self, template: Template) -> Template:
        """Persist a new template.

        Raises:
            TemplateSaveError: If the repository rejects the template.
        """
        try:
            saved = await self.repository.create_template(template)
        except Exception as e:
            raise TemplateSaveError(f"Failed to save template: {e}", last_error=e) from e
        self.templates.add(saved)
        return saved

    async def update(self, template_id: int, template: Template) -> Template:
        """Persist edits to an existing template.

        Raises:
            TemplateSaveError: If the repository rejects the update.
        """
        try:
            saved = await self.repository.update_template(template_id, template)
        except Exception as e:
            raise TemplateSaveError(f"Failed to update template: {e}", last_error=e) from e
        self.templates.add(saved)
        return saved

    async def delete(self, template_id: int) -> None:
        """Delete a template at the user's request."""
        await self.repository.delete_template(template_id)
        self.templates.remove(template_id)

    async def save_item_as_template(self, item: LineItem) -> Template:
        """Save an invoice line item as a template on explicit request.

        Raises:
            TemplateSaveError: If the item has no description or the save fails.
        """
        if not item.description.strip():
            raise TemplateSaveError("Please enter a description before saving as template")
        blueprint = Template.from_line_item(
            item,
            currency=self.config.default_currency,
            payment_terms=self.config.default_payment_terms,
        )
        return await self.create(blueprint)

    async def suggest(self, query: str) -> list[Candidate]:
        """Catalog suggestions for the template form; user templates excluded."""
        if self._source is None:
            return []
        return await self._source.search(query)

    def apply_candidate(self, template: Template, candidate: Candidate) -> Template:
        """Fill the form from a suggestion and record its usage."""
        filled = apply_candidate_to_template(template, candidate, self.config.default_unit)
        if candidate.origin == CandidateOrigin.SERVICE_CATALOG and candidate.catalog_id:
            self._record_usage(candidate.catalog_id)
        return filled

    async def wait_for_usage(self) -> None:
        """Wait for pending usage recordings."""
        if self._usage_tasks:
            await asyncio.gather(*list(self._usage_tasks), return_exceptions=True)

    def _record_usage(self, catalog_id: str) -> None:
        if not isinstance(self.catalog, UsageRecorder):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop, usage of %s not recorded", catalog_id)
            return
        task = loop.create_task(self._send_usage(self.catalog, catalog_id))
        self._usage_tasks.add(task)
        task.add_done_callback(self._usage_tasks.discard)

    async def _send_usage(self, recorder: UsageRecorder, catalog_id: str) -> None:
        try:
            await recorder.record_usage(catalog_id)
        except Exception as e:
            logger.debug("Usage recording failed for %s: %s", catalog_id, e)
