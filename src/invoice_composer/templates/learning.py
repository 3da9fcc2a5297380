"""Template learning: turn submitted line items into reusable templates.

Runs after an invoice has been accepted by the server. It never raises
into the caller: a failed save only lowers the reported count.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, Field

from invoice_composer.core.config import ComposerConfig
from invoice_composer.core.ports import Notifier, TemplateRepository
from invoice_composer.schemas.line_item import LineItem
from invoice_composer.schemas.template import Template
from invoice_composer.templates.catalog import TemplateCatalog

logger = logging.getLogger(__name__)


class LearningReport(BaseModel):
    """What a learning pass did."""

    saved: list[Template] = Field(default_factory=list, description="Templates created")
    skipped_ineligible: int = Field(default=0, description="Items not worth keeping")
    skipped_duplicates: int = Field(default=0, description="Items already in the catalog")
    failed: int = Field(default=0, description="Saves rejected by the repository")

    @property
    def saved_count(self) -> int:
        return len(self.saved)

    @property
    def message(self) -> str | None:
        """Notification text, or None when nothing was saved."""
        count = self.saved_count
        if count == 0:
            return None
        plural = "s" if count > 1 else ""
        return f"Auto-saved {count} item{plural} as template{plural}!"


def is_template_worthy(item: LineItem, config: ComposerConfig | None = None) -> bool:
    """Whether an item is specific enough to keep as a template.

    The trimmed description must be longer than the configured minimum, the
    rate positive, and the description must not end in a placeholder word
    such as "test" or "item".
    """
    config = config or ComposerConfig()
    description = item.description.strip()
    if len(description) <= config.min_template_description_length:
        return False
    if item.rate <= 0:
        return False
    return config.generic_description_pattern.search(description) is None


def is_duplicate(item: LineItem, catalog: TemplateCatalog) -> bool:
    """Whether the catalog already holds this description and code."""
    return catalog.find_duplicate(item.description, item.classification_code) is not None


class TemplateLearningEngine:
    """Saves novel, template-worthy invoice items as templates.

    Saves run one at a time and each saved template joins the in-memory
    catalog immediately, so repeated items within one invoice are only
    saved once.

    Example:
        ```python
        engine = TemplateLearningEngine(repository, notifier=toasts)
        report = await engine.learn(submitted_items)
        print(report.saved_count)
        ```
    """

    def __init__(
        self,
        repository: TemplateRepository,
        notifier: Notifier | None = None,
        config: ComposerConfig | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            repository: Where templates are listed and created.
            notifier: Receives the "auto-saved" notification.
            config: Composer configuration.
        """
        self.repository = repository
        self.notifier = notifier
        self.config = config or ComposerConfig()

    def select(
        self,
        items: Iterable[LineItem],
        catalog: TemplateCatalog,
    ) -> tuple[list[LineItem], int]:
        """Split items into eligible ones and a count of ineligible ones."""
        eligible: list[LineItem] = []
        ineligible = 0
        for item in items:
            if is_template_worthy(item, self.config):
                eligible.append(item)
            else:
                ineligible += 1
        return eligible, ineligible

    async def learn(
        self,
        items: Iterable[LineItem],
        catalog: TemplateCatalog | None = None,
    ) -> LearningReport:
        """Save eligible, non-duplicate items as templates.

        Args:
            items: Line items of the submitted invoice.
            catalog: Known templates; loaded from the repository when omitted.
                Saved templates are added to it.

        Returns:
            A report of what was saved and skipped.
        """
        items = list(items)
        if catalog is None:
            try:
                catalog = TemplateCatalog(await self.repository.list_templates())
            except Exception as e:
                logger.warning("Template learning skipped, could not list templates: %s", e)
                return LearningReport()

        eligible, ineligible = self.select(items, catalog)
        report = LearningReport(skipped_ineligible=ineligible)
        if not eligible:
            return report

        logger.debug("Learning templates from %d eligible items", len(eligible))
        for item in eligible:
            if is_duplicate(item, catalog):
                logger.debug("Template for %r already exists, skipping", item.description)
                report.skipped_duplicates += 1
                continue

            blueprint = Template.from_line_item(
                item,
                currency=self.config.default_currency,
                payment_terms=self.config.default_payment_terms,
            )
            try:
                saved = await self.repository.create_template(blueprint)
            except Exception as e:
                logger.warning("Could not auto-save template %r: %s", blueprint.name, e)
                report.failed += 1
                continue

            catalog.add(saved)
            report.saved.append(saved)

        self._announce(report)
        return report

    def _announce(self, report: LearningReport) -> None:
        message = report.message
        if message is None or self.notifier is None:
            return
        try:
            self.notifier.notify(message, "success")
        except Exception as e:
            logger.warning("Could not deliver template notification: %s", e)
