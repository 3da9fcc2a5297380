"""Suggestion source: merged, ranked candidates for a free-text query."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from invoice_composer.core.config import ComposerConfig
from invoice_composer.core.exceptions import SuggestionError
from invoice_composer.core.ports import CatalogSearch, TemplateLookup
from invoice_composer.schemas.candidate import Candidate, CandidateOrigin

logger = logging.getLogger(__name__)

CATALOG_KINDS = ("service", "product")

# Display order of the candidate groups
ORIGIN_ORDER = (
    CandidateOrigin.USER_TEMPLATE,
    CandidateOrigin.SERVICE_CATALOG,
    CandidateOrigin.PRODUCT_CATALOG,
)


def group_candidates(
    candidates: Iterable[Candidate],
) -> dict[CandidateOrigin, list[Candidate]]:
    """Group candidates by origin, in display order.

    Empty groups are omitted so callers can render one labelled section
    per key.
    """
    groups: dict[CandidateOrigin, list[Candidate]] = {origin: [] for origin in ORIGIN_ORDER}
    for candidate in candidates:
        groups[candidate.origin].append(candidate)
    return {origin: members for origin, members in groups.items() if members}


class SuggestionSource:
    """Queries the service/product catalog and the user's own templates.

    One query covers all three sources. Results come back as a single list
    ordered user templates first (capped), then services, then products,
    each tagged with its origin.

    Example:
        ```python
        source = SuggestionSource(catalog_client, template_catalog)
        candidates = await source.search("web dev")
        for origin, group in group_candidates(candidates).items():
            render_section(origin, group)
        ```
    """

    def __init__(
        self,
        catalog: CatalogSearch,
        templates: TemplateLookup | None = None,
        config: ComposerConfig | None = None,
    ) -> None:
        """Initialize the suggestion source.

        Args:
            catalog: Service and product catalog collaborator.
            templates: The user's templates for local filtering.
            config: Composer configuration.
        """
        self.catalog = catalog
        self.templates = templates
        self.config = config or ComposerConfig()

    def accepts(self, query: str) -> bool:
        """Whether the query is long enough to be searched."""
        return len(query.strip()) >= self.config.min_query_length

    async def search(self, query: str) -> list[Candidate]:
        """Return ranked candidates for query.

        Short queries return an empty list without touching the catalog.
        Catalog failures are logged and degrade to an empty list so the
        typed text stays usable as free-form input.
        """
        if not self.accepts(query):
            return []

        try:
            catalog_results = await self._search_catalog(query)
        except SuggestionError as e:
            logger.warning("Suggestion search failed for %r: %s", query, e)
            return []

        template_results = self.match_templates(query)
        return self.rank(template_results, catalog_results)

    def match_templates(self, query: str) -> list[Candidate]:
        """Filter the user's templates locally, capped for display."""
        if self.templates is None:
            return []
        cap = self.config.max_template_suggestions
        matches = self.templates.search(query)[:cap]
        return [Candidate.from_template(t) for t in matches]

    def rank(
        self,
        template_results: Iterable[Candidate],
        catalog_results: Iterable[Candidate],
    ) -> list[Candidate]:
        """Merge local template matches with catalog results.

        Catalog results keep their relative order within each origin group;
        anything the catalog claims is a user template is dropped.
        """
        services: list[Candidate] = []
        products: list[Candidate] = []
        for candidate in catalog_results:
            if candidate.origin == CandidateOrigin.SERVICE_CATALOG:
                services.append(candidate)
            elif candidate.origin == CandidateOrigin.PRODUCT_CATALOG:
                products.append(candidate)
            else:
                logger.debug("Ignoring catalog result with origin %s", candidate.origin.value)
        return [*template_results, *services, *products]

    async def _search_catalog(self, query: str) -> list[Candidate]:
        try:
            results = await self.catalog.search_catalog(
                query,
                kinds=CATALOG_KINDS,
                limit=self.config.search_limit,
            )
        except Exception as e:
            raise SuggestionError(f"Catalog search failed: {e}", query=query) from e
        logger.debug("Catalog returned %d results for %r", len(results or []), query)
        return list(results or [])
