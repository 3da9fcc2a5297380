"""Tests for the template manager."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from invoice_composer import (
    Candidate,
    CandidateOrigin,
    ClassificationCode,
    LineItem,
    Template,
    TemplateCatalog,
    TemplateKind,
    TemplateManager,
    TemplateSaveError,
    apply_candidate_to_template,
)


class PlainCatalog:
    """A catalog client without usage analytics."""

    def __init__(self, results: list[Candidate]) -> None:
        self.results = results

    async def search_catalog(self, query: str, kinds: tuple[str, ...], limit: int) -> list[Candidate]:
        return self.results


@pytest.fixture
def repository() -> AsyncMock:
    """A template repository echoing saved templates with an id."""
    repository = AsyncMock()
    repository.list_templates.return_value = [Template(id=1, name="Logo Design", base_rate=5000)]
    repository.create_template.side_effect = lambda t: t.model_copy(update={"id": 42})
    repository.update_template.side_effect = lambda i, t: t.model_copy(update={"id": i})
    return repository


@pytest.fixture
def hosting() -> Candidate:
    return Candidate(
        origin=CandidateOrigin.SERVICE_CATALOG,
        name="Web hosting",
        description="Shared web hosting",
        code=ClassificationCode.sac("998315"),
        gst_rate=18,
        default_unit="Month",
        catalog_id="svc-315",
    )


class TestApplyCandidateToTemplate:
    """Tests for filling the template form from a suggestion."""

    def test_fills_fields(self, hosting: Candidate) -> None:
        """Test the form takes the candidate's identity and keeps its rate."""
        form = Template(name="draft", base_rate=900, unit="Hours")

        filled = apply_candidate_to_template(form, hosting)

        assert filled.name == "Web hosting"
        assert filled.description == "Shared web hosting"
        assert filled.sac_code == "998315"
        assert filled.gst_rate == 18
        assert filled.unit == "Nos"
        assert filled.kind == TemplateKind.SERVICE
        assert filled.base_rate == 900

    def test_product_kind(self) -> None:
        """Test product suggestions make product templates."""
        candidate = Candidate(
            origin=CandidateOrigin.PRODUCT_CATALOG,
            name="USB cable",
            code=ClassificationCode.hsn("8544"),
        )

        filled = apply_candidate_to_template(Template(name="draft"), candidate)

        assert filled.kind == TemplateKind.PRODUCT
        assert filled.description == "USB cable"


class TestTemplateManager:
    """Tests for TemplateManager."""

    def test_refresh(self, repository: AsyncMock) -> None:
        """Test refresh loads the catalog."""
        manager = TemplateManager(repository)

        templates = asyncio.run(manager.refresh())

        assert [t.id for t in templates] == [1]
        assert 1 in manager.templates

    def test_create_adds_to_shared_catalog(self, repository: AsyncMock) -> None:
        """Test created templates appear in the shared catalog."""
        shared = TemplateCatalog()
        manager = TemplateManager(repository, templates=shared)

        saved = asyncio.run(manager.create(Template(name="Website hosting", base_rate=3000)))

        assert saved.id == 42
        assert shared.get(42) == saved

    def test_create_failure(self, repository: AsyncMock) -> None:
        """Test repository errors surface as TemplateSaveError."""
        error = ValueError("duplicate name")
        repository.create_template.side_effect = error
        manager = TemplateManager(repository)

        with pytest.raises(TemplateSaveError) as exc_info:
            asyncio.run(manager.create(Template(name="Logo Design")))

        assert exc_info.value.last_error is error
        assert "duplicate name" in str(exc_info.value)
        assert len(manager.templates) == 0

    def test_update_replaces_in_catalog(self, repository: AsyncMock) -> None:
        """Test updates replace the catalog entry."""
        manager = TemplateManager(repository)
        asyncio.run(manager.refresh())

        asyncio.run(manager.update(1, Template(name="Logo Design Pro", base_rate=8000)))

        assert len(manager.templates) == 1
        assert manager.templates.get(1).name == "Logo Design Pro"  # type: ignore[union-attr]

    def test_update_failure(self, repository: AsyncMock) -> None:
        repository.update_template.side_effect = RuntimeError("not found")
        manager = TemplateManager(repository)

        with pytest.raises(TemplateSaveError, match="Failed to update template"):
            asyncio.run(manager.update(5, Template(name="Missing")))

    def test_delete(self, repository: AsyncMock) -> None:
        """Test delete removes from repository and catalog."""
        manager = TemplateManager(repository)
        asyncio.run(manager.refresh())

        asyncio.run(manager.delete(1))

        repository.delete_template.assert_awaited_once_with(1)
        assert 1 not in manager.templates

    def test_save_item_as_template(self, repository: AsyncMock) -> None:
        """Test an explicit save uses the item's values."""
        manager = TemplateManager(repository)
        item = LineItem(
            description=" USB cable ",
            classification_code=ClassificationCode.hsn("8544"),
            gst_rate=18,
            unit="Pcs",
            rate=250,
        )

        saved = asyncio.run(manager.save_item_as_template(item))

        assert saved.name == "USB cable"
        assert saved.kind == TemplateKind.PRODUCT
        assert saved.unit == "Pcs"
        assert saved.base_rate == 250

    def test_save_item_without_description(self, repository: AsyncMock) -> None:
        """Test an empty item cannot be saved."""
        manager = TemplateManager(repository)

        with pytest.raises(TemplateSaveError, match="Please enter a description"):
            asyncio.run(manager.save_item_as_template(LineItem(description="  ", rate=10)))

        repository.create_template.assert_not_called()

    def test_suggest_excludes_templates(self, repository: AsyncMock, hosting: Candidate) -> None:
        """Test form suggestions only come from the catalog."""
        template_hit = Candidate(origin=CandidateOrigin.USER_TEMPLATE, name="Web", template_id=3)
        manager = TemplateManager(repository, PlainCatalog([template_hit, hosting]))
        manager.templates.add(Template(id=3, name="Web stuff"))

        results = asyncio.run(manager.suggest("web"))

        assert results == [hosting]

    def test_suggest_without_catalog(self, repository: AsyncMock) -> None:
        assert asyncio.run(TemplateManager(repository).suggest("web")) == []


class TestUsageRecording:
    """Tests for usage analytics on service suggestions."""

    def test_service_usage_recorded(self, repository: AsyncMock, hosting: Candidate) -> None:
        """Test selecting a service suggestion records its usage."""
        catalog = AsyncMock()
        manager = TemplateManager(repository, catalog)

        async def run() -> Template:
            filled = manager.apply_candidate(Template(name="draft"), hosting)
            await manager.wait_for_usage()
            return filled

        filled = asyncio.run(run())

        assert filled.name == "Web hosting"
        catalog.record_usage.assert_awaited_once_with("svc-315")

    def test_product_usage_not_recorded(self, repository: AsyncMock) -> None:
        catalog = AsyncMock()
        manager = TemplateManager(repository, catalog)
        candidate = Candidate(
            origin=CandidateOrigin.PRODUCT_CATALOG, name="USB cable", catalog_id="prd-1"
        )

        async def run() -> None:
            manager.apply_candidate(Template(name="draft"), candidate)
            await manager.wait_for_usage()

        asyncio.run(run())

        catalog.record_usage.assert_not_called()

    def test_usage_failure_ignored(self, repository: AsyncMock, hosting: Candidate) -> None:
        """Test a failed usage call does not affect the form."""
        catalog = AsyncMock()
        catalog.record_usage.side_effect = ConnectionError("offline")
        manager = TemplateManager(repository, catalog)

        async def run() -> Template:
            filled = manager.apply_candidate(Template(name="draft"), hosting)
            await manager.wait_for_usage()
            return filled

        assert asyncio.run(run()).gst_rate == 18

    def test_catalog_without_usage_support(self, repository: AsyncMock, hosting: Candidate) -> None:
        """Test catalogs without record_usage are left alone."""
        manager = TemplateManager(repository, PlainCatalog([]))

        filled = manager.apply_candidate(Template(name="draft"), hosting)

        assert filled.name == "Web hosting"

    def test_no_running_loop(self, repository: AsyncMock, hosting: Candidate) -> None:
        """Test applying outside an event loop still fills the form."""
        manager = TemplateManager(repository, AsyncMock())

        filled = manager.apply_candidate(Template(name="draft"), hosting)

        assert filled.sac_code == "998315"


class TestSuggestionWiring:
    """Tests for how the manager builds its suggestion source."""

    def test_source_imported_at_module_level(self) -> None:
        """Test the manager module loads SuggestionSource without a deferred import."""
        from invoice_composer import SuggestionSource
        from invoice_composer.templates import manager as manager_module

        assert manager_module.SuggestionSource is SuggestionSource

    def test_source_built_once(self, repository: AsyncMock, hosting: Candidate) -> None:
        """Test repeated suggestions reuse one source and never match templates."""
        catalog = PlainCatalog([hosting])
        manager = TemplateManager(repository, catalog)
        manager.templates.add(Template(id=3, name="Web hosting premium"))
        source = manager._source

        first = asyncio.run(manager.suggest("hosting"))
        second = asyncio.run(manager.suggest("hosting"))

        assert manager._source is source
        assert first == second == [hosting]
