"""In-memory template catalog.

This module provides:
- TemplateCatalog: the user's templates as seen by a composition session,
  used for local suggestion filtering and duplicate detection

The catalog mirrors the server-side template list; it is refreshed from a
TemplateRepository and grows as templates are saved during the session.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

import yaml

from invoice_composer.schemas.line_item import ClassificationCode
from invoice_composer.schemas.template import Template


def normalize_description(text: str) -> str:
    """Normalize a description for case-insensitive comparison."""
    return " ".join(text.split()).casefold()


class TemplateCatalog:
    """Ordered collection of the user's templates.

    Example:
        ```python
        catalog = TemplateCatalog(await repository.list_templates())

        # Local suggestion filter
        matches = catalog.search("logo")

        # Duplicate check before saving a learned template
        existing = catalog.find_duplicate("Logo Design", ClassificationCode.sac("998391"))

        # Export the library
        catalog.to_yaml("templates.yaml")
        ```
    """

    def __init__(self, templates: Iterable[Template] | None = None) -> None:
        """Initialize the catalog, optionally with existing templates."""
        self._templates: list[Template] = list(templates or [])

    def add(self, template: Template) -> None:
        """Add a template, replacing any template with the same id."""
        if template.id is not None:
            for i, existing in enumerate(self._templates):
                if existing.id == template.id:
                    self._templates[i] = template
                    return
        self._templates.append(template)

    def replace_all(self, templates: Iterable[Template]) -> None:
        """Replace the catalog contents, e.g. after a refresh."""
        self._templates = list(templates)

    def get(self, template_id: int) -> Template | None:
        """Get template by id.

        Args:
            template_id: Server id of the template.

        Returns:
            Template or None if not found.
        """
        for template in self._templates:
            if template.id == template_id:
                return template
        return None

    def remove(self, template_id: int) -> bool:
        """Remove template from the catalog.

        Args:
            template_id: Server id of the template.

        Returns:
            True if template was removed, False if not found.
        """
        for i, template in enumerate(self._templates):
            if template.id == template_id:
                del self._templates[i]
                return True
        return False

    def search(self, query: str, include_inactive: bool = False) -> list[Template]:
        """Find templates whose name, description or code contains query.

        Matching on name and description is case-insensitive.

        Args:
            query: Search string.
            include_inactive: Whether inactive templates may match.

        Returns:
            Matching templates in catalog order.
        """
        needle = query.strip().casefold()
        if not needle:
            return []

        matching = []
        for template in self._templates:
            if not template.is_active and not include_inactive:
                continue
            if (
                needle in template.name.casefold()
                or needle in template.description.casefold()
                or (template.code is not None and needle in template.code.value.casefold())
            ):
                matching.append(template)
        return matching

    def find_duplicate(
        self,
        description: str,
        code: ClassificationCode | None,
    ) -> Template | None:
        """Find a template with the same description and classification code.

        Descriptions compare case-insensitively. Codes compare by kind and
        value, so a code-less item never matches an HSN or SAC template.
        """
        wanted = normalize_description(description)
        for template in self._templates:
            if normalize_description(template.description) != wanted:
                continue
            if template.code == code:
                return template
        return None

    def to_list(self) -> list[dict[str, Any]]:
        """Export all templates as flat dictionaries."""
        return [template.to_dict() for template in self._templates]

    def to_json(self, path: str | Path | None = None, indent: int = 2) -> str:
        """Serialize catalog to JSON.

        Args:
            path: Optional file path to write to.
            indent: JSON indentation level.

        Returns:
            JSON string representation.
        """
        json_str = json.dumps(self.to_list(), indent=indent)

        if path:
            Path(path).write_text(json_str)

        return json_str

    def to_yaml(self, path: str | Path | None = None) -> str:
        """Serialize catalog to YAML.

        Args:
            path: Optional file path to write to.

        Returns:
            YAML string representation.
        """
        yaml_str: str = yaml.dump(self.to_list(), default_flow_style=False, sort_keys=False)

        if path:
            Path(path).write_text(yaml_str)

        return yaml_str

    @classmethod
    def from_json(cls, source: str | Path) -> TemplateCatalog:
        """Load catalog from JSON file or string."""
        content = _read_source(source)
        return cls(Template.from_dict(entry) for entry in json.loads(content) or [])

    @classmethod
    def from_yaml(cls, source: str | Path) -> TemplateCatalog:
        """Load catalog from YAML file or string."""
        content = _read_source(source)
        return cls(Template.from_dict(entry) for entry in yaml.safe_load(content) or [])

    def __len__(self) -> int:
        """Return number of templates."""
        return len(self._templates)

    def __contains__(self, template_id: object) -> bool:
        """Check if a template id is in the catalog."""
        return any(t.id == template_id for t in self._templates)

    def __iter__(self) -> Iterator[Template]:
        """Iterate over templates in catalog order."""
        return iter(list(self._templates))


def _read_source(source: str | Path) -> str:
    if isinstance(source, Path):
        return source.read_text()
    # Long or multi-line strings are content, not paths
    if "\n" not in source and len(source) < 256 and Path(source).is_file():
        return Path(source).read_text()
    return source
