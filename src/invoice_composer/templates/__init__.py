"""Template catalog, template learning and template management."""

from invoice_composer.templates.catalog import TemplateCatalog
from invoice_composer.templates.learning import (
    LearningReport,
    TemplateLearningEngine,
    is_duplicate,
    is_template_worthy,
)
from invoice_composer.templates.manager import TemplateManager, apply_candidate_to_template

__all__ = [
    "TemplateCatalog",
    "TemplateLearningEngine",
    "LearningReport",
    "is_template_worthy",
    "is_duplicate",
    "TemplateManager",
    "apply_candidate_to_template",
]
