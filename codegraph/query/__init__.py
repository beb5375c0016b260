"""Query construction, template catalog and result export."""

from codegraph.query.builder import CypherBuilder, REPORTS, VALID_LABELS, VALID_RELATIONSHIPS
from codegraph.query.exporter import Exporter, ExportOptions, ExportResult
from codegraph.query.processor import ResultProcessor
from codegraph.query.templates import (
    COMMON_TEMPLATES,
    QueryTemplate,
    get_template,
    list_templates,
    templates_by_category,
)

__all__ = [
    "COMMON_TEMPLATES",
    "CypherBuilder",
    "ExportOptions",
    "ExportResult",
    "Exporter",
    "QueryTemplate",
    "REPORTS",
    "ResultProcessor",
    "VALID_LABELS",
    "VALID_RELATIONSHIPS",
    "get_template",
    "list_templates",
    "templates_by_category",
]
