"""
Query Validator — EXPLAIN dry run with error-correction hints.

Validation is advisory: the pipeline still executes a query that fails
it, and returns the hints alongside the execution error.
"""

import logging
import re

from codegraph.shared.database import QueryExecutor
from codegraph.shared.models import ValidationVerdict

logger = logging.getLogger("graph_query.validator")

SYNTAX_HINT = "Check for syntax errors: missing parentheses, brackets, or commas"
PROPERTY_HINT = "Verify property names are correct and case-sensitive"
VARIABLE_HINT = "Ensure all variables are properly defined in MATCH clauses"
TENANT_HINT = "Add project_id filter: {project_id: $project_id}"
CONTAINS_HINT = "Use CONTAINS instead of LIKE for substring matching"
CLAUSE_ORDER_HINT = "Check clause order: MATCH, WHERE, RETURN, ORDER BY, LIMIT"
GENERIC_HINT = "Check the query syntax and ensure all node/relationship types exist"

_LIKE_OPERATOR = re.compile(r"\blike\b", re.IGNORECASE)

# Write clauses; every query this package runs must be read-only
WRITE_PATTERN = re.compile(
    r"\b(MERGE|CREATE|DELETE|DETACH|SET|REMOVE|DROP|LOAD|FOREACH)\b"
    r"|CALL\s*\{",
    re.IGNORECASE,
)


def is_read_only(query: str) -> bool:
    return WRITE_PATTERN.search(query) is None


def analyze_cypher_error(query: str, error: str) -> list[str]:
    """Map a database error (plus the query text) to ordered suggestions."""
    error_lower = error.lower()
    query_lower = query.lower()
    suggestions: list[str] = []

    if "invalid input" in error_lower:
        suggestions.append(SYNTAX_HINT)
    if "undefined property" in error_lower:
        suggestions.append(PROPERTY_HINT)
    if "undefined variable" in error_lower:
        suggestions.append(VARIABLE_HINT)
    if "project_id" not in query_lower:
        suggestions.append(TENANT_HINT)
    if _LIKE_OPERATOR.search(query):
        suggestions.append(CONTAINS_HINT)
    if "expected" in error_lower:
        suggestions.append(CLAUSE_ORDER_HINT)

    if not suggestions:
        suggestions.append(GENERIC_HINT)

    # dict preserves first-seen order
    return list(dict.fromkeys(suggestions))


class QueryValidator:
    """Checks a query against the database planner without running it."""

    def __init__(self, executor: QueryExecutor):
        self._executor = executor

    async def validate(self, query: str, tenant: str) -> ValidationVerdict:
        try:
            await self._executor.run(f"EXPLAIN {query}", {"project_id": tenant})
        except Exception as exc:
            error = str(exc)
            logger.info("Query failed EXPLAIN for %s: %s", tenant, error)
            return ValidationVerdict(
                is_valid=False,
                error=error,
                suggestions=analyze_cypher_error(query, error),
            )
        return ValidationVerdict(is_valid=True)
