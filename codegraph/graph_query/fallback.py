"""
Fallback Translator — deterministic keyword-to-Cypher translation.

Used whenever no chat model is configured, no schema could be
discovered, or the model-assisted translator fails.  The question is
classified by keyword into one entity search; every remaining word is
bound as a ``$termN`` parameter, so the user's text never reaches the
query string.
"""

import logging
from typing import Any, Optional

from codegraph.shared.models import SchemaDocument, TranslationResult

logger = logging.getLogger("graph_query.fallback")

STOP_WORDS: frozenset[str] = frozenset({
    "show", "me", "the", "a", "an", "for", "in", "existing",
    "find", "get", "list", "all", "with", "from", "to",
})

MIN_TERM_LENGTH = 3

ENTITY_LIMIT = 20
OVERVIEW_LIMIT = 50

FALLBACK_CONFIDENCE = 0.5

# constant text, contains no user input
TEST_FILE_PREDICATE = "(f.path CONTAINS '_test.go' OR f.path CONTAINS '/test/')"

# kind -> (label, alias, secondary property, words that name the kind, RETURN fields)
_ENTITY_SEARCHES: dict[str, tuple[str, str, str, frozenset[str], str]] = {
    "function": (
        "Function", "f", "package", frozenset({"function", "functions"}),
        "f.name, f.package, f.signature, f.file_path, f.line_start, f.is_exported",
    ),
    "package": (
        "Package", "p", "path", frozenset({"package", "packages"}),
        "p.name, p.path",
    ),
    "struct": (
        "Struct", "s", "package", frozenset({"struct", "type", "structs", "types"}),
        "s.name, s.package",
    ),
    "interface": (
        "Interface", "i", "package", frozenset({"interface", "interfaces"}),
        "i.name, i.package",
    ),
}

_TEST_FILE_WORDS = frozenset({"test", "file", "files"})

OVERVIEW_QUERY = (
    "MATCH (f:Function {project_id: $project_id}) "
    "RETURN f.name, f.package, f.signature, f.file_path, f.line_start, f.is_exported "
    f"ORDER BY f.package, f.name LIMIT {OVERVIEW_LIMIT}"
)


def extract_search_terms(text: str) -> list[str]:
    """Lowercased words of ``text`` minus stop words and short tokens."""
    return [
        word for word in text.lower().split()
        if word not in STOP_WORDS and len(word) >= MIN_TERM_LENGTH
    ]


def classify(text: str) -> str:
    """Pick the entity kind a question is about.

    Checked in priority order on the lowercased text; the first hit wins.
    """
    lowered = text.lower()
    if "test" in lowered and "file" in lowered:
        return "test_file"
    if "function" in lowered:
        return "function"
    if "package" in lowered:
        return "package"
    if "struct" in lowered or "type" in lowered:
        return "struct"
    if "interface" in lowered:
        return "interface"
    return "overview"


def _term_conditions(
    terms: list[str],
    exclude: frozenset[str],
    fields: tuple[str, str],
    params: dict[str, Any],
) -> list[str]:
    conditions = []
    index = 0
    for term in terms:
        if term in exclude:
            continue
        name = f"term{index}"
        first, second = fields
        conditions.append(
            f"(toLower({first}) CONTAINS ${name} OR toLower({second}) CONTAINS ${name})"
        )
        params[name] = term
        index += 1
    return conditions


def generate_fallback_cypher(text: str, tenant: str) -> tuple[str, dict[str, Any]]:
    """Translate ``text`` into a parameterised, tenant-scoped query.

    Returns:
        ``(query, parameters)``; ``parameters`` always carries ``project_id``.
    """
    kind = classify(text)
    terms = extract_search_terms(text)
    params: dict[str, Any] = {"project_id": tenant}

    if kind == "test_file":
        conditions = [TEST_FILE_PREDICATE] + _term_conditions(
            terms, _TEST_FILE_WORDS, ("f.path", "f.name"), params,
        )
        query = (
            "MATCH (f:File {project_id: $project_id}) "
            f"WHERE {' AND '.join(conditions)} "
            f"RETURN f.path, f.name LIMIT {ENTITY_LIMIT}"
        )
        return query, params

    if kind == "overview":
        return OVERVIEW_QUERY, params

    label, alias, secondary, exclude, fields = _ENTITY_SEARCHES[kind]
    conditions = _term_conditions(
        terms, exclude, (f"{alias}.name", f"{alias}.{secondary}"), params,
    )
    where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
    query = (
        f"MATCH ({alias}:{label} {{project_id: $project_id}}){where} "
        f"RETURN {fields} LIMIT {ENTITY_LIMIT}"
    )
    return query, params


class FallbackCypherTranslator:
    """Keyword-driven translator; needs no model and ignores the schema."""

    async def translate(
        self,
        text: str,
        tenant: str,
        schema: Optional[SchemaDocument] = None,
    ) -> TranslationResult:
        query, params = generate_fallback_cypher(text, tenant)
        logger.debug("Fallback translation (%s): %s", classify(text), query)
        return TranslationResult(
            query=query,
            parameters=params,
            description=f"Keyword translation of '{text}'",
            confidence=FALLBACK_CONFIDENCE,
        )
