"""
Unit tests for the deterministic keyword-to-Cypher fallback.

Run with: pytest tests/test_graph_query/test_fallback.py -v
"""

import pytest

from codegraph.graph_query.fallback import (
    ENTITY_LIMIT,
    FALLBACK_CONFIDENCE,
    OVERVIEW_QUERY,
    FallbackCypherTranslator,
    classify,
    extract_search_terms,
    generate_fallback_cypher,
)

# ──────────────────────────────────────────────────
# Term extraction and classification
# ──────────────────────────────────────────────────


class TestSearchTerms:

    def test_stop_words_and_short_tokens_dropped(self):
        terms = extract_search_terms("Show me all the existing functions for the package")
        assert terms == ["functions", "package"]

    def test_kind_words_do_not_become_filters(self):
        _, params = generate_fallback_cypher(
            "show me all the existing functions for the package", "demo"
        )
        assert params == {"project_id": "demo", "term0": "package"}

    def test_tokens_of_two_characters_dropped(self):
        assert extract_search_terms("go db api") == ["api"]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("find test files for the parser", "test_file"),
        ("which function tests the file reader", "test_file"),
        ("functions in package mcp", "function"),
        ("list packages", "package"),
        ("show struct Config", "struct"),
        ("all types in analyzer", "struct"),
        ("which interface has Close", "interface"),
        ("what's in this project", "overview"),
    ],
)
def test_classify_priority(text, expected):
    assert classify(text) == expected


# ──────────────────────────────────────────────────
# Query generation
# ──────────────────────────────────────────────────


class TestGenerateFallbackCypher:

    def test_function_search(self):
        query, params = generate_fallback_cypher("find function handleRequest", "demo")

        assert query == (
            "MATCH (f:Function {project_id: $project_id}) "
            "WHERE (toLower(f.name) CONTAINS $term0 OR toLower(f.package) CONTAINS $term0) "
            "RETURN f.name, f.package, f.signature, f.file_path, f.line_start, f.is_exported "
            f"LIMIT {ENTITY_LIMIT}"
        )
        assert params == {"project_id": "demo", "term0": "handlerequest"}

    def test_multiple_terms_are_conjoined(self):
        query, params = generate_fallback_cypher("structs named server config", "demo")

        assert "(s:Struct {project_id: $project_id})" in query
        assert query.count(" AND ") == 2
        assert params == {
            "project_id": "demo",
            "term0": "named",
            "term1": "server",
            "term2": "config",
        }

    def test_package_search_uses_path(self):
        query, _ = generate_fallback_cypher("package storage", "demo")
        assert "toLower(p.path) CONTAINS $term0" in query

    def test_entity_without_terms_has_no_where(self):
        query, params = generate_fallback_cypher("interfaces", "demo")

        assert "WHERE" not in query
        assert params == {"project_id": "demo"}

    def test_test_file_search(self):
        query, params = generate_fallback_cypher("test files for parser", "demo")

        assert query.startswith("MATCH (f:File {project_id: $project_id}) WHERE ")
        assert "f.path CONTAINS '_test.go'" in query
        assert "(toLower(f.path) CONTAINS $term0 OR toLower(f.name) CONTAINS $term0)" in query
        assert params == {"project_id": "demo", "term0": "parser"}

    def test_default_overview(self):
        query, params = generate_fallback_cypher("what's in this project", "demo")

        assert query == OVERVIEW_QUERY
        assert query.endswith("ORDER BY f.package, f.name LIMIT 50")
        assert params == {"project_id": "demo"}

    @pytest.mark.parametrize(
        "hostile",
        [
            "find function named '); DROP DATABASE; --",
            'function "x" OR 1=1 // DETACH DELETE',
            "package a} MATCH (n) DELETE n /*",
            "test file `rm` UNION ALL CALL db.labels()",
        ],
    )
    def test_user_text_only_reaches_parameters(self, hostile):
        query, params = generate_fallback_cypher(hostile, "demo")

        assert "$project_id" in query
        upper = query.upper()
        for fragment in ("DROP", "--", "DELETE", "//", "/*", "UNION", "CALL", "`", '"'):
            assert fragment not in upper
        assert params["project_id"] == "demo"

    def test_tenant_is_a_parameter(self):
        query, params = generate_fallback_cypher("function x' OR '1'='1", "evil' OR 1=1")

        assert "evil" not in query
        assert params["project_id"] == "evil' OR 1=1"


class TestFallbackCypherTranslator:

    async def test_translate_returns_result(self):
        result = await FallbackCypherTranslator().translate("list packages", "demo")

        assert result.confidence == FALLBACK_CONFIDENCE
        assert result.parameters["project_id"] == "demo"
        assert "(p:Package {project_id: $project_id})" in result.query
