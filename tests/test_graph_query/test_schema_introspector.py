"""
Unit tests for live schema discovery.

Run with: pytest tests/test_graph_query/test_schema_introspector.py -v
"""

import pytest

from codegraph.graph_query.schema_format import format_schema_for_llm
from codegraph.graph_query.schema_introspector import (
    NODE_TYPES_QUERY,
    RELATIONSHIP_TYPES_QUERY,
    SchemaIntrospector,
)
from codegraph.shared.exceptions import SchemaUnavailableError

NODE_ROWS = [
    {"label": "Struct", "property_sets": [["name", "package"], ["name", "fields"]]},
    {"label": "Function", "property_sets": [["signature", "name"], ["name", "line_start"]]},
]

REL_ROWS = [
    {
        "relationship_type": "IMPLEMENTS",
        "count": 3,
        "source_labels": [["Struct"]],
        "target_labels": [["Interface"]],
    },
    {
        "relationship_type": "CALLS",
        "count": 40,
        "source_labels": [["Function"], ["Function"]],
        "target_labels": [["Function"]],
    },
]


class TestSchemaIntrospector:

    @pytest.fixture
    def scripted(self, executor):
        executor.on("collect(DISTINCT props)", NODE_ROWS)
        executor.on("type(r) AS relationship_type", REL_ROWS)
        return executor

    async def test_two_queries_in_order(self, scripted):
        await SchemaIntrospector(scripted).introspect("demo")

        assert scripted.calls == [
            (NODE_TYPES_QUERY, {"project_id": "demo"}),
            (RELATIONSHIP_TYPES_QUERY, {"project_id": "demo"}),
        ]

    async def test_labels_and_properties_sorted(self, scripted):
        schema = await SchemaIntrospector(scripted).introspect("demo")

        assert schema.project_id == "demo"
        assert schema.labels() == ["Function", "Struct"]
        assert schema.node_types[0].properties == ["line_start", "name", "signature"]
        assert schema.node_types[1].properties == ["fields", "name", "package"]

    async def test_relationships_sorted_and_deduplicated(self, scripted):
        schema = await SchemaIntrospector(scripted).introspect("demo")

        assert schema.relationship_names() == ["CALLS", "IMPLEMENTS"]
        calls = schema.relationship_types[0]
        assert calls.count == 40
        assert calls.source_labels == [["Function"]]

    async def test_filter_is_case_insensitive_substring(self, scripted):
        schema = await SchemaIntrospector(scripted).introspect("demo", filter_type="func")

        assert schema.labels() == ["Function"]
        assert schema.relationship_names() == []

    async def test_node_query_failure(self, executor):
        executor.on("collect(DISTINCT props)", RuntimeError("db down"))

        with pytest.raises(SchemaUnavailableError, match="failed to get node types: db down"):
            await SchemaIntrospector(executor).introspect("demo")

        assert len(executor.calls) == 1

    async def test_relationship_query_failure(self, executor):
        executor.on("collect(DISTINCT props)", NODE_ROWS)
        executor.on("type(r) AS relationship_type", RuntimeError("timeout"))

        with pytest.raises(SchemaUnavailableError, match="failed to get relationship types"):
            await SchemaIntrospector(executor).introspect("demo")

    async def test_empty_graph(self, executor):
        schema = await SchemaIntrospector(executor).introspect("demo")

        assert schema.node_types == []
        assert schema.relationship_types == []


class TestFormatSchemaForLLM:

    def test_sections(self, sample_schema):
        text = format_schema_for_llm(sample_schema)

        assert text.startswith("Neo4j Database Schema:\n\nNode Types:\n")
        assert "- Function (properties: name, package, project_id)" in text
        assert "Relationship Types:" in text
        assert "- CALLS (12 occurrences)" in text
        assert "Common Query Patterns:" in text
