"""
Schema Formatting — render a ``SchemaDocument`` for a chat model.

Also holds the canned query patterns and example queries that the
``get_database_schema`` tool returns next to the live schema, so the
prompt and the tool agree on what "good" Cypher looks like.
"""

from typing import Any

from codegraph.shared.models import SchemaDocument

COMMON_MISTAKES: list[str] = [
    "Always include project_id filter: {project_id: $project_id}",
    "Use CONTAINS for substring matching, not LIKE",
    "Remember to use DISTINCT when counting relationships",
    "Use LIMIT to prevent large result sets",
    "Property names are case-sensitive",
]

COMMON_QUERY_PATTERNS: dict[str, Any] = {
    "node_matching": {
        "basic": "MATCH (n:NodeType {project_id: $project_id}) RETURN n",
        "with_props": "MATCH (n:NodeType {project_id: $project_id, name: 'specific_name'}) RETURN n",
        "filtering": (
            "MATCH (n:NodeType {project_id: $project_id}) "
            "WHERE n.property CONTAINS 'substring' RETURN n"
        ),
    },
    "relationship_patterns": {
        "basic": "MATCH (a)-[:RELATIONSHIP_TYPE]->(b) RETURN a, b",
        "with_filter": (
            "MATCH (a:NodeA {project_id: $project_id})-[:REL]->(b:NodeB) "
            "WHERE a.name = 'value' RETURN a, b"
        ),
        "counting": (
            "MATCH (a)-[:REL]->(b) RETURN a.name, count(b) AS rel_count "
            "ORDER BY rel_count DESC"
        ),
    },
    "common_mistakes": COMMON_MISTAKES,
}


def query_examples(project_id: str) -> dict[str, dict[str, Any]]:
    """Example queries with their bound parameters for one tenant."""
    params = {"project_id": project_id}
    return {
        "find_functions": {
            "description": "Find all functions in a package",
            "query": (
                "MATCH (f:Function {project_id: $project_id}) "
                "WHERE f.package CONTAINS 'parser' "
                "RETURN f.name, f.package, f.signature LIMIT 10"
            ),
            "parameters": dict(params),
        },
        "function_calls": {
            "description": "Find functions that call a specific function",
            "query": (
                "MATCH (caller:Function {project_id: $project_id})"
                "-[:CALLS]->(callee:Function {project_id: $project_id}) "
                "WHERE callee.name = 'Execute' "
                "RETURN caller.name, caller.package"
            ),
            "parameters": dict(params),
        },
        "file_dependencies": {
            "description": "Find file dependencies",
            "query": (
                "MATCH (f:File {project_id: $project_id})-[:DEPENDS_ON]->(dep:File) "
                "RETURN f.path, collect(dep.path) AS dependencies"
            ),
            "parameters": dict(params),
        },
        "interface_implementations": {
            "description": "Find implementations of an interface",
            "query": (
                "MATCH (impl:Struct)-[:IMPLEMENTS]->(iface:Interface {project_id: $project_id}) "
                "WHERE iface.name = 'Parser' "
                "RETURN impl.name, impl.package"
            ),
            "parameters": dict(params),
        },
    }


def format_schema_for_llm(schema: SchemaDocument) -> str:
    """Compact, line-oriented schema description for the translation prompt."""
    lines = ["Neo4j Database Schema:", ""]

    lines.append("Node Types:")
    for node_type in schema.node_types:
        line = f"- {node_type.label}"
        if node_type.properties:
            line += f" (properties: {', '.join(node_type.properties)})"
        lines.append(line)
    lines.append("")

    lines.append("Relationship Types:")
    for rel_type in schema.relationship_types:
        lines.append(f"- {rel_type.type} ({rel_type.count} occurrences)")
    lines.append("")

    lines.append("Common Query Patterns:")
    for mistake in COMMON_MISTAKES:
        lines.append(f"- {mistake}")

    return "\n".join(lines) + "\n"
