"""
Cypher Builder — fluent construction of read-only, tenant-scoped queries.

``CypherBuilder`` appends one clause per call and returns itself so
calls chain; ``build()`` yields ``(query, parameters)``.  The module-level
helpers compose the builder into the canned reports the graph store and
MCP tools expose.  Every helper binds ``project_id`` as a parameter and
filters on it.

Only labels and relationship types from the whitelists below are ever
placed into query text; every other value travels as a parameter.
"""

import logging
from typing import Any

from codegraph.shared.exceptions import QueryBuildError

logger = logging.getLogger("query.builder")

# ── Whitelists for identifiers injected into query text ───

VALID_LABELS: set[str] = {"Function", "Struct", "Interface", "Package", "File"}

VALID_RELATIONSHIPS: set[str] = {
    "CALLS", "IMPLEMENTS", "DEPENDS_ON", "CONTAINS", "DEFINES", "BELONGS_TO",
}

MIN_DEPENDENCY_HOPS = 1
MAX_DEPENDENCY_HOPS = 3


def _check_label(label: str) -> str:
    normalised = label.strip().capitalize()
    if normalised not in VALID_LABELS:
        raise QueryBuildError(
            f"Invalid node label: {label!r}. Valid: {sorted(VALID_LABELS)}"
        )
    return normalised


def _check_relationship(rel_type: str) -> str:
    normalised = rel_type.strip().upper()
    if normalised not in VALID_RELATIONSHIPS:
        raise QueryBuildError(
            f"Invalid relationship type: {rel_type!r}. "
            f"Valid: {sorted(VALID_RELATIONSHIPS)}"
        )
    return normalised


def clamp_hops(depth: int) -> int:
    """Bound a traversal depth to the supported 1..3 hop range."""
    return max(MIN_DEPENDENCY_HOPS, min(int(depth), MAX_DEPENDENCY_HOPS))


class CypherBuilder:
    """Fluent builder for Cypher query text plus a parameter map.

    Usage::

        query, params = (
            CypherBuilder()
            .match("(f:Function)")
            .where("f.project_id = $project_id")
            .project_filter("demo")
            .return_("f.name")
            .limit(10)
            .build()
        )
    """

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._parameters: dict[str, Any] = {}
        self._errors: list[str] = []

    def _append(self, keyword: str, fragment: str) -> "CypherBuilder":
        self._parts.append(f"{keyword} {fragment}".strip())
        return self

    # ─── Clauses ──────────────────────────────────────────

    def match(self, pattern: str) -> "CypherBuilder":
        return self._append("MATCH", pattern)

    def optional_match(self, pattern: str) -> "CypherBuilder":
        return self._append("OPTIONAL MATCH", pattern)

    def where(self, condition: str) -> "CypherBuilder":
        return self._append("WHERE", condition)

    def and_(self, condition: str) -> "CypherBuilder":
        return self._append("AND", condition)

    def or_(self, condition: str) -> "CypherBuilder":
        return self._append("OR", condition)

    def with_(self, fields: str) -> "CypherBuilder":
        return self._append("WITH", fields)

    def return_(self, fields: str) -> "CypherBuilder":
        return self._append("RETURN", fields)

    def order_by(self, fields: str) -> "CypherBuilder":
        return self._append("ORDER BY", fields)

    def limit(self, count: int) -> "CypherBuilder":
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            self._errors.append(f"LIMIT must be a non-negative integer, got {count!r}")
            return self
        return self._append("LIMIT", str(count))

    def skip(self, count: int) -> "CypherBuilder":
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            self._errors.append(f"SKIP must be a non-negative integer, got {count!r}")
            return self
        return self._append("SKIP", str(count))

    # ─── Parameters ───────────────────────────────────────

    def set_parameter(self, name: str, value: Any) -> "CypherBuilder":
        self._parameters[name] = value
        return self

    def set_parameters(self, params: dict[str, Any]) -> "CypherBuilder":
        self._parameters.update(params)
        return self

    def project_filter(self, project_id: str) -> "CypherBuilder":
        """Bind the tenant; the predicate itself is written by the caller."""
        return self.set_parameter("project_id", str(project_id))

    # ─── Output ───────────────────────────────────────────

    def build(self) -> tuple[str, dict[str, Any]]:
        """Return the final query text and a copy of the parameters.

        Raises:
            QueryBuildError: If no clause was added or a clause was rejected.
        """
        if self._errors:
            raise QueryBuildError(f"query build errors: {self._errors}")
        query = str(self)
        if not query:
            raise QueryBuildError("query is empty")
        return query, dict(self._parameters)

    def __str__(self) -> str:
        return " ".join(self._parts).strip()


# ─── Canned queries ───────────────────────────────────────


def find_nodes_by_type(label: str, project_id: str) -> CypherBuilder:
    label = _check_label(label)
    return (
        CypherBuilder()
        .match(f"(n:{label})")
        .where("n.project_id = $project_id")
        .project_filter(project_id)
        .return_("n")
        .order_by("n.name")
    )


def find_relationships_by_type(rel_type: str, project_id: str) -> CypherBuilder:
    rel_type = _check_relationship(rel_type)
    return (
        CypherBuilder()
        .match(f"(a)-[r:{rel_type}]->(b)")
        .where("r.project_id = $project_id")
        .project_filter(project_id)
        .return_("a, r, b")
    )


def find_nodes_by_name(name_pattern: str, project_id: str) -> CypherBuilder:
    return (
        CypherBuilder()
        .match("(n)")
        .where("n.project_id = $project_id")
        .and_("toLower(n.name) CONTAINS toLower($name_pattern)")
        .project_filter(project_id)
        .set_parameter("name_pattern", name_pattern)
        .return_("n")
        .order_by("labels(n)[0], n.name")
    )


def find_dependencies(target: str, project_id: str, depth: int = MAX_DEPENDENCY_HOPS) -> CypherBuilder:
    """What ``target`` (a file path or node name) transitively depends on."""
    hops = clamp_hops(depth)
    return (
        CypherBuilder()
        .match(f"path = (n)-[:DEPENDS_ON*1..{hops}]->(dep)")
        .where("(n.path = $target OR n.name = $target)")
        .and_("n.project_id = $project_id")
        .and_("dep.project_id = $project_id")
        .project_filter(project_id)
        .set_parameter("target", target)
        .return_("DISTINCT dep.name AS name, dep.path AS path, "
                 "labels(dep)[0] AS type, min(length(path)) AS distance")
        .order_by("distance, name")
    )


def find_dependents(target: str, project_id: str, depth: int = MAX_DEPENDENCY_HOPS) -> CypherBuilder:
    """What transitively depends on ``target``."""
    hops = clamp_hops(depth)
    return (
        CypherBuilder()
        .match(f"path = (dependent)-[:DEPENDS_ON*1..{hops}]->(n)")
        .where("(n.path = $target OR n.name = $target)")
        .and_("n.project_id = $project_id")
        .and_("dependent.project_id = $project_id")
        .project_filter(project_id)
        .set_parameter("target", target)
        .return_("DISTINCT dependent.name AS name, dependent.path AS path, "
                 "labels(dependent)[0] AS type, min(length(path)) AS distance")
        .order_by("distance, name")
    )


def find_path(from_name: str, to_name: str, project_id: str) -> CypherBuilder:
    return (
        CypherBuilder()
        .match("(from), (to)")
        .where("from.name = $from_name")
        .and_("to.name = $to_name")
        .and_("from.project_id = $project_id")
        .and_("to.project_id = $project_id")
        .with_("from, to")
        .match("path = shortestPath((from)-[*]-(to))")
        .project_filter(project_id)
        .set_parameter("from_name", from_name)
        .set_parameter("to_name", to_name)
        .return_("[node IN nodes(path) | node.name] AS nodes, length(path) AS length")
    )


def count_nodes_by_type(project_id: str) -> CypherBuilder:
    return (
        CypherBuilder()
        .match("(n)")
        .where("n.project_id = $project_id")
        .project_filter(project_id)
        .return_("labels(n)[0] AS node_type, count(n) AS count")
        .order_by("count DESC")
    )


def count_relationships_by_type(project_id: str) -> CypherBuilder:
    return (
        CypherBuilder()
        .match("()-[r]->()")
        .where("r.project_id = $project_id")
        .project_filter(project_id)
        .return_("type(r) AS relationship_type, count(r) AS count")
        .order_by("count DESC")
    )


def find_complex_functions(project_id: str, min_complexity: int = 50) -> CypherBuilder:
    # complexity is approximated by line span
    return (
        CypherBuilder()
        .match("(f:Function)")
        .where("f.project_id = $project_id")
        .with_("f, (f.line_end - f.line_start) AS complexity")
        .where("complexity >= $min_complexity")
        .project_filter(project_id)
        .set_parameter("min_complexity", int(min_complexity))
        .return_("f.package AS package, f.name AS function, complexity, f.signature AS signature")
        .order_by("complexity DESC")
    )


def find_unused_functions(project_id: str) -> CypherBuilder:
    return (
        CypherBuilder()
        .match("(f:Function)")
        .where("f.project_id = $project_id")
        .and_("NOT EXISTS { MATCH ()-[:CALLS]->(f) }")
        .and_("f.name <> 'main'")
        .and_("f.name <> 'init'")
        .and_("NOT f.name STARTS WITH 'Test'")
        .project_filter(project_id)
        .return_("f.package AS package, f.name AS function, f.signature AS signature")
        .order_by("f.package, f.name")
    )


def find_circular_dependencies(project_id: str) -> CypherBuilder:
    return (
        CypherBuilder()
        .match("(a:File)-[:DEPENDS_ON*2..10]->(a)")
        .where("a.project_id = $project_id")
        .project_filter(project_id)
        .return_("DISTINCT a.path AS file_path")
        .order_by("file_path")
    )


def find_interface_implementations(project_id: str) -> CypherBuilder:
    return (
        CypherBuilder()
        .match("(s:Struct)-[:IMPLEMENTS]->(i:Interface)")
        .where("s.project_id = $project_id")
        .and_("i.project_id = $project_id")
        .project_filter(project_id)
        .return_("i.package AS interface_package, i.name AS interface_name, "
                 "s.package AS struct_package, s.name AS struct_name")
        .order_by("i.name, s.name")
    )


def find_most_called_functions(project_id: str, limit: int = 20) -> CypherBuilder:
    return (
        CypherBuilder()
        .match("(f:Function)<-[:CALLS]-(caller:Function)")
        .where("f.project_id = $project_id")
        .and_("caller.project_id = $project_id")
        .project_filter(project_id)
        .return_("f.package AS package, f.name AS function, "
                 "count(*) AS call_count, f.signature AS signature")
        .order_by("call_count DESC")
        .limit(limit)
    )


# name -> factory(project_id, **options); the MCP ``run_report`` tool dispatches on this
REPORTS: dict[str, Any] = {
    "node_counts": count_nodes_by_type,
    "relationship_counts": count_relationships_by_type,
    "complex_functions": find_complex_functions,
    "unused_functions": find_unused_functions,
    "circular_file_dependencies": find_circular_dependencies,
    "interface_implementations": find_interface_implementations,
    "most_called_functions": find_most_called_functions,
}
