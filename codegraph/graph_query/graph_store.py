"""
Graph Store — canned read-only queries over the code graph.

Each public coroutine corresponds to one MCP tool and returns a plain
dict ready for JSON serialisation.  Every query is scoped to a single
``project_id`` and takes user values as parameters only; the few
integers interpolated into variable-length patterns are clamped first.
"""

import logging
from typing import Any

from codegraph.graph_query.config import GraphQuerySettings
from codegraph.graph_query.conventions import (
    ERROR_PATTERN,
    FACTORY_PATTERN,
    INTERFACE_PATTERN,
    analyze_function_names,
    analyze_interface_names,
    analyze_type_names,
)
from codegraph.graph_query.schema_format import COMMON_QUERY_PATTERNS, query_examples
from codegraph.graph_query.schema_introspector import SchemaIntrospector
from codegraph.graph_query.validator import is_read_only
from codegraph.query import builder
from codegraph.query.templates import get_template
from codegraph.shared.database import QueryExecutor
from codegraph.shared.exceptions import CodeGraphError, GraphQueryError, InvalidInputError

logger = logging.getLogger("graph_query.graph_store")

CIRCULAR_SCOPES = ("packages", "functions", "files", "all")

_CIRCULAR_QUERIES: dict[str, str] = {
    "packages": (
        "MATCH (p:Package {project_id: $project_id})-[:DEPENDS_ON*2..10]->(p) "
        "RETURN collect(DISTINCT p.name) AS cycle_packages"
    ),
    "functions": (
        "MATCH (f:Function {project_id: $project_id})-[:CALLS*2..10]->(f) "
        "RETURN collect(DISTINCT f.name) AS cycle_functions"
    ),
    "files": (
        "MATCH (f:File {project_id: $project_id})-[:DEPENDS_ON*2..10]->(f) "
        "RETURN collect(DISTINCT f.path) AS cycle_files"
    ),
    "all": (
        "MATCH (n {project_id: $project_id})-[:DEPENDS_ON|CALLS*2..10]->(n) "
        "RETURN labels(n)[0] AS type, collect(DISTINCT n.name) AS cycles"
    ),
}

# element type -> (label, alias)
_ELEMENT_LABELS: dict[str, tuple[str, str]] = {
    "function": ("Function", "f"),
    "struct": ("Struct", "s"),
    "type": ("Struct", "s"),
    "interface": ("Interface", "i"),
    "package": ("Package", "p"),
}

_RELATED_FUNCTION_FIELDS = (
    "{alias}.name AS name, {alias}.package AS package, {alias}.signature AS signature, "
    "{alias}.file_path AS file_path, {alias}.line_start AS line_start, "
    "{alias}.is_exported AS is_exported"
)

# each test function is assumed to cover about this many functions
COVERAGE_FUNCTIONS_PER_TEST = 1.5

# exported names sampled per kind by get_naming_conventions
NAMING_SAMPLE_SIZE = 20


def filter_exported(items: list[Any]) -> list[dict[str, Any]]:
    """Keep only mapping items whose ``is_exported`` is exactly True."""
    return [
        item for item in items
        if isinstance(item, dict) and item.get("is_exported") is True
    ]


def estimate_coverage(test_functions: int, total_functions: int) -> float:
    """Percentage estimate from the ratio of test functions to functions."""
    if total_functions <= 0:
        return 0.0
    ratio = min(test_functions * COVERAGE_FUNCTIONS_PER_TEST / total_functions, 1.0)
    return ratio * 100.0


def _named(items: list[Any] | None) -> list[dict[str, Any]]:
    return [item for item in items or [] if isinstance(item, dict) and item.get("name")]


def _node_props(value: Any) -> dict[str, Any]:
    # rows carry nodes as plain dicts once ``record.data()`` has run
    return dict(value) if isinstance(value, dict) else {}


class CodeGraphStore:
    """Read-only query interface over one Neo4j code graph."""

    def __init__(self, executor: QueryExecutor, settings: GraphQuerySettings | None = None):
        self._executor = executor
        self._settings = settings or GraphQuerySettings()

    # ─── Core helpers ─────────────────────────────────────

    async def _query(self, cypher: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Run one tenant-scoped query."""
        if not params.get("project_id"):
            raise InvalidInputError("project_id is required")
        return await self._run(cypher, params)

    async def _run(self, cypher: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        # driver and connection failures become GraphQueryError
        try:
            return await self._executor.run(cypher, params)
        except CodeGraphError:
            raise
        except Exception as exc:
            logger.error("Cypher execution failed: %s", exc)
            raise GraphQueryError(f"Cypher execution failed: {exc}") from exc

    # ─── get_function_info ────────────────────────────────

    async def get_function_info(
        self,
        project_id: str,
        function_name: str,
        package: str = "",
        include_calls: bool = False,
        include_callers: bool = False,
    ) -> dict[str, Any]:
        """Best match for ``function_name`` (exact name wins over substring)."""
        if not function_name:
            raise InvalidInputError("function_name is required")

        params: dict[str, Any] = {"project_id": project_id, "function_name": function_name}
        package_filter = ""
        if package:
            package_filter = (
                " AND (f.package = $package OR toLower(f.package) CONTAINS toLower($package))"
            )
            params["package"] = package

        rows = await self._query(
            "MATCH (f:Function {project_id: $project_id}) "
            "WHERE (f.name = $function_name OR toLower(f.name) CONTAINS toLower($function_name))"
            f"{package_filter} "
            "WITH f "
            "OPTIONAL MATCH (file:File {project_id: $project_id})-[:DEFINES]->(f) "
            "RETURN f, COALESCE(file.path, f.file_path) AS file_path "
            "ORDER BY CASE WHEN f.name = $function_name THEN 0 ELSE 1 END "
            "LIMIT 1",
            params,
        )
        if not rows:
            return {"found": False, "function_name": function_name,
                    "message": f"Function {function_name} not found"}

        node = _node_props(rows[0].get("f"))
        result: dict[str, Any] = {
            "found": True,
            "function_name": node.get("name", function_name),
            "package": node.get("package") or package,
            "signature": node.get("signature", ""),
            "file_path": rows[0].get("file_path") or node.get("file_path", ""),
            "line_start": node.get("line_start"),
            "line_end": node.get("line_end"),
            "is_exported": node.get("is_exported"),
        }

        if include_calls:
            result["calls"] = await self._query(
                "MATCH (f:Function {project_id: $project_id})-[:CALLS]->(called:Function) "
                "WHERE (f.name = $function_name OR toLower(f.name) CONTAINS toLower($function_name)) "
                "AND called.project_id = $project_id "
                f"RETURN {_RELATED_FUNCTION_FIELDS.format(alias='called')} "
                "ORDER BY called.package, called.name",
                params,
            )
            result["calls_count"] = len(result["calls"])

        if include_callers:
            result["callers"] = await self._query(
                "MATCH (caller:Function)-[:CALLS]->(f:Function {project_id: $project_id}) "
                "WHERE (f.name = $function_name OR toLower(f.name) CONTAINS toLower($function_name)) "
                "AND caller.project_id = $project_id "
                f"RETURN {_RELATED_FUNCTION_FIELDS.format(alias='caller')} "
                "ORDER BY caller.package, caller.name",
                params,
            )
            result["callers_count"] = len(result["callers"])

        return result

    # ─── find_implementations ─────────────────────────────

    async def find_implementations(
        self,
        project_id: str,
        interface_name: str,
        package: str = "",
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"project_id": project_id, "interface_name": interface_name}
        iface_props = "project_id: $project_id, name: $interface_name"
        if package:
            iface_props += ", package: $package"
            params["package"] = package

        rows = await self._query(
            f"MATCH (iface:Interface {{{iface_props}}}) "
            "MATCH (impl:Struct {project_id: $project_id})-[:IMPLEMENTS]->(iface) "
            "OPTIONAL MATCH (impl_file:File {project_id: $project_id})-[:DEFINES]->(impl) "
            "RETURN impl, impl_file.path AS file_path",
            params,
        )

        implementations = []
        for row in rows:
            impl = _node_props(row.get("impl"))
            if not impl:
                continue
            implementations.append({
                "name": impl.get("name"),
                "package": impl.get("package"),
                "file_path": row.get("file_path") or "",
                "line_start": impl.get("line_start"),
                "line_end": impl.get("line_end"),
                "is_exported": impl.get("is_exported"),
            })

        return {
            "interface_name": interface_name,
            "package": package,
            "implementations": implementations,
            "count": len(implementations),
        }

    # ─── trace_call_chain ─────────────────────────────────

    async def trace_call_chain(
        self,
        project_id: str,
        from_function: str,
        to_function: str = "",
        max_depth: int = 5,
    ) -> dict[str, Any]:
        depth = max(1, min(int(max_depth), self._settings.call_chain_max_depth))
        params: dict[str, Any] = {"project_id": project_id, "from_function": from_function}
        chain_projection = (
            "[node IN nodes(path) | {name: node.name, package: node.package, "
            "file_path: node.file_path, signature: node.signature}] AS call_chain"
        )

        if to_function:
            params["to_function"] = to_function
            cypher = (
                "MATCH (start:Function {project_id: $project_id}), "
                "(end:Function {project_id: $project_id}) "
                "WHERE (start.name = $from_function OR toLower(start.name) CONTAINS toLower($from_function)) "
                "AND (end.name = $to_function OR toLower(end.name) CONTAINS toLower($to_function)) "
                "WITH start, end "
                f"MATCH path = (start)-[:CALLS*1..{depth}]->(end) "
                f"RETURN {chain_projection}, length(path) AS depth, "
                "start.name AS actual_start, end.name AS actual_end "
                "ORDER BY depth LIMIT 10"
            )
        else:
            cypher = (
                "MATCH (start:Function {project_id: $project_id}) "
                "WHERE start.name = $from_function OR toLower(start.name) CONTAINS toLower($from_function) "
                "WITH start "
                f"MATCH path = (start)-[:CALLS*1..{depth}]->(called:Function) "
                "WHERE called.project_id = $project_id "
                f"RETURN {chain_projection}, length(path) AS depth, start.name AS actual_start "
                "ORDER BY depth LIMIT 50"
            )

        rows = await self._query(cypher, params)
        return {
            "from_function": from_function,
            "to_function": to_function,
            "max_depth": depth,
            "call_chains": rows,
            "count": len(rows),
        }

    # ─── detect_circular_dependencies ─────────────────────

    async def detect_circular_dependencies(
        self,
        project_id: str,
        scope: str = "packages",
    ) -> dict[str, Any]:
        scope = scope.lower().strip()
        if scope not in _CIRCULAR_QUERIES:
            raise InvalidInputError(
                f"Invalid scope: {scope!r}. Valid: {list(CIRCULAR_SCOPES)}"
            )
        rows = await self._query(_CIRCULAR_QUERIES[scope], {"project_id": project_id})
        return {"scope": scope, "cycles": rows, "count": len(rows)}

    # ─── list_packages ────────────────────────────────────

    async def list_packages(self, project_id: str, pattern: str = "") -> dict[str, Any]:
        params: dict[str, Any] = {"project_id": project_id}
        where = ""
        if pattern:
            where = "WHERE toLower(p.name) CONTAINS toLower($pattern) "
            params["pattern"] = pattern

        rows = await self._query(
            "MATCH (p:Package {project_id: $project_id}) "
            f"{where}"
            "OPTIONAL MATCH (p)<-[:BELONGS_TO]-(f:File {project_id: $project_id}) "
            "OPTIONAL MATCH (p)<-[:BELONGS_TO]-(fn:Function {project_id: $project_id}) "
            "RETURN p.name AS name, p.path AS path, "
            "count(DISTINCT f) AS file_count, count(DISTINCT fn) AS function_count "
            "ORDER BY p.name",
            params,
        )
        return {"packages": rows, "count": len(rows), "pattern": pattern}

    # ─── get_package_structure ────────────────────────────

    async def get_package_structure(
        self,
        project_id: str,
        package: str,
        include_private: bool = False,
    ) -> dict[str, Any]:
        rows = await self._query(
            "MATCH (pkg:Package {project_id: $project_id, name: $package}) "
            "OPTIONAL MATCH (pkg)-[:CONTAINS]->(f:File {project_id: $project_id}) "
            "OPTIONAL MATCH (f)-[:DEFINES]->(fn:Function) "
            "OPTIONAL MATCH (f)-[:DEFINES]->(s:Struct) "
            "OPTIONAL MATCH (f)-[:DEFINES]->(i:Interface) "
            "RETURN pkg, "
            "collect(DISTINCT {name: f.name, path: f.path}) AS files, "
            "collect(DISTINCT {name: fn.name, signature: fn.signature, is_exported: fn.is_exported}) AS functions, "
            "collect(DISTINCT {name: s.name, is_exported: s.is_exported}) AS structs, "
            "collect(DISTINCT {name: i.name, is_exported: i.is_exported}) AS interfaces",
            {"project_id": project_id, "package": package},
        )
        if not rows:
            return {"found": False, "package": package,
                    "message": f"Package {package} not found"}

        data = rows[0]
        # an empty OPTIONAL MATCH still collects one all-null map
        functions = _named(data.get("functions"))
        structs = _named(data.get("structs"))
        interfaces = _named(data.get("interfaces"))
        if not include_private:
            functions = filter_exported(functions)
            structs = filter_exported(structs)
            interfaces = filter_exported(interfaces)

        return {
            "found": True,
            "package": package,
            "files": _named(data.get("files")),
            "functions": functions,
            "types": structs,
            "interfaces": interfaces,
            "include_private": include_private,
        }

    # ─── verify_code_exists ───────────────────────────────

    async def verify_code_exists(
        self,
        project_id: str,
        element_type: str,
        name: str,
        package: str = "",
    ) -> dict[str, Any]:
        kind = element_type.lower().strip()
        if kind not in _ELEMENT_LABELS:
            raise InvalidInputError(f"unsupported element type: {element_type}")
        label, alias = _ELEMENT_LABELS[kind]

        params: dict[str, Any] = {"project_id": project_id, "name": name}
        where = ""
        if package and label != "Package":
            where = f" WHERE {alias}.package = $package"
            params["package"] = package

        rows = await self._query(
            f"MATCH ({alias}:{label} {{project_id: $project_id, name: $name}}){where} "
            f"RETURN {alias} AS element LIMIT 1",
            params,
        )

        result: dict[str, Any] = {
            "exists": bool(rows),
            "element_type": element_type,
            "name": name,
            "package": package,
        }
        if rows:
            result["details"] = _node_props(rows[0].get("element"))
        return result

    # ─── query_dependencies ───────────────────────────────

    async def query_dependencies(
        self,
        project_id: str,
        target: str,
        direction: str = "outgoing",
        depth: int = 1,
    ) -> dict[str, Any]:
        """Transitive DEPENDS_ON neighbours of a file path or node name."""
        hops = builder.clamp_hops(min(int(depth), self._settings.max_traversal_depth))
        direction = direction.lower().strip()
        result: dict[str, Any] = {"target": target, "direction": direction, "depth": hops}

        if direction not in ("outgoing", "incoming", "both"):
            raise InvalidInputError(
                f"Invalid direction: {direction!r}. Valid: ['outgoing', 'incoming', 'both']"
            )
        if direction in ("outgoing", "both"):
            query, params = builder.find_dependencies(target, project_id, hops).build()
            result["dependencies"] = await self._query(query, params)
        if direction in ("incoming", "both"):
            query, params = builder.find_dependents(target, project_id, hops).build()
            result["dependents"] = await self._query(query, params)

        result["count"] = len(result.get("dependencies", [])) + len(result.get("dependents", []))
        return result

    # ─── Tests ────────────────────────────────────────────

    async def find_tests_for_code(self, project_id: str, name: str) -> dict[str, Any]:
        rows = await self._query(
            "MATCH (f:Function {project_id: $project_id}) "
            "WHERE f.name STARTS WITH 'Test' AND toLower(f.name) CONTAINS toLower($name) "
            "OPTIONAL MATCH (file:File {project_id: $project_id})-[:DEFINES]->(f) "
            "RETURN f.name AS test_name, f.package AS test_package, "
            "COALESCE(file.path, f.file_path) AS file_path "
            "ORDER BY test_package, test_name LIMIT 10",
            {"project_id": project_id, "name": name},
        )
        tests = [
            {
                "test_name": row["test_name"],
                "test_package": row.get("test_package") or "",
                "file_path": row.get("file_path") or "",
                "match_type": "name_pattern",
            }
            for row in rows
            if isinstance(row.get("test_name"), str)
        ]
        return {"element": name, "tests_found": tests, "test_count": len(tests)}

    async def check_test_coverage(self, project_id: str, path: str = "") -> dict[str, Any]:
        """Rough coverage estimate from test-function counts.

        This is a naming heuristic, not measured line coverage; the result
        says so in ``is_estimate`` and ``analysis_method``.
        """
        params = {"project_id": project_id, "path": path}
        totals = await self._query(
            "MATCH (f:Function {project_id: $project_id}) "
            "WHERE $path = '' OR f.file_path CONTAINS $path OR f.package CONTAINS $path "
            "RETURN count(f) AS total_functions",
            params,
        )
        tests = await self._query(
            "MATCH (f:Function {project_id: $project_id}) "
            "WHERE f.name STARTS WITH 'Test' "
            "AND ($path = '' OR f.file_path CONTAINS $path OR f.package CONTAINS $path) "
            "RETURN count(f) AS test_functions, collect(DISTINCT f.file_path) AS test_files",
            params,
        )

        total_functions = int(totals[0].get("total_functions") or 0) if totals else 0
        test_functions = int(tests[0].get("test_functions") or 0) if tests else 0
        test_files = [p for p in (tests[0].get("test_files") or [] if tests else []) if p]

        return {
            "path": path,
            "coverage": estimate_coverage(test_functions, total_functions),
            "is_estimate": True,
            "test_functions": test_functions,
            "total_functions": total_functions,
            "test_files": [{"path": p, "type": "test_file"} for p in test_files],
            "analysis_method": (
                "Estimate from the ratio of Test* functions to all functions "
                f"(each test assumed to cover {COVERAGE_FUNCTIONS_PER_TEST} functions); "
                "not measured coverage"
            ),
        }

    # ─── Patterns and conventions ─────────────────────────

    async def detect_code_patterns(self, project_id: str) -> dict[str, Any]:
        """Interface, factory-function and error-return patterns found in the graph."""
        params = {"project_id": project_id}
        patterns: list[dict[str, Any]] = []

        interfaces = await self._query(
            "MATCH (i:Interface {project_id: $project_id}) "
            "OPTIONAL MATCH (s:Struct {project_id: $project_id})-[:IMPLEMENTS]->(i) "
            "RETURN i.name AS interface_name, count(s) AS implementations "
            "ORDER BY implementations DESC LIMIT 5",
            params,
        )
        if interfaces:
            patterns.append({**INTERFACE_PATTERN, "examples": interfaces})

        factories = await self._query(
            "MATCH (f:Function {project_id: $project_id}) "
            "WHERE f.name STARTS WITH 'New' AND size(f.returns) > 0 "
            "RETURN f.name AS function_name, f.package AS package_name, f.returns AS returns "
            "LIMIT 10",
            params,
        )
        if factories:
            patterns.append({**FACTORY_PATTERN, "examples": factories})

        errors = await self._query(
            "MATCH (f:Function {project_id: $project_id}) "
            "WHERE any(ret IN f.returns WHERE ret = 'error') "
            "RETURN count(f) AS error_returning_functions",
            params,
        )
        error_count = int(errors[0].get("error_returning_functions") or 0) if errors else 0
        if error_count:
            patterns.append({
                **ERROR_PATTERN,
                "description": ERROR_PATTERN["description"].format(count=error_count),
                "examples": errors,
            })

        return {"project_id": project_id, "patterns": patterns, "count": len(patterns)}

    async def get_naming_conventions(self, project_id: str) -> dict[str, Any]:
        """Case-style and prefix/suffix counts over a sample of exported names."""
        params = {"project_id": project_id}
        analyses = (
            ("functions", "Function", analyze_function_names),
            ("types", "Struct", analyze_type_names),
            ("interfaces", "Interface", analyze_interface_names),
        )
        conventions: dict[str, Any] = {}
        for key, label, analyze in analyses:
            rows = await self._query(
                f"MATCH (n:{label} {{project_id: $project_id}}) "
                "WHERE n.is_exported = true "
                f"RETURN n.name AS name LIMIT {NAMING_SAMPLE_SIZE}",
                params,
            )
            if rows:
                conventions[key] = analyze(rows)
        return {"project_id": project_id, "conventions": conventions}

    # ─── Projects ─────────────────────────────────────────

    async def list_projects(self) -> dict[str, Any]:
        """Every ``project_id`` present in the graph, with indexing metadata when stored."""
        rows = await self._run(
            "MATCH (n) WHERE n.project_id IS NOT NULL "
            "WITH DISTINCT n.project_id AS id "
            "OPTIONAL MATCH (m:ProjectMetadata {project_id: id}) "
            "RETURN id, m.analyzed_at AS analyzed_at, m.total_files AS total_files, "
            "m.total_functions AS total_functions "
            "ORDER BY id LIMIT $limit",
            {"limit": self._settings.max_results},
        )
        return {"projects": rows, "count": len(rows)}

    async def validate_project(self, project_id: str) -> dict[str, Any]:
        rows = await self._query(
            "MATCH (n {project_id: $project_id}) RETURN n.project_id AS id LIMIT 1",
            {"project_id": project_id},
        )
        return {"project_id": project_id, "exists": bool(rows), "valid": bool(rows)}

    async def get_project_statistics(self, project_id: str) -> dict[str, Any]:
        """Node and relationship totals plus the busiest packages and functions."""
        params = {"project_id": project_id}
        node_rows = await self._query(
            "MATCH (n {project_id: $project_id}) "
            "UNWIND labels(n) AS label "
            "WITH label, count(*) AS count WHERE label <> 'Node' "
            "RETURN label, count ORDER BY label",
            params,
        )
        rel_rows = await self._query(
            "MATCH (n {project_id: $project_id})-[r]->(m {project_id: $project_id}) "
            "RETURN type(r) AS type, count(r) AS count ORDER BY type",
            params,
        )
        top_packages = await self._query(
            "MATCH (p:Package {project_id: $project_id})-[:CONTAINS]->(f:File) "
            "WITH p, count(f) AS file_count ORDER BY file_count DESC LIMIT 10 "
            "RETURN p.name AS name, file_count",
            params,
        )
        top_functions = await self._query(
            "MATCH (f:Function {project_id: $project_id})<-[c:CALLS]-() "
            "WITH f, count(c) AS called_by ORDER BY called_by DESC LIMIT 10 "
            "RETURN f.name AS name, called_by",
            params,
        )

        nodes_by_type = {row["label"]: int(row["count"]) for row in node_rows if row.get("label")}
        relationships_by_type = {row["type"]: int(row["count"]) for row in rel_rows if row.get("type")}
        return {
            "total_nodes": sum(nodes_by_type.values()),
            "total_relationships": sum(relationships_by_type.values()),
            "nodes_by_type": nodes_by_type,
            "relationships_by_type": relationships_by_type,
            "top_packages": top_packages,
            "top_functions": top_functions,
        }

    # ─── Node lookups and paths ───────────────────────────

    async def find_nodes(self, project_id: str, label: str = "", name: str = "") -> dict[str, Any]:
        """Nodes whose name contains ``name``, or else every node of one label.

        Raises:
            InvalidInputError: If neither ``label`` nor ``name`` is given.
            QueryBuildError: If ``label`` is not a known node label.
        """
        if name:
            query_builder = builder.find_nodes_by_name(name, project_id)
        elif label:
            query_builder = builder.find_nodes_by_type(label, project_id)
        else:
            raise InvalidInputError("label or name is required")
        query, params = query_builder.limit(self._settings.max_results).build()
        rows = await self._query(query, params)
        nodes = [_node_props(row.get("n")) for row in rows]
        return {"label": label, "name": name, "nodes": nodes, "count": len(nodes)}

    async def find_relationships(self, project_id: str, relationship_type: str) -> dict[str, Any]:
        query, params = (
            builder.find_relationships_by_type(relationship_type, project_id)
            .limit(self._settings.max_results)
            .build()
        )
        rows = await self._query(query, params)
        edges = [
            {"source": _node_props(row.get("a")).get("name"),
             "target": _node_props(row.get("b")).get("name")}
            for row in rows
        ]
        return {
            "relationship_type": relationship_type.strip().upper(),
            "relationships": edges,
            "count": len(edges),
        }

    async def find_path(self, project_id: str, from_name: str, to_name: str) -> dict[str, Any]:
        """Shortest path between two named nodes, over any relationship type."""
        if not from_name or not to_name:
            raise InvalidInputError("from_name and to_name are required")
        query, params = builder.find_path(from_name, to_name, project_id).limit(1).build()
        rows = await self._query(query, params)
        if not rows:
            return {"found": False, "from": from_name, "to": to_name,
                    "message": f"No path between {from_name} and {to_name}"}
        return {
            "found": True,
            "from": from_name,
            "to": to_name,
            "nodes": rows[0].get("nodes") or [],
            "length": rows[0].get("length"),
        }

    # ─── execute_cypher ───────────────────────────────────

    async def execute_cypher(
        self,
        project_id: str,
        query: str,
        parameters: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Run a caller-supplied read-only query with ``project_id`` bound.

        Raises:
            GraphQueryError: If the query contains write operations
                (CREATE/MERGE/DELETE/SET/REMOVE/DROP/LOAD/FOREACH/CALL {})
                or execution fails.
        """
        if not is_read_only(query):
            raise GraphQueryError(
                "Write operations are not allowed. "
                "Query contains forbidden keywords "
                "(CREATE/MERGE/DELETE/SET/REMOVE/DROP/LOAD/FOREACH)."
            )

        params = dict(parameters or {})
        params["project_id"] = project_id
        rows = await self._query(query, params)

        return {
            "query": query,
            "parameters": params,
            "results": rows,
            "result_count": len(rows),
        }

    # ─── Templates and reports ────────────────────────────

    async def run_template(
        self,
        project_id: str,
        name: str,
        parameters: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        template = get_template(name)
        params = dict(parameters or {})
        params["project_id"] = project_id
        query = template.build_query(params)
        rows = await self._query(query, params)
        return {
            "template": name,
            "category": template.category,
            "results": rows,
            "result_count": len(rows),
        }

    async def run_report(self, project_id: str, report: str, **options: Any) -> dict[str, Any]:
        factory = builder.REPORTS.get(report)
        if factory is None:
            raise InvalidInputError(
                f"Unknown report: {report!r}. Valid: {sorted(builder.REPORTS)}"
            )
        query, params = factory(project_id, **options).build()
        rows = await self._query(query, params)
        return {"report": report, "results": rows, "result_count": len(rows)}

    # ─── Schema ───────────────────────────────────────────

    async def get_database_schema(
        self,
        project_id: str,
        filter_type: str = "",
        include_examples: bool = False,
    ) -> dict[str, Any]:
        if not project_id:
            raise InvalidInputError("project_id is required")
        schema = await SchemaIntrospector(self._executor).introspect(project_id, filter_type)
        result = schema.model_dump()
        if include_examples:
            result["examples"] = query_examples(project_id)
        result["common_patterns"] = COMMON_QUERY_PATTERNS
        return result
