"""
Graph Query — MCP Server

Exposes read-only tools over the code graph stored in Neo4j.  Each
tool's docstring is written for the calling LLM so it knows *when* and
*how* to call it.  Every tool returns a JSON string; a failed
natural-language query comes back as an ordinary payload with
``status: "error"`` so the caller can read the hints and retry.

Run as:  python -m codegraph.graph_query.server        (SSE transport)
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Any

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from codegraph import __version__
from codegraph.graph_query.config import GraphQuerySettings
from codegraph.graph_query.conventions import DEFAULT_INVARIANTS, PATTERN_CATALOG
from codegraph.graph_query.factory import build_pipeline
from codegraph.graph_query.graph_store import CodeGraphStore
from codegraph.graph_query.validator import QueryValidator
from codegraph.query.exporter import Exporter, ExportOptions
from codegraph.query.templates import COMMON_TEMPLATES
from codegraph.shared.database import Neo4jHandler
from codegraph.shared.exceptions import CodeGraphError, InvalidInputError
from codegraph.shared.logging import setup_logging
from codegraph.shared.observability import init_langfuse, shutdown_langfuse, trace_function

# ─── Shared resources (lazy init) ─────────────────────────

transport_security = TransportSecuritySettings(
    enable_dns_rebinding_protection=False,
    allowed_hosts=["graph_query", "graph_query:8003", "localhost", "127.0.0.1", "0.0.0.0"],
    allowed_origins=["*"],
)

mcp = FastMCP("GraphQuery", transport_security=transport_security)

_settings: GraphQuerySettings | None = None
_handler: Neo4jHandler | None = None
_store: CodeGraphStore | None = None
_pipeline = None
_init_lock = asyncio.Lock()


def _get_settings() -> GraphQuerySettings:
    """Lazy-initialise settings from environment variables."""
    global _settings
    if _settings is None:
        _settings = GraphQuerySettings()
    return _settings


logger = setup_logging("graph_query", level=_get_settings().log_level)


async def _get_handler() -> Neo4jHandler:
    """Connect to Neo4j on first tool call."""
    global _handler
    async with _init_lock:
        if _handler is None:
            _handler = await Neo4jHandler.from_settings(_get_settings()).connect()
    return _handler


async def _get_store() -> CodeGraphStore:
    global _store
    if _store is None:
        _store = CodeGraphStore(await _get_handler(), _get_settings())
    return _store


async def _get_pipeline():
    global _pipeline
    if _pipeline is None:
        _pipeline = build_pipeline(await _get_handler(), _get_settings())
    return _pipeline


def _dump(result: Any) -> str:
    return json.dumps(result, default=str)


def _error(exc: CodeGraphError) -> str:
    return _dump({"status": "error", "error": exc.message, "component": exc.component})


def _parse_params(params: str) -> dict[str, Any]:
    try:
        parsed = json.loads(params) if params else {}
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"parameters is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise InvalidInputError("parameters must be a JSON object")
    return parsed


# ─── Natural language & raw Cypher ────────────────────────


@mcp.tool()
@trace_function(name="natural_language_query")
async def natural_language_query(project_id: str, query: str, context: str = "") -> str:
    """Answer a question about the code graph written in plain English.

    Use this FIRST for open-ended questions such as "show me all handler
    functions in the mcp package" or "which structs implement Parser".
    The question is translated to Cypher (model-assisted when available,
    keyword-based otherwise), dry-run checked, then executed.

    On failure the payload has ``status: "error"`` plus the generated
    query, correction hints and the available node/relationship types;
    use them to rephrase, or switch to execute_cypher.

    Args:
        project_id: The project whose graph to query.
        query: The question in natural language.
        context: Optional free-form context, echoed back on success.
    """
    try:
        result = await (await _get_pipeline()).run(project_id, query, context)
    except CodeGraphError as exc:
        return _error(exc)
    return result.model_dump_json()


@mcp.tool()
async def get_database_schema(
    project_id: str,
    filter_type: str = "",
    include_examples: bool = True,
) -> str:
    """Live schema of a project's graph: node labels with their property
    keys, relationship types with counts, plus common query patterns.

    Call this before writing Cypher by hand with execute_cypher.

    Args:
        project_id: The project to describe.
        filter_type: Optional case-insensitive substring to narrow labels
              and relationship types (e.g. "func", "CALLS").
        include_examples: Include ready-to-run example queries.
    """
    try:
        result = await (await _get_store()).get_database_schema(
            project_id, filter_type, include_examples,
        )
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


@mcp.tool()
async def validate_cypher_query(project_id: str, query: str) -> str:
    """Dry-run a Cypher query with EXPLAIN and get correction hints.

    Nothing is executed.  Returns ``is_valid`` and, when invalid, the
    database error and an ordered list of suggestions.

    Args:
        project_id: The project the query targets.
        query: The Cypher query to check.
    """
    try:
        verdict = await QueryValidator(await _get_handler()).validate(query, project_id)
    except CodeGraphError as exc:
        return _error(exc)
    return _dump({"query": query, "project_id": project_id, **verdict.model_dump()})


@mcp.tool()
@trace_function(name="execute_cypher")
async def execute_cypher(project_id: str, query: str, parameters: str = "{}") -> str:
    """Run a custom read-only Cypher query.

    Use when the other tools cannot express what you need.  The query
    MUST be read-only; write keywords (CREATE, MERGE, DELETE, SET,
    REMOVE, DROP) are rejected.  ``$project_id`` is always bound, so
    filter on it: ``MATCH (f:Function {project_id: $project_id})``.

    Args:
        project_id: The project to scope the query to.
        query: A read-only Cypher query using $name placeholders.
        parameters: JSON-encoded dict of extra query parameters,
              e.g. '{"name": "Execute"}'.
    """
    try:
        result = await (await _get_store()).execute_cypher(
            project_id, query, _parse_params(parameters),
        )
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


# ─── Templates, reports & export ──────────────────────────


@mcp.tool()
async def list_query_templates(category: str = "") -> str:
    """List the built-in query templates, grouped by category.

    Args:
        category: Optional category to show (overview, functions,
              dependencies, types, calls, search).  Empty = all.
    """
    result: dict[str, list[dict[str, Any]]] = {}
    for key, template in COMMON_TEMPLATES.items():
        if category and template.category != category:
            continue
        result.setdefault(template.category, []).append({
            "id": key,
            "name": template.name,
            "description": template.description,
            "parameters": template.parameters,
        })
    return _dump(result)


@mcp.tool()
async def run_query_template(project_id: str, template: str, parameters: str = "{}") -> str:
    """Run a built-in query template by id (see list_query_templates).

    Args:
        project_id: The project to query.
        template: Template id, e.g. "find_function" or "unused_functions".
        parameters: JSON-encoded dict of the template's parameters
              (project_id is filled in for you).
    """
    try:
        result = await (await _get_store()).run_template(
            project_id, template, _parse_params(parameters),
        )
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


@mcp.tool()
async def run_report(project_id: str, report: str, limit: int = 20, min_complexity: int = 50) -> str:
    """Run a canned analysis report.

    Args:
        project_id: The project to analyse.
        report: One of node_counts, relationship_counts,
              complex_functions, unused_functions,
              circular_file_dependencies, interface_implementations,
              most_called_functions.
        limit: Row limit for most_called_functions.
        min_complexity: Minimum line span for complex_functions.
    """
    options: dict[str, Any] = {}
    if report == "most_called_functions":
        options["limit"] = limit
    elif report == "complex_functions":
        options["min_complexity"] = min_complexity
    try:
        result = await (await _get_store()).run_report(project_id, report, **options)
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


@mcp.tool()
async def export_query_results(
    project_id: str,
    query: str,
    format: str = "json",
    parameters: str = "{}",
    pretty: bool = True,
    headers: bool = True,
    bool_format: str = "true/false",
    null_value: str = "",
    delimiter: str = "",
) -> str:
    """Run a read-only Cypher query and export the rows as JSON, CSV or TSV.

    Args:
        project_id: The project to scope the query to.
        query: A read-only Cypher query (same rules as execute_cypher).
        format: "json", "csv" or "tsv".
        parameters: JSON-encoded dict of extra query parameters.
        pretty: Indent JSON output.
        headers: Include a header row for CSV/TSV.
        bool_format: "true/false" or "1/0".
        null_value: Text written for missing values.
        delimiter: Single-character CSV/TSV separator; empty = "," or tab.
    """
    try:
        options = ExportOptions(
            format=format,
            pretty=pretty and format == "json",
            headers=headers,
            bool_format=bool_format,
            null_value=null_value,
            delimiter=delimiter,
        )
        rows = (await (await _get_store()).execute_cypher(
            project_id, query, _parse_params(parameters),
        ))["results"]
    except CodeGraphError as exc:
        return _error(exc)
    except ValueError as exc:
        return _dump({"status": "error", "error": str(exc), "component": "exporter"})

    text, meta = Exporter(options).export_with_metadata(rows)
    return _dump({"data": text, **meta.model_dump()})


# ─── Code navigation ──────────────────────────────────────


@mcp.tool()
async def get_function_info(
    project_id: str,
    function_name: str,
    package: str = "",
    include_calls: bool = False,
    include_callers: bool = False,
) -> str:
    """Details of one function: signature, location, export status.

    Matches the exact name first, then any name containing it
    (case-insensitive).  This is substring matching, not typo-tolerant.

    Args:
        project_id: The project to search.
        function_name: Function name or part of it.
        package: Optional package name (or part of it) to narrow the search.
        include_calls: Also list the functions it calls.
        include_callers: Also list the functions that call it.
    """
    try:
        result = await (await _get_store()).get_function_info(
            project_id, function_name, package, include_calls, include_callers,
        )
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


@mcp.tool()
async def find_implementations(project_id: str, interface_name: str, package: str = "") -> str:
    """Structs that implement an interface.

    Args:
        project_id: The project to search.
        interface_name: Exact interface name.
        package: Optional exact package of the interface.
    """
    try:
        result = await (await _get_store()).find_implementations(
            project_id, interface_name, package,
        )
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


@mcp.tool()
async def trace_call_chain(
    project_id: str,
    from_function: str,
    to_function: str = "",
    max_depth: int = 5,
) -> str:
    """Follow CALLS edges from one function, optionally to another.

    Args:
        project_id: The project to search.
        from_function: Starting function (exact or partial name).
        to_function: Optional target function; empty lists everything
              reachable.
        max_depth: Maximum chain length (clamped to the server limit).
    """
    try:
        result = await (await _get_store()).trace_call_chain(
            project_id, from_function, to_function, max_depth,
        )
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


@mcp.tool()
async def detect_circular_dependencies(project_id: str, scope: str = "packages") -> str:
    """Find dependency or call cycles.

    Args:
        project_id: The project to analyse.
        scope: "packages", "functions", "files" or "all".
    """
    try:
        result = await (await _get_store()).detect_circular_dependencies(project_id, scope)
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


@mcp.tool()
async def list_packages(project_id: str, pattern: str = "") -> str:
    """List packages with file and function counts.

    Args:
        project_id: The project to list.
        pattern: Optional case-insensitive substring of the package name.
    """
    try:
        result = await (await _get_store()).list_packages(project_id, pattern)
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


@mcp.tool()
async def get_package_structure(project_id: str, package: str, include_private: bool = False) -> str:
    """Files, functions, structs and interfaces defined in a package.

    Args:
        project_id: The project to search.
        package: Exact package name.
        include_private: Include unexported elements.
    """
    try:
        result = await (await _get_store()).get_package_structure(
            project_id, package, include_private,
        )
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


@mcp.tool()
async def verify_code_exists(
    project_id: str,
    element_type: str,
    name: str,
    package: str = "",
) -> str:
    """Check that a function, struct, interface or package really exists.

    Use before citing code in an answer.

    Args:
        project_id: The project to search.
        element_type: "function", "struct" (or "type"), "interface", "package".
        name: Exact element name.
        package: Optional exact package name.
    """
    try:
        result = await (await _get_store()).verify_code_exists(
            project_id, element_type, name, package,
        )
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


@mcp.tool()
async def query_dependencies(
    project_id: str,
    target: str,
    direction: str = "outgoing",
    depth: int = 1,
) -> str:
    """DEPENDS_ON neighbours of a file path or node name.

    Args:
        project_id: The project to search.
        target: File path or node name.
        direction: "outgoing" (what it depends on), "incoming" (what
              depends on it) or "both".
        depth: Traversal hops (1-3).
    """
    try:
        result = await (await _get_store()).query_dependencies(
            project_id, target, direction, depth,
        )
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


# ─── Tests ────────────────────────────────────────────────


@mcp.tool()
async def find_tests_for_code(project_id: str, name: str) -> str:
    """Test functions (Test*) whose name mentions ``name``.

    Args:
        project_id: The project to search.
        name: Function or type name the tests should mention.
    """
    try:
        result = await (await _get_store()).find_tests_for_code(project_id, name)
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


@mcp.tool()
async def check_test_coverage(project_id: str, path: str = "") -> str:
    """Rough test-coverage ESTIMATE for a path or package.

    Derived from the ratio of Test* functions to all functions; it is
    not measured coverage (``is_estimate`` is always true).

    Args:
        project_id: The project to analyse.
        path: Optional file-path or package substring; empty = whole project.
    """
    try:
        result = await (await _get_store()).check_test_coverage(project_id, path)
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


# ─── Patterns & conventions ───────────────────────────────


@mcp.tool()
async def detect_code_patterns(project_id: str) -> str:
    """Common Go patterns present in a project: interfaces with many
    implementations, New* factory functions, and functions returning error.

    Each detected pattern carries a confidence and example rows.

    Args:
        project_id: The project to analyse.
    """
    try:
        result = await (await _get_store()).detect_code_patterns(project_id)
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


@mcp.tool()
async def get_naming_conventions(project_id: str) -> str:
    """Naming style counts (camelCase, PascalCase, Get/Set/New prefixes,
    -er/-able interface suffixes) over a sample of exported names.

    Use before suggesting new identifiers so they match the codebase.

    Args:
        project_id: The project to analyse.
    """
    try:
        result = await (await _get_store()).get_naming_conventions(project_id)
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


# ─── Projects ─────────────────────────────────────────────


@mcp.tool()
async def list_projects() -> str:
    """List every project indexed in the database.

    Call this when you do not know which project_id to use.
    """
    try:
        result = await (await _get_store()).list_projects()
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


@mcp.tool()
async def validate_project(project_id: str) -> str:
    """Check that a project exists in the database before querying it.

    Args:
        project_id: Project identifier to validate.
    """
    try:
        result = await (await _get_store()).validate_project(project_id)
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


# ─── Generic graph lookups ────────────────────────────────


@mcp.tool()
async def find_nodes(project_id: str, label: str = "", name: str = "") -> str:
    """Find nodes by name substring, or list every node with a label.

    Args:
        project_id: The project to search.
        label: Node label: Function, Struct, Interface, Package or File.
        name: Case-insensitive substring of the node name; takes
              precedence over ``label`` when both are given.
    """
    try:
        result = await (await _get_store()).find_nodes(project_id, label, name)
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


@mcp.tool()
async def find_relationships(project_id: str, relationship_type: str) -> str:
    """List source and target names for one relationship type.

    Args:
        project_id: The project to search.
        relationship_type: CALLS, IMPLEMENTS, DEPENDS_ON, CONTAINS,
              DEFINES or BELONGS_TO.
    """
    try:
        result = await (await _get_store()).find_relationships(project_id, relationship_type)
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


@mcp.tool()
async def find_path(project_id: str, from_name: str, to_name: str) -> str:
    """Shortest path between two named nodes over any relationship.

    Use to explain how two parts of the code are connected.

    Args:
        project_id: The project to search.
        from_name: Exact name of the start node.
        to_name: Exact name of the end node.
    """
    try:
        result = await (await _get_store()).find_path(project_id, from_name, to_name)
    except CodeGraphError as exc:
        return _error(exc)
    return _dump(result)


# ─── Resources ────────────────────────────────────────────


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@mcp.resource("templates://queries", mime_type="application/json")
async def query_templates_resource() -> str:
    """Available Cypher query templates."""
    templates = [
        {
            "name": key,
            "description": template.description,
            "category": template.category,
            "parameters": template.parameters,
        }
        for key, template in COMMON_TEMPLATES.items()
    ]
    categories = sorted({template.category for template in COMMON_TEMPLATES.values()})
    return _dump({"templates": templates, "categories": categories})


@mcp.resource("patterns://catalog", mime_type="application/json")
async def code_patterns_resource() -> str:
    """Catalog of detectable code patterns."""
    return _dump(PATTERN_CATALOG)


@mcp.resource("project://metadata/{project_id}", mime_type="application/json")
async def project_metadata_resource(project_id: str) -> str:
    """Project metadata and statistics."""
    try:
        statistics = await (await _get_store()).get_project_statistics(project_id)
    except CodeGraphError as exc:
        return _error(exc)
    return _dump({
        "project_id": project_id,
        "timestamp": _utc_now(),
        "statistics": statistics,
        "version": __version__,
    })


@mcp.resource("invariants://project/{project_id}", mime_type="application/json")
async def project_invariants_resource(project_id: str) -> str:
    """Project architectural invariants and rules."""
    return _dump({
        "project_id": project_id,
        "rules": DEFAULT_INVARIANTS,
        "updated_at": _utc_now(),
    })


# ─── Entry point ──────────────────────────────────────────

app = mcp.sse_app()

if __name__ == "__main__":
    import uvicorn

    init_langfuse()
    settings = _get_settings()

    logger.info(f"Starting Graph Query MCP server (SSE transport on {settings.host}:{settings.port})")

    try:
        uvicorn.run(
            "codegraph.graph_query.server:app",
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
        )
    finally:
        shutdown_langfuse()
