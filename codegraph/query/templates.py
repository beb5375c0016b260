"""
Query Templates — a static catalog of named, parameterized read queries.

Each template declares the parameters it needs; ``build_query`` only
checks that they are present and hands back the query text unchanged,
so values are always bound by the driver and never spliced into text.
Every template filters on ``$project_id``.
"""

from pydantic import BaseModel, Field

from codegraph.shared.exceptions import TemplateError

_PROJECT_PARAM = {"project_id": "string - The project identifier"}


class QueryTemplate(BaseModel):
    """A named Cypher query with its declared parameters."""

    name: str
    description: str
    query: str
    parameters: dict[str, str] = Field(default_factory=dict)
    category: str

    def validate_parameters(self, params: dict) -> None:
        for param_name in self.parameters:
            if param_name not in params:
                raise TemplateError(f"missing required parameter: {param_name}")

    def build_query(self, params: dict) -> str:
        self.validate_parameters(params)
        return self.query

    def parameter_help(self) -> str:
        if not self.parameters:
            return "No parameters required"
        lines = ["Required parameters:"]
        for name, description in sorted(self.parameters.items()):
            lines.append(f"  {name}: {description}")
        return "\n".join(lines) + "\n"


COMMON_TEMPLATES: dict[str, QueryTemplate] = {
    # ── Overview ──────────────────────────────────────────
    "project_overview": QueryTemplate(
        name="Project Overview",
        description="Get basic statistics about a project",
        category="overview",
        query=(
            "MATCH (n) WHERE n.project_id = $project_id "
            "RETURN labels(n)[0] AS node_type, count(n) AS count "
            "ORDER BY count DESC"
        ),
        parameters=dict(_PROJECT_PARAM),
    ),
    "project_files": QueryTemplate(
        name="List Project Files",
        description="List all files in a project with their package information",
        category="overview",
        query=(
            "MATCH (f:File) WHERE f.project_id = $project_id "
            "RETURN f.path AS file_path, f.name AS file_name, f.package AS package_name "
            "ORDER BY f.package, f.name"
        ),
        parameters=dict(_PROJECT_PARAM),
    ),
    "project_packages": QueryTemplate(
        name="List Project Packages",
        description="List all packages in a project with file counts",
        category="overview",
        query=(
            "MATCH (f:File) WHERE f.project_id = $project_id "
            "RETURN f.package AS package_name, count(f) AS file_count "
            "ORDER BY file_count DESC, package_name"
        ),
        parameters=dict(_PROJECT_PARAM),
    ),
    # ── Functions ─────────────────────────────────────────
    "functions_by_package": QueryTemplate(
        name="Functions by Package",
        description="List all functions grouped by package",
        category="functions",
        query=(
            "MATCH (f:Function) WHERE f.project_id = $project_id "
            "RETURN f.package AS package_name, f.name AS function_name, "
            "f.signature AS signature, f.is_exported AS is_exported "
            "ORDER BY f.package, f.name"
        ),
        parameters=dict(_PROJECT_PARAM),
    ),
    "exported_functions": QueryTemplate(
        name="Exported Functions",
        description="List all exported functions in a project",
        category="functions",
        query=(
            "MATCH (f:Function) WHERE f.project_id = $project_id AND f.is_exported = true "
            "RETURN f.package AS package_name, f.name AS function_name, f.signature AS signature "
            "ORDER BY f.package, f.name"
        ),
        parameters=dict(_PROJECT_PARAM),
    ),
    "function_complexity": QueryTemplate(
        name="Function Complexity",
        description="List functions ordered by complexity (line count)",
        category="functions",
        query=(
            "MATCH (f:Function) WHERE f.project_id = $project_id "
            "WITH f, (f.line_end - f.line_start) AS complexity "
            "RETURN f.package AS package_name, f.name AS function_name, "
            "complexity, f.signature AS signature "
            "ORDER BY complexity DESC LIMIT 20"
        ),
        parameters=dict(_PROJECT_PARAM),
    ),
    # ── Dependencies ──────────────────────────────────────
    "package_dependencies": QueryTemplate(
        name="Package Dependencies",
        description="Show dependencies between packages",
        category="dependencies",
        query=(
            "MATCH (f1:File)-[:DEPENDS_ON]->(f2:File) "
            "WHERE f1.project_id = $project_id AND f2.project_id = $project_id "
            "RETURN DISTINCT f1.package AS from_package, f2.package AS to_package "
            "ORDER BY from_package, to_package"
        ),
        parameters=dict(_PROJECT_PARAM),
    ),
    "dependency_graph": QueryTemplate(
        name="Dependency Graph",
        description="Full dependency graph with relationships",
        category="dependencies",
        query=(
            "MATCH (f1:File)-[r:DEPENDS_ON]->(f2:File) "
            "WHERE f1.project_id = $project_id AND f2.project_id = $project_id "
            "RETURN f1.path AS from_file, f2.path AS to_file, type(r) AS relationship_type"
        ),
        parameters=dict(_PROJECT_PARAM),
    ),
    # ── Types ─────────────────────────────────────────────
    "interface_implementations": QueryTemplate(
        name="Interface Implementations",
        description="List all interfaces and their implementations",
        category="types",
        query=(
            "MATCH (s:Struct)-[:IMPLEMENTS]->(i:Interface) "
            "WHERE s.project_id = $project_id AND i.project_id = $project_id "
            "RETURN i.package AS interface_package, i.name AS interface_name, "
            "s.package AS struct_package, s.name AS struct_name "
            "ORDER BY i.name, s.name"
        ),
        parameters=dict(_PROJECT_PARAM),
    ),
    "unimplemented_interfaces": QueryTemplate(
        name="Unimplemented Interfaces",
        description="Find interfaces with no implementations",
        category="types",
        query=(
            "MATCH (i:Interface) WHERE i.project_id = $project_id "
            "AND NOT EXISTS { MATCH (s:Struct)-[:IMPLEMENTS]->(i) } "
            "RETURN i.package AS package_name, i.name AS interface_name "
            "ORDER BY i.package, i.name"
        ),
        parameters=dict(_PROJECT_PARAM),
    ),
    # ── Calls ─────────────────────────────────────────────
    "function_calls": QueryTemplate(
        name="Function Call Relationships",
        description="Show which functions call which other functions",
        category="calls",
        query=(
            "MATCH (f1:Function)-[:CALLS]->(f2:Function) "
            "WHERE f1.project_id = $project_id AND f2.project_id = $project_id "
            "RETURN f1.package AS caller_package, f1.name AS caller_name, "
            "f2.package AS callee_package, f2.name AS callee_name "
            "ORDER BY caller_package, caller_name"
        ),
        parameters=dict(_PROJECT_PARAM),
    ),
    "most_called_functions": QueryTemplate(
        name="Most Called Functions",
        description="Functions ordered by how often they are called",
        category="calls",
        query=(
            "MATCH (f:Function)<-[:CALLS]-() WHERE f.project_id = $project_id "
            "RETURN f.package AS package_name, f.name AS function_name, "
            "count(*) AS call_count, f.signature AS signature "
            "ORDER BY call_count DESC LIMIT 20"
        ),
        parameters=dict(_PROJECT_PARAM),
    ),
    "unused_functions": QueryTemplate(
        name="Unused Functions",
        description="Functions that are never called (potential dead code)",
        category="calls",
        query=(
            "MATCH (f:Function) WHERE f.project_id = $project_id "
            "AND NOT EXISTS { MATCH ()-[:CALLS]->(f) } "
            "AND f.name <> 'main' AND f.name <> 'init' "
            "RETURN f.package AS package_name, f.name AS function_name, f.signature AS signature "
            "ORDER BY f.package, f.name"
        ),
        parameters=dict(_PROJECT_PARAM),
    ),
    # ── Search ────────────────────────────────────────────
    "find_function": QueryTemplate(
        name="Find Function by Name",
        description="Search for functions by name (case-insensitive)",
        category="search",
        query=(
            "MATCH (f:Function) WHERE f.project_id = $project_id "
            "AND toLower(f.name) CONTAINS toLower($function_name) "
            "RETURN f.package AS package_name, f.name AS function_name, "
            "f.signature AS signature, f.is_exported AS is_exported "
            "ORDER BY f.package, f.name"
        ),
        parameters={**_PROJECT_PARAM, "function_name": "string - Function name to search for"},
    ),
    "find_struct": QueryTemplate(
        name="Find Struct by Name",
        description="Search for structs by name (case-insensitive)",
        category="search",
        query=(
            "MATCH (s:Struct) WHERE s.project_id = $project_id "
            "AND toLower(s.name) CONTAINS toLower($struct_name) "
            "RETURN s.package AS package_name, s.name AS struct_name, s.is_exported AS is_exported "
            "ORDER BY s.package, s.name"
        ),
        parameters={**_PROJECT_PARAM, "struct_name": "string - Struct name to search for"},
    ),
    "find_interface": QueryTemplate(
        name="Find Interface by Name",
        description="Search for interfaces by name (case-insensitive)",
        category="search",
        query=(
            "MATCH (i:Interface) WHERE i.project_id = $project_id "
            "AND toLower(i.name) CONTAINS toLower($interface_name) "
            "RETURN i.package AS package_name, i.name AS interface_name, i.is_exported AS is_exported "
            "ORDER BY i.package, i.name"
        ),
        parameters={**_PROJECT_PARAM, "interface_name": "string - Interface name to search for"},
    ),
    "search_code": QueryTemplate(
        name="Search in Code",
        description="Search for text patterns in function signatures",
        category="search",
        query=(
            "MATCH (f:Function) WHERE f.project_id = $project_id "
            "AND toLower(f.signature) CONTAINS toLower($search_term) "
            "RETURN f.package AS package_name, f.name AS function_name, f.signature AS signature "
            "ORDER BY f.package, f.name"
        ),
        parameters={**_PROJECT_PARAM, "search_term": "string - Text to search for in function signatures"},
    ),
}


def get_template(name: str) -> QueryTemplate:
    template = COMMON_TEMPLATES.get(name)
    if template is None:
        raise TemplateError(f"template '{name}' not found")
    return template


def list_templates() -> dict[str, list[QueryTemplate]]:
    """All templates grouped by category, in catalog order."""
    categories: dict[str, list[QueryTemplate]] = {}
    for template in COMMON_TEMPLATES.values():
        categories.setdefault(template.category, []).append(template)
    return categories


def templates_by_category(category: str) -> list[QueryTemplate]:
    return [t for t in COMMON_TEMPLATES.values() if t.category == category]
