"""
Naming conventions and code-pattern catalog.

Pure helpers behind the ``get_naming_conventions`` and
``detect_code_patterns`` tools, plus the static documents served as MCP
resources.  Nothing here touches the database.
"""

from typing import Any, Iterable

# ─── Detectable patterns ──────────────────────────────────

INTERFACE_PATTERN = {
    "type": "interface_implementation",
    "name": "Interface Implementation Pattern",
    "description": "Interfaces with multiple implementations detected",
    "confidence": 0.8,
}

FACTORY_PATTERN = {
    "type": "factory_function",
    "name": "Factory Function Pattern",
    "description": "Constructor functions following 'New*' naming convention",
    "confidence": 0.9,
}

ERROR_PATTERN = {
    "type": "error_handling",
    "name": "Error Handling Pattern",
    "description": "Found {count} functions returning errors",
    "confidence": 0.95,
}

PATTERN_CATALOG: dict[str, Any] = {
    "patterns": [
        {"id": INTERFACE_PATTERN["type"], "name": INTERFACE_PATTERN["name"],
         "description": "Interfaces ranked by number of implementing structs",
         "category": "structural", "tool": "detect_code_patterns"},
        {"id": FACTORY_PATTERN["type"], "name": FACTORY_PATTERN["name"],
         "description": FACTORY_PATTERN["description"],
         "category": "creational", "tool": "detect_code_patterns"},
        {"id": ERROR_PATTERN["type"], "name": ERROR_PATTERN["name"],
         "description": "Functions whose return types include error",
         "category": "behavioral", "tool": "detect_code_patterns"},
        {"id": "circular_dependency", "name": "Circular Dependency",
         "description": "Mutual dependencies between packages",
         "category": "anti-pattern", "tool": "detect_circular_dependencies"},
    ],
    "categories": ["creational", "structural", "behavioral", "anti-pattern"],
}

DEFAULT_INVARIANTS: list[dict[str, Any]] = [
    {
        "id": "no_circular_deps",
        "description": "No circular dependencies allowed",
        "severity": "error",
        "enabled": True,
    },
    {
        "id": "max_package_depth",
        "description": "Maximum package nesting depth",
        "severity": "warning",
        "value": 5,
        "enabled": True,
    },
]


# ─── Naming ───────────────────────────────────────────────


def is_camel_case(name: str) -> bool:
    return bool(name) and "a" <= name[0] <= "z" and "_" not in name


def is_pascal_case(name: str) -> bool:
    return bool(name) and "A" <= name[0] <= "Z" and "_" not in name


def _names(rows: Iterable[dict[str, Any]]) -> list[str]:
    return [row["name"] for row in rows if isinstance(row.get("name"), str) and row["name"]]


def analyze_function_names(rows: list[dict[str, Any]]) -> dict[str, Any]:
    """Count case styles and Get/Set/New prefixes; a name can match several."""
    patterns = dict.fromkeys(
        ["camelCase", "PascalCase", "snake_case",
         "starts_with_Get", "starts_with_Set", "starts_with_New"],
        0,
    )
    for name in _names(rows):
        patterns["camelCase"] += is_camel_case(name)
        patterns["PascalCase"] += is_pascal_case(name)
        patterns["snake_case"] += "_" in name
        for prefix in ("Get", "Set", "New"):
            patterns[f"starts_with_{prefix}"] += name.startswith(prefix)
    return {"patterns": patterns, "total": len(rows)}


def analyze_type_names(rows: list[dict[str, Any]]) -> dict[str, Any]:
    """Each name lands in the first matching style only."""
    patterns = {"PascalCase": 0, "camelCase": 0, "UPPER_CASE": 0}
    for name in _names(rows):
        if is_pascal_case(name):
            patterns["PascalCase"] += 1
        elif is_camel_case(name):
            patterns["camelCase"] += 1
        elif name.upper() == name:
            patterns["UPPER_CASE"] += 1
    return {"patterns": patterns, "total": len(rows)}


def analyze_interface_names(rows: list[dict[str, Any]]) -> dict[str, Any]:
    patterns = {"ends_with_er": 0, "ends_with_able": 0, "PascalCase": 0}
    for name in _names(rows):
        patterns["ends_with_er"] += name.endswith("er")
        patterns["ends_with_able"] += name.endswith("able")
        patterns["PascalCase"] += is_pascal_case(name)
    return {"patterns": patterns, "total": len(rows)}
