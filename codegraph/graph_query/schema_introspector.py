"""
Schema Introspector — discover one tenant's node labels, property keys
and relationship types from the live graph.

Nothing is hard-coded: property sets differ per label and per indexer
version, so the schema is rebuilt on every request from two discovery
queries issued one after the other.
"""

import logging
from typing import Any

from codegraph.shared.database import QueryExecutor
from codegraph.shared.exceptions import SchemaUnavailableError
from codegraph.shared.models import NodeTypeInfo, RelationshipTypeInfo, SchemaDocument

logger = logging.getLogger("graph_query.schema_introspector")

NODE_TYPES_QUERY = (
    "MATCH (n {project_id: $project_id}) "
    "WITH labels(n) AS labels, keys(n) AS props "
    "UNWIND labels AS label "
    "RETURN label, collect(DISTINCT props) AS property_sets "
    "ORDER BY label"
)

RELATIONSHIP_TYPES_QUERY = (
    "MATCH (a {project_id: $project_id})-[r]->(b {project_id: $project_id}) "
    "RETURN type(r) AS relationship_type, count(r) AS count, "
    "collect(DISTINCT labels(a)) AS source_labels, "
    "collect(DISTINCT labels(b)) AS target_labels "
    "ORDER BY relationship_type"
)


def _matches(name: str, filter_type: str) -> bool:
    return not filter_type or filter_type.lower() in name.lower()


def _label_sets(raw: Any) -> list[list[str]]:
    sets = {tuple(sorted(str(label) for label in labels)) for labels in (raw or [])}
    return [list(s) for s in sorted(sets)]


class SchemaIntrospector:
    """Builds a ``SchemaDocument`` for a tenant from the graph itself."""

    def __init__(self, executor: QueryExecutor):
        self._executor = executor

    async def introspect(self, tenant: str, filter_type: str = "") -> SchemaDocument:
        """Run both discovery queries and merge them into one document.

        Args:
            tenant: The ``project_id`` to scope discovery to.
            filter_type: Optional case-insensitive substring; only labels
                and relationship types containing it are kept.

        Raises:
            SchemaUnavailableError: If either discovery query fails.
        """
        params = {"project_id": tenant}

        try:
            node_rows = await self._executor.run(NODE_TYPES_QUERY, params)
        except Exception as exc:
            raise SchemaUnavailableError(f"failed to get node types: {exc}") from exc

        try:
            rel_rows = await self._executor.run(RELATIONSHIP_TYPES_QUERY, params)
        except Exception as exc:
            raise SchemaUnavailableError(f"failed to get relationship types: {exc}") from exc

        schema = SchemaDocument(
            project_id=tenant,
            node_types=self._node_types(node_rows, filter_type),
            relationship_types=self._relationship_types(rel_rows, filter_type),
        )
        logger.debug(
            "Schema for %s: %d labels, %d relationship types",
            tenant, len(schema.node_types), len(schema.relationship_types),
        )
        return schema

    @staticmethod
    def _node_types(rows: list[dict], filter_type: str) -> list[NodeTypeInfo]:
        properties: dict[str, set[str]] = {}
        for row in rows:
            label = row.get("label")
            if not isinstance(label, str) or not _matches(label, filter_type):
                continue
            keys = properties.setdefault(label, set())
            for prop_set in row.get("property_sets") or []:
                keys.update(str(p) for p in prop_set)

        return [
            NodeTypeInfo(label=label, properties=sorted(props))
            for label, props in sorted(properties.items())
        ]

    @staticmethod
    def _relationship_types(rows: list[dict], filter_type: str) -> list[RelationshipTypeInfo]:
        rel_types: list[RelationshipTypeInfo] = []
        for row in rows:
            rel_type = row.get("relationship_type")
            if not isinstance(rel_type, str) or not _matches(rel_type, filter_type):
                continue
            rel_types.append(RelationshipTypeInfo(
                type=rel_type,
                count=int(row.get("count") or 0),
                source_labels=_label_sets(row.get("source_labels")),
                target_labels=_label_sets(row.get("target_labels")),
            ))
        rel_types.sort(key=lambda r: r.type)
        return rel_types
