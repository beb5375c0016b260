"""
Shared fixtures.

``ScriptedExecutor`` stands in for the Neo4j handler: it records every
``(query, params)`` it receives and answers from a list of rules keyed
on query substrings.
"""

from typing import Any, Optional

import pytest

from codegraph.shared.models import NodeTypeInfo, RelationshipTypeInfo, SchemaDocument


class ScriptedExecutor:
    """Fake ``QueryExecutor``.

    Rules are checked in the order they were added; the first rule whose
    substring occurs in the query wins.  A rule answers with rows, or
    raises when its response is an exception instance.
    """

    def __init__(self, default: Optional[list[dict[str, Any]]] = None):
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self._rules: list[tuple[str, Any]] = []
        self._default = default or []

    def on(self, fragment: str, response: Any) -> "ScriptedExecutor":
        self._rules.append((fragment, response))
        return self

    async def run(self, query: str, params: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        self.calls.append((query, dict(params or {})))
        for fragment, response in self._rules:
            if fragment in query:
                if isinstance(response, BaseException):
                    raise response
                return [dict(row) for row in response]
        return [dict(row) for row in self._default]

    @property
    def queries(self) -> list[str]:
        return [query for query, _ in self.calls]


@pytest.fixture
def executor():
    return ScriptedExecutor()


@pytest.fixture
def sample_schema():
    return SchemaDocument(
        project_id="demo",
        node_types=[
            NodeTypeInfo(label="Function", properties=["name", "package", "project_id"]),
            NodeTypeInfo(label="Struct", properties=["name", "package", "project_id"]),
        ],
        relationship_types=[
            RelationshipTypeInfo(
                type="CALLS",
                count=12,
                source_labels=[["Function"]],
                target_labels=[["Function"]],
            ),
        ],
    )
