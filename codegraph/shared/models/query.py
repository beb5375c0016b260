"""
Request-scoped data models for the natural-language query pipeline.

Every model here is created fresh for one request and discarded once the
response is serialised; none of them is cached or shared across calls.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


class NodeTypeInfo(BaseModel):
    """A node label and the union of property keys seen on its instances."""

    label: str
    properties: list[str] = Field(default_factory=list)


class RelationshipTypeInfo(BaseModel):
    """A relationship type, how often it occurs, and its endpoint label sets."""

    type: str
    count: int = 0
    source_labels: list[list[str]] = Field(default_factory=list)
    target_labels: list[list[str]] = Field(default_factory=list)


class SchemaDocument(BaseModel):
    """Live schema of one tenant's slice of the graph."""

    project_id: str
    node_types: list[NodeTypeInfo] = Field(default_factory=list)
    relationship_types: list[RelationshipTypeInfo] = Field(default_factory=list)

    def labels(self) -> list[str]:
        return [n.label for n in self.node_types]

    def relationship_names(self) -> list[str]:
        return [r.type for r in self.relationship_types]


class TranslationResult(BaseModel):
    """A Cypher query with named placeholders and its bound parameters.

    ``parameters`` is the only channel for user-supplied values.
    """

    query: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    description: str = ""
    confidence: float = 0.0


class TranslationOutcome(BaseModel):
    """Which strategy produced the query and why the primary one failed, if it did."""

    result: TranslationResult
    strategy: Literal["llm", "fallback"]
    translation_error: str | None = None


class ValidationVerdict(BaseModel):
    """Outcome of an EXPLAIN dry run."""

    is_valid: bool
    error: str | None = None
    suggestions: list[str] = Field(default_factory=list)


class NLQuerySuccess(BaseModel):
    """Rows returned for a natural-language question."""

    status: Literal["ok"] = "ok"
    natural_query: str
    generated_query: str
    context: str = ""
    results: list[dict[str, Any]] = Field(default_factory=list)
    result_count: int = 0


class NLQueryFailure(BaseModel):
    """Structured diagnostic for a failed execution.

    Returned as an ordinary result so an LLM caller can read it and retry.
    """

    status: Literal["error"] = "error"
    original_error: str
    generated_query: str
    validation_performed: bool = True
    query_was_valid: bool = False
    suggestions: list[str] = Field(default_factory=list)
    translation_error: str | None = None
    schema_available: bool = False
    available_node_types: list[NodeTypeInfo] | None = None
    available_relationships: list[RelationshipTypeInfo] | None = None


NLQueryResult = Annotated[
    Union[NLQuerySuccess, NLQueryFailure],
    Field(discriminator="status"),
]
