from .query import (
    NLQueryFailure,
    NLQueryResult,
    NLQuerySuccess,
    NodeTypeInfo,
    RelationshipTypeInfo,
    SchemaDocument,
    TranslationOutcome,
    TranslationResult,
    ValidationVerdict,
)

__all__ = [
    "NLQueryFailure",
    "NLQueryResult",
    "NLQuerySuccess",
    "NodeTypeInfo",
    "RelationshipTypeInfo",
    "SchemaDocument",
    "TranslationOutcome",
    "TranslationResult",
    "ValidationVerdict",
]
