"""Graph Query — natural-language and canned queries over the code graph."""

from codegraph.graph_query.cache import CachedPipeline, TTLCache
from codegraph.graph_query.factory import build_pipeline, build_translator
from codegraph.graph_query.fallback import FallbackCypherTranslator
from codegraph.graph_query.graph_store import CodeGraphStore
from codegraph.graph_query.pipeline import NaturalLanguageQueryPipeline
from codegraph.graph_query.schema_introspector import SchemaIntrospector
from codegraph.graph_query.translator import (
    ChainedTranslator,
    LLMCypherTranslator,
    TranslationStrategy,
)
from codegraph.graph_query.validator import QueryValidator, analyze_cypher_error

__all__ = [
    "CachedPipeline",
    "ChainedTranslator",
    "CodeGraphStore",
    "FallbackCypherTranslator",
    "LLMCypherTranslator",
    "NaturalLanguageQueryPipeline",
    "QueryValidator",
    "SchemaIntrospector",
    "TTLCache",
    "TranslationStrategy",
    "analyze_cypher_error",
    "build_pipeline",
    "build_translator",
]
