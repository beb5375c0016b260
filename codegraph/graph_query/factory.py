"""Wire the natural-language query pipeline from settings."""

import logging
import os
from typing import Any, Optional, Union

from codegraph.graph_query.cache import CachedPipeline, TTLCache
from codegraph.graph_query.config import GraphQuerySettings
from codegraph.graph_query.fallback import FallbackCypherTranslator
from codegraph.graph_query.pipeline import NaturalLanguageQueryPipeline
from codegraph.graph_query.translator import ChainedTranslator, LLMCypherTranslator
from codegraph.shared.database import QueryExecutor
from codegraph.shared.llms import get_translation_model

logger = logging.getLogger("graph_query.factory")


def build_translator(settings: GraphQuerySettings, model: Optional[Any] = None) -> ChainedTranslator:
    """Model-assisted translation only when enabled and an API key is set."""
    primary = None
    if model is not None:
        primary = LLMCypherTranslator(model)
    elif settings.enable_llm_translation and (settings.openai_api_key or os.getenv("OPENAI_API_KEY")):
        primary = LLMCypherTranslator(get_translation_model(
            settings.translation_model or settings.default_model,
            temperature=settings.translation_temperature,
            max_tokens=settings.translation_max_tokens,
            api_key=settings.openai_api_key or None,
        ))
    else:
        logger.info("No translation model configured - using keyword fallback only")
    return ChainedTranslator(primary, FallbackCypherTranslator())


def build_pipeline(
    executor: QueryExecutor,
    settings: GraphQuerySettings,
    model: Optional[Any] = None,
) -> Union[NaturalLanguageQueryPipeline, CachedPipeline]:
    pipeline = NaturalLanguageQueryPipeline(executor, build_translator(settings, model))
    if settings.cache_ttl_seconds > 0:
        return CachedPipeline(pipeline, TTLCache(settings.cache_ttl_seconds))
    return pipeline
