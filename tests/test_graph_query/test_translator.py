"""
Unit tests for model-assisted translation and the fallback chain.

The chat model is mocked; no network calls are made.
Run with: pytest tests/test_graph_query/test_translator.py -v
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from langchain_core.messages import HumanMessage, SystemMessage

from codegraph.graph_query.fallback import FallbackCypherTranslator
from codegraph.graph_query.translator import (
    ChainedTranslator,
    LLMCypherTranslator,
    score_confidence,
    strip_code_fences,
)
from codegraph.shared.exceptions import TranslationError
from codegraph.shared.models import TranslationResult


def _model_returning(content):
    model = AsyncMock()
    response = MagicMock()
    response.content = content
    model.ainvoke.return_value = response
    return model


# ──────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────


class TestHelpers:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("MATCH (n) RETURN n", "MATCH (n) RETURN n"),
            ("```cypher\nMATCH (n) RETURN n\n```", "MATCH (n) RETURN n"),
            ("```\nMATCH (n)\nRETURN n```", "MATCH (n)\nRETURN n"),
            ("  \nMATCH (n) RETURN n  \n", "MATCH (n) RETURN n"),
        ],
    )
    def test_strip_code_fences(self, raw, expected):
        assert strip_code_fences(raw) == expected

    @pytest.mark.parametrize(
        "query, expected",
        [
            ("MATCH (n) RETURN n", 1.0),
            ("MATCH (n)", 0.9),
            ("RETURN 1", 0.9),
            ("CALL db.labels()", 0.8),
        ],
    )
    def test_score_confidence(self, query, expected):
        assert score_confidence(query) == expected


# ──────────────────────────────────────────────────
# LLMCypherTranslator
# ──────────────────────────────────────────────────


class TestLLMCypherTranslator:

    async def test_translate(self, sample_schema):
        model = _model_returning(
            "```cypher\nMATCH (f:Function {project_id: $project_id}) RETURN f LIMIT 50\n```"
        )

        result = await LLMCypherTranslator(model).translate("all functions", "demo", sample_schema)

        assert result.query == "MATCH (f:Function {project_id: $project_id}) RETURN f LIMIT 50"
        assert result.parameters == {"project_id": "demo"}
        assert result.confidence == 1.0

    async def test_prompt_carries_question_and_schema(self, sample_schema):
        model = _model_returning("MATCH (n) RETURN n")

        await LLMCypherTranslator(model).translate("who calls Debug", "demo", sample_schema)

        messages = model.ainvoke.call_args.args[0]
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert "QUESTION: who calls Debug" in messages[1].content
        assert "- CALLS (12 occurrences)" in messages[1].content

    async def test_requires_schema(self):
        model = _model_returning("MATCH (n) RETURN n")

        with pytest.raises(TranslationError, match="schema is required"):
            await LLMCypherTranslator(model).translate("x", "demo", None)

        model.ainvoke.assert_not_called()

    async def test_empty_response(self, sample_schema):
        model = _model_returning("```\n```")

        with pytest.raises(TranslationError, match="empty query"):
            await LLMCypherTranslator(model).translate("x", "demo", sample_schema)

    @pytest.mark.parametrize("query", [
        "MATCH (n {project_id: $project_id}) DETACH DELETE n",
        "MATCH (f:Function {project_id: $project_id}) SET f.name = 'x' RETURN f",
        "CALL { MATCH (n) RETURN n } RETURN 1",
    ])
    async def test_write_query_rejected(self, sample_schema, query):
        model = _model_returning(query)

        with pytest.raises(TranslationError, match="write operations"):
            await LLMCypherTranslator(model).translate("wipe the project", "demo", sample_schema)


# ──────────────────────────────────────────────────
# ChainedTranslator
# ──────────────────────────────────────────────────


class TestChainedTranslator:

    async def test_primary_used_when_schema_present(self, sample_schema):
        primary = AsyncMock()
        primary.translate.return_value = TranslationResult(query="MATCH (n) RETURN n")

        outcome = await ChainedTranslator(primary, FallbackCypherTranslator()).translate(
            "anything", "demo", sample_schema
        )

        assert outcome.strategy == "llm"
        assert outcome.translation_error is None
        assert outcome.result.query == "MATCH (n) RETURN n"

    async def test_falls_back_once_on_primary_error(self, sample_schema):
        primary = AsyncMock()
        primary.translate.side_effect = RuntimeError("rate limited")

        outcome = await ChainedTranslator(primary, FallbackCypherTranslator()).translate(
            "list packages", "demo", sample_schema
        )

        assert outcome.strategy == "fallback"
        assert outcome.translation_error == "rate limited"
        assert outcome.result.parameters == {"project_id": "demo"}
        assert "(p:Package {project_id: $project_id})" in outcome.result.query
        primary.translate.assert_awaited_once()

    async def test_no_schema_skips_primary(self):
        primary = AsyncMock()

        outcome = await ChainedTranslator(primary, FallbackCypherTranslator()).translate(
            "list packages", "demo", None
        )

        assert outcome.strategy == "fallback"
        assert outcome.translation_error is None
        primary.translate.assert_not_called()

    async def test_no_primary(self, sample_schema):
        outcome = await ChainedTranslator(None, FallbackCypherTranslator()).translate(
            "list packages", "demo", sample_schema
        )
        assert outcome.strategy == "fallback"

    async def test_cancellation_is_not_swallowed(self, sample_schema):
        primary = AsyncMock()
        primary.translate.side_effect = asyncio.CancelledError()
        fallback = AsyncMock()

        with pytest.raises(asyncio.CancelledError):
            await ChainedTranslator(primary, fallback).translate("x", "demo", sample_schema)

        fallback.translate.assert_not_called()
