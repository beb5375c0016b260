"""
Query Translator — natural language to Cypher.

Two strategies share one interface:

- ``LLMCypherTranslator`` prompts a chat model with the live schema.
- ``FallbackCypherTranslator`` (see ``fallback.py``) uses keywords only.

``ChainedTranslator`` tries the model first when it can, and falls back
exactly once.  It never raises for a translation failure; the failure
text is recorded on the returned ``TranslationOutcome`` instead.
"""

import logging
from typing import Any, Optional, Protocol

from langchain_core.messages import HumanMessage, SystemMessage

from codegraph.graph_query.schema_format import format_schema_for_llm
from codegraph.graph_query.validator import is_read_only
from codegraph.shared.exceptions import TranslationError
from codegraph.shared.models import SchemaDocument, TranslationOutcome, TranslationResult
from codegraph.shared.observability import trace_function

logger = logging.getLogger("graph_query.translator")

SYSTEM_PROMPT = """\
You are an expert Neo4j Cypher query generator for Go code analysis. \
Your task is to convert natural language questions into precise Cypher queries.

IMPORTANT RULES:
1. Always return ONLY the Cypher query, no explanations or markdown formatting
2. Use the exact node labels and relationship types provided in the schema
3. Every node pattern must filter on the tenant: {project_id: $project_id}
4. For case-insensitive searches, use toLower() and CONTAINS
5. Always include a LIMIT clause to prevent excessive results (default: 50)
6. Never write to the graph: no CREATE, MERGE, SET, DELETE or REMOVE
7. Functions have a 'package' property - use it directly instead of traversing relationships

WORKING QUERY EXAMPLES:
Query: "Show me all handler functions in the mcp package"
Cypher: MATCH (f:Function {project_id: $project_id}) WHERE f.package = 'mcp' \
AND toLower(f.name) CONTAINS 'handle' RETURN f LIMIT 50

Query: "List all functions in package mcp"
Cypher: MATCH (f:Function {project_id: $project_id}) WHERE f.package = 'mcp' RETURN f LIMIT 50

Query: "Show functions with names starting with handle"
Cypher: MATCH (f:Function {project_id: $project_id}) WHERE f.name STARTS WITH 'handle' RETURN f LIMIT 50

Query: "Find all structs in the analyzer package"
Cypher: MATCH (s:Struct {project_id: $project_id}) WHERE s.package = 'analyzer' RETURN s LIMIT 50

Query: "Show interfaces and their implementations"
Cypher: MATCH (s:Struct {project_id: $project_id})-[:IMPLEMENTS]->(i:Interface) \
RETURN s.name AS struct, i.name AS interface LIMIT 50

Query: "Find functions that call a specific function"
Cypher: MATCH (f1:Function {project_id: $project_id})-[:CALLS]->(f2:Function {name: 'Debug'}) \
RETURN f1.name, f1.package LIMIT 50

Query: "Show all packages and their file count"
Cypher: MATCH (p:Package {project_id: $project_id})-[:CONTAINS]->(f:File) \
RETURN p.name, count(f) AS file_count ORDER BY file_count DESC

Return only the Cypher query without any formatting or explanations.
"""

TRANSLATION_PROMPT = """\
Convert this natural language question into a Cypher query:

QUESTION: {question}

GRAPH SCHEMA:
{schema}

Generate the Cypher query:"""


class TranslationStrategy(Protocol):
    """Turns a question into a parameterised query for one tenant."""

    async def translate(
        self,
        text: str,
        tenant: str,
        schema: Optional[SchemaDocument],
    ) -> TranslationResult:
        ...


def strip_code_fences(raw: str) -> str:
    """Remove a surrounding markdown code block (```cypher ... ```)."""
    content = raw.strip()
    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else content[3:]
        if content.rstrip().endswith("```"):
            content = content.rstrip()[:-3]
    return content.strip()


def score_confidence(query: str) -> float:
    confidence = 0.8
    upper = query.upper()
    if "MATCH" in upper:
        confidence += 0.1
    if "RETURN" in upper:
        confidence += 0.1
    return min(round(confidence, 2), 1.0)


class LLMCypherTranslator:
    """Model-assisted translation.

    Args:
        model: A LangChain chat model (anything with ``ainvoke``), e.g.
            the one returned by ``get_translation_model``.
    """

    def __init__(self, model: Any):
        self._model = model

    @trace_function(name="translate_to_cypher", as_type="generation")
    async def translate(
        self,
        text: str,
        tenant: str,
        schema: Optional[SchemaDocument],
    ) -> TranslationResult:
        """Ask the model for a query over ``schema``.

        Raises:
            TranslationError: No schema, the model returned nothing usable, or
                the query it returned would write to the graph.
        """
        if schema is None:
            raise TranslationError("schema is required for model-assisted translation")

        prompt = TRANSLATION_PROMPT.format(
            question=text,
            schema=format_schema_for_llm(schema),
        )
        logger.info("Invoking LLM for Cypher translation...")
        response = await self._model.ainvoke(
            [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)]
        )
        raw = response.content if isinstance(response.content, str) else str(response.content)
        logger.debug("LLM raw response: %s", raw[:200])

        query = strip_code_fences(raw)
        if not query:
            raise TranslationError("model returned an empty query")
        if not is_read_only(query):
            raise TranslationError("model generated a query with write operations")

        return TranslationResult(
            query=query,
            parameters={"project_id": tenant},
            description=f"Translated '{text}' to Cypher query",
            confidence=score_confidence(query),
        )


class ChainedTranslator:
    """Primary strategy with a single fallback step."""

    def __init__(
        self,
        primary: Optional[TranslationStrategy],
        fallback: TranslationStrategy,
    ):
        self._primary = primary
        self._fallback = fallback

    async def translate(
        self,
        text: str,
        tenant: str,
        schema: Optional[SchemaDocument],
    ) -> TranslationOutcome:
        translation_error: Optional[str] = None

        if self._primary is not None and schema is not None:
            try:
                result = await self._primary.translate(text, tenant, schema)
                return TranslationOutcome(result=result, strategy="llm")
            except Exception as exc:
                translation_error = str(exc)
                logger.warning(
                    "Failed to translate query with LLM, using fallback: %s", exc
                )

        result = await self._fallback.translate(text, tenant, schema)
        return TranslationOutcome(
            result=result,
            strategy="fallback",
            translation_error=translation_error,
        )
