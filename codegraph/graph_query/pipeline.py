"""
Natural-Language Query Pipeline.

introspect → translate → validate → execute, strictly in that order.
Every object created here lives for one request only, so concurrent
requests share nothing but the executor and the translator strategies.

Degraded paths (no schema, model translation failed, query failed
validation) never stop the pipeline; a failed execution comes back as
an ``NLQueryFailure`` payload rather than an exception.
"""

import logging
from typing import Optional, Union

from codegraph.graph_query.schema_introspector import SchemaIntrospector
from codegraph.graph_query.translator import ChainedTranslator
from codegraph.graph_query.validator import QueryValidator
from codegraph.shared.database import QueryExecutor
from codegraph.shared.exceptions import InvalidInputError
from codegraph.shared.logging import generate_correlation_id
from codegraph.shared.models import NLQueryFailure, NLQuerySuccess, SchemaDocument
from codegraph.shared.observability import trace_context

logger = logging.getLogger("graph_query.pipeline")


class NaturalLanguageQueryPipeline:
    """Answers a natural-language question with rows from one tenant's graph."""

    def __init__(
        self,
        executor: QueryExecutor,
        translator: ChainedTranslator,
        introspector: Optional[SchemaIntrospector] = None,
        validator: Optional[QueryValidator] = None,
    ):
        self._executor = executor
        self._translator = translator
        self._introspector = introspector or SchemaIntrospector(executor)
        self._validator = validator or QueryValidator(executor)

    async def run(
        self,
        tenant: str,
        text: str,
        context: str = "",
    ) -> Union[NLQuerySuccess, NLQueryFailure]:
        """Translate ``text`` into Cypher and run it for ``tenant``.

        Args:
            tenant: The ``project_id`` every query is scoped to.
            text: The natural-language question.
            context: Free-form caller context, echoed back on success.

        Returns:
            ``NLQuerySuccess`` with the rows, or ``NLQueryFailure`` with the
            generated query, validation hints and available schema.

        Raises:
            InvalidInputError: If ``tenant`` or ``text`` is empty.
        """
        if not tenant or not tenant.strip():
            raise InvalidInputError("project_id is required")
        if not text or not text.strip():
            raise InvalidInputError("query is required")

        request_id = generate_correlation_id()
        logger.info("[%s] natural language query for %s: %s", request_id, tenant, text)

        async with trace_context(
            "natural_language_query",
            session_id=request_id,
            metadata={"project_id": tenant},
        ):
            schema = await self._load_schema(request_id, tenant)

            outcome = await self._translator.translate(text, tenant, schema)
            query = outcome.result.query
            params = outcome.result.parameters
            logger.info("[%s] %s translation: %s", request_id, outcome.strategy, query)

            verdict = await self._validator.validate(query, tenant)
            if not verdict.is_valid:
                logger.info("[%s] validation failed, executing anyway", request_id)

            try:
                rows = await self._executor.run(query, params)
            except Exception as exc:
                logger.warning("[%s] execution failed: %s", request_id, exc)
                return NLQueryFailure(
                    original_error=str(exc),
                    generated_query=query,
                    validation_performed=True,
                    query_was_valid=verdict.is_valid,
                    suggestions=verdict.suggestions,
                    translation_error=outcome.translation_error,
                    schema_available=schema is not None,
                    available_node_types=schema.node_types if schema else None,
                    available_relationships=schema.relationship_types if schema else None,
                )

        logger.info("[%s] returned %d rows", request_id, len(rows))
        return NLQuerySuccess(
            natural_query=text,
            generated_query=query,
            context=context,
            results=rows,
            result_count=len(rows),
        )

    async def _load_schema(self, request_id: str, tenant: str) -> Optional[SchemaDocument]:
        try:
            schema = await self._introspector.introspect(tenant)
        except Exception as exc:
            logger.warning("[%s] schema unavailable, using fallback translation: %s", request_id, exc)
            return None
        logger.info(
            "[%s] schema labels=%s relationships=%s",
            request_id, schema.labels(), schema.relationship_names(),
        )
        return schema
