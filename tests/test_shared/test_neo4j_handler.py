"""
Unit tests for the Neo4j handler and observability helpers.

The neo4j driver is mocked; no database is needed.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from neo4j import READ_ACCESS

from codegraph.shared.database import Neo4jHandler
from codegraph.shared.exceptions import DatabaseConnectionError
from codegraph.shared import observability
from codegraph.shared.observability import is_langfuse_enabled, trace_function


def _records(*rows):
    """Async iterable of fake neo4j records."""

    async def gen():
        for row in rows:
            record = MagicMock()
            record.data.return_value = row
            yield record

    return gen()


@pytest.fixture
def driver():
    session = MagicMock()
    session.run = AsyncMock(return_value=_records({"n": 1}, {"n": 2}))
    session_cm = MagicMock()
    session_cm.__aenter__ = AsyncMock(return_value=session)
    session_cm.__aexit__ = AsyncMock(return_value=False)

    mock_driver = MagicMock()
    mock_driver.verify_connectivity = AsyncMock()
    mock_driver.close = AsyncMock()
    mock_driver.session.return_value = session_cm
    mock_driver.session_obj = session
    return mock_driver


class TestNeo4jHandler:

    def _handler(self):
        return Neo4jHandler(uri="bolt://localhost:7687", username="neo4j", password="pw")

    def test_missing_uri(self, monkeypatch):
        monkeypatch.delenv("NEO4J_URI", raising=False)
        with pytest.raises(DatabaseConnectionError, match="NEO4J_URI"):
            Neo4jHandler(username="neo4j", password="pw")

    async def test_run_returns_dicts(self, driver):
        with patch("codegraph.shared.database.neo4j_handler.AsyncGraphDatabase") as graph_db:
            graph_db.driver.return_value = driver
            async with self._handler() as handler:
                rows = await handler.run("MATCH (n {project_id: $project_id}) RETURN n",
                                         {"project_id": "demo"})

        assert rows == [{"n": 1}, {"n": 2}]
        driver.session_obj.run.assert_awaited_once_with(
            "MATCH (n {project_id: $project_id}) RETURN n", {"project_id": "demo"}
        )
        driver.close.assert_awaited_once()

    async def test_sessions_are_read_only(self, driver):
        with patch("codegraph.shared.database.neo4j_handler.AsyncGraphDatabase") as graph_db:
            graph_db.driver.return_value = driver
            async with self._handler() as handler:
                await handler.run("MATCH (n) DETACH DELETE n")

        driver.session.assert_called_once_with(
            database=handler.database, default_access_mode=READ_ACCESS,
        )

    async def test_connect_failure(self, driver):
        driver.verify_connectivity.side_effect = OSError("refused")
        with patch("codegraph.shared.database.neo4j_handler.AsyncGraphDatabase") as graph_db:
            graph_db.driver.return_value = driver
            handler = self._handler()
            with pytest.raises(DatabaseConnectionError, match="Cannot reach Neo4j"):
                await handler.connect()

        assert await handler.verify() is False
        driver.close.assert_awaited_once()

    async def test_run_requires_connection(self):
        with pytest.raises(RuntimeError, match="not connected"):
            await self._handler().run("RETURN 1")

    def test_from_settings(self):
        settings = MagicMock(
            neo4j_uri="bolt://db:7687",
            neo4j_username="reader",
            neo4j_password="secret",
            neo4j_database="graphs",
        )
        handler = Neo4jHandler.from_settings(settings)
        assert handler.uri == "bolt://db:7687"
        assert handler.database == "graphs"


class TestTraceFunction:

    async def test_passthrough_when_disabled(self):
        @trace_function(name="double")
        async def double(x):
            return x * 2

        assert is_langfuse_enabled() is False
        assert await double(21) == 42
        assert double.__name__ == "double"

    def test_shutdown_flushes_client(self, monkeypatch):
        client = MagicMock()
        monkeypatch.setattr(observability, "_langfuse_client", client)
        monkeypatch.setattr(observability, "_langfuse_enabled", True)

        observability.shutdown_langfuse()

        client.flush.assert_called_once()
        assert observability.is_langfuse_enabled() is False
        assert observability._langfuse_client is None
