"""
Unit tests for the command-line entry point.

Neo4j and the pipeline are patched out.
"""

import logging

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from codegraph import cli
from codegraph.shared.models import NLQueryFailure, NLQuerySuccess


@pytest.fixture
def patched():
    handler_cm = MagicMock()
    handler_cm.__aenter__ = AsyncMock(return_value=MagicMock())
    handler_cm.__aexit__ = AsyncMock(return_value=False)
    pipeline = AsyncMock()

    with patch.object(cli.Neo4jHandler, "from_settings", return_value=handler_cm), \
            patch.object(cli, "build_pipeline", return_value=pipeline):
        yield pipeline


class TestCli:

    async def test_prints_csv(self, patched, capsys):
        patched.run.return_value = NLQuerySuccess(
            natural_query="q",
            generated_query="MATCH (n) RETURN n",
            results=[{"name": "Serve"}],
            result_count=1,
        )

        code = await cli.main(["demo", "list functions", "--format", "csv"])

        out = capsys.readouterr()
        assert code == 0
        assert out.out == "name\nServe\n\n"
        assert "# MATCH (n) RETURN n" in out.err
        patched.run.assert_awaited_once_with("demo", "list functions")

    async def test_failure_exit_code(self, patched, capsys):
        patched.run.return_value = NLQueryFailure(original_error="boom", generated_query="RETURN 1")

        code = await cli.main(["demo", "anything"])

        assert code == 1
        assert '"original_error": "boom"' in capsys.readouterr().err

    async def test_log_level_option(self, patched):
        patched.run.return_value = NLQueryFailure(original_error="boom", generated_query="RETURN 1")
        component = logging.getLogger("graph_query")
        previous = component.level
        try:
            await cli.main(["demo", "anything", "--log-level", "DEBUG"])
            assert component.level == logging.DEBUG
        finally:
            component.setLevel(previous)
