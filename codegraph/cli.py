"""
Command line — answer one natural-language question about a project.

This bypasses the MCP server and runs the query pipeline directly
against the Neo4j instance configured in .env.  Useful for checking a
freshly indexed graph.

Usage:
    codegraph-query <project_id> "<question>" [--format json|csv|tsv]

For MCP server mode (SSE transport):
    python -m codegraph.graph_query.server
"""

import argparse
import asyncio
import sys

from codegraph.graph_query.config import GraphQuerySettings
from codegraph.graph_query.factory import build_pipeline
from codegraph.query.exporter import Exporter, ExportOptions
from codegraph.shared.database import Neo4jHandler
from codegraph.shared.exceptions import CodeGraphError
from codegraph.shared.logging import setup_logging
from codegraph.shared.models import NLQueryFailure


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ask the code graph a question.")
    parser.add_argument("project_id", help="Project whose graph to query")
    parser.add_argument("question", help="Question in natural language")
    parser.add_argument("--format", choices=["json", "csv", "tsv"], default="json")
    parser.add_argument("--log-level", default=None,
                        help="Overrides GRAPH_QUERY_LOG_LEVEL (e.g. WARNING, DEBUG)")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = GraphQuerySettings()
    setup_logging("graph_query", level=args.log_level or settings.log_level)

    try:
        async with Neo4jHandler.from_settings(settings) as handler:
            pipeline = build_pipeline(handler, settings)
            result = await pipeline.run(args.project_id, args.question)
    except CodeGraphError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if isinstance(result, NLQueryFailure):
        print(result.model_dump_json(indent=2), file=sys.stderr)
        return 1

    print(f"# {result.generated_query}", file=sys.stderr)
    print(Exporter(ExportOptions.default(args.format)).export(result.results))
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
