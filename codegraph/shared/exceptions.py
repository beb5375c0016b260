"""
Custom exception hierarchy for the code-graph query engine.

All errors inherit from CodeGraphError so they can be caught
uniformly at the tool surface.
"""


class CodeGraphError(Exception):
    """Base exception for all code-graph errors."""

    def __init__(self, message: str, component: str = "unknown"):
        self.component = component
        self.message = message
        super().__init__(f"[{component}] {message}")


class GraphQueryError(CodeGraphError):
    """Errors raised while building or running graph queries."""

    def __init__(self, message: str):
        super().__init__(message, component="graph_query")


class InvalidInputError(GraphQueryError):
    """A required tool argument is missing or malformed."""
    pass


class SchemaUnavailableError(GraphQueryError):
    """A schema discovery query failed."""
    pass


class TranslationError(CodeGraphError):
    """The model-assisted translator could not produce a query."""

    def __init__(self, message: str):
        super().__init__(message, component="translator")


class QueryBuildError(CodeGraphError):
    """The fluent builder was asked to produce an invalid query."""

    def __init__(self, message: str):
        super().__init__(message, component="query_builder")


class TemplateError(CodeGraphError):
    """Unknown template or missing template parameters."""

    def __init__(self, message: str):
        super().__init__(message, component="templates")


class ExportError(CodeGraphError):
    """Result export failed (unsupported format, bad options)."""

    def __init__(self, message: str):
        super().__init__(message, component="exporter")


class DatabaseConnectionError(CodeGraphError):
    """Failed to connect to Neo4j."""

    def __init__(self, message: str):
        super().__init__(message, component="database")
