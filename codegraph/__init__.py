"""Natural-language query engine over a multi-tenant code-dependency graph."""

__version__ = "0.1.0"
