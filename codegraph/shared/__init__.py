"""Shared infrastructure: settings, logging, errors, Neo4j and LLM access."""
