"""
Base configuration for the code-graph query services.

Uses Pydantic Settings for environment-based configuration.
Each service extends BaseAgentSettings with its own prefix.
"""

import os

from pydantic_settings import BaseSettings


class BaseAgentSettings(BaseSettings):
    """Base settings shared by every code-graph service."""

    agent_name: str = "base"

    # Global model default; services fall back to it when their own model is unset
    default_model: str = os.getenv("DEFAULT_MODEL", "gpt-4.1-2025-04-14")

    # Neo4j connection
    neo4j_uri: str = ""
    neo4j_username: str = "neo4j"
    neo4j_password: str = ""
    neo4j_database: str = "neo4j"

    # OpenAI
    openai_api_key: str = ""

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
