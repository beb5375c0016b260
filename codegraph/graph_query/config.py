"""Graph Query service configuration."""

from codegraph.shared.config import BaseAgentSettings


class GraphQuerySettings(BaseAgentSettings):
    """Settings specific to the Graph Query service."""

    agent_name: str = "graph_query"
    host: str = "0.0.0.0"
    port: int = 8003

    # Natural-language translation
    # empty = use default_model
    translation_model: str = ""
    translation_temperature: float = 0.1
    translation_max_tokens: int = 1000
    enable_llm_translation: bool = True

    # 0 disables the response cache
    cache_ttl_seconds: int = 300

    # row cap for node, relationship and project listings
    max_results: int = 50
    max_traversal_depth: int = 3
    call_chain_max_depth: int = 10

    class Config(BaseAgentSettings.Config):
        env_prefix = "GRAPH_QUERY_"
