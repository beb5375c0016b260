import os

from dotenv import load_dotenv
from langchain_openai import ChatOpenAI

load_dotenv()


# ─── LLM Model Factories ─────────────────────────────────


def get_translation_model(
    model_name: str | None = None,
    temperature: float = 0.1,
    max_tokens: int = 1000,
    api_key: str | None = None,
) -> ChatOpenAI:
    return ChatOpenAI(
        model=model_name or os.getenv("DEFAULT_MODEL", "gpt-4.1-2025-04-14"),
        api_key=api_key or os.getenv("OPENAI_API_KEY"),
        temperature=temperature,
        max_tokens=max_tokens,
    )
