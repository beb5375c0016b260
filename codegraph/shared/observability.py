"""
Langfuse observability integration.

Traces natural-language query requests and the model-assisted
translation calls they make.
Only activates when LANGFUSE_PUBLIC_KEY and LANGFUSE_SECRET_KEY are provided in .env
"""

import functools
import os
from contextlib import asynccontextmanager
from typing import Callable, Optional

from langfuse import Langfuse, get_client, observe

from codegraph.shared.logging import setup_logging

logger = setup_logging("shared.observability", level="INFO")

# Global Langfuse client
_langfuse_client: Optional[Langfuse] = None
_langfuse_enabled: bool = False


def init_langfuse() -> Optional[Langfuse]:
    """
    Initialize Langfuse client if environment variables are set.

    Required environment variables:
    - LANGFUSE_PUBLIC_KEY
    - LANGFUSE_SECRET_KEY
    - LANGFUSE_HOST (optional, defaults to https://cloud.langfuse.com)

    Returns:
        Langfuse client if initialized, None otherwise
    """
    global _langfuse_client, _langfuse_enabled

    public_key = os.getenv("LANGFUSE_PUBLIC_KEY")
    secret_key = os.getenv("LANGFUSE_SECRET_KEY")
    host = os.getenv("LANGFUSE_HOST", "https://cloud.langfuse.com")

    if not public_key or not secret_key:
        logger.info("Langfuse not configured - observability disabled")
        _langfuse_enabled = False
        return None

    try:
        _langfuse_client = Langfuse(
            public_key=public_key,
            secret_key=secret_key,
            host=host,
        )
        _langfuse_enabled = True
        logger.info(f"Langfuse initialized successfully - host: {host}")
        return _langfuse_client

    except Exception as e:
        logger.error(f"Failed to initialize Langfuse: {e}")
        _langfuse_enabled = False
        return None


def is_langfuse_enabled() -> bool:
    """Check if Langfuse is enabled."""
    return _langfuse_enabled


def shutdown_langfuse():
    """Flush and shutdown Langfuse client."""
    global _langfuse_client, _langfuse_enabled

    if _langfuse_client:
        logger.info("Shutting down Langfuse - flushing pending traces")
        try:
            _langfuse_client.flush()
        except Exception as e:
            logger.error(f"Error flushing Langfuse: {e}")
        finally:
            _langfuse_client = None
            _langfuse_enabled = False


def trace_function(
    name: Optional[str] = None,
    capture_input: bool = True,
    capture_output: bool = True,
    as_type: str = "span",
):
    """
    Decorator for tracing functions with Langfuse.

    The enabled check happens per call, so functions decorated at import
    time start tracing once init_langfuse() has run.

    Usage:
        @trace_function(name="translate_cypher", as_type="generation")
        async def translate(text: str) -> str:
            ...
    """
    def decorator(func: Callable) -> Callable:
        traced_func = observe(
            name=name or func.__name__,
            capture_input=capture_input,
            capture_output=capture_output,
            as_type=as_type,
        )(func)

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            if not is_langfuse_enabled():
                return await func(*args, **kwargs)
            return await traced_func(*args, **kwargs)

        return wrapper

    return decorator


@asynccontextmanager
async def trace_context(
    name: str,
    session_id: Optional[str] = None,
    metadata: Optional[dict] = None,
):
    """
    Context manager for attaching request metadata to the current trace.

    Usage:
        async with trace_context("natural_language_query", session_id=request_id):
            result = await pipeline.run(...)
    """
    if not is_langfuse_enabled():
        yield
        return

    try:
        langfuse = get_client()
        langfuse.update_current_trace(
            name=name,
            session_id=session_id,
            metadata=metadata,
        )
    except Exception as e:
        logger.error(f"Failed to update Langfuse trace: {e}")
    yield
