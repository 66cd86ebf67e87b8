"""
Helpers around the OpenAI SDK's async client and Responses API results.
"""

import logging
import time
from typing import Any, List, Optional, Tuple

from openai import AsyncOpenAI

from realtime_broker.config.constants import LOGGER_NAME
from realtime_broker.config.settings import OpenAIConfig
from realtime_broker.models.contest import TokenUsage

logger = logging.getLogger(LOGGER_NAME)


def create_openai_client(config: OpenAIConfig) -> AsyncOpenAI:
    """Create an AsyncOpenAI client from broker configuration."""
    kwargs = {"api_key": config.api_key}
    if config.project_id:
        kwargs["project"] = config.project_id
    return AsyncOpenAI(**kwargs)


def _get(obj: Any, key: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def extract_output_text(response: Any) -> str:
    """
    Collect the assistant text from a Responses API result.

    Prefers the SDK's ``output_text`` convenience value and falls back to
    joining every ``output_text`` content part of ``message`` items.
    """
    output_text = _get(response, "output_text")
    if isinstance(output_text, str) and output_text:
        return output_text.strip()
    if isinstance(output_text, list) and output_text:
        return "\n".join(output_text).strip()

    parts: List[str] = []
    for item in _get(response, "output") or []:
        if _get(item, "type") != "message":
            continue
        for content in _get(item, "content") or []:
            if _get(content, "type") == "output_text":
                parts.append(_get(content, "text") or "")
    return "\n".join(parts).strip()


def map_token_usage(usage: Any) -> Optional[TokenUsage]:
    """Normalize Responses and Chat Completions usage objects."""
    if not usage:
        return None
    prompt = _get(usage, "input_tokens")
    completion = _get(usage, "output_tokens")
    return TokenUsage(
        promptTokens=prompt if prompt is not None else _get(usage, "prompt_tokens"),
        completionTokens=completion if completion is not None else _get(usage, "completion_tokens"),
        totalTokens=_get(usage, "total_tokens"),
    )


async def timed_text_response(
    client: AsyncOpenAI, model: str, system_prompt: str, user_prompt: str
) -> Tuple[Any, float]:
    """
    Run one system+user Responses call.

    Returns:
        Tuple of (raw response, latency in milliseconds)
    """
    started = time.perf_counter()
    response = await client.responses.create(
        model=model,
        input=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
    )
    latency_ms = round((time.perf_counter() - started) * 1000, 1)
    logger.debug(f"Responses call on {model} took {latency_ms}ms")
    return response, latency_ms
