"""
Proxy for the OpenAI Responses API.

Callers send a Responses request body; the proxy fills in the configured model
when none is given and picks ``parse`` for JSON-schema output formats.
"""

import logging
from typing import Any, Dict

from openai import AsyncOpenAI

from realtime_broker.config.constants import LOGGER_NAME
from realtime_broker.errors import UpstreamError

logger = logging.getLogger(LOGGER_NAME)


def is_json_schema_format(body: Dict[str, Any]) -> bool:
    text = body.get("text") or {}
    fmt = text.get("format") if isinstance(text, dict) else None
    return isinstance(fmt, dict) and fmt.get("type") == "json_schema"


def with_model(body: Dict[str, Any], fallback_model: str) -> Dict[str, Any]:
    """Return a copy of ``body`` with a model and streaming disabled."""
    request = dict(body)
    request["model"] = body.get("model") or fallback_model
    request["stream"] = False
    return request


def _dump(response: Any) -> Dict[str, Any]:
    if hasattr(response, "model_dump"):
        return response.model_dump(mode="json")
    return response


async def proxy_response(
    client: AsyncOpenAI, body: Dict[str, Any], fallback_model: str
) -> Dict[str, Any]:
    """
    Forward a Responses API request.

    Raises:
        UpstreamError: If the OpenAI call fails
    """
    request = with_model(body, fallback_model)
    structured = is_json_schema_format(body)
    try:
        if structured:
            response = await client.responses.parse(**request)
        else:
            response = await client.responses.create(**request)
    except Exception as e:
        kind = "parse" if structured else "text"
        logger.error(f"Responses proxy {kind} error: {e}")
        message = (
            "Failed to parse structured response" if structured else "Failed to create response"
        )
        raise UpstreamError(message) from e
    return _dump(response)
