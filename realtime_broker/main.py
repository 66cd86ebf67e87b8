"""
FastAPI server for the realtime broker.

This module initializes the FastAPI application that relays browser WebSocket
sessions to the OpenAI Realtime API and serves the auxiliary JSON endpoints:
dev token issuance, the Responses API proxy, the expert contest and the
creative sandbox. Routes under ``/api`` carry CORS headers.
"""

import json
from pathlib import Path
from typing import Any, Dict

import dotenv
from fastapi import FastAPI, Request, Response, WebSocket
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from realtime_broker import __version__
from realtime_broker.auth.tokens import issue_dev_token
from realtime_broker.bot.realtime_bridge import bridge
from realtime_broker.config.constants import DEV_TOKEN_TTL_SECONDS
from realtime_broker.config.logging_config import configure_logging
from realtime_broker.config.settings import (
    JwtSettings,
    OpenAIConfig,
    cors_allow_origin,
    dev_tokens_allowed,
    openai_key_configured,
)
from realtime_broker.contest.runner import ExpertContestRunner
from realtime_broker.creative.event_log import CreativeEventLog
from realtime_broker.creative.runner import CreativeSandboxRunner
from realtime_broker.errors import BrokerError, ConfigError
from realtime_broker.models.auth import DevTokenRequest, DevTokenResponse
from realtime_broker.models.contest import ExpertContestRequest
from realtime_broker.models.creative import CreativePromptPayload
from realtime_broker.services.openai_client import create_openai_client
from realtime_broker.services.responses_proxy import proxy_response
from realtime_broker.websocket_manager import WebSocketManager

# Load environment variables from .env file if it exists
env_path = Path(".") / ".env"
if env_path.exists():
    dotenv.load_dotenv(env_path)

logger = configure_logging()

OPENAI_KEY_MISSING = "OPENAI_API_KEY is not configured"

app = FastAPI(
    title="Realtime Broker",
    description="Relay between browser clients and the OpenAI Realtime API, with contest and creative helpers",
    version=__version__,
)

websocket_manager = WebSocketManager(bridge)
creative_log = CreativeEventLog()


def cors_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": cors_allow_origin(),
        "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, x-bff-key",
    }


@app.middleware("http")
async def api_cors(request: Request, call_next):
    """Answer preflights and add CORS headers on /api routes only."""
    if not request.url.path.startswith("/api/"):
        return await call_next(request)
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=cors_headers())
    response = await call_next(request)
    response.headers.update(cors_headers())
    return response


def error_response(status_code: int, error: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, **extra})


def validation_message(error: ValidationError) -> str:
    """First validation problem, phrased for API clients."""
    first = error.errors()[0]
    if first["type"] == "missing":
        field = ".".join(str(part) for part in first["loc"])
        return f"Missing or invalid field: {field}"
    return first["msg"].removeprefix("Value error, ")


async def read_json(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Relay endpoint for browser voice/text sessions.

    Clients send audio_chunk, audio_commit, text_message, interrupt and mute
    events; OpenAI Realtime server events come back as server_event messages.
    """
    await websocket_manager.handle_websocket(websocket)


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring system status."""
    return {
        "status": "healthy",
        "openai_api_key_configured": openai_key_configured(),
        "active_sessions": len(bridge.registry),
    }


@app.get("/")
async def root():
    """Basic information about the API."""
    return {
        "name": "Realtime Broker",
        "description": "Relay between browser clients and the OpenAI Realtime API",
        "version": __version__,
        "endpoints": {
            "/ws": "WebSocket relay to the OpenAI Realtime API",
            "/health": "Health check endpoint",
            "/api/auth/token": "Issue a development JWT",
            "/api/responses": "OpenAI Responses API proxy",
            "/api/expertContest": "Run an expert contest",
            "/api/creativeSandbox/single": "Single creative answer",
            "/api/creativeSandbox/parallel": "Judged parallel creative answers",
        },
    }


@app.post("/api/auth/token")
async def issue_token(request: Request):
    """Issue a short-lived dev token; hidden in production unless explicitly allowed."""
    if not dev_tokens_allowed():
        return error_response(404, "Not Found")

    body = await read_json(request)
    token_request = DevTokenRequest.model_validate(body if isinstance(body, dict) else {})

    try:
        token = issue_dev_token(
            JwtSettings.from_env(),
            user_id=token_request.userId,
            device_id=token_request.deviceId,
            scopes=token_request.scopes,
            locale=token_request.locale,
        )
    except ConfigError as e:
        logger.error(f"Failed to issue dev token: {e}")
        return error_response(e.status_code, "Failed to issue token")

    return DevTokenResponse(token=token, expiresInSeconds=DEV_TOKEN_TTL_SECONDS).model_dump()


@app.post("/api/responses")
async def responses_proxy(request: Request):
    """Forward a Responses API request, defaulting the model from configuration."""
    body = await read_json(request)
    if not isinstance(body, dict):
        return error_response(400, "Request body must be a JSON object")

    try:
        config = OpenAIConfig.from_env()
        result = await proxy_response(create_openai_client(config), body, config.responses_model)
    except BrokerError as e:
        logger.error(f"Responses proxy fatal error: {e}")
        return error_response(e.status_code, "Failed to process response request", details=str(e))
    return result


@app.post("/api/expertContest")
async def expert_contest(request: Request):
    """Run a contest between expert personas and report the winner."""
    body = await read_json(request)
    if body is None:
        return error_response(400, "Missing request body")
    try:
        contest_request = ExpertContestRequest.model_validate(body)
    except ValidationError as e:
        return error_response(400, validation_message(e))

    if not openai_key_configured():
        return error_response(500, OPENAI_KEY_MISSING)

    runner = ExpertContestRunner(create_openai_client(OpenAIConfig.from_env()))
    try:
        result = await runner.run(contest_request)
    except BrokerError as e:
        logger.error(f"[expertContest] Contest failed: {e}")
        return error_response(e.status_code, "Failed to run expert contest")
    except Exception as e:
        logger.error(f"[expertContest] Failed to run contest: {e}", exc_info=True)
        return error_response(500, "Failed to run expert contest")
    return result.model_dump(mode="json")


async def _run_creative(request: Request, kind: str):
    if not openai_key_configured():
        return error_response(500, OPENAI_KEY_MISSING)

    body = await read_json(request)
    try:
        payload = CreativePromptPayload.model_validate(body)
    except ValidationError as e:
        return error_response(400, validation_message(e))

    runner = CreativeSandboxRunner(create_openai_client(OpenAIConfig.from_env()))
    try:
        if kind == "single":
            result = await runner.run_single(payload)
        else:
            result = await runner.run_parallel(payload)
    except Exception as e:
        logger.error(f"[creativeSandbox.{kind}] failed: {e}", exc_info=True)
        creative_log.record(kind, payload, error=str(e))
        status_code = e.status_code if isinstance(e, BrokerError) else 500
        return error_response(status_code, f"Failed to run {kind} creative response")

    creative_log.record(kind, payload, response=result)
    return result.model_dump(mode="json")


@app.post("/api/creativeSandbox/single")
async def creative_single(request: Request):
    return await _run_creative(request, "single")


@app.post("/api/creativeSandbox/parallel")
async def creative_parallel(request: Request):
    return await _run_creative(request, "parallel")
