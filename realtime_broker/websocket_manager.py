"""
WebSocket connection manager for browser relay sessions.

This module accepts browser WebSocket connections, checks the caller's bearer
token, opens a matching OpenAI Realtime session through the bridge, validates
every incoming client event and hands it to the bridge. Invalid events are
answered with an error message and do not end the session.
"""

import json
import logging
import uuid
from typing import Optional

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from realtime_broker.auth import get_jwt_verifier, require_bearer_token
from realtime_broker.bot.realtime_bridge import RealtimeRelayBridge, bridge as default_bridge
from realtime_broker.config.constants import (
    BROKER_EVENT_ERROR,
    BROKER_EVENT_SESSION_CREATED,
    LOGGER_NAME,
    WS_CLOSE_INTERNAL_ERROR,
    WS_CLOSE_POLICY_VIOLATION,
)
from realtime_broker.config.settings import relay_auth_required
from realtime_broker.errors import AuthError, BrokerError, ConfigError
from realtime_broker.models.auth import AuthContext
from realtime_broker.models.realtime import parse_client_event

logger = logging.getLogger(LOGGER_NAME)


def extract_token(websocket: WebSocket) -> Optional[str]:
    """Bearer token from the Authorization header, else the ``token`` query param."""
    header = websocket.headers.get("authorization")
    if header:
        return require_bearer_token(header)
    return websocket.query_params.get("token") or None


class WebSocketManager:
    """Runs the lifecycle of each browser relay connection."""

    def __init__(self, bridge: Optional[RealtimeRelayBridge] = None):
        self.bridge = bridge if bridge is not None else default_bridge

    @property
    def registry(self):
        return self.bridge.registry

    async def _send_error(self, websocket: WebSocket, message: str) -> None:
        await websocket.send_text(json.dumps({"type": BROKER_EVENT_ERROR, "message": message}))

    def authenticate(self, websocket: WebSocket) -> Optional[AuthContext]:
        """
        Verify the caller's token, if any.

        Returns None for an anonymous connection when auth is not required.

        Raises:
            AuthError: Missing, malformed or rejected token
            ConfigError: A token was sent but JWT settings are missing
        """
        token = extract_token(websocket)
        if token is None:
            if relay_auth_required():
                raise AuthError("Missing Authorization (header or token query param)")
            return None
        return get_jwt_verifier().verify(token)

    async def handle_websocket(self, websocket: WebSocket):
        """Handle a relay connection from accept to cleanup.

        1. Accepts the connection and authenticates the caller
        2. Assigns a session id and opens the OpenAI Realtime side
        3. Validates and routes client events until the client disconnects
        4. Closes the OpenAI side and forgets the session
        """
        await websocket.accept()

        try:
            auth = self.authenticate(websocket)
        except BrokerError as e:
            logger.warning(f"Rejected relay connection: {e}")
            await self._send_error(websocket, str(e))
            code = WS_CLOSE_POLICY_VIOLATION if isinstance(e, AuthError) else WS_CLOSE_INTERNAL_ERROR
            await websocket.close(code=code)
            return

        session_id = str(uuid.uuid4())
        user_id = auth.userId if auth else None
        self.registry.add_session(session_id, websocket, user_id=user_id)

        try:
            try:
                await self.bridge.create_client(session_id, websocket)
            except ConfigError as e:
                logger.error(f"Cannot open realtime session: {e}")
                await self._send_error(websocket, str(e))
                await websocket.close(code=WS_CLOSE_INTERNAL_ERROR)
                return

            created = {"type": BROKER_EVENT_SESSION_CREATED, "sessionId": session_id}
            if user_id:
                created["userId"] = user_id
            await websocket.send_text(json.dumps(created))
            logger.info(f"Relay session started: {session_id} (user={user_id or 'anonymous'})")

            while True:
                data = await websocket.receive_text()
                try:
                    event = parse_client_event(json.loads(data))
                except json.JSONDecodeError:
                    await self._send_error(websocket, "Invalid JSON")
                    continue
                except ValidationError as e:
                    logger.warning(f"Invalid client event on {session_id}: {e.errors()}")
                    await self._send_error(websocket, "Invalid client event")
                    continue

                await self.bridge.handle_client_event(session_id, event)
        except WebSocketDisconnect:
            logger.info(f"Client disconnected: {session_id}")
        except Exception as e:
            logger.error(f"Error in WebSocket connection: {e}", exc_info=True)
        finally:
            await self.bridge.close_client(session_id)
            logger.info(f"Relay session closed: {session_id}")
