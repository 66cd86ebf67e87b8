"""
Bridge between browser relay sessions and the OpenAI Realtime API.

Client events from the browser are translated into Realtime client events, and
every server event from OpenAI is forwarded back to the browser wrapped in a
``server_event`` envelope.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import WebSocket

from realtime_broker.bot.realtime_api import RealtimeEventClient
from realtime_broker.config.constants import (
    BROKER_EVENT_SERVER_EVENT,
    LOGGER_NAME,
    REALTIME_AUDIO_APPEND,
    REALTIME_AUDIO_COMMIT,
    REALTIME_ITEM_CREATE,
    REALTIME_RESPONSE_CANCEL,
    REALTIME_RESPONSE_CREATE,
)
from realtime_broker.config.settings import OpenAIConfig
from realtime_broker.models.realtime import (
    AudioChunkEvent,
    AudioCommitEvent,
    ClientEvent,
    InterruptEvent,
    MuteEvent,
    TextMessageEvent,
)
from realtime_broker.models.session import SessionRegistry

logger = logging.getLogger(LOGGER_NAME)

# Wait between polls while the OpenAI side is disconnected
IDLE_POLL_INTERVAL = 0.1


def to_realtime_events(event: ClientEvent) -> List[Dict[str, Any]]:
    """Translate a browser event into the Realtime events it stands for."""
    if isinstance(event, AudioChunkEvent):
        return [{"type": REALTIME_AUDIO_APPEND, "audio": event.data}]
    if isinstance(event, AudioCommitEvent):
        return [{"type": REALTIME_AUDIO_COMMIT}, {"type": REALTIME_RESPONSE_CREATE}]
    if isinstance(event, TextMessageEvent):
        return [
            {
                "type": REALTIME_ITEM_CREATE,
                "item": {
                    "type": "message",
                    "role": "user",
                    "content": [{"type": "input_text", "text": event.text}],
                },
            },
            {"type": REALTIME_RESPONSE_CREATE},
        ]
    if isinstance(event, InterruptEvent):
        return [{"type": REALTIME_RESPONSE_CANCEL}]
    return []


class RealtimeRelayBridge:
    """
    Owns one RealtimeEventClient per relay session and pumps events both ways.
    """

    def __init__(self, registry: Optional[SessionRegistry] = None):
        self.registry = registry if registry is not None else SessionRegistry()
        self.clients: Dict[str, RealtimeEventClient] = {}
        self.forward_tasks: Dict[str, asyncio.Task] = {}

    async def create_client(
        self, session_id: str, websocket: WebSocket, config: Optional[OpenAIConfig] = None
    ) -> bool:
        """
        Open the OpenAI side of a session and start forwarding server events.

        Raises:
            ConfigError: If OPENAI_API_KEY is not configured
        """
        config = config or OpenAIConfig.from_env()
        client = RealtimeEventClient(config.api_key, config.realtime_model)
        self.clients[session_id] = client
        if self.registry.get_session(session_id) is None:
            self.registry.add_session(session_id, websocket)

        client.set_connection_handlers(
            lost_handler=lambda: self._handle_connection_lost(session_id),
            restored_handler=lambda: self._handle_connection_restored(session_id),
        )
        connected = await client.connect()
        if not connected:
            logger.warning(f"Initial Realtime connect failed for session {session_id}, retrying")
            client.schedule_reconnect()
        self.forward_tasks[session_id] = asyncio.create_task(
            self._forward_server_events(session_id, websocket)
        )
        logger.info(f"Created OpenAI Realtime client for session: {session_id}")
        return connected

    async def handle_client_event(self, session_id: str, event: ClientEvent) -> bool:
        """
        Apply one browser event to its session.

        Returns:
            bool: False when the event was dropped or could not be delivered
        """
        if isinstance(event, MuteEvent):
            self.registry.set_muted(session_id, event.value)
            logger.info(f"Session {session_id} muted={event.value}")
            return True

        if isinstance(event, AudioChunkEvent) and self.registry.is_muted(session_id):
            return False

        client = self.clients.get(session_id)
        if client is None:
            logger.warning(f"No client found for session: {session_id}")
            return False

        delivered = True
        for realtime_event in to_realtime_events(event):
            delivered = await client.send_event(realtime_event) and delivered
        return delivered

    async def _forward_server_events(self, session_id: str, websocket: WebSocket) -> None:
        client = self.clients.get(session_id)
        if client is None:
            return
        try:
            while True:
                event = await client.receive_event()
                if event is None:
                    if not client.connected:
                        await asyncio.sleep(IDLE_POLL_INTERVAL)
                    continue
                await websocket.send_text(
                    json.dumps({"type": BROKER_EVENT_SERVER_EVENT, "event": event})
                )
        except asyncio.CancelledError:
            logger.info(f"Event forwarding cancelled for session: {session_id}")
        except Exception as e:
            logger.error(f"Error forwarding OpenAI events: {e}", exc_info=True)

    async def _handle_connection_lost(self, session_id: str) -> None:
        logger.warning(f"OpenAI connection lost for session: {session_id}")

    async def _handle_connection_restored(self, session_id: str) -> None:
        logger.info(f"OpenAI connection restored for session: {session_id}")

    async def close_client(self, session_id: str) -> None:
        """Stop forwarding, close the OpenAI connection and forget the session."""
        client = self.clients.pop(session_id, None)
        self.registry.remove_session(session_id)

        task = self.forward_tasks.pop(session_id, None)
        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        if client:
            await client.close()
            logger.info(f"Closed OpenAI Realtime client for session: {session_id}")


# Shared bridge used by the application
bridge = RealtimeRelayBridge()
