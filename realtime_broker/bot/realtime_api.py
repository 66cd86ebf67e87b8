"""
WebSocket client for the OpenAI Realtime API.

The client speaks the JSON event protocol: ``send_event`` serializes a client
event, and a background receive loop decodes server events into a bounded
queue read with ``receive_event``. A dropped or failed connection schedules a
single background reconnect task that retries with linear backoff.
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK

from realtime_broker.config.constants import LOGGER_NAME, REALTIME_URL

logger = logging.getLogger(LOGGER_NAME)

MAX_RECONNECT_ATTEMPTS = 5
RECONNECT_DELAY = 2  # seconds, multiplied by the attempt number
CONNECTION_TIMEOUT = 30  # seconds
SEND_TIMEOUT = 5.0  # seconds

WS_MAX_SIZE = 16 * 1024 * 1024  # audio deltas can be large
EVENT_QUEUE_SIZE = 64
WS_PING_INTERVAL = 5
WS_PING_TIMEOUT = 10

ConnectionHandler = Callable[[], Awaitable[None]]


class RealtimeEventClient:
    """
    JSON event client for one OpenAI Realtime session.
    """

    def __init__(self, api_key: str, model: str, url: str = REALTIME_URL):
        self.api_key = api_key
        self.model = model
        self.url = url
        self.ws = None
        self.event_queue: asyncio.Queue = asyncio.Queue(maxsize=EVENT_QUEUE_SIZE)
        self._recv_task: Optional[asyncio.Task] = None
        self._reconnect_task: Optional[asyncio.Task] = None
        self._connection_active = False
        self._reconnect_attempts = 0
        self._is_closing = False
        self._connection_lost_handler: Optional[ConnectionHandler] = None
        self._connection_restored_handler: Optional[ConnectionHandler] = None

    @property
    def connected(self) -> bool:
        return self._connection_active

    @property
    def endpoint(self) -> str:
        return f"{self.url}?model={self.model}"

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "OpenAI-Beta": "realtime=v1"}

    async def _open_socket(self):
        return await asyncio.wait_for(
            websockets.connect(
                self.endpoint,
                max_size=WS_MAX_SIZE,
                ping_interval=WS_PING_INTERVAL,
                ping_timeout=WS_PING_TIMEOUT,
                compression=None,
                additional_headers=self._headers(),
            ),
            timeout=CONNECTION_TIMEOUT,
        )

    async def _drop_socket(self) -> None:
        await self._cancel_recv_task()
        ws, self.ws = self.ws, None
        if ws is not None:
            try:
                await ws.close()
            except Exception as e:
                logger.debug(f"Ignoring error while closing stale Realtime socket: {e}")

    def _drain_queue(self) -> int:
        """Discard events left over from a previous connection."""
        dropped = 0
        while not self.event_queue.empty():
            self.event_queue.get_nowait()
            dropped += 1
        return dropped

    async def connect(self) -> bool:
        """
        Open (or reopen) the Realtime socket and start the receive loop.

        Returns:
            bool: True if the socket is open
        """
        if self._is_closing:
            logger.warning("Realtime client is closing, not connecting")
            return False

        self._connection_active = False
        await self._drop_socket()

        try:
            self.ws = await self._open_socket()
        except asyncio.TimeoutError:
            logger.error(f"Realtime connect to {self.model} timed out after {CONNECTION_TIMEOUT}s")
            return False
        except Exception as e:
            logger.error(f"Realtime connect to {self.model} failed: {e}")
            return False

        restored = self._reconnect_attempts > 0
        self._connection_active = True
        self._reconnect_attempts = 0
        self._recv_task = asyncio.create_task(self._recv_loop())
        logger.info(f"Realtime session open on {self.model}")

        if restored:
            dropped = self._drain_queue()
            if dropped:
                logger.info(f"Dropped {dropped} events from the previous Realtime connection")
            if self._connection_restored_handler:
                await self._connection_restored_handler()
        return True

    async def reconnect(self) -> bool:
        """
        Retry ``connect`` until it succeeds or this round's attempt budget is spent.

        Returns:
            bool: True once a connection is restored
        """
        attempt = 0
        while not self._is_closing and attempt < MAX_RECONNECT_ATTEMPTS:
            attempt += 1
            self._reconnect_attempts = attempt
            delay = RECONNECT_DELAY * attempt
            logger.info(f"Realtime reconnect {attempt}/{MAX_RECONNECT_ATTEMPTS} in {delay}s")
            await asyncio.sleep(delay)
            if await self.connect():
                return True

        if not self._is_closing:
            logger.error(f"Giving up on Realtime session after {MAX_RECONNECT_ATTEMPTS} attempts")
        return False

    def schedule_reconnect(self) -> Optional[asyncio.Task]:
        """Start a background reconnect unless one is already running."""
        if self._is_closing:
            return None
        if self._reconnect_task is None or self._reconnect_task.done():
            self._reconnect_task = asyncio.create_task(self.reconnect())
        return self._reconnect_task

    async def send_event(self, event: Dict[str, Any]) -> bool:
        """
        Send one client event.

        A missing or broken connection schedules a reconnect; the event itself
        is not retried.

        Returns:
            bool: True if the event was written to the socket
        """
        event_type = event.get("type")
        if not self._connection_active or self.ws is None:
            logger.warning(f"Dropping {event_type}: Realtime connection is down")
            self.schedule_reconnect()
            return False

        try:
            await asyncio.wait_for(self.ws.send(json.dumps(event)), timeout=SEND_TIMEOUT)
            return True
        except (asyncio.TimeoutError, ConnectionClosed) as e:
            logger.warning(f"Sending {event_type} failed, reconnecting: {e!r}")
            self._connection_active = False
            self.schedule_reconnect()
            return False
        except Exception as e:
            logger.error(f"Sending {event_type} failed: {e}")
            return False

    def _decode(self, message: Any) -> Optional[Dict[str, Any]]:
        if isinstance(message, bytes):
            logger.debug(f"Skipping binary Realtime frame ({len(message)} bytes)")
            return None
        try:
            event = json.loads(message)
        except json.JSONDecodeError:
            logger.warning(f"Skipping non-JSON Realtime frame: {message[:100]}")
            return None
        if not isinstance(event, dict):
            return None
        if event.get("type") == "error":
            logger.error(f"Realtime server error event: {event.get('error', event)}")
        return event

    async def _recv_loop(self) -> None:
        """Queue every server event until the socket closes."""
        try:
            async for message in self.ws:
                event = self._decode(message)
                if event is not None:
                    await self.event_queue.put(event)
        except ConnectionClosedOK:
            logger.info("Realtime socket closed by server")
        except ConnectionClosed as e:
            logger.warning(f"Realtime socket dropped: {e}")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Realtime receive loop failed: {e}", exc_info=True)

        self._connection_active = False
        if self._connection_lost_handler:
            try:
                await self._connection_lost_handler()
            except Exception as e:
                logger.error(f"Connection lost handler failed: {e}")
        self.schedule_reconnect()

    async def receive_event(self, timeout: float = 2.0) -> Optional[Dict[str, Any]]:
        """
        Return the next server event, or None if nothing arrives in time.
        """
        if not self.event_queue.empty():
            return self.event_queue.get_nowait()
        if not self._connection_active:
            return None
        try:
            return await asyncio.wait_for(self.event_queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None

    def set_connection_handlers(
        self,
        lost_handler: Optional[ConnectionHandler] = None,
        restored_handler: Optional[ConnectionHandler] = None,
    ) -> None:
        self._connection_lost_handler = lost_handler
        self._connection_restored_handler = restored_handler

    async def _cancel_recv_task(self) -> None:
        task, self._recv_task = self._recv_task, None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def close(self) -> None:
        """Stop reconnecting, cancel the receive loop and close the socket."""
        self._is_closing = True
        self._connection_active = False

        reconnect_task, self._reconnect_task = self._reconnect_task, None
        if reconnect_task is not None and not reconnect_task.done():
            reconnect_task.cancel()
            try:
                await reconnect_task
            except asyncio.CancelledError:
                pass

        await self._drop_socket()
        self._drain_queue()
        logger.info(f"Realtime client for {self.model} closed")
