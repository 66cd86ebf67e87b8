import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import WebSocket, WebSocketDisconnect

from realtime_broker.auth import issue_dev_token
from realtime_broker.config.settings import JwtSettings
from realtime_broker.errors import AuthError, ConfigError
from realtime_broker.models.realtime import TextMessageEvent
from realtime_broker.models.session import SessionRegistry
from realtime_broker.websocket_manager import WebSocketManager, extract_token


def relay_socket(headers=None, query_params=None):
    websocket = AsyncMock(spec=WebSocket)
    websocket.headers = headers or {}
    websocket.query_params = query_params or {}
    return websocket


def dev_token(user_id="alice"):
    return issue_dev_token(JwtSettings.from_env(), user_id, "phone", ["voice:session"])


@pytest.fixture(autouse=True)
def optional_auth(monkeypatch):
    monkeypatch.delenv("BFF_REQUIRE_AUTH", raising=False)


@pytest.fixture
def mock_bridge():
    bridge = MagicMock()
    bridge.registry = SessionRegistry()
    bridge.create_client = AsyncMock(return_value=True)
    bridge.handle_client_event = AsyncMock(return_value=True)
    bridge.close_client = AsyncMock()
    return bridge


@pytest.fixture
def websocket_manager(mock_bridge):
    return WebSocketManager(mock_bridge)


@pytest.fixture
def websocket():
    websocket = relay_socket()
    websocket.receive_text.side_effect = [
        json.dumps({"type": "text_message", "text": "hello"}),
        "{not json",
        json.dumps({"type": "bogus"}),
        json.dumps({"type": "audio_chunk", "mimeType": "audio/pcm16"}),
        WebSocketDisconnect(),
    ]
    return websocket


def sent_messages(websocket):
    return [json.loads(c.args[0]) for c in websocket.send_text.await_args_list]


@pytest.mark.asyncio
async def test_handle_websocket_flow(websocket_manager, websocket, mock_bridge):
    """Valid events are routed, invalid ones answered with errors, session cleaned up"""
    await websocket_manager.handle_websocket(websocket)

    websocket.accept.assert_awaited_once()
    messages = sent_messages(websocket)

    assert messages[0]["type"] == "session.created"
    assert "userId" not in messages[0]
    session_id = messages[0]["sessionId"]
    assert messages[1:] == [
        {"type": "error", "message": "Invalid JSON"},
        {"type": "error", "message": "Invalid client event"},
        {"type": "error", "message": "Invalid client event"},
    ]

    mock_bridge.create_client.assert_awaited_once_with(session_id, websocket)
    mock_bridge.handle_client_event.assert_awaited_once()
    routed_session, routed_event = mock_bridge.handle_client_event.await_args.args
    assert routed_session == session_id
    assert isinstance(routed_event, TextMessageEvent)
    assert routed_event.text == "hello"
    mock_bridge.close_client.assert_awaited_once_with(session_id)


@pytest.mark.asyncio
async def test_missing_configuration_closes_session(websocket_manager, mock_bridge):
    websocket = relay_socket()
    mock_bridge.create_client.side_effect = ConfigError("Missing required env vars: OPENAI_API_KEY.")

    await websocket_manager.handle_websocket(websocket)

    assert sent_messages(websocket) == [
        {"type": "error", "message": "Missing required env vars: OPENAI_API_KEY."}
    ]
    websocket.close.assert_awaited_once_with(code=1011)
    websocket.receive_text.assert_not_awaited()
    mock_bridge.close_client.assert_awaited_once()


@pytest.mark.asyncio
async def test_session_registered_while_connected(websocket_manager, mock_bridge):
    websocket = relay_socket()
    seen = []

    async def receive_text():
        seen.append(len(mock_bridge.registry))
        raise WebSocketDisconnect()

    websocket.receive_text.side_effect = receive_text

    await websocket_manager.handle_websocket(websocket)

    assert seen == [1]


@pytest.mark.asyncio
async def test_header_token_identifies_user(websocket_manager, mock_bridge, jwt_env):
    websocket = relay_socket(headers={"authorization": f"Bearer {dev_token()}"})
    users = []

    async def receive_text():
        users.extend(session.user_id for session in mock_bridge.registry.active_sessions.values())
        raise WebSocketDisconnect()

    websocket.receive_text.side_effect = receive_text

    await websocket_manager.handle_websocket(websocket)

    created = sent_messages(websocket)[0]
    assert created["type"] == "session.created"
    assert created["userId"] == "alice"
    assert users == ["alice"]


@pytest.mark.asyncio
async def test_query_token_identifies_user(websocket_manager, jwt_env):
    websocket = relay_socket(query_params={"token": dev_token("bob")})
    websocket.receive_text.side_effect = WebSocketDisconnect()

    await websocket_manager.handle_websocket(websocket)

    assert sent_messages(websocket)[0]["userId"] == "bob"


@pytest.mark.asyncio
async def test_rejected_token_closes_before_session(websocket_manager, mock_bridge, jwt_env):
    websocket = relay_socket(headers={"authorization": "Bearer not-a-jwt"})

    await websocket_manager.handle_websocket(websocket)

    (message,) = sent_messages(websocket)
    assert message["type"] == "error"
    assert message["message"].startswith("JWT verification failed")
    websocket.close.assert_awaited_once_with(code=1008)
    mock_bridge.create_client.assert_not_awaited()
    mock_bridge.close_client.assert_not_awaited()
    assert len(mock_bridge.registry) == 0


@pytest.mark.asyncio
async def test_required_auth_without_token(websocket_manager, mock_bridge, monkeypatch):
    monkeypatch.setenv("BFF_REQUIRE_AUTH", "true")
    websocket = relay_socket()

    await websocket_manager.handle_websocket(websocket)

    assert sent_messages(websocket) == [
        {"type": "error", "message": "Missing Authorization (header or token query param)"}
    ]
    websocket.close.assert_awaited_once_with(code=1008)
    mock_bridge.create_client.assert_not_awaited()


@pytest.mark.asyncio
async def test_token_without_jwt_configuration(websocket_manager, mock_bridge, monkeypatch):
    monkeypatch.delenv("BFF_JWT_SECRET", raising=False)
    websocket = relay_socket(query_params={"token": "abc"})

    await websocket_manager.handle_websocket(websocket)

    websocket.close.assert_awaited_once_with(code=1011)
    mock_bridge.create_client.assert_not_awaited()


def test_extract_token_prefers_header():
    websocket = relay_socket(headers={"authorization": "Bearer from-header"}, query_params={"token": "q"})
    assert extract_token(websocket) == "from-header"


def test_extract_token_from_query():
    assert extract_token(relay_socket(query_params={"token": "q"})) == "q"
    assert extract_token(relay_socket(query_params={"token": ""})) is None
    assert extract_token(relay_socket()) is None


def test_extract_token_malformed_header():
    with pytest.raises(AuthError, match="Malformed Authorization header"):
        extract_token(relay_socket(headers={"authorization": "Basic abc"}))
