from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from realtime_broker import __version__
from realtime_broker.auth.jwt_verifier import JwtVerifier
from realtime_broker.config.settings import JwtSettings
from realtime_broker.errors import InsufficientParticipantsError, UpstreamError
from realtime_broker.main import app, websocket_manager
from realtime_broker.models.contest import ExpertContestResponse
from realtime_broker.models.creative import CreativeModelResponse, CreativeSingleResult

client = TestClient(app)

CONTEST_BODY = {
    "contestId": "contest-1",
    "scenario": "support",
    "language": "ja",
    "userPrompt": "Wi-Fi drops every hour",
    "evaluationRubric": "accuracy",
    "experts": [
        {"id": "net", "title": "Network", "instructions": "i", "focus": "f"},
        {"id": "hw", "title": "Hardware", "instructions": "i", "focus": "f"},
    ],
}


@pytest.fixture
def openai_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")


@pytest.fixture
def no_openai_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


@pytest.fixture
def dev_environment(monkeypatch):
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.delenv("BFF_ALLOW_DEV_TOKENS", raising=False)


def test_health_check(openai_key):
    """Test the health check endpoint returns correct response"""
    response = client.get("/health")
    assert response.status_code == 200

    response_json = response.json()
    assert response_json["status"] == "healthy"
    assert response_json["openai_api_key_configured"] is True
    assert response_json["active_sessions"] == 0
    assert "Access-Control-Allow-Origin" not in response.headers


def test_root_endpoint():
    """Test the root endpoint returns the correct API information"""
    response = client.get("/")
    assert response.status_code == 200

    response_json = response.json()
    assert response_json["name"] == "Realtime Broker"
    assert response_json["version"] == __version__
    assert "/ws" in response_json["endpoints"]
    assert "/api/expertContest" in response_json["endpoints"]


@pytest.mark.asyncio
async def test_websocket_endpoint():
    """Test that websocket endpoint calls the handle_websocket method"""
    with patch.object(websocket_manager, "handle_websocket", new=AsyncMock()) as mock_handle:
        mock_websocket = MagicMock()

        websocket_route = next(route for route in app.routes if route.path == "/ws")
        await websocket_route.endpoint(mock_websocket)

        mock_handle.assert_awaited_once_with(mock_websocket)


def test_websocket_without_api_key_reports_error(no_openai_key):
    with client.websocket_connect("/ws") as websocket:
        message = websocket.receive_json()
    assert message["type"] == "error"
    assert "OPENAI_API_KEY" in message["message"]


class TestCors:
    def test_preflight(self, monkeypatch):
        monkeypatch.setenv("CORS_ALLOW_ORIGIN", "https://app.example.com")
        response = client.options("/api/expertContest")
        assert response.status_code == 204
        assert response.headers["Access-Control-Allow-Origin"] == "https://app.example.com"
        assert response.headers["Access-Control-Allow-Methods"] == "GET,POST,OPTIONS"
        assert response.headers["Access-Control-Allow-Headers"] == "Content-Type, x-bff-key"

    def test_api_responses_carry_headers(self, monkeypatch):
        monkeypatch.delenv("CORS_ALLOW_ORIGIN", raising=False)
        response = client.post("/api/expertContest", json={})
        assert response.headers["Access-Control-Allow-Origin"] == "*"


class TestDevToken:
    def test_hidden_in_production(self, monkeypatch, jwt_env):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.delenv("BFF_ALLOW_DEV_TOKENS", raising=False)
        response = client.post("/api/auth/token", json={})
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}

    def test_allowed_in_production_when_enabled(self, monkeypatch, jwt_env):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("BFF_ALLOW_DEV_TOKENS", "true")
        assert client.post("/api/auth/token", json={}).status_code == 200

    def test_issues_verifiable_token(self, dev_environment, jwt_env):
        response = client.post(
            "/api/auth/token", json={"userId": "alice", "scopes": ["voice:session", "chat"]}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["expiresInSeconds"] == 900

        context = JwtVerifier(JwtSettings.from_env()).verify(body["token"])
        assert context.userId == "alice"
        assert context.deviceId == "dev-device"
        assert context.scopes == ["voice:session", "chat"]

    def test_invalid_json_falls_back_to_defaults(self, dev_environment, jwt_env):
        response = client.post(
            "/api/auth/token", content="not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 200
        context = JwtVerifier(JwtSettings.from_env()).verify(response.json()["token"])
        assert context.userId == "dev-user"

    def test_invalid_fields_fall_back_to_defaults(self, dev_environment, jwt_env):
        response = client.post(
            "/api/auth/token", json={"userId": None, "scopes": "voice:session", "locale": 7}
        )
        assert response.status_code == 200
        context = JwtVerifier(JwtSettings.from_env()).verify(response.json()["token"])
        assert context.userId == "dev-user"
        assert context.scopes == ["voice:session"]
        assert context.locale is None

    def test_missing_jwt_configuration(self, dev_environment, monkeypatch):
        monkeypatch.delenv("BFF_JWT_SECRET", raising=False)
        response = client.post("/api/auth/token", json={})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to issue token"}


class TestResponsesProxy:
    def test_body_must_be_object(self, openai_key):
        response = client.post("/api/responses", json=["x"])
        assert response.status_code == 400

    def test_forwards_request(self, openai_key, monkeypatch):
        monkeypatch.setenv("OPENAI_RESPONSES_MODEL", "resp-model")
        with patch(
            "realtime_broker.main.proxy_response", new=AsyncMock(return_value={"id": "resp_1"})
        ) as mock_proxy:
            response = client.post("/api/responses", json={"input": "hi"})

        assert response.status_code == 200
        assert response.json() == {"id": "resp_1"}
        _, body, fallback_model = mock_proxy.await_args.args
        assert body == {"input": "hi"}
        assert fallback_model == "resp-model"

    def test_upstream_failure(self, openai_key):
        with patch(
            "realtime_broker.main.proxy_response",
            new=AsyncMock(side_effect=UpstreamError("Failed to create response")),
        ):
            response = client.post("/api/responses", json={"input": "hi"})

        assert response.status_code == 502
        assert response.json() == {
            "error": "Failed to process response request",
            "details": "Failed to create response",
        }

    def test_missing_api_key(self, no_openai_key):
        response = client.post("/api/responses", json={"input": "hi"})
        assert response.status_code == 500
        assert "OPENAI_API_KEY" in response.json()["details"]


class TestExpertContest:
    def test_missing_body(self, openai_key):
        response = client.post("/api/expertContest")
        assert response.status_code == 400
        assert response.json() == {"error": "Missing request body"}

    def test_missing_field(self, openai_key):
        body = {k: v for k, v in CONTEST_BODY.items() if k != "scenario"}
        response = client.post("/api/expertContest", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Missing or invalid field: scenario"}

    def test_blank_field(self, openai_key):
        response = client.post("/api/expertContest", json={**CONTEST_BODY, "userPrompt": "  "})
        assert response.status_code == 400
        assert response.json() == {"error": "Missing or invalid field: userPrompt"}

    def test_too_few_experts(self, openai_key):
        body = {**CONTEST_BODY, "experts": CONTEST_BODY["experts"][:1]}
        response = client.post("/api/expertContest", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "At least two experts are required"}

    def test_missing_api_key(self, no_openai_key):
        response = client.post("/api/expertContest", json=CONTEST_BODY)
        assert response.status_code == 500
        assert response.json() == {"error": "OPENAI_API_KEY is not configured"}

    def test_success(self, openai_key):
        result = ExpertContestResponse(
            contestId="contest-1",
            scenario="support",
            winnerId="net",
            runnerUpId="hw",
            judgeSummary="net was clearer",
            totalLatencyMs=1234.5,
            submissions=[],
            scores=[],
            metadata={"tieBreaker": "confidence"},
        )
        with patch("realtime_broker.main.create_openai_client"), patch(
            "realtime_broker.main.ExpertContestRunner"
        ) as mock_runner:
            mock_runner.return_value.run = AsyncMock(return_value=result)
            response = client.post("/api/expertContest", json=CONTEST_BODY)

        assert response.status_code == 200
        assert response.json()["winnerId"] == "net"
        assert response.json()["metadata"]["tieBreaker"] == "confidence"

    def test_insufficient_participants(self, openai_key):
        with patch("realtime_broker.main.create_openai_client"), patch(
            "realtime_broker.main.ExpertContestRunner"
        ) as mock_runner:
            mock_runner.return_value.run = AsyncMock(
                side_effect=InsufficientParticipantsError("Judge response did not contain enough valid scores")
            )
            response = client.post("/api/expertContest", json=CONTEST_BODY)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to run expert contest"}

    def test_upstream_failure(self, openai_key):
        with patch("realtime_broker.main.create_openai_client"), patch(
            "realtime_broker.main.ExpertContestRunner"
        ) as mock_runner:
            mock_runner.return_value.run = AsyncMock(
                side_effect=UpstreamError("Judge panel returned no structured output")
            )
            response = client.post("/api/expertContest", json=CONTEST_BODY)

        assert response.status_code == 502
        assert response.json() == {"error": "Failed to run expert contest"}

    def test_unexpected_failure(self, openai_key):
        with patch("realtime_broker.main.create_openai_client"), patch(
            "realtime_broker.main.ExpertContestRunner"
        ) as mock_runner:
            mock_runner.return_value.run = AsyncMock(side_effect=RuntimeError("boom"))
            response = client.post("/api/expertContest", json=CONTEST_BODY)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to run expert contest"}


class TestCreativeSandbox:
    def test_missing_api_key(self, no_openai_key):
        response = client.post(
            "/api/creativeSandbox/single", json={"role": "copywriter", "userPrompt": "x"}
        )
        assert response.status_code == 500
        assert response.json() == {"error": "OPENAI_API_KEY is not configured"}

    def test_invalid_role(self, openai_key):
        response = client.post("/api/creativeSandbox/single", json={"role": "poet", "userPrompt": "x"})
        assert response.status_code == 400

    def test_single_success_is_logged(self, openai_key):
        result = CreativeSingleResult(
            role="copywriter",
            prompt="x",
            answer=CreativeModelResponse(text="夜を、味方に。", latencyMs=10.0, model="gpt-5-mini"),
        )
        with patch("realtime_broker.main.create_openai_client"), patch(
            "realtime_broker.main.CreativeSandboxRunner"
        ) as mock_runner, patch("realtime_broker.main.creative_log") as mock_log:
            mock_runner.return_value.run_single = AsyncMock(return_value=result)
            response = client.post(
                "/api/creativeSandbox/single", json={"role": "copywriter", "userPrompt": "x"}
            )

        assert response.status_code == 200
        assert response.json()["answer"]["text"] == "夜を、味方に。"
        kind, payload = mock_log.record.call_args.args
        assert kind == "single"
        assert payload.role == "copywriter"
        assert mock_log.record.call_args.kwargs["response"] == result

    def test_parallel_failure_is_logged(self, openai_key):
        with patch("realtime_broker.main.create_openai_client"), patch(
            "realtime_broker.main.CreativeSandboxRunner"
        ) as mock_runner, patch("realtime_broker.main.creative_log") as mock_log:
            mock_runner.return_value.run_parallel = AsyncMock(side_effect=UpstreamError("judge down"))
            response = client.post(
                "/api/creativeSandbox/parallel",
                json={"role": "filmCritic", "userPrompt": "テーマを整理して"},
            )

        assert response.status_code == 502
        assert response.json() == {"error": "Failed to run parallel creative response"}
        assert mock_log.record.call_args.kwargs["error"] == "judge down"
