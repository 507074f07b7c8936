try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json

import httpx
import pytest

from datalens.clients import AgentClient
from datalens.core.config import AppSettings, LyzrSettings
from datalens.main import app
from datalens.services import AnalysisService, InsightsNormalizer
from datalens.utils.http import RetryConfig

pytestmark = pytest.mark.anyio("asyncio")


class AgentStub:
    def __init__(self) -> None:
        self.responses: list[httpx.Response | Exception] = []
        self.bodies: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.bodies.append(json.loads(request.content))
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture()
def agent():
    from datalens import dependencies

    stub = AgentStub()
    service = AnalysisService(
        AgentClient(
            inference_url="https://agent.test/chat/",
            api_key="server-key",
            user_id="analyst@example.com",
            retry_config=RetryConfig(attempts=1, backoff_seconds=0),
            transport=httpx.MockTransport(stub),
        ),
        InsightsNormalizer(),
        agent_id="agent-1",
        default_prompt="Analyze this data file",
    )

    app.dependency_overrides.clear()
    app.dependency_overrides.update(
        {
            dependencies.get_app_settings: lambda: AppSettings(
                lyzr=LyzrSettings(api_key="server-key")
            ),
            dependencies.get_analysis_service: lambda: service,
        }
    )

    yield stub

    app.dependency_overrides.clear()


@pytest.fixture()
async def client(agent):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as test_client:
        yield test_client


async def test_analyze_returns_normalized_insights(agent, client):
    agent.responses.append(
        httpx.Response(
            200,
            json={
                "session_id": "agent-1-session",
                "response": json.dumps(
                    {
                        "executive_summary": "Revenue is concentrated in Q4.",
                        "statistics": {"total_rows": 120, "total_columns": 8},
                    }
                ),
                "module_outputs": {"artifact_files": [{"file_url": "https://files/report.pdf"}]},
            },
        )
    )

    response = await client.post("/api/analyze", json={"asset_ids": ["asset-0000000001"]})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["insights"]["executive_summary"] == "Revenue is concentrated in Q4."
    assert body["insights"]["statistics"]["total_rows"] == 120
    assert body["report_url"] == "https://files/report.pdf"
    assert body["session_id"] == "agent-1-session"
    assert agent.bodies[0]["assets"] == ["asset-0000000001"]
    assert agent.bodies[0]["message"] == "Analyze this data file"
    assert agent.bodies[0]["agent_id"] == "agent-1"


async def test_analyze_honours_overrides(agent, client):
    agent.responses.append(httpx.Response(200, json={"response": "plain summary"}))

    response = await client.post(
        "/api/analyze",
        json={
            "asset_ids": ["asset-0000000001"],
            "message": "Only list anomalies",
            "agent_id": "agent-2",
            "session_id": "agent-2-existing",
        },
    )

    body = response.json()
    assert body["insights"]["executive_summary"] == "plain summary"
    assert agent.bodies[0]["message"] == "Only list anomalies"
    assert agent.bodies[0]["agent_id"] == "agent-2"
    assert agent.bodies[0]["session_id"] == "agent-2-existing"


async def test_analyze_agent_failure_is_reported_in_body(agent, client):
    agent.responses.append(httpx.Response(500, json={"detail": "agent overloaded"}))

    response = await client.post("/api/analyze", json={"asset_ids": ["asset-0000000001"]})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "agent overloaded"
    assert body["insights"] is None


async def test_analyze_requires_asset_ids(agent, client):
    response = await client.post("/api/analyze", json={"asset_ids": []})

    assert response.status_code == 422
    assert agent.bodies == []


async def test_analyze_network_failure_is_bad_gateway(agent, client):
    agent.responses.append(httpx.ConnectError("unreachable"))

    response = await client.post(
        "/api/analyze",
        json={"asset_ids": ["asset-0000000001"], "session_id": "agent-1-s"},
    )

    assert response.status_code == 502
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Network error. Please check your connection and try again."
    assert body["session_id"] == "agent-1-s"


async def test_analyze_without_api_key_is_server_error(agent, client):
    from datalens import dependencies

    app.dependency_overrides[dependencies.get_app_settings] = lambda: AppSettings(
        lyzr=LyzrSettings(api_key="")
    )

    response = await client.post("/api/analyze", json={"asset_ids": ["asset-0000000001"]})

    assert response.status_code == 500
    assert response.json()["error"] == "LYZR_API_KEY not configured on server"
    assert agent.bodies == []


async def test_sample_insights_endpoint(client):
    response = await client.get("/api/insights/sample")

    assert response.status_code == 200
    body = response.json()
    assert body["statistics"]["total_rows"] == 12450
    assert len(body["key_findings"]) == 5
    assert body["executive_summary"]
