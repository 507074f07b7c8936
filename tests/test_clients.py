try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json

import httpx
import pytest

from datalens.clients import AgentClient, AssetUploadClient
from datalens.core.errors import NetworkError, UploadTransportError
from datalens.schemas import LocalFile
from datalens.utils.http import RetryConfig

pytestmark = pytest.mark.anyio("asyncio")

UPLOAD_URL = "https://assets.test/v3/assets/upload"
INFERENCE_URL = "https://agent.test/v3/inference/chat/"
CSV_FILE = LocalFile(name="sales.csv", content=b"region,revenue\n", mime_type="text/csv")


def _upload_client(handler) -> AssetUploadClient:
    return AssetUploadClient(
        upload_url=UPLOAD_URL,
        api_key="secret-key",
        transport=httpx.MockTransport(handler),
    )


def _agent_client(handler, *, attempts: int = 2) -> AgentClient:
    return AgentClient(
        inference_url=INFERENCE_URL,
        api_key="secret-key",
        user_id="analyst@example.com",
        retry_config=RetryConfig(attempts=attempts, backoff_seconds=0),
        transport=httpx.MockTransport(handler),
    )


async def test_upload_sends_api_key_and_field_name() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"asset_ids": ["asset-0000000001"]})

    reply = await _upload_client(handler).upload([CSV_FILE], field_name="file")

    assert reply.ok
    assert reply.payload == {"asset_ids": ["asset-0000000001"]}
    request = seen[0]
    assert str(request.url) == UPLOAD_URL
    assert request.headers["x-api-key"] == "secret-key"
    assert b'name="file"; filename="sales.csv"' in request.content


async def test_upload_non_json_body_decodes_to_empty_mapping() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>Bad Gateway</html>")

    reply = await _upload_client(handler).upload([CSV_FILE])

    assert not reply.ok
    assert reply.status_code == 502
    assert reply.payload == {}
    assert reply.text == "<html>Bad Gateway</html>"


async def test_upload_connection_failure_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UploadTransportError) as excinfo:
        await _upload_client(handler).upload([CSV_FILE])

    assert "connection refused" in excinfo.value.details["reason"]


async def test_agent_invoke_reshapes_inference_reply() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={
                "response": '{"executive_summary": "ok"}',
                "module_outputs": {"artifact_files": [{"file_url": "https://files/r.pdf"}]},
            },
        )

    raw = await _agent_client(handler).invoke(
        "Analyze", agent_id="agent-1", assets=["asset-0000000001"], session_id="agent-1-abc"
    )

    assert seen[0] == {
        "user_id": "analyst@example.com",
        "agent_id": "agent-1",
        "session_id": "agent-1-abc",
        "message": "Analyze",
        "assets": ["asset-0000000001"],
    }
    assert raw["success"] is True
    assert raw["session_id"] == "agent-1-abc"
    assert raw["response"]["result"] == '{"executive_summary": "ok"}'
    assert raw["module_outputs"]["artifact_files"][0]["file_url"] == "https://files/r.pdf"


async def test_agent_invoke_passes_through_shaped_reply() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "error": "quota"})

    raw = await _agent_client(handler).invoke("Analyze", agent_id="agent-1", session_id="s-1")

    assert raw == {"success": False, "error": "quota", "session_id": "s-1"}


async def test_agent_invoke_error_status_becomes_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"detail": "agent crashed"})

    raw = await _agent_client(handler).invoke("Analyze", agent_id="agent-1", session_id="s-1")

    assert raw == {"success": False, "session_id": "s-1", "error": "agent crashed"}


async def test_agent_invoke_generates_session_id() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="plain text answer")

    raw = await _agent_client(handler).invoke("Analyze", agent_id="agent-1")

    assert raw["session_id"].startswith("agent-1-")
    assert raw["response"]["result"] == "plain text answer"


async def test_agent_invoke_retries_transport_errors_then_raises() -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(NetworkError) as excinfo:
        await _agent_client(handler, attempts=3).invoke(
            "Analyze", agent_id="agent-1", session_id="s-1"
        )

    assert calls["count"] == 3
    assert excinfo.value.details["session_id"] == "s-1"


async def test_agent_invoke_recovers_after_transient_failure() -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] == 1:
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(200, json={"response": "done"})

    raw = await _agent_client(handler).invoke("Analyze", agent_id="agent-1")

    assert calls["count"] == 2
    assert raw["response"]["result"] == "done"
