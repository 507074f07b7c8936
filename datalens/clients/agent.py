"""Client for invoking the hosted analysis agent."""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Mapping, Sequence

import httpx

from datalens.core.errors import NetworkError
from datalens.utils.http import RetryConfig, request_with_retry, response_detail

logger = logging.getLogger(__name__)


class AgentClient:
    """Send an instruction plus asset references to the agent inference API.

    Replies are reshaped into the ``AgentInvokeResponse`` mapping consumed by
    the insights normalizer::

        {"success": bool, "session_id": str, "response": {"result": ...,
         "message": ...}, "module_outputs": {...}, "error": str}
    """

    def __init__(
        self,
        *,
        inference_url: str,
        api_key: str,
        user_id: str,
        timeout: float = 120.0,
        retry_config: RetryConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._inference_url = inference_url
        self._api_key = api_key
        self._user_id = user_id
        self._timeout = timeout
        self._retry_config = retry_config or RetryConfig()
        self._transport = transport

    async def invoke(
        self,
        message: str,
        *,
        agent_id: str,
        assets: Sequence[str] = (),
        session_id: str | None = None,
    ) -> dict[str, Any]:
        """Invoke ``agent_id`` and return an ``AgentInvokeResponse`` mapping.

        Raises ``NetworkError`` when the request cannot be completed.
        """
        session_id = session_id or f"{agent_id}-{uuid.uuid4().hex[:12]}"
        body = {
            "user_id": self._user_id,
            "agent_id": agent_id,
            "session_id": session_id,
            "message": message,
            "assets": list(assets),
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await request_with_retry(
                    client.post,
                    self._inference_url,
                    json=body,
                    headers={"x-api-key": self._api_key},
                    retry_config=self._retry_config,
                )
        except httpx.TransportError as exc:
            logger.error("Agent invocation failed: %s", exc, extra={"agent_id": agent_id})
            raise NetworkError(
                "Network error. Please check your connection and try again.",
                details={"reason": str(exc), "session_id": session_id},
            ) from exc

        return _to_invoke_response(response, session_id=session_id)


def _decode_body(response: httpx.Response) -> Any:
    text = response.text
    if not text:
        return {}
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _to_invoke_response(response: httpx.Response, *, session_id: str) -> dict[str, Any]:
    payload = _decode_body(response)

    if not response.is_success:
        fallback = payload if isinstance(payload, str) and payload else (
            f"Agent request failed with status {response.status_code}"
        )
        error = response_detail(payload, fallback)
        logger.error(
            "Agent API error: %s",
            error,
            extra={"status_code": response.status_code, "session_id": session_id},
        )
        return {"success": False, "session_id": session_id, "error": error}

    if isinstance(payload, Mapping) and "success" in payload:
        # Already shaped like an AgentInvokeResponse (e.g. a proxy in front of the agent).
        shaped = dict(payload)
        shaped.setdefault("session_id", session_id)
        return shaped

    if isinstance(payload, Mapping):
        reply_session = payload.get("session_id")
        return {
            "success": True,
            "session_id": reply_session if isinstance(reply_session, str) else session_id,
            "response": {
                "status": "success",
                "result": payload.get("response"),
                "message": payload.get("message"),
            },
            "module_outputs": payload.get("module_outputs") or {},
        }

    return {
        "success": True,
        "session_id": session_id,
        "response": {"status": "success", "result": payload},
        "module_outputs": {},
    }


__all__ = ["AgentClient"]
