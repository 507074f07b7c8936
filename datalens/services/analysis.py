"""Service that invokes the analysis agent and normalizes its reply."""

from __future__ import annotations

import logging
from typing import Sequence

from datalens.clients import AgentClient
from datalens.core.errors import AnalysisFailedError
from datalens.schemas import AnalyzeResponse
from datalens.services.insights_normalizer import InsightsNormalizer

logger = logging.getLogger(__name__)


class AnalysisService:
    """Run one analysis over previously uploaded assets."""

    def __init__(
        self,
        client: AgentClient,
        normalizer: InsightsNormalizer,
        *,
        agent_id: str,
        default_prompt: str,
    ) -> None:
        self._client = client
        self._normalizer = normalizer
        self._agent_id = agent_id
        self._default_prompt = default_prompt

    async def analyze(
        self,
        asset_ids: Sequence[str],
        *,
        message: str | None = None,
        agent_id: str | None = None,
        session_id: str | None = None,
    ) -> AnalyzeResponse:
        """Return an ``AnalyzeResponse``; ``NetworkError`` propagates."""
        raw = await self._client.invoke(
            message or self._default_prompt,
            agent_id=agent_id or self._agent_id,
            assets=asset_ids,
            session_id=session_id,
        )
        try:
            normalized = self._normalizer.normalize(raw)
        except AnalysisFailedError as exc:
            logger.warning("Agent reported failure: %s", exc.message)
            return AnalyzeResponse(
                success=False,
                session_id=exc.details.get("session_id"),
                error=exc.message,
            )

        return AnalyzeResponse(
            success=True,
            insights=normalized.insights,
            report_url=normalized.report_url,
            session_id=normalized.session_id,
        )


__all__ = ["AnalysisService"]
