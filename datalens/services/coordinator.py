"""
Upload-then-analyze workflow for a single file.

The coordinator owns everything a client session holds (selected file,
resolved asset identifiers, insights, report URL, error, agent session id) in
one frozen ``CoordinatorSnapshot`` that is swapped whole on each transition::

    idle -> uploading -> upload_ready -> analyzing -> results | failed
                 \\-> idle (with error)          failed -> (retry) analyzing

``reset()`` returns to ``idle`` from any state. Calls already in flight are
not cancelled; their outcome is discarded once a reset has happened.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping, Optional, Protocol, Sequence

import httpx

from datalens.clients import UploadReply
from datalens.core.errors import (
    AnalysisFailedError,
    DataLensError,
    ErrorKind,
    FileValidationError,
    NetworkError,
    ResolutionEmptyError,
    UploadTransportError,
)
from datalens.schemas import InsightsResult, LocalFile
from datalens.services.asset_resolver import AssetIdResolver, describe_response
from datalens.services.file_validation import validate_spreadsheet
from datalens.services.insights_normalizer import InsightsNormalizer
from datalens.utils.http import response_detail

logger = logging.getLogger(__name__)

UPLOAD_FIELD_NAMES: tuple[str, ...] = ("file", "files")
RETRY_WITH_NEXT_FIELD_STATUSES: frozenset[int] = frozenset({400, 422})
NETWORK_ERROR_MESSAGE = "Network error. Please check your connection and try again."
EMPTY_RESOLUTION_MESSAGE = "Upload completed but no asset IDs were returned"


class UploadTransport(Protocol):
    async def upload(
        self, files: Sequence[LocalFile], *, field_name: str = ...
    ) -> UploadReply: ...


class AgentTransport(Protocol):
    async def invoke(
        self,
        message: str,
        *,
        agent_id: str,
        assets: Sequence[str] = ...,
        session_id: str | None = ...,
    ) -> Mapping[str, Any]: ...


class AgentEventListener(Protocol):
    """Session-keyed agent event subscription running beside an analysis."""

    def attach(self, session_id: str) -> None: ...

    def set_processing(self, processing: bool) -> None: ...

    def reset(self) -> None: ...


class CoordinatorState(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    UPLOAD_READY = "upload_ready"
    ANALYZING = "analyzing"
    RESULTS = "results"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class CoordinatorError:
    """Dismissable, human-readable failure shown next to the workflow."""

    kind: ErrorKind
    message: str
    retryable: bool = False
    details: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: DataLensError, *, retryable: bool = False) -> "CoordinatorError":
        return cls(kind=exc.kind, message=exc.message, retryable=retryable, details=dict(exc.details))


@dataclass(frozen=True, slots=True)
class CoordinatorSnapshot:
    state: CoordinatorState = CoordinatorState.IDLE
    file: Optional[LocalFile] = None
    asset_ids: tuple[str, ...] = ()
    insights: Optional[InsightsResult] = None
    report_url: Optional[str] = None
    error: Optional[CoordinatorError] = None
    session_id: Optional[str] = None

    @property
    def can_analyze(self) -> bool:
        return self.state is CoordinatorState.UPLOAD_READY and bool(self.asset_ids)

    @property
    def can_retry(self) -> bool:
        return self.state is CoordinatorState.FAILED and bool(self.asset_ids)


class AnalysisCoordinator:
    """Drive one file through upload, asset resolution and analysis."""

    def __init__(
        self,
        *,
        uploader: UploadTransport,
        agent: AgentTransport,
        agent_id: str,
        prompt: str,
        resolver: AssetIdResolver | None = None,
        normalizer: InsightsNormalizer | None = None,
        listener: AgentEventListener | None = None,
    ) -> None:
        self._uploader = uploader
        self._agent = agent
        self._agent_id = agent_id
        self._prompt = prompt
        self._resolver = resolver or AssetIdResolver()
        self._normalizer = normalizer or InsightsNormalizer()
        self._listener = listener
        self._snapshot = CoordinatorSnapshot()
        self._generation = 0
        self._uploading = False
        self._analyzing = False

    @property
    def snapshot(self) -> CoordinatorSnapshot:
        return self._snapshot

    @property
    def is_busy(self) -> bool:
        return self._uploading or self._analyzing

    async def select_file(self, file: LocalFile) -> CoordinatorSnapshot:
        """Validate ``file`` locally, upload it and resolve its asset IDs."""
        if self.is_busy:
            logger.warning("Ignoring file selection while a request is in flight")
            return self._snapshot

        try:
            validate_spreadsheet(file)
        except FileValidationError as exc:
            self._swap(replace(self._snapshot, error=CoordinatorError.from_exception(exc)))
            return self._snapshot

        generation = self._generation
        self._uploading = True
        self._swap(CoordinatorSnapshot(state=CoordinatorState.UPLOADING, file=file))
        try:
            asset_ids = await self._upload(file)
        except DataLensError as exc:
            outcome = CoordinatorSnapshot(error=CoordinatorError.from_exception(exc))
        except httpx.HTTPError as exc:
            outcome = CoordinatorSnapshot(
                error=CoordinatorError(
                    kind=ErrorKind.UPLOAD_TRANSPORT,
                    message="Upload failed. Please check your connection and try again.",
                    details={"reason": str(exc)},
                )
            )
        else:
            outcome = CoordinatorSnapshot(
                state=CoordinatorState.UPLOAD_READY, file=file, asset_ids=tuple(asset_ids)
            )
        finally:
            if generation == self._generation:
                self._uploading = False

        if generation != self._generation:
            logger.info("Discarding upload outcome after reset")
            return self._snapshot
        self._swap(outcome)
        return self._snapshot

    async def analyze(self) -> CoordinatorSnapshot:
        """Invoke the agent over the held asset IDs."""
        if self._analyzing:
            logger.warning("Analysis already in flight; ignoring request")
            return self._snapshot
        if not self._snapshot.can_analyze:
            logger.warning("Cannot analyze from state %s", self._snapshot.state.value)
            return self._snapshot
        return await self._run_analysis()

    async def retry(self) -> CoordinatorSnapshot:
        """Re-run a failed analysis with the same asset IDs (no re-upload)."""
        if self._analyzing or not self._snapshot.can_retry:
            return self._snapshot
        return await self._run_analysis()

    def reset(self) -> CoordinatorSnapshot:
        """Forget everything and return to ``idle``."""
        self._generation += 1
        self._uploading = False
        self._analyzing = False
        self._swap(CoordinatorSnapshot())
        self._notify("reset")
        return self._snapshot

    def dismiss_error(self) -> CoordinatorSnapshot:
        if self._snapshot.error is not None:
            self._swap(replace(self._snapshot, error=None))
        return self._snapshot

    async def _upload(self, file: LocalFile) -> list[str]:
        """Upload with the ``file`` field, falling back to ``files``."""
        first_field, *fallback_fields = UPLOAD_FIELD_NAMES
        reply = await self._uploader.upload([file], field_name=first_field)
        asset_ids = self._accepted_ids(reply, first_field)
        for field_name in fallback_fields:
            if asset_ids or not (
                reply.ok or reply.status_code in RETRY_WITH_NEXT_FIELD_STATUSES
            ):
                break
            reply = await self._uploader.upload([file], field_name=field_name)
            asset_ids = self._accepted_ids(reply, field_name)

        if asset_ids:
            return asset_ids
        if reply.ok:
            raise ResolutionEmptyError(
                EMPTY_RESOLUTION_MESSAGE, details=describe_response(reply.payload)
            )
        raise UploadTransportError(
            response_detail(reply.payload, f"Upload failed with status {reply.status_code}"),
            status_code=reply.status_code,
            details={"status_code": reply.status_code},
        )

    def _accepted_ids(self, reply: UploadReply, field_name: str) -> list[str]:
        if not reply.ok:
            return []
        asset_ids = self._resolver.resolve_accepted(reply.payload)
        if asset_ids:
            logger.info(
                "Resolved asset IDs",
                extra={"count": len(asset_ids), "field_name": field_name},
            )
        else:
            logger.warning("No usable asset IDs resolved using field %r", field_name)
        return asset_ids

    async def _run_analysis(self) -> CoordinatorSnapshot:
        generation = self._generation
        base = self._snapshot
        session_id = f"{self._agent_id}-{uuid.uuid4().hex[:12]}"

        self._analyzing = True
        self._swap(
            replace(
                base,
                state=CoordinatorState.ANALYZING,
                insights=None,
                report_url=None,
                error=None,
                session_id=session_id,
            )
        )
        self._notify("attach", session_id)
        self._notify("set_processing", True)

        try:
            raw = await self._agent.invoke(
                self._prompt,
                agent_id=self._agent_id,
                assets=list(base.asset_ids),
                session_id=session_id,
            )
            normalized = self._normalizer.normalize(raw)
        except AnalysisFailedError as exc:
            outcome = replace(
                self._snapshot,
                state=CoordinatorState.FAILED,
                error=CoordinatorError.from_exception(exc, retryable=True),
                session_id=exc.details.get("session_id") or session_id,
            )
        except NetworkError as exc:
            outcome = replace(
                self._snapshot,
                state=CoordinatorState.FAILED,
                error=CoordinatorError.from_exception(exc, retryable=True),
            )
        except httpx.HTTPError as exc:
            outcome = replace(
                self._snapshot,
                state=CoordinatorState.FAILED,
                error=CoordinatorError(
                    kind=ErrorKind.NETWORK,
                    message=NETWORK_ERROR_MESSAGE,
                    retryable=True,
                    details={"reason": str(exc)},
                ),
            )
        else:
            outcome = replace(
                self._snapshot,
                state=CoordinatorState.RESULTS,
                insights=normalized.insights,
                report_url=normalized.report_url,
                session_id=normalized.session_id or session_id,
            )
        finally:
            if generation == self._generation:
                self._analyzing = False
                self._notify("set_processing", False)

        if generation != self._generation:
            logger.info("Discarding analysis outcome after reset")
            return self._snapshot
        self._swap(outcome)
        return self._snapshot

    def _swap(self, snapshot: CoordinatorSnapshot) -> None:
        if snapshot.state is not self._snapshot.state:
            logger.debug(
                "Coordinator transition %s -> %s",
                self._snapshot.state.value,
                snapshot.state.value,
            )
        self._snapshot = snapshot

    def _notify(self, method: str, *args: Any) -> None:
        if self._listener is None:
            return
        try:
            getattr(self._listener, method)(*args)
        except Exception:  # the event stream never affects the workflow
            logger.exception("Agent event listener %s() failed", method)


__all__ = [
    "AgentEventListener",
    "AgentTransport",
    "AnalysisCoordinator",
    "CoordinatorError",
    "CoordinatorSnapshot",
    "CoordinatorState",
    "UPLOAD_FIELD_NAMES",
    "UploadTransport",
]
