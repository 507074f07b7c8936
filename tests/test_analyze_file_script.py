"""Tests for the command line analysis script."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from datalens.clients import UploadReply
from datalens.core.config import AppSettings, LyzrSettings
from datalens.schemas import LocalFile
from datalens.services import AnalysisCoordinator
from scripts import analyze_file

CSV_FILE = LocalFile(name="sales.csv", content=b"region,revenue\n", mime_type="text/csv")


class StubUploader:
    def __init__(self, reply: UploadReply) -> None:
        self.reply = reply

    async def upload(self, files, *, field_name="files"):
        return self.reply


class StubAgent:
    def __init__(self, *results) -> None:
        self.results = list(results)
        self.calls = 0

    async def invoke(self, message, *, agent_id, assets=(), session_id=None):
        self.calls += 1
        return self.results.pop(0)


def _coordinator(uploader, agent) -> AnalysisCoordinator:
    return AnalysisCoordinator(
        uploader=uploader, agent=agent, agent_id="agent-1", prompt="Analyze"
    )


def _settings(api_key: str) -> AppSettings:
    return AppSettings(log_level="WARNING", lyzr=LyzrSettings(api_key=api_key))


def test_sample_flag_prints_sample_insights(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = analyze_file.main(["--sample"])

    assert exit_code == analyze_file.EXIT_OK
    out = capsys.readouterr().out
    assert "# Data Insights" in out
    assert "Rows: 12450" in out


def test_missing_api_key_is_configuration_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = tmp_path / "sales.csv"
    path.write_text("region,revenue\n", encoding="utf-8")

    exit_code = analyze_file.main([str(path)], settings=_settings(""))

    assert exit_code == analyze_file.EXIT_CONFIGURATION_ERROR
    assert "LYZR_API_KEY not configured" in capsys.readouterr().err


def test_missing_file_is_validation_error(tmp_path: Path) -> None:
    exit_code = analyze_file.main(
        [str(tmp_path / "missing.csv")], settings=_settings("cli-key")
    )

    assert exit_code == analyze_file.EXIT_VALIDATION_ERROR


@pytest.mark.anyio("asyncio")
async def test_run_analysis_prints_insights(capsys: pytest.CaptureFixture[str]) -> None:
    uploader = StubUploader(UploadReply(status_code=200, payload={"asset_id": "asset-0000000001"}))
    agent = StubAgent(
        {"success": True, "response": {"result": json.dumps({"executive_summary": "All good."})}}
    )

    exit_code = await analyze_file.run_analysis(_coordinator(uploader, agent), CSV_FILE)

    assert exit_code == analyze_file.EXIT_OK
    out = capsys.readouterr().out
    assert "asset-0000000001" in out
    assert "All good." in out


@pytest.mark.anyio("asyncio")
async def test_run_analysis_rejects_unsupported_file() -> None:
    uploader = StubUploader(UploadReply(status_code=200, payload={}))
    pdf = LocalFile(name="report.pdf", content=b"%PDF", mime_type="application/pdf")

    exit_code = await analyze_file.run_analysis(_coordinator(uploader, StubAgent()), pdf)

    assert exit_code == analyze_file.EXIT_VALIDATION_ERROR


@pytest.mark.anyio("asyncio")
async def test_run_analysis_reports_upload_failure(capsys: pytest.CaptureFixture[str]) -> None:
    uploader = StubUploader(UploadReply(status_code=503, payload={"detail": "maintenance"}))

    exit_code = await analyze_file.run_analysis(_coordinator(uploader, StubAgent()), CSV_FILE)

    assert exit_code == analyze_file.EXIT_UPLOAD_ERROR
    assert "maintenance" in capsys.readouterr().err


@pytest.mark.anyio("asyncio")
async def test_run_analysis_retries_once_before_giving_up(
    capsys: pytest.CaptureFixture[str],
) -> None:
    uploader = StubUploader(UploadReply(status_code=200, payload={"asset_id": "asset-0000000001"}))
    agent = StubAgent({"success": False, "error": "busy"}, {"success": False, "error": "still busy"})

    exit_code = await analyze_file.run_analysis(_coordinator(uploader, agent), CSV_FILE)

    assert exit_code == analyze_file.EXIT_ANALYSIS_ERROR
    assert agent.calls == 2
    assert "still busy" in capsys.readouterr().err
