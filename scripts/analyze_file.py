#!/usr/bin/env python
"""Upload one spreadsheet, run the analysis agent and print the insights.

Example usages::

    python -m scripts.analyze_file data/sales.xlsx
    python -m scripts.analyze_file --sample
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from datalens.core.config import AppSettings, get_settings  # noqa: E402
from datalens.core.errors import ConfigurationError, ErrorKind  # noqa: E402
from datalens.core.logging import configure_logging  # noqa: E402
from datalens.dependencies import build_coordinator  # noqa: E402
from datalens.schemas import LocalFile  # noqa: E402
from datalens.services import (  # noqa: E402
    AnalysisCoordinator,
    CoordinatorState,
    InsightsPresenter,
    SAMPLE_INSIGHTS,
)
from datalens.services.presenter import format_file_size  # noqa: E402

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_UPLOAD_ERROR = 3
EXIT_ANALYSIS_ERROR = 4
EXIT_CONFIGURATION_ERROR = 5


def _print_error(message: str) -> None:
    print(message, file=sys.stderr)


async def run_analysis(coordinator: AnalysisCoordinator, file: LocalFile) -> int:
    """Drive ``coordinator`` through upload and analysis for ``file``."""
    print(f"Uploading {file.name} ({format_file_size(file.size)})...")
    snapshot = await coordinator.select_file(file)
    if snapshot.state is not CoordinatorState.UPLOAD_READY:
        error = snapshot.error
        _print_error(error.message if error else "Upload failed. Please try again.")
        if error and error.kind is ErrorKind.VALIDATION:
            return EXIT_VALIDATION_ERROR
        return EXIT_UPLOAD_ERROR

    print(f"Uploaded; asset IDs: {', '.join(snapshot.asset_ids)}")
    print("Analyzing your data...")
    snapshot = await coordinator.analyze()
    if snapshot.state is CoordinatorState.FAILED:
        snapshot = await coordinator.retry()
    if snapshot.state is not CoordinatorState.RESULTS or snapshot.insights is None:
        error = snapshot.error
        _print_error(error.message if error else "Analysis failed. Please try again.")
        return EXIT_ANALYSIS_ERROR

    print()
    print(InsightsPresenter().render(snapshot.insights, report_url=snapshot.report_url))
    return EXIT_OK


def main(argv: list[str] | None = None, *, settings: AppSettings | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Upload an Excel/CSV file and print AI-generated insights."
    )
    parser.add_argument("path", nargs="?", help="Spreadsheet (.xlsx, .xls or .csv) to analyze.")
    parser.add_argument(
        "--sample",
        action="store_true",
        help="Print the built-in sample insights instead of calling the agent.",
    )
    parser.add_argument(
        "--agent-id",
        dest="agent_id",
        default=None,
        help="Optional override for the configured agent identifier.",
    )
    args = parser.parse_args(argv)

    if args.sample:
        print(InsightsPresenter().render(SAMPLE_INSIGHTS))
        return EXIT_OK
    if not args.path:
        parser.error("a file path is required unless --sample is given")

    settings = settings or get_settings()
    configure_logging(settings.log_level)
    if args.agent_id:
        settings = settings.model_copy(
            update={"lyzr": settings.lyzr.model_copy(update={"agent_id": args.agent_id})}
        )

    try:
        coordinator = build_coordinator(settings)
    except ConfigurationError as exc:
        _print_error(exc.message)
        return EXIT_CONFIGURATION_ERROR

    path = Path(args.path)
    if not path.is_file():
        _print_error(f"File {path} does not exist.")
        return EXIT_VALIDATION_ERROR

    return asyncio.run(run_analysis(coordinator, LocalFile.from_path(path)))


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
