"""Test helper that normalizes sys.path and environment defaults."""

from __future__ import annotations

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


_DEFAULT_ENV_VARS: dict[str, str] = {
    "LYZR_API_KEY": "test-lyzr-key",
    "LYZR_AGENT_ID": "test-agent",
    "LYZR_INVOKE_BACKOFF_SECONDS": "0",
    "APP_LOG_LEVEL": "WARNING",
}

for key, value in _DEFAULT_ENV_VARS.items():
    os.environ.setdefault(key, value)
