try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from datalens.core.config import (
    DEFAULT_ASSET_ID_KEYS,
    AppSettings,
    LyzrSettings,
    ResolverSettings,
)
from datalens.core.errors import ConfigurationError
from datalens.dependencies import build_coordinator
from datalens.dependencies.clients import build_asset_resolver


def test_resolver_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("ASSET_ID_KEY_NAMES", "ASSET_ID_MIN_LENGTH", "ASSET_ID_MAX_DEPTH"):
        monkeypatch.delenv(key, raising=False)

    settings = ResolverSettings()

    assert settings.key_names == DEFAULT_ASSET_ID_KEYS
    assert settings.key_names[0] == "asset_id"
    assert (settings.min_length, settings.max_depth) == (10, 10)


def test_resolver_key_names_from_comma_separated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ASSET_ID_KEY_NAMES", "uuid, ref ,,")
    monkeypatch.setenv("ASSET_ID_MAX_DEPTH", "4")

    settings = ResolverSettings()

    assert settings.key_names == ("uuid", "ref")
    assert settings.max_depth == 4


def test_lyzr_settings_read_prefixed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LYZR_API_KEY", "from-env")
    monkeypatch.setenv("LYZR_TIMEOUT_SECONDS", "30")

    settings = AppSettings()

    assert settings.lyzr.api_key == "from-env"
    assert settings.lyzr.timeout_seconds == 30.0


def test_invoke_attempts_must_be_positive() -> None:
    with pytest.raises(ValueError):
        LyzrSettings(invoke_attempts=0)


def test_resolver_is_built_from_settings() -> None:
    settings = AppSettings(resolver=ResolverSettings(key_names=("uuid",), min_length=3))

    resolver = build_asset_resolver(settings)

    assert resolver.resolve({"uuid": "u-1", "id": "ignored-identifier"}) == ["u-1"]
    assert resolver.resolve(["abc"]) == ["abc"]


def test_coordinator_requires_api_key() -> None:
    settings = AppSettings(lyzr=LyzrSettings(api_key=""))

    with pytest.raises(ConfigurationError):
        build_coordinator(settings)
