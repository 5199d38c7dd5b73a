from __future__ import annotations

import pytest

from yid.config import YIDConfig, load_config
from yid.models import DEFAULT_PATH, LanguageCode, NetworkType


_VARS = ("YID_NETWORK", "YID_LANGUAGE", "YID_DERIVATION_PATH", "YID_STRICT_LANGUAGE")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_when_unset() -> None:
    cfg = load_config()
    assert cfg == YIDConfig()
    assert cfg.network is NetworkType.YEYING
    assert cfg.language is LanguageCode.ZH_CH
    assert cfg.path == DEFAULT_PATH
    assert cfg.strict_language is False


def test_blank_values_count_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.setenv(name, "   ")
    assert load_config() == YIDConfig()


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YID_NETWORK", " network_type_yeying ")
    monkeypatch.setenv("YID_LANGUAGE", "LANGUAGE_CODE_EN_US")
    monkeypatch.setenv("YID_DERIVATION_PATH", "m/44'/60'/1'/0/0")
    monkeypatch.setenv("YID_STRICT_LANGUAGE", "TRUE")

    cfg = load_config()
    assert cfg.network is NetworkType.YEYING
    assert cfg.language is LanguageCode.EN_US
    assert cfg.path == "m/44'/60'/1'/0/0"
    assert cfg.strict_language is True


def test_strict_language_only_for_truthy_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YID_STRICT_LANGUAGE", "no")
    assert load_config().strict_language is False


@pytest.mark.parametrize("name", ["YID_NETWORK", "YID_LANGUAGE"])
def test_unknown_enum_values_raise(monkeypatch: pytest.MonkeyPatch, name: str) -> None:
    monkeypatch.setenv(name, "bogus")
    with pytest.raises(ValueError):
        load_config()
