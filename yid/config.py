"""
MIT License
Copyright (c) 2025 DarekDGB

Environment-driven defaults for yid.

Variables (trimmed, case-insensitive where it matters, empty == unset):
- YID_NETWORK           default network for new key material
- YID_LANGUAGE          default mnemonic language code
- YID_DERIVATION_PATH   default HD derivation path
- YID_STRICT_LANGUAGE   "1"/"true"/"yes"/"on" -> unknown language codes raise
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .models import DEFAULT_PATH, LanguageCode, NetworkType


_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class YIDConfig:
    network: NetworkType = NetworkType.YEYING
    language: LanguageCode = LanguageCode.ZH_CH
    path: str = DEFAULT_PATH
    strict_language: bool = False


def _env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    s = raw.strip()
    return s or None


def load_config() -> YIDConfig:
    """
    Read YIDConfig from the environment.

    Unknown YID_NETWORK / YID_LANGUAGE values raise ValueError: a
    misconfigured default must not silently pick another network or wordlist.
    """
    cfg = YIDConfig()

    network = _env("YID_NETWORK")
    language = _env("YID_LANGUAGE")
    path = _env("YID_DERIVATION_PATH")
    strict = _env("YID_STRICT_LANGUAGE")

    try:
        net = NetworkType(network.upper()) if network else cfg.network
    except ValueError:
        raise ValueError(f"Unknown YID_NETWORK: {network!r}") from None

    try:
        lang = LanguageCode(language.upper()) if language else cfg.language
    except ValueError:
        raise ValueError(f"Unknown YID_LANGUAGE: {language!r}") from None

    return YIDConfig(
        network=net,
        language=lang,
        path=path or cfg.path,
        strict_language=(strict or "").lower() in _TRUTHY,
    )
