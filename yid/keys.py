"""
MIT License
Copyright (c) 2025 DarekDGB

Key derivation for yid.

Mnemonic handling (BIP-39 wordlists + checksum) and HD path derivation
(BIP-32) come from eth-account's hdaccount module; this module turns their
output into KeyMaterial with address and DID attached.

Language codes map onto wordlists. A recognized code always gets its own
wordlist. An unknown code falls back to the configured default language
(with a warning), unless YID_STRICT_LANGUAGE is set, in which case it raises
UnsupportedLanguage.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from eth_account.hdaccount import key_from_seed
from eth_account.hdaccount.mnemonic import Language, Mnemonic
from eth_utils import ValidationError

from .config import YIDConfig, load_config
from .crypto import public_key_of
from .errors import InvalidMnemonic, UnsupportedLanguage
from .identifier import compute_address, construct_identifier
from .models import DEFAULT_PATH, KeyMaterial, LanguageCode, MnemonicInfo, NetworkType

logger = logging.getLogger(__name__)


MNEMONIC_WORDS = 12

_WORDLIST_BY_LANGUAGE: Dict[LanguageCode, str] = {
    LanguageCode.ZH_CH: "chinese_simplified",
    LanguageCode.EN_US: "english",
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _mnemonic(wordlist: str) -> Mnemonic:
    try:
        language = Language(wordlist)
    except ValueError:
        raise ValueError(f"Unknown wordlist: {wordlist!r}") from None
    try:
        return Mnemonic(language)
    except ValidationError:
        raise ValueError(f"Unknown wordlist: {wordlist!r}") from None


def _derive_private_key(seed: bytes, path: str) -> bytes:
    try:
        return key_from_seed(seed, path)
    except (ValidationError, ValueError) as e:
        raise ValueError(f"Invalid derivation path: {path!r}") from e


def _build_key_material(
    network: NetworkType,
    private_key: bytes,
    path: str,
    mnemonic: Optional[MnemonicInfo],
) -> KeyMaterial:
    private_hex = "0x" + private_key.hex()
    public_key = public_key_of(private_hex)
    return KeyMaterial(
        private_key=private_hex,
        public_key=public_key,
        address=compute_address(public_key),
        identifier=construct_identifier(network, public_key),
        path=path,
        mnemonic=mnemonic,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def wordlist_for(language: Any, *, config: Optional[YIDConfig] = None) -> str:
    """
    Wordlist name for a LanguageCode (enum member or string value).
    """
    cfg = config or load_config()
    try:
        code = LanguageCode(language)
    except ValueError:
        if cfg.strict_language:
            raise UnsupportedLanguage(f"Unsupported language code: {language!r}") from None
        logger.warning(
            "Unknown language code %r, falling back to %s", language, cfg.language.value
        )
        code = cfg.language
    return _WORDLIST_BY_LANGUAGE[code]


def derive_from_mnemonic(
    phrase: str,
    password: str = "",
    path: str = DEFAULT_PATH,
    wordlist: str = "english",
    network: NetworkType = NetworkType.YEYING,
) -> KeyMaterial:
    """
    Recover key material from a mnemonic phrase.

    Raises InvalidMnemonic when the phrase fails checksum validation
    against `wordlist`.
    """
    mnemo = _mnemonic(wordlist)
    if not isinstance(phrase, str) or not mnemo.is_mnemonic_valid(phrase):
        raise InvalidMnemonic(f"Mnemonic failed checksum validation for wordlist={wordlist!r}")

    seed = Mnemonic.to_seed(phrase, password)
    private_key = _derive_private_key(seed, path)

    info = MnemonicInfo(phrase=phrase, password=password, path=path, locale=wordlist)
    km = _build_key_material(network, private_key, path, info)
    logger.debug("derived key material for %s at %s", km.address, path)
    return km


def derive_random(
    password: str = "",
    path: str = DEFAULT_PATH,
    wordlist: str = "english",
    network: NetworkType = NetworkType.YEYING,
) -> KeyMaterial:
    """
    Fresh key material from a new random mnemonic (OS entropy).
    """
    phrase = _mnemonic(wordlist).generate(MNEMONIC_WORDS)
    return derive_from_mnemonic(phrase, password, path, wordlist, network)


def recover_from_mnemonic(
    mnemonic: MnemonicInfo,
    network: NetworkType = NetworkType.YEYING,
) -> KeyMaterial:
    """Re-derive key material from a stored MnemonicInfo record."""
    return derive_from_mnemonic(
        mnemonic.phrase,
        mnemonic.password,
        mnemonic.path,
        mnemonic.locale,
        network,
    )


def create_key_material(
    network: Optional[NetworkType] = None,
    language: Optional[Any] = None,
    password: str = "",
    path: Optional[str] = None,
    *,
    config: Optional[YIDConfig] = None,
) -> KeyMaterial:
    """
    Random key material using configured defaults for anything not given.
    """
    cfg = config or load_config()
    wordlist = wordlist_for(language if language is not None else cfg.language, config=cfg)
    km = derive_random(
        password=password,
        path=path or cfg.path,
        wordlist=wordlist,
        network=network or cfg.network,
    )
    logger.info("created key material %s (wordlist=%s)", km.identifier, wordlist)
    return km
