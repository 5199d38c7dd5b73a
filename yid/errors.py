"""
MIT License
Copyright (c) 2025 DarekDGB

Error taxonomy for Yeying identity documents.

None of these are retried internally; the caller decides what to do
(e.g. re-prompt for a corrected mnemonic).
"""

from __future__ import annotations


class IdentityError(Exception):
    """Base class for every error raised by yid."""


class InvalidMnemonic(IdentityError, ValueError):
    """Mnemonic phrase failed checksum validation for the selected wordlist."""


class UnsupportedLanguage(IdentityError, ValueError):
    """Unknown language code while YID_STRICT_LANGUAGE is enabled."""


class UnsupportedIdentityCode(IdentityError, ValueError):
    """Identity code outside the closed Personal/Organization/Service/Application set."""


class InvalidIdentity(IdentityError):
    """Existing identity failed verification, so it cannot be updated."""


class KeyMismatch(IdentityError):
    """Freshly signed identity does not verify against its own DID."""


class MalformedKey(IdentityError, ValueError):
    pass


class MalformedSignature(IdentityError, ValueError):
    pass


class MalformedIdentifier(IdentityError, ValueError):
    pass
