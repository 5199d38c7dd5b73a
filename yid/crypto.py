"""
MIT License
Copyright (c) 2025 DarekDGB

Digest & signature engine for yid.

- digest: SHA-256 over the payload bytes
- signature: ECDSA over secp256k1, RFC 6979 nonce, low-S, DER, lowercase hex

Keys are 0x-prefixed (or bare) hex strings. Signing is independent of the
Identity type so collaborators can sign arbitrary payloads with the same
key material.

Verification contract:
- well-formed but wrong signature -> False
- unparseable key / signature hex or DER -> MalformedKey / MalformedSignature
- high-S signatures are rejected (False); only the canonical form is valid
"""

from __future__ import annotations

import hashlib
import logging
from typing import Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    decode_dss_signature,
    encode_dss_signature,
)

from .errors import MalformedKey, MalformedSignature

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Curve constants
# ---------------------------------------------------------------------------

SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_HALF_ORDER = SECP256K1_ORDER // 2

DIGEST_SIZE = 32
PRIVATE_KEY_SIZE = 32


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _trim_hex_prefix(value: str) -> str:
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def _hex_to_bytes(value: str, error_cls: type, what: str) -> bytes:
    if not isinstance(value, str):
        raise error_cls(f"{what} must be a hex string")
    try:
        return bytes.fromhex(_trim_hex_prefix(value.strip()))
    except ValueError:
        raise error_cls(f"Invalid {what} hex") from None


def _load_private_key(private_key: str) -> ec.EllipticCurvePrivateKey:
    raw = _hex_to_bytes(private_key, MalformedKey, "private key")
    if len(raw) != PRIVATE_KEY_SIZE:
        raise MalformedKey(f"private key must be {PRIVATE_KEY_SIZE} bytes, got {len(raw)}")
    try:
        return ec.derive_private_key(int.from_bytes(raw, "big"), ec.SECP256K1())
    except ValueError:
        raise MalformedKey("private key out of range for secp256k1") from None


def _load_public_key(public_key: str) -> ec.EllipticCurvePublicKey:
    raw = _hex_to_bytes(public_key, MalformedKey, "public key")
    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), raw)
    except ValueError:
        raise MalformedKey("public key is not a valid secp256k1 point") from None


def _decode_signature(signature: str) -> Tuple[int, int]:
    der = _hex_to_bytes(signature, MalformedSignature, "signature")
    try:
        return decode_dss_signature(der)
    except (ValueError, TypeError):
        raise MalformedSignature("signature is not valid DER") from None


def _check_digest(value: bytes) -> bytes:
    digest = bytes(value)
    if len(digest) != DIGEST_SIZE:
        raise ValueError(f"digest must be {DIGEST_SIZE} bytes, got {len(digest)}")
    return digest


def _ecdsa(deterministic: bool = False) -> ec.ECDSA:
    return ec.ECDSA(Prehashed(hashes.SHA256()), deterministic_signing=deterministic)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def hash_bytes(data: bytes) -> bytes:
    """SHA-256 digest of `data`."""
    return hashlib.sha256(bytes(data)).digest()


def public_key_of(private_key: str) -> str:
    """Compressed public key (0x-prefixed hex) for a private key."""
    key = _load_private_key(private_key)
    point = key.public_key().public_bytes(
        serialization.Encoding.X962,
        serialization.PublicFormat.CompressedPoint,
    )
    return "0x" + point.hex()


def public_key_bytes(public_key: str, *, compressed: bool = True) -> bytes:
    """
    Re-encode a public key (compressed or uncompressed hex) as SEC1 bytes.

    Raises MalformedKey when the input is not a secp256k1 point.
    """
    key = _load_public_key(public_key)
    fmt = (
        serialization.PublicFormat.CompressedPoint
        if compressed
        else serialization.PublicFormat.UncompressedPoint
    )
    return key.public_bytes(serialization.Encoding.X962, fmt)


def sign_hash_bytes(private_key: str, digest: bytes) -> str:
    """
    Sign a 32-byte digest.

    The nonce is derived per RFC 6979, so signing the same digest with the
    same key always gives the same signature. S is normalized to the lower
    half of the curve order before DER encoding.
    """
    key = _load_private_key(private_key)
    digest = _check_digest(digest)

    der = key.sign(digest, _ecdsa(deterministic=True))
    r, s = decode_dss_signature(der)
    if s > _HALF_ORDER:
        s = SECP256K1_ORDER - s
    return encode_dss_signature(r, s).hex()


def verify_hash_bytes(public_key: str, digest: bytes, signature: str) -> bool:
    """
    Verify a DER hex signature over a 32-byte digest.
    """
    key = _load_public_key(public_key)
    r, s = _decode_signature(signature)
    digest = _check_digest(digest)

    if not (0 < r < SECP256K1_ORDER):
        return False
    # high-S is the malleable twin of a valid signature
    if not (0 < s <= _HALF_ORDER):
        logger.debug("rejecting non-canonical (high-S) signature")
        return False

    try:
        key.verify(encode_dss_signature(r, s), digest, _ecdsa())
    except InvalidSignature:
        return False
    return True


def sign_data(private_key: str, data: bytes) -> str:
    """Hash `data` with SHA-256 and sign the digest."""
    return sign_hash_bytes(private_key, hash_bytes(data))


def verify_data(public_key: str, data: bytes, signature: str) -> bool:
    """Hash `data` with SHA-256 and verify `signature` over the digest."""
    return verify_hash_bytes(public_key, hash_bytes(data), signature)
