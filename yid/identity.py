"""
MIT License
Copyright (c) 2025 DarekDGB

Identity document lifecycle.

    create ──> Unsigned ──sign──> Signed ──verify──> True / False
                                    │
                                  update (clone, bump version, re-sign)

- create_identity(...)
- sign_identity(...)
- verify_identity(...)
- update_identity(...)

Signing covers the canonical bytes: the encoded document with `signature`
set to "". Verification takes the public key from `metadata.did` and
nothing else.

An Identity is not safe for concurrent in-place use: sign/verify clear the
signature field while they run. Callers serialize sign/verify/update on the
same object. update_identity never mutates the previous identity, so other
readers may keep using it while an update is in flight.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from .codec import decode_identity, encode_identity, validate_security_config
from .crypto import sign_data, verify_data
from .errors import InvalidIdentity, KeyMismatch
from .identifier import extract_public_key
from .models import (
    Identity,
    IdentityMetadata,
    IdentityTemplate,
    KeyMaterial,
    NetworkType,
    ProfileExtension,
    build_extend,
    normalize_code,
)

logger = logging.getLogger(__name__)


def current_utc_string() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2025-01-01T00:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@contextmanager
def _signature_cleared(identity: Identity) -> Iterator[str]:
    """Blank `identity.signature` for the duration of the block, then put it back."""
    saved = identity.signature
    identity.signature = ""
    try:
        yield saved
    finally:
        identity.signature = saved


def canonical_bytes(identity: Identity) -> bytes:
    """
    Encoded identity with an empty signature.

    Identical signable fields always give identical bytes, whatever the
    document's signature or mutation history.
    """
    with _signature_cleared(identity):
        return encode_identity(identity)


def sign_identity(identity: Identity, private_key: str) -> None:
    """
    Sign `identity` in place.

    Deterministic: re-signing an unchanged document with the same key
    writes the same signature.
    """
    payload = canonical_bytes(identity)
    identity.signature = sign_data(private_key, payload)
    logger.debug("signed identity %s v%d", identity.metadata.did, identity.metadata.version)


def verify_identity(identity: Identity) -> bool:
    """
    Check the embedded signature against the public key in `metadata.did`.

    Returns False for an unsigned or tampered document. Malformed DID, key
    or signature input raises. `identity.signature` is left exactly as it
    was on every path.
    """
    with _signature_cleared(identity) as signature:
        if not signature:
            return False
        public_key = extract_public_key(identity.metadata.did)
        ok = verify_data(public_key, encode_identity(identity), signature)

    logger.debug("verified identity %s v%d: %s", identity.metadata.did, identity.metadata.version, ok)
    return ok


def _sign_and_check(identity: Identity, key_material: KeyMaterial) -> None:
    sign_identity(identity, key_material.private_key)
    if not verify_identity(identity):
        logger.warning("self-verification failed for %s", identity.metadata.did)
        raise KeyMismatch("Invalid key material: private key does not match the identity DID")


def create_identity(
    key_material: KeyMaterial,
    encrypted_key_material: str,
    template: IdentityTemplate,
    *,
    now: Optional[str] = None,
) -> Identity:
    """
    Build, sign and self-verify a new identity (version 0).

    Raises UnsupportedIdentityCode for a code outside the closed set and
    KeyMismatch when the private key does not belong to the identifier.
    """
    code = normalize_code(template.code)
    extend = build_extend(code, template.extend)
    security_config = validate_security_config(template.security_config)
    ts = now or current_utc_string()

    metadata = IdentityMetadata(
        network=NetworkType(template.network),
        did=key_material.identifier,
        address=key_material.address,
        code=code,
        name=template.name,
        description=template.description,
        parent=template.parent,
        avatar=template.avatar,
        version=0,
        created=ts,
        checkpoint=ts,
    )
    identity = Identity(
        block_address=encrypted_key_material,
        metadata=metadata,
        extend=extend,
        security_config=security_config,
    )

    _sign_and_check(identity, key_material)
    logger.info("created identity %s (%s)", metadata.did, code.value)
    return identity


def update_identity(
    template: IdentityTemplate,
    previous: Identity,
    key_material: KeyMaterial,
    *,
    now: Optional[str] = None,
) -> Identity:
    """
    Return a new, re-signed version of `previous` with the template applied.

    `previous` must verify (InvalidIdentity otherwise) and is never
    modified. `version` goes up by one, `checkpoint` is refreshed and
    `created` is kept. When the template has no extension, the previous one
    is kept if the code is unchanged, otherwise an empty variant of the new
    code is installed.
    """
    if not verify_identity(previous):
        raise InvalidIdentity("Invalid identity: signature does not verify")

    code = normalize_code(template.code)
    extend: Optional[ProfileExtension] = None
    if template.extend is not None:
        extend = build_extend(code, template.extend)
    elif code != previous.metadata.code:
        extend = build_extend(code)
    security_config = validate_security_config(template.security_config)

    # full encode/decode so nothing is shared with `previous`
    identity = decode_identity(encode_identity(previous))

    metadata = identity.metadata
    metadata.name = template.name
    metadata.description = template.description
    metadata.parent = template.parent
    metadata.code = code
    metadata.avatar = template.avatar
    metadata.version += 1
    metadata.checkpoint = now or current_utc_string()

    identity.security_config = security_config
    if extend is not None:
        identity.extend = extend

    _sign_and_check(identity, key_material)
    logger.info("updated identity %s to v%d", metadata.did, metadata.version)
    return identity
