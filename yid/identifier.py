"""
MIT License
Copyright (c) 2025 DarekDGB

Address and DID derivation.

DID format:
    did:ethr:<chain id hex>:<0x compressed public key hex>

The public key is embedded verbatim, so it can be recovered from the DID
without contacting any resolver. Parsing is fail-closed (MalformedIdentifier).
"""

from __future__ import annotations

from typing import Dict, Tuple

from eth_keys import keys

from .crypto import public_key_bytes
from .errors import MalformedIdentifier, MalformedKey
from .models import NetworkType


_DID_PREFIX = "did:ethr:"

_CHAIN_ID_BY_NETWORK: Dict[NetworkType, int] = {
    NetworkType.YEYING: 2020,
}
_NETWORK_BY_CHAIN_ID = {v: k for k, v in _CHAIN_ID_BY_NETWORK.items()}


def compute_address(public_key: str) -> str:
    """
    EIP-55 checksummed account address for a public key.

    Accepts compressed or uncompressed hex.
    """
    uncompressed = public_key_bytes(public_key, compressed=False)
    return keys.PublicKey(uncompressed[1:]).to_checksum_address()


def construct_identifier(network: NetworkType, public_key: str) -> str:
    """
    Deterministic DID for (network, public_key).

    The key is normalized to its compressed form, so both encodings of the
    same point give the same DID.
    """
    try:
        chain_id = _CHAIN_ID_BY_NETWORK[NetworkType(network)]
    except (ValueError, KeyError):
        raise ValueError(f"Unsupported network type: {network!r}") from None

    compressed = public_key_bytes(public_key, compressed=True)
    return f"{_DID_PREFIX}{hex(chain_id)}:0x{compressed.hex()}"


def parse_identifier(did: str) -> Tuple[NetworkType, str]:
    """
    Split a DID into (network, 0x compressed public key).
    """
    if not isinstance(did, str) or not did.startswith(_DID_PREFIX):
        raise MalformedIdentifier(f"Not a yid DID (missing {_DID_PREFIX!r} prefix).")

    parts = did[len(_DID_PREFIX) :].split(":")
    if len(parts) != 2:
        raise MalformedIdentifier("DID must have exactly a chain id and a public key.")
    chain_s, key_s = parts

    if not chain_s.startswith("0x"):
        raise MalformedIdentifier("DID chain id must be 0x-prefixed hex.")
    try:
        network = _NETWORK_BY_CHAIN_ID[int(chain_s, 16)]
    except (ValueError, KeyError):
        raise MalformedIdentifier(f"Unknown DID chain id: {chain_s!r}") from None

    try:
        compressed = public_key_bytes(key_s, compressed=True)
    except MalformedKey:
        raise MalformedIdentifier("DID does not embed a valid public key.") from None

    public_key = "0x" + compressed.hex()
    # only the canonical (compressed, lowercase) rendering is a valid DID
    if key_s != public_key:
        raise MalformedIdentifier("DID public key must be compressed lowercase hex.")

    return network, public_key


def extract_public_key(did: str) -> str:
    """Recover the public key embedded in a DID."""
    return parse_identifier(did)[1]
