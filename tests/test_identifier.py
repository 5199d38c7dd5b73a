from __future__ import annotations

import pytest

from yid.crypto import public_key_bytes, public_key_of
from yid.errors import MalformedIdentifier
from yid.identifier import (
    compute_address,
    construct_identifier,
    extract_public_key,
    parse_identifier,
)
from yid.models import NetworkType


PUB = public_key_of("0x" + "11" * 32)
OTHER_PUB = public_key_of("0x" + "22" * 32)


def test_identifier_is_deterministic() -> None:
    a = construct_identifier(NetworkType.YEYING, PUB)
    b = construct_identifier(NetworkType.YEYING, PUB)
    assert a == b
    assert a.startswith("did:ethr:0x7e4:0x")


def test_identifier_roundtrips_public_key() -> None:
    did = construct_identifier(NetworkType.YEYING, PUB)
    assert extract_public_key(did) == PUB
    assert parse_identifier(did) == (NetworkType.YEYING, PUB)


def test_identifier_normalizes_uncompressed_key() -> None:
    uncompressed = "0x" + public_key_bytes(PUB, compressed=False).hex()
    assert construct_identifier(NetworkType.YEYING, uncompressed) == construct_identifier(
        NetworkType.YEYING, PUB
    )


def test_distinct_keys_give_distinct_identifiers() -> None:
    assert construct_identifier(NetworkType.YEYING, PUB) != construct_identifier(
        NetworkType.YEYING, OTHER_PUB
    )


def test_construct_identifier_rejects_unknown_network() -> None:
    with pytest.raises(ValueError):
        construct_identifier("NETWORK_TYPE_NOPE", PUB)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "did",
    [
        "",
        "did:key:abc",
        "did:ethr:0x7e4",
        "did:ethr:0x7e4:a:b",
        "did:ethr:7e4:" + PUB,
        "did:ethr:0x1:" + PUB,
        "did:ethr:0x7e4:0xnothex",
        "did:ethr:0x7e4:0x02" + "00" * 31,
        "did:ethr:0x7e4:" + PUB.upper().replace("0X", "0x"),
    ],
)
def test_parse_identifier_fails_closed(did: str) -> None:
    with pytest.raises(MalformedIdentifier):
        parse_identifier(did)


def test_parse_identifier_rejects_non_string() -> None:
    with pytest.raises(MalformedIdentifier):
        parse_identifier(None)  # type: ignore[arg-type]


def test_compute_address_is_checksummed_and_deterministic() -> None:
    addr = compute_address(PUB)
    assert addr.startswith("0x")
    assert len(addr) == 42
    assert addr != addr.lower()  # EIP-55 mixes case
    assert addr == compute_address(PUB)
    assert addr != compute_address(OTHER_PUB)
