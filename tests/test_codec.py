from __future__ import annotations

import json

import pytest

from yid.codec import decode_identity, encode_identity, to_dict, validate_security_config
from yid.models import (
    ApplicationExtend,
    Identity,
    IdentityCode,
    IdentityMetadata,
    NetworkType,
    PersonalExtend,
)


def _identity() -> Identity:
    return Identity(
        block_address="encrypted-blob",
        metadata=IdentityMetadata(
            network=NetworkType.YEYING,
            did="did:ethr:0x7e4:0x02" + "ab" * 32,
            address="0x" + "cd" * 20,
            code=IdentityCode.APPLICATION,
            name="应用",
            version=3,
            created="2025-01-01T00:00:00.000Z",
            checkpoint="2025-01-02T00:00:00.000Z",
        ),
        extend=ApplicationExtend(code="app", service_codes=["s1", "s2"]),
        security_config={"algorithm": "ECDSA", "nested": {"b": 1, "a": [1, 2]}},
        signature="3044",
    )


def test_encode_decode_preserves_identity() -> None:
    ident = _identity()
    back = decode_identity(encode_identity(ident))
    assert back == ident
    assert back is not ident
    assert back.extend is not ident.extend


def test_encoding_is_canonical_json() -> None:
    raw = encode_identity(_identity())
    obj = json.loads(raw.decode("utf-8"))
    assert raw == json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    assert obj["extend"]["identity_code"] == "IDENTITY_CODE_APPLICATION"
    assert "应用".encode("utf-8") in raw


def test_encoding_does_not_depend_on_dict_insertion_order() -> None:
    a = _identity()
    b = _identity()
    b.security_config = {"nested": {"a": [1, 2], "b": 1}, "algorithm": "ECDSA"}
    assert encode_identity(a) == encode_identity(b)


@pytest.mark.parametrize("raw", [b"not json", b"[]", b"\xff\xfe", b"{}"])
def test_decode_rejects_garbage(raw: bytes) -> None:
    with pytest.raises(ValueError):
        decode_identity(raw)


def _mutated(fn) -> bytes:
    d = to_dict(_identity())
    fn(d)
    return json.dumps(d).encode("utf-8")


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d["metadata"].update(version=-1),
        lambda d: d["metadata"].update(version="3"),
        lambda d: d["metadata"].update(version=True),
        lambda d: d["metadata"].update(network="NETWORK_TYPE_NOPE"),
        lambda d: d["metadata"].update(code="IDENTITY_CODE_NOPE"),
        lambda d: d["metadata"].update(name=None),
        lambda d: d["extend"].update(identity_code="IDENTITY_CODE_PERSONAL"),
        lambda d: d["extend"].update(unknown="x"),
        lambda d: d["extend"].update(service_codes="s1"),
        lambda d: d["extend"].update(location=5),
        lambda d: d.update(security_config=[]),
        lambda d: d.update(signature=None),
        lambda d: d.pop("block_address"),
        lambda d: d["metadata"].update(role="admin"),
        lambda d: d["metadata"].pop("avatar"),
        lambda d: d["extend"].pop("code"),
        lambda d: d.update(injected="x"),
    ],
)
def test_decode_fails_closed_on_bad_shape(mutate) -> None:
    with pytest.raises(ValueError):
        decode_identity(_mutated(mutate))


def test_personal_extend_roundtrip() -> None:
    ident = _identity()
    ident.metadata.code = IdentityCode.PERSONAL
    ident.extend = PersonalExtend(email="a@b.c", telephone="123")
    back = decode_identity(encode_identity(ident))
    assert back.extend == PersonalExtend(email="a@b.c", telephone="123")


def test_decode_rejects_extra_field_on_signed_document() -> None:
    d = to_dict(_identity())
    d["metadata"]["role"] = "admin"
    raw = json.dumps(d, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    with pytest.raises(ValueError, match="unknown fields"):
        decode_identity(raw)


def test_validate_security_config_returns_private_copy() -> None:
    cfg = {"algorithm": "ECDSA", "nested": {"rounds": [1, 2]}}
    out = validate_security_config(cfg)
    assert out == cfg
    assert out is not cfg
    assert out["nested"] is not cfg["nested"]


@pytest.mark.parametrize(
    "cfg",
    [
        {1: "a", "b": 2},
        {1: "a"},
        {"pair": (1, 2)},
        {"ratio": float("nan")},
        {"blob": b"\x00"},
        {"s": {1, 2}},
        ["algorithm"],
    ],
)
def test_validate_security_config_rejects_non_json_values(cfg) -> None:
    with pytest.raises(ValueError):
        validate_security_config(cfg)
