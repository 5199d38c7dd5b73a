"""
MIT License
Copyright (c) 2025 DarekDGB

Message codec for identity documents.

Wire format: canonical JSON (UTF-8, sorted keys, no extra whitespace).
Decoding validates strictly and raises ValueError (fail-closed).

    {
      "block_address": "...",
      "metadata": {...},
      "security_config": {...},
      "extend": {"identity_code": "IDENTITY_CODE_PERSONAL", "email": "...", ...},
      "signature": "..."
    }
"""

from __future__ import annotations

import copy
import json
from dataclasses import asdict, fields
from typing import Any, Dict, Iterable, Mapping, cast

from .errors import UnsupportedIdentityCode
from .models import (
    EXTEND_TYPES,
    Identity,
    IdentityMetadata,
    NetworkType,
    ProfileExtension,
    build_extend,
    normalize_code,
)


_METADATA_STR_FIELDS = (
    "did",
    "address",
    "name",
    "description",
    "parent",
    "avatar",
    "created",
    "checkpoint",
)
_METADATA_FIELDS = {f.name for f in fields(IdentityMetadata)}
_IDENTITY_FIELDS = {f.name for f in fields(Identity)}


# -------------------------
# helpers (deterministic)
# -------------------------


def _canonical_json(obj: Any) -> bytes:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _require_mapping(d: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(d, Mapping):
        raise ValueError(f"{what} must be an object")
    return cast(Mapping[str, Any], d)


def _require_exact_keys(d: Mapping[str, Any], expected: Iterable[str], what: str) -> None:
    allowed = set(expected)
    unknown = set(d) - allowed
    if unknown:
        raise ValueError(f"{what} has unknown fields: {sorted(map(str, unknown))!r}")
    missing = allowed - set(d)
    if missing:
        raise ValueError(f"{what} is missing fields: {sorted(missing)!r}")


def _require_str(d: Mapping[str, Any], key: str, what: str) -> str:
    v = d.get(key)
    if not isinstance(v, str):
        raise ValueError(f"{what}.{key} must be a string")
    return v


# -------------------------
# validation / conversion
# -------------------------


def extend_to_dict(extend: ProfileExtension) -> Dict[str, Any]:
    d = asdict(extend)
    d["identity_code"] = extend.identity_code.value
    return d


def extend_from_dict(d: Mapping[str, Any]) -> ProfileExtension:
    d = _require_mapping(d, "extend")
    try:
        code = normalize_code(d.get("identity_code"))
    except UnsupportedIdentityCode as e:
        raise ValueError(str(e)) from None

    names = {f.name for f in fields(EXTEND_TYPES[code])}
    _require_exact_keys(d, names | {"identity_code"}, "extend")

    body = {k: v for k, v in d.items() if k != "identity_code"}
    for name, value in body.items():
        if name == "service_codes":
            if not isinstance(value, list) or not all(isinstance(x, str) for x in value):
                raise ValueError("extend.service_codes must be a list of strings")
        elif not isinstance(value, str):
            raise ValueError(f"extend.{name} must be a string")

    return build_extend(code, body)


def metadata_to_dict(m: IdentityMetadata) -> Dict[str, Any]:
    d = asdict(m)
    d["network"] = m.network.value
    d["code"] = m.code.value
    return d


def metadata_from_dict(d: Mapping[str, Any]) -> IdentityMetadata:
    d = _require_mapping(d, "metadata")
    _require_exact_keys(d, _METADATA_FIELDS, "metadata")

    try:
        network = NetworkType(d.get("network"))
    except ValueError:
        raise ValueError(f"metadata.network unsupported: {d.get('network')!r}") from None
    try:
        code = normalize_code(d.get("code"))
    except UnsupportedIdentityCode as e:
        raise ValueError(str(e)) from None

    version = d.get("version")
    if not isinstance(version, int) or isinstance(version, bool) or version < 0:
        raise ValueError("metadata.version must be a non-negative int")

    values = {k: _require_str(d, k, "metadata") for k in _METADATA_STR_FIELDS}
    return IdentityMetadata(network=network, code=code, version=version, **values)


def validate_security_config(security_config: Any) -> Dict[str, Any]:
    """
    Return a private copy of `security_config`, which must survive a JSON
    round trip unchanged (string keys, JSON types, no NaN).
    """
    cfg = _require_mapping(security_config, "security_config")
    try:
        copied = json.loads(_canonical_json(cfg))
    except (TypeError, ValueError):
        raise ValueError("security_config must be JSON-compatible") from None
    if copied != dict(cfg):
        raise ValueError("security_config must be JSON-compatible")
    return copied


def to_dict(identity: Identity) -> Dict[str, Any]:
    return {
        "block_address": identity.block_address,
        "metadata": metadata_to_dict(identity.metadata),
        "security_config": copy.deepcopy(dict(identity.security_config)),
        "extend": extend_to_dict(identity.extend),
        "signature": identity.signature,
    }


def from_dict(d: Mapping[str, Any]) -> Identity:
    d = _require_mapping(d, "identity")
    _require_exact_keys(d, _IDENTITY_FIELDS, "identity")

    metadata = metadata_from_dict(d.get("metadata"))
    extend = extend_from_dict(d.get("extend"))
    if extend.identity_code != metadata.code:
        raise ValueError("extend variant does not match metadata.code")

    security_config = validate_security_config(d.get("security_config"))

    return Identity(
        block_address=_require_str(d, "block_address", "identity"),
        metadata=metadata,
        extend=extend,
        security_config=security_config,
        signature=_require_str(d, "signature", "identity"),
    )


# -------------------------
# encode/decode
# -------------------------


def encode_identity(identity: Identity) -> bytes:
    """Encode an identity (including its current signature) as canonical JSON bytes."""
    return _canonical_json(to_dict(identity))


def decode_identity(raw: bytes) -> Identity:
    """Decode canonical JSON bytes back into an Identity, validating strictly."""
    try:
        obj = json.loads(bytes(raw).decode("utf-8"))
    except Exception as e:
        raise ValueError("Invalid identity JSON") from e

    if not isinstance(obj, dict):
        raise ValueError("Identity JSON must be an object")

    return from_dict(obj)
