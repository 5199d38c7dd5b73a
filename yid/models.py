"""
MIT License
Copyright (c) 2025 DarekDGB

Core data models for Yeying identity documents.

These describe:
- key material (private/public key, address, DID, optional mnemonic record)
- identity metadata (who, which network, which version)
- profile extensions (personal, organization, service, application)
- the signed identity document itself

Exactly one profile extension lives in `Identity.extend`; its class decides
which identity code it belongs to.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Union

from .errors import UnsupportedIdentityCode


DEFAULT_PATH = "m/44'/60'/0'/0/0"


class NetworkType(str, Enum):
    YEYING = "NETWORK_TYPE_YEYING"


class IdentityCode(str, Enum):
    PERSONAL = "IDENTITY_CODE_PERSONAL"
    ORGANIZATION = "IDENTITY_CODE_ORGANIZATION"
    SERVICE = "IDENTITY_CODE_SERVICE"
    APPLICATION = "IDENTITY_CODE_APPLICATION"


class LanguageCode(str, Enum):
    ZH_CH = "LANGUAGE_CODE_ZH_CH"
    EN_US = "LANGUAGE_CODE_EN_US"


@dataclass
class MnemonicInfo:
    """
    Everything needed to re-derive the same key later.

    `locale` is the wordlist name (e.g. "english", "chinese_simplified").
    """
    phrase: str = field(repr=False)
    password: str = field(default="", repr=False)
    path: str = DEFAULT_PATH
    locale: str = "english"


@dataclass(frozen=True)
class KeyMaterial:
    """
    Key pair plus the identifiers derived from it.

    Keys are 0x-prefixed hex: 32-byte private key, 33-byte compressed
    public key. `address` and `identifier` are pure functions of the key.
    """
    private_key: str = field(repr=False)
    public_key: str
    address: str
    identifier: str
    path: str = DEFAULT_PATH
    mnemonic: Optional[MnemonicInfo] = None


# ---------------------------------------------------------------------------
# Profile extensions
# ---------------------------------------------------------------------------


@dataclass
class PersonalExtend:
    identity_code: ClassVar[IdentityCode] = IdentityCode.PERSONAL

    email: str = ""
    telephone: str = ""
    extend: str = ""


@dataclass
class OrganizationExtend:
    identity_code: ClassVar[IdentityCode] = IdentityCode.ORGANIZATION

    address: str = ""
    code: str = ""
    telephone: str = ""
    email: str = ""
    extend: str = ""


@dataclass
class ServiceExtend:
    identity_code: ClassVar[IdentityCode] = IdentityCode.SERVICE

    code: str = ""
    apis: str = ""
    proxy: str = ""
    grpc: str = ""
    extend: str = ""


@dataclass
class ApplicationExtend:
    identity_code: ClassVar[IdentityCode] = IdentityCode.APPLICATION

    code: str = ""
    location: str = ""
    service_codes: List[str] = field(default_factory=list)
    hash: str = ""
    extend: str = ""


ProfileExtension = Union[PersonalExtend, OrganizationExtend, ServiceExtend, ApplicationExtend]

EXTEND_TYPES: Dict[IdentityCode, type] = {
    IdentityCode.PERSONAL: PersonalExtend,
    IdentityCode.ORGANIZATION: OrganizationExtend,
    IdentityCode.SERVICE: ServiceExtend,
    IdentityCode.APPLICATION: ApplicationExtend,
}


def normalize_code(code: Any) -> IdentityCode:
    """Map a code (enum member or its string value) into the closed set."""
    try:
        return IdentityCode(code)
    except ValueError:
        raise UnsupportedIdentityCode(f"Not supported identity code={code!r}") from None


def build_extend(code: Any, extend: Any = None) -> ProfileExtension:
    """
    Build the extension variant for `code`.

    `extend` may be None (empty variant), an instance of the matching
    variant, or a mapping of that variant's fields. The result never
    shares mutable state with the input.
    """
    identity_code = normalize_code(code)
    cls = EXTEND_TYPES[identity_code]

    if extend is None:
        return cls()
    if isinstance(extend, cls):
        return copy.deepcopy(extend)
    if isinstance(extend, Mapping):
        names = {f.name for f in fields(cls)}
        unknown = set(extend) - names
        if unknown:
            raise ValueError(f"Unknown {cls.__name__} fields: {sorted(unknown)!r}")
        return cls(**copy.deepcopy(dict(extend)))

    raise UnsupportedIdentityCode(
        f"{type(extend).__name__} does not match identity code={identity_code.value}"
    )


# ---------------------------------------------------------------------------
# Identity document
# ---------------------------------------------------------------------------


@dataclass
class IdentityMetadata:
    network: NetworkType
    did: str
    address: str
    code: IdentityCode

    name: str = ""
    description: str = ""
    parent: str = ""
    avatar: str = ""

    version: int = 0
    created: str = ""
    checkpoint: str = ""


@dataclass
class Identity:
    """
    A self-sovereign identity document.

    `block_address` is the caller's encrypted key-material blob, carried
    verbatim. `signature` is empty until the document is signed.
    """
    block_address: str
    metadata: IdentityMetadata
    extend: ProfileExtension
    security_config: Dict[str, Any] = field(default_factory=dict)
    signature: str = ""

    @property
    def is_signed(self) -> bool:
        return self.signature != ""


@dataclass
class IdentityTemplate:
    """
    Caller-editable fields used by create/update.
    """
    network: NetworkType = NetworkType.YEYING
    code: Union[IdentityCode, str] = IdentityCode.PERSONAL

    name: str = ""
    description: str = ""
    parent: str = ""
    avatar: str = ""

    security_config: Dict[str, Any] = field(default_factory=dict)
    extend: Optional[Union[ProfileExtension, Mapping[str, Any]]] = None
