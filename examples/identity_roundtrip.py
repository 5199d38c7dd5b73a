"""
Simple end-to-end identity document roundtrip.

This simulates:

1. A wallet creating fresh key material from a random mnemonic.
2. Creating and signing a personal identity document.
3. Anyone verifying it using only the DID embedded in the document.
4. The owner updating the document (version bump + re-sign).
5. A tampered copy being rejected.

The encrypted key blob is a placeholder here; real wallets store the key
material encrypted under a user password.
"""

import logging

from yid.codec import decode_identity, encode_identity
from yid.identity import create_identity, update_identity, verify_identity
from yid.keys import create_key_material, recover_from_mnemonic
from yid.models import IdentityCode, IdentityTemplate, LanguageCode, PersonalExtend


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # 1. Wallet side: new key material (English wordlist for readability)
    key_material = create_key_material(language=LanguageCode.EN_US)
    print("DID:    ", key_material.identifier)
    print("Address:", key_material.address)
    print()

    # 2. Create + sign
    template = IdentityTemplate(
        code=IdentityCode.PERSONAL,
        name="alice",
        description="demo identity",
        security_config={"algorithm": "ECDSA"},
        extend=PersonalExtend(email="alice@example.com"),
    )
    identity = create_identity(key_material, "encrypted-key-material", template)
    print("Signed v%d: %s" % (identity.metadata.version, identity.signature))
    print()

    # 3. Verifier side: only the encoded document is shared
    received = decode_identity(encode_identity(identity))
    print("Verifier result:", verify_identity(received))

    # 4. Owner recovers keys from the mnemonic and updates the document
    assert key_material.mnemonic is not None
    recovered = recover_from_mnemonic(key_material.mnemonic)
    template.name = "alice (updated)"
    updated = update_identity(template, identity, recovered)
    print("Updated to v%d, verifies: %s" % (updated.metadata.version, verify_identity(updated)))

    # 5. Tampering is detected
    tampered = decode_identity(encode_identity(updated))
    tampered.metadata.name = "mallory"
    print("Tampered copy verifies:", verify_identity(tampered))


if __name__ == "__main__":
    main()
