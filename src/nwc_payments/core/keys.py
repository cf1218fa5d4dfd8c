"""
secp256k1 key helpers and NIP-04 content sealing.
"""

from __future__ import annotations

import re
from typing import Any, Optional, Protocol, TYPE_CHECKING

from electrum_aionostr.key import PrivateKey
from eth_keys import keys as eth_keys
from eth_keys.exceptions import ValidationError
from eth_utils import decode_hex

if TYPE_CHECKING:
    from .connection import FullKeypair

__all__ = [
    "ContentEncryptor",
    "DecryptionError",
    "Nip04Encryptor",
    "is_hex64",
    "privkey_to_pubkey",
]

_HEX64 = re.compile(r"^[0-9a-f]{64}$")


def is_hex64(value: Any) -> bool:
    """True for a 32-byte value written as 64 lowercase hex characters."""
    return isinstance(value, str) and _HEX64.match(value) is not None


def privkey_to_pubkey(privkey: str) -> Optional[str]:
    """
    Derive the x-only public key (64 hex chars) for ``privkey``.

    Returns ``None`` when the secret is not a usable secp256k1 scalar.
    """
    if not is_hex64(privkey):
        return None
    secret = decode_hex(privkey)
    # zero is not a valid scalar
    if not any(secret):
        return None
    try:
        public_key = eth_keys.PrivateKey(secret).public_key
    except (ValidationError, ValueError):
        return None
    # eth_keys serializes the point as x || y; nostr keys are x only
    return public_key.to_bytes()[:32].hex()


class DecryptionError(ValueError):
    """Raised when sealed content cannot be opened."""


class ContentEncryptor(Protocol):
    """Seals event content between the local keypair and a peer."""

    def encrypt(self, plaintext: str, peer_pubkey: str, keypair: "FullKeypair") -> str:
        ...

    def decrypt(self, ciphertext: str, peer_pubkey: str, keypair: "FullKeypair") -> str:
        ...


class Nip04Encryptor:
    """NIP-04 sealing with the connection secret."""

    def encrypt(self, plaintext: str, peer_pubkey: str, keypair: "FullKeypair") -> str:
        secret = PrivateKey(raw_secret=decode_hex(keypair.privkey))
        return secret.encrypt_message(plaintext, peer_pubkey)

    def decrypt(self, ciphertext: str, peer_pubkey: str, keypair: "FullKeypair") -> str:
        secret = PrivateKey(raw_secret=decode_hex(keypair.privkey))
        try:
            return secret.decrypt_message(ciphertext, peer_pubkey)
        # the library raises a mix of padding, base64 and point errors
        except Exception as exc:
            raise DecryptionError(f"Failed to decrypt NIP-04 content: {exc}") from exc
