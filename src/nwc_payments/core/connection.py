"""
The wallet connect capability URL and the values it carries.

A connection URL looks like::

    nostrwalletconnect://<wallet pubkey>?relay=wss://relay.example&secret=<hex>&lud16=me@example.com

The ``secret`` is a private key: it is never included in ``repr()`` output or
log lines.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import quote, unquote, urlencode, urlsplit

from .keys import is_hex64, privkey_to_pubkey

__all__ = [
    "FullKeypair",
    "RelayURL",
    "WalletConnectURL",
]

logger = logging.getLogger(__name__)

SCHEME = "nostrwalletconnect"
ACCEPTED_SCHEMES = (SCHEME, "nostr+walletconnect")

_RELAY_SCHEMES = ("ws", "wss")


@dataclass(frozen=True)
class RelayURL:
    url: str

    @property
    def id(self) -> str:
        return self.url

    @classmethod
    def parse(cls, text: str) -> Optional["RelayURL"]:
        value = text.strip()
        try:
            parts = urlsplit(value)
        except ValueError:
            return None
        if parts.scheme.lower() not in _RELAY_SCHEMES or not parts.hostname:
            return None
        return cls(url=value)

    def __str__(self) -> str:
        return self.url


@dataclass(frozen=True)
class FullKeypair:
    pubkey: str
    privkey: str = field(repr=False)

    @classmethod
    def from_privkey(cls, privkey: str) -> Optional["FullKeypair"]:
        pubkey = privkey_to_pubkey(privkey)
        if pubkey is None:
            return None
        return cls(pubkey=pubkey, privkey=privkey)


def _first_query_values(query: str) -> Dict[str, str]:
    # "+" stays literal: these are URL query items, not form data
    values: Dict[str, str] = {}
    for item in query.split("&"):
        if not item:
            continue
        key, _, value = item.partition("=")
        values.setdefault(unquote(key), unquote(value))
    return values


@dataclass(frozen=True, eq=False)
class WalletConnectURL:
    """
    Parsed wallet connect descriptor.

    Two descriptors are equal when they share keypair, wallet pubkey and relay;
    the ``lud16`` hint does not take part in equality.
    """

    relay: RelayURL
    keypair: FullKeypair
    remote_pubkey: str
    lud16: Optional[str] = None

    def __post_init__(self) -> None:
        if not is_hex64(self.remote_pubkey):
            raise ValueError("remote_pubkey must be 64 lowercase hex characters")
        if not is_hex64(self.keypair.privkey):
            raise ValueError("secret must be 64 lowercase hex characters")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WalletConnectURL):
            return NotImplemented
        return (
            self.keypair == other.keypair
            and self.remote_pubkey == other.remote_pubkey
            and self.relay == other.relay
        )

    def __hash__(self) -> int:
        return hash((self.keypair, self.remote_pubkey, self.relay))

    @classmethod
    def parse(cls, text: str) -> Optional["WalletConnectURL"]:
        try:
            parts = urlsplit(text.strip())
        except (AttributeError, ValueError):
            return None

        if parts.scheme.lower() not in ACCEPTED_SCHEMES:
            logger.debug("Rejecting connection URL with scheme %r", parts.scheme)
            return None

        # netloc keeps the host as written; the pubkey lives there
        remote_pubkey = parts.netloc.lower()
        if not is_hex64(remote_pubkey):
            logger.debug("Rejecting connection URL: wallet pubkey is not 64 hex chars")
            return None

        items = _first_query_values(parts.query)

        relay_raw = items.get("relay")
        relay = RelayURL.parse(relay_raw) if relay_raw is not None else None
        if relay is None:
            logger.debug("Rejecting connection URL: missing or invalid relay")
            return None

        secret = items.get("secret")
        if secret is None or len(secret) != 64:
            logger.debug("Rejecting connection URL: missing or malformed secret")
            return None
        keypair = FullKeypair.from_privkey(secret.lower())
        if keypair is None:
            logger.debug("Rejecting connection URL: secret is not a valid private key")
            return None

        return cls(
            relay=relay,
            keypair=keypair,
            remote_pubkey=remote_pubkey,
            lud16=items.get("lud16"),
        )

    def to_url(self) -> str:
        query = [("relay", self.relay.id), ("secret", self.keypair.privkey)]
        if self.lud16 is not None:
            query.append(("lud16", self.lud16))
        encoded = urlencode(query, quote_via=quote, safe=":/@")
        return f"{SCHEME}://{self.remote_pubkey}?{encoded}"

    def describe(self) -> Dict[str, Optional[str]]:
        """Public fields only, suitable for printing or logging."""
        return {
            "relay": self.relay.id,
            "wallet_pubkey": self.remote_pubkey,
            "client_pubkey": self.keypair.pubkey,
            "lud16": self.lud16,
        }
