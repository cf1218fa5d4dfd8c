"""
Nostr events carrying wallet connect requests and responses.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from electrum_aionostr.event import Event as NostrEvent

from .connection import FullKeypair
from .keys import ContentEncryptor, DecryptionError, Nip04Encryptor
from .protocol import WalletEncodeError, WalletRequest, WalletResponse, decode_wallet_response

__all__ = [
    "FullWalletResponse",
    "NWC_REQUEST_KIND",
    "NWC_RESPONSE_KIND",
    "NostrEvent",
    "build_request_event",
    "decrypt_wallet_event",
    "event_from_json",
    "extract_wallet_response",
    "referenced_ids",
]

logger = logging.getLogger(__name__)

NWC_REQUEST_KIND = 23194
NWC_RESPONSE_KIND = 23195


def referenced_ids(event: NostrEvent) -> List[str]:
    """Values of the event's ``e`` tags, in tag order."""
    return [tag[1] for tag in event.tags or () if len(tag) >= 2 and tag[0] == "e"]


def event_from_json(payload: Mapping[str, Any]) -> NostrEvent:
    tags = payload.get("tags") or []
    if not isinstance(tags, list) or not all(isinstance(tag, list) for tag in tags):
        raise ValueError("event tags must be a list of lists")
    return NostrEvent(
        id=str(payload["id"]),
        pubkey=str(payload["pubkey"]),
        created_at=int(payload["created_at"]),
        kind=int(payload["kind"]),
        tags=[[str(item) for item in tag] for tag in tags],
        content=str(payload.get("content", "")),
        sig=payload.get("sig"),
    )


def build_request_event(
    request: WalletRequest,
    recipient_pubkey: str,
    sender_keypair: FullKeypair,
    created_at: Optional[int] = None,
    *,
    encryptor: Optional[ContentEncryptor] = None,
) -> Optional[NostrEvent]:
    """
    Build the signed, encrypted request event addressed to the wallet.

    Returns ``None`` if the request cannot be serialized. Errors raised by the
    encryptor are not caught.
    """
    try:
        plaintext = request.to_json()
    except WalletEncodeError as exc:
        logger.warning("Not building wallet request event: %s", exc)
        return None

    created_at = int(time.time()) if created_at is None else created_at
    encryptor = encryptor or Nip04Encryptor()

    event = NostrEvent(
        pubkey=sender_keypair.pubkey,
        content=encryptor.encrypt(plaintext, recipient_pubkey, sender_keypair),
        created_at=created_at,
        kind=NWC_REQUEST_KIND,
        tags=[["p", recipient_pubkey]],
    )
    event.sign(sender_keypair.privkey)
    return event


@dataclass(frozen=True)
class FullWalletResponse:
    """A decoded wallet response and the id of the request it answers."""

    req_id: str
    response: WalletResponse


def extract_wallet_response(event: NostrEvent) -> Optional[FullWalletResponse]:
    """
    Pair the first referenced event id with the decoded plaintext content.

    Content must already be decrypted; see :func:`decrypt_wallet_event`.
    """
    referenced = referenced_ids(event)
    if not referenced:
        logger.debug("Wallet response %s references no request", event.id)
        return None

    response = decode_wallet_response(event.content)
    if response is None:
        return None
    return FullWalletResponse(req_id=referenced[0], response=response)


def decrypt_wallet_event(
    event: NostrEvent,
    keypair: FullKeypair,
    encryptor: Optional[ContentEncryptor] = None,
) -> Optional[NostrEvent]:
    """Copy of ``event`` with its content opened, or ``None``."""
    encryptor = encryptor or Nip04Encryptor()
    try:
        plaintext = encryptor.decrypt(event.content, event.pubkey, keypair)
    except DecryptionError as exc:
        logger.warning("Could not decrypt wallet event %s: %s", event.id, exc)
        return None
    return NostrEvent(
        id=event.id,
        pubkey=event.pubkey,
        created_at=event.created_at,
        kind=event.kind,
        tags=event.tags,
        content=plaintext,
        sig=event.sig,
    )
