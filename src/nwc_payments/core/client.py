"""
Wallet connect client: sends requests through a relay transport and applies
replies to the pending zap store.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

from .config import WalletConnectConfig
from .connection import RelayURL, WalletConnectURL
from .correlation import (
    EventCache,
    NwcPendingState,
    PendingZap,
    PendingZapStore,
    handle_wallet_response,
)
from .events import (
    NWC_RESPONSE_KIND,
    FullWalletResponse,
    NostrEvent,
    build_request_event,
    decrypt_wallet_event,
    extract_wallet_response,
)
from .keys import ContentEncryptor, Nip04Encryptor
from .protocol import (
    WalletRequest,
    make_wallet_balance_request,
    make_wallet_pay_invoice_request,
)

__all__ = [
    "RelayTransport",
    "WalletConnectClient",
    "nwc_filter",
    "subscribe_to_nwc",
]

logger = logging.getLogger(__name__)


class RelayTransport(Protocol):
    """Relay pool and outbox owned by the host application."""

    def add_relay(self, relay: RelayURL) -> None:
        ...

    def subscribe(self, sub_id: str, filters: List[Dict[str, Any]], relays: List[str]) -> None:
        ...

    def send(self, event: NostrEvent, relays: List[str], *, delay: float) -> None:
        ...


def nwc_filter(url: WalletConnectURL) -> Dict[str, Any]:
    # limit 0: only replies published from now on
    return {"kinds": [NWC_RESPONSE_KIND], "authors": [url.remote_pubkey], "limit": 0}


def subscribe_to_nwc(
    url: WalletConnectURL,
    transport: RelayTransport,
    sub_id: str = "nwc",
) -> None:
    transport.subscribe(sub_id, [nwc_filter(url)], [url.relay.id])


class WalletConnectClient:
    def __init__(
        self,
        config: WalletConnectConfig,
        transport: RelayTransport,
        evcache: EventCache,
        *,
        zapcache: Optional[PendingZapStore] = None,
        encryptor: Optional[ContentEncryptor] = None,
    ) -> None:
        self.config = config
        self.transport = transport
        self.evcache = evcache
        self.zapcache = zapcache if zapcache is not None else PendingZapStore()
        self.encryptor = encryptor or Nip04Encryptor()

    @property
    def url(self) -> WalletConnectURL:
        return self.config.connection

    def build_request(
        self,
        request: WalletRequest,
        *,
        created_at: Optional[int] = None,
    ) -> Optional[NostrEvent]:
        return build_request_event(
            request,
            self.url.remote_pubkey,
            self.url.keypair,
            created_at,
            encryptor=self.encryptor,
        )

    def _send(self, event: NostrEvent) -> None:
        self.transport.add_relay(self.url.relay)
        subscribe_to_nwc(self.url, self.transport, self.config.subscription_id)
        self.transport.send(
            event, [self.url.relay.id], delay=self.config.send_delay_seconds
        )

    def pay(
        self,
        invoice: str,
        *,
        zap_request_id: Optional[str] = None,
        owner: Optional[str] = None,
    ) -> Optional[NostrEvent]:
        """
        Ask the wallet to pay ``invoice``.

        When ``zap_request_id`` is given the zap is tracked as pending until the
        wallet replies.
        """
        event = self.build_request(make_wallet_pay_invoice_request(invoice))
        if event is None:
            return None

        if zap_request_id is not None:
            # tracked before sending so a fast reply always finds it
            self.zapcache.add(
                PendingZap(
                    zap_request_id=zap_request_id,
                    owner=owner or self.url.keypair.pubkey,
                    nwc=NwcPendingState(request_id=event.id),
                )
            )

        logger.info("Sending pay_invoice request %s via %s", event.id, self.url.relay)
        self._send(event)
        return event

    def request_balance(self) -> Optional[NostrEvent]:
        event = self.build_request(make_wallet_balance_request())
        if event is None:
            return None
        logger.info("Sending get_balance request %s via %s", event.id, self.url.relay)
        self._send(event)
        return event

    def handle_event(self, event: NostrEvent) -> Optional[FullWalletResponse]:
        """Decrypt, decode and apply one inbound wallet response event."""
        if event.kind != NWC_RESPONSE_KIND or event.pubkey != self.url.remote_pubkey:
            logger.debug("Ignoring event %s: not a response from our wallet", event.id)
            return None

        plain = decrypt_wallet_event(event, self.url.keypair, self.encryptor)
        if plain is None:
            return None

        resp = extract_wallet_response(plain)
        if resp is None:
            return None

        handle_wallet_response(self.zapcache, self.evcache, resp)
        return resp
