"""
High-level helpers for talking to a wallet over wallet connect.
"""

from __future__ import annotations

from typing import Mapping, Optional

from .core.client import RelayTransport, WalletConnectClient
from .core.config import WalletConnectConfig, load_wallet_config
from .core.correlation import EventCache, PendingZapStore
from .core.events import NostrEvent

__all__ = [
    "create_wallet_client",
    "pay_invoice",
]


def create_wallet_client(
    transport: RelayTransport,
    evcache: EventCache,
    *,
    config: Optional[WalletConnectConfig] = None,
    zapcache: Optional[PendingZapStore] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    connection_url: Optional[str] = None,
    send_delay_seconds: Optional[float] = None,
) -> WalletConnectClient:
    """
    Construct a :class:`WalletConnectClient`.

    Callers either supply a ready-made :class:`WalletConnectConfig` or let the
    helper assemble one from environment data.
    """
    if config is not None:
        extras = (overrides, base, connection_url, send_delay_seconds)
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built WalletConnectConfig or individual parameters, not both."
            )
        cfg = config
    else:
        cfg = load_wallet_config(
            env_file=env_file,
            overrides=overrides,
            base=base,
            connection_url=connection_url,
            send_delay_seconds=send_delay_seconds,
        )
    return WalletConnectClient(cfg, transport, evcache, zapcache=zapcache)


def pay_invoice(
    invoice: str,
    transport: RelayTransport,
    evcache: EventCache,
    *,
    config: Optional[WalletConnectConfig] = None,
    zapcache: Optional[PendingZapStore] = None,
    zap_request_id: Optional[str] = None,
    env_file: Optional[str] = ".env",
    connection_url: Optional[str] = None,
) -> Optional[NostrEvent]:
    """
    One-shot helper: build a client and hand a pay_invoice request to ``transport``.
    """
    client = create_wallet_client(
        transport,
        evcache,
        config=config,
        zapcache=zapcache,
        env_file=env_file,
        connection_url=connection_url,
    )
    return client.pay(invoice, zap_request_id=zap_request_id)
