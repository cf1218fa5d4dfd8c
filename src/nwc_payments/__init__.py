"""
Public facade for the wallet connect payment package.

Integrators can ``from nwc_payments import ...`` the descriptor, codec, event
builders and correlation helpers without navigating the package.
"""

from .api import create_wallet_client, pay_invoice
from .core import (
    ConfigError,
    EventCache,
    FullWalletResponse,
    NostrEvent,
    PendingZap,
    PendingZapStore,
    RelayTransport,
    WalletConnectClient,
    WalletConnectConfig,
    WalletConnectURL,
    WalletRequest,
    WalletResponse,
    build_request_event,
    decode_wallet_response,
    extract_wallet_response,
    handle_wallet_response,
    load_wallet_config,
    make_wallet_balance_request,
    make_wallet_pay_invoice_request,
    nwc_error,
    nwc_success,
)

__all__ = (
    "ConfigError",
    "EventCache",
    "FullWalletResponse",
    "NostrEvent",
    "PendingZap",
    "PendingZapStore",
    "RelayTransport",
    "WalletConnectClient",
    "WalletConnectConfig",
    "WalletConnectURL",
    "WalletRequest",
    "WalletResponse",
    "build_request_event",
    "create_wallet_client",
    "decode_wallet_response",
    "extract_wallet_response",
    "handle_wallet_response",
    "load_wallet_config",
    "make_wallet_balance_request",
    "make_wallet_pay_invoice_request",
    "nwc_error",
    "nwc_success",
    "pay_invoice",
)
