"""
Core primitives for the wallet connect request/response lifecycle.
"""

from .client import RelayTransport, WalletConnectClient, nwc_filter, subscribe_to_nwc
from .config import (
    ConfigError,
    WalletConnectConfig,
    build_environment,
    load_env_file,
    load_wallet_config,
)
from .connection import FullKeypair, RelayURL, WalletConnectURL
from .correlation import (
    EventCache,
    NwcPendingState,
    NwcState,
    PendingZap,
    PendingZapStore,
    handle_wallet_response,
    nwc_error,
    nwc_success,
    remove_zap,
)
from .events import (
    NWC_REQUEST_KIND,
    NWC_RESPONSE_KIND,
    FullWalletResponse,
    NostrEvent,
    build_request_event,
    decrypt_wallet_event,
    event_from_json,
    extract_wallet_response,
    referenced_ids,
)
from .keys import ContentEncryptor, DecryptionError, Nip04Encryptor, privkey_to_pubkey
from .protocol import (
    BalanceResponse,
    PayInvoiceRequest,
    PayInvoiceResponse,
    WalletDecodeError,
    WalletEncodeError,
    WalletRequest,
    WalletResponse,
    WalletResponseError,
    WalletResponseResultType,
    decode_wallet_response,
    make_wallet_balance_request,
    make_wallet_pay_invoice_request,
)

__all__ = [
    "BalanceResponse",
    "ConfigError",
    "ContentEncryptor",
    "DecryptionError",
    "EventCache",
    "FullKeypair",
    "FullWalletResponse",
    "NWC_REQUEST_KIND",
    "NWC_RESPONSE_KIND",
    "Nip04Encryptor",
    "NostrEvent",
    "NwcPendingState",
    "NwcState",
    "PayInvoiceRequest",
    "PayInvoiceResponse",
    "PendingZap",
    "PendingZapStore",
    "RelayTransport",
    "RelayURL",
    "WalletConnectClient",
    "WalletConnectConfig",
    "WalletConnectURL",
    "WalletDecodeError",
    "WalletEncodeError",
    "WalletRequest",
    "WalletResponse",
    "WalletResponseError",
    "WalletResponseResultType",
    "build_environment",
    "build_request_event",
    "decode_wallet_response",
    "decrypt_wallet_event",
    "event_from_json",
    "extract_wallet_response",
    "handle_wallet_response",
    "load_env_file",
    "load_wallet_config",
    "make_wallet_balance_request",
    "make_wallet_pay_invoice_request",
    "nwc_error",
    "nwc_filter",
    "nwc_success",
    "privkey_to_pubkey",
    "referenced_ids",
    "remove_zap",
    "subscribe_to_nwc",
]
