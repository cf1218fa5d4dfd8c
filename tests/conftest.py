"""
Pytest fixtures for wallet connect tests.
"""

import json

import pytest

from nwc_payments.core.connection import FullKeypair, RelayURL, WalletConnectURL
from nwc_payments.core.events import NWC_RESPONSE_KIND, NostrEvent
from nwc_payments.core.keys import Nip04Encryptor

CLIENT_SECRET = "0" * 63 + "1"
CLIENT_PUBKEY = "79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
WALLET_SECRET = "0" * 63 + "2"
WALLET_PUBKEY = "c6047f9441ed7d6d3045406e95c07cd85c778e4b8cef3ca7abac09b95c709ee5"
RELAY = "wss://relay.example.com"


class RecordingEventCache:
    def __init__(self):
        self.removed = []

    def remove_zap(self, zap_request_id):
        self.removed.append(zap_request_id)


class RecordingTransport:
    def __init__(self):
        self.relays = []
        self.subscriptions = []
        self.sent = []

    def add_relay(self, relay):
        self.relays.append(relay)

    def subscribe(self, sub_id, filters, relays):
        self.subscriptions.append((sub_id, filters, relays))

    def send(self, event, relays, *, delay):
        self.sent.append((event, relays, delay))


@pytest.fixture
def client_keypair():
    return FullKeypair(pubkey=CLIENT_PUBKEY, privkey=CLIENT_SECRET)


@pytest.fixture
def wallet_keypair():
    return FullKeypair(pubkey=WALLET_PUBKEY, privkey=WALLET_SECRET)


@pytest.fixture
def connection_url_text():
    return (
        f"nostrwalletconnect://{WALLET_PUBKEY}"
        f"?relay={RELAY}&secret={CLIENT_SECRET}&lud16=alice@example.com"
    )


@pytest.fixture
def connection(client_keypair):
    return WalletConnectURL(
        relay=RelayURL(RELAY),
        keypair=client_keypair,
        remote_pubkey=WALLET_PUBKEY,
        lud16="alice@example.com",
    )


@pytest.fixture
def event_cache():
    return RecordingEventCache()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def make_wallet_reply(wallet_keypair):
    """Build a response event as the wallet would publish it."""

    def _make(req_id, payload, *, encrypt=True, created_at=1700000100):
        content = json.dumps(payload)
        if encrypt:
            content = Nip04Encryptor().encrypt(content, CLIENT_PUBKEY, wallet_keypair)
        event = NostrEvent(
            pubkey=WALLET_PUBKEY,
            content=content,
            created_at=created_at,
            kind=NWC_RESPONSE_KIND,
            tags=[["p", CLIENT_PUBKEY], ["e", req_id]],
        )
        event.sign(WALLET_SECRET)
        return event

    return _make
