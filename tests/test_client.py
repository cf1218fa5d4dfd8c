"""
Tests for the wallet connect client against a recording transport.
"""

import json

import pytest

from nwc_payments import create_wallet_client, pay_invoice
from nwc_payments.core.config import WalletConnectConfig
from nwc_payments.core.correlation import NwcState
from nwc_payments.core.events import NWC_RESPONSE_KIND, NostrEvent
from nwc_payments.core.keys import Nip04Encryptor

from conftest import CLIENT_PUBKEY, RELAY, WALLET_PUBKEY


@pytest.fixture
def config(connection):
    return WalletConnectConfig(connection=connection)


@pytest.fixture
def client(config, transport, event_cache):
    return create_wallet_client(transport, event_cache, config=config)


def test_pay_sends_request_and_subscribes(client, transport, wallet_keypair):
    event = client.pay("lnbc1...")

    assert [relay.id for relay in transport.relays] == [RELAY]
    assert transport.subscriptions == [
        ("nwc", [{"kinds": [NWC_RESPONSE_KIND], "authors": [WALLET_PUBKEY], "limit": 0}], [RELAY])
    ]
    assert transport.sent == [(event, [RELAY], 5.0)]

    body = json.loads(Nip04Encryptor().decrypt(event.content, CLIENT_PUBKEY, wallet_keypair))
    assert body == {"method": "pay_invoice", "params": {"invoice": "lnbc1..."}}


def test_pay_tracks_pending_zap(client):
    event = client.pay("lnbc1...", zap_request_id="zap-1", owner="alice")

    zap = client.zapcache.find("zap-1")
    assert zap.owner == "alice"
    assert zap.nwc.request_id == event.id
    assert zap.nwc.state is NwcState.POSTBOX_PENDING


def test_success_reply_confirms(client, make_wallet_reply):
    event = client.pay("lnbc1...", zap_request_id="zap-1")
    reply = make_wallet_reply(event.id, {"result_type": "pay_invoice", "result": {"preimage": "00ff"}})

    resp = client.handle_event(reply)

    assert resp.req_id == event.id
    assert client.zapcache.find("zap-1").nwc.state is NwcState.CONFIRMED


def test_error_reply_removes(client, make_wallet_reply, event_cache):
    event = client.pay("lnbc1...", zap_request_id="zap-1")
    reply = make_wallet_reply(
        event.id,
        {"result_type": "pay_invoice", "error": {"code": "QUOTA_EXCEEDED", "message": "no"}, "result": None},
    )

    client.handle_event(reply)

    assert client.zapcache.find("zap-1") is None
    assert event_cache.removed == ["zap-1"]


def test_reply_from_other_author_ignored(client, make_wallet_reply):
    event = client.pay("lnbc1...", zap_request_id="zap-1")
    reply = make_wallet_reply(event.id, {"result_type": "pay_invoice", "result": {"preimage": "x"}})
    forged = NostrEvent(
        pubkey=CLIENT_PUBKEY,
        content=reply.content,
        created_at=reply.created_at,
        kind=reply.kind,
        tags=reply.tags,
    )

    assert client.handle_event(forged) is None
    assert client.zapcache.find("zap-1").nwc.state is NwcState.POSTBOX_PENDING


def test_request_balance(client, transport, wallet_keypair):
    event = client.request_balance()

    assert transport.sent[0][0] is event
    body = json.loads(Nip04Encryptor().decrypt(event.content, CLIENT_PUBKEY, wallet_keypair))
    assert body == {"method": "get_balance"}


def test_create_client_rejects_config_and_params(config, transport, event_cache):
    with pytest.raises(ValueError):
        create_wallet_client(transport, event_cache, config=config, connection_url="x")


def test_pay_invoice_from_connection_url(connection_url_text, transport, event_cache):
    event = pay_invoice(
        "lnbc1...",
        transport,
        event_cache,
        env_file=None,
        connection_url=connection_url_text,
    )

    assert event.pubkey == CLIENT_PUBKEY
    assert transport.sent[0][0] is event
