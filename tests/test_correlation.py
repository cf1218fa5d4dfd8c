"""
Tests for matching wallet responses to pending zaps.
"""

import threading

import pytest

from nwc_payments.core.correlation import (
    NwcPendingState,
    NwcState,
    PendingZap,
    PendingZapStore,
    handle_wallet_response,
    nwc_error,
    nwc_success,
    remove_zap,
)
from nwc_payments.core.events import FullWalletResponse
from nwc_payments.core.protocol import (
    PayInvoiceResponse,
    WalletResponse,
    WalletResponseError,
    WalletResponseResultType,
)

REQ_ID = "1" * 64


def _success(req_id=REQ_ID):
    return FullWalletResponse(
        req_id=req_id,
        response=WalletResponse(
            result_type=WalletResponseResultType.PAY_INVOICE,
            error=None,
            result=PayInvoiceResponse(preimage="abc"),
        ),
    )


def _failure(req_id=REQ_ID):
    return FullWalletResponse(
        req_id=req_id,
        response=WalletResponse(
            result_type=WalletResponseResultType.PAY_INVOICE,
            error=WalletResponseError(code="PAYMENT_FAILED", message="route not found"),
            result=None,
        ),
    )


@pytest.fixture
def store():
    zaps = PendingZapStore()
    zaps.add(PendingZap("zap-a", "alice", NwcPendingState(request_id=REQ_ID)))
    zaps.add(PendingZap("zap-b", "alice", NwcPendingState(request_id="2" * 64)))
    zaps.add(PendingZap("zap-c", "bob", NwcPendingState(request_id="3" * 64)))
    return zaps


def _snapshot(store):
    return sorted((z.zap_request_id, z.owner, z.nwc.request_id, z.nwc.state) for z in store)


def test_success_confirms_matching_zap(store):
    zap = nwc_success(store, _success())

    assert zap.zap_request_id == "zap-a"
    assert store.find("zap-a").nwc.state is NwcState.CONFIRMED
    assert store.find("zap-b").nwc.state is NwcState.POSTBOX_PENDING


def test_second_success_is_a_noop(store):
    nwc_success(store, _success())
    before = _snapshot(store)

    assert nwc_success(store, _success()) is None
    assert _snapshot(store) == before


def test_error_removes_zap(store, event_cache):
    zap = nwc_error(store, event_cache, _failure())

    assert zap.zap_request_id == "zap-a"
    assert store.find("zap-a") is None
    assert event_cache.removed == ["zap-a"]
    assert len(store) == 2


def test_error_after_confirmation_is_ignored(store, event_cache):
    nwc_success(store, _success())

    assert nwc_error(store, event_cache, _failure()) is None
    assert store.find("zap-a").nwc.state is NwcState.CONFIRMED
    assert event_cache.removed == []


def test_matches_across_owners(store):
    zap = nwc_success(store, _success("3" * 64))
    assert zap.owner == "bob"


def test_unmatched_response_changes_nothing(store, event_cache):
    before = _snapshot(store)

    assert nwc_success(store, _success("f" * 64)) is None
    assert nwc_error(store, event_cache, _failure("f" * 64)) is None
    assert _snapshot(store) == before
    assert event_cache.removed == []


def test_handle_routes_on_error_payload(store, event_cache):
    handle_wallet_response(store, event_cache, _failure("2" * 64))
    handle_wallet_response(store, event_cache, _success())

    assert store.find("zap-b") is None
    assert store.find("zap-a").nwc.state is NwcState.CONFIRMED


def test_duplicate_pending_request_id_rejected(store):
    with pytest.raises(ValueError):
        store.add(PendingZap("zap-d", "carol", NwcPendingState(request_id=REQ_ID)))


def test_empty_owner_list_is_dropped(store, event_cache):
    nwc_error(store, event_cache, _failure("3" * 64))
    assert store.zaps_for("bob") == []
    assert "bob" not in store.our_zaps


def test_concurrent_success_and_error_apply_once(event_cache):
    for _ in range(50):
        store = PendingZapStore()
        store.add(PendingZap("zap-a", "alice", NwcPendingState(request_id=REQ_ID)))
        results = []
        barrier = threading.Barrier(2)

        def deliver(resp):
            barrier.wait()
            results.append(handle_wallet_response(store, event_cache, resp))

        threads = [
            threading.Thread(target=deliver, args=(_success(),)),
            threading.Thread(target=deliver, args=(_failure(),)),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        applied = [zap for zap in results if zap is not None]
        assert len(applied) == 1
        remaining = store.find("zap-a")
        if remaining is None:
            assert event_cache.removed[-1] == "zap-a"
        else:
            assert remaining.nwc.state is NwcState.CONFIRMED


class CrossThreadReaderCache:
    """Event cache that reads the store from another thread while notified."""

    def __init__(self, store):
        self.store = store
        self.other_thread_saw = None

    def remove_zap(self, zap_request_id):
        seen = []
        reader = threading.Thread(target=lambda: seen.append(len(self.store)))
        reader.start()
        reader.join(timeout=2)
        self.other_thread_saw = seen[0] if seen else None


def test_error_notifies_cache_after_releasing_lock(store):
    cache = CrossThreadReaderCache(store)

    nwc_error(store, cache, _failure())

    assert cache.other_thread_saw == 2


def test_remove_zap_notifies_cache_after_releasing_lock(store):
    cache = CrossThreadReaderCache(store)

    removed = remove_zap("zap-c", store, cache)

    assert removed.zap_request_id == "zap-c"
    assert cache.other_thread_saw == 2


def test_remove_zap_unknown_id_still_clears_cache(store, event_cache):
    assert remove_zap("zap-x", store, event_cache) is None
    assert event_cache.removed == ["zap-x"]
    assert len(store) == 3


def test_prune_confirmed_drops_only_confirmed(store):
    nwc_success(store, _success())
    nwc_success(store, _success("3" * 64))

    pruned = store.prune_confirmed()

    assert sorted(zap.zap_request_id for zap in pruned) == ["zap-a", "zap-c"]
    assert [zap.zap_request_id for zap in store] == ["zap-b"]
    assert "bob" not in store.our_zaps
    assert store.prune_confirmed() == []
