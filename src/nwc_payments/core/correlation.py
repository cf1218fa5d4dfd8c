"""
Matching wallet responses to pending zaps.

Each pending zap paid through wallet connect waits in ``postbox_pending`` for
the wallet's reply. A success reply moves it to ``confirmed``; an error reply
removes the zap altogether. Both transitions run while holding the store lock,
so a second reply for the same request finds nothing left to match.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Protocol

from .events import FullWalletResponse

__all__ = [
    "EventCache",
    "NwcPendingState",
    "NwcState",
    "PendingZap",
    "PendingZapStore",
    "handle_wallet_response",
    "nwc_error",
    "nwc_success",
    "remove_zap",
]

logger = logging.getLogger(__name__)


class NwcState(str, Enum):
    POSTBOX_PENDING = "postbox_pending"
    CONFIRMED = "confirmed"


@dataclass
class NwcPendingState:
    request_id: str
    state: NwcState = NwcState.POSTBOX_PENDING


@dataclass
class PendingZap:
    zap_request_id: str
    owner: str
    nwc: NwcPendingState

    def awaiting(self, request_id: str) -> bool:
        return self.nwc.state is NwcState.POSTBOX_PENDING and self.nwc.request_id == request_id


class EventCache(Protocol):
    """The part of the application's event cache that tracks zaps."""

    def remove_zap(self, zap_request_id: str) -> None:
        ...


class PendingZapStore:
    """
    In-flight zaps grouped by the identity that sent them.

    Mutations go through ``lock``. Wallet request ids are unique across the
    whole store: :meth:`add` refuses a second pending zap for the same id.
    Confirmed zaps stay until the owner of the store calls :meth:`remove` or
    :meth:`prune_confirmed`.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.our_zaps: Dict[str, List[PendingZap]] = {}

    def add(self, zap: PendingZap) -> None:
        with self.lock:
            for existing in self:
                if existing.awaiting(zap.nwc.request_id):
                    raise ValueError(
                        f"wallet request {zap.nwc.request_id} is already pending"
                    )
            self.our_zaps.setdefault(zap.owner, []).append(zap)

    def remove(self, zap_request_id: str) -> Optional[PendingZap]:
        with self.lock:
            for owner, zaps in self.our_zaps.items():
                for index, zap in enumerate(zaps):
                    if zap.zap_request_id != zap_request_id:
                        continue
                    del zaps[index]
                    if not zaps:
                        del self.our_zaps[owner]
                    return zap
        return None

    def find(self, zap_request_id: str) -> Optional[PendingZap]:
        with self.lock:
            for zap in self:
                if zap.zap_request_id == zap_request_id:
                    return zap
        return None

    def prune_confirmed(self) -> List[PendingZap]:
        """Drop every confirmed zap and return them."""
        with self.lock:
            confirmed = [zap for zap in self if zap.nwc.state is NwcState.CONFIRMED]
            for zap in confirmed:
                self.remove(zap.zap_request_id)
        return confirmed

    def zaps_for(self, owner: str) -> List[PendingZap]:
        with self.lock:
            return list(self.our_zaps.get(owner, ()))

    def __iter__(self) -> Iterator[PendingZap]:
        for zaps in list(self.our_zaps.values()):
            yield from list(zaps)

    def __len__(self) -> int:
        with self.lock:
            return sum(len(zaps) for zaps in self.our_zaps.values())


def _match(zapcache: PendingZapStore, req_id: str) -> Optional[PendingZap]:
    for zap in zapcache:
        if zap.awaiting(req_id):
            return zap
    return None


def remove_zap(
    zap_request_id: str,
    zapcache: PendingZapStore,
    evcache: EventCache,
) -> Optional[PendingZap]:
    removed = zapcache.remove(zap_request_id)
    # the cache is called without the store lock held
    evcache.remove_zap(zap_request_id)
    return removed


def nwc_success(zapcache: PendingZapStore, resp: FullWalletResponse) -> Optional[PendingZap]:
    """Mark the zap awaiting ``resp`` as confirmed."""
    with zapcache.lock:
        zap = _match(zapcache, resp.req_id)
        if zap is None:
            logger.debug("No pending zap for wallet response to %s", resp.req_id)
            return None
        zap.nwc.state = NwcState.CONFIRMED

    logger.info("Wallet confirmed zap %s", zap.zap_request_id)
    return zap


def nwc_error(
    zapcache: PendingZapStore,
    evcache: EventCache,
    resp: FullWalletResponse,
) -> Optional[PendingZap]:
    """Drop the zap awaiting ``resp`` from the store and the event cache."""
    with zapcache.lock:
        zap = _match(zapcache, resp.req_id)
        if zap is None:
            logger.debug("No pending zap for wallet error on %s", resp.req_id)
            return None
        zapcache.remove(zap.zap_request_id)
    evcache.remove_zap(zap.zap_request_id)

    error = resp.response.error
    logger.warning(
        "Wallet rejected zap %s: %s %s",
        zap.zap_request_id,
        error.code if error else None,
        error.message if error else None,
    )
    return zap


def handle_wallet_response(
    zapcache: PendingZapStore,
    evcache: EventCache,
    resp: FullWalletResponse,
) -> Optional[PendingZap]:
    if resp.response.error is not None:
        return nwc_error(zapcache, evcache, resp)
    return nwc_success(zapcache, resp)
