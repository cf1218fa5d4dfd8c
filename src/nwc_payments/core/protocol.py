"""
Wire envelopes for wallet connect requests and responses.

Requests are ``{"method": ..., "params": ...}``. Responses carry a
``result_type`` tag that selects how ``result`` is decoded; adding a wallet
method means adding a :class:`WalletResponseResultType` member, a result
dataclass and one entry in ``_RESULT_DECODERS``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Union

__all__ = [
    "BalanceResponse",
    "EmptyRequest",
    "PayInvoiceRequest",
    "PayInvoiceResponse",
    "WalletDecodeError",
    "WalletEncodeError",
    "WalletRequest",
    "WalletResponse",
    "WalletResponseError",
    "WalletResponseResultType",
    "decode_wallet_response",
    "make_wallet_balance_request",
    "make_wallet_pay_invoice_request",
]

logger = logging.getLogger(__name__)


class WalletDecodeError(ValueError):
    """Raised when a wallet response does not match the expected shape."""


class WalletEncodeError(ValueError):
    """Raised when a wallet request cannot be serialized."""


@dataclass(frozen=True)
class PayInvoiceRequest:
    invoice: str


@dataclass(frozen=True)
class EmptyRequest:
    pass


RequestParams = Union[PayInvoiceRequest, EmptyRequest]


@dataclass(frozen=True)
class WalletRequest:
    method: str
    params: Optional[RequestParams] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"method": self.method}
        if self.params is not None:
            body["params"] = asdict(self.params)
        return body

    def to_json(self) -> str:
        try:
            return json.dumps(self.to_dict(), separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise WalletEncodeError(
                f"Cannot serialize {self.method!r} request: {exc}"
            ) from exc


def make_wallet_pay_invoice_request(invoice: str) -> WalletRequest:
    return WalletRequest(method="pay_invoice", params=PayInvoiceRequest(invoice=invoice))


def make_wallet_balance_request() -> WalletRequest:
    return WalletRequest(method="get_balance", params=None)


class WalletResponseResultType(str, Enum):
    PAY_INVOICE = "pay_invoice"
    GET_BALANCE = "get_balance"


def _optional_str(obj: Mapping[str, Any], key: str) -> Optional[str]:
    value = obj.get(key)
    if value is not None and not isinstance(value, str):
        raise WalletDecodeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _require_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise WalletDecodeError(f"{what} must be a JSON object")
    return value


@dataclass(frozen=True)
class WalletResponseError:
    code: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_dict(cls, obj: Any) -> "WalletResponseError":
        obj = _require_mapping(obj, "error")
        return cls(code=_optional_str(obj, "code"), message=_optional_str(obj, "message"))


@dataclass(frozen=True)
class PayInvoiceResponse:
    preimage: str

    @classmethod
    def from_dict(cls, obj: Any) -> "PayInvoiceResponse":
        obj = _require_mapping(obj, "result")
        preimage = obj.get("preimage")
        if not isinstance(preimage, str):
            raise WalletDecodeError("pay_invoice result requires a string preimage")
        return cls(preimage=preimage)


@dataclass(frozen=True)
class BalanceResponse:
    """Balance in millisatoshis."""

    balance: int

    @classmethod
    def from_dict(cls, obj: Any) -> "BalanceResponse":
        obj = _require_mapping(obj, "result")
        balance = obj.get("balance")
        if isinstance(balance, bool) or not isinstance(balance, int):
            raise WalletDecodeError("get_balance result requires an integer balance")
        return cls(balance=balance)


WalletResponseResult = Union[PayInvoiceResponse, BalanceResponse]

_RESULT_DECODERS: Dict[WalletResponseResultType, Callable[[Any], WalletResponseResult]] = {
    WalletResponseResultType.PAY_INVOICE: PayInvoiceResponse.from_dict,
    WalletResponseResultType.GET_BALANCE: BalanceResponse.from_dict,
}


@dataclass(frozen=True)
class WalletResponse:
    result_type: WalletResponseResultType
    error: Optional[WalletResponseError]
    result: Optional[WalletResponseResult]

    @classmethod
    def from_dict(cls, obj: Any) -> "WalletResponse":
        obj = _require_mapping(obj, "wallet response")

        raw_type = obj.get("result_type")
        if not isinstance(raw_type, str):
            raise WalletDecodeError("result_type must be a string")
        try:
            result_type = WalletResponseResultType(raw_type)
        except ValueError as exc:
            raise WalletDecodeError(f"result_type {raw_type} is unknown") from exc

        raw_error = obj.get("error")
        error = WalletResponseError.from_dict(raw_error) if raw_error is not None else None

        # wallets send "result": null alongside an error
        raw_result = obj.get("result")
        if raw_result is None and error is not None:
            result = None
        else:
            result = _RESULT_DECODERS[result_type](raw_result)

        return cls(result_type=result_type, error=error, result=result)

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "WalletResponse":
        try:
            payload = json.loads(text)
        except (TypeError, ValueError) as exc:
            raise WalletDecodeError(f"wallet response is not valid JSON: {exc}") from exc
        return cls.from_dict(payload)


def decode_wallet_response(text: Union[str, bytes]) -> Optional[WalletResponse]:
    try:
        return WalletResponse.from_json(text)
    except WalletDecodeError as exc:
        logger.debug("Discarding undecodable wallet response: %s", exc)
        return None
