"""
Command-line interface for inspecting wallet connect URLs and messages.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from typing import Iterable, Optional, Sequence, TextIO, Tuple

from .core.config import ConfigError, WalletConnectConfig, load_wallet_config
from .core.events import (
    build_request_event,
    decrypt_wallet_event,
    event_from_json,
    extract_wallet_response,
)
from .core.protocol import (
    WalletRequest,
    make_wallet_balance_request,
    make_wallet_pay_invoice_request,
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    return {key: value for key, value in pairs}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nwc-payments",
        description="Build and decode wallet connect messages",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing NWC_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_env_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("describe", help="Print the public parts of the connection URL")

    pay = commands.add_parser("pay-request", help="Print a signed pay_invoice request event")
    pay.add_argument("--invoice", required=True, help="BOLT11 invoice to pay")
    pay.add_argument("--created-at", type=int, default=None, help="Event timestamp override")

    balance = commands.add_parser("balance-request", help="Print a signed get_balance request event")
    balance.add_argument("--created-at", type=int, default=None, help="Event timestamp override")

    decode = commands.add_parser("decode-response", help="Decode a wallet response event")
    decode.add_argument(
        "event_file",
        nargs="?",
        type=argparse.FileType("r"),
        default=sys.stdin,
        help="File holding the response event JSON (default: stdin)",
    )
    decode.add_argument(
        "--plaintext",
        action="store_true",
        help="Content is already decrypted",
    )
    return parser


def _print_json(payload: object, out: TextIO) -> None:
    out.write(json.dumps(payload, indent=2, sort_keys=True))
    out.write("\n")


def _emit_request(
    config: WalletConnectConfig,
    request: WalletRequest,
    created_at: Optional[int],
    out: TextIO,
) -> int:
    url = config.connection
    event = build_request_event(request, url.remote_pubkey, url.keypair, created_at)
    if event is None:
        logging.error("Could not build %s request", request.method)
        return 1
    _print_json(event.to_json_object(), out)
    return 0


def _decode_response(
    config: WalletConnectConfig,
    source: TextIO,
    plaintext: bool,
    out: TextIO,
) -> int:
    try:
        event = event_from_json(json.load(source))
    except (KeyError, TypeError, ValueError) as exc:
        logging.error("Invalid event JSON: %s", exc)
        return 1

    if not plaintext:
        decrypted = decrypt_wallet_event(event, config.connection.keypair)
        if decrypted is None:
            return 1
        event = decrypted

    resp = extract_wallet_response(event)
    if resp is None:
        logging.error("Event %s is not a wallet response", event.id)
        return 1

    _print_json(
        {
            "req_id": resp.req_id,
            "result_type": resp.response.result_type.value,
            "error": dataclasses.asdict(resp.response.error) if resp.response.error else None,
            "result": dataclasses.asdict(resp.response.result) if resp.response.result else None,
        },
        out,
    )
    return 0


def run_cli(argv: Sequence[str] | None = None, out: TextIO | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    out = out or sys.stdout

    _configure_logging(args.log_level)
    overrides = _collect_overrides(args.set or ())

    try:
        config = load_wallet_config(env_file=args.env_file, overrides=overrides)
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    if args.command == "describe":
        _print_json(config.connection.describe(), out)
        return 0
    if args.command == "pay-request":
        return _emit_request(
            config, make_wallet_pay_invoice_request(args.invoice), args.created_at, out
        )
    if args.command == "balance-request":
        return _emit_request(config, make_wallet_balance_request(), args.created_at, out)
    return _decode_response(config, args.event_file, args.plaintext, out)


def main() -> None:
    sys.exit(run_cli())
