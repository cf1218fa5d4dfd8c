"""
Minimal script that builds a pay_invoice request with the public API.

The transport here only prints what a relay pool would publish.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from nwc_payments import ConfigError, create_wallet_client


class PrintingTransport:
    def add_relay(self, relay):
        logging.info("Would connect to %s", relay)

    def subscribe(self, sub_id, filters, relays):
        logging.info("Would subscribe %s to %s on %s", sub_id, filters, relays)

    def send(self, event, relays, *, delay):
        print(json.dumps(event.to_json_object(), indent=2))


class NoEventCache:
    def remove_zap(self, zap_request_id):
        logging.info("Would drop zap %s", zap_request_id)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build a wallet connect pay_invoice request")
    parser.add_argument("invoice", help="BOLT11 invoice to pay")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing NWC_CONNECTION_URL",
    )
    parser.add_argument(
        "--connection-url",
        help="Wallet connect URL, instead of NWC_CONNECTION_URL",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    try:
        client = create_wallet_client(
            PrintingTransport(),
            NoEventCache(),
            env_file=args.env_file,
            connection_url=args.connection_url,
        )
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    event = client.pay(args.invoice)
    return 0 if event is not None else 1


if __name__ == "__main__":
    sys.exit(main())
