"""
Configuration for a wallet connect session.

Values come from the process environment, an optional ``.env`` file and
explicit overrides, merged by :func:`build_environment`.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, MutableMapping, Optional

from .connection import WalletConnectURL

__all__ = [
    "ConfigError",
    "WalletConnectConfig",
    "build_environment",
    "load_env_file",
    "load_wallet_config",
]

ENV_CONNECTION_URL = "NWC_CONNECTION_URL"
ENV_SEND_DELAY = "NWC_SEND_DELAY_SECONDS"
ENV_SUBSCRIPTION_ID = "NWC_SUBSCRIPTION_ID"

DEFAULT_SEND_DELAY = 5.0
DEFAULT_SUBSCRIPTION_ID = "nwc"


class ConfigError(Exception):
    """Raised when the supplied configuration is invalid."""


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _read_env_file(path: Path) -> Dict[str, str]:
    values: Dict[str, str] = {}
    try:
        data = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return values

    for raw_line in data.splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        # connection URLs contain '=' and '&', only the first '=' splits
        key, value = line.split("=", 1)
        values[key.strip()] = _unquote(value.strip())
    return values


def load_env_file(
    path: str = ".env",
    *,
    environ: Optional[MutableMapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Copy variables from ``path`` into ``environ`` without replacing existing keys.
    """
    target: MutableMapping[str, str] = environ if environ is not None else os.environ
    for key, value in _read_env_file(Path(path)).items():
        target.setdefault(key, value)
    return dict(target)


def build_environment(
    *,
    env_file: Optional[str] = ".env",
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Merge ``base`` (default :data:`os.environ`), ``env_file`` and ``overrides``.

    File values never replace ``base`` values; ``overrides`` replace both.
    """
    merged: Dict[str, str] = dict(os.environ if base is None else base)
    if env_file is not None:
        for key, value in _read_env_file(Path(env_file)).items():
            merged.setdefault(key, value)
    if overrides:
        merged.update(overrides)
    return merged


def _parse_delay(raw: str) -> float:
    try:
        delay = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{ENV_SEND_DELAY} must be a number, got '{raw}'") from exc
    if not math.isfinite(delay) or delay < 0:
        raise ConfigError(f"{ENV_SEND_DELAY} must be a finite, non-negative number")
    return delay


@dataclass(frozen=True)
class WalletConnectConfig:
    connection: WalletConnectURL
    send_delay_seconds: float = DEFAULT_SEND_DELAY
    subscription_id: str = DEFAULT_SUBSCRIPTION_ID

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "WalletConnectConfig":
        raw_url = (values.get(ENV_CONNECTION_URL) or "").strip()
        if not raw_url:
            raise ConfigError(f"{ENV_CONNECTION_URL} must be provided")

        connection = WalletConnectURL.parse(raw_url)
        if connection is None:
            # the URL embeds a private key; keep it out of the message
            raise ConfigError(f"{ENV_CONNECTION_URL} is not a valid wallet connect URL")

        send_delay = _parse_delay(values.get(ENV_SEND_DELAY, str(DEFAULT_SEND_DELAY)))

        subscription_id = values.get(ENV_SUBSCRIPTION_ID, DEFAULT_SUBSCRIPTION_ID).strip()
        if not subscription_id:
            raise ConfigError(f"{ENV_SUBSCRIPTION_ID} must not be empty")

        return cls(
            connection=connection,
            send_delay_seconds=send_delay,
            subscription_id=subscription_id,
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        connection_url: Optional[str] = None,
        send_delay_seconds: Optional[float] = None,
    ) -> "WalletConnectConfig":
        merged_overrides = dict(overrides or {})
        if connection_url is not None:
            merged_overrides[ENV_CONNECTION_URL] = connection_url
        if send_delay_seconds is not None:
            merged_overrides[ENV_SEND_DELAY] = str(send_delay_seconds)

        variables = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(variables)


def load_wallet_config(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    connection_url: Optional[str] = None,
    send_delay_seconds: Optional[float] = None,
) -> WalletConnectConfig:
    """
    Convenience wrapper that mirrors :meth:`WalletConnectConfig.from_env`.
    """
    return WalletConnectConfig.from_env(
        env_file=env_file,
        overrides=overrides,
        base=base,
        connection_url=connection_url,
        send_delay_seconds=send_delay_seconds,
    )
