#!/usr/bin/env python3
"""
Exporter Configuration
Loads the YAML config file into immutable coin profiles
"""

import os
import re
import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Tuple

import yaml

from .exceptions import ConfigError
from .models import CoinProfile, MetricGroup
from .rpc_client import (
    DEFAULT_HANDSHAKE_TIMEOUT,
    DEFAULT_IDLE_TIMEOUT,
    DEFAULT_POOL_SIZE,
    DEFAULT_REQUEST_TIMEOUT,
)

logger = logging.getLogger(__name__)

DEFAULT_PORT = 9133

METRIC_PREFIX_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")

TOP_LEVEL_KEYS = {
    "port", "listen-address", "request-timeout", "handshake-timeout",
    "idle-timeout", "pool-size", "coins",
}
COIN_REQUIRED_KEYS = ("host", "full-node-port", "wallet-port", "farmer-port", "harvester-port")
COIN_OPTIONAL_KEYS = ("cert", "key", "verify-server-cert", "ca-cert", "pull-switcher")


class UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses duplicate mapping keys instead of keeping the last one"""

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = set()
            for key_node, _ in node.value:
                key = self.construct_object(key_node, deep=deep)
                try:
                    duplicate = key in seen
                except TypeError:
                    continue
                if duplicate:
                    raise yaml.constructor.ConstructorError(
                        "while constructing a mapping", node.start_mark,
                        f"found duplicate key {key!r}", key_node.start_mark
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


@dataclass(frozen=True)
class ExporterConfig:
    """Validated exporter configuration"""
    coins: Tuple[CoinProfile, ...]
    port: int = DEFAULT_PORT
    listen_address: str = ""
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    handshake_timeout: float = DEFAULT_HANDSHAKE_TIMEOUT
    idle_timeout: float = DEFAULT_IDLE_TIMEOUT
    pool_size: int = DEFAULT_POOL_SIZE


def load_config(path: str) -> ExporterConfig:
    """Read and validate a config file; every failure is a ConfigError"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.load(f, Loader=UniqueKeyLoader)
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"cannot parse config file {path}: {e}") from e

    config = parse_config(raw)
    logger.info(f"Loaded {len(config.coins)} coin(s) from {path}")
    return config


def parse_config(raw: Any) -> ExporterConfig:
    if not isinstance(raw, dict):
        raise ConfigError("config must be a mapping")

    for key in raw:
        if key not in TOP_LEVEL_KEYS:
            logger.warning(f"Ignoring unknown config key '{key}'")

    coins_raw = raw.get("coins")
    if not isinstance(coins_raw, dict) or not coins_raw:
        raise ConfigError("config must define at least one coin under 'coins'")

    coins = tuple(parse_coin(name, coin_raw) for name, coin_raw in coins_raw.items())

    return ExporterConfig(
        coins=coins,
        port=_port(raw.get("port", DEFAULT_PORT), "port"),
        listen_address=str(raw.get("listen-address") or ""),
        request_timeout=_positive(raw, "request-timeout", DEFAULT_REQUEST_TIMEOUT),
        handshake_timeout=_positive(raw, "handshake-timeout", DEFAULT_HANDSHAKE_TIMEOUT),
        idle_timeout=_positive(raw, "idle-timeout", DEFAULT_IDLE_TIMEOUT),
        pool_size=int(_positive(raw, "pool-size", DEFAULT_POOL_SIZE)),
    )


def parse_coin(name: Any, raw: Any) -> CoinProfile:
    if not isinstance(name, str) or not METRIC_PREFIX_RE.match(name):
        raise ConfigError(f"coin name {name!r} is not a valid metric name prefix")
    if not isinstance(raw, dict):
        raise ConfigError(f"coin '{name}' must be a mapping")

    missing = [key for key in COIN_REQUIRED_KEYS if raw.get(key) in (None, "")]
    if missing:
        raise ConfigError(f"coin '{name}' is missing required keys: {', '.join(missing)}")

    for key in raw:
        if key not in COIN_REQUIRED_KEYS and key not in COIN_OPTIONAL_KEYS:
            logger.warning(f"[{name}] Ignoring unknown config key '{key}'")

    host = str(raw["host"])
    cert = raw.get("cert")
    key = raw.get("key")
    if bool(cert) != bool(key):
        raise ConfigError(f"coin '{name}' must set both 'cert' and 'key'")

    verify = raw.get("verify-server-cert", False)
    if not isinstance(verify, bool):
        raise ConfigError(f"coin '{name}': 'verify-server-cert' must be a boolean")

    return CoinProfile(
        name=name,
        full_node_url=build_base_url(host, _port(raw["full-node-port"], f"{name}.full-node-port")),
        wallet_url=build_base_url(host, _port(raw["wallet-port"], f"{name}.wallet-port")),
        farmer_url=build_base_url(host, _port(raw["farmer-port"], f"{name}.farmer-port")),
        harvester_url=build_base_url(host, _port(raw["harvester-port"], f"{name}.harvester-port")),
        enabled=parse_switches(name, raw.get("pull-switcher")),
        cert_path=os.path.expandvars(str(cert)) if cert else None,
        key_path=os.path.expandvars(str(key)) if key else None,
        verify_server_cert=verify,
        ca_cert_path=os.path.expandvars(str(raw["ca-cert"])) if raw.get("ca-cert") else None,
    )


def parse_switches(name: str, raw: Any) -> FrozenSet[MetricGroup]:
    """Map pull-switcher keys onto MetricGroup; an unknown key is an error"""
    if raw is None:
        return frozenset()
    if not isinstance(raw, dict):
        raise ConfigError(f"coin '{name}': 'pull-switcher' must be a mapping")

    enabled = set()
    for key, value in raw.items():
        try:
            group = MetricGroup(key)
        except ValueError:
            known = ", ".join(g.value for g in MetricGroup)
            raise ConfigError(f"coin '{name}': unknown pull-switcher key {key!r} (expected one of: {known})") from None
        if not isinstance(value, bool):
            raise ConfigError(f"coin '{name}': pull-switcher '{key}' must be true or false")
        if value:
            enabled.add(group)
    return frozenset(enabled)


def build_base_url(host: str, port: int) -> str:
    """{host}:{port}, defaulting to https when host carries no scheme"""
    host = host.rstrip("/")
    if "://" not in host:
        host = f"https://{host}"
    return f"{host}:{port}"


def _port(value: Any, field: str) -> int:
    try:
        port = int(str(value))
    except ValueError:
        raise ConfigError(f"'{field}' must be a port number, got {value!r}") from None
    if not 0 < port < 65536:
        raise ConfigError(f"'{field}' out of range: {port}")
    return port


def _positive(raw: Dict[str, Any], key: str, default: float) -> float:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"'{key}' must be a positive number, got {value!r}")
    return float(value)
