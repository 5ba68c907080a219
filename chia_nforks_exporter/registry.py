#!/usr/bin/env python3
"""
Coin Registry
Immutable set of per-coin collectors built once at startup
"""

import logging
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from .coin import CoinCollector
from .config import ExporterConfig
from .exceptions import ConfigError
from .rpc_client import CoinClients, RpcTransport

logger = logging.getLogger(__name__)


class CoinRegistry:
    """Read-only view of every configured coin, keyed by unique name"""

    def __init__(self, collectors: Iterable[CoinCollector]):
        by_name = {}
        for collector in collectors:
            if collector.name in by_name:
                raise ConfigError(f"duplicate coin name '{collector.name}'")
            by_name[collector.name] = collector
        self._collectors: Mapping[str, CoinCollector] = MappingProxyType(by_name)

    @classmethod
    def from_config(cls, config: ExporterConfig, probe: bool = True) -> "CoinRegistry":
        """Build transports and clients for every coin, then optionally probe each full node"""
        collectors = []
        for profile in config.coins:
            transport = RpcTransport.from_profile(
                profile, pool_size=config.pool_size, idle_timeout=config.idle_timeout
            )
            clients = CoinClients.from_profile(
                profile, transport,
                timeout=config.request_timeout,
                handshake_timeout=config.handshake_timeout,
            )
            if not profile.verify_server_cert:
                logger.warning(f"[{profile.name}] Server certificate verification is disabled")
            collectors.append(CoinCollector(profile, clients))

        registry = cls(collectors)
        if probe:
            for collector in registry:
                collector.probe()
        return registry

    @property
    def task_count(self) -> int:
        """Number of group tasks one scrape dispatches across all coins"""
        return sum(len(collector.group_tasks()) for collector in self)

    def get(self, name: str) -> Optional[CoinCollector]:
        return self._collectors.get(name)

    def names(self):
        return list(self._collectors)

    def close(self) -> None:
        for collector in self:
            collector.close()

    def __iter__(self) -> Iterator[CoinCollector]:
        return iter(self._collectors.values())

    def __len__(self) -> int:
        return len(self._collectors)

    def __contains__(self, name: object) -> bool:
        return name in self._collectors
