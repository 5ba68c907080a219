#!/usr/bin/env python3
"""
Per-Coin Collector
Owns one coin's endpoint clients and dispatches its enabled metric groups
"""

import logging
from typing import Callable, List, Tuple

from .collectors import GROUP_COLLECTORS, GroupCollector
from .exceptions import RpcError
from .models import CoinProfile
from .rpc_client import CoinClients
from .sink import SampleSink

logger = logging.getLogger(__name__)

GroupTask = Tuple[str, Callable[[SampleSink], None]]


class CoinCollector:
    """Collector for a single coin (fork)"""

    def __init__(self, profile: CoinProfile, clients: CoinClients):
        self.profile = profile
        self.clients = clients
        self.groups: Tuple[GroupCollector, ...] = tuple(
            collector_cls(profile, clients) for collector_cls in GROUP_COLLECTORS
        )

    @property
    def name(self) -> str:
        return self.profile.name

    def group_tasks(self) -> List[GroupTask]:
        """(group name, task) for every enabled group; disabled groups never query"""
        return [(group.name, group.run) for group in self.groups if group.enabled()]

    def collect(self, sink: SampleSink) -> None:
        """Run every enabled group in turn on the calling thread"""
        for group_name, task in self.group_tasks():
            logger.debug(f"[{self.name}] Collecting {group_name}")
            task(sink)

    def probe(self) -> bool:
        """Startup connectivity check against the full node; never fatal"""
        try:
            info = self.clients.full_node.query("get_network_info")
        except RpcError as e:
            logger.warning(f"[{self.name}] Startup probe failed: {e}")
            return False

        network = info.get("network_name", "unknown")
        logger.info(f"[{self.name}] Connected to node at {self.clients.full_node.base_url} on {network}")
        return True

    def close(self) -> None:
        self.clients.close()

    def __repr__(self) -> str:
        return f"CoinCollector({self.name})"
