#!/usr/bin/env python3
"""
Connections Collector
Peer counts per node type from the full node's get_connections
"""

import logging
from typing import Any, Dict, List

from ..models import NUM_NODE_TYPES, MetricGroup, MetricSample, items, number
from ..sink import SampleSink
from .base import GroupCollector, gauge

logger = logging.getLogger(__name__)

PEERS_HELP = "Number of peers currently connected."


def translate_connections(coin: str, payload: Dict[str, Any]) -> List[MetricSample]:
    """Count peers into one bucket per node type, zero-filled"""
    peers = [0] * NUM_NODE_TYPES

    for connection in items(payload, "connections"):
        if not isinstance(connection, dict):
            raise TypeError(f"connection entry should be an object, got {type(connection).__name__}")
        node_type = number(connection, "type")
        if not node_type.is_integer() or not 1 <= node_type <= NUM_NODE_TYPES:
            logger.warning(f"[{coin}] Ignoring peer with unknown node type {connection.get('type')!r}")
            continue
        peers[int(node_type) - 1] += 1

    return [
        gauge(coin, "peers_count", PEERS_HELP, count, [("type", str(index + 1))])
        for index, count in enumerate(peers)
    ]


class ConnectionsCollector(GroupCollector):
    """Connections group, full node endpoint"""

    name = "connections"
    endpoint = "full_node"
    groups = frozenset({MetricGroup.CONNECTIONS})

    def collect(self, sink: SampleSink) -> None:
        sink.extend(self.fetch_samples("get_connections", translate_connections))
