#!/usr/bin/env python3
"""
Blockchain State Collector
Sync status, height, difficulty, netspace and total iterations
"""

from typing import Any, Dict, List

from ..models import MetricGroup, MetricSample, flag, number, section, sync_status
from ..sink import SampleSink
from .base import GroupCollector, gauge

SYNC_STATUS_HELP = "Sync status, 0=not synced, 1=syncing, 2=synced"


def translate_blockchain_state(coin: str, payload: Dict[str, Any]) -> List[MetricSample]:
    state = section(payload, "blockchain_state")
    sync = section(state, "sync")
    peak = section(state, "peak")

    return [
        gauge(coin, "blockchain_sync_status", SYNC_STATUS_HELP,
              sync_status(flag(sync, "sync_mode"), flag(sync, "synced"))),
        gauge(coin, "blockchain_height", "Current height", number(peak, "height")),
        gauge(coin, "blockchain_difficulty", "Current difficulty", number(state, "difficulty")),
        gauge(coin, "blockchain_space_bytes", "Estimated current netspace", number(state, "space")),
        gauge(coin, "blockchain_total_iters", "Current total iterations", number(peak, "total_iters")),
    ]


class BlockchainStateCollector(GroupCollector):
    """Blockchain state group, full node endpoint"""

    name = "blockchain state"
    endpoint = "full_node"
    groups = frozenset({MetricGroup.BLOCKCHAIN_STATE})

    def collect(self, sink: SampleSink) -> None:
        sink.extend(self.fetch_samples("get_blockchain_state", translate_blockchain_state))
