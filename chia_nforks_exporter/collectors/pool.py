#!/usr/bin/env python3
"""
Pool State Collector
Per-pool difficulty and points from the farmer's get_pool_state
"""

import logging
from typing import Any, Dict, List

from ..models import MetricGroup, MetricSample, PoolStateEntry, items, number, section, text
from ..sink import SampleSink
from .base import GroupCollector, gauge

logger = logging.getLogger(__name__)


def parse_pool_state(payload: Dict[str, Any]) -> List[PoolStateEntry]:
    entries = []
    for raw in items(payload, "pool_state"):
        if not isinstance(raw, dict):
            raise TypeError(f"pool state entry should be an object, got {type(raw).__name__}")
        pool_config = section(raw, "pool_config")
        entries.append(PoolStateEntry(
            launcher_id=text(pool_config, "launcher_id"),
            pool_url=text(pool_config, "pool_url"),
            current_difficulty=number(raw, "current_difficulty"),
            current_points=number(raw, "current_points"),
            points_acknowledged_24h=items(raw, "points_acknowledged_24h"),
            points_found_24h=items(raw, "points_found_24h"),
        ))
    return entries


def translate_pool_state(coin: str, payload: Dict[str, Any]) -> List[MetricSample]:
    """Four samples per pool; the 24h metrics count list entries"""
    samples = []
    seen = set()
    for entry in parse_pool_state(payload):
        if entry.labels in seen:
            logger.warning(f"[{coin}] Skipping duplicate pool state for launcher {entry.launcher_id} at {entry.pool_url}")
            continue
        seen.add(entry.labels)
        samples.extend([
            gauge(coin, "pool_current_difficulty", "Current difficulty on pool.",
                  entry.current_difficulty, entry.labels),
            gauge(coin, "pool_current_points", "Current points on pool.",
                  entry.current_points, entry.labels),
            gauge(coin, "pool_points_acknowledged_24h", "Points acknowledged last 24h on pool.",
                  len(entry.points_acknowledged_24h), entry.labels),
            gauge(coin, "pool_points_found_24h", "Points found last 24h on pool.",
                  len(entry.points_found_24h), entry.labels),
        ])
    return samples


class PoolStateCollector(GroupCollector):
    """Pool group, farmer endpoint"""

    name = "pool state"
    endpoint = "farmer"
    groups = frozenset({MetricGroup.POOL_STATE})

    def collect(self, sink: SampleSink) -> None:
        sink.extend(self.fetch_samples("get_pool_state", translate_pool_state))
