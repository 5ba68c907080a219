#!/usr/bin/env python3
"""
Group Collector Base
Shared gating, querying and failure isolation for one metric group of one coin
"""

import logging
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from ..exceptions import DecodeError, RpcError
from ..models import CoinProfile, MetricGroup, MetricSample
from ..rpc_client import CoinClients, RpcClient
from ..sink import SampleSink

logger = logging.getLogger(__name__)


def gauge(coin: str, suffix: str, help_text: str, value: float,
          labels: Iterable[Tuple[str, str]] = ()) -> MetricSample:
    """Build a gauge sample named {coin}_{suffix}"""
    return MetricSample(name=f"{coin}_{suffix}", help=help_text, value=float(value), labels=tuple(labels))


class GroupCollector:
    """One metric group of one coin, run as an independent task per scrape"""

    name = "group"
    endpoint = "full_node"
    groups: FrozenSet[MetricGroup] = frozenset()

    def __init__(self, coin: CoinProfile, clients: CoinClients):
        self.coin = coin
        self.client: RpcClient = getattr(clients, self.endpoint)
        self.logger = logger

    def enabled(self) -> bool:
        return bool(self.coin.enabled & self.groups)

    def run(self, sink: SampleSink) -> None:
        """Collect into sink; an RPC failure drops only this group's remaining samples"""
        if not self.enabled():
            return
        try:
            self.collect(sink)
        except RpcError as e:
            self.logger.error(f"[{self.coin.name}] {self.name} collection failed on {self.client.name} endpoint: {e}")

    def collect(self, sink: SampleSink) -> None:
        raise NotImplementedError

    def fetch(self, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.client.query(method, params)

    def translate(self, method: str, translator: Callable[..., Any], payload: Dict[str, Any], *args) -> Any:
        """Apply a pure translator, reporting shape mismatches as DecodeError"""
        try:
            return translator(self.coin.name, payload, *args)
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(self.client.base_url, method, f"unexpected response shape: {e}") from e

    def fetch_samples(self, method: str, translator: Callable[..., List[MetricSample]],
                      *args, params: Optional[Dict[str, Any]] = None) -> List[MetricSample]:
        payload = self.fetch(method, params)
        return self.translate(method, translator, payload, *args)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.coin.name})"
