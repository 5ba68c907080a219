"""
Metric Group Collectors
One collector per metric group, each translating one RPC service's payloads into gauges
"""

from .base import GroupCollector, gauge
from .connections import ConnectionsCollector, translate_connections
from .blockchain import BlockchainStateCollector, translate_blockchain_state
from .wallet import (
    WalletCollector,
    translate_farmed_amount,
    translate_wallet_balance,
    translate_wallet_height,
    translate_wallet_sync_status,
)
from .pool import PoolStateCollector, translate_pool_state
from .plots import PlotsCollector, translate_plots

# Dispatch order per coin; execution order within a scrape is not guaranteed
GROUP_COLLECTORS = (
    ConnectionsCollector,
    BlockchainStateCollector,
    WalletCollector,
    PoolStateCollector,
    PlotsCollector,
)

__all__ = [
    'GroupCollector',
    'gauge',
    'ConnectionsCollector',
    'BlockchainStateCollector',
    'WalletCollector',
    'PoolStateCollector',
    'PlotsCollector',
    'GROUP_COLLECTORS',
    'translate_connections',
    'translate_blockchain_state',
    'translate_wallet_balance',
    'translate_wallet_sync_status',
    'translate_wallet_height',
    'translate_farmed_amount',
    'translate_pool_state',
    'translate_plots',
]
