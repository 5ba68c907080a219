#!/usr/bin/env python3
"""
Exporter Data Models
Data structures shared by the collectors, registry and exposition layer
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


class MetricGroup(str, Enum):
    """Named pull switches; values are the configuration keys"""
    CONNECTIONS = "conn"
    BLOCKCHAIN_STATE = "state"
    WALLET_BALANCE = "wallet-balance"
    WALLET_SYNC = "wallet-sync"
    FARMED_AMOUNT = "farmed-amount"
    POOL_STATE = "pool"
    PLOTS = "plots"


WALLET_GROUPS = frozenset({
    MetricGroup.WALLET_BALANCE,
    MetricGroup.WALLET_SYNC,
    MetricGroup.FARMED_AMOUNT,
})


class NodeType(IntEnum):
    """Peer types reported by get_connections"""
    FULL_NODE = 1
    HARVESTER = 2
    FARMER = 3
    TIMELORD = 4
    INTRODUCER = 5
    WALLET = 6


NUM_NODE_TYPES = len(NodeType)


@dataclass(frozen=True)
class CoinProfile:
    """One configured coin (fork) and its four RPC services"""
    name: str
    full_node_url: str
    wallet_url: str
    farmer_url: str
    harvester_url: str
    enabled: FrozenSet[MetricGroup] = frozenset()
    cert_path: Optional[str] = None
    key_path: Optional[str] = None
    verify_server_cert: bool = False
    ca_cert_path: Optional[str] = None

    def is_enabled(self, group: MetricGroup) -> bool:
        return group in self.enabled

    @property
    def wallet_enabled(self) -> bool:
        """Wallet task runs when any of its three sub-switches is on"""
        return bool(self.enabled & WALLET_GROUPS)


@dataclass(frozen=True)
class MetricSample:
    """A single gauge value produced during one scrape"""
    name: str
    help: str
    value: float
    labels: Tuple[Tuple[str, str], ...] = ()
    kind: str = "gauge"

    @property
    def label_names(self) -> List[str]:
        return [k for k, _ in self.labels]

    @property
    def label_values(self) -> List[str]:
        return [v for _, v in self.labels]

    def label_dict(self) -> Dict[str, str]:
        return dict(self.labels)


@dataclass
class Wallet:
    """Wallet as listed by get_wallets, with its resolved fingerprint"""
    id: int
    fingerprint: str = ""

    @property
    def string_id(self) -> str:
        return str(self.id)

    @property
    def labels(self) -> Tuple[Tuple[str, str], ...]:
        return (("wallet_id", self.string_id), ("wallet_fingerprint", self.fingerprint))


@dataclass
class PoolStateEntry:
    """One farmer pool state entry"""
    launcher_id: str
    pool_url: str
    current_difficulty: float = 0.0
    current_points: float = 0.0
    points_acknowledged_24h: List[Any] = field(default_factory=list)
    points_found_24h: List[Any] = field(default_factory=list)

    @property
    def labels(self) -> Tuple[Tuple[str, str], ...]:
        return (("launcher_id", self.launcher_id), ("pool_url", self.pool_url))


# Payload field helpers. A missing field decodes to its zero value;
# a present field of the wrong shape is an error.

def section(payload: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = payload.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise TypeError(f"field '{key}' should be an object, got {type(value).__name__}")
    return value


def items(payload: Dict[str, Any], key: str) -> List[Any]:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"field '{key}' should be a list, got {type(value).__name__}")
    return value


def number(payload: Dict[str, Any], key: str) -> float:
    value = payload.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"field '{key}' should be a number, got {type(value).__name__}")
    return float(value)


def flag(payload: Dict[str, Any], key: str) -> bool:
    value = payload.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise TypeError(f"field '{key}' should be a boolean, got {type(value).__name__}")
    return value


def text(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    return str(value)


def sync_status(syncing: bool, synced: bool) -> float:
    """0=not synced, 1=syncing, 2=synced; syncing wins over synced"""
    if syncing:
        return 1.0
    if synced:
        return 2.0
    return 0.0
