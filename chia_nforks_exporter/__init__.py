"""
chia-exporter-nforks: Prometheus exporter for Chia and its forks
"""

__version__ = "1.0.0"
__author__ = "chia-exporter-nforks contributors"

from .models import CoinProfile, MetricGroup, MetricSample, NodeType, PoolStateEntry, Wallet
from .config import ExporterConfig, load_config, parse_config
from .rpc_client import CoinClients, RpcClient, RpcTransport
from .sink import SampleSink
from .coin import CoinCollector
from .registry import CoinRegistry
from .exporter import ScrapeOrchestrator, to_metric_families
from .utils import setup_logging
from .exceptions import *


__all__ = [
    "CoinProfile",
    "MetricGroup",
    "MetricSample",
    "NodeType",
    "PoolStateEntry",
    "Wallet",
    "ExporterConfig",
    "load_config",
    "parse_config",
    "CoinClients",
    "RpcClient",
    "RpcTransport",
    "SampleSink",
    "CoinCollector",
    "CoinRegistry",
    "ScrapeOrchestrator",
    "to_metric_families",
    "setup_logging",
    "ExporterException",
    "ConfigError",
    "RpcError",
    "ConnectivityError",
    "TlsError",
    "RpcTimeoutError",
    "DecodeError",
    "RpcResponseError",
]
