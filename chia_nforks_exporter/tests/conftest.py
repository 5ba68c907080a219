"""
Shared fixtures: a scripted RPC client and canned node responses
"""

import pytest

from chia_nforks_exporter.exceptions import RpcError
from chia_nforks_exporter.models import CoinProfile, MetricGroup
from chia_nforks_exporter.rpc_client import CoinClients


class FakeRpcClient:
    """Stands in for RpcClient; answers from a method -> response table"""

    def __init__(self, name, responses=None, base_url=None):
        self.name = name
        self.base_url = base_url or f"https://localhost/{name}"
        self.responses = dict(responses or {})
        self.calls = []

    def query(self, method, params=None):
        self.calls.append((method, params))
        if method not in self.responses:
            raise AssertionError(f"unexpected call to {method}")
        response = self.responses[method]
        if callable(response):
            response = response(params)
        if isinstance(response, RpcError):
            raise response
        return response

    def methods(self):
        return [method for method, _ in self.calls]


def make_profile(name="chia", enabled=tuple(MetricGroup)):
    return CoinProfile(
        name=name,
        full_node_url="https://localhost:8555",
        wallet_url="https://localhost:9256",
        farmer_url="https://localhost:8559",
        harvester_url="https://localhost:8560",
        enabled=frozenset(enabled),
    )


def make_clients(full_node=None, wallet=None, farmer=None, harvester=None):
    return CoinClients(
        full_node=FakeRpcClient("full_node", full_node),
        wallet=FakeRpcClient("wallet", wallet),
        farmer=FakeRpcClient("farmer", farmer),
        harvester=FakeRpcClient("harvester", harvester),
    )


def by_wallet(table):
    """Response callable keyed on the wallet_id request parameter"""
    return lambda params: table[params["wallet_id"]]


@pytest.fixture
def full_node_responses():
    return {
        "get_connections": {
            "connections": [{"type": 1}, {"type": 1}, {"type": 3}, {"type": 6}],
            "success": True,
        },
        "get_blockchain_state": {
            "blockchain_state": {
                "difficulty": 2896,
                "space": 3.1e19,
                "sync": {"sync_mode": False, "synced": True},
                "peak": {"height": 1234567, "total_iters": 4400000000000},
            },
            "success": True,
        },
        "get_network_info": {"network_name": "mainnet", "network_prefix": "xch", "success": True},
    }


@pytest.fixture
def wallet_responses():
    return {
        "get_wallets": {"wallets": [{"id": 1, "name": "Chia Wallet", "type": 0}], "success": True},
        "get_public_keys": {"public_key_fingerprints": [3405691582], "success": True},
        "get_wallet_balance": {
            "wallet_balance": {
                "confirmed_wallet_balance": 1750000000000,
                "unconfirmed_wallet_balance": 1750000000000,
                "spendable_balance": 1500000000000,
                "max_send_amount": 1500000000000,
                "pending_change": 0,
                "wallet_id": 1,
            },
            "success": True,
        },
        "get_sync_status": {"syncing": False, "synced": True, "success": True},
        "get_height_info": {"height": 1234560, "success": True},
        "get_farmed_amount": {
            "farmed_amount": 2000000000000,
            "farmer_reward_amount": 250000000000,
            "fee_amount": 5,
            "last_height_farmed": 1200000,
            "pool_reward_amount": 1750000000000,
            "success": True,
        },
    }


@pytest.fixture
def farmer_responses():
    return {
        "get_pool_state": {
            "pool_state": [{
                "pool_config": {
                    "launcher_id": "0xae4ef3b9bfe68949691281a015a9c16630fc8f66d48c19ca548fb80768791afa",
                    "pool_url": "https://pool.example.org",
                },
                "current_difficulty": 4,
                "current_points": 120,
                "points_acknowledged_24h": [[1634000000, 4], [1634000100, 4], [1634000200, 4]],
                "points_found_24h": [[1634000000, 4], [1634000100, 4], [1634000200, 4],
                                     [1634000300, 4], [1634000400, 4]],
            }],
            "success": True,
        },
    }


@pytest.fixture
def harvester_responses():
    return {
        "get_plots": {
            "failed_to_open_filenames": ["/plots/bad.plot"],
            "not_found_filenames": [],
            "plots": [{"filename": f"/plots/p{i}.plot"} for i in range(4)],
            "success": True,
        },
    }


@pytest.fixture
def healthy_clients(full_node_responses, wallet_responses, farmer_responses, harvester_responses):
    return make_clients(full_node_responses, wallet_responses, farmer_responses, harvester_responses)
