"""
Tests for the metric group translators and collectors
"""

import logging

import pytest

from chia_nforks_exporter.collectors import (
    BlockchainStateCollector,
    ConnectionsCollector,
    PlotsCollector,
    PoolStateCollector,
    WalletCollector,
    translate_blockchain_state,
    translate_connections,
    translate_plots,
    translate_pool_state,
)
from chia_nforks_exporter.exceptions import ConnectivityError, DecodeError, RpcTimeoutError
from chia_nforks_exporter.models import MetricGroup
from chia_nforks_exporter.sink import SampleSink

from conftest import by_wallet, make_clients, make_profile


def values_by_name(samples):
    return {sample.name: sample.value for sample in samples}


class TestTranslateConnections:
    def test_buckets_by_type_zero_filled(self):
        payload = {"connections": [{"type": 1}, {"type": 1}, {"type": 3}]}
        samples = translate_connections("chia", payload)

        assert len(samples) == 6
        counts = {sample.label_dict()["type"]: sample.value for sample in samples}
        assert counts == {"1": 2.0, "2": 0.0, "3": 1.0, "4": 0.0, "5": 0.0, "6": 0.0}
        assert all(sample.name == "chia_peers_count" for sample in samples)

    def test_no_connections_still_emits_six_buckets(self):
        samples = translate_connections("chia", {"connections": []})
        assert [s.value for s in samples] == [0.0] * 6

    def test_unknown_type_is_skipped(self, caplog):
        with caplog.at_level(logging.WARNING):
            samples = translate_connections("chia", {"connections": [{"type": 9}, {"type": 2}]})

        assert sum(s.value for s in samples) == 1.0
        assert "unknown node type" in caplog.text

    def test_connections_not_a_list(self):
        with pytest.raises(TypeError):
            translate_connections("chia", {"connections": {"type": 1}})


class TestTranslateBlockchainState:
    @pytest.mark.parametrize("sync_mode,synced,expected", [
        (False, False, 0.0),
        (True, False, 1.0),
        (False, True, 2.0),
        (True, True, 1.0),
    ])
    def test_sync_status(self, sync_mode, synced, expected):
        payload = {"blockchain_state": {"sync": {"sync_mode": sync_mode, "synced": synced}}}
        values = values_by_name(translate_blockchain_state("chia", payload))
        assert values["chia_blockchain_sync_status"] == expected

    def test_gauges(self, full_node_responses):
        values = values_by_name(translate_blockchain_state("chia", full_node_responses["get_blockchain_state"]))

        assert values == {
            "chia_blockchain_sync_status": 2.0,
            "chia_blockchain_height": 1234567.0,
            "chia_blockchain_difficulty": 2896.0,
            "chia_blockchain_space_bytes": 3.1e19,
            "chia_blockchain_total_iters": 4400000000000.0,
        }

    def test_missing_peak_reads_as_zero(self):
        payload = {"blockchain_state": {"peak": None, "sync": {"synced": False}}}
        values = values_by_name(translate_blockchain_state("chia", payload))
        assert values["chia_blockchain_height"] == 0.0
        assert values["chia_blockchain_total_iters"] == 0.0

    def test_string_height_is_rejected(self):
        payload = {"blockchain_state": {"peak": {"height": "tall"}}}
        with pytest.raises(TypeError):
            translate_blockchain_state("chia", payload)


class TestTranslatePoolState:
    def test_24h_metrics_count_entries(self, farmer_responses):
        samples = translate_pool_state("chia", farmer_responses["get_pool_state"])
        values = values_by_name(samples)

        assert len(samples) == 4
        assert values["chia_pool_points_acknowledged_24h"] == 3.0
        assert values["chia_pool_points_found_24h"] == 5.0
        assert values["chia_pool_current_difficulty"] == 4.0
        assert values["chia_pool_current_points"] == 120.0

    def test_list_contents_do_not_matter(self):
        payload = {"pool_state": [{
            "pool_config": {"launcher_id": "0x01", "pool_url": "https://p"},
            "points_acknowledged_24h": [None, "x", 999],
            "points_found_24h": [{}, {}, {}, {}, {}],
        }]}
        values = values_by_name(translate_pool_state("chia", payload))
        assert values["chia_pool_points_acknowledged_24h"] == 3.0
        assert values["chia_pool_points_found_24h"] == 5.0

    def test_labels(self, farmer_responses):
        sample = translate_pool_state("chia", farmer_responses["get_pool_state"])[0]
        assert sample.label_names == ["launcher_id", "pool_url"]
        assert sample.label_dict()["pool_url"] == "https://pool.example.org"

    def test_no_pools(self):
        assert translate_pool_state("chia", {"pool_state": []}) == []

    def test_duplicate_pool_is_skipped(self, farmer_responses, caplog):
        entry = farmer_responses["get_pool_state"]["pool_state"][0]
        other = dict(entry, pool_config={"launcher_id": "0x02", "pool_url": "https://other.example.org"})
        payload = {"pool_state": [entry, dict(entry, current_points=999), other]}

        with caplog.at_level(logging.WARNING):
            samples = translate_pool_state("chia", payload)

        assert len(samples) == 8
        points = [s.value for s in samples if s.name == "chia_pool_current_points"]
        assert points == [120.0, 120.0]
        assert "Skipping duplicate pool state" in caplog.text


class TestTranslatePlots:
    def test_counts(self, harvester_responses):
        values = values_by_name(translate_plots("chia", harvester_responses["get_plots"]))
        assert values == {
            "chia_plots_failed_to_open": 1.0,
            "chia_plots_not_found": 0.0,
            "chia_plots": 4.0,
        }


class TestGroupCollectors:
    def test_disabled_group_issues_no_query(self, healthy_clients):
        profile = make_profile(enabled=())
        collector = ConnectionsCollector(profile, healthy_clients)
        sink = SampleSink()

        collector.run(sink)

        assert len(sink) == 0
        assert healthy_clients.full_node.calls == []

    def test_rpc_failure_is_logged_and_isolated(self, caplog):
        clients = make_clients(full_node={
            "get_blockchain_state": ConnectivityError("https://localhost:8555", "get_blockchain_state", "refused"),
        })
        collector = BlockchainStateCollector(make_profile(), clients)
        sink = SampleSink()

        with caplog.at_level(logging.ERROR):
            collector.run(sink)

        assert len(sink) == 0
        assert "[chia] blockchain state collection failed on full_node endpoint" in caplog.text

    def test_bad_shape_becomes_decode_error(self):
        clients = make_clients(harvester={"get_plots": {"plots": "many"}})
        collector = PlotsCollector(make_profile(), clients)

        with pytest.raises(DecodeError):
            collector.collect(SampleSink())

    def test_endpoints(self, healthy_clients):
        profile = make_profile()
        assert ConnectionsCollector(profile, healthy_clients).client.name == "full_node"
        assert WalletCollector(profile, healthy_clients).client.name == "wallet"
        assert PoolStateCollector(profile, healthy_clients).client.name == "farmer"
        assert PlotsCollector(profile, healthy_clients).client.name == "harvester"


class TestWalletCollector:
    def run_wallets(self, clients, enabled=tuple(MetricGroup)):
        sink = SampleSink()
        WalletCollector(make_profile(enabled=enabled), clients).run(sink)
        return sink.drain()

    def test_all_sections(self, wallet_responses):
        clients = make_clients(wallet=wallet_responses)
        samples = self.run_wallets(clients)

        assert len(samples) == 12
        values = values_by_name(samples)
        assert values["chia_wallet_confirmed_balance_mojo"] == 1750000000000.0
        assert values["chia_wallet_spendable_balance_mojo"] == 1500000000000.0
        assert values["chia_wallet_sync_status"] == 2.0
        assert values["chia_wallet_height"] == 1234560.0
        assert values["chia_wallet_reward_amount"] == 250000000000.0
        assert values["chia_wallet_pool_reward_amount"] == 1750000000000.0
        for sample in samples:
            assert sample.label_dict() == {"wallet_id": "1", "wallet_fingerprint": "3405691582"}

    def test_requests_carry_wallet_id(self, wallet_responses):
        clients = make_clients(wallet=wallet_responses)
        self.run_wallets(clients)

        get_wallets_call, *per_wallet = clients.wallet.calls
        assert get_wallets_call == ("get_wallets", None)
        assert all(params == {"wallet_id": 1} for _, params in per_wallet)

    def test_sub_switches_gate_queries(self, wallet_responses):
        clients = make_clients(wallet=wallet_responses)
        samples = self.run_wallets(clients, enabled=[MetricGroup.WALLET_SYNC])

        assert {s.name for s in samples} == {"chia_wallet_sync_status", "chia_wallet_height"}
        assert "get_wallet_balance" not in clients.wallet.methods()
        assert "get_farmed_amount" not in clients.wallet.methods()

    def test_no_fingerprint_uses_empty_label(self, wallet_responses, caplog):
        wallet_responses["get_wallets"] = {"wallets": [{"id": 7}, {"id": 8}]}
        wallet_responses["get_public_keys"] = by_wallet({
            7: {"public_key_fingerprints": []},
            8: {"public_key_fingerprints": [42]},
        })
        clients = make_clients(wallet=wallet_responses)

        with caplog.at_level(logging.WARNING):
            samples = self.run_wallets(clients)

        wallet_7 = [s for s in samples if s.label_dict()["wallet_id"] == "7"]
        wallet_8 = [s for s in samples if s.label_dict()["wallet_id"] == "8"]
        assert len(wallet_7) == 12
        assert all(s.label_dict()["wallet_fingerprint"] == "" for s in wallet_7)
        assert len(wallet_8) == 12
        assert all(s.label_dict()["wallet_fingerprint"] == "42" for s in wallet_8)
        assert "No public key for wallet 7" in caplog.text

    def test_multiple_fingerprints_uses_first(self, wallet_responses, caplog):
        wallet_responses["get_public_keys"] = {"public_key_fingerprints": [11, 22]}
        clients = make_clients(wallet=wallet_responses)

        with caplog.at_level(logging.WARNING):
            samples = self.run_wallets(clients, enabled=[MetricGroup.WALLET_BALANCE])

        assert {s.label_dict()["wallet_fingerprint"] for s in samples} == {"11"}
        assert "using the first" in caplog.text

    def test_fingerprint_failure_does_not_block(self, wallet_responses):
        wallet_responses["get_public_keys"] = RpcTimeoutError("https://localhost:9256", "get_public_keys", "timed out")
        clients = make_clients(wallet=wallet_responses)

        samples = self.run_wallets(clients)

        assert len(samples) == 12
        assert all(s.label_dict()["wallet_fingerprint"] == "" for s in samples)

    def test_height_failure_keeps_sync_status(self, wallet_responses):
        wallet_responses["get_height_info"] = ConnectivityError("https://localhost:9256", "get_height_info", "reset")
        clients = make_clients(wallet=wallet_responses)

        samples = self.run_wallets(clients, enabled=[MetricGroup.WALLET_SYNC])

        assert [s.name for s in samples] == ["chia_wallet_sync_status"]

    def test_syncing_wins_over_synced(self, wallet_responses):
        wallet_responses["get_sync_status"] = {"syncing": True, "synced": True}
        clients = make_clients(wallet=wallet_responses)

        samples = self.run_wallets(clients, enabled=[MetricGroup.WALLET_SYNC])

        assert values_by_name(samples)["chia_wallet_sync_status"] == 1.0

    def test_balance_failure_keeps_other_sections(self, wallet_responses):
        wallet_responses["get_wallet_balance"] = ConnectivityError("https://localhost:9256", "get_wallet_balance", "reset")
        clients = make_clients(wallet=wallet_responses)

        samples = self.run_wallets(clients)

        names = {s.name for s in samples}
        assert "chia_wallet_confirmed_balance_mojo" not in names
        assert "chia_wallet_sync_status" in names
        assert "chia_wallet_farmed_amount" in names

    def test_wallet_without_id_reads_as_zero(self, wallet_responses):
        wallet_responses["get_wallets"] = {"wallets": [{"name": "Chia Wallet", "type": 0}]}
        clients = make_clients(wallet=wallet_responses)

        samples = self.run_wallets(clients, enabled=[MetricGroup.WALLET_BALANCE])

        assert len(samples) == 5
        assert {s.label_dict()["wallet_id"] for s in samples} == {"0"}
        assert ("get_wallet_balance", {"wallet_id": 0}) in clients.wallet.calls

    def test_get_wallets_failure_emits_nothing(self, wallet_responses):
        wallet_responses["get_wallets"] = ConnectivityError("https://localhost:9256", "get_wallets", "refused")
        clients = make_clients(wallet=wallet_responses)

        assert self.run_wallets(clients) == []
        assert clients.wallet.methods() == ["get_wallets"]
