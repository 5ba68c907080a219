#!/usr/bin/env python3
"""
Wallet Collector
Per-wallet balance, sync and farmed-amount metrics from the wallet service
"""

import logging
from typing import Any, Callable, Dict, List

from ..exceptions import RpcError
from ..models import (
    WALLET_GROUPS,
    MetricGroup,
    MetricSample,
    Wallet,
    flag,
    items,
    number,
    section,
    sync_status,
)
from ..sink import SampleSink
from .base import GroupCollector, gauge
from .blockchain import SYNC_STATUS_HELP

logger = logging.getLogger(__name__)

# (metric suffix, help, response field)
BALANCE_METRICS = (
    ("wallet_confirmed_balance_mojo", "Confirmed wallet balance.", "confirmed_wallet_balance"),
    ("wallet_unconfirmed_balance_mojo", "Unconfirmed wallet balance.", "unconfirmed_wallet_balance"),
    ("wallet_spendable_balance_mojo", "Spendable wallet balance.", "spendable_balance"),
    ("wallet_max_send_mojo", "Maximum sendable amount.", "max_send_amount"),
    ("wallet_pending_change_mojo", "Pending change amount.", "pending_change"),
)

FARMED_METRICS = (
    ("wallet_farmed_amount", "Farmed amount", "farmed_amount"),
    ("wallet_reward_amount", "Reward amount", "farmer_reward_amount"),
    ("wallet_fee_amount", "Fee amount", "fee_amount"),
    ("wallet_last_height_farmed", "Last height farmed", "last_height_farmed"),
    ("wallet_pool_reward_amount", "Pool reward amount", "pool_reward_amount"),
)


def parse_wallets(coin: str, payload: Dict[str, Any]) -> List[Wallet]:
    wallets = []
    for entry in items(payload, "wallets"):
        if not isinstance(entry, dict):
            raise TypeError(f"wallet entry should be an object, got {type(entry).__name__}")
        wallet_id = entry.get("id")
        if wallet_id is None:
            wallet_id = 0
        if isinstance(wallet_id, bool) or not isinstance(wallet_id, int):
            raise TypeError(f"wallet id should be an integer, got {wallet_id!r}")
        wallets.append(Wallet(id=wallet_id))
    return wallets


def select_fingerprint(coin: str, payload: Dict[str, Any], wallet: Wallet) -> str:
    """First public key fingerprint of the wallet, or "" when there is none"""
    fingerprints = items(payload, "public_key_fingerprints")
    if not fingerprints:
        logger.warning(f"[{coin}] No public key for wallet {wallet.id}")
        return ""
    if len(fingerprints) > 1:
        logger.warning(f"[{coin}] Wallet {wallet.id} has {len(fingerprints)} public keys; using the first")
    return str(fingerprints[0])


def translate_wallet_balance(coin: str, payload: Dict[str, Any], wallet: Wallet) -> List[MetricSample]:
    balance = section(payload, "wallet_balance")
    return [
        gauge(coin, suffix, help_text, number(balance, field), wallet.labels)
        for suffix, help_text, field in BALANCE_METRICS
    ]


def translate_wallet_sync_status(coin: str, payload: Dict[str, Any], wallet: Wallet) -> List[MetricSample]:
    value = sync_status(flag(payload, "syncing"), flag(payload, "synced"))
    return [gauge(coin, "wallet_sync_status", SYNC_STATUS_HELP, value, wallet.labels)]


def translate_wallet_height(coin: str, payload: Dict[str, Any], wallet: Wallet) -> List[MetricSample]:
    return [gauge(coin, "wallet_height", "Wallet synced height.", number(payload, "height"), wallet.labels)]


def translate_farmed_amount(coin: str, payload: Dict[str, Any], wallet: Wallet) -> List[MetricSample]:
    return [
        gauge(coin, suffix, help_text, number(payload, field), wallet.labels)
        for suffix, help_text, field in FARMED_METRICS
    ]


class WalletCollector(GroupCollector):
    """Wallet group, wallet endpoint; wallets are walked sequentially"""

    name = "wallet"
    endpoint = "wallet"
    groups = WALLET_GROUPS

    def collect(self, sink: SampleSink) -> None:
        payload = self.fetch("get_wallets")
        wallets = self.translate("get_wallets", parse_wallets, payload)

        for wallet in wallets:
            wallet.fingerprint = self.resolve_fingerprint(wallet)
            if self.coin.is_enabled(MetricGroup.WALLET_BALANCE):
                self._collect_section(sink, wallet, "balance", self.collect_balance)
            if self.coin.is_enabled(MetricGroup.WALLET_SYNC):
                self._collect_section(sink, wallet, "sync", self.collect_sync)
            if self.coin.is_enabled(MetricGroup.FARMED_AMOUNT):
                self._collect_section(sink, wallet, "farmed amount", self.collect_farmed_amount)

    def resolve_fingerprint(self, wallet: Wallet) -> str:
        """Fingerprint lookup never aborts the wallet; failures yield an empty label"""
        try:
            payload = self.fetch("get_public_keys", self._params(wallet))
            return self.translate("get_public_keys", select_fingerprint, payload, wallet)
        except RpcError as e:
            self.logger.warning(f"[{self.coin.name}] Could not resolve fingerprint for wallet {wallet.id}: {e}")
            return ""

    def collect_balance(self, sink: SampleSink, wallet: Wallet) -> None:
        sink.extend(self.fetch_samples(
            "get_wallet_balance", translate_wallet_balance, wallet, params=self._params(wallet)
        ))

    def collect_sync(self, sink: SampleSink, wallet: Wallet) -> None:
        params = self._params(wallet)
        sink.extend(self.fetch_samples("get_sync_status", translate_wallet_sync_status, wallet, params=params))
        sink.extend(self.fetch_samples("get_height_info", translate_wallet_height, wallet, params=params))

    def collect_farmed_amount(self, sink: SampleSink, wallet: Wallet) -> None:
        sink.extend(self.fetch_samples(
            "get_farmed_amount", translate_farmed_amount, wallet, params=self._params(wallet)
        ))

    def _collect_section(self, sink: SampleSink, wallet: Wallet, label: str,
                         collect: Callable[[SampleSink, Wallet], None]) -> None:
        try:
            collect(sink, wallet)
        except RpcError as e:
            self.logger.error(f"[{self.coin.name}] Wallet {wallet.id} {label} collection failed on {self.client.name} endpoint: {e}")

    @staticmethod
    def _params(wallet: Wallet) -> Dict[str, Any]:
        return {"wallet_id": wallet.id}
