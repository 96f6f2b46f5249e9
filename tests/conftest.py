"""
Pytest configuration and global fixtures.

Provides an in-memory node engine and a control-plane app wired to it.
"""

import hashlib
import secrets
import threading
import time
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from relaynode.api.app import create_app
from relaynode.application.state import AppState
from relaynode.domain.enums import PaymentStatus
from relaynode.domain.value_objects import (
    MSAT_PER_SAT,
    BalanceDetails,
    ChannelDetails,
    PaymentDetails,
    PeerDetails,
    SeedMaterial,
    SocketAddress,
)
from relaynode.infrastructure.node_handle import NodeHandle
from relaynode.utils.config import Settings

BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"

PEER_PUBKEY = "02" + "11" * 32
OTHER_PUBKEY = "03" + "22" * 32
TEST_SEED_HEX = "ab" * 64

# Locked balance that never becomes spendable; total - spendable stays constant
RESERVE_SATS = 5_000


def fake_invoice(amount_msat: int, nonce: bytes) -> str:
    """Build a string shaped like a regtest BOLT-11 invoice."""
    digest = hashlib.sha256(nonce + amount_msat.to_bytes(16, "big")).digest()
    data = "".join(BECH32_CHARSET[b % 32] for b in digest * 3)
    return f"lnbcrt{amount_msat}p1{data}"


class FakeNode(NodeHandle):
    """In-memory node engine.

    Thread-safe like the real engine: every operation holds one internal lock.
    Records each call so tests can check exactly what reached the engine.
    """

    def __init__(self, seed: SeedMaterial | None = None):
        seed = seed or SeedMaterial.from_hex(TEST_SEED_HEX)
        self._node_id = b"\x02" + hashlib.sha256(seed.data).digest()
        self._lock = threading.Lock()
        self.started = False
        self.stopped = False
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.failures: dict[str, Exception] = {}
        self.peers: dict[bytes, PeerDetails] = {}
        self.channels: list[ChannelDetails] = []
        self.payments: dict[bytes, PaymentDetails] = {}
        self.invoices: dict[str, int] = {}
        self.address_index = 0
        self.total_sats = 100_000 + RESERVE_SATS
        self.spendable_sats = 100_000
        self.sync_delay = 0.0

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.failures:
            raise self.failures[name]

    def calls_to(self, name: str) -> list[tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]

    def start(self) -> None:
        self._record("start")
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def node_id(self) -> bytes:
        return self._node_id

    def connect(self, node_id: bytes, address: SocketAddress, persist: bool) -> None:
        with self._lock:
            self._record("connect", node_id, address, persist)
            self.peers[node_id] = PeerDetails(node_id=node_id, address=str(address))

    def list_peers(self) -> list[PeerDetails]:
        with self._lock:
            self._record("list_peers")
            return list(self.peers.values())

    def new_onchain_address(self) -> str:
        with self._lock:
            self._record("new_onchain_address")
            self.address_index += 1
            return f"bcrt1qfake{self.address_index:04d}"

    def connect_open_channel(
        self,
        node_id: bytes,
        address: SocketAddress,
        channel_amount_msat: int,
        push_to_counterparty_msat: int | None,
        announce_channel: bool,
    ) -> int:
        with self._lock:
            self._record(
                "connect_open_channel",
                node_id,
                address,
                channel_amount_msat,
                push_to_counterparty_msat,
                announce_channel,
            )
            self.peers[node_id] = PeerDetails(node_id=node_id, address=str(address))
            user_channel_id = secrets.randbits(128)
            push = push_to_counterparty_msat or 0
            self.channels.append(
                ChannelDetails(
                    channel_id=secrets.token_bytes(32),
                    counterparty_node_id=node_id,
                    channel_value_sats=channel_amount_msat // MSAT_PER_SAT,
                    user_channel_id=user_channel_id,
                    outbound_capacity_msat=channel_amount_msat - push,
                    inbound_capacity_msat=push,
                    is_channel_ready=False,
                    is_usable=False,
                )
            )
            return user_channel_id

    def list_channels(self) -> list[ChannelDetails]:
        with self._lock:
            self._record("list_channels")
            return list(self.channels)

    def send_payment(self, invoice: str) -> bytes:
        with self._lock:
            self._record("send_payment", invoice)
            payment_hash = hashlib.sha256(invoice.encode()).digest()
            self.payments[payment_hash] = PaymentDetails(
                payment_hash=payment_hash, status=PaymentStatus.PENDING
            )
            return payment_hash

    def receive_payment(self, amount_msat: int, description: str, expiry_secs: int) -> str:
        with self._lock:
            self._record("receive_payment", amount_msat, description, expiry_secs)
            invoice = fake_invoice(amount_msat, secrets.token_bytes(8))
            self.invoices[invoice] = amount_msat
            return invoice

    def sync_wallets(self) -> None:
        with self._lock:
            self._record("sync_wallets")
            # Two separate writes; a reader outside the lock would see them torn
            self.total_sats += 1_000
            time.sleep(self.sync_delay)
            self.spendable_sats += 1_000

    def list_balances(self) -> BalanceDetails:
        with self._lock:
            self._record("list_balances")
            return BalanceDetails(
                total_onchain_balance_sats=self.total_sats,
                spendable_onchain_balance_sats=self.spendable_sats,
            )

    def payment(self, payment_hash: bytes) -> PaymentDetails | None:
        with self._lock:
            self._record("payment", payment_hash)
            return self.payments.get(payment_hash)

    def settle(self, payment_hash: bytes, preimage: bytes | None = None) -> None:
        """Resolve a pending payment the way the engine would."""
        with self._lock:
            if payment_hash not in self.payments:
                raise KeyError(payment_hash.hex())
            status = PaymentStatus.SUCCEEDED if preimage else PaymentStatus.FAILED
            self.payments[payment_hash] = PaymentDetails(
                payment_hash=payment_hash,
                status=status,
                preimage=preimage,
            )


@pytest.fixture
def fake_node() -> FakeNode:
    node = FakeNode()
    node.start()
    return node


@pytest.fixture
def app_state(fake_node: FakeNode) -> Generator[AppState, None, None]:
    state = AppState.create(fake_node, worker_threads=4)
    yield state
    state.close()


@pytest.fixture
def app(app_state: AppState) -> FastAPI:
    return create_app(app_state)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a temporary data directory."""
    return Settings(
        data_dir=tmp_path / "node",
        rpc_port=3000,
        node_service_port=9735,
        esplora_url="http://127.0.0.1:3002",
        rgs_url="http://127.0.0.1:8011/snapshot",
        network="regtest",
    )
