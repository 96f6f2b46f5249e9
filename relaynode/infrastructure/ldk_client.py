"""LDK Node adapter.

Wraps the ``ldk_node`` Python bindings behind the ``NodeHandle`` interface.
The bindings represent keys, hashes and addresses as strings; this module is
the only place that knows that.

Targets the 0.3 bindings, where on-chain and BOLT-11 payments go through
per-type handlers (``onchain_payment()``, ``bolt11_payment()``) and payments
are looked up by payment id.
"""

from typing import Any

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
from relaynode.exceptions import NodeStartupError
from relaynode.infrastructure.node_handle import NodeHandle
from relaynode.utils.config import Settings
from relaynode.utils.logging import get_logger

logger = get_logger(__name__)


def _to_bytes(value: Any) -> bytes:
    """Normalize a binding value (hex string, byte list or bytes) to bytes."""
    if isinstance(value, bytes):
        return value
    if isinstance(value, (list, tuple, bytearray)):
        return bytes(value)
    return bytes.fromhex(str(value))


class LdkNodeHandle(NodeHandle):
    """``NodeHandle`` backed by an ``ldk_node.Node`` instance.

    Errors raised by the bindings propagate unchanged; ``AppState.call``
    wraps them into ``NodeOperationError`` for the HTTP layer.
    """

    def __init__(self, node: Any):
        self._node = node

    def start(self) -> None:
        try:
            self._node.start()
        except Exception as e:
            raise NodeStartupError(f"Failed to start node: {e}", original_error=e) from e
        logger.info("ldk_node_started")

    def stop(self) -> None:
        self._node.stop()
        logger.info("ldk_node_stopped")

    def node_id(self) -> bytes:
        return _to_bytes(self._node.node_id())

    def connect(self, node_id: bytes, address: SocketAddress, persist: bool) -> None:
        self._node.connect(node_id.hex(), str(address), persist)

    def list_peers(self) -> list[PeerDetails]:
        return [
            PeerDetails(node_id=_to_bytes(peer.node_id), address=str(peer.address))
            for peer in self._node.list_peers()
        ]

    def new_onchain_address(self) -> str:
        return str(self._node.onchain_payment().new_address())

    def connect_open_channel(
        self,
        node_id: bytes,
        address: SocketAddress,
        channel_amount_msat: int,
        push_to_counterparty_msat: int | None,
        announce_channel: bool,
    ) -> int:
        # The binding sizes channels in whole sats
        user_channel_id = self._node.connect_open_channel(
            node_id.hex(),
            str(address),
            channel_amount_msat // MSAT_PER_SAT,
            push_to_counterparty_msat,
            None,
            announce_channel,
        )
        return int(user_channel_id)

    def list_channels(self) -> list[ChannelDetails]:
        return [
            ChannelDetails(
                channel_id=_to_bytes(channel.channel_id),
                counterparty_node_id=_to_bytes(channel.counterparty_node_id),
                channel_value_sats=int(channel.channel_value_sats),
                user_channel_id=int(channel.user_channel_id),
                outbound_capacity_msat=int(channel.outbound_capacity_msat),
                inbound_capacity_msat=int(channel.inbound_capacity_msat),
                is_channel_ready=bool(channel.is_channel_ready),
                is_usable=bool(channel.is_usable),
            )
            for channel in self._node.list_channels()
        ]

    def send_payment(self, invoice: str) -> bytes:
        # A BOLT-11 payment id is its payment hash
        return _to_bytes(self._node.bolt11_payment().send(invoice))

    def receive_payment(self, amount_msat: int, description: str, expiry_secs: int) -> str:
        invoice = self._node.bolt11_payment().receive(amount_msat, description, expiry_secs)
        return str(invoice)

    def sync_wallets(self) -> None:
        self._node.sync_wallets()

    def list_balances(self) -> BalanceDetails:
        balances = self._node.list_balances()
        return BalanceDetails(
            total_onchain_balance_sats=int(balances.total_onchain_balance_sats),
            spendable_onchain_balance_sats=int(balances.spendable_onchain_balance_sats),
        )

    def payment(self, payment_hash: bytes) -> PaymentDetails | None:
        details = self._node.payment(payment_hash.hex())
        if details is None:
            return None
        preimage = getattr(details.kind, "preimage", None)
        return PaymentDetails(
            payment_hash=payment_hash,
            status=PaymentStatus(details.status.name.lower()),
            preimage=_to_bytes(preimage) if preimage else None,
        )


def build_ldk_node(settings: Settings, seed: SeedMaterial) -> LdkNodeHandle:
    """Build (but do not start) an LDK node from process settings.

    The seed is handed to the builder once and not kept anywhere else.

    Raises:
        NodeStartupError: If the bindings are missing or the builder rejects
            the configuration
    """
    try:
        import ldk_node
    except ImportError as e:
        raise NodeStartupError(
            "ldk_node bindings are not installed (pip install 'relaynode[ldk]')",
            original_error=e,
        ) from e

    try:
        builder = ldk_node.Builder()
        builder.set_network(getattr(ldk_node.Network, settings.network.name))
        builder.set_esplora_server(settings.esplora_url)
        builder.set_gossip_source_rgs(settings.rgs_url)
        builder.set_entropy_seed_bytes(list(seed.data))
        builder.set_storage_dir_path(str(settings.data_dir))
        builder.set_listening_addresses([str(settings.node_service_address)])
        node = builder.build()
    except Exception as e:
        raise NodeStartupError(f"Failed to build node: {e}", original_error=e) from e

    logger.info(
        "ldk_node_built",
        network=str(settings.network),
        data_dir=str(settings.data_dir),
        listen=str(settings.node_service_address),
    )
    return LdkNodeHandle(node)
