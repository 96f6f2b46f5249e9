"""Interface of the payment-channel node engine.

The control plane reaches the engine only through these verbs. All calls are
synchronous and may block on disk or network I/O; callers on the event loop
must go through ``AppState.call`` so they run on the worker pool.

The engine does its own locking. Implementations must be safe to call from
several threads at once.
"""

from relaynode.domain.value_objects import (
    BalanceDetails,
    ChannelDetails,
    PaymentDetails,
    PeerDetails,
    SocketAddress,
)


class NodeHandle:
    """Protocol defining the node engine interface.

    Amounts passed in are in millisatoshis; the engine adapter converts to
    whatever unit its binding expects.
    """

    def start(self) -> None:
        """Start background processing (peer service, chain sync)."""
        raise NotImplementedError("Subclasses must implement start")

    def stop(self) -> None:
        """Stop the node."""
        raise NotImplementedError("Subclasses must implement stop")

    def node_id(self) -> bytes:
        """Compressed public key identifying this node."""
        raise NotImplementedError("Subclasses must implement node_id")

    def connect(self, node_id: bytes, address: SocketAddress, persist: bool) -> None:
        """Connect to a peer."""
        raise NotImplementedError("Subclasses must implement connect")

    def list_peers(self) -> list[PeerDetails]:
        """Peers currently known to the node."""
        raise NotImplementedError("Subclasses must implement list_peers")

    def new_onchain_address(self) -> str:
        """Derive a fresh on-chain receive address."""
        raise NotImplementedError("Subclasses must implement new_onchain_address")

    def connect_open_channel(
        self,
        node_id: bytes,
        address: SocketAddress,
        channel_amount_msat: int,
        push_to_counterparty_msat: int | None,
        announce_channel: bool,
    ) -> int:
        """Connect if needed and open a channel. Returns the user channel id."""
        raise NotImplementedError("Subclasses must implement connect_open_channel")

    def list_channels(self) -> list[ChannelDetails]:
        """All channels, ready or not."""
        raise NotImplementedError("Subclasses must implement list_channels")

    def send_payment(self, invoice: str) -> bytes:
        """Pay a BOLT-11 invoice. Returns the payment hash of the attempt."""
        raise NotImplementedError("Subclasses must implement send_payment")

    def receive_payment(self, amount_msat: int, description: str, expiry_secs: int) -> str:
        """Create a BOLT-11 invoice."""
        raise NotImplementedError("Subclasses must implement receive_payment")

    def sync_wallets(self) -> None:
        """Force the on-chain and lightning wallets to sync with the chain."""
        raise NotImplementedError("Subclasses must implement sync_wallets")

    def list_balances(self) -> BalanceDetails:
        """Read the balance snapshot."""
        raise NotImplementedError("Subclasses must implement list_balances")

    def payment(self, payment_hash: bytes) -> PaymentDetails | None:
        """Look up a payment. ``None`` when the hash is unknown."""
        raise NotImplementedError("Subclasses must implement payment")
