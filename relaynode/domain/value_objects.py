"""Domain value objects for the node control plane.

All of these are read projections of state owned by the node engine.
They are rebuilt from the engine on every request and never stored.
"""

import hashlib
import re
import secrets
from dataclasses import dataclass, field

from .enums import PaymentStatus

SEED_LENGTH = 64
MSAT_PER_SAT = 1000
PUBLIC_KEY_LENGTH = 33
HASH_LENGTH = 32

_HOSTNAME_RE = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9\-\.]*[A-Za-z0-9])?$")


@dataclass(frozen=True)
class SeedMaterial:
    """64 bytes of entropy from which the node identity and all keys derive."""

    data: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if len(self.data) != SEED_LENGTH:
            raise ValueError(f"Seed must be {SEED_LENGTH} bytes, got {len(self.data)}")

    @classmethod
    def generate(cls) -> "SeedMaterial":
        """Draw a fresh seed from the OS CSPRNG."""
        return cls(secrets.token_bytes(SEED_LENGTH))

    @classmethod
    def from_hex(cls, seed_hex: str) -> "SeedMaterial":
        """Parse an operator-supplied 128 character hex seed."""
        text = seed_hex.strip()
        if len(text) != SEED_LENGTH * 2:
            raise ValueError(f"Seed hex must be {SEED_LENGTH * 2} characters, got {len(text)}")
        try:
            return cls(bytes.fromhex(text))
        except ValueError as e:
            raise ValueError(f"Seed is not valid hex: {e}") from e

    @property
    def fingerprint(self) -> str:
        """SHA-256 of the seed, safe to persist next to the node's storage."""
        return hashlib.sha256(self.data).hexdigest()

    def hex(self) -> str:
        return self.data.hex()


@dataclass(frozen=True)
class SocketAddress:
    """A peer network address (host and port)."""

    host: str
    port: int

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            raise ValueError(f"Port out of range: {self.port}")
        if not self.host:
            raise ValueError("Host must not be empty")

    @classmethod
    def parse(cls, text: str) -> "SocketAddress":
        """Parse ``host:port``, ``a.b.c.d:port`` or ``[ipv6]:port``."""
        text = text.strip()
        if text.startswith("["):
            host, sep, rest = text[1:].partition("]")
            if not sep or not rest.startswith(":"):
                raise ValueError(f"Malformed IPv6 address: {text!r}")
            port_text = rest[1:]
            if ":" not in host:
                raise ValueError(f"Malformed IPv6 address: {text!r}")
        else:
            host, sep, port_text = text.rpartition(":")
            if not sep or ":" in host:
                raise ValueError(f"Expected host:port, got {text!r}")
            if not _HOSTNAME_RE.match(host):
                raise ValueError(f"Invalid host: {host!r}")

        if not port_text.isdigit():
            raise ValueError(f"Invalid port: {port_text!r}")
        return cls(host=host, port=int(port_text))

    @property
    def is_ipv6(self) -> bool:
        return ":" in self.host

    def __str__(self) -> str:
        if self.is_ipv6:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class PeerDetails:
    """A peer known to the node."""

    node_id: bytes
    address: str


@dataclass(frozen=True)
class ChannelDetails:
    """A payment channel as reported by the node.

    Capacities are in millisatoshis, the channel value in satoshis.
    """

    channel_id: bytes
    counterparty_node_id: bytes
    channel_value_sats: int
    user_channel_id: int
    outbound_capacity_msat: int
    inbound_capacity_msat: int
    is_channel_ready: bool
    is_usable: bool


@dataclass(frozen=True)
class PaymentDetails:
    """A payment attempt looked up by its hash."""

    payment_hash: bytes
    status: PaymentStatus
    preimage: bytes | None = None

    def __post_init__(self) -> None:
        if len(self.payment_hash) != HASH_LENGTH:
            raise ValueError(f"Payment hash must be {HASH_LENGTH} bytes")
        if self.preimage is not None and len(self.preimage) != HASH_LENGTH:
            raise ValueError(f"Preimage must be {HASH_LENGTH} bytes")


@dataclass(frozen=True)
class BalanceDetails:
    """Point-in-time on-chain balance snapshot, in satoshis."""

    total_onchain_balance_sats: int
    spendable_onchain_balance_sats: int
