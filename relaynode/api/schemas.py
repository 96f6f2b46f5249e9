"""Request and response schemas for the control-plane HTTP API.

Field names are part of the wire contract. Binary values (keys, hashes,
preimages) travel as lowercase hex strings.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from relaynode.domain.value_objects import MSAT_PER_SAT

U32_MAX = 2**32 - 1
U64_MAX = 2**64 - 1
# Largest sat amount whose msat value still fits the engine's u64
MAX_SATS = U64_MAX // MSAT_PER_SAT


class _Request(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


# ---------------------------------------------------------------------------
# Peers
# ---------------------------------------------------------------------------


class ConnectPeerRequest(_Request):
    pubkey: str = Field(description="Peer public key, 66 hex characters")
    ip_port: str = Field(description="Peer address as host:port")


class ConnectPeerResponse(BaseModel):
    pass


class Peer(BaseModel):
    node_id: str
    address: str


class ListPeersResponse(BaseModel):
    peers: list[Peer]


# ---------------------------------------------------------------------------
# On-chain
# ---------------------------------------------------------------------------


class FundingAddressResponse(BaseModel):
    address: str


class GetBalanceResponse(BaseModel):
    total_onchain_balance_sats: int
    spendable_onchain_balance_sats: int


class SyncResponse(BaseModel):
    synced: bool = True


# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------


class OpenChannelRequest(_Request):
    pubkey: str = Field(description="Counterparty public key, 66 hex characters")
    ip_port: str = Field(description="Counterparty address as host:port")
    funding_sats: int = Field(ge=0, le=MAX_SATS, description="Channel size in sats")
    push_sats: int = Field(ge=0, le=MAX_SATS, description="Amount pushed to the counterparty")


class OpenChannelResponse(BaseModel):
    user_channel_id: int = Field(description="128-bit correlation id assigned by the node")


class CompactChannel(BaseModel):
    channel_id: str
    counterparty_node_id: str
    channel_value_sats: int
    user_channel_id: int
    outbound_capacity_msat: int
    inbound_capacity_msat: int
    is_channel_ready: bool
    is_usable: bool


class ListChannelsResponse(BaseModel):
    channels: list[CompactChannel]


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------


class PayInvoiceRequest(_Request):
    invoice: str = Field(min_length=1, description="BOLT-11 payment request")


class PayInvoiceResponse(BaseModel):
    payment_hash: str


class GetInvoiceRequest(_Request):
    amount_sats: int = Field(ge=0, le=MAX_SATS)
    description: str
    expiry_secs: int = Field(ge=0, le=U32_MAX)


class GetInvoiceResponse(BaseModel):
    invoice: str


class GetPaymentResponse(BaseModel):
    status: Literal["pending", "succeeded", "failed"]
    preimage: str | None = None


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    node_id: str


class ErrorResponse(BaseModel):
    error: str
    message: str
    field: str | None = None
