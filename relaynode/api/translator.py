"""Domain-to-wire translation.

Pure functions in both directions:

- inbound: request schemas → node call arguments (hex decoding, address
  parsing, sat → msat scaling)
- outbound: domain value objects → response schemas (lowercase hex, status
  tokens)

Every unit conversion of the control plane lives here, exactly once.
"""

import re
from dataclasses import dataclass

from relaynode.domain.value_objects import (
    HASH_LENGTH,
    MSAT_PER_SAT,
    PUBLIC_KEY_LENGTH,
    BalanceDetails,
    ChannelDetails,
    PaymentDetails,
    PeerDetails,
    SocketAddress,
)
from relaynode.exceptions import ValidationError

from .schemas import (
    MAX_SATS,
    CompactChannel,
    ConnectPeerRequest,
    GetBalanceResponse,
    GetInvoiceRequest,
    GetPaymentResponse,
    OpenChannelRequest,
    Peer,
)

# hrp starting with "ln", separator "1", bech32 data charset
_BOLT11_RE = re.compile(r"^ln[a-z0-9]+1[qpzry9x8gf2tvdw0s3jn54khce6mua7l]+$")
_URI_PREFIX = "lightning:"


@dataclass(frozen=True)
class OpenChannelArgs:
    """Arguments of one ``connect_open_channel`` call."""

    node_id: bytes
    address: SocketAddress
    channel_amount_msat: int
    push_to_counterparty_msat: int


@dataclass(frozen=True)
class InvoiceArgs:
    """Arguments of one ``receive_payment`` call."""

    amount_msat: int
    description: str
    expiry_secs: int


# =============================================================================
# Inbound
# =============================================================================


def sats_to_msat(amount_sats: int, *, field: str = "amount_sats") -> int:
    """Scale a whole-sat amount to the engine's millisat precision."""
    if amount_sats < 0:
        raise ValidationError(
            "Amount must not be negative", field=field, value=amount_sats, constraint=">= 0"
        )
    if amount_sats > MAX_SATS:
        raise ValidationError(
            "Amount too large to express in msat",
            field=field,
            value=amount_sats,
            constraint=f"<= {MAX_SATS}",
        )
    return amount_sats * MSAT_PER_SAT


def parse_hex_bytes(text: str, length: int, *, field: str) -> bytes:
    """Decode hex text into exactly ``length`` bytes."""
    try:
        data = bytes.fromhex(text)
    except ValueError as e:
        raise ValidationError(
            f"{field} is not valid hex", field=field, value=text, original_error=e
        ) from e
    if len(data) != length:
        raise ValidationError(
            f"{field} must be {length} bytes, got {len(data)}",
            field=field,
            value=text,
            constraint=f"{length * 2} hex characters",
        )
    return data


def parse_public_key(text: str, *, field: str = "pubkey") -> bytes:
    """Decode a compressed secp256k1 public key."""
    data = parse_hex_bytes(text, PUBLIC_KEY_LENGTH, field=field)
    if data[0] not in (0x02, 0x03):
        raise ValidationError(
            f"{field} is not a compressed public key",
            field=field,
            value=text,
            constraint="prefix 02 or 03",
        )
    return data


def parse_payment_hash(text: str, *, field: str = "payment_hash") -> bytes:
    return parse_hex_bytes(text, HASH_LENGTH, field=field)


def parse_socket_address(text: str, *, field: str = "ip_port") -> SocketAddress:
    try:
        return SocketAddress.parse(text)
    except ValueError as e:
        raise ValidationError(
            f"{field} is not a valid host:port address: {e}",
            field=field,
            value=text,
            original_error=e,
        ) from e


def parse_invoice(text: str, *, field: str = "invoice") -> str:
    """Shape-check a BOLT-11 string. Decoding it is the engine's job."""
    invoice = text.strip()
    if invoice.lower().startswith(_URI_PREFIX):
        invoice = invoice[len(_URI_PREFIX) :]
    # bech32 forbids mixed case
    if invoice not in (invoice.lower(), invoice.upper()):
        raise ValidationError("Invoice mixes upper and lower case", field=field, value=text)
    if not _BOLT11_RE.match(invoice.lower()):
        raise ValidationError("Not a BOLT-11 invoice", field=field, value=text)
    return invoice


def connect_peer_args(req: ConnectPeerRequest) -> tuple[bytes, SocketAddress]:
    return parse_public_key(req.pubkey), parse_socket_address(req.ip_port)


def open_channel_args(req: OpenChannelRequest) -> OpenChannelArgs:
    return OpenChannelArgs(
        node_id=parse_public_key(req.pubkey),
        address=parse_socket_address(req.ip_port),
        channel_amount_msat=sats_to_msat(req.funding_sats, field="funding_sats"),
        push_to_counterparty_msat=sats_to_msat(req.push_sats, field="push_sats"),
    )


def invoice_args(req: GetInvoiceRequest) -> InvoiceArgs:
    return InvoiceArgs(
        amount_msat=sats_to_msat(req.amount_sats),
        description=req.description,
        expiry_secs=req.expiry_secs,
    )


# =============================================================================
# Outbound
# =============================================================================


def peer_to_wire(peer: PeerDetails) -> Peer:
    return Peer(node_id=peer.node_id.hex(), address=peer.address)


def channel_to_wire(channel: ChannelDetails) -> CompactChannel:
    return CompactChannel(
        channel_id=channel.channel_id.hex(),
        counterparty_node_id=channel.counterparty_node_id.hex(),
        channel_value_sats=channel.channel_value_sats,
        user_channel_id=channel.user_channel_id,
        outbound_capacity_msat=channel.outbound_capacity_msat,
        inbound_capacity_msat=channel.inbound_capacity_msat,
        is_channel_ready=channel.is_channel_ready,
        is_usable=channel.is_usable,
    )


def payment_to_wire(payment: PaymentDetails) -> GetPaymentResponse:
    return GetPaymentResponse(
        status=payment.status.value,
        preimage=payment.preimage.hex() if payment.preimage is not None else None,
    )


def balance_to_wire(balances: BalanceDetails) -> GetBalanceResponse:
    return GetBalanceResponse(
        total_onchain_balance_sats=balances.total_onchain_balance_sats,
        spendable_onchain_balance_sats=balances.spendable_onchain_balance_sats,
    )
