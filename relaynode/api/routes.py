"""Control-plane routes.

One handler per verb. Each handler validates its input, makes exactly one
node call through ``AppState.call`` and translates the result. Failures are
raised as ``RelayNodeError`` subclasses and turned into responses by the
handlers in ``relaynode.api.errors``; nothing here retries or deduplicates.
"""

from fastapi import APIRouter, Depends, Request

from relaynode.application.state import AppState
from relaynode.exceptions import PaymentNotFoundError
from relaynode.utils.logging import get_logger

from . import translator
from .schemas import (
    ConnectPeerRequest,
    ConnectPeerResponse,
    FundingAddressResponse,
    GetBalanceResponse,
    GetInvoiceRequest,
    GetInvoiceResponse,
    GetPaymentResponse,
    HealthResponse,
    ListChannelsResponse,
    ListPeersResponse,
    OpenChannelRequest,
    OpenChannelResponse,
    PayInvoiceRequest,
    PayInvoiceResponse,
    SyncResponse,
)

logger = get_logger(__name__)

router = APIRouter()


def get_app_state(request: Request) -> AppState:
    """Dependency handing the shared node state to a handler."""
    return request.app.state.node_state


@router.post("/connect-peer", response_model=ConnectPeerResponse)
async def connect_peer(
    req: ConnectPeerRequest, state: AppState = Depends(get_app_state)
) -> ConnectPeerResponse:
    node_id, address = translator.connect_peer_args(req)
    await state.call(state.node.connect, node_id, address, False)
    logger.info("peer_connected", node_id=node_id.hex(), address=str(address))
    return ConnectPeerResponse()


@router.get("/peers", response_model=ListPeersResponse)
async def list_peers(state: AppState = Depends(get_app_state)) -> ListPeersResponse:
    peers = await state.call(state.node.list_peers)
    return ListPeersResponse(peers=[translator.peer_to_wire(peer) for peer in peers])


@router.get("/funding-address", response_model=FundingAddressResponse)
async def funding_address(state: AppState = Depends(get_app_state)) -> FundingAddressResponse:
    address = await state.call(state.node.new_onchain_address)
    return FundingAddressResponse(address=address)


@router.post("/channels", response_model=OpenChannelResponse)
async def open_channel(
    req: OpenChannelRequest, state: AppState = Depends(get_app_state)
) -> OpenChannelResponse:
    args = translator.open_channel_args(req)
    user_channel_id = await state.call(
        state.node.connect_open_channel,
        args.node_id,
        args.address,
        args.channel_amount_msat,
        args.push_to_counterparty_msat,
        True,
    )
    logger.info(
        "channel_open_requested",
        counterparty=args.node_id.hex(),
        channel_amount_msat=args.channel_amount_msat,
        push_msat=args.push_to_counterparty_msat,
        user_channel_id=str(user_channel_id),
    )
    return OpenChannelResponse(user_channel_id=user_channel_id)


@router.get("/channels", response_model=ListChannelsResponse)
async def list_channels(state: AppState = Depends(get_app_state)) -> ListChannelsResponse:
    channels = await state.call(state.node.list_channels)
    return ListChannelsResponse(
        channels=[translator.channel_to_wire(channel) for channel in channels]
    )


@router.post("/pay-invoice", response_model=PayInvoiceResponse)
async def pay_invoice(
    req: PayInvoiceRequest, state: AppState = Depends(get_app_state)
) -> PayInvoiceResponse:
    invoice = translator.parse_invoice(req.invoice)
    payment_hash = await state.call(state.node.send_payment, invoice)
    logger.info("payment_dispatched", payment_hash=payment_hash.hex())
    return PayInvoiceResponse(payment_hash=payment_hash.hex())


@router.post("/get-invoice", response_model=GetInvoiceResponse)
async def get_invoice(
    req: GetInvoiceRequest, state: AppState = Depends(get_app_state)
) -> GetInvoiceResponse:
    args = translator.invoice_args(req)
    invoice = await state.call(
        state.node.receive_payment, args.amount_msat, args.description, args.expiry_secs
    )
    logger.info("invoice_created", amount_msat=args.amount_msat, expiry_secs=args.expiry_secs)
    return GetInvoiceResponse(invoice=invoice)


@router.post("/sync", response_model=SyncResponse)
async def sync(state: AppState = Depends(get_app_state)) -> SyncResponse:
    await state.call(state.node.sync_wallets)
    return SyncResponse(synced=True)


@router.get("/balance", response_model=GetBalanceResponse)
async def get_balance(state: AppState = Depends(get_app_state)) -> GetBalanceResponse:
    balances = await state.call(state.node.list_balances)
    return translator.balance_to_wire(balances)


@router.get("/get-payment/{payment_hash}", response_model=GetPaymentResponse)
async def get_payment(
    payment_hash: str, state: AppState = Depends(get_app_state)
) -> GetPaymentResponse:
    hash_bytes = translator.parse_payment_hash(payment_hash)
    payment = await state.call(state.node.payment, hash_bytes)
    if payment is None:
        raise PaymentNotFoundError(hash_bytes.hex())
    return translator.payment_to_wire(payment)


@router.get("/health", response_model=HealthResponse)
async def health(state: AppState = Depends(get_app_state)) -> HealthResponse:
    node_id = await state.call(state.node.node_id)
    return HealthResponse(node_id=node_id.hex())
