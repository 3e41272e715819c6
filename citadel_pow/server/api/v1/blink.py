"""
Blink Lightning API Endpoints.

Thin proxy over the Blink GraphQL API used by the web client to pay
donations. Blink failures surface as 502 through the ``BlinkApiError``
handler.
"""

from fastapi import APIRouter

from citadel_pow.core.logging_config import get_logger
from citadel_pow.core.models.io import (
    ApiResponse,
    BlinkWebhookEvent,
    InvoiceCheck,
    InvoiceCreate,
    InvoiceRead,
    SuccessResponse,
    WalletBalanceRead,
)
from citadel_pow.integrations.blink import InvoiceStatus
from citadel_pow.server.services.deps import BlinkClientDep, DonationRepoDep

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "/create-invoice",
    response_model=ApiResponse[InvoiceRead],
    summary="Create Lightning Invoice",
    description="Create an invoice on the BTC wallet for the given amount of sats.",
    responses={501: {"description": "Blink API not configured"}, 502: {"description": "Blink API error"}},
)
async def create_invoice(body: InvoiceCreate, blink: BlinkClientDep):
    invoice = await blink.create_invoice(body.amount, body.memo)
    return ApiResponse(
        data=InvoiceRead(invoice=invoice.payment_request, payment_hash=invoice.payment_hash, satoshis=invoice.satoshis)
    )


@router.post(
    "/check-invoice",
    response_model=ApiResponse[InvoiceStatus],
    summary="Check Invoice Status",
    description="Whether the invoice is paid; confirmedAt is set when it is.",
    responses={501: {"description": "Blink API not configured"}, 502: {"description": "Blink API error"}},
)
async def check_invoice(body: InvoiceCheck, blink: BlinkClientDep):
    return ApiResponse(data=await blink.check_invoice_status(body.payment_hash))


@router.get(
    "/wallet-balance",
    response_model=ApiResponse[WalletBalanceRead],
    summary="Wallet Balance",
    description="BTC wallet balance in sats; 0 when it cannot be read.",
    responses={501: {"description": "Blink API not configured"}},
)
async def wallet_balance(blink: BlinkClientDep):
    return ApiResponse(data=WalletBalanceRead(balance=await blink.get_wallet_balance()))


@router.post(
    "/webhook",
    response_model=SuccessResponse,
    summary="Blink Webhook",
    description="Receive Blink payment events and settle the matching pending donation.",
)
async def blink_webhook(event: BlinkWebhookEvent, donations: DonationRepoDep):
    """
    Handle a Blink webhook delivery.

    A ``receive.*`` event whose payment hash equals a pending donation's
    ``transaction_id`` marks that donation paid. Other events are only logged.
    """
    logger.info(f"Blink webhook received: event_type={event.event_type}")
    payment_hash = event.payment_hash
    if event.event_type and event.event_type.startswith("receive.") and payment_hash:
        donation = await donations.get_pending_by_transaction(payment_hash)
        if donation is not None:
            donation = await donations.mark_paid(donation)
            logger.info(f"Donation {donation.id} marked paid from Blink payment {payment_hash}")
        else:
            logger.debug(f"No pending donation for Blink payment {payment_hash}")
    return SuccessResponse()
