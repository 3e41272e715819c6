"""
Accumulated Sats API Endpoints.

Users accumulate sats when they share a finished POW and spend them when
they donate. Every change runs in one transaction against a locked balance
row and is appended to the ledger log.

Includes:
- Balance lookup
- Credit (at most once per session) and debit (with optional optimistic check)
- Ledger log paging
- Balance vs. log consistency report
"""

from fastapi import APIRouter, Query, status

from citadel_pow.core.logging_config import get_logger
from citadel_pow.core.models.io import (
    AccumulatedSatsAdd,
    AccumulatedSatsDeduct,
    AccumulatedSatsLogPage,
    AccumulatedSatsLogRead,
    AccumulatedSatsRead,
    ApiResponse,
    BalanceCheckRead,
    BalanceValidationResponse,
    LedgerChangeRead,
)
from citadel_pow.server.services.deps import AccumulatedSatsRepoDep, UserRepoDep

logger = get_logger(__name__)
router = APIRouter()


@router.get(
    "/validate",
    response_model=BalanceValidationResponse,
    summary="Validate Balances",
    description="Compare every balance row with the sum of its ledger log entries.",
)
async def validate_balances(ledger: AccumulatedSatsRepoDep):
    checks = [
        BalanceCheckRead(
            user_id=c.user_id,
            main_table_sats=c.main_table_sats,
            calculated_from_logs=c.calculated_from_logs,
            is_valid=c.is_valid,
        )
        for c in await ledger.validate_balances()
    ]
    invalid = [c for c in checks if not c.is_valid]
    if invalid:
        logger.warning(f"Found {len(invalid)} accumulated sats balances that disagree with their logs")
    return BalanceValidationResponse(data=checks, invalid_count=len(invalid), invalid_users=invalid)


@router.get(
    "/user/{discord_id}",
    response_model=ApiResponse[AccumulatedSatsRead],
    summary="Get Accumulated Sats",
    description="Current balance of a user; users who never accumulated report 0.",
    responses={404: {"description": "User not found"}},
)
async def get_accumulated_sats(discord_id: str, users: UserRepoDep, ledger: AccumulatedSatsRepoDep):
    user = await users.require_by_discord_id(discord_id)
    balance = await ledger.get_balance(user.id)
    if balance is None:
        return ApiResponse(data=AccumulatedSatsRead(accumulated_sats=0, last_updated=None))
    return ApiResponse(
        data=AccumulatedSatsRead(accumulated_sats=balance.accumulated_sats, last_updated=balance.last_updated)
    )


@router.post(
    "/add",
    response_model=ApiResponse[LedgerChangeRead],
    status_code=status.HTTP_201_CREATED,
    summary="Add Accumulated Sats",
    description="Credit sats to a user. A session can credit the same user only once.",
    responses={
        404: {"description": "User not found"},
        409: {"description": "Session already credited (DUPLICATE_SESSION)"},
    },
)
async def add_accumulated_sats(body: AccumulatedSatsAdd, users: UserRepoDep, ledger: AccumulatedSatsRepoDep):
    """
    Add accumulated sats.

    - **discord_id**: The user to credit.
    - **amount**: Positive number of sats.
    - **session_id**: Optional session UUID; a second credit for it is rejected with 409.
    - **note**: Optional free text stored on the log entry.
    """
    user = await users.require_by_discord_id(body.discord_id)
    user_id = user.id
    change = await ledger.add(
        user_id,
        body.amount,
        session_id=str(body.session_id) if body.session_id else None,
        note=body.note,
    )
    logger.info(f"Accumulated {body.amount} sats for {body.discord_id}: {change.amount_before} -> {change.amount_after}")
    return ApiResponse(
        data=LedgerChangeRead(
            accumulated_sats=change.accumulated_sats,
            amount_before=change.amount_before,
            amount_after=change.amount_after,
            change_amount=body.amount,
        )
    )


@router.post(
    "/deduct",
    response_model=ApiResponse[LedgerChangeRead],
    summary="Deduct Accumulated Sats",
    description="Debit sats from a user, optionally only if the balance still equals expected_balance.",
    responses={
        400: {"description": "Insufficient balance (INSUFFICIENT_BALANCE)"},
        404: {"description": "User not found"},
        409: {"description": "Balance changed since it was read (BALANCE_MISMATCH)"},
    },
)
async def deduct_accumulated_sats(body: AccumulatedSatsDeduct, users: UserRepoDep, ledger: AccumulatedSatsRepoDep):
    """
    Deduct accumulated sats.

    - **discord_id**: The user to debit.
    - **amount**: Positive number of sats, at most the current balance.
    - **donation_id**: Optional donation UUID paid with these sats.
    - **expected_balance**: Optional balance the client last saw.
    """
    user = await users.require_by_discord_id(body.discord_id)
    user_id = user.id
    change = await ledger.deduct(
        user_id,
        body.amount,
        donation_id=str(body.donation_id) if body.donation_id else None,
        note=body.note,
        expected_balance=body.expected_balance,
    )
    logger.info(f"Deducted {body.amount} sats from {body.discord_id}: {change.amount_before} -> {change.amount_after}")
    return ApiResponse(
        data=LedgerChangeRead(
            accumulated_sats=change.accumulated_sats,
            amount_before=change.amount_before,
            amount_after=change.amount_after,
            change_amount=-body.amount,
        )
    )


@router.get(
    "/logs/{discord_id}",
    response_model=AccumulatedSatsLogPage,
    summary="Get Ledger Logs",
    description="A page of the user's ledger log, newest first.",
    responses={404: {"description": "User not found"}},
)
async def get_logs(
    discord_id: str,
    users: UserRepoDep,
    ledger: AccumulatedSatsRepoDep,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
):
    user = await users.require_by_discord_id(discord_id)
    logs, total = await ledger.list_logs(user.id, limit=limit, offset=offset)
    return AccumulatedSatsLogPage(
        data=[AccumulatedSatsLogRead.model_validate(log) for log in logs],
        count=total,
        limit=limit,
        offset=offset,
    )
