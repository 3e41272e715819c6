"""
Accumulated sats ledger repository.

Balance changes run inside a single transaction:

1. Lock the user's balance row (``SELECT ... FOR UPDATE``).
2. Check the request against the locked balance.
3. Write the new balance and append a log row.
4. Commit.

A second credit for the same ``(user_id, session_id)`` violates the partial
unique index on ``accumulated_sats_logs`` and is reported as
``DuplicateSessionError``; the whole transaction is rolled back so the
balance stays unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from citadel_pow.core.errors import (
    BalanceMismatchError,
    ConcurrentUpdateError,
    DuplicateSessionError,
    InsufficientBalanceError,
)
from citadel_pow.core.logging_config import get_logger
from citadel_pow.core.monitoring import log_ledger_change

from ..base import utc_now
from ..entities.accumulated_sats import AccumulatedSatsLog, LedgerAction, UserAccumulatedSats
from .base import AsyncBaseRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class LedgerChange:
    """Outcome of a committed balance change."""

    accumulated_sats: int
    amount_before: int
    amount_after: int

    @property
    def change_amount(self) -> int:
        return self.amount_after - self.amount_before


@dataclass(frozen=True)
class BalanceCheck:
    """Balance row compared against the sum of its log entries."""

    user_id: str
    main_table_sats: int
    calculated_from_logs: int

    @property
    def is_valid(self) -> bool:
        return self.main_table_sats == self.calculated_from_logs


class AccumulatedSatsRepository(AsyncBaseRepository[UserAccumulatedSats]):
    """Repository for the accumulated sats balance and its audit log."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, UserAccumulatedSats)

    async def get_balance(self, user_id: str) -> Optional[UserAccumulatedSats]:
        return await self.session.get(UserAccumulatedSats, user_id)

    async def _lock_balance(self, user_id: str) -> Optional[UserAccumulatedSats]:
        stmt = select(UserAccumulatedSats).where(UserAccumulatedSats.user_id == user_id).with_for_update()
        stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.exec(stmt)
        return result.first()

    async def _session_already_credited(self, user_id: str, session_id: str) -> bool:
        stmt = select(AccumulatedSatsLog.id).where(
            AccumulatedSatsLog.user_id == user_id,
            AccumulatedSatsLog.session_id == session_id,
            AccumulatedSatsLog.action == LedgerAction.ADD.value,
        )
        result = await self.session.exec(stmt)
        return result.first() is not None

    async def add(
        self,
        user_id: str,
        amount: int,
        *,
        session_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> LedgerChange:
        """Credit ``amount`` sats to the user.

        Raises:
            DuplicateSessionError: When ``session_id`` already credited this user.
            ConcurrentUpdateError: When a concurrent first credit created the balance row.
        """
        if amount <= 0:
            raise ValueError("Amount must be positive")

        try:
            balance = await self._lock_balance(user_id)
            before = balance.accumulated_sats if balance is not None else 0
            after = before + amount
            now = utc_now()
            if balance is None:
                self.session.add(UserAccumulatedSats(user_id=user_id, accumulated_sats=after, last_updated=now))
            else:
                balance.accumulated_sats = after
                balance.last_updated = now
                self.session.add(balance)
            self.session.add(
                AccumulatedSatsLog(
                    user_id=user_id,
                    amount_before=before,
                    amount_after=after,
                    change_amount=amount,
                    action=LedgerAction.ADD.value,
                    session_id=session_id,
                    note=note,
                )
            )
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if session_id is not None and await self._session_already_credited(user_id, session_id):
                logger.info(f"Duplicate accumulation rejected: user_id={user_id}, session_id={session_id}")
                raise DuplicateSessionError(
                    "Already accumulated for this session",
                    details={"session_id": session_id},
                ) from e
            raise ConcurrentUpdateError("Balance was modified concurrently, please retry") from e

        log_ledger_change(user_id, LedgerAction.ADD.value, before, after)
        return LedgerChange(accumulated_sats=after, amount_before=before, amount_after=after)

    async def deduct(
        self,
        user_id: str,
        amount: int,
        *,
        donation_id: Optional[str] = None,
        note: Optional[str] = None,
        expected_balance: Optional[int] = None,
    ) -> LedgerChange:
        """Debit ``amount`` sats from the user.

        Raises:
            InsufficientBalanceError: When there is no balance row or it is below ``amount``.
            BalanceMismatchError: When ``expected_balance`` differs from the locked balance.
        """
        if amount <= 0:
            raise ValueError("Amount must be positive")

        balance = await self._lock_balance(user_id)
        current = balance.accumulated_sats if balance is not None else 0
        if balance is None or current < amount:
            await self.session.rollback()
            raise InsufficientBalanceError(
                f"Insufficient accumulated sats. Current: {current}, Requested: {amount}",
                details={"current": current, "requested": amount},
            )
        if expected_balance is not None and current != expected_balance:
            await self.session.rollback()
            raise BalanceMismatchError(
                f"Balance mismatch. Expected: {expected_balance}, Actual: {current}",
                details={"expected": expected_balance, "actual": current},
            )

        after = current - amount
        balance.accumulated_sats = after
        balance.last_updated = utc_now()
        self.session.add(balance)
        self.session.add(
            AccumulatedSatsLog(
                user_id=user_id,
                amount_before=current,
                amount_after=after,
                change_amount=-amount,
                action=LedgerAction.DEDUCT.value,
                donation_id=donation_id,
                note=note,
            )
        )
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConcurrentUpdateError("Balance was modified concurrently, please retry") from e

        log_ledger_change(user_id, LedgerAction.DEDUCT.value, current, after)
        return LedgerChange(accumulated_sats=after, amount_before=current, amount_after=after)

    async def list_logs(self, user_id: str, *, limit: int = 50, offset: int = 0) -> Tuple[List[AccumulatedSatsLog], int]:
        """Return one page of the user's log (newest first) and the total log count."""
        stmt = (
            select(AccumulatedSatsLog)
            .where(AccumulatedSatsLog.user_id == user_id)
            .order_by(AccumulatedSatsLog.created_at.desc())  # type: ignore
            .offset(offset)
            .limit(limit)
        )
        logs = list((await self.session.exec(stmt)).all())
        count_stmt = select(func.count()).select_from(AccumulatedSatsLog).where(AccumulatedSatsLog.user_id == user_id)
        total = (await self.session.exec(count_stmt)).one()
        return logs, int(total)

    async def validate_balances(self) -> List[BalanceCheck]:
        """Compare every balance row with the sum of its log's change amounts."""
        log_totals = (
            select(
                AccumulatedSatsLog.user_id.label("user_id"),  # type: ignore
                func.sum(AccumulatedSatsLog.change_amount).label("total"),
            )
            .group_by(AccumulatedSatsLog.user_id)
            .subquery()
        )
        stmt = (
            select(UserAccumulatedSats.user_id, UserAccumulatedSats.accumulated_sats, log_totals.c.total)
            .outerjoin(log_totals, log_totals.c.user_id == UserAccumulatedSats.user_id)
            .order_by(UserAccumulatedSats.user_id)
        )
        rows = (await self.session.exec(stmt)).all()
        return [
            BalanceCheck(user_id=user_id, main_table_sats=int(sats), calculated_from_logs=int(total or 0))
            for user_id, sats, total in rows
        ]
