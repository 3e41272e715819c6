"""Unit tests for the accumulated sats ledger repository.

Runs against in-memory SQLite so the partial unique index and the check
constraints behave as they do in production.
"""

from __future__ import annotations

from unittest.mock import patch
from uuid import uuid4

import pytest
import pytest_asyncio

from citadel_pow.core.database.entities import AccumulatedSatsLog, UserAccumulatedSats
from citadel_pow.core.database.repositories import AccumulatedSatsRepository
from citadel_pow.core.errors import BalanceMismatchError, DuplicateSessionError, InsufficientBalanceError


@pytest.fixture
def ledger(session):
    return AccumulatedSatsRepository(session)


@pytest_asyncio.fixture
async def user_id(make_user):
    user = await make_user()
    return user.id


class TestAdd:
    async def test_first_add_creates_balance(self, ledger, user_id):
        change = await ledger.add(user_id, 100, note="first pow")

        assert (change.amount_before, change.amount_after, change.accumulated_sats) == (0, 100, 100)
        assert change.change_amount == 100
        balance = await ledger.get_balance(user_id)
        assert balance.accumulated_sats == 100

    async def test_add_appends_log(self, ledger, user_id):
        session_id = str(uuid4())
        await ledger.add(user_id, 100)
        await ledger.add(user_id, 50, session_id=session_id, note="second")

        logs, total = await ledger.list_logs(user_id)
        assert total == 2
        latest = next(log for log in logs if log.session_id == session_id)
        assert (latest.amount_before, latest.amount_after, latest.change_amount) == (100, 150, 50)
        assert latest.action == "add"
        assert latest.note == "second"

    async def test_same_session_credits_once(self, ledger, user_id):
        session_id = str(uuid4())
        await ledger.add(user_id, 100, session_id=session_id)

        with pytest.raises(DuplicateSessionError) as exc_info:
            await ledger.add(user_id, 100, session_id=session_id)

        assert exc_info.value.status_code == 409
        assert exc_info.value.details == {"session_id": session_id}
        balance = await ledger.get_balance(user_id)
        assert balance.accumulated_sats == 100
        _, total = await ledger.list_logs(user_id)
        assert total == 1

    async def test_adds_without_session_are_not_deduplicated(self, ledger, user_id):
        await ledger.add(user_id, 10)
        change = await ledger.add(user_id, 10)
        assert change.accumulated_sats == 20

    async def test_same_session_for_different_users(self, ledger, make_user, user_id):
        other = await make_user("100000000000000002", "hal")
        other_id = other.id
        session_id = str(uuid4())
        await ledger.add(user_id, 10, session_id=session_id)
        change = await ledger.add(other_id, 10, session_id=session_id)
        assert change.accumulated_sats == 10

    @pytest.mark.parametrize("amount", [0, -5])
    async def test_rejects_non_positive_amount(self, ledger, user_id, amount):
        with pytest.raises(ValueError):
            await ledger.add(user_id, amount)

    async def test_reports_ledger_change(self, ledger, user_id):
        with patch("citadel_pow.core.database.repositories.accumulated_sats.log_ledger_change") as mock_log:
            await ledger.add(user_id, 42)
        mock_log.assert_called_once_with(user_id, "add", 0, 42)


class TestDeduct:
    async def test_deduct(self, ledger, user_id):
        await ledger.add(user_id, 500)
        donation_id = str(uuid4())

        change = await ledger.deduct(user_id, 200, donation_id=donation_id, note="payout")

        assert (change.amount_before, change.amount_after) == (500, 300)
        assert change.change_amount == -200
        logs, _ = await ledger.list_logs(user_id)
        deduction = next(log for log in logs if log.action == "deduct")
        assert deduction.change_amount == -200
        assert deduction.donation_id == donation_id

    async def test_deduct_whole_balance(self, ledger, user_id):
        await ledger.add(user_id, 500)
        change = await ledger.deduct(user_id, 500)
        assert change.accumulated_sats == 0

    async def test_insufficient_balance(self, ledger, user_id):
        await ledger.add(user_id, 100)

        with pytest.raises(InsufficientBalanceError) as exc_info:
            await ledger.deduct(user_id, 101)

        assert exc_info.value.details == {"current": 100, "requested": 101}
        assert "Current: 100, Requested: 101" in exc_info.value.message
        assert (await ledger.get_balance(user_id)).accumulated_sats == 100

    async def test_no_balance_row_is_insufficient(self, ledger, user_id):
        with pytest.raises(InsufficientBalanceError) as exc_info:
            await ledger.deduct(user_id, 1)
        assert exc_info.value.details["current"] == 0

    async def test_expected_balance_mismatch(self, ledger, user_id):
        await ledger.add(user_id, 300)

        with pytest.raises(BalanceMismatchError) as exc_info:
            await ledger.deduct(user_id, 100, expected_balance=250)

        assert exc_info.value.status_code == 409
        assert exc_info.value.details == {"expected": 250, "actual": 300}
        assert (await ledger.get_balance(user_id)).accumulated_sats == 300

    async def test_expected_balance_match(self, ledger, user_id):
        await ledger.add(user_id, 300)
        change = await ledger.deduct(user_id, 100, expected_balance=300)
        assert change.accumulated_sats == 200


class TestLogsAndValidation:
    async def test_list_logs_paginates_newest_first(self, ledger, user_id):
        for amount in (1, 2, 3):
            await ledger.add(user_id, amount)

        page, total = await ledger.list_logs(user_id, limit=2, offset=0)
        assert total == 3
        assert len(page) == 2
        assert page[0].created_at >= page[1].created_at

        rest, _ = await ledger.list_logs(user_id, limit=2, offset=2)
        assert len(rest) == 1

    async def test_validate_balances_consistent(self, ledger, user_id):
        await ledger.add(user_id, 100)
        await ledger.deduct(user_id, 40)

        checks = await ledger.validate_balances()

        assert len(checks) == 1
        assert checks[0].main_table_sats == 60
        assert checks[0].calculated_from_logs == 60
        assert checks[0].is_valid

    async def test_validate_balances_detects_drift(self, ledger, session, user_id):
        await ledger.add(user_id, 100)
        balance = await session.get(UserAccumulatedSats, user_id)
        balance.accumulated_sats = 999
        session.add(balance)
        await session.commit()

        checks = await ledger.validate_balances()

        assert not checks[0].is_valid
        assert checks[0].calculated_from_logs == 100

    async def test_validate_balances_without_logs(self, ledger, session, user_id):
        session.add(UserAccumulatedSats(user_id=user_id, accumulated_sats=5))
        await session.commit()

        checks = await ledger.validate_balances()

        assert checks[0].calculated_from_logs == 0
        assert not checks[0].is_valid

    async def test_log_entries_are_append_only_rows(self, ledger, session, user_id):
        await ledger.add(user_id, 7)
        logs, _ = await ledger.list_logs(user_id)
        assert isinstance(logs[0], AccumulatedSatsLog)
        assert logs[0].user_id == user_id
