"""Unit tests for entity column definitions."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import DateTime
from sqlmodel import SQLModel, select

import citadel_pow.core.database.entities  # noqa: F401
from citadel_pow.core.database.entities import PowSession, User


def python_type(column):
    try:
        return column.type.python_type
    except NotImplementedError:
        return None


def datetime_columns():
    for table in SQLModel.metadata.sorted_tables:
        for column in table.columns:
            if python_type(column) is datetime:
                yield f"{table.name}.{column.name}", column


class TestTimestampColumns:
    @pytest.mark.parametrize("name, column", list(datetime_columns()))
    def test_stored_without_timezone(self, name, column):
        assert type(column.type) is DateTime, name
        assert column.type.timezone is False, name

    async def test_naive_timestamp_round_trip(self, session, make_user):
        user = await make_user()
        stamp = datetime(2026, 1, 15, 9, 30, 15)
        session.add(
            PowSession(user_id=user.id, start_time=stamp, end_time=stamp + timedelta(minutes=25), duration_seconds=1500)
        )
        await session.commit()
        session.expunge_all()

        loaded = (await session.exec(select(PowSession))).one()

        assert loaded.start_time == stamp
        assert loaded.start_time.tzinfo is None
        assert loaded.end_time - loaded.start_time == timedelta(minutes=25)

    async def test_default_timestamps_are_set(self, session, make_user):
        user = await make_user()
        session.expunge_all()

        loaded = (await session.exec(select(User).where(User.id == user.id))).one()

        assert loaded.created_at is not None
        assert loaded.created_at.tzinfo is None
