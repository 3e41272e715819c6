"""Initial schema for Citadel POW

Revision ID: 20260115_000000
Revises: None
Create Date: 2026-01-15 00:00:00.000000

This is the initial migration that creates every table of the Citadel POW API:
- Users and their accumulated sats balance and ledger log
- Study sessions, POW sessions and donations
- Discord posts and weekly rankings
- Group meetups and meetup participants

Revision format: YYYYMMDD_HHMMSS_description

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20260115_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SESSION_UNIQUE_WHERE = "session_id IS NOT NULL AND action = 'add'"


def upgrade() -> None:
    """Create all tables."""

    # Create users table
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("discord_id", sa.String(64), nullable=False),
        sa.Column("discord_username", sa.String(100), nullable=False),
        sa.Column("discord_avatar", sa.Text(), nullable=True),
        sa.Column("donation_scope", sa.String(20), nullable=False, server_default="session"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_discord_id", "users", ["discord_id"], unique=True)

    # Create user_accumulated_sats table
    op.create_table(
        "user_accumulated_sats",
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("accumulated_sats", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_updated", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("accumulated_sats >= 0", name="ck_user_accumulated_sats_non_negative"),
    )

    # Create accumulated_sats_logs table
    op.create_table(
        "accumulated_sats_logs",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("amount_before", sa.Integer(), nullable=False),
        sa.Column("amount_after", sa.Integer(), nullable=False),
        sa.Column("change_amount", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("session_id", sa.String(36), nullable=True),
        sa.Column("donation_id", sa.String(36), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("action IN ('add', 'deduct')", name="ck_accumulated_sats_logs_action"),
    )
    op.create_index("ix_accumulated_sats_logs_user_id", "accumulated_sats_logs", ["user_id"])
    op.create_index("ix_accumulated_sats_logs_created_at", "accumulated_sats_logs", ["created_at"])
    # A session credits a user at most once
    op.create_index(
        "idx_accumulated_sats_logs_session_unique",
        "accumulated_sats_logs",
        ["user_id", "session_id"],
        unique=True,
        postgresql_where=sa.text(SESSION_UNIQUE_WHERE),
        sqlite_where=sa.text(SESSION_UNIQUE_WHERE),
    )

    # Create study_sessions table
    op.create_table(
        "study_sessions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("donation_mode", sa.String(50), nullable=False, server_default="pow-writing"),
        sa.Column("plan_text", sa.Text(), nullable=False, server_default=""),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("duration_seconds", sa.Integer(), nullable=True, server_default="0"),
        sa.Column("goal_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("goal_seconds", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("achievement_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("donation_id", sa.String(36), nullable=True),
        sa.Column("discord_message_id", sa.String(50), nullable=True),
        sa.Column("reaction_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_study_sessions_user_id", "study_sessions", ["user_id"])
    op.create_index("ix_study_sessions_donation_mode", "study_sessions", ["donation_mode"])
    op.create_index("ix_study_sessions_discord_message_id", "study_sessions", ["discord_message_id"])
    op.create_index("ix_study_sessions_created_at", "study_sessions", ["created_at"])

    # Create pow_sessions table
    op.create_table(
        "pow_sessions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("pow_fields", sa.String(50), nullable=False, server_default="pow-writing"),
        sa.Column("pow_plan_text", sa.Text(), nullable=False, server_default=""),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("duration_seconds", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("goal_seconds", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("goal_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("discord_message_id", sa.String(50), nullable=True),
        sa.Column("reaction_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_pow_sessions_user_id", "pow_sessions", ["user_id"])
    op.create_index("ix_pow_sessions_pow_fields", "pow_sessions", ["pow_fields"])
    op.create_index("ix_pow_sessions_discord_message_id", "pow_sessions", ["discord_message_id"])
    op.create_index("ix_pow_sessions_created_at", "pow_sessions", ["created_at"])

    # Create donations table
    op.create_table(
        "donations",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(10), nullable=False, server_default="SAT"),
        sa.Column("donation_mode", sa.String(50), nullable=False, server_default="pow-writing"),
        sa.Column("donation_scope", sa.String(20), nullable=False, server_default="session"),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("plan_text", sa.Text(), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("goal_minutes", sa.Integer(), nullable=True),
        sa.Column("achievement_rate", sa.Float(), nullable=True),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("accumulated_sats", sa.Integer(), nullable=True),
        sa.Column("total_accumulated_sats", sa.Integer(), nullable=True),
        sa.Column("total_donated_sats", sa.Integer(), nullable=True),
        sa.Column("transaction_id", sa.String(255), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("session_id", sa.String(36), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("paid_at", sa.DateTime(), nullable=True),
        sa.Column("discord_shared", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_donations_user_id", "donations", ["user_id"])
    op.create_index("ix_donations_donation_mode", "donations", ["donation_mode"])
    op.create_index("ix_donations_transaction_id", "donations", ["transaction_id"])
    op.create_index("ix_donations_status", "donations", ["status"])
    op.create_index("ix_donations_created_at", "donations", ["created_at"])

    # Create discord_posts table
    op.create_table(
        "discord_posts",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("message_id", sa.String(50), nullable=False),
        sa.Column("channel_id", sa.String(50), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("session_id", sa.String(36), nullable=True),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("plan_text", sa.Text(), nullable=True),
        sa.Column("donation_mode", sa.String(50), nullable=True),
        sa.Column("reaction_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reactions", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_discord_posts_message_id", "discord_posts", ["message_id"], unique=True)
    op.create_index("ix_discord_posts_user_id", "discord_posts", ["user_id"])
    op.create_index("ix_discord_posts_session_id", "discord_posts", ["session_id"])
    op.create_index("ix_discord_posts_donation_mode", "discord_posts", ["donation_mode"])
    op.create_index("ix_discord_posts_reaction_count", "discord_posts", ["reaction_count"])
    op.create_index("ix_discord_posts_created_at", "discord_posts", ["created_at"])

    # Create rankings table
    op.create_table(
        "rankings",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("pow_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("rank", sa.Integer(), nullable=False),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_rankings_user_id", "rankings", ["user_id"])
    op.create_index("ix_rankings_week_number", "rankings", ["week_number"])
    op.create_index("ix_rankings_year", "rankings", ["year"])

    # Create group_meetups table
    op.create_table(
        "group_meetups",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("organizer_id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("donation_mode", sa.String(50), nullable=False, server_default="pow-writing"),
        sa.Column("scheduled_at", sa.DateTime(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("target_donation_amount", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("qr_code_url", sa.Text(), nullable=True),
        sa.Column("qr_code_data", sa.Text(), nullable=True),
        sa.Column("qr_code_expires_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["organizer_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("duration_minutes > 0", name="ck_group_meetups_duration_positive"),
        sa.CheckConstraint("target_donation_amount > 0", name="ck_group_meetups_target_positive"),
    )
    op.create_index("ix_group_meetups_organizer_id", "group_meetups", ["organizer_id"])
    op.create_index("ix_group_meetups_scheduled_at", "group_meetups", ["scheduled_at"])
    op.create_index("ix_group_meetups_status", "group_meetups", ["status"])

    # Create meetup_participants table
    op.create_table(
        "meetup_participants",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("meetup_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("pledged_amount", sa.Integer(), nullable=False),
        sa.Column("actual_donated_amount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("attended", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("attended_at", sa.DateTime(), nullable=True),
        sa.Column("donation_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("donated_at", sa.DateTime(), nullable=True),
        sa.Column("donation_id", sa.String(36), nullable=True),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["meetup_id"], ["group_meetups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("meetup_id", "user_id", name="uq_meetup_participants_meetup_user"),
        sa.CheckConstraint("pledged_amount > 0", name="ck_meetup_participants_pledge_positive"),
        sa.CheckConstraint("actual_donated_amount >= 0", name="ck_meetup_participants_donated_non_negative"),
    )
    op.create_index("ix_meetup_participants_meetup_id", "meetup_participants", ["meetup_id"])
    op.create_index("ix_meetup_participants_user_id", "meetup_participants", ["user_id"])


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    op.drop_table("meetup_participants")
    op.drop_table("group_meetups")
    op.drop_table("rankings")
    op.drop_table("discord_posts")
    op.drop_table("donations")
    op.drop_table("pow_sessions")
    op.drop_table("study_sessions")
    op.drop_table("accumulated_sats_logs")
    op.drop_table("user_accumulated_sats")
    op.drop_table("users")
