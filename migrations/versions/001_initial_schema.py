"""Initial schema: users, rides, ride membership and chat messages.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


GENDER = sa.Enum("male", "female", "other", name="gender")
GENDER_PREFERENCE = sa.Enum("any", "male", "female", name="gender_preference")
RIDE_STATUS = sa.Enum("active", "completed", "cancelled", name="ride_status")


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("gender", GENDER, nullable=False),
        sa.Column("phone", sa.String(40), nullable=False),
        sa.Column("profile_picture", sa.String(500), nullable=False, server_default=""),
        sa.Column("rating", sa.Float, nullable=False, server_default="5.0"),
        sa.Column("total_rides", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("rating >= 0 AND rating <= 5", name="ck_users_rating"),
    )

    # ── rides ─────────────────────────────────────────────────────────
    op.create_table(
        "rides",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("driver_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("destination", sa.String(255), nullable=False),
        sa.Column("start_location", sa.String(255), nullable=False),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("time", sa.String(20), nullable=False),
        sa.Column("total_seats", sa.Integer, nullable=False),
        sa.Column("available_seats", sa.Integer, nullable=False),
        sa.Column("cost_per_person", sa.Float, nullable=False),
        sa.Column("gender_preference", GENDER_PREFERENCE, nullable=False, server_default="any"),
        sa.Column("status", RIDE_STATUS, nullable=False, server_default="active"),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("vehicle_info", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "total_seats >= 1 AND total_seats <= 8", name="ck_rides_total_seats"
        ),
        sa.CheckConstraint("available_seats >= 0", name="ck_rides_available_seats"),
        sa.CheckConstraint("cost_per_person >= 0", name="ck_rides_cost"),
    )
    op.create_index("idx_rides_status_date", "rides", ["status", "date"])
    op.create_index("idx_rides_driver", "rides", ["driver_id"])

    # ── ride_passengers ───────────────────────────────────────────────
    op.create_table(
        "ride_passengers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "ride_id",
            sa.Integer,
            sa.ForeignKey("rides.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("ride_id", "user_id", name="uq_ride_passengers_member"),
    )
    op.create_index("idx_ride_passengers_user", "ride_passengers", ["user_id"])

    # ── messages ──────────────────────────────────────────────────────
    op.create_table(
        "messages",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "ride_id",
            sa.Integer,
            sa.ForeignKey("rides.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("sender_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("message", sa.String(500), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("idx_messages_ride_created", "messages", ["ride_id", "created_at"])


def downgrade() -> None:
    op.drop_table("messages")
    op.drop_table("ride_passengers")
    op.drop_table("rides")
    op.drop_table("users")
    RIDE_STATUS.drop(op.get_bind(), checkfirst=True)
    GENDER_PREFERENCE.drop(op.get_bind(), checkfirst=True)
    GENDER.drop(op.get_bind(), checkfirst=True)
