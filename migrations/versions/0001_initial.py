"""Initial schema: users, rides, ride_requests"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="rider"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("role IN ('driver', 'rider')", name="ck_users_role"),
    )

    op.create_table(
        "rides",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("driver_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("vehicle_name", sa.String(255), nullable=False),
        sa.Column("vehicle_number", sa.String(50), nullable=False),
        sa.Column("from_location", sa.String(255), nullable=False),
        sa.Column("to_location", sa.String(255), nullable=False),
        sa.Column("ride_date", sa.Date, nullable=False),
        sa.Column("ride_time", sa.Time, nullable=False),
        sa.Column("seats_available", sa.Integer, nullable=False),
        sa.Column("seats_booked", sa.Integer, nullable=False, server_default="0"),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("seats_available >= 1", name="ck_rides_seats_available_positive"),
        sa.CheckConstraint(
            "seats_booked >= 0 AND seats_booked <= seats_available",
            name="ck_rides_seats_booked_within_capacity",
        ),
        sa.CheckConstraint("status IN ('active', 'cancelled')", name="ck_rides_status"),
    )
    op.create_index("idx_rides_driver", "rides", ["driver_id"])
    op.create_index("idx_rides_status", "rides", ["status"])
    op.create_index("idx_rides_date_time", "rides", ["ride_date", "ride_time"])

    op.create_table(
        "ride_requests",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("ride_id", sa.Integer, sa.ForeignKey("rides.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rider_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("ride_id", "rider_id", name="uq_ride_requests_ride_rider"),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_ride_requests_status"),
    )
    op.create_index("idx_ride_requests_ride", "ride_requests", ["ride_id"])
    op.create_index("idx_ride_requests_rider", "ride_requests", ["rider_id"])
    op.create_index("idx_ride_requests_status", "ride_requests", ["status"])
    op.create_index("idx_ride_requests_requested", "ride_requests", ["requested_at"])


def downgrade() -> None:
    op.drop_table("ride_requests")
    op.drop_table("rides")
    op.drop_table("users")
