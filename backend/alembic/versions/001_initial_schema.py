"""Initial schema: users, machines, courses, quizzes, certifications, bookings.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "machines",
        sa.Column("id", sa.String(50), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'Available'")),
        sa.Column("maintenance_note", sa.String(1000), nullable=True),
        sa.Column("requires_certification", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("linked_course_id", sa.String(50), nullable=True),
        sa.Column("linked_quiz_id", sa.String(50), nullable=True),
        sa.Column("difficulty", sa.String(50), nullable=True),
        sa.Column("image_url", sa.String(1000), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('Available', 'Maintenance', 'In Use')",
            name="check_machine_status",
        ),
    )

    op.create_table(
        "courses",
        sa.Column("id", sa.String(50), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("image_url", sa.String(1000), nullable=True),
        sa.Column("related_machine_ids", sa.JSON(), nullable=False),
        sa.Column("quiz_id", sa.String(50), nullable=True),
        sa.Column("difficulty", sa.String(50), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "course_completions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("course_id", sa.String(50), sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "course_id", name="uq_user_course_completion"),
    )
    op.create_index("ix_course_completions_id", "course_completions", ["id"])
    op.create_index("ix_course_completions_user_id", "course_completions", ["user_id"])

    op.create_table(
        "quizzes",
        sa.Column("id", sa.String(50), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("image_url", sa.String(1000), nullable=True),
        sa.Column("questions", sa.JSON(), nullable=False),
        sa.Column("passing_score", sa.Integer(), nullable=False, server_default=sa.text("70")),
        sa.Column("related_machine_ids", sa.JSON(), nullable=False),
        sa.Column("related_course_id", sa.String(50), nullable=True),
        sa.Column("difficulty", sa.String(50), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "certifications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("machine_id", sa.String(50), sa.ForeignKey("machines.id", ondelete="CASCADE"), nullable=False),
        sa.Column("score", sa.Integer(), nullable=True),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "machine_id", name="uq_user_machine_certification"),
    )
    op.create_index("ix_certifications_id", "certifications", ["id"])
    op.create_index("ix_certifications_user_id", "certifications", ["user_id"])
    op.create_index("ix_certifications_machine_id", "certifications", ["machine_id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("machine_id", sa.String(50), sa.ForeignKey("machines.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time_slot", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'Pending'")),
        sa.Column("user_name", sa.String(100), nullable=True),
        sa.Column("machine_name", sa.String(255), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('Pending', 'Approved', 'Rejected', 'Completed', 'Canceled')",
            name="check_booking_status",
        ),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_machine_id", "bookings", ["machine_id"])
    # Availability lookups are always (machine, day)
    op.create_index("ix_bookings_machine_date", "bookings", ["machine_id", "date"])
    # At most one live booking per slot. Terminal rows fall outside the
    # predicate so a canceled slot can be booked again.
    op.create_index(
        "uq_bookings_active_slot",
        "bookings",
        ["machine_id", "date", "time_slot"],
        unique=True,
        postgresql_where=sa.text("status IN ('Pending', 'Approved')"),
        sqlite_where=sa.text("status IN ('Pending', 'Approved')"),
    )


def downgrade() -> None:
    op.drop_table("bookings")
    op.drop_table("certifications")
    op.drop_table("quizzes")
    op.drop_table("course_completions")
    op.drop_table("courses")
    op.drop_table("machines")
    op.drop_table("users")
