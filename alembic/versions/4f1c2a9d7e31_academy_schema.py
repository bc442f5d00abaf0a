"""academy_schema

Revision ID: 4f1c2a9d7e31
Revises:
Create Date: 2025-11-03 10:14:22.418305

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "4f1c2a9d7e31"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _json():
    return postgresql.JSONB().with_variant(sa.JSON(), "sqlite")


def _string_array():
    return postgresql.ARRAY(sa.String()).with_variant(sa.JSON(), "sqlite")


def _fk(column: str, target: str) -> sa.Column:
    return sa.Column(
        column,
        sa.Integer(),
        sa.ForeignKey(target, ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=True),
        sa.Column("last_name", sa.String(), nullable=True),
        sa.Column(
            "role",
            sa.Enum("ADMIN", "USER", name="user_role_enum"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )

    op.create_table(
        "academy_courses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(), nullable=False, index=True),
        sa.Column("instructor", sa.String(), nullable=True),
        sa.Column("level", sa.String(), nullable=False, index=True),
        sa.Column("duration_hours", sa.Float(), nullable=False),
        sa.Column("thumbnail_url", sa.String(), nullable=True),
        sa.Column("video_url", sa.String(), nullable=True),
        sa.Column("materials_url", sa.String(), nullable=True),
        sa.Column("related_tool", sa.String(), nullable=True, index=True),
        sa.Column("price_credits", sa.Integer(), nullable=False),
        sa.Column("is_featured", sa.Boolean(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "user_course_progress",
        sa.Column("id", sa.Integer(), primary_key=True),
        _fk("user_id", "users.id"),
        _fk("course_id", "academy_courses.id"),
        sa.Column(
            "status",
            sa.Enum(
                "NOT_STARTED",
                "IN_PROGRESS",
                "COMPLETED",
                name="progress_status_enum",
            ),
            nullable=False,
        ),
        sa.Column("progress_percentage", sa.Float(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_accessed_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "course_id", name="uq_user_course_progress"),
    )

    op.create_table(
        "user_certifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        _fk("user_id", "users.id"),
        _fk("course_id", "academy_courses.id"),
        sa.Column("certificate_number", sa.String(), nullable=False, unique=True),
        sa.Column("skills_earned", _string_array(), nullable=False),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "user_id", "course_id", name="uq_user_certification_course"
        ),
    )

    op.create_table(
        "course_quizzes",
        sa.Column("id", sa.Integer(), primary_key=True),
        _fk("course_id", "academy_courses.id"),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("passing_score", sa.Integer(), nullable=True),
        sa.Column("time_limit_minutes", sa.Integer(), nullable=True),
        sa.Column("max_attempts", sa.Integer(), nullable=True),
        sa.Column("is_required_for_certification", sa.Boolean(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "quiz_questions",
        sa.Column("id", sa.Integer(), primary_key=True),
        _fk("quiz_id", "course_quizzes.id"),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("question_type", sa.String(), nullable=False),
        sa.Column("options", _json(), nullable=False),
        sa.Column("correct_answer", sa.String(), nullable=False),
        sa.Column("explanation", sa.Text(), nullable=True),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
    )

    op.create_table(
        "user_quiz_attempts",
        sa.Column("id", sa.Integer(), primary_key=True),
        _fk("user_id", "users.id"),
        _fk("quiz_id", "course_quizzes.id"),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("total_questions", sa.Integer(), nullable=False),
        sa.Column("answers", _json(), nullable=False),
        sa.Column("passed", sa.Boolean(), nullable=False),
        sa.Column("time_taken_seconds", sa.Integer(), nullable=True),
        sa.Column("attempt_number", sa.Integer(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "user_id", "quiz_id", "attempt_number", name="uq_quiz_attempt_number"
        ),
    )

    op.create_table(
        "course_discussions",
        sa.Column("id", sa.Integer(), primary_key=True),
        _fk("course_id", "academy_courses.id"),
        _fk("user_id", "users.id"),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_pinned", sa.Boolean(), nullable=False),
        sa.Column("is_locked", sa.Boolean(), nullable=False),
        sa.Column("view_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "discussion_replies",
        sa.Column("id", sa.Integer(), primary_key=True),
        _fk("discussion_id", "course_discussions.id"),
        _fk("user_id", "users.id"),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_solution", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "uq_discussion_replies_solution",
        "discussion_replies",
        ["discussion_id"],
        unique=True,
        postgresql_where=sa.text("is_solution"),
        sqlite_where=sa.text("is_solution = 1"),
    )


def downgrade() -> None:
    op.drop_index("uq_discussion_replies_solution", table_name="discussion_replies")
    op.drop_table("discussion_replies")
    op.drop_table("course_discussions")
    op.drop_table("user_quiz_attempts")
    op.drop_table("quiz_questions")
    op.drop_table("course_quizzes")
    op.drop_table("user_certifications")
    op.drop_table("user_course_progress")
    op.drop_table("academy_courses")
    op.drop_table("users")
    sa.Enum(name="progress_status_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="user_role_enum").drop(op.get_bind(), checkfirst=True)
