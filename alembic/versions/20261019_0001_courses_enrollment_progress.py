"""courses, chapters, enrollments, chapter progress and bookmarks

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "courses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("topic", sa.String(length=200), nullable=False),
        sa.Column("author_id", sa.String(length=64), nullable=False),
        sa.Column(
            "is_public", sa.Boolean(), nullable=False,
            server_default=sa.true()
        ),
        sa.Column(
            "views", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_courses_topic", "courses", ["topic"])
    op.create_index("ix_courses_author_id", "courses", ["author_id"])

    op.create_table(
        "chapters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "course_id",
            sa.Integer(),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "course_id", "order_index", name="uq_chapters_course_order"
        ),
    )
    op.create_index("ix_chapters_course_id", "chapters", ["course_id"])

    op.create_table(
        "enrollments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "course_id",
            sa.Integer(),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("enrolled_at", sa.DateTime(), nullable=False),
        sa.Column(
            "is_completed", sa.Boolean(), nullable=False,
            server_default=sa.false()
        ),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column(
            "progress_percentage", sa.Integer(), nullable=False,
            server_default="0"
        ),
        sa.Column("last_accessed_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "course_id", "user_id", name="uq_enrollments_course_user"
        ),
    )
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])
    op.create_index("ix_enrollments_user_id", "enrollments", ["user_id"])

    op.create_table(
        "chapter_progress",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "chapter_id",
            sa.Integer(),
            sa.ForeignKey("chapters.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column(
            "is_completed", sa.Boolean(), nullable=False,
            server_default=sa.false()
        ),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint(
            "chapter_id", "user_id", name="uq_chapter_progress_chapter_user"
        ),
    )
    op.create_index(
        "ix_chapter_progress_chapter_id", "chapter_progress", ["chapter_id"]
    )
    op.create_index(
        "ix_chapter_progress_user_id", "chapter_progress", ["user_id"]
    )

    op.create_table(
        "bookmarks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "course_id",
            sa.Integer(),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "course_id", "user_id", name="uq_bookmarks_course_user"
        ),
    )
    op.create_index("ix_bookmarks_course_id", "bookmarks", ["course_id"])
    op.create_index("ix_bookmarks_user_id", "bookmarks", ["user_id"])


def downgrade() -> None:
    op.drop_table("bookmarks")
    op.drop_table("chapter_progress")
    op.drop_table("enrollments")
    op.drop_table("chapters")
    op.drop_table("courses")
