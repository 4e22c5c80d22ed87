"""reviews and newsletter subscribers

Revision ID: 8c2d41b7e913
Revises: 3f7a9c1e2b40
Create Date: 2026-10-17 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "8c2d41b7e913"
down_revision = "3f7a9c1e2b40"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_name", sa.String(length=100), nullable=False),
        sa.Column("user_phone", sa.String(length=10), nullable=False),
        sa.Column("user_email", sa.String(length=255), nullable=True),
        sa.Column("booking_ref", sa.String(length=30), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("review_text", sa.String(length=500), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("approved_by", sa.String(length=120), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_phone", "booking_ref", name="uq_review_phone_booking"),
    )
    with op.batch_alter_table("reviews", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_reviews_user_phone"), ["user_phone"], unique=False)
        batch_op.create_index("ix_reviews_status_created", ["status", "created_at"], unique=False)

    op.create_table(
        "newsletter_subscribers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("unsubscribe_token", sa.String(length=64), nullable=False),
        sa.Column("subscribed_at", sa.DateTime(), nullable=False),
        sa.Column("unsubscribed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("unsubscribe_token"),
    )
    with op.batch_alter_table("newsletter_subscribers", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_newsletter_subscribers_email"), ["email"], unique=True)
        batch_op.create_index(batch_op.f("ix_newsletter_subscribers_is_active"), ["is_active"], unique=False)

    with op.batch_alter_table("admin_permissions", schema=None) as batch_op:
        batch_op.add_column(
            sa.Column("can_view_newsletter", sa.Boolean(), nullable=False, server_default=sa.true())
        )


def downgrade():
    with op.batch_alter_table("admin_permissions", schema=None) as batch_op:
        batch_op.drop_column("can_view_newsletter")

    with op.batch_alter_table("newsletter_subscribers", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_newsletter_subscribers_is_active"))
        batch_op.drop_index(batch_op.f("ix_newsletter_subscribers_email"))
    op.drop_table("newsletter_subscribers")

    with op.batch_alter_table("reviews", schema=None) as batch_op:
        batch_op.drop_index("ix_reviews_status_created")
        batch_op.drop_index(batch_op.f("ix_reviews_user_phone"))
    op.drop_table("reviews")
