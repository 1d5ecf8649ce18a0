"""Create reviews and submission_records tables

Revision ID: 3f9c2a7d1e04
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d1e04'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('reviews',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('review_id', sa.String(length=64), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False, comment='Rating from 1-5 stars'),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('product_id', sa.String(length=255), nullable=False),
        sa.Column('wallet_address', sa.String(length=42), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('review_hash', sa.String(length=64), nullable=False),
        sa.Column('content_hash', sa.String(length=64), nullable=False),
        sa.Column('publication', sa.JSON(), nullable=False),
        sa.Column('vendor_response', sa.Text(), nullable=True),
        sa.Column('response_timestamp', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_review_rating_range'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('wallet_address', 'product_id', name='uq_review_wallet_product')
    )
    op.create_index(op.f('ix_reviews_review_id'), 'reviews', ['review_id'], unique=True)
    op.create_index(op.f('ix_reviews_product_id'), 'reviews', ['product_id'], unique=False)
    op.create_index(op.f('ix_reviews_wallet_address'), 'reviews', ['wallet_address'], unique=False)
    op.create_index(op.f('ix_reviews_timestamp'), 'reviews', ['timestamp'], unique=False)
    op.create_index(op.f('ix_reviews_review_hash'), 'reviews', ['review_hash'], unique=False)

    op.create_table('submission_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('review_id', sa.String(length=64), nullable=False),
        sa.Column('product_id', sa.String(length=255), nullable=False),
        sa.Column('wallet', sa.String(length=42), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('review_hash', sa.String(length=64), nullable=False),
        sa.Column('content_hash', sa.String(length=64), nullable=False),
        sa.Column('client_ip', sa.String(length=64), nullable=True),
        sa.Column('submission_method', sa.String(length=32), nullable=False),
        sa.Column('event_emitted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('publication', sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_submission_records_review_id'), 'submission_records', ['review_id'], unique=False)
    op.create_index(op.f('ix_submission_records_timestamp'), 'submission_records', ['timestamp'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_submission_records_timestamp'), table_name='submission_records')
    op.drop_index(op.f('ix_submission_records_review_id'), table_name='submission_records')
    op.drop_table('submission_records')
    op.drop_index(op.f('ix_reviews_review_hash'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_timestamp'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_wallet_address'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_product_id'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_review_id'), table_name='reviews')
    op.drop_table('reviews')
