"""Evidence ledger: evidence items, tags, claims and claim links

Revision ID: 002
Revises: 001
Create Date: 2026-02-02

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'evidence_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('service_id', sa.String(length=255), nullable=False),
        sa.Column('evidence_type', sa.String(length=100), nullable=False),
        sa.Column('source', sa.String(length=500), nullable=False),
        sa.Column('body', postgresql.JSONB(), nullable=False),
        sa.Column('confidence', sa.Integer(), nullable=False),
        sa.Column('ttl_hours', sa.Integer(), nullable=True),
        sa.Column('collected_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['service_id'], ['services.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "evidence_type IN ('SBOM', 'VULNERABILITY_SCAN', 'MONITORING', 'TESTING', "
            "'DEPLOYMENT', 'PROVENANCE', 'CONFIGURATION', 'OTHER')",
            name='ck_evidence_items_type'
        ),
        sa.CheckConstraint('confidence >= 0 AND confidence <= 100', name='ck_evidence_items_confidence')
    )
    op.create_index('ix_evidence_items_service_id', 'evidence_items', ['service_id'])
    op.create_index('ix_evidence_items_evidence_type', 'evidence_items', ['evidence_type'])
    op.create_index('ix_evidence_items_collected_at', 'evidence_items', ['collected_at'])
    op.create_index('ix_evidence_items_expires_at', 'evidence_items', ['expires_at'])

    op.create_table(
        'evidence_tags',
        sa.Column('evidence_id', sa.Integer(), nullable=False),
        sa.Column('tag', sa.String(length=255), nullable=False),
        sa.Column('position', sa.Integer(), server_default='0', nullable=False),
        sa.ForeignKeyConstraint(['evidence_id'], ['evidence_items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('evidence_id', 'tag')
    )
    op.create_index('idx_evidence_tags_tag', 'evidence_tags', ['tag'])

    op.create_table(
        'claims',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('service_id', sa.String(length=255), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('section', sa.String(length=100), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='UNKNOWN', nullable=False),
        sa.Column('confidence', sa.Integer(), server_default='0', nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['service_id'], ['services.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("status IN ('PASS', 'PARTIAL', 'FAIL', 'UNKNOWN')", name='ck_claims_status'),
        sa.CheckConstraint('confidence >= 0 AND confidence <= 100', name='ck_claims_confidence')
    )
    op.create_index('ix_claims_service_id', 'claims', ['service_id'])
    op.create_index('ix_claims_section', 'claims', ['section'])
    op.create_index('ix_claims_status', 'claims', ['status'])

    op.create_table(
        'claim_evidence',
        sa.Column('claim_id', sa.Integer(), nullable=False),
        sa.Column('evidence_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['claim_id'], ['claims.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['evidence_id'], ['evidence_items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('claim_id', 'evidence_id')
    )
    op.create_index('idx_claim_evidence_evidence', 'claim_evidence', ['evidence_id'])


def downgrade() -> None:
    op.drop_table('claim_evidence')
    op.drop_table('claims')
    op.drop_table('evidence_tags')
    op.drop_table('evidence_items')
