"""Initial schema: services, incidents, readiness scores, controls, work items

Revision ID: 001
Revises: 
Create Date: 2026-01-12

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'services',
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('tier', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'incidents',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('severity', sa.String(length=20), nullable=True),
        sa.Column('service_id', sa.String(length=255), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('impact', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("severity IN ('SEV1', 'SEV2', 'SEV3', 'SEV4')", name='ck_incidents_severity')
    )
    op.create_index('ix_incidents_service_id', 'incidents', ['service_id'])
    op.create_index('ix_incidents_started_at', 'incidents', ['started_at'])

    op.create_table(
        'readiness_scores',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('service_id', sa.String(length=255), nullable=False),
        sa.Column('service_name', sa.String(length=255), nullable=False),
        sa.Column('score', sa.Float(), nullable=False),
        sa.Column('section_scores', postgresql.JSONB(), nullable=True),
        sa.Column('recorded_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('score >= 0 AND score <= 100', name='ck_readiness_scores_score')
    )
    op.create_index('idx_readiness_scores_service_recorded', 'readiness_scores', ['service_id', 'recorded_at'])
    op.create_index('idx_readiness_scores_recorded', 'readiness_scores', ['recorded_at'])

    op.create_table(
        'controls',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('control_type', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('incident_id', sa.Integer(), nullable=True),
        sa.Column('service_id', sa.String(length=255), nullable=True),
        sa.Column('priority', sa.String(length=20), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='PROPOSED', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("control_type IN ('PREVENT', 'DETECT', 'RESPOND', 'LEARN')", name='ck_controls_type'),
        sa.CheckConstraint("priority IN ('LOW', 'MEDIUM', 'HIGH', 'CRITICAL')", name='ck_controls_priority'),
        sa.CheckConstraint(
            "status IN ('PROPOSED', 'APPROVED', 'IN_PROGRESS', 'COMPLETED', 'REJECTED')",
            name='ck_controls_status'
        )
    )
    op.create_index('ix_controls_service_id', 'controls', ['service_id'])
    op.create_index('ix_controls_status', 'controls', ['status'])
    op.create_index('ix_controls_priority', 'controls', ['priority'])

    op.create_table(
        'work_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('external_id', sa.String(length=255), nullable=True),
        sa.Column('external_system', sa.String(length=50), nullable=True),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('work_type', sa.String(length=50), nullable=True),
        sa.Column('control_id', sa.Integer(), nullable=True),
        sa.Column('incident_id', sa.Integer(), nullable=True),
        sa.Column('service_id', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='OPEN', nullable=False),
        sa.Column('assigned_to', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['control_id'], ['controls.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("external_system IN ('GITHUB', 'JIRA', 'LINEAR')", name='ck_work_items_external_system'),
        sa.CheckConstraint(
            "work_type IN ('REMEDIATION', 'INVESTIGATION', 'DOCUMENTATION', 'MODEL_UPDATE')",
            name='ck_work_items_type'
        ),
        sa.CheckConstraint("status IN ('OPEN', 'IN_PROGRESS', 'COMPLETED', 'CLOSED')", name='ck_work_items_status')
    )
    op.create_index('ix_work_items_service_id', 'work_items', ['service_id'])
    op.create_index('ix_work_items_status', 'work_items', ['status'])
    op.create_index('ix_work_items_control_id', 'work_items', ['control_id'])


def downgrade() -> None:
    op.drop_table('work_items')
    op.drop_table('controls')
    op.drop_table('readiness_scores')
    op.drop_table('incidents')
    op.drop_table('services')
