"""Initial schema for collection jobs

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='CLIENT'),
        sa.Column('client_id', sa.String(40), nullable=True),
        sa.Column('reseller_id', sa.String(40), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_id', 'users', ['id'], unique=False)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_client_id', 'users', ['client_id'], unique=False)
    op.create_index('ix_users_reseller_id', 'users', ['reseller_id'], unique=False)

    # Create asset_categories table
    op.create_table(
        'asset_categories',
        sa.Column('id', sa.String(40), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('icon', sa.String(16), nullable=False, server_default=''),
        sa.Column('co2e_per_unit', sa.Float(), nullable=False),
        sa.Column('avg_weight', sa.Float(), nullable=False, server_default='0'),
        sa.Column('avg_buyback_value', sa.Float(), nullable=False),
        sa.Column('recycling_co2e_per_unit', sa.Float(), nullable=False, server_default='0'),
        sa.Column('scrap_value_per_unit', sa.Float(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id')
    )

    # Create jobs table
    op.create_table(
        'jobs',
        sa.Column('id', sa.String(40), nullable=False),
        sa.Column('erp_job_number', sa.String(100), nullable=False),
        sa.Column('client_id', sa.String(40), nullable=False),
        sa.Column('client_name', sa.String(255), nullable=False),
        sa.Column('reseller_id', sa.String(40), nullable=True),
        sa.Column('site_name', sa.String(255), nullable=False),
        sa.Column('site_address', sa.Text(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='booked'),
        sa.Column('scheduled_date', sa.Date(), nullable=False),
        sa.Column('completed_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('assets', sa.JSON(), nullable=False),
        sa.Column('driver', sa.JSON(), nullable=True),
        sa.Column('evidence', sa.JSON(), nullable=False),
        sa.Column('certificates', sa.JSON(), nullable=False),
        sa.Column('co2e_saved', sa.Float(), nullable=False, server_default='0'),
        sa.Column('buyback_value', sa.Float(), nullable=False, server_default='0'),
        sa.Column('charity_percent', sa.Float(), nullable=True),
        sa.Column('charity_value', sa.Float(), nullable=False, server_default='0'),
        sa.Column('travel_emissions', sa.Float(), nullable=False, server_default='0'),
        sa.Column('round_trip_distance_km', sa.Float(), nullable=True),
        sa.Column('charity_rate', sa.Float(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_jobs_erp_job_number', 'jobs', ['erp_job_number'], unique=True)
    op.create_index('ix_jobs_client_id', 'jobs', ['client_id'], unique=False)
    op.create_index('ix_jobs_reseller_id', 'jobs', ['reseller_id'], unique=False)
    op.create_index('ix_jobs_status', 'jobs', ['status'], unique=False)

    # Create grading_records table
    op.create_table(
        'grading_records',
        sa.Column('id', sa.String(40), nullable=False),
        sa.Column('job_id', sa.String(40), nullable=False),
        sa.Column('asset_id', sa.String(40), nullable=False),
        sa.Column('asset_category', sa.String(40), nullable=False),
        sa.Column('grade', sa.String(20), nullable=False),
        sa.Column('resale_value', sa.Float(), nullable=False),
        sa.Column('graded_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('graded_by', sa.String(100), nullable=False),
        sa.Column('condition', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_grading_records_job_id', 'grading_records', ['job_id'], unique=False)
    op.create_index('ix_grading_job_asset', 'grading_records', ['job_id', 'asset_id'], unique=False)

    # Create sanitisation_records table
    op.create_table(
        'sanitisation_records',
        sa.Column('id', sa.String(40), nullable=False),
        sa.Column('job_id', sa.String(40), nullable=False),
        sa.Column('asset_id', sa.String(40), nullable=False),
        sa.Column('method', sa.String(30), nullable=False),
        sa.Column('method_details', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('performed_by', sa.String(100), nullable=False),
        sa.Column('verified', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sanitisation_records_job_id', 'sanitisation_records', ['job_id'], unique=False)
    op.create_index('ix_sanitisation_job_asset', 'sanitisation_records', ['job_id', 'asset_id'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_sanitisation_job_asset', table_name='sanitisation_records')
    op.drop_index('ix_sanitisation_records_job_id', table_name='sanitisation_records')
    op.drop_table('sanitisation_records')

    op.drop_index('ix_grading_job_asset', table_name='grading_records')
    op.drop_index('ix_grading_records_job_id', table_name='grading_records')
    op.drop_table('grading_records')

    op.drop_index('ix_jobs_status', table_name='jobs')
    op.drop_index('ix_jobs_reseller_id', table_name='jobs')
    op.drop_index('ix_jobs_client_id', table_name='jobs')
    op.drop_index('ix_jobs_erp_job_number', table_name='jobs')
    op.drop_table('jobs')

    op.drop_table('asset_categories')

    op.drop_index('ix_users_reseller_id', table_name='users')
    op.drop_index('ix_users_client_id', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')
