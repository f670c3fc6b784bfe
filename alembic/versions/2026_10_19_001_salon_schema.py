"""Salon schema: tenants, users, encrypted customers, day-end closing, expenses

Revision ID: 001_salon_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '001_salon_schema'
down_revision = None


def upgrade():
    op.create_table(
        'tenants',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('subdomain', sa.String(63), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
    )
    op.create_index('ix_tenants_name', 'tenants', ['name'])
    op.create_index('ix_tenants_subdomain', 'tenants', ['subdomain'], unique=True)
    op.create_index('ix_tenants_is_active', 'tenants', ['is_active'])

    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column(
            'role',
            sa.Enum('ADMIN', 'MANAGER', 'RECEPTIONIST', 'STAFF', name='userrole'),
            nullable=False,
        ),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('tenant_id', 'email', name='uq_user_tenant_email'),
    )
    op.create_index('ix_users_tenant_id', 'users', ['tenant_id'])
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_is_active', 'users', ['is_active'])

    op.create_table(
        'customers',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('phone_number', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('phone_hash', sa.String(64), nullable=False),
        sa.Column('searchable_name', sa.String(200), nullable=False),
        sa.Column('last4_phone_number', sa.String(4), nullable=False),
        sa.Column('gender', sa.String(20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('tenant_id', 'phone_hash', name='uq_customer_tenant_phone_hash'),
    )
    op.create_index('ix_customers_tenant_id', 'customers', ['tenant_id'])
    op.create_index('ix_customers_searchable_name', 'customers', ['searchable_name'])
    op.create_index('ix_customers_is_active', 'customers', ['is_active'])

    op.create_table(
        'customer_phone_tokens',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('token', sa.String(64), nullable=False),
    )
    op.create_index('idx_phone_token_tenant_token', 'customer_phone_tokens', ['tenant_id', 'token'])
    op.create_index('ix_customer_phone_tokens_customer_id', 'customer_phone_tokens', ['customer_id'])

    op.create_table(
        'day_end_reports',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('closing_date', sa.Date(), nullable=False),
        sa.Column('opening_balance', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('is_opening_balance_manual', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('petty_cash_total', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('expected_totals', sa.JSON(), nullable=True),
        sa.Column('actual_totals', sa.JSON(), nullable=True),
        sa.Column('discrepancies', sa.JSON(), nullable=True),
        sa.Column('cash_denominations', sa.JSON(), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('closed_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('is_completed', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('tenant_id', 'closing_date', name='uq_day_end_tenant_date'),
    )
    op.create_index('ix_day_end_reports_tenant_id', 'day_end_reports', ['tenant_id'])
    op.create_index('ix_day_end_reports_closing_date', 'day_end_reports', ['closing_date'])
    op.create_index('ix_day_end_reports_is_completed', 'day_end_reports', ['is_completed'])

    op.create_table(
        'expenses',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('expense_date', sa.Date(), nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_method', sa.String(20), nullable=False, server_default='cash'),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_expenses_tenant_id', 'expenses', ['tenant_id'])
    op.create_index('ix_expenses_expense_date', 'expenses', ['expense_date'])


def downgrade():
    op.drop_table('expenses')
    op.drop_table('day_end_reports')
    op.drop_table('customer_phone_tokens')
    op.drop_table('customers')
    op.drop_table('users')
    op.drop_table('tenants')
    op.execute('DROP TYPE IF EXISTS userrole')
