"""Create commission engine tables

Revision ID: 20261019_000001
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Plans
    op.create_table(
        'plans',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('scheme_name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('monthly_due', sa.DECIMAL(18, 2), nullable=False),
        sa.Column('total_months', sa.Integer(), nullable=False),
        sa.Column('bonus', sa.DECIMAL(18, 2), nullable=False, server_default='0'),
        sa.Column('commission_monthly', postgresql.ARRAY(sa.Text()), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.CheckConstraint('total_months > 0', name='check_plan_total_months'),
        sa.CheckConstraint('monthly_due >= 0', name='check_plan_monthly_due'),
        sa.PrimaryKeyConstraint('id')
    )

    # Referral tree
    op.create_table(
        'referral_tree_edges',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('referred_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('referred_by IS NULL OR referred_by <> user_id', name='check_referral_edge_not_self'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id')
    )
    op.create_index('ix_referral_tree_edges_referred_by', 'referral_tree_edges', ['referred_by'])

    # Subscriptions
    op.create_table(
        'subscriptions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('plan_id', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('total_paid', sa.DECIMAL(18, 2), nullable=False, server_default='0'),
        sa.Column('bonus_amount', sa.DECIMAL(18, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['plan_id'], ['plans.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_subscriptions_user_id', 'subscriptions', ['user_id'])
    op.create_index('ix_subscriptions_plan_id', 'subscriptions', ['plan_id'])

    # Payments
    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('subscription_id', sa.Integer(), nullable=False),
        sa.Column('month_number', sa.Integer(), nullable=True),
        sa.Column('amount', sa.DECIMAL(18, 2), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('payment_type', sa.String(20), nullable=False, server_default='monthly'),
        sa.Column('gold_rate', sa.DECIMAL(18, 4), nullable=True),
        sa.Column('gold_mg', sa.DECIMAL(18, 3), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("status IN ('pending', 'completed', 'failed')", name='check_payment_status'),
        sa.CheckConstraint("payment_type IN ('monthly', 'bonus')", name='check_payment_type'),
        sa.CheckConstraint('amount >= 0', name='check_payment_amount'),
        sa.ForeignKeyConstraint(['subscription_id'], ['subscriptions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_payments_subscription_id', 'payments', ['subscription_id'])
    op.create_index('idx_payments_subscription_status', 'payments', ['subscription_id', 'status'])
    # At most one bonus payment per subscription
    op.create_index(
        'uq_payments_bonus_per_subscription',
        'payments',
        ['subscription_id'],
        unique=True,
        postgresql_where=sa.text("payment_type = 'bonus'"),
    )

    # Gold rates
    op.create_table(
        'gold_rates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('rate_per_gram', sa.DECIMAL(18, 4), nullable=False),
        sa.Column('rate_date', sa.Date(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_gold_rates_rate_date', 'gold_rates', ['rate_date'])

    # Wallets
    op.create_table(
        'wallets',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('savings_balance', sa.DECIMAL(18, 2), nullable=False, server_default='0'),
        sa.Column('referral_balance', sa.DECIMAL(18, 2), nullable=False, server_default='0'),
        sa.Column('total_balance', sa.DECIMAL(18, 2), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('referral_balance >= 0', name='check_wallet_referral_non_negative'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id')
    )

    # Scheduled commission jobs
    op.create_table(
        'scheduled_commissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('scheduled_for', sa.Date(), nullable=False),
        sa.Column('locked_by', sa.String(255), nullable=True),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('payload', postgresql.JSONB(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending', 'processing', 'completed', 'failed')",
            name='check_scheduled_commission_status'
        ),
        sa.CheckConstraint('attempts >= 0', name='check_scheduled_commission_attempts'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_scheduled_commissions_due', 'scheduled_commissions', ['status', 'scheduled_for'])

    # Commission ledger
    op.create_table(
        'referral_commissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('from_user_id', sa.Integer(), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('amount', sa.DECIMAL(18, 2), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='credited'),
        sa.Column('job_id', sa.Integer(), nullable=False),
        sa.Column('payment_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('level >= 1 AND level <= 10', name='check_referral_commission_level'),
        sa.CheckConstraint('amount > 0', name='check_referral_commission_amount'),
        sa.ForeignKeyConstraint(['job_id'], ['scheduled_commissions.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['payment_id'], ['payments.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('job_id', 'level', name='uq_referral_commission_job_level')
    )
    op.create_index('ix_referral_commissions_job_id', 'referral_commissions', ['job_id'])
    op.create_index('idx_referral_commissions_user_level', 'referral_commissions', ['user_id', 'level'])


def downgrade() -> None:
    op.drop_index('idx_referral_commissions_user_level', 'referral_commissions')
    op.drop_index('ix_referral_commissions_job_id', 'referral_commissions')
    op.drop_table('referral_commissions')

    op.drop_index('idx_scheduled_commissions_due', 'scheduled_commissions')
    op.drop_table('scheduled_commissions')

    op.drop_table('wallets')

    op.drop_index('ix_gold_rates_rate_date', 'gold_rates')
    op.drop_table('gold_rates')

    op.drop_index('uq_payments_bonus_per_subscription', 'payments')
    op.drop_index('idx_payments_subscription_status', 'payments')
    op.drop_index('ix_payments_subscription_id', 'payments')
    op.drop_table('payments')

    op.drop_index('ix_subscriptions_plan_id', 'subscriptions')
    op.drop_index('ix_subscriptions_user_id', 'subscriptions')
    op.drop_table('subscriptions')

    op.drop_index('ix_referral_tree_edges_referred_by', 'referral_tree_edges')
    op.drop_table('referral_tree_edges')

    op.drop_table('plans')
