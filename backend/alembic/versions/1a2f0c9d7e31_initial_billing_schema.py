"""initial billing schema

Revision ID: 1a2f0c9d7e31
Revises:
Create Date: 2026-10-19 10:12:41.507113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '1a2f0c9d7e31'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# Shared enum types are created once up front and referenced with create_type=False
ENUMS = {
    'partytype': ('FARMER', 'AGENT', 'CLIENT'),
    'partystatus': ('ACTIVE', 'INACTIVE'),
    'loadingsource': ('FARMER', 'AGENT', 'CLIENT'),
    'dispatchchargetype': ('ICE_COOLING', 'TRANSPORT', 'OTHER'),
    'paymentmode': ('CASH', 'AC', 'UPI', 'CHEQUE'),
}


def _enum(name: str):
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def _payment_table(table_name: str, party_column: str, *extra_columns):
    op.create_table(
        table_name,
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column(party_column, sa.Integer(), sa.ForeignKey('parties.id'), nullable=False),
        *extra_columns,
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_mode', _enum('paymentmode'), nullable=False),
        sa.Column('reference', sa.String(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('is_installment', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('id', party_column, 'payment_date', 'tenant_id'):
        op.create_index(op.f(f'ix_{table_name}_{column}'), table_name, [column])


def _invoice_table(table_name: str, payment_table: str, constraint_name: str):
    op.create_table(
        table_name,
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('payment_id', sa.Integer(), sa.ForeignKey(f'{payment_table}.id'), nullable=False),
        sa.Column('invoice_no', sa.Integer(), nullable=False),
        sa.Column('invoice_date', sa.Date(), nullable=False),
        sa.Column('party_name', sa.String(), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('is_finalized', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('payment_id'),
        sa.UniqueConstraint('tenant_id', 'invoice_no', name=constraint_name),
    )
    for column in ('id', 'invoice_no', 'tenant_id'):
        op.create_index(op.f(f'ix_{table_name}_{column}'), table_name, [column])


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        'parties',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.String(), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('party_type', _enum('partytype'), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('village', sa.String(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('status', _enum('partystatus'), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_parties_id'), 'parties', ['id'])
    op.create_index(op.f('ix_parties_tenant_id'), 'parties', ['tenant_id'])

    op.create_table(
        'loadings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('source', _enum('loadingsource'), nullable=False),
        sa.Column('bill_no', sa.String(), nullable=False),
        sa.Column('party_id', sa.Integer(), sa.ForeignKey('parties.id'), nullable=True),
        sa.Column('party_name', sa.String(), nullable=False),
        sa.Column('village', sa.String(), nullable=True),
        sa.Column('fish_code', sa.String(), nullable=True),
        sa.Column('loading_date', sa.Date(), nullable=False),
        sa.Column('vehicle_id', sa.String(), nullable=True),
        sa.Column('vehicle_no', sa.String(), nullable=True),
        sa.Column('total_trays', sa.Integer(), nullable=False),
        sa.Column('total_loose_kgs', sa.Numeric(12, 3), nullable=False),
        sa.Column('total_tray_kgs', sa.Numeric(12, 3), nullable=False),
        sa.Column('total_kgs', sa.Numeric(12, 3), nullable=False),
        sa.Column('total_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('dispatch_charges_total', sa.Numeric(12, 2), nullable=False),
        sa.Column('packing_amount_total', sa.Numeric(12, 2), nullable=False),
        sa.Column('grand_total', sa.Numeric(12, 2), nullable=False),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'source', 'bill_no', name='_tenant_source_bill_no_uc'),
    )
    for column in ('id', 'source', 'bill_no', 'party_id', 'loading_date', 'tenant_id'):
        op.create_index(op.f(f'ix_loadings_{column}'), 'loadings', [column])

    op.create_table(
        'loading_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('loading_id', sa.Integer(), sa.ForeignKey('loadings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('variety_code', sa.String(), nullable=False),
        sa.Column('no_trays', sa.Integer(), nullable=False),
        sa.Column('tray_kgs', sa.Numeric(12, 3), nullable=False),
        sa.Column('loose', sa.Numeric(12, 3), nullable=False),
        sa.Column('total_kgs', sa.Numeric(12, 3), nullable=False),
        sa.Column('price_per_kg', sa.Numeric(12, 4), nullable=False),
        sa.Column('total_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('id', 'loading_id', 'variety_code', 'tenant_id'):
        op.create_index(op.f(f'ix_loading_items_{column}'), 'loading_items', [column])

    op.create_table(
        'dispatch_charges',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('source_record_id', sa.Integer(), sa.ForeignKey('loadings.id', ondelete='SET NULL'), nullable=True),
        sa.Column('type', _enum('dispatchchargetype'), nullable=False),
        sa.Column('label', sa.String(), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('id', 'source_record_id', 'tenant_id'):
        op.create_index(op.f(f'ix_dispatch_charges_{column}'), 'dispatch_charges', [column])

    op.create_table(
        'packing_amounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('source_record_id', sa.Integer(), sa.ForeignKey('loadings.id', ondelete='SET NULL'), nullable=True),
        sa.Column('ice_blocks', sa.Integer(), nullable=True),
        sa.Column('price_per_block', sa.Numeric(12, 2), nullable=True),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_mode', _enum('paymentmode'), nullable=False),
        sa.Column('reference', sa.String(), nullable=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('id', 'source_record_id', 'tenant_id'):
        op.create_index(op.f(f'ix_packing_amounts_{column}'), 'packing_amounts', [column])

    _payment_table('client_payments', 'client_id')
    _payment_table(
        'vendor_payments',
        'vendor_id',
        sa.Column('account_number', sa.String(), nullable=True),
        sa.Column('ifsc', sa.String(length=11), nullable=True),
        sa.Column('bank_name', sa.String(), nullable=True),
        sa.Column('bank_address', sa.Text(), nullable=True),
        sa.Column('payment_details', sa.Text(), nullable=True),
        sa.Column('installments', sa.Integer(), nullable=True),
        sa.Column('installment_number', sa.Integer(), nullable=True),
    )
    _invoice_table('client_invoices', 'client_payments', '_tenant_client_invoice_no_uc')
    _invoice_table('vendor_invoices', 'vendor_payments', '_tenant_vendor_invoice_no_uc')

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('table_name', sa.String(), nullable=False),
        sa.Column('record_id', sa.Integer(), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('changed_by', sa.String(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_audit_log_id'), 'audit_log', ['id'])
    op.create_index(op.f('ix_audit_log_tenant_id'), 'audit_log', ['tenant_id'])


def downgrade() -> None:
    for table_name in (
        'audit_log',
        'vendor_invoices',
        'client_invoices',
        'vendor_payments',
        'client_payments',
        'packing_amounts',
        'dispatch_charges',
        'loading_items',
        'loadings',
        'parties',
    ):
        op.drop_table(table_name)
    bind = op.get_bind()
    for name in reversed(list(ENUMS)):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
