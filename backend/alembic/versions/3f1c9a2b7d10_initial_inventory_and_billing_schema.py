"""initial inventory and billing schema

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-19 10:12:41.512305

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STOCK_CATEGORY = ('Medicine', 'Equipment', 'Consumables', 'Surgical', 'Other')
PAYMENT_METHOD = ('Cash', 'Card', 'UPI', 'Net Banking')
PAYMENT_STATUS = ('Paid', 'Pending', 'Partial')


def _enum(name, values):
    # Types are created once up front; columns only reference them
    return postgresql.ENUM(*values, name=name, create_type=False)


def _audit_columns():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in (('stockcategory', STOCK_CATEGORY), ('paymentmethod', PAYMENT_METHOD), ('paymentstatus', PAYMENT_STATUS)):
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        'stock_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('category', _enum('stockcategory', STOCK_CATEGORY), nullable=False),
        sa.Column('manufacturer', sa.String(), nullable=False),
        sa.Column('batch_number', sa.String(), nullable=False),
        sa.Column('units_per_pack', sa.Integer(), nullable=False),
        sa.Column('packs_per_carton', sa.Integer(), nullable=False),
        sa.Column('quantity_in_cartons', sa.Integer(), nullable=False),
        sa.Column('pack_cost_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('pack_selling_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('manufacturing_date', sa.Date(), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=False),
        sa.Column('reorder_level', sa.Integer(), nullable=False),
        sa.Column('location', sa.String(), nullable=False),
        *_audit_columns(),
        sa.CheckConstraint('quantity_in_cartons >= 0', name='ck_stock_items_quantity_non_negative'),
        sa.CheckConstraint('units_per_pack >= 1', name='ck_stock_items_units_per_pack'),
        sa.CheckConstraint('packs_per_carton >= 1', name='ck_stock_items_packs_per_carton'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_stock_items_id'), 'stock_items', ['id'], unique=False)
    op.create_index(op.f('ix_stock_items_name'), 'stock_items', ['name'], unique=False)

    op.create_table(
        'stock_item_audit',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('stock_item_id', sa.Integer(), nullable=False),
        sa.Column('change_type', sa.String(), nullable=False),
        sa.Column('change_amount', sa.Integer(), nullable=False),
        sa.Column('old_quantity', sa.Integer(), nullable=False),
        sa.Column('new_quantity', sa.Integer(), nullable=False),
        sa.Column('changed_by', sa.String(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=True),
        sa.Column('note', sa.String(), nullable=True),
        sa.ForeignKeyConstraint(['stock_item_id'], ['stock_items.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_stock_item_audit_id'), 'stock_item_audit', ['id'], unique=False)
    op.create_index(op.f('ix_stock_item_audit_stock_item_id'), 'stock_item_audit', ['stock_item_id'], unique=False)

    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_number', sa.String(), nullable=False),
        sa.Column('customer_name', sa.String(), nullable=False),
        sa.Column('customer_phone', sa.String(), nullable=False),
        sa.Column('customer_address', sa.Text(), nullable=True),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False),
        sa.Column('gst', sa.Numeric(12, 2), nullable=False),
        sa.Column('discount', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_method', _enum('paymentmethod', PAYMENT_METHOD), nullable=False),
        sa.Column('payment_status', _enum('paymentstatus', PAYMENT_STATUS), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_invoices_id'), 'invoices', ['id'], unique=False)
    op.create_index(op.f('ix_invoices_invoice_number'), 'invoices', ['invoice_number'], unique=True)
    op.create_index(op.f('ix_invoices_customer_phone'), 'invoices', ['customer_phone'], unique=False)

    op.create_table(
        'invoice_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('stock_item_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('packaging', sa.String(), nullable=False),
        sa.Column('cartons_ordered', sa.Integer(), nullable=False),
        sa.Column('packs_per_carton', sa.Integer(), nullable=False),
        sa.Column('pack_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('line_total', sa.Numeric(12, 2), nullable=False),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id']),
        sa.ForeignKeyConstraint(['stock_item_id'], ['stock_items.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_invoice_items_id'), 'invoice_items', ['id'], unique=False)
    op.create_index(op.f('ix_invoice_items_invoice_id'), 'invoice_items', ['invoice_id'], unique=False)
    op.create_index(op.f('ix_invoice_items_stock_item_id'), 'invoice_items', ['stock_item_id'], unique=False)

    op.create_table(
        'customer_payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_phone', sa.String(), nullable=False),
        sa.Column('customer_name', sa.String(), nullable=False),
        sa.Column('amount_paid', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_method', _enum('paymentmethod', PAYMENT_METHOD), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        *_audit_columns(),
        sa.CheckConstraint('amount_paid > 0', name='ck_customer_payments_amount_positive'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_customer_payments_id'), 'customer_payments', ['id'], unique=False)
    op.create_index(op.f('ix_customer_payments_customer_phone'), 'customer_payments', ['customer_phone'], unique=False)

    op.create_table(
        'app_config',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('value', sa.String(length=255), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_app_config_id'), 'app_config', ['id'], unique=False)
    op.create_index(op.f('ix_app_config_name'), 'app_config', ['name'], unique=True)

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
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_audit_log_id'), 'audit_log', ['id'], unique=False)

    op.create_table(
        'number_series',
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('last_value', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('name'),
    )


def downgrade() -> None:
    op.drop_table('number_series')
    op.drop_index(op.f('ix_audit_log_id'), table_name='audit_log')
    op.drop_table('audit_log')
    op.drop_index(op.f('ix_app_config_name'), table_name='app_config')
    op.drop_index(op.f('ix_app_config_id'), table_name='app_config')
    op.drop_table('app_config')
    op.drop_index(op.f('ix_customer_payments_customer_phone'), table_name='customer_payments')
    op.drop_index(op.f('ix_customer_payments_id'), table_name='customer_payments')
    op.drop_table('customer_payments')
    op.drop_index(op.f('ix_invoice_items_stock_item_id'), table_name='invoice_items')
    op.drop_index(op.f('ix_invoice_items_invoice_id'), table_name='invoice_items')
    op.drop_index(op.f('ix_invoice_items_id'), table_name='invoice_items')
    op.drop_table('invoice_items')
    op.drop_index(op.f('ix_invoices_customer_phone'), table_name='invoices')
    op.drop_index(op.f('ix_invoices_invoice_number'), table_name='invoices')
    op.drop_index(op.f('ix_invoices_id'), table_name='invoices')
    op.drop_table('invoices')
    op.drop_index(op.f('ix_stock_item_audit_stock_item_id'), table_name='stock_item_audit')
    op.drop_index(op.f('ix_stock_item_audit_id'), table_name='stock_item_audit')
    op.drop_table('stock_item_audit')
    op.drop_index(op.f('ix_stock_items_name'), table_name='stock_items')
    op.drop_index(op.f('ix_stock_items_id'), table_name='stock_items')
    op.drop_table('stock_items')

    bind = op.get_bind()
    for name in ('paymentstatus', 'paymentmethod', 'stockcategory'):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
