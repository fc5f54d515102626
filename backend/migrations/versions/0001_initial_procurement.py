"""initial procurement schema

Revision ID: 0001_initial_procurement
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_procurement'
down_revision = None
branch_labels = None
depends_on = None


def _updated_at():
    return sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'))


def upgrade():
    op.create_table('companies',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False, unique=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        _updated_at(),
    )

    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('email', sa.String(length=128), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False, server_default='viewer'),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        _updated_at(),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_company_id', 'users', ['company_id'])

    op.create_table('suppliers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=True),
        sa.Column('contact_email', sa.String(length=150), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='ACTIVE'),
        sa.Column('created_by', sa.Integer(), nullable=False),
        _updated_at(),
        sa.UniqueConstraint('company_id', 'name', name='uq_supplier_company_name'),
    )
    for col in ('company_id', 'name', 'category', 'status'):
        op.create_index(f'ix_suppliers_{col}', 'suppliers', [col])

    op.create_table('purchase_orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('order_number', sa.String(length=64), nullable=False),
        sa.Column('supplier_id', sa.Integer(), sa.ForeignKey('suppliers.id'), nullable=False),
        sa.Column('supplier_name', sa.String(length=150), nullable=False),
        sa.Column('supplier_category', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='draft'),
        sa.Column('payment_status', sa.String(length=32), nullable=False, server_default='pending'),
        sa.Column('last_payment_amount', sa.Float(), nullable=True),
        sa.Column('last_payment_date', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('expected_delivery_date', sa.DateTime(), nullable=True),
        sa.Column('subtotal', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_discount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('taxable_amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_tax_amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('freight_charges', sa.Float(), nullable=False, server_default='0'),
        sa.Column('packing_charges', sa.Float(), nullable=False, server_default='0'),
        sa.Column('other_charges', sa.Float(), nullable=False, server_default='0'),
        sa.Column('rounding_adjustment', sa.Float(), nullable=False, server_default='0'),
        sa.Column('grand_total', sa.Float(), nullable=False, server_default='0'),
        sa.Column('order_date', sa.DateTime(), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('company_id', 'order_number', name='uq_po_company_number'),
    )
    for col in ('company_id', 'order_number', 'supplier_id', 'supplier_name', 'status', 'payment_status',
                'grand_total', 'created_at'):
        op.create_index(f'ix_purchase_orders_{col}', 'purchase_orders', [col])

    op.create_table('purchase_order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('purchase_order_id', sa.Integer(), sa.ForeignKey('purchase_orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('item_code', sa.String(length=64), nullable=True),
        sa.Column('item_name', sa.String(length=150), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=True),
        sa.Column('unit', sa.String(length=16), nullable=True),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('rate', sa.Float(), nullable=False),
        sa.Column('tax_rate', sa.Float(), nullable=False, server_default='0'),
        sa.Column('line_total', sa.Float(), nullable=False),
        sa.Column('received_quantity', sa.Float(), nullable=False, server_default='0'),
    )
    for col in ('purchase_order_id', 'item_code', 'category'):
        op.create_index(f'ix_purchase_order_items_{col}', 'purchase_order_items', [col])

    op.create_table('inventory_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('item_code', sa.String(length=64), nullable=False),
        sa.Column('item_name', sa.String(length=150), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=True),
        sa.Column('unit', sa.String(length=16), nullable=True),
        sa.Column('current_stock', sa.Float(), nullable=False, server_default='0'),
        sa.Column('average_cost', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('company_id', 'item_code', name='uq_inventory_company_code'),
    )
    for col in ('company_id', 'item_code', 'item_name'):
        op.create_index(f'ix_inventory_items_{col}', 'inventory_items', [col])

    op.create_table('stock_movements',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('inventory_items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('warehouse_id', sa.String(length=64), nullable=True),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('direction', sa.String(length=8), nullable=False),
        sa.Column('reference', sa.String(length=128), nullable=True),
        sa.Column('note', sa.String(length=255), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_stock_movements_item_id', 'stock_movements', ['item_id'])

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), nullable=True),
        sa.Column('actor_user_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('entity', sa.String(length=64), nullable=True),
        sa.Column('entity_id', sa.String(length=64), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    for col in ('company_id', 'actor_user_id', 'action'):
        op.create_index(f'ix_audit_logs_{col}', 'audit_logs', [col])


def downgrade():
    for table in ('audit_logs', 'stock_movements', 'inventory_items', 'purchase_order_items',
                  'purchase_orders', 'suppliers', 'users', 'companies'):
        op.drop_table(table)
