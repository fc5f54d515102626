from __future__ import annotations
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Float, Text, ForeignKey, DateTime, UniqueConstraint
from typing import Optional, List

from .authz import Base


class PurchaseOrder(Base):
    __tablename__ = 'purchase_orders'
    # Status constants
    STATUS_DRAFT = 'draft'
    STATUS_PENDING_APPROVAL = 'pending_approval'
    STATUS_SENT = 'sent'
    STATUS_ACKNOWLEDGED = 'acknowledged'
    STATUS_RECEIVED = 'received'
    STATUS_CANCELLED = 'cancelled'
    ALL_STATUSES = (
        STATUS_DRAFT,
        STATUS_PENDING_APPROVAL,
        STATUS_SENT,
        STATUS_ACKNOWLEDGED,
        STATUS_RECEIVED,
        STATUS_CANCELLED,
    )
    # Counted as "pending" by purchase stats
    PENDING_STATUSES = (STATUS_DRAFT, STATUS_PENDING_APPROVAL, STATUS_SENT, STATUS_ACKNOWLEDGED)
    TERMINAL_STATUSES = (STATUS_RECEIVED, STATUS_CANCELLED)

    # Payment status is tracked independently of the lifecycle status
    PAYMENT_PENDING = 'pending'
    PAYMENT_PARTIAL = 'partial'
    PAYMENT_PAID = 'paid'
    PAYMENT_DELAYED = 'delayed'
    ALL_PAYMENT_STATUSES = (PAYMENT_PENDING, PAYMENT_PARTIAL, PAYMENT_PAID, PAYMENT_DELAYED)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey('companies.id'), index=True, nullable=False)
    order_number: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    supplier_id: Mapped[int] = mapped_column(ForeignKey('suppliers.id'), index=True, nullable=False)
    supplier_name: Mapped[str] = mapped_column(String(150), nullable=False, index=True)
    supplier_category: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=STATUS_DRAFT, index=True)
    payment_status: Mapped[str] = mapped_column(String(32), nullable=False, default=PAYMENT_PENDING, index=True)
    last_payment_amount: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    last_payment_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    expected_delivery_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Monetary summary, always derived from items + adjustments (see services.order_totals)
    subtotal: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_discount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    taxable_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_tax_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    freight_charges: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    packing_charges: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    other_charges: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rounding_adjustment: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    grand_total: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, index=True)

    order_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    created_by: Mapped[int] = mapped_column(ForeignKey('users.id'), nullable=False)
    updated_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    items: Mapped[List['PurchaseOrderItem']] = relationship(
        'PurchaseOrderItem',
        back_populates='purchase_order',
        cascade='all, delete-orphan',
        order_by='PurchaseOrderItem.position',
    )
    supplier = relationship('Supplier')

    __table_args__ = (UniqueConstraint('company_id', 'order_number', name='uq_po_company_number'),)


class PurchaseOrderItem(Base):
    __tablename__ = 'purchase_order_items'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    purchase_order_id: Mapped[int] = mapped_column(ForeignKey('purchase_orders.id', ondelete='CASCADE'), index=True, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    item_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    item_name: Mapped[str] = mapped_column(String(150), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    unit: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    rate: Mapped[float] = mapped_column(Float, nullable=False)
    tax_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    line_total: Mapped[float] = mapped_column(Float, nullable=False)
    received_quantity: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    purchase_order = relationship('PurchaseOrder', back_populates='items')
