from __future__ import annotations
"""Named pipeline builders, one per report shape.

Every builder starts with a ``Match`` on ``company_id`` so a pipeline can never
run unscoped. Amount sums read ``amounts.grand_total`` for orders and
``items.line_total`` for categories; nothing is recomputed here.
"""
from datetime import datetime
from typing import Optional

from procurement.models.purchase_order import PurchaseOrder
from procurement.utils.pipeline import (
    AddToSet, Avg, Count, DateBucket, FieldIn, First, Group, Limit, Match, Max, Min, Sort, Sum, Unwind,
)

UNKNOWN = 'Unknown'
ORDER_AMOUNT = 'amounts.grand_total'
LINE_AMOUNT = 'items.line_total'
DAY_FORMAT = '%Y-%m-%d'
MONTH_FORMAT = '%Y-%m'


def order_totals(company_id: int):
    return (
        Match(company_id=company_id),
        Group(None, (
            ('amount', Sum(ORDER_AMOUNT)),
            ('orders', Count()),
            ('average_order_value', Avg(ORDER_AMOUNT)),
            ('suppliers', AddToSet('supplier.id')),
            ('pending_orders', Count(when=FieldIn('status', PurchaseOrder.PENDING_STATUSES))),
        )),
    )


def spend_since(company_id: int, start: datetime):
    return (
        Match(company_id=company_id, created_from=start),
        Group(None, (('amount', Sum(ORDER_AMOUNT)), ('orders', Count()))),
    )


def category_spend(company_id: int, created_from: Optional[datetime] = None,
                   created_to: Optional[datetime] = None):
    return (
        Match(company_id=company_id, created_from=created_from, created_to=created_to),
        Unwind('items'),
        Group('items.category', (
            ('amount', Sum(LINE_AMOUNT)),
            ('order_ids', AddToSet('_id')),
        ), default_key=UNKNOWN),
        Sort(),
    )


def purchases_by_bucket(company_id: int, start: datetime, fmt: str = DAY_FORMAT):
    return (
        Match(company_id=company_id, created_from=start),
        Group(DateBucket('created_at', fmt), (('amount', Sum(ORDER_AMOUNT)), ('orders', Count()))),
        Sort((('_id', 1),)),
    )


def top_suppliers(company_id: int, start: Optional[datetime] = None, limit: int = 10):
    return (
        Match(company_id=company_id, created_from=start),
        Group('supplier.id', (
            ('amount', Sum(ORDER_AMOUNT)),
            ('orders', Count()),
            ('supplier', First('supplier.name')),
        )),
        Sort(),
        Limit(limit),
    )


def supplier_report(company_id: int, created_from: Optional[datetime] = None,
                    created_to: Optional[datetime] = None):
    return (
        Match(company_id=company_id, created_from=created_from, created_to=created_to),
        Group('supplier.id', (
            ('supplier_name', First('supplier.name')),
            ('category', First('supplier.category')),
            ('total_purchases', Sum(ORDER_AMOUNT)),
            ('total_orders', Count()),
            ('average_order_value', Avg(ORDER_AMOUNT)),
            ('last_order_date', Max('created_at')),
            ('outstanding_amount', Sum(ORDER_AMOUNT, when=FieldIn('status', (PurchaseOrder.STATUS_DRAFT,)))),
        )),
        Sort((('total_purchases', -1), ('_id', 1))),
    )


def item_report(company_id: int, created_from: Optional[datetime] = None,
                created_to: Optional[datetime] = None):
    """One row per item name: quantities, line spend, distinct orders and rate spread."""
    return (
        Match(company_id=company_id, created_from=created_from, created_to=created_to),
        Unwind('items'),
        Group('items.item_name', (
            ('item_code', First('items.item_code')),
            ('category', First('items.category')),
            ('total_quantity', Sum('items.quantity')),
            ('total_amount', Sum(LINE_AMOUNT)),
            ('lines', Count()),
            ('order_ids', AddToSet('_id')),
            ('min_rate', Min('items.rate')),
            ('max_rate', Max('items.rate')),
            ('last_order_date', Max('created_at')),
        ), default_key=UNKNOWN),
        Sort((('total_amount', -1), ('_id', 1))),
    )


def status_breakdown(company_id: int, created_from: Optional[datetime] = None,
                     created_to: Optional[datetime] = None):
    return (
        Match(company_id=company_id, created_from=created_from, created_to=created_to),
        Group('status', (('count', Count()), ('amount', Sum(ORDER_AMOUNT)))),
        Sort((('count', -1), ('_id', 1))),
    )


__all__ = [
    'order_totals', 'spend_since', 'category_spend', 'purchases_by_bucket', 'top_suppliers',
    'supplier_report', 'item_report', 'status_breakdown', 'UNKNOWN', 'DAY_FORMAT', 'MONTH_FORMAT',
]
