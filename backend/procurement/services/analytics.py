from __future__ import annotations
"""Aggregation engine: purchase stats, period analytics and breakdown reports.

All entry points take an already resolved ``company_id``. Figures come from the
pipelines in ``analytics_queries`` evaluated through a ``PurchaseOrderStore``
(or anything with an ``aggregate(stages)`` method, e.g. a fixture store in tests).
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from procurement.errors import InvalidArgument
from procurement.services import analytics_queries as q
from procurement.utils.metrics import growth_series, money, percentage, safe_div

logger = logging.getLogger(__name__)

PERIOD_WEEK = 'week'
PERIOD_MONTH = 'month'
PERIOD_QUARTER = 'quarter'
PERIOD_YEAR = 'year'
PERIODS = (PERIOD_WEEK, PERIOD_MONTH, PERIOD_QUARTER, PERIOD_YEAR)
DEFAULT_PERIOD = PERIOD_MONTH
TOP_CATEGORIES = 5
TOP_SUPPLIERS = 10


def month_start(now: datetime) -> datetime:
    return datetime(now.year, now.month, 1)


def resolve_period_start(period: str, now: datetime) -> datetime:
    """Window start for an analytics period.

    week is a rolling seven days from now; month, quarter and year start at
    midnight on the first day of the current calendar block.
    """
    if period == PERIOD_WEEK:
        return now - timedelta(days=7)
    if period == PERIOD_MONTH:
        return month_start(now)
    if period == PERIOD_QUARTER:
        return datetime(now.year, ((now.month - 1) // 3) * 3 + 1, 1)
    if period == PERIOD_YEAR:
        return datetime(now.year, 1, 1)
    raise InvalidArgument(f'Invalid period: {period}', detail=f"period must be one of {', '.join(PERIODS)}")


def _category_rows(rows, total: float):
    return [
        {
            'category': r['_id'],
            'amount': money(r['amount']),
            'percentage': percentage(r['amount'], total),
        }
        for r in rows
    ]


class AnalyticsEngine:
    def __init__(self, store, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or datetime.now

    def get_purchase_stats(self, company_id: int):
        now = self.clock()
        totals = self.store.aggregate(q.order_totals(company_id))
        monthly = self.store.aggregate(q.spend_since(company_id, month_start(now)))
        categories = self.store.aggregate(q.category_spend(company_id))
        category_total = sum(r['amount'] for r in categories)
        head = totals[0] if totals else {}
        total_purchases = head.get('amount', 0.0)
        return {
            'total_purchases': money(total_purchases),
            'monthly_spend': money(monthly[0]['amount'] if monthly else 0.0),
            'total_suppliers': len(head.get('suppliers', [])),
            'pending_orders': head.get('pending_orders', 0),
            'total_orders': head.get('orders', 0),
            'average_order_value': money(head.get('average_order_value', 0.0)),
            'top_categories': _category_rows(categories[:TOP_CATEGORIES], category_total),
        }

    def get_purchase_analytics(self, company_id: int, period: Optional[str] = None):
        if period is None:
            period = DEFAULT_PERIOD
        start = resolve_period_start(period, self.clock())
        daily = self.store.aggregate(q.purchases_by_bucket(company_id, start, q.DAY_FORMAT))
        monthly = self.store.aggregate(q.purchases_by_bucket(company_id, start, q.MONTH_FORMAT))
        suppliers = self.store.aggregate(q.top_suppliers(company_id, start, TOP_SUPPLIERS))
        categories = self.store.aggregate(q.category_spend(company_id, created_from=start))
        category_total = sum(r['amount'] for r in categories)
        growth = growth_series([r['amount'] for r in daily])
        logger.debug('analytics company=%s period=%s start=%s buckets=%s', company_id, period, start, len(daily))
        return {
            'period': period,
            'start_date': start.isoformat(),
            'daily_purchases': [
                {'date': r['_id'], 'amount': money(r['amount']), 'orders': r['orders']} for r in daily
            ],
            'monthly_purchases': [
                {'month': r['_id'], 'amount': money(r['amount']), 'orders': r['orders']} for r in monthly
            ],
            'top_suppliers': [
                {
                    'supplier_id': r['_id'],
                    'supplier': r['supplier'] or q.UNKNOWN,
                    'amount': money(r['amount']),
                    'orders': r['orders'],
                }
                for r in suppliers
            ],
            'purchases_by_category': _category_rows(categories, category_total),
            'purchase_trends': [
                {'period': r['_id'], 'amount': money(r['amount']), 'growth': g} for r, g in zip(daily, growth)
            ],
        }

    def get_supplier_report(self, company_id: int, date_from: Optional[datetime] = None,
                            date_to: Optional[datetime] = None):
        rows = self.store.aggregate(q.supplier_report(company_id, date_from, date_to))
        out = []
        for r in rows:
            outstanding = r['outstanding_amount']
            last = r['last_order_date']
            out.append({
                'supplier_id': r['_id'],
                'supplier_name': r['supplier_name'] or q.UNKNOWN,
                'category': r['category'] or q.UNKNOWN,
                'total_purchases': money(r['total_purchases']),
                'total_orders': r['total_orders'],
                'average_order_value': money(r['average_order_value']),
                'last_order_date': last.isoformat() if last else None,
                'outstanding_amount': money(outstanding),
                'payment_status': 'delayed' if outstanding > 0 else 'good',
            })
        return out

    def get_category_spend(self, company_id: int, date_from: Optional[datetime] = None,
                           date_to: Optional[datetime] = None):
        rows = self.store.aggregate(q.category_spend(company_id, date_from, date_to))
        total = sum(r['amount'] for r in rows)
        return [
            {
                'category': r['_id'],
                'amount': money(r['amount']),
                'percentage': percentage(r['amount'], total),
                'orders': len(r['order_ids']),
            }
            for r in rows
        ]

    def get_item_report(self, company_id: int, date_from: Optional[datetime] = None,
                        date_to: Optional[datetime] = None):
        """Per-item purchase totals; average_rate is spend per unit bought."""
        rows = self.store.aggregate(q.item_report(company_id, date_from, date_to))
        out = []
        for r in rows:
            last = r['last_order_date']
            out.append({
                'item_name': r['_id'],
                'item_code': r['item_code'],
                'category': r['category'] or q.UNKNOWN,
                'total_quantity': r['total_quantity'],
                'total_amount': money(r['total_amount']),
                'average_rate': money(safe_div(r['total_amount'], r['total_quantity'])),
                'min_rate': money(r['min_rate'] or 0.0),
                'max_rate': money(r['max_rate'] or 0.0),
                'purchase_count': r['lines'],
                'order_count': len(r['order_ids']),
                'last_order_date': last.isoformat() if last else None,
            })
        return out

    def get_status_breakdown(self, company_id: int, date_from: Optional[datetime] = None,
                             date_to: Optional[datetime] = None):
        rows = self.store.aggregate(q.status_breakdown(company_id, date_from, date_to))
        return [{'status': r['_id'], 'count': r['count'], 'amount': money(r['amount'])} for r in rows]
