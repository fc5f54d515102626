from __future__ import annotations
"""Filter layer: request criteria -> validated, tenant scoped SQLAlchemy select."""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import selectinload

from procurement.models.purchase_order import PurchaseOrder, PurchaseOrderItem
from procurement.utils.filters import apply_filters
from procurement.utils.sorting import apply_multi_sort
from procurement.utils.validation import (
    parse_date_range, sanitize_search, validate_id, validate_status,
)

SORTABLE = {
    'created_at': PurchaseOrder.created_at,
    'grand_total': PurchaseOrder.grand_total,
    'order_number': PurchaseOrder.order_number,
    'status': PurchaseOrder.status,
    'id': PurchaseOrder.id,
}
DEFAULT_SORT = '-created_at'


@dataclass
class PurchaseFilters:
    company_id: int
    status: Optional[str] = None
    payment_status: Optional[str] = None
    supplier_id: Optional[int] = None
    category: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    search: Optional[str] = None
    sort: Optional[str] = None

    @classmethod
    def from_args(cls, company_id: int, args: Mapping[str, Any]) -> 'PurchaseFilters':
        """Validate raw query/body arguments. Empty strings count as absent."""
        def arg(name):
            value = args.get(name)
            return None if value in (None, '') else value

        date_from, date_to = parse_date_range(arg('date_from'), arg('date_to'))
        status = arg('status')
        payment_status = arg('payment_status')
        supplier_id = arg('supplier_id')
        category = arg('category')
        return cls(
            company_id=validate_id(company_id, 'company_id'),
            status=validate_status(status, PurchaseOrder.ALL_STATUSES) if status else None,
            payment_status=validate_status(payment_status, PurchaseOrder.ALL_PAYMENT_STATUSES, 'payment_status') if payment_status else None,
            supplier_id=validate_id(supplier_id, 'supplier_id') if supplier_id is not None else None,
            category=str(category).strip() if category is not None else None,
            date_from=date_from,
            date_to=date_to,
            search=sanitize_search(arg('search')),
            sort=arg('sort'),
        )


def _search(stmt, pattern: str):
    like = f'%{pattern}%'
    return stmt.where(or_(
        PurchaseOrder.order_number.ilike(like, escape='\\'),
        PurchaseOrder.supplier_name.ilike(like, escape='\\'),
        PurchaseOrder.notes.ilike(like, escape='\\'),
    ))


FILTER_SPECS = {
    'status': {'op': lambda st, v: st.where(PurchaseOrder.status == v)},
    'payment_status': {'op': lambda st, v: st.where(PurchaseOrder.payment_status == v)},
    'supplier_id': {'op': lambda st, v: st.where(PurchaseOrder.supplier_id == v)},
    'category': {'op': lambda st, v: st.where(PurchaseOrder.items.any(PurchaseOrderItem.category == v))},
    'date_from': {'op': lambda st, v: st.where(PurchaseOrder.created_at >= v)},
    'date_to': {'op': lambda st, v: st.where(PurchaseOrder.created_at <= v)},
    'search': {'op': _search},
}


def build_order_query(filters: PurchaseFilters):
    stmt = (
        select(PurchaseOrder)
        .where(PurchaseOrder.company_id == filters.company_id)
        .options(selectinload(PurchaseOrder.items))
    )
    stmt = apply_filters(stmt, FILTER_SPECS, vars(filters))
    return apply_multi_sort(stmt, filters.sort, SORTABLE, PurchaseOrder.id, default=DEFAULT_SORT)


__all__ = ['PurchaseFilters', 'build_order_query', 'SORTABLE', 'DEFAULT_SORT']
