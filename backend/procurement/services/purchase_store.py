from __future__ import annotations
"""Read side of the purchase order store.

Orders are loaded as plain documents so aggregation pipelines can be evaluated
the same way over database rows and over test fixtures.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from procurement.errors import InvalidArgument
from procurement.models.purchase_order import PurchaseOrder
from procurement.models.supplier import Supplier
from procurement.utils.pipeline import Match, run_pipeline, split_match

logger = logging.getLogger(__name__)


def order_document(po: PurchaseOrder, supplier: Optional[Supplier] = None) -> Dict[str, Any]:
    """Document view of an order; the live supplier row wins over denormalized fields."""
    return {
        '_id': po.id,
        'company_id': po.company_id,
        'order_number': po.order_number,
        'status': po.status,
        'payment_status': po.payment_status,
        'created_at': po.created_at,
        'supplier': {
            'id': po.supplier_id,
            'name': (supplier.name if supplier is not None else None) or po.supplier_name,
            'category': (supplier.category if supplier is not None else None) or po.supplier_category,
        },
        'amounts': {
            'subtotal': po.subtotal,
            'total_discount': po.total_discount,
            'taxable_amount': po.taxable_amount,
            'total_tax_amount': po.total_tax_amount,
            'freight_charges': po.freight_charges,
            'packing_charges': po.packing_charges,
            'other_charges': po.other_charges,
            'rounding_adjustment': po.rounding_adjustment,
            'grand_total': po.grand_total,
        },
        'items': [
            {
                'item_code': it.item_code,
                'item_name': it.item_name,
                'category': it.category,
                'quantity': it.quantity,
                'rate': it.rate,
                'line_total': it.line_total,
            }
            for it in po.items
        ],
    }


class PurchaseOrderStore:
    def __init__(self, session: Session):
        self.session = session

    def fetch(self, match: Match) -> List[Dict[str, Any]]:
        stmt = (
            select(PurchaseOrder, Supplier)
            .outerjoin(Supplier, Supplier.id == PurchaseOrder.supplier_id)
            .where(PurchaseOrder.company_id == match.company_id)
            .options(selectinload(PurchaseOrder.items))
            .order_by(PurchaseOrder.created_at.asc(), PurchaseOrder.id.asc())
        )
        if match.created_from is not None:
            stmt = stmt.where(PurchaseOrder.created_at >= match.created_from)
        if match.created_to is not None:
            stmt = stmt.where(PurchaseOrder.created_at <= match.created_to)
        if match.statuses is not None:
            stmt = stmt.where(PurchaseOrder.status.in_(match.statuses))
        return [order_document(po, sup) for po, sup in self.session.execute(stmt).all()]

    def aggregate(self, stages: Iterable) -> List[Dict[str, Any]]:
        match, stages = split_match(stages)
        if match is None:
            raise InvalidArgument('company_id required')
        docs = self.fetch(match)
        logger.debug('aggregate company=%s docs=%s stages=%s', match.company_id, len(docs), len(stages))
        return run_pipeline(docs, stages)
