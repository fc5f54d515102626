from __future__ import annotations
"""Purchase order mutations and per-tenant lookups.

Every call is scoped by an already resolved ``company_id``; ids that do not
resolve inside that tenant raise ``NotFound``. Nothing here commits except the
public mutation methods, once, at the end.
"""
import logging
import secrets
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from procurement.errors import InvalidArgument, NoOp, NotFound
from procurement.models.purchase_order import PurchaseOrder, PurchaseOrderItem
from procurement.models.supplier import Supplier
from procurement.services.inventory import InventoryService
from procurement.services.order_query import PurchaseFilters, build_order_query
from procurement.services.order_totals import CHARGE_FIELDS, compute_amounts, normalize_items
from procurement.utils.fsm import TransitionValidator
from procurement.utils.listing import paginated_payload
from procurement.utils.validation import parse_date, require_number, validate_id, validate_status

logger = logging.getLogger(__name__)

# Finite state machine for PurchaseOrder transitions
PO_FSM = TransitionValidator({
    PurchaseOrder.STATUS_DRAFT: {PurchaseOrder.STATUS_PENDING_APPROVAL, PurchaseOrder.STATUS_CANCELLED},
    PurchaseOrder.STATUS_PENDING_APPROVAL: {PurchaseOrder.STATUS_SENT, PurchaseOrder.STATUS_CANCELLED},
    PurchaseOrder.STATUS_SENT: {PurchaseOrder.STATUS_ACKNOWLEDGED, PurchaseOrder.STATUS_CANCELLED},
    PurchaseOrder.STATUS_ACKNOWLEDGED: {PurchaseOrder.STATUS_RECEIVED, PurchaseOrder.STATUS_CANCELLED},
    PurchaseOrder.STATUS_RECEIVED: set(),
    PurchaseOrder.STATUS_CANCELLED: set(),
})

UPDATABLE_FIELDS = (
    'status', 'notes', 'expected_delivery_date', 'supplier_id', 'items',
    'discount', 'freight_charges', 'packing_charges', 'other_charges',
)
BULK_UPDATABLE_FIELDS = ('status', 'payment_status', 'notes', 'expected_delivery_date')
AMOUNT_FIELDS = ('items', 'discount') + CHARGE_FIELDS


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def order_json(po: PurchaseOrder) -> Dict[str, Any]:
    return {
        'id': po.id,
        'company_id': po.company_id,
        'order_number': po.order_number,
        'supplier_id': po.supplier_id,
        'supplier_name': po.supplier_name,
        'supplier_category': po.supplier_category,
        'status': po.status,
        'payment_status': po.payment_status,
        'last_payment_amount': po.last_payment_amount,
        'last_payment_date': _iso(po.last_payment_date),
        'notes': po.notes,
        'expected_delivery_date': _iso(po.expected_delivery_date),
        'items': [
            {
                'item_code': it.item_code,
                'item_name': it.item_name,
                'category': it.category,
                'unit': it.unit,
                'quantity': it.quantity,
                'rate': it.rate,
                'tax_rate': it.tax_rate,
                'line_total': it.line_total,
                'received_quantity': it.received_quantity,
            }
            for it in po.items
        ],
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
        'order_date': _iso(po.order_date),
        'created_by': po.created_by,
        'updated_by': po.updated_by,
        'created_at': _iso(po.created_at),
        'updated_at': _iso(po.updated_at),
    }


def _optional_str(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgument(f'{field_name} must be a string')
    return value


def _check_keys(changes: Any, allowed) -> Dict[str, Any]:
    if not isinstance(changes, dict) or not changes:
        raise InvalidArgument('No updatable fields', detail=f"allowed fields: {', '.join(allowed)}")
    unknown = sorted(set(changes) - set(allowed))
    if unknown:
        raise InvalidArgument(f"Unknown fields: {', '.join(unknown)}", detail=f"allowed fields: {', '.join(allowed)}")
    return changes


class PurchaseOrderService:
    def __init__(self, session: Session, inventory: Optional[InventoryService] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.session = session
        self.inventory = inventory or InventoryService(session)
        self.clock = clock or datetime.now

    # --- lookups ------------------------------------------------------------

    def _load(self, company_id: int, order_id: Any) -> PurchaseOrder:
        oid = validate_id(order_id, 'order_id')
        po = self.session.execute(
            select(PurchaseOrder)
            .where(PurchaseOrder.id == oid, PurchaseOrder.company_id == company_id)
            .options(selectinload(PurchaseOrder.items))
        ).scalar_one_or_none()
        if po is None:
            raise NotFound(f'Purchase order not found: {order_id}')
        return po

    def _supplier(self, company_id: int, supplier_id: Any) -> Supplier:
        if supplier_id in (None, ''):
            raise InvalidArgument('supplier_id required')
        sid = validate_id(supplier_id, 'supplier_id')
        sup = self.session.execute(
            select(Supplier).where(Supplier.id == sid, Supplier.company_id == company_id)
        ).scalar_one_or_none()
        if sup is None:
            raise InvalidArgument(f'Unknown supplier: {supplier_id}')
        if sup.status != Supplier.STATUS_ACTIVE:
            raise InvalidArgument(f'Supplier {sup.name} is inactive')
        return sup

    def get_purchase_order(self, company_id: int, order_id: Any) -> PurchaseOrder:
        return self._load(company_id, order_id)

    def list_orders(self, filters: PurchaseFilters, page=None, limit=None):
        return paginated_payload(self.session, build_order_query(filters), order_json, page, limit)

    def get_orders_by_status(self, company_id: int, status: str, page=None, limit=None):
        validate_status(status, PurchaseOrder.ALL_STATUSES)
        return self.list_orders(PurchaseFilters(company_id=company_id, status=status), page, limit)

    def get_orders_by_supplier(self, company_id: int, supplier_id: Any, page=None, limit=None):
        sid = validate_id(supplier_id, 'supplier_id')
        return self.list_orders(PurchaseFilters(company_id=company_id, supplier_id=sid), page, limit)

    # --- mutations ----------------------------------------------------------

    def _next_order_number(self) -> str:
        millis = int(self.clock().timestamp() * 1000)
        return f'PO-{millis}-{secrets.token_hex(4)}'

    def _apply_supplier(self, po: PurchaseOrder, sup: Supplier):
        po.supplier_id = sup.id
        po.supplier_name = sup.name
        po.supplier_category = sup.category

    def _apply_items(self, po: PurchaseOrder, items: List[Dict[str, Any]]):
        po.items.clear()
        for row in items:
            po.items.append(PurchaseOrderItem(**row))

    def _apply_amounts(self, po: PurchaseOrder, items: List[Dict[str, Any]], inputs: Mapping[str, Any]):
        amounts = compute_amounts(
            items,
            discount=inputs.get('discount', po.total_discount or 0.0),
            freight_charges=inputs.get('freight_charges', po.freight_charges or 0.0),
            packing_charges=inputs.get('packing_charges', po.packing_charges or 0.0),
            other_charges=inputs.get('other_charges', po.other_charges or 0.0),
        )
        for key, value in amounts.items():
            setattr(po, key, value)

    def create_purchase_order(self, company_id: int, payload: Mapping[str, Any], actor_id: int) -> PurchaseOrder:
        if not isinstance(payload, Mapping):
            raise InvalidArgument('JSON object body required')
        sup = self._supplier(company_id, payload.get('supplier_id'))
        items = normalize_items(payload.get('items'))
        now = self.clock()
        po = PurchaseOrder(
            company_id=company_id,
            order_number=self._next_order_number(),
            status=PurchaseOrder.STATUS_DRAFT,
            payment_status=PurchaseOrder.PAYMENT_PENDING,
            notes=_optional_str(payload.get('notes'), 'notes'),
            expected_delivery_date=parse_date(payload.get('expected_delivery_date'), 'expected_delivery_date'),
            order_date=now,
            created_at=now,
            updated_at=now,
            created_by=actor_id,
            updated_by=actor_id,
        )
        self._apply_supplier(po, sup)
        self._apply_amounts(po, items, payload)
        self._apply_items(po, items)
        self.session.add(po)
        self.session.commit()
        logger.info('purchase order created id=%s number=%s company=%s grand_total=%s',
                    po.id, po.order_number, company_id, po.grand_total)
        return po

    def _set_status(self, po: PurchaseOrder, target: str, actor_id: int) -> bool:
        validate_status(target, PurchaseOrder.ALL_STATUSES)
        if target == po.status:
            return False
        PO_FSM.assert_can_transition(po.status, target)
        po.status = target
        if target == PurchaseOrder.STATUS_RECEIVED:
            self._receive_into_inventory(po, actor_id)
        return True

    def _receive_into_inventory(self, po: PurchaseOrder, actor_id: int):
        for item in po.items:
            code = item.item_code or f'{po.order_number}-{item.position + 1}'
            inv = self.inventory.find_one({'company_id': po.company_id, 'item_code': code})
            if inv is None:
                inv = self.inventory.create_inventory_item({
                    'company_id': po.company_id,
                    'item_code': code,
                    'item_name': item.item_name,
                    'category': item.category,
                    'unit': item.unit,
                }, actor_id)
            self.inventory.update_stock(
                inv.id, None, item.quantity, 'in', po.order_number,
                f'Received against {po.order_number}', actor_id, unit_cost=item.rate,
            )
            item.received_quantity = item.quantity
        logger.info('purchase order received id=%s items=%s', po.id, len(po.items))

    def update_purchase_order(self, company_id: int, order_id: Any, changes: Any, actor_id: int) -> PurchaseOrder:
        changes = _check_keys(changes, UPDATABLE_FIELDS)
        po = self._load(company_id, order_id)
        touches_amounts = any(k in changes for k in AMOUNT_FIELDS)
        if touches_amounts and po.status in PurchaseOrder.TERMINAL_STATUSES:
            raise InvalidArgument(f'Cannot change items or charges of a {po.status} order')
        if 'supplier_id' in changes:
            self._apply_supplier(po, self._supplier(company_id, changes['supplier_id']))
        if 'notes' in changes:
            po.notes = _optional_str(changes['notes'], 'notes')
        if 'expected_delivery_date' in changes:
            po.expected_delivery_date = parse_date(changes['expected_delivery_date'], 'expected_delivery_date')
        if touches_amounts:
            if 'items' in changes:
                items = normalize_items(changes['items'])
            else:
                items = [
                    {'line_total': it.line_total, 'tax_rate': it.tax_rate} for it in po.items
                ]
            self._apply_amounts(po, items, changes)
            if 'items' in changes:
                self._apply_items(po, items)
        # status last so a received transition materializes the final items
        if 'status' in changes:
            self._set_status(po, changes['status'], actor_id)
        po.updated_by = actor_id
        po.updated_at = self.clock()
        self.session.commit()
        logger.info('purchase order updated id=%s fields=%s', po.id, ','.join(sorted(changes)))
        return po

    def delete_purchase_order(self, company_id: int, order_id: Any) -> PurchaseOrder:
        po = self._load(company_id, order_id)
        self.session.delete(po)
        self.session.commit()
        logger.info('purchase order deleted id=%s number=%s company=%s', po.id, po.order_number, company_id)
        return po

    def update_payment_status(self, company_id: int, order_id: Any, payment_status: Any, amount: Any,
                              actor_id: int) -> PurchaseOrder:
        validate_status(payment_status, PurchaseOrder.ALL_PAYMENT_STATUSES, 'payment_status')
        amount = require_number(amount, 'amount')
        po = self._load(company_id, order_id)
        now = self.clock()
        po.payment_status = payment_status
        po.last_payment_amount = amount
        po.last_payment_date = now
        po.updated_by = actor_id
        po.updated_at = now
        self.session.commit()
        logger.info('payment status id=%s status=%s amount=%s', po.id, payment_status, amount)
        return po

    def bulk_update_orders(self, company_id: int, order_ids: Any, updates: Any, actor_id: int) -> List[PurchaseOrder]:
        """Apply the same partial update to every listed order of the tenant.

        All matched orders are validated before any is modified. Ids outside
        the tenant are skipped. Raises NoOp when nothing would change.
        """
        if not isinstance(order_ids, list) or not order_ids:
            raise InvalidArgument('order_ids required', detail='order_ids must be a non-empty list')
        ids = sorted({validate_id(v, 'order_id') for v in order_ids})
        updates = _check_keys(updates, BULK_UPDATABLE_FIELDS)
        status = updates.get('status')
        if 'status' in updates:
            validate_status(status, PurchaseOrder.ALL_STATUSES)
        if 'payment_status' in updates:
            validate_status(updates['payment_status'], PurchaseOrder.ALL_PAYMENT_STATUSES, 'payment_status')
        values: Dict[str, Any] = {}
        if 'payment_status' in updates:
            values['payment_status'] = updates['payment_status']
        if 'notes' in updates:
            values['notes'] = _optional_str(updates['notes'], 'notes')
        if 'expected_delivery_date' in updates:
            values['expected_delivery_date'] = parse_date(updates['expected_delivery_date'], 'expected_delivery_date')

        orders = self.session.execute(
            select(PurchaseOrder)
            .where(PurchaseOrder.company_id == company_id, PurchaseOrder.id.in_(ids))
            .options(selectinload(PurchaseOrder.items))
            .order_by(PurchaseOrder.id)
        ).scalars().all()
        for po in orders:
            if status is not None and status != po.status:
                PO_FSM.assert_can_transition(po.status, status)

        modified = []
        now = self.clock()
        for po in orders:
            changed = False
            for key, value in values.items():
                if getattr(po, key) != value:
                    setattr(po, key, value)
                    changed = True
            if status is not None and self._set_status(po, status, actor_id):
                changed = True
            if changed:
                po.updated_by = actor_id
                po.updated_at = now
                modified.append(po)
        if not modified:
            self.session.rollback()
            raise NoOp('No orders were updated', detail=f'{len(orders)} of {len(ids)} orders matched, none changed')
        self.session.commit()
        logger.info('bulk update company=%s matched=%s modified=%s', company_id, len(orders), len(modified))
        return orders


__all__ = [
    'PurchaseOrderService', 'order_json', 'PO_FSM', 'UPDATABLE_FIELDS', 'BULK_UPDATABLE_FIELDS',
]
