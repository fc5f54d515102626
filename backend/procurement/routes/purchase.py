from __future__ import annotations
from flask import Blueprint, request
from sqlalchemy import select
from procurement import get_db
from procurement.decorators.auth import require_permissions
from procurement.decorators.audit import audit_log
from procurement.errors import InvalidArgument
from procurement.models.purchase_order import PurchaseOrder
from procurement.services.analytics import AnalyticsEngine
from procurement.services.exports import export_purchase_data
from procurement.services.order_query import PurchaseFilters
from procurement.services.policy import current_actor_id, request_company_id
from procurement.services.purchase_orders import PurchaseOrderService, order_json
from procurement.services.purchase_store import PurchaseOrderStore
from procurement.services.reporting import ReportAssembler, envelope
from procurement.utils.validation import validate_id

purchase_bp = Blueprint('purchase', __name__)


def _body():
    data = request.json
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidArgument('JSON object body required')
    return data


def _company_id(body=None):
    requested = request.args.get('company_id')
    if requested in (None, '') and isinstance(body, dict):
        requested = body.get('company_id')
    return request_company_id(requested)


def _orders() -> PurchaseOrderService:
    return PurchaseOrderService(get_db())


def _reports() -> ReportAssembler:
    return ReportAssembler(AnalyticsEngine(PurchaseOrderStore(get_db())))


def _prefetch_po(order_id):
    """Pre-change snapshot for audit diffs; None when the id is not usable."""
    try:
        oid = validate_id(order_id, 'order_id')
        company_id = _company_id(request.get_json(silent=True))
    except InvalidArgument:
        return None
    po = get_db().execute(
        select(PurchaseOrder).where(PurchaseOrder.id == oid, PurchaseOrder.company_id == company_id)
    ).scalar_one_or_none()
    if po is None:
        return None
    return {'status': po.status, 'payment_status': po.payment_status, 'grand_total': po.grand_total}


@purchase_bp.get('/stats')
@require_permissions('RPT.READ')
def purchase_stats():
    return _reports().stats(_company_id())


@purchase_bp.get('/analytics')
@require_permissions('RPT.READ')
def purchase_analytics():
    return _reports().analytics(_company_id(), request.args.get('period'))


@purchase_bp.get('/orders')
@require_permissions('PO.READ')
def list_orders():
    filters = PurchaseFilters.from_args(_company_id(), request.args)
    page = _orders().list_orders(filters, request.args.get('page'), request.args.get('limit'))
    return envelope(page, 'Purchase orders retrieved successfully')


@purchase_bp.post('/orders')
@require_permissions('PO.CREATE')
@audit_log('PO.CREATE', entity='PurchaseOrder', entity_id_key='id', meta_builder=lambda data, rv, a, kw: {
               'order_number': data.get('order_number'),
               'grand_total': (data.get('amounts') or {}).get('grand_total'),
           })
def create_order():
    data = _body()
    po = _orders().create_purchase_order(_company_id(data), data, current_actor_id())
    return envelope(order_json(po), 'Purchase order created successfully'), 201


@purchase_bp.get('/orders/<order_id>')
@require_permissions('PO.READ')
def get_order(order_id: str):
    po = _orders().get_purchase_order(_company_id(), order_id)
    return envelope(order_json(po), 'Purchase order retrieved successfully')


@purchase_bp.put('/orders/<order_id>')
@require_permissions('PO.UPDATE')
@audit_log(
    'PO.UPDATE',
    entity='PurchaseOrder',
    entity_id_key='id',
    diff_keys=['status'],
    pre_fetch=lambda a, kw: _prefetch_po(kw.get('order_id')),
    meta_builder=lambda data, rv, a, kw: {
        'status': data.get('status'),
        'grand_total': (data.get('amounts') or {}).get('grand_total'),
    },
)
def update_order(order_id: str):
    data = _body()
    changes = {k: v for k, v in data.items() if k != 'company_id'}
    po = _orders().update_purchase_order(_company_id(data), order_id, changes, current_actor_id())
    return envelope(order_json(po), 'Purchase order updated successfully')


@purchase_bp.delete('/orders/<order_id>')
@require_permissions('PO.DELETE')
@audit_log('PO.DELETE', entity='PurchaseOrder', entity_id_key='id', meta_keys=['order_number'])
def delete_order(order_id: str):
    po = _orders().delete_purchase_order(_company_id(), order_id)
    return envelope({'id': po.id, 'company_id': po.company_id, 'order_number': po.order_number},
                    'Purchase order deleted successfully')


@purchase_bp.put('/orders/<order_id>/payment-status')
@require_permissions('PO.PAY')
@audit_log(
    'PO.PAYMENT',
    entity='PurchaseOrder',
    entity_id_key='id',
    diff_keys=['payment_status'],
    pre_fetch=lambda a, kw: _prefetch_po(kw.get('order_id')),
    meta_keys=['payment_status', 'last_payment_amount'],
)
def update_payment_status(order_id: str):
    data = _body()
    po = _orders().update_payment_status(
        _company_id(data), order_id, data.get('payment_status'), data.get('amount'), current_actor_id()
    )
    return envelope(order_json(po), 'Payment status updated successfully')


@purchase_bp.post('/orders/bulk-update')
@require_permissions('PO.UPDATE')
@audit_log('PO.BULK_UPDATE', entity='PurchaseOrder',
           meta_builder=lambda data, rv, a, kw: {'order_ids': [o['id'] for o in data.get('orders', [])],
                                                 'fields': data.get('fields', [])})
def bulk_update_orders():
    data = _body()
    updates = data.get('updates')
    company_id = _company_id(data)
    orders = _orders().bulk_update_orders(company_id, data.get('order_ids'), updates, current_actor_id())
    return envelope({
        'company_id': company_id,
        'fields': sorted(updates),
        'orders': [order_json(po) for po in orders],
    }, f'{len(orders)} purchase orders updated successfully')


@purchase_bp.get('/orders/status/<status>')
@require_permissions('PO.READ')
def orders_by_status(status: str):
    page = _orders().get_orders_by_status(_company_id(), status, request.args.get('page'), request.args.get('limit'))
    return envelope(page, 'Purchase orders retrieved successfully')


@purchase_bp.get('/orders/supplier/<supplier_id>')
@require_permissions('PO.READ')
def orders_by_supplier(supplier_id: str):
    page = _orders().get_orders_by_supplier(_company_id(), supplier_id, request.args.get('page'), request.args.get('limit'))
    return envelope(page, 'Purchase orders retrieved successfully')


@purchase_bp.post('/export/<fmt>')
@require_permissions('PO.EXPORT')
def export_orders(fmt: str):
    data = _body()
    filters = data.get('filters') or {}
    if not isinstance(filters, dict):
        raise InvalidArgument('filters must be an object')
    result = export_purchase_data(get_db(), _company_id(data), fmt, filters)
    return envelope(result, 'Data exported successfully')
