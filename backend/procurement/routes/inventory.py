from __future__ import annotations
from flask import Blueprint, request
from sqlalchemy import select
from procurement import get_db
from procurement.models.inventory_item import InventoryItem, StockMovement
from procurement.decorators.auth import require_permissions
from procurement.services.policy import request_company_id
from procurement.services.reporting import envelope
from procurement.utils.filters import apply_filters
from procurement.utils.listing import paginated_payload
from procurement.utils.validation import sanitize_search, validate_id

inv_bp = Blueprint('inventory', __name__)


@inv_bp.get('/items')
@require_permissions('INV.READ')
def list_items():
    session = get_db()
    company_id = request_company_id(request.args.get('company_id'))
    stmt = select(InventoryItem).where(InventoryItem.company_id == company_id)
    # Optional filters
    filter_specs = {
        'item_code': {'op': lambda st, v: st.where(InventoryItem.item_code == v)},
        'category': {'op': lambda st, v: st.where(InventoryItem.category == v)},
        'search': {'coerce': sanitize_search, 'op': lambda st, v: st.where(InventoryItem.item_name.ilike(f'%{v}%', escape='\\')) if v else st},
    }
    stmt = apply_filters(stmt, filter_specs, request.args)
    stmt = stmt.order_by(InventoryItem.item_code.asc(), InventoryItem.id.asc())
    page = paginated_payload(session, stmt, _item_json, request.args.get('page'), request.args.get('limit'))
    return envelope(page, 'Inventory items retrieved successfully')


@inv_bp.get('/items/<item_id>/movements')
@require_permissions('INV.READ')
def list_movements(item_id: str):
    session = get_db()
    company_id = request_company_id(request.args.get('company_id'))
    stmt = (
        select(StockMovement)
        .join(InventoryItem, InventoryItem.id == StockMovement.item_id)
        .where(InventoryItem.company_id == company_id, StockMovement.item_id == validate_id(item_id, 'item_id'))
        .order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
    )
    page = paginated_payload(session, stmt, _movement_json, request.args.get('page'), request.args.get('limit'))
    return envelope(page, 'Stock movements retrieved successfully')


def _item_json(i: InventoryItem):
    return {
        'id': i.id,
        'company_id': i.company_id,
        'item_code': i.item_code,
        'item_name': i.item_name,
        'category': i.category,
        'unit': i.unit,
        'current_stock': i.current_stock,
        'average_cost': i.average_cost,
    }


def _movement_json(m: StockMovement):
    return {
        'id': m.id,
        'item_id': m.item_id,
        'warehouse_id': m.warehouse_id,
        'quantity': m.quantity,
        'direction': m.direction,
        'reference': m.reference,
        'note': m.note,
        'created_by': m.created_by,
        'created_at': m.created_at.isoformat() if m.created_at else None,
    }
