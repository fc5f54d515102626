from __future__ import annotations
from flask import Blueprint, request
from sqlalchemy import select
from procurement import get_db
from procurement.errors import InvalidArgument, NotFound
from procurement.models.supplier import Supplier
from procurement.decorators.auth import require_permissions
from procurement.decorators.audit import audit_log
from procurement.services.policy import current_actor_id, request_company_id
from procurement.services.reporting import envelope
from procurement.utils.filters import apply_filters
from procurement.utils.listing import paginated_payload
from procurement.utils.sorting import apply_multi_sort
from procurement.utils.validation import sanitize_search, validate_id, validate_status

suppliers_bp = Blueprint('suppliers', __name__)

EDITABLE_FIELDS = ('name', 'category', 'contact_email', 'phone')


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


def _load(company_id: int, supplier_id) -> Supplier:
    sid = validate_id(supplier_id, 'supplier_id')
    s = get_db().execute(
        select(Supplier).where(Supplier.id==sid, Supplier.company_id==company_id)
    ).scalar_one_or_none()
    if not s:
        raise NotFound(f'Supplier not found: {supplier_id}')
    return s


def _text(data, key, required=False):
    value = data.get(key)
    if value is None or value == '':
        if required:
            raise InvalidArgument(f'{key} required')
        return None
    if not isinstance(value, str):
        raise InvalidArgument(f'{key} must be a string')
    return value.strip()


def _assert_unique_name(company_id: int, name: str, exclude_id=None):
    stmt = select(Supplier).where(Supplier.company_id==company_id, Supplier.name==name)
    if exclude_id is not None:
        stmt = stmt.where(Supplier.id!=exclude_id)
    if get_db().execute(stmt).scalar_one_or_none():
        raise InvalidArgument('supplier name exists')


@suppliers_bp.get('/suppliers')
@require_permissions('SUP.READ')
def list_suppliers():
    company_id = _company_id()
    stmt = select(Supplier).where(Supplier.company_id==company_id)
    filter_specs = {
        'name': {'coerce': sanitize_search, 'op': lambda st, v: st.where(Supplier.name.ilike(f'%{v}%', escape='\\')) if v else st},
        'status': {'op': lambda st, v: st.where(Supplier.status==v), 'validate': lambda v: v in Supplier.ALL_STATUSES},
        'category': {'op': lambda st, v: st.where(Supplier.category==v)},
    }
    stmt = apply_filters(stmt, filter_specs, request.args)
    allowed = {
        'name': Supplier.name,
        'status': Supplier.status,
        'category': Supplier.category,
        'id': Supplier.id
    }
    stmt = apply_multi_sort(stmt, request.args.get('sort'), allowed, Supplier.id, default='name')
    page = paginated_payload(get_db(), stmt, _supplier_json, request.args.get('page'), request.args.get('limit'))
    return envelope(page, 'Suppliers retrieved successfully')


@suppliers_bp.post('/suppliers')
@require_permissions('SUP.MANAGE')
@audit_log('SUPPLIER.CREATE', entity='Supplier', entity_id_key='id', meta_keys=['name', 'category'])
def create_supplier():
    session = get_db()
    data = _body()
    company_id = _company_id(data)
    name = _text(data, 'name', required=True)
    _assert_unique_name(company_id, name)
    s = Supplier(
        company_id=company_id,
        name=name,
        category=_text(data, 'category'),
        contact_email=_text(data, 'contact_email'),
        phone=_text(data, 'phone'),
        created_by=current_actor_id(),
    )
    session.add(s); session.commit()
    return envelope(_supplier_json(s), 'Supplier created successfully'), 201


@suppliers_bp.get('/suppliers/<supplier_id>')
@require_permissions('SUP.READ')
def get_supplier(supplier_id: str):
    return envelope(_supplier_json(_load(_company_id(), supplier_id)))


@suppliers_bp.put('/suppliers/<supplier_id>')
@require_permissions('SUP.MANAGE')
@audit_log('SUPPLIER.UPDATE', entity='Supplier', entity_id_key='id', diff_keys=['name', 'category', 'contact_email'],
           pre_fetch=lambda a, kw: _prefetch_supplier(kw.get('supplier_id')), meta_keys=['name'])
def update_supplier(supplier_id: str):
    session = get_db()
    data = _body()
    s = _load(_company_id(data), supplier_id)
    unknown = sorted(set(data) - set(EDITABLE_FIELDS) - {'company_id'})
    if unknown:
        raise InvalidArgument(f"Unknown fields: {', '.join(unknown)}")
    if 'name' in data:
        name = _text(data, 'name', required=True)
        _assert_unique_name(s.company_id, name, exclude_id=s.id)
        s.name = name
    for key in ('category', 'contact_email', 'phone'):
        if key in data:
            setattr(s, key, _text(data, key))
    session.commit()
    return envelope(_supplier_json(s), 'Supplier updated successfully')


def _set_status(supplier_id: str, target: str):
    session = get_db()
    s = _load(_company_id(), supplier_id)
    if s.status == target:
        raise InvalidArgument(f'already {target.lower()}')
    s.status = validate_status(target, Supplier.ALL_STATUSES, 'status')
    session.commit()
    return envelope(_supplier_json(s), f'Supplier {target.lower()}')


@suppliers_bp.post('/suppliers/<supplier_id>/activate')
@require_permissions('SUP.MANAGE')
@audit_log('SUPPLIER.ACTIVATE', entity='Supplier', entity_id_key='id', diff_keys=['status'],
           pre_fetch=lambda a, kw: _prefetch_supplier(kw.get('supplier_id')), meta_keys=['status'])
def activate_supplier(supplier_id: str):
    return _set_status(supplier_id, Supplier.STATUS_ACTIVE)


@suppliers_bp.post('/suppliers/<supplier_id>/deactivate')
@require_permissions('SUP.MANAGE')
@audit_log('SUPPLIER.DEACTIVATE', entity='Supplier', entity_id_key='id', diff_keys=['status'],
           pre_fetch=lambda a, kw: _prefetch_supplier(kw.get('supplier_id')), meta_keys=['status'])
def deactivate_supplier(supplier_id: str):
    return _set_status(supplier_id, Supplier.STATUS_INACTIVE)


def _supplier_json(s: Supplier):
    return {
        'id': s.id,
        'company_id': s.company_id,
        'name': s.name,
        'category': s.category,
        'contact_email': s.contact_email,
        'phone': s.phone,
        'status': s.status
    }


def _prefetch_supplier(supplier_id):
    try:
        sid = validate_id(supplier_id, 'supplier_id')
    except InvalidArgument:
        return None
    s = get_db().get(Supplier, sid)
    if not s:
        return None
    return _supplier_json(s)
