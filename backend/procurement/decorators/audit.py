from __future__ import annotations
"""Audit logging decorator to reduce repetitive add_audit() calls in route handlers.

Usage examples:

@audit_log('PO.CREATE', entity='PurchaseOrder', entity_id_key='id', meta_keys=['order_number', 'grand_total'])
def create_order():
    ... return envelope(order_json(po), 'Purchase order created'), 201

@audit_log('PO.UPDATE', entity='PurchaseOrder', entity_id_arg='order_id',
           diff_keys=['status'], pre_fetch=lambda args, kwargs: {...})
def update_order(order_id): ...

Parameters:
  action: required audit action code (e.g. PO.CREATE)
  entity: optional entity label (PurchaseOrder, Supplier)
  entity_id_key: key in the returned record whose value becomes entity_id.
  entity_id_arg: name of the path parameter to use for entity_id (fallback if entity_id_key absent).
  meta_keys: list of keys to project from the returned record into meta dict (shallow copy).
  meta_builder: callable returning a meta dict; receives (record, original_return_value, args, kwargs). If provided it overrides meta_keys.

Return handling:
  Views return the success envelope ``{'success': True, 'data': ..., 'message': ...}``
  optionally as ``(envelope, status)``. The record inspected for keys is
  ``envelope['data']`` when it is a dict. The original return value is always preserved.
  Failed views raise, so nothing is audited for them.
"""

import logging
from functools import wraps
from typing import Any, Callable, Iterable, Optional, Dict

from procurement.services.audit import add_audit
from procurement import get_db

logger = logging.getLogger(__name__)


def _extract_record(rv: Any):
    """Return the JSON-able record dict inside a view return value, if any."""
    data = rv[0] if isinstance(rv, tuple) and rv else rv
    if isinstance(data, dict) and 'success' in data:
        data = data.get('data')
    return data if isinstance(data, dict) else None


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    entity_id_arg: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
    meta_builder: Optional[Callable[[dict, Any, tuple, dict], dict]] = None,
    commit: bool = True,
    # Diff support
    diff_keys: Optional[Iterable[str]] = None,
    pre_fetch: Optional[Callable[[tuple, dict], Dict[str, Any]]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            before_snapshot = pre_fetch(args, kwargs) if (diff_keys and pre_fetch) else None
            rv = fn(*args, **kwargs)
            try:
                _record(rv, args, kwargs, before_snapshot)
            except Exception:
                # audit must not interfere with the main response
                logger.exception('audit %s failed', action)
                get_db().rollback()
            return rv

        def _record(rv, args, kwargs, before_snapshot):
            data = _extract_record(rv) or {}
            entity_id = None
            if entity_id_key and entity_id_key in data:
                entity_id = data.get(entity_id_key)
            elif entity_id_arg and entity_id_arg in kwargs:
                entity_id = kwargs.get(entity_id_arg)
            meta = None
            if meta_builder:
                meta = meta_builder(data, rv, args, kwargs)
            elif meta_keys:
                meta = {k: data.get(k) for k in meta_keys if k in data}
            if diff_keys and isinstance(before_snapshot, dict):
                changes = {}
                for k in diff_keys:
                    if k in before_snapshot and k in data and before_snapshot.get(k) != data.get(k):
                        changes[k] = {'before': before_snapshot.get(k), 'after': data.get(k)}
                if changes:
                    meta = dict(meta or {})
                    meta['changes'] = changes
            add_audit(action, entity, entity_id, meta, company_id=data.get('company_id'))
            if commit:
                get_db().commit()
        return wrapper
    return outer
