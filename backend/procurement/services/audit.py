from __future__ import annotations
from typing import Any, Dict, Optional
from flask_jwt_extended import get_jwt_identity, get_jwt
from procurement import get_db
from procurement.models.audit import AuditLog


def add_audit(action: str, entity: Optional[str] = None, entity_id: Optional[str] = None,
              meta: Optional[Dict[str, Any]] = None, company_id: Optional[int] = None):
    """Persist an audit log entry within the current DB session.

    Parameters:
      action: short action code e.g. PO.CREATE, PO.PAYMENT, SUPPLIER.UPDATE
      entity: optional entity name (PurchaseOrder, Supplier)
      entity_id: optional primary key string
      meta: additional JSON-safe dictionary (will be shallow copied)
      company_id: tenant of the entity; defaults to the caller's company claim
    """
    session = get_db()
    claims = get_jwt() or {}
    ident = get_jwt_identity()
    log = AuditLog(
        company_id=company_id if company_id is not None else claims.get('company_id'),
        actor_user_id=int(ident) if ident is not None else 0,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        meta=dict(meta or {}),
    )
    session.add(log)
    # No commit here; caller's transaction boundary controls durability.
    return log
