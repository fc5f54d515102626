from __future__ import annotations
from typing import Dict, Any, List, Set
from flask_jwt_extended import get_jwt, get_jwt_identity
from procurement.constants.permissions import ROLE_PRESETS, ALL_PERMISSION_CODES
from procurement.errors import Unauthorized
from procurement.models.authz import User
from procurement.services.tenancy import resolve_company_id


def current_claims() -> Dict[str, Any]:
    return get_jwt() or {}


def current_permissions() -> Set[str]:
    return set(current_claims().get('perms', []))


def missing_permissions(*codes: str) -> List[str]:
    """Codes the caller lacks, in request order; the '*' grant covers everything."""
    perms = current_permissions()
    if '*' in perms:
        return []
    return [c for c in codes if c not in perms]


def current_actor_id() -> int:
    ident = get_jwt_identity()
    if ident is None:
        raise Unauthorized('Authenticated user required')
    return int(ident)


def request_company_id(requested: Any = None) -> int:
    """Tenant for the current request, see tenancy.resolve_company_id."""
    return resolve_company_id(current_claims(), requested)


def permissions_for(user: User) -> List[str]:
    """Effective permission codes for a user; admins hold every code."""
    if user.is_admin:
        return list(ALL_PERMISSION_CODES)
    return sorted(set(ROLE_PRESETS.get(user.role, [])))


def build_claims(user: User) -> Dict[str, Any]:
    return {
        'perms': permissions_for(user),
        'company_id': user.company_id,
        'is_admin': bool(user.is_admin),
        'role': user.role,
    }
