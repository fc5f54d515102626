from __future__ import annotations
from typing import Any, Mapping, Optional
from procurement.errors import InvalidArgument
from procurement.utils.validation import validate_id


def resolve_company_id(claims: Mapping[str, Any], requested: Optional[Any] = None) -> int:
    """Pick the tenant a request operates on.

    Admins may target any company explicitly and otherwise fall back to their
    own. Everyone else is pinned to the company in their token; a requested
    company_id from a non-admin is ignored. No resolvable company is a bad
    request, never an empty result.
    """
    if claims.get('is_admin') and requested not in (None, ''):
        return validate_id(requested, 'company_id')
    own = claims.get('company_id')
    if own is None:
        raise InvalidArgument('company_id required')
    return validate_id(own, 'company_id')


__all__ = ['resolve_company_id']
