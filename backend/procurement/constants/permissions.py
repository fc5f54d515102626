"""Central enum-like definitions to avoid typos in permission/service strings.
Extend cautiously; never rename codes silently - create new ones and deprecate old via migration if needed.
"""
from __future__ import annotations
from typing import List, Dict

SERVICES = ['PO', 'RPT', 'SUP', 'INV']

SERVICE_ACTIONS = {
    'PO': ['READ', 'CREATE', 'UPDATE', 'DELETE', 'PAY', 'EXPORT'],
    'RPT': ['READ'],
    'SUP': ['READ', 'MANAGE'],
    'INV': ['READ'],
}


def build_all_permission_codes() -> List[str]:
    codes: List[str] = []
    for svc, actions in SERVICE_ACTIONS.items():
        for act in actions:
            codes.append(f"{svc}.{act}")
    return codes

ALL_PERMISSION_CODES = build_all_permission_codes()

ROLE_PRESETS: Dict[str, List[str]] = {
    'viewer': ['PO.READ', 'RPT.READ', 'SUP.READ', 'INV.READ'],
    'buyer': [
        'PO.READ', 'PO.CREATE', 'PO.UPDATE', 'PO.EXPORT',
        'RPT.READ', 'SUP.READ', 'INV.READ',
    ],
    # Manager: full procurement authority inside their company
    'manager': [
        'PO.READ', 'PO.CREATE', 'PO.UPDATE', 'PO.DELETE', 'PO.PAY', 'PO.EXPORT',
        'RPT.READ', 'SUP.READ', 'SUP.MANAGE', 'INV.READ',
    ],
    'admin': ['*'],
}
