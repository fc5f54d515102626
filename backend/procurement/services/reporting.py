from __future__ import annotations
"""Response envelopes and the report assembler.

Success: ``{'success': True, 'data': ..., 'message': ...}``
Failure: ``{'success': False, 'message': ..., 'error': {status, title, detail, kind}}``
"""
from datetime import datetime
from typing import Any, Optional

from procurement.services.analytics import AnalyticsEngine


def envelope(data: Any, message: str = 'OK'):
    return {'success': True, 'data': data, 'message': message}


def error_envelope(status: int, title: str, detail: Any, kind: str, message: Optional[str] = None):
    return {
        'success': False,
        'message': message or (detail if isinstance(detail, str) else title),
        'error': {'status': status, 'title': title, 'detail': detail, 'kind': kind},
    }


class ReportAssembler:
    """Selects the engine calls for each report and wraps them in the envelope."""

    def __init__(self, engine: AnalyticsEngine):
        self.engine = engine

    def stats(self, company_id: int):
        return envelope(self.engine.get_purchase_stats(company_id), 'Purchase statistics retrieved successfully')

    def analytics(self, company_id: int, period: Optional[str] = None):
        return envelope(self.engine.get_purchase_analytics(company_id, period), 'Purchase analytics retrieved successfully')

    def supplier_report(self, company_id: int, date_from: Optional[datetime] = None, date_to: Optional[datetime] = None):
        return envelope(self.engine.get_supplier_report(company_id, date_from, date_to), 'Supplier report generated successfully')

    def category_spend(self, company_id: int, date_from: Optional[datetime] = None, date_to: Optional[datetime] = None):
        return envelope(self.engine.get_category_spend(company_id, date_from, date_to), 'Category spend retrieved successfully')

    def status_breakdown(self, company_id: int, date_from: Optional[datetime] = None, date_to: Optional[datetime] = None):
        return envelope(self.engine.get_status_breakdown(company_id, date_from, date_to), 'Status breakdown retrieved successfully')

    def item_report(self, company_id: int, date_from: Optional[datetime] = None, date_to: Optional[datetime] = None):
        return envelope(self.engine.get_item_report(company_id, date_from, date_to), 'Item-wise report generated successfully')
