from __future__ import annotations
from flask import Blueprint, request
from procurement import get_db
from procurement.decorators.auth import require_permissions
from procurement.services.analytics import AnalyticsEngine
from procurement.services.policy import request_company_id
from procurement.services.purchase_store import PurchaseOrderStore
from procurement.services.reporting import ReportAssembler
from procurement.utils.validation import parse_date_range

rpt_bp = Blueprint('reports', __name__)


def _scope():
    """(company_id, date_from, date_to) from the query string."""
    company_id = request_company_id(request.args.get('company_id'))
    date_from, date_to = parse_date_range(request.args.get('date_from'), request.args.get('date_to'))
    return company_id, date_from, date_to


def _assembler() -> ReportAssembler:
    return ReportAssembler(AnalyticsEngine(PurchaseOrderStore(get_db())))


@rpt_bp.get('/supplier')
@require_permissions('RPT.READ')
def supplier_report():
    return _assembler().supplier_report(*_scope())


@rpt_bp.get('/category-spend')
@require_permissions('RPT.READ')
def category_spend():
    return _assembler().category_spend(*_scope())


@rpt_bp.get('/item-wise')
@require_permissions('RPT.READ')
def item_report():
    return _assembler().item_report(*_scope())


@rpt_bp.get('/status-breakdown')
@require_permissions('RPT.READ')
def status_breakdown():
    return _assembler().status_breakdown(*_scope())
