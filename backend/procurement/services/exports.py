from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from procurement.errors import InvalidArgument
from procurement.services.order_query import PurchaseFilters, build_order_query

logger = logging.getLogger(__name__)

EXPORT_FORMATS = {'csv': 'csv', 'excel': 'xlsx'}
DOWNLOAD_PREFIX = '/purchase/download'


def export_purchase_data(session: Session, company_id: int, fmt: str, args: Mapping[str, Any],
                         clock: Optional[Callable[[], datetime]] = None):
    """Validate an export request and hand back where the file will be served.

    Filters are validated by building and counting the same query the order
    list uses. File generation itself happens outside this service.
    """
    if fmt not in EXPORT_FORMATS:
        raise InvalidArgument(f'Unsupported format: {fmt}', detail=f"format must be one of {', '.join(EXPORT_FORMATS)}")
    filters = PurchaseFilters.from_args(company_id, args)
    stmt = build_order_query(filters)
    count = session.execute(select(func.count()).select_from(stmt.order_by(None).subquery())).scalar_one()
    millis = int((clock or datetime.now)().timestamp() * 1000)
    url = f'{DOWNLOAD_PREFIX}/{millis}.{EXPORT_FORMATS[fmt]}'
    logger.info('export requested company=%s format=%s records=%s', company_id, fmt, count)
    return {'download_url': url, 'format': fmt, 'record_count': count}
