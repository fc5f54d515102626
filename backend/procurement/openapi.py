"""Minimal deterministic OpenAPI spec builder.

Paths come from a declarative endpoint registry; operationIds, tags and
``x-required-permissions`` are derived from it so the document stays in step
with the blueprints.
"""
from typing import Any, Dict, List, Tuple

from .models.purchase_order import PurchaseOrder
from .services.analytics import PERIODS
from .services.order_query import SORTABLE
from .services.purchase_orders import PO_FSM
from .services.exports import EXPORT_FORMATS
from .config.pagination import DEFAULT_LIMIT, MAX_LIMIT

__all__ = ["build_openapi_spec", "ENDPOINTS"]

# (method, path, summary, permission or None, success status)
ENDPOINTS: List[Tuple[str, str, str, Any, str]] = [
    ("post", "/auth/login", "Login", None, "200"),
    ("get", "/auth/me", "Current user", "", "200"),
    ("get", "/purchase/stats", "Purchase statistics", "RPT.READ", "200"),
    ("get", "/purchase/analytics", "Purchase analytics for a period", "RPT.READ", "200"),
    ("get", "/purchase/orders", "List purchase orders", "PO.READ", "200"),
    ("post", "/purchase/orders", "Create purchase order", "PO.CREATE", "201"),
    ("get", "/purchase/orders/{order_id}", "Get purchase order", "PO.READ", "200"),
    ("put", "/purchase/orders/{order_id}", "Update purchase order", "PO.UPDATE", "200"),
    ("delete", "/purchase/orders/{order_id}", "Delete purchase order", "PO.DELETE", "200"),
    ("put", "/purchase/orders/{order_id}/payment-status", "Update payment status", "PO.PAY", "200"),
    ("post", "/purchase/orders/bulk-update", "Bulk update purchase orders", "PO.UPDATE", "200"),
    ("get", "/purchase/orders/status/{status}", "Purchase orders by status", "PO.READ", "200"),
    ("get", "/purchase/orders/supplier/{supplier_id}", "Purchase orders by supplier", "PO.READ", "200"),
    ("get", "/purchase/reports/supplier", "Supplier report", "RPT.READ", "200"),
    ("get", "/purchase/reports/category-spend", "Category spend", "RPT.READ", "200"),
    ("get", "/purchase/reports/item-wise", "Item-wise purchase report", "RPT.READ", "200"),
    ("get", "/purchase/reports/status-breakdown", "Status breakdown", "RPT.READ", "200"),
    ("post", "/purchase/export/{fmt}", "Export purchase data", "PO.EXPORT", "200"),
    ("get", "/purchase/suppliers", "List suppliers", "SUP.READ", "200"),
    ("post", "/purchase/suppliers", "Create supplier", "SUP.MANAGE", "201"),
    ("get", "/purchase/suppliers/{supplier_id}", "Get supplier", "SUP.READ", "200"),
    ("put", "/purchase/suppliers/{supplier_id}", "Update supplier", "SUP.MANAGE", "200"),
    ("post", "/purchase/suppliers/{supplier_id}/activate", "Activate supplier", "SUP.MANAGE", "200"),
    ("post", "/purchase/suppliers/{supplier_id}/deactivate", "Deactivate supplier", "SUP.MANAGE", "200"),
    ("get", "/inventory/items", "List inventory items", "INV.READ", "200"),
    ("get", "/inventory/items/{item_id}/movements", "List stock movements", "INV.READ", "200"),
]

LIST_PATHS = {
    "/purchase/orders", "/purchase/orders/status/{status}", "/purchase/orders/supplier/{supplier_id}",
    "/purchase/suppliers", "/inventory/items", "/inventory/items/{item_id}/movements",
}
DATE_RANGE_PATHS = {"/purchase/orders", "/purchase/reports/supplier", "/purchase/reports/category-spend",
                    "/purchase/reports/item-wise", "/purchase/reports/status-breakdown"}


def _ref(name: str) -> Dict[str, str]:
    return {"$ref": f"#/components/{name}"}


def _path_params(path: str) -> List[Dict[str, Any]]:
    out = []
    for part in path.split("/"):
        if part.startswith("{") and part.endswith("}"):
            out.append({"name": part[1:-1], "in": "path", "required": True, "schema": {"type": "string"}})
    return out


def _components() -> Dict[str, Any]:
    return {
        "schemas": {
            "PurchaseOrder": {
                "type": "object",
                "properties": {
                    "id": {"type": "integer"},
                    "order_number": {"type": "string"},
                    "status": {"type": "string", "enum": list(PurchaseOrder.ALL_STATUSES)},
                    "payment_status": {"type": "string", "enum": list(PurchaseOrder.ALL_PAYMENT_STATUSES)},
                    "amounts": {"type": "object"},
                    "items": {"type": "array", "items": {"type": "object"}},
                },
                "required": ["id", "order_number", "status"],
                "x-transitions": PO_FSM.states(),
            },
            "Pagination": {
                "type": "object",
                "properties": {
                    "page": {"type": "integer"},
                    "limit": {"type": "integer"},
                    "total": {"type": "integer"},
                    "pages": {"type": "integer"},
                },
                "required": ["page", "limit", "total", "pages"],
            },
            "Envelope": {
                "type": "object",
                "properties": {"success": {"type": "boolean"}, "data": {}, "message": {"type": "string"}},
                "required": ["success", "data", "message"],
            },
            "Error": {
                "type": "object",
                "properties": {
                    "success": {"type": "boolean"},
                    "message": {"type": "string"},
                    "error": {
                        "type": "object",
                        "properties": {
                            "status": {"type": "integer"},
                            "title": {"type": "string"},
                            "detail": {},
                            "kind": {"type": "string"},
                        },
                    },
                },
                "required": ["success", "message", "error"],
            },
        },
        "responses": {
            "BadRequest": {"description": "Bad Request", "content": {"application/json": {"schema": _ref("schemas/Error")}}},
            "NotFound": {"description": "Not Found", "content": {"application/json": {"schema": _ref("schemas/Error")}}},
        },
        "securitySchemes": {"BearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}},
        "parameters": {
            "CompanyParam": {"name": "company_id", "in": "query", "schema": {"type": "integer"},
                             "description": "Target company (admins only; others use their own)"},
            "PageParam": {"name": "page", "in": "query", "schema": {"type": "integer", "default": 1, "minimum": 1}},
            "LimitParam": {"name": "limit", "in": "query",
                           "schema": {"type": "integer", "default": DEFAULT_LIMIT, "maximum": MAX_LIMIT}},
            "DateFromParam": {"name": "date_from", "in": "query", "schema": {"type": "string", "format": "date"}},
            "DateToParam": {"name": "date_to", "in": "query", "schema": {"type": "string", "format": "date"}},
            "PeriodParam": {"name": "period", "in": "query", "schema": {"type": "string", "enum": list(PERIODS)}},
            "SortParam": {"name": "sort", "in": "query", "schema": {"type": "string"},
                          "description": f"Comma separated, '-' for descending: {', '.join(SORTABLE)}"},
        },
    }


def build_openapi_spec() -> Dict[str, Any]:
    paths: Dict[str, Any] = {}
    tag_desc: Dict[str, str] = {}
    for method, path, summary, permission, status in ENDPOINTS:
        op: Dict[str, Any] = {
            "summary": summary,
            "responses": {
                status: {"description": "OK", "content": {"application/json": {"schema": _ref("schemas/Envelope")}}},
                "400": _ref("responses/BadRequest"),
            },
        }
        params = _path_params(path)
        if path.startswith("/purchase") or path.startswith("/inventory"):
            params.append(_ref("parameters/CompanyParam"))
            op["responses"]["404"] = _ref("responses/NotFound")
        if path in LIST_PATHS and method == "get":
            params += [_ref("parameters/PageParam"), _ref("parameters/LimitParam")]
        if path in DATE_RANGE_PATHS and method == "get":
            params += [_ref("parameters/DateFromParam"), _ref("parameters/DateToParam")]
        if path == "/purchase/orders" and method == "get":
            params.append(_ref("parameters/SortParam"))
        if path == "/purchase/analytics":
            params.append(_ref("parameters/PeriodParam"))
        if path == "/purchase/export/{fmt}":
            params[0]["schema"] = {"type": "string", "enum": list(EXPORT_FORMATS)}
        if params:
            op["parameters"] = params
        if permission is None:
            op["security"] = []
        elif permission:
            op["x-required-permissions"] = [permission]
        tag = path.split("/")[1].capitalize()
        rid = path.strip("/").replace("/", "_").replace("{", "").replace("}", "").replace("-", "_")
        op["operationId"] = f"{method}_{rid}"
        op["tags"] = [tag]
        tag_desc[tag] = f"{tag} endpoints"
        paths.setdefault(path, {})[method] = op

    return {
        "openapi": "3.0.3",
        "info": {"title": "Procurement Analytics API", "version": "0.1.0"},
        "paths": paths,
        "components": _components(),
        "security": [{"BearerAuth": []}],
        "tags": [{"name": n, "description": d} for n, d in sorted(tag_desc.items())],
    }
