from __future__ import annotations
"""Line item normalization and the purchase order amount formula.

    subtotal     = sum(line_total), line_total = quantity * rate
    taxable      = subtotal - discount            (0 <= discount <= subtotal)
    tax          = sum(line_total * tax_rate / 100)
    raw          = taxable + tax + freight + packing + other
    grand_total  = round(raw, 2); rounding_adjustment = grand_total - raw

Client supplied totals are never read.
"""
from typing import Any, Dict, List, Optional

from procurement.errors import InvalidArgument
from procurement.utils.validation import require_number

CHARGE_FIELDS = ('freight_charges', 'packing_charges', 'other_charges')


def _optional_text(value: Any, field_name: str, max_len: int) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgument(f'{field_name} must be a string')
    value = value.strip()
    return value[:max_len] or None


def normalize_items(raw_items: Any) -> List[Dict[str, Any]]:
    if not isinstance(raw_items, list) or not raw_items:
        raise InvalidArgument('items required', detail='items must be a non-empty list')
    items = []
    for idx, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise InvalidArgument(f'items[{idx}] must be an object')
        name = _optional_text(raw.get('item_name'), f'items[{idx}].item_name', 150)
        if not name:
            raise InvalidArgument(f'items[{idx}].item_name required')
        quantity = require_number(raw.get('quantity'), f'items[{idx}].quantity', strict=True)
        rate = require_number(raw.get('rate'), f'items[{idx}].rate')
        tax_rate = require_number(raw.get('tax_rate', 0), f'items[{idx}].tax_rate')
        items.append({
            'position': idx,
            'item_code': _optional_text(raw.get('item_code'), f'items[{idx}].item_code', 64),
            'item_name': name,
            'category': _optional_text(raw.get('category'), f'items[{idx}].category', 64),
            'unit': _optional_text(raw.get('unit'), f'items[{idx}].unit', 16),
            'quantity': quantity,
            'rate': rate,
            'tax_rate': tax_rate,
            'line_total': quantity * rate,
        })
    return items


def compute_amounts(items: List[Dict[str, Any]], discount: float = 0.0, freight_charges: float = 0.0,
                    packing_charges: float = 0.0, other_charges: float = 0.0) -> Dict[str, float]:
    subtotal = sum(i['line_total'] for i in items)
    discount = require_number(discount, 'discount')
    if discount > subtotal:
        raise InvalidArgument('discount must not exceed subtotal')
    charges = [require_number(v, name) for name, v in zip(CHARGE_FIELDS, (freight_charges, packing_charges, other_charges))]
    taxable = subtotal - discount
    tax = sum(i['line_total'] * i['tax_rate'] / 100 for i in items)
    raw = taxable + tax + sum(charges)
    grand_total = round(raw, 2)
    return {
        'subtotal': subtotal,
        'total_discount': discount,
        'taxable_amount': taxable,
        'total_tax_amount': tax,
        'freight_charges': charges[0],
        'packing_charges': charges[1],
        'other_charges': charges[2],
        'rounding_adjustment': grand_total - raw,
        'grand_total': grand_total,
    }


__all__ = ['normalize_items', 'compute_amounts', 'CHARGE_FIELDS']
