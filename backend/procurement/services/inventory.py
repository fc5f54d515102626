from __future__ import annotations
"""Inventory collaborator used when purchase orders are received."""
import logging
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from procurement.errors import InvalidArgument, NotFound
from procurement.models.inventory_item import InventoryItem, StockMovement
from procurement.utils.validation import require_number, validate_status

logger = logging.getLogger(__name__)


class InventoryService:
    LOOKUP_FIELDS = ('id', 'company_id', 'item_code', 'item_name')

    def __init__(self, session: Session):
        self.session = session

    def find_one(self, criteria: Dict[str, Any]) -> Optional[InventoryItem]:
        unknown = set(criteria) - set(self.LOOKUP_FIELDS)
        if unknown:
            raise InvalidArgument(f"Unsupported inventory lookup fields: {', '.join(sorted(unknown))}")
        stmt = select(InventoryItem)
        for field, value in criteria.items():
            stmt = stmt.where(getattr(InventoryItem, field) == value)
        return self.session.execute(stmt.limit(1)).scalar_one_or_none()

    def create_inventory_item(self, data: Dict[str, Any], actor_id: int) -> InventoryItem:
        if not data.get('company_id') or not data.get('item_code') or not data.get('item_name'):
            raise InvalidArgument('company_id, item_code and item_name required')
        item = InventoryItem(
            company_id=data['company_id'],
            item_code=data['item_code'],
            item_name=data['item_name'],
            category=data.get('category'),
            unit=data.get('unit'),
            current_stock=0.0,
            average_cost=float(data.get('average_cost') or 0.0),
            created_by=actor_id,
        )
        self.session.add(item)
        self.session.flush()
        logger.info('inventory item created id=%s code=%s company=%s', item.id, item.item_code, item.company_id)
        return item

    def update_stock(self, item_id: int, warehouse_id: Optional[str], quantity: float, direction: str,
                     reference: Optional[str], note: Optional[str], actor_id: int,
                     unit_cost: Optional[float] = None) -> StockMovement:
        """Record a movement and adjust current_stock. Inbound moves with a unit cost
        update the weighted average cost."""
        item = self.session.get(InventoryItem, item_id)
        if item is None:
            raise NotFound('Inventory item not found')
        validate_status(direction, StockMovement.ALL_DIRECTIONS, 'direction')
        quantity = require_number(quantity, 'quantity', strict=True)
        if direction == StockMovement.DIRECTION_OUT:
            if quantity > item.current_stock:
                raise InvalidArgument('Insufficient stock', detail=f'{item.item_code} has {item.current_stock:g} in stock')
            item.current_stock -= quantity
        else:
            if unit_cost is not None:
                value = item.current_stock * item.average_cost + quantity * unit_cost
                item.average_cost = value / (item.current_stock + quantity)
            item.current_stock += quantity
        movement = StockMovement(
            item_id=item.id,
            warehouse_id=warehouse_id,
            quantity=quantity,
            direction=direction,
            reference=reference,
            note=note,
            created_by=actor_id,
        )
        self.session.add(movement)
        logger.info('stock %s item=%s qty=%s ref=%s', direction, item.id, quantity, reference)
        return movement
