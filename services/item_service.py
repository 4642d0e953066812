"""
Item Service - Read and edit imported records.

Listing returns a dataset in source order. Editing looks an item up by its
code and applies coerced field values.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from backend.models.schema import StockItem, PriceItem
from services.coercion_service import coerce_update
from services.dataset_service import DatasetTarget
from services.number_service import NumberNormalizer

logger = logging.getLogger(__name__)


class ItemService:
    """Framework-agnostic access to stock and price datasets."""

    def __init__(self, db_session: Session):
        self.session = db_session

    def list_stock(self, target: DatasetTarget) -> List[StockItem]:
        """Get every inventory item of a dataset, ordered by source row."""
        return self.session.query(StockItem)\
            .filter_by(dataset=target.dataset)\
            .order_by(StockItem.row_num, StockItem.id)\
            .all()

    def list_prices(self, target: DatasetTarget) -> List[Dict[str, Any]]:
        """
        Get a price dataset as a flat list of {code, price}.

        Prices saved as raw text by an edit are normalized again on the way
        out; anything still unreadable is reported as None. Integral prices
        come back as int, whatever the column type returned.
        """
        items = self.session.query(PriceItem)\
            .filter_by(dataset=target.dataset)\
            .order_by(PriceItem.row_num, PriceItem.id)\
            .all()

        out = []
        for item in items:
            price = item.price
            if price is None and item.price_text is not None:
                price = NumberNormalizer.normalize(item.price_text)
            if isinstance(price, float) and price.is_integer():
                price = int(price)
            out.append({'code': (item.code or '').strip(), 'price': price})

        return out

    def update_item(self, target: DatasetTarget, original_code: str,
                    update: Dict[str, Any]) -> bool:
        """
        Apply an edit to the first item whose code matches.

        Args:
            target: Dataset holding the item
            original_code: Code of the item before the edit
            update: Raw field → value mapping; fields the dataset kind does
                    not permit are ignored

        Returns:
            True if an item matched, False otherwise
        """
        model = PriceItem if target.is_price else StockItem
        code = str(original_code).strip()

        item = self.session.query(model)\
            .filter_by(dataset=target.dataset, code=code)\
            .order_by(model.row_num, model.id)\
            .first()

        if item is None:
            logger.info(f"No item with code '{code}' in dataset '{target.dataset}'")
            return False

        values = coerce_update(target.kind, update)

        for field, value in values.items():
            if field == 'price':
                if isinstance(value, str):
                    item.price = None
                    item.price_text = value
                else:
                    item.price = value
                    item.price_text = None
            else:
                setattr(item, field, value)

        item.updated_at = datetime.utcnow()
        self.session.commit()

        logger.info(f"Updated item '{code}' in dataset '{target.dataset}': "
                    f"{sorted(values)}")
        return True
