"""
Field coercion for single-record edits.

Edits arrive as raw values from an editable table. Prices go through the
same separator rules as ingestion; everything else is stored as trimmed
text. An edit is never rejected because a price could not be read: the
raw text is stored instead.
"""

import logging
from typing import Any, Dict, FrozenSet, Union

from services.dataset_service import DatasetKind
from services.number_service import Number, NumberNormalizer

logger = logging.getLogger(__name__)

PRICE_FIELD = 'price'

PERMITTED_FIELDS: Dict[DatasetKind, FrozenSet[str]] = {
    DatasetKind.PRICE: frozenset({'code', 'price'}),
    DatasetKind.INVENTORY: frozenset({'code', 'description', 'category', 'stock'}),
}


def coerce_field(field: str, raw: Any) -> Union[Number, str]:
    """
    Coerce one edited value for storage.

    Examples:
        coerce_field('price', '1.234,50') → 1234.5
        coerce_field('price', 'not-a-number') → 'not-a-number'
        coerce_field('category', '  Tires  ') → 'Tires'
    """
    if field == PRICE_FIELD:
        number = NumberNormalizer.normalize(raw)
        if number is not None:
            return number
        return str(raw).strip()

    return str(raw).strip()


def coerce_update(kind: DatasetKind, update: Dict[str, Any]) -> Dict[str, Union[Number, str]]:
    """
    Coerce every permitted field of an edit request.

    Fields outside the dataset kind's permitted set are dropped, as are
    fields whose value is None.

    Args:
        kind: Dataset kind the edit targets
        update: Raw field → value mapping from the client

    Returns:
        Field → value mapping ready to store
    """
    allowed = PERMITTED_FIELDS[kind]
    coerced = {}

    for field, raw in update.items():
        if field not in allowed:
            logger.debug(f"Ignoring field '{field}' for {kind.value} dataset")
            continue
        if raw is None:
            continue
        coerced[field] = coerce_field(field, raw)

    return coerced
