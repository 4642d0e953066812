"""
Dataset resolution - map a warehouse name to the dataset that stores it.

Every upload, listing and edit names a warehouse. Known warehouses map to
fixed dataset names, 'custom' takes a user-supplied name, and anything else
is derived from the warehouse name itself.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

logger = logging.getLogger(__name__)

PRICE_DATASET = 'prices'
CUSTOM_WAREHOUSE = 'custom'
DATASET_PREFIX = 'stock_'

DEFAULT_WAREHOUSE_DATASETS: Dict[str, str] = {
    'olav': 'stock_olav',
    'polo': 'stock_polo',
    'cba': 'stock_cba',
    'llantas': 'stock_llantas',
    'camaras': 'stock_camaras',
    'protectores': 'stock_protectores',
    'prices': PRICE_DATASET,
}


class DatasetError(ValueError):
    """Raised when a request does not identify a usable dataset."""


class DatasetKind(str, Enum):
    """Layout and field set of a dataset."""
    INVENTORY = 'inventory'
    PRICE = 'price'


@dataclass(frozen=True)
class DatasetTarget:
    """Resolved destination of an upload or edit."""

    warehouse: str
    dataset: str
    kind: DatasetKind

    @property
    def is_price(self) -> bool:
        return self.kind == DatasetKind.PRICE


def normalize_name(name: Optional[str]) -> str:
    """
    Turn a free-form name into a dataset-safe slug.

    Examples:
        "  Depósito Norte " → "depsito_norte"
        "Tires 2024" → "tires_2024"
    """
    slug = str(name or '').lower().strip()
    slug = re.sub(r'\s+', '_', slug)
    return re.sub(r'[^a-z0-9_]', '', slug)


def resolve_dataset(warehouse: Optional[str], custom_name: Optional[str] = None,
                    mapping: Optional[Dict[str, str]] = None) -> DatasetTarget:
    """
    Resolve a warehouse (and optional custom name) to its dataset.

    Args:
        warehouse: Warehouse key, e.g. 'olav', 'prices' or 'custom'
        custom_name: Dataset name used when warehouse is 'custom'
        mapping: Warehouse → dataset overrides (default: built-in map)

    Returns:
        DatasetTarget with the dataset name and its kind

    Raises:
        DatasetError: If the warehouse is missing or no valid name remains
    """
    mapping = DEFAULT_WAREHOUSE_DATASETS if mapping is None else mapping

    key = str(warehouse or '').lower().strip()
    if not key:
        raise DatasetError("Missing warehouse")

    if key == CUSTOM_WAREHOUSE:
        slug = normalize_name(custom_name)
        if not slug:
            raise DatasetError(f"Invalid custom dataset name: {custom_name!r}")
        dataset = f"{DATASET_PREFIX}{slug}"
    elif key in mapping:
        dataset = mapping[key]
    else:
        slug = normalize_name(key)
        if not slug:
            raise DatasetError(f"Invalid warehouse name: {warehouse!r}")
        dataset = f"{DATASET_PREFIX}{slug}"

    kind = DatasetKind.PRICE if dataset == PRICE_DATASET else DatasetKind.INVENTORY

    logger.debug(f"Resolved warehouse '{key}' to dataset '{dataset}' ({kind.value})")
    return DatasetTarget(warehouse=key, dataset=dataset, kind=kind)
