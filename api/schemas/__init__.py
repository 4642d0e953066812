"""
Pydantic schemas for request/response validation.

This package contains all Pydantic models used for API request validation
and response serialization.
"""

from api.schemas.common import ErrorResponse, HealthCheckResponse, DatabaseHealthResponse
from api.schemas.upload_schema import (
    DatasetKindEnum, ImportStatusEnum, UploadResponse,
    ImportRunItem, ImportRunListResponse
)
from api.schemas.stock_schema import (
    StockItemResponse, StockListResponse, PriceItemResponse,
    ItemUpdateRequest, ItemUpdateResponse
)

__all__ = [
    # Common
    'ErrorResponse',
    'HealthCheckResponse',
    'DatabaseHealthResponse',

    # Upload
    'DatasetKindEnum',
    'ImportStatusEnum',
    'UploadResponse',
    'ImportRunItem',
    'ImportRunListResponse',

    # Stock
    'StockItemResponse',
    'StockListResponse',
    'PriceItemResponse',
    'ItemUpdateRequest',
    'ItemUpdateResponse',
]
