"""
Stock and price item schemas.

This module contains schemas for listing datasets and editing a single
item.
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field
from datetime import datetime


class StockItemResponse(BaseModel):
    """Inventory item as returned by the API."""

    code: str
    description: str
    category: str
    stock: str
    uploaded_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StockListResponse(BaseModel):
    """Inventory dataset listing."""

    ok: bool = Field(True, description="Operation success flag")
    warehouse: str = Field(..., description="Warehouse key as resolved")
    dataset: str = Field(..., description="Dataset name")
    items: List[StockItemResponse] = Field(..., description="Items in source order")


class PriceItemResponse(BaseModel):
    """Price entry. Price datasets are listed as a bare array of these."""

    code: str
    price: Optional[Union[int, float]] = None

    class Config:
        json_schema_extra = {
            "example": {"code": "X-100", "price": 1234.5}
        }


class ItemUpdateRequest(BaseModel):
    """
    Edit of a single item, looked up by its current code.

    Fields are optional at the schema level so that a missing warehouse or
    code is reported as a 400 with a readable message.
    """

    warehouse: Optional[str] = Field(None, description="Warehouse key")
    custom_name: Optional[str] = Field(None, description="Dataset name for the 'custom' warehouse")
    original_code: Optional[Union[str, int]] = Field(None, description="Code of the item to edit")
    update: Optional[Dict[str, Any]] = Field(None, description="Field → new value")

    class Config:
        json_schema_extra = {
            "example": {
                "warehouse": "prices",
                "original_code": "X-100",
                "update": {"price": "1.234,50"}
            }
        }


class ItemUpdateResponse(BaseModel):
    """Result of an item edit."""

    ok: bool = Field(True, description="Operation success flag")
    updated: int = Field(..., description="Number of updated items")
