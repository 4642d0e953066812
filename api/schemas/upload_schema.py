"""
Upload-related Pydantic schemas.

This module contains schemas for sheet upload responses and the upload
history.
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class DatasetKindEnum(str, Enum):
    """Dataset layout."""
    INVENTORY = 'inventory'
    PRICE = 'price'


class ImportStatusEnum(str, Enum):
    """Upload outcome."""
    SUCCESS = 'success'
    FAILED = 'failed'


class UploadResponse(BaseModel):
    """Result of a sheet upload."""

    ok: bool = Field(True, description="Operation success flag")
    warehouse: str = Field(..., description="Warehouse key as resolved")
    dataset: str = Field(..., description="Dataset that was replaced")
    kind: DatasetKindEnum = Field(..., description="Dataset kind")
    parsed: int = Field(..., description="Records extracted from the sheet")
    inserted: int = Field(..., description="Records written to the dataset")
    run_id: Optional[int] = Field(None, description="Import run identifier")

    class Config:
        json_schema_extra = {
            "example": {
                "ok": True,
                "warehouse": "olav",
                "dataset": "stock_olav",
                "kind": "inventory",
                "parsed": 1520,
                "inserted": 1520,
                "run_id": 42
            }
        }


class ImportRunItem(BaseModel):
    """Upload history entry."""

    id: int
    warehouse: str
    dataset: str
    kind: DatasetKindEnum
    filename: Optional[str]
    status: ImportStatusEnum
    parsed: int
    inserted: int
    error: Optional[Dict[str, Any]]
    created_by: Optional[str]
    created_at: datetime
    completed_at: Optional[datetime]

    class Config:
        from_attributes = True


class ImportRunListResponse(BaseModel):
    """Paginated upload history."""

    total: int = Field(..., description="Total number of runs")
    page: int = Field(..., description="Current page number")
    page_size: int = Field(..., description="Items per page")
    total_pages: int = Field(..., description="Total number of pages")
    items: List[ImportRunItem] = Field(..., description="Runs in current page")
