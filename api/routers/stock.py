"""
Stock router - List datasets and edit single items.

Price datasets are returned as a bare array of {code, price}; inventory
datasets are wrapped in an envelope with the resolved dataset name.
"""

import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from api.config import settings
from api.dependencies import get_db, get_current_user
from api.schemas.stock_schema import (
    StockItemResponse, StockListResponse, PriceItemResponse,
    ItemUpdateRequest, ItemUpdateResponse
)
from services.dataset_service import DatasetError, resolve_dataset
from services.item_service import ItemService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/stock', tags=['stock'])


@router.get('', response_model=Union[List[PriceItemResponse], StockListResponse])
async def list_items(
    warehouse: Optional[str] = Query(None, description="Warehouse key"),
    custom_name: Optional[str] = Query(None, description="Dataset name for the 'custom' warehouse"),
    db: Session = Depends(get_db)
):
    """
    List every item of a warehouse dataset.

    **Examples:**
    ```bash
    # Inventory envelope
    curl "http://localhost:3000/api/stock?warehouse=olav"

    # Flat price list
    curl "http://localhost:3000/api/stock?warehouse=prices"
    ```
    """
    try:
        target = resolve_dataset(warehouse, custom_name, settings.WAREHOUSE_DATASETS)
    except DatasetError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    service = ItemService(db)

    if target.is_price:
        return [PriceItemResponse(**entry) for entry in service.list_prices(target)]

    items = service.list_stock(target)

    return StockListResponse(
        warehouse=target.warehouse,
        dataset=target.dataset,
        items=[StockItemResponse.model_validate(item) for item in items]
    )


@router.put('/item', response_model=ItemUpdateResponse)
async def update_item(
    request: ItemUpdateRequest,
    db: Session = Depends(get_db),
    current_user: str = Depends(get_current_user)
):
    """
    Edit one item, looked up by its current code.

    Only fields the dataset kind allows are stored:
    - prices: `code`, `price`
    - inventory: `code`, `description`, `category`, `stock`

    Prices are normalized (`"1.234,50"` → `1234.5`); a price that cannot be
    read is stored as the trimmed text. Other fields are stored as trimmed
    text.

    **Returns:**
    - 200 with the number of updated items
    - 400 if warehouse, original_code or update is missing
    - 404 if no item has that code
    """
    if not request.warehouse:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing warehouse"
        )
    if request.original_code is None or str(request.original_code).strip() == '':
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing original_code"
        )
    if request.update is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing update"
        )

    try:
        target = resolve_dataset(request.warehouse, request.custom_name,
                                 settings.WAREHOUSE_DATASETS)
    except DatasetError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    logger.info(f"Edit request from {current_user}: '{request.original_code}' "
                f"in dataset '{target.dataset}'")

    service = ItemService(db)
    matched = service.update_item(target, str(request.original_code), request.update)

    if not matched:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No item with that code"
        )

    return ItemUpdateResponse(updated=1)
