"""
Upload router - Replace a dataset with the contents of an uploaded sheet.

The workbook is parsed in memory; only its first worksheet is read.
"""

import logging
from typing import Optional

from fastapi import APIRouter, UploadFile, File, Form, Depends, HTTPException, status
from sqlalchemy.orm import Session

from api.config import settings
from api.dependencies import get_db, get_current_user, verify_file_extension, verify_file_size
from api.schemas.upload_schema import UploadResponse
from services.dataset_service import DatasetError, resolve_dataset
from services.stock_import_service import StockImportService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=['upload'])


@router.post('/upload', response_model=UploadResponse)
async def upload_sheet(
    file: Optional[UploadFile] = File(None, description="Workbook to import (.xlsx, .xlsm or .xls)"),
    warehouse: Optional[str] = Form(None, description="Warehouse key, e.g. 'olav' or 'prices'"),
    custom_name: Optional[str] = Form(None, description="Dataset name for the 'custom' warehouse"),
    db: Session = Depends(get_db),
    current_user: str = Depends(get_current_user)
):
    """
    Upload a stock or price sheet and replace the warehouse dataset.

    **Layouts:**
    - Stock sheets: columns A/C/F/H (code, description, category, stock)
      from row 10 down to the first blank row
    - Price sheets (`warehouse=prices`): code in column A, price in column B
      on the same row or the row below

    **Example:**
    ```bash
    curl -F file=@stock.xlsx -F warehouse=olav http://localhost:3000/upload
    ```

    **Returns:**
    - Resolved dataset and kind
    - Parsed and inserted record counts
    """
    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing file"
        )

    try:
        target = resolve_dataset(warehouse, custom_name, settings.WAREHOUSE_DATASETS)
    except DatasetError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    logger.info(f"Upload request from {current_user}: {file.filename} "
                f"for warehouse '{target.warehouse}'")

    verify_file_extension(file.filename)

    data = await file.read()
    verify_file_size(len(data))

    service = StockImportService(db, max_rows=settings.MAX_SCAN_ROWS)

    try:
        result = service.import_buffer(
            data,
            target,
            filename=file.filename,
            created_by=current_user
        )
    except Exception as e:
        logger.error(f"Upload failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not process the file: {str(e)}"
        )

    return UploadResponse(**result)
