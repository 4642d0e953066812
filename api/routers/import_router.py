"""
Import router - Upload history.

This module provides endpoints for browsing past uploads and their
outcome.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from api.dependencies import get_db
from api.schemas.upload_schema import ImportRunItem, ImportRunListResponse
from backend.models.import_run import ImportRun

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/import', tags=['import'])


@router.get('/runs', response_model=ImportRunListResponse)
async def list_runs(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    dataset: Optional[str] = Query(None, description="Filter by dataset"),
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    db: Session = Depends(get_db)
):
    """
    List uploads with pagination and filtering.

    **Filters:**
    - `dataset`: Filter by dataset name (e.g. `stock_olav`)
    - `status`: Filter by `success` or `failed`

    **Example:**
    ```bash
    curl "http://localhost:3000/api/import/runs?dataset=prices&status=success&page=1"
    ```
    """
    # Build query
    query = db.query(ImportRun)

    if dataset:
        query = query.filter_by(dataset=dataset)

    if status_filter:
        query = query.filter_by(status=status_filter)

    # Get total count
    total = query.count()

    # Get page of results
    runs = query.order_by(ImportRun.created_at.desc(), ImportRun.id.desc())\
        .offset((page - 1) * page_size)\
        .limit(page_size)\
        .all()

    # Calculate total pages
    total_pages = (total + page_size - 1) // page_size

    return ImportRunListResponse(
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        items=[ImportRunItem.model_validate(run) for run in runs]
    )


@router.get('/runs/{run_id}', response_model=ImportRunItem)
async def get_run(
    run_id: int,
    db: Session = Depends(get_db)
):
    """
    Get a single upload record.

    **Returns:**
    - 200 with the run
    - 404 if no run has that id
    """
    run = db.query(ImportRun).filter_by(id=run_id).first()

    if not run:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Import run {run_id} not found"
        )

    return ImportRunItem.model_validate(run)
