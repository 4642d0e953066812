"""
Stock Import Service - Framework-agnostic sheet import logic.

This module turns an uploaded workbook into stock or price records and
replaces the target dataset with them. It is shared by the API and the
CLI.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from backend.models.schema import StockItem, PriceItem
from backend.models.import_run import ImportRun, ImportStatus
from services.dataset_service import DatasetKind, DatasetTarget
from services.extraction_service import (
    DEFAULT_MAX_ROWS, PriceRecord, PriceRowExtractor, StockRecord, StockRowExtractor
)
from services.sheet_service import Sheet, SheetReader

logger = logging.getLogger(__name__)

BATCH_SIZE = 1000

Record = Union[StockRecord, PriceRecord]


class StockImportService:
    """
    Framework-agnostic sheet import service.

    Replace-all semantics: an upload deletes the previous contents of the
    dataset and inserts the new records in the same transaction.
    """

    def __init__(
        self,
        db_session: Session,
        progress_callback: Optional[Callable[[str, float, str], None]] = None,
        max_rows: int = DEFAULT_MAX_ROWS
    ):
        """
        Initialize stock import service.

        Args:
            db_session: SQLAlchemy database session
            progress_callback: Optional callback for progress updates
                              Signature: callback(stage: str, percent: float, message: str)
            max_rows: Hard row cap for every sheet scan
        """
        self.session = db_session
        self.progress_callback = progress_callback or (lambda *args: None)
        self.max_rows = max_rows
        self.reader = SheetReader(max_rows=max_rows)

    def _emit_progress(self, stage: str, percent: float, message: str):
        """Emit progress update via callback."""
        self.progress_callback(stage, percent, message)
        logger.info(f"Progress: {stage} ({percent:.1f}%) - {message}")

    def extract_records(self, sheet: Sheet, kind: DatasetKind) -> List[Record]:
        """Run the extractor that matches the dataset kind."""
        if kind == DatasetKind.PRICE:
            return PriceRowExtractor(max_rows=self.max_rows).extract(sheet)
        return StockRowExtractor(max_rows=self.max_rows).extract(sheet)

    def parse_buffer(self, data: bytes, kind: DatasetKind,
                     filename: Optional[str] = None) -> List[Record]:
        """
        Parse workbook bytes into records.

        Args:
            data: Raw workbook bytes
            kind: Dataset kind, selects the sheet layout
            filename: Original filename (logging only)

        Returns:
            Records ordered by source row (empty for unreadable documents)
        """
        sheet = self.reader.read_first_sheet(data, filename)
        return self.extract_records(sheet, kind)

    def replace_dataset(self, target: DatasetTarget, records: List[Record]) -> int:
        """
        Delete the dataset's rows and bulk insert the new records.

        Does not commit; the caller owns the transaction.

        Returns:
            Number of inserted rows
        """
        model = PriceItem if target.is_price else StockItem

        deleted = self.session.query(model)\
            .filter_by(dataset=target.dataset)\
            .delete(synchronize_session=False)
        logger.info(f"Cleared {deleted} rows from dataset '{target.dataset}'")

        now = datetime.utcnow()
        total = len(records)

        for i in range(0, total, BATCH_SIZE):
            batch = records[i:i + BATCH_SIZE]

            progress = 50 + (45 * (i / max(total, 1)))
            self._emit_progress('insertion', progress,
                                f"Inserting records {i}/{total}")

            if target.is_price:
                objects = [
                    PriceItem(
                        dataset=target.dataset,
                        row_num=record.row,
                        code=record.code,
                        price=record.price,
                        uploaded_at=now
                    )
                    for record in batch
                ]
            else:
                objects = [
                    StockItem(
                        dataset=target.dataset,
                        row_num=record.row,
                        code=record.code,
                        description=record.description,
                        category=record.category,
                        stock=record.stock,
                        uploaded_at=now
                    )
                    for record in batch
                ]

            self.session.bulk_save_objects(objects)
            self.session.flush()

            logger.debug(f"Inserted batch {i // BATCH_SIZE + 1} ({len(batch)} records)")

        return total

    def import_buffer(self, data: bytes, target: DatasetTarget,
                      filename: Optional[str] = None,
                      created_by: Optional[str] = None) -> Dict[str, Any]:
        """
        Import a workbook into a dataset.

        Args:
            data: Raw workbook bytes
            target: Resolved dataset to replace
            filename: Original filename
            created_by: User or API key performing the upload

        Returns:
            Dictionary with parsed/inserted counts and the import run id

        Raises:
            Exception: Database errors are re-raised after the failed run
                       has been recorded
        """
        logger.info(f"Importing {filename or '<buffer>'} into '{target.dataset}' "
                    f"({target.kind.value})")

        run = ImportRun(
            warehouse=target.warehouse,
            dataset=target.dataset,
            kind=target.kind.value,
            filename=filename,
            created_by=created_by,
            created_at=datetime.utcnow()
        )

        try:
            self._emit_progress('parsing', 0, f"Parsing {filename or 'workbook'}")
            records = self.parse_buffer(data, target.kind, filename)

            self._emit_progress('insertion', 50, f"Parsed {len(records)} records")
            inserted = self.replace_dataset(target, records)

            run.status = ImportStatus.SUCCESS.value
            run.parsed = len(records)
            run.inserted = inserted
            run.completed_at = datetime.utcnow()
            self.session.add(run)
            self.session.commit()

            self._emit_progress('complete', 100, f"Imported {inserted} records")

        except Exception as e:
            logger.error(f"Import into '{target.dataset}' failed: {e}", exc_info=True)
            self.session.rollback()

            run.status = ImportStatus.FAILED.value
            run.parsed = 0
            run.inserted = 0
            run.error = {'error': type(e).__name__, 'message': str(e)}
            run.completed_at = datetime.utcnow()
            self.session.add(run)
            self.session.commit()
            raise

        logger.info(f"[UPLOAD] warehouse={target.warehouse} dataset={target.dataset} "
                    f"parsed={len(records)} inserted={inserted}")

        return {
            'warehouse': target.warehouse,
            'dataset': target.dataset,
            'kind': target.kind.value,
            'parsed': len(records),
            'inserted': inserted,
            'run_id': run.id
        }
