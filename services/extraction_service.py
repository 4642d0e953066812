"""
Row extraction for stock and price sheets.

Two layouts are supported:

- Stock sheets use fixed columns (A=code, C=description, F=category,
  H=stock) starting at row 10 and end at the first fully blank row.
- Price sheets keep the code in column A and the price in column B, either
  on the same row or one row below. The offset is detected from the first
  price that resolves and then applied to the rest of the sheet.

Both scans stop at a hard row cap so corrupt documents always terminate.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

from services.number_service import Number, NumberNormalizer
from services.sheet_service import DEFAULT_MAX_ROWS, Sheet

logger = logging.getLogger(__name__)

# Default configuration (can be overridden)
DEFAULT_STOCK_START_ROW = 10
DEFAULT_BLANK_RUN_LIMIT = 5

STOCK_COLUMNS = {
    'code': 'A',
    'description': 'C',
    'category': 'F',
    'stock': 'H',
}
PRICE_CODE_COLUMN = 'A'
PRICE_VALUE_COLUMN = 'B'
PRICE_OFFSET_CANDIDATES = (0, 1)


@dataclass
class StockRecord:
    """One inventory row. Stock stays text: sheets mix numbers and notes."""

    code: str
    description: str
    category: str
    stock: str
    row: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PriceRecord:
    """One price row. price is None when the cell could not be resolved."""

    code: str
    price: Optional[Number]
    row: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ParseOffset:
    """
    Row distance between a code cell and its price cell.

    Starts undetermined and is fixed at most once per scan.
    """

    def __init__(self):
        self.value: Optional[int] = None

    @property
    def is_fixed(self) -> bool:
        return self.value is not None

    def fix(self, value: int):
        """Fix the offset. Raises if it was already fixed."""
        if self.is_fixed:
            raise RuntimeError(f"Offset already fixed at {self.value}")
        if value not in PRICE_OFFSET_CANDIDATES:
            raise ValueError(f"Unsupported price offset: {value}")
        self.value = value

    def __repr__(self):
        return f"<ParseOffset(value={self.value})>"


class StockRowExtractor:
    """Extract inventory rows from the fixed A/C/F/H layout."""

    def __init__(self, start_row: int = DEFAULT_STOCK_START_ROW,
                 max_rows: int = DEFAULT_MAX_ROWS):
        self.start_row = start_row
        self.max_rows = max_rows

    def extract(self, sheet: Sheet) -> List[StockRecord]:
        """
        Scan from the start row until the first fully blank row.

        Args:
            sheet: Sheet to scan

        Returns:
            Stock records ordered by source row
        """
        records = []
        row = self.start_row

        while row <= self.max_rows:
            fields = {
                name: sheet.get_text(column, row)
                for name, column in STOCK_COLUMNS.items()
            }

            if not any(fields.values()):
                break

            records.append(StockRecord(row=row, **fields))
            row += 1
        else:
            logger.warning(f"Stock scan hit the row cap ({self.max_rows}) "
                           f"on sheet '{sheet.name}'")

        logger.info(f"Extracted {len(records)} stock rows from sheet '{sheet.name}'")
        return records


class PriceRowExtractor:
    """Extract (code, price) rows, auto-detecting the price row offset."""

    def __init__(self, max_rows: int = DEFAULT_MAX_ROWS,
                 blank_run_limit: int = DEFAULT_BLANK_RUN_LIMIT):
        self.max_rows = max_rows
        self.blank_run_limit = blank_run_limit
        # Offset found by the most recent extract() call, for reporting
        self.detected_offset: Optional[int] = None

    def _price_for_row(self, sheet: Sheet, row: int, offset: ParseOffset) -> Optional[Number]:
        """
        Read the price for a code row.

        While the offset is undetermined, the same row and the next row are
        tried in that order; the first that resolves fixes the offset.
        """
        if offset.is_fixed:
            return NumberNormalizer.normalize(
                sheet.get_raw(PRICE_VALUE_COLUMN, row + offset.value)
            )

        for candidate in PRICE_OFFSET_CANDIDATES:
            price = NumberNormalizer.normalize(
                sheet.get_raw(PRICE_VALUE_COLUMN, row + candidate)
            )
            if price is not None:
                offset.fix(candidate)
                logger.info(f"Price offset detected at row {row}: {candidate}")
                return price

        return None

    def extract(self, sheet: Sheet) -> List[PriceRecord]:
        """
        Scan from row 1 until a run of blank rows.

        A row counts if it has a code or a resolvable price. The rows of
        the terminating blank run are not included.

        Args:
            sheet: Sheet to scan

        Returns:
            Price records ordered by source row
        """
        records = []
        offset = ParseOffset()
        blank_run = 0
        row = 1

        while row <= self.max_rows:
            code = sheet.get_text(PRICE_CODE_COLUMN, row)
            price = self._price_for_row(sheet, row, offset)

            if code or price is not None:
                blank_run = 0
                records.append(PriceRecord(code=code, price=price, row=row))
            else:
                blank_run += 1
                if blank_run >= self.blank_run_limit:
                    break

            row += 1
        else:
            logger.warning(f"Price scan hit the row cap ({self.max_rows}) "
                           f"on sheet '{sheet.name}'")

        self.detected_offset = offset.value
        logger.info(f"Extracted {len(records)} price rows from sheet '{sheet.name}' "
                    f"(offset={offset.value})")
        return records


def extract_stock(sheet: Sheet, max_rows: int = DEFAULT_MAX_ROWS) -> List[StockRecord]:
    """Shortcut for StockRowExtractor().extract()."""
    return StockRowExtractor(max_rows=max_rows).extract(sheet)


def extract_prices(sheet: Sheet, max_rows: int = DEFAULT_MAX_ROWS) -> List[PriceRecord]:
    """Shortcut for PriceRowExtractor().extract()."""
    return PriceRowExtractor(max_rows=max_rows).extract(sheet)
