"""
Sheet service - Load the first worksheet of a workbook and address its cells.

Workbooks arrive as raw bytes. Modern workbooks (.xlsx/.xlsm) are read with
openpyxl, legacy Excel 97-2003 files (.xls) with xlrd. Either way the result
is a read-only Sheet snapshot that can be addressed by column letter and
1-based row number.
"""

import io
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Dict, Iterator, Optional, Tuple

import openpyxl
import xlrd
from openpyxl.utils import column_index_from_string, get_column_letter

logger = logging.getLogger(__name__)

XLSX_SIGNATURE = b'PK\x03\x04'
XLS_SIGNATURE = b'\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1'

# Scan bounds shared with the row extractors
DEFAULT_MAX_ROWS = 200_000
DEFAULT_MAX_COLUMN = column_index_from_string('H')

# Regex to match cell addresses (e.g., A1, B24, Sheet1!AA100)
ADDRESS_PATTERN = re.compile(r'^([A-Z]+)(\d+)$')


def parse_address(address: str) -> Tuple[str, int]:
    """
    Split a cell address into column letters and 1-based row.

    Examples:
        A1 → ('A', 1)
        b24 → ('B', 24)
        Sheet1!AA100 → ('AA', 100)

    Raises:
        ValueError: If the address format is invalid
    """
    if '!' in address:
        address = address.split('!')[-1]

    match = ADDRESS_PATTERN.match(address.strip().upper())
    if not match:
        raise ValueError(f"Invalid cell address: {address}")

    column, row_str = match.groups()
    row = int(row_str)
    if row < 1:
        raise ValueError(f"Invalid cell address: {address}")

    return column, row


def to_address(column: str, row: int) -> str:
    """Build a cell address such as 'H10' from a column and a row."""
    return f"{column.upper()}{row}"


def cell_text(value: Any) -> str:
    """
    Render a raw cell value as trimmed text.

    Integral floats lose their trailing '.0' (xlrd reads every number as
    float, so a code typed as 1234 must come back as "1234").
    """
    if value is None:
        return ''
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value).strip()


@dataclass(frozen=True)
class SheetCell:
    """A written cell: raw value and/or display text."""

    value: Any = None
    text: Optional[str] = None

    def as_text(self) -> str:
        """Trimmed text form, preferring the raw value over display text."""
        if self.value is not None:
            return cell_text(self.value)
        if self.text is not None:
            return self.text.strip()
        return ''

    @property
    def raw(self) -> Any:
        """Raw value if present, otherwise the display text."""
        return self.value if self.value is not None else self.text


class Sheet:
    """
    Read-only snapshot of one worksheet.

    Cells are keyed by (row, column index), both 1-based. Addresses that
    were never written have no entry, so get() returns None for them
    while a cell written with empty text comes back as SheetCell('').
    """

    def __init__(self, cells: Optional[Dict[Tuple[int, int], SheetCell]] = None,
                 name: str = 'Sheet1'):
        self.name = name
        self._cells: Dict[Tuple[int, int], SheetCell] = dict(cells or {})

    @classmethod
    def from_values(cls, values: Dict[str, Any], name: str = 'Sheet1') -> 'Sheet':
        """
        Build a sheet from an address → value mapping.

        Values that are already SheetCell instances are kept as they are.

        Example:
            Sheet.from_values({'A1': 'X-100', 'B1': '1.234,50'})
        """
        cells = {}
        for address, value in values.items():
            column, row = parse_address(address)
            cell = value if isinstance(value, SheetCell) else SheetCell(value=value)
            cells[(row, column_index_from_string(column))] = cell
        return cls(cells, name=name)

    def get(self, column: str, row: int) -> Optional[SheetCell]:
        """
        Locate a cell by column letter and 1-based row.

        Returns:
            The cell, or None if it was never written or lies outside the
            used range

        Raises:
            ValueError: If the column is not a valid column name
        """
        if row < 1:
            return None
        col_idx = column_index_from_string(column.upper())
        return self._cells.get((row, col_idx))

    def get_text(self, column: str, row: int) -> str:
        """Trimmed text of a cell, '' when absent."""
        cell = self.get(column, row)
        return cell.as_text() if cell is not None else ''

    def get_raw(self, column: str, row: int) -> Any:
        """Raw value (or display text) of a cell, None when absent."""
        cell = self.get(column, row)
        return cell.raw if cell is not None else None

    @property
    def max_row(self) -> int:
        """Highest written row, 0 for an empty sheet."""
        return max((row for row, _ in self._cells), default=0)

    def addresses(self) -> Iterator[str]:
        """Iterate written addresses in row-major order."""
        for row, col in sorted(self._cells):
            yield f"{get_column_letter(col)}{row}"

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self):
        return f"<Sheet(name='{self.name}', cells={len(self._cells)})>"


class SheetReader:
    """
    Read the first worksheet out of a workbook byte buffer.

    Only rows up to max_rows + 1 and columns up to max_column are loaded,
    so a stray formatted cell at the far end of a sheet costs nothing.
    The extra row lets a price one row below the last scanned code
    resolve.

    Unreadable documents never raise: they are logged and come back as an
    empty Sheet, which every extractor turns into an empty record list.
    """

    def __init__(self, max_rows: int = DEFAULT_MAX_ROWS,
                 max_column: int = DEFAULT_MAX_COLUMN):
        self.max_rows = max_rows
        self.max_column = max_column

    @property
    def row_limit(self) -> int:
        """Last row loaded from a worksheet."""
        return self.max_rows + 1

    @staticmethod
    def detect_format(data: bytes) -> Optional[str]:
        """
        Detect workbook format from the file signature.

        Returns:
            'xlsx' for zip-based workbooks, 'xls' for OLE2 workbooks,
            None for anything else
        """
        if data.startswith(XLSX_SIGNATURE):
            return 'xlsx'
        if data.startswith(XLS_SIGNATURE):
            return 'xls'
        return None

    def read_first_sheet(self, data: bytes, filename: Optional[str] = None) -> Sheet:
        """
        Parse a workbook and return its first worksheet.

        Args:
            data: Raw workbook bytes
            filename: Original filename, used for logging only

        Returns:
            Sheet snapshot (empty if the document cannot be read)
        """
        label = filename or '<buffer>'

        if not data:
            logger.warning(f"Empty document: {label}")
            return Sheet(name='')

        fmt = self.detect_format(data)
        if fmt is None:
            logger.warning(f"Unrecognized workbook format for {label}")
            return Sheet(name='')

        try:
            if fmt == 'xls':
                sheet = self._read_xls(data)
            else:
                sheet = self._read_xlsx(data)
        except Exception as e:
            logger.warning(f"Could not read workbook {label}: {e}")
            return Sheet(name='')

        logger.info(f"Loaded sheet '{sheet.name}' from {label} ({fmt}): "
                    f"{len(sheet)} cells, {sheet.max_row} rows")
        return sheet

    def _read_xlsx(self, data: bytes) -> Sheet:
        """Stream the first worksheet with openpyxl (cached values, no formulas)."""
        wb = openpyxl.load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        try:
            if not wb.worksheets:
                return Sheet(name='')

            ws = wb.worksheets[0]
            cells = {}
            rows = ws.iter_rows(min_row=1, max_row=self.row_limit,
                                min_col=1, max_col=self.max_column,
                                values_only=True)
            for row_idx, row in enumerate(rows, start=1):
                for col_idx, value in enumerate(row, start=1):
                    if value is not None:
                        cells[(row_idx, col_idx)] = SheetCell(value=value)

            return Sheet(cells, name=ws.title)
        finally:
            wb.close()

    def _read_xls(self, data: bytes) -> Sheet:
        """Load the first worksheet of a legacy .xls workbook with xlrd."""
        wb = xlrd.open_workbook(file_contents=data, on_demand=True)
        try:
            if wb.nsheets == 0:
                return Sheet(name='')

            ws = wb.sheet_by_index(0)
            cells = {}
            for row_idx in range(min(ws.nrows, self.row_limit)):
                for col_idx in range(min(ws.ncols, self.max_column)):
                    cell = ws.cell(row_idx, col_idx)
                    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
                        continue
                    cells[(row_idx + 1, col_idx + 1)] = SheetCell(
                        value=self._xls_value(cell, wb.datemode)
                    )

            return Sheet(cells, name=ws.name)
        finally:
            wb.release_resources()

    @staticmethod
    def _xls_value(cell, datemode: int) -> Any:
        """Convert an xlrd cell to the value openpyxl would report."""
        if cell.ctype == xlrd.XL_CELL_ERROR:
            # Same '#DIV/0!' text openpyxl reports for error cells
            return xlrd.error_text_from_code.get(cell.value, '#N/A')
        if cell.ctype == xlrd.XL_CELL_BOOLEAN:
            return bool(cell.value)
        if cell.ctype == xlrd.XL_CELL_DATE:
            try:
                return xlrd.xldate_as_datetime(cell.value, datemode)
            except xlrd.xldate.XLDateError:
                return cell.value
        return cell.value


def load_first_sheet(data: bytes, filename: Optional[str] = None,
                     max_rows: int = DEFAULT_MAX_ROWS) -> Sheet:
    """Shortcut for SheetReader(max_rows).read_first_sheet()."""
    return SheetReader(max_rows=max_rows).read_first_sheet(data, filename)
