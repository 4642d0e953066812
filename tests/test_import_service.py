"""
Tests for dataset import and item editing against the database.
"""

import pytest

from backend.models.import_run import ImportRun, ImportStatus
from backend.models.schema import PriceItem, StockItem
from services.dataset_service import resolve_dataset
from services.item_service import ItemService
from services.stock_import_service import StockImportService


class TestStockImport:
    """Test replace-all imports of stock sheets."""

    def test_import_stock_sheet(self, session, stock_workbook):
        """Test that a stock sheet lands in its dataset in row order."""
        target = resolve_dataset('olav')

        result = StockImportService(session).import_buffer(
            stock_workbook, target, filename='olav.xlsx'
        )

        assert result['dataset'] == 'stock_olav'
        assert result['kind'] == 'inventory'
        assert result['parsed'] == 3
        assert result['inserted'] == 3

        items = ItemService(session).list_stock(target)
        assert [item.code for item in items] == ['A-1', 'A-2', '1234']
        assert items[1].stock == '3 (reservado)'
        assert all(item.uploaded_at is not None for item in items)

    def test_import_replaces_previous_contents(self, session, make_workbook):
        """Test that a second upload replaces the first."""
        target = resolve_dataset('polo')
        service = StockImportService(session)

        service.import_buffer(make_workbook({'A10': 'OLD-1', 'A11': 'OLD-2'}), target)
        service.import_buffer(make_workbook({'A10': 'NEW-1'}), target)

        codes = [item.code for item in ItemService(session).list_stock(target)]
        assert codes == ['NEW-1']

    def test_import_leaves_other_datasets(self, session, make_workbook):
        """Test that only the target dataset is replaced."""
        service = StockImportService(session)

        service.import_buffer(make_workbook({'A10': 'P-1'}), resolve_dataset('polo'))
        service.import_buffer(make_workbook({'A10': 'C-1'}), resolve_dataset('cba'))

        assert session.query(StockItem).filter_by(dataset='stock_polo').count() == 1
        assert session.query(StockItem).filter_by(dataset='stock_cba').count() == 1

    def test_import_price_sheet(self, session, price_workbook):
        """Test that a price sheet stores resolved prices."""
        target = resolve_dataset('prices')

        result = StockImportService(session).import_buffer(price_workbook, target)

        assert result['kind'] == 'price'
        assert result['inserted'] == 3
        assert ItemService(session).list_prices(target) == [
            {'code': 'X-100', 'price': 1234.5},
            {'code': 'X-200', 'price': 102800},
            {'code': 'X-300', 'price': None},
        ]

    def test_unreadable_document_empties_dataset(self, session, make_workbook):
        """Test that garbage bytes parse to zero records without raising."""
        target = resolve_dataset('olav')
        service = StockImportService(session)
        service.import_buffer(make_workbook({'A10': 'A-1'}), target)

        result = service.import_buffer(b'not a workbook', target, filename='broken.xlsx')

        assert result['parsed'] == 0
        assert ItemService(session).list_stock(target) == []

    def test_progress_callback(self, session, stock_workbook):
        """Test that progress is reported through the callback."""
        stages = []
        service = StockImportService(
            session, progress_callback=lambda stage, percent, message: stages.append(stage)
        )

        service.import_buffer(stock_workbook, resolve_dataset('olav'))

        assert stages[0] == 'parsing'
        assert stages[-1] == 'complete'


class TestImportRuns:
    """Test the upload history."""

    def test_successful_run_is_recorded(self, session, stock_workbook):
        """Test that a successful import leaves a success run."""
        result = StockImportService(session).import_buffer(
            stock_workbook, resolve_dataset('olav'), filename='olav.xlsx', created_by='tester'
        )

        run = session.query(ImportRun).filter_by(id=result['run_id']).one()
        assert run.status == ImportStatus.SUCCESS.value
        assert run.parsed == 3
        assert run.filename == 'olav.xlsx'
        assert run.created_by == 'tester'
        assert run.duration_seconds() >= 0

    def test_failed_run_is_recorded(self, session, make_workbook, monkeypatch):
        """Test that a database failure is recorded and re-raised."""
        target = resolve_dataset('olav')
        service = StockImportService(session)
        service.import_buffer(make_workbook({'A10': 'KEEP'}), target)

        def broken_replace(target, records):
            session.query(StockItem).filter_by(dataset=target.dataset).delete()
            raise RuntimeError('disk full')

        monkeypatch.setattr(service, 'replace_dataset', broken_replace)

        with pytest.raises(RuntimeError):
            service.import_buffer(make_workbook({'A10': 'NEW'}), target)

        failed = session.query(ImportRun).filter_by(status='failed').one()
        assert failed.error == {'error': 'RuntimeError', 'message': 'disk full'}

        codes = [item.code for item in ItemService(session).list_stock(target)]
        assert codes == ['KEEP']


class TestItemEdits:
    """Test single-item edits."""

    def test_edit_price(self, session, price_workbook):
        """Test that an edited price is normalized."""
        target = resolve_dataset('prices')
        StockImportService(session).import_buffer(price_workbook, target)
        service = ItemService(session)

        assert service.update_item(target, 'X-100', {'price': '2.000,75'}) is True

        prices = {entry['code']: entry['price'] for entry in service.list_prices(target)}
        assert prices['X-100'] == 2000.75

        item = session.query(PriceItem).filter_by(code='X-100').one()
        assert item.updated_at is not None

    def test_edit_price_with_text(self, session, price_workbook):
        """Test that an unreadable price is kept as text and listed as null."""
        target = resolve_dataset('prices')
        StockImportService(session).import_buffer(price_workbook, target)
        service = ItemService(session)

        service.update_item(target, 'X-200', {'price': 'a convenir'})

        item = session.query(PriceItem).filter_by(code='X-200').one()
        assert item.price is None
        assert item.price_text == 'a convenir'

        prices = {entry['code']: entry['price'] for entry in service.list_prices(target)}
        assert prices['X-200'] is None

    def test_edit_stock_fields(self, session, stock_workbook):
        """Test that inventory edits store trimmed text and ignore other fields."""
        target = resolve_dataset('olav')
        StockImportService(session).import_buffer(stock_workbook, target)
        service = ItemService(session)

        service.update_item(target, 'A-1', {'stock': 20, 'category': ' Llantas ', 'price': 5})

        item = service.list_stock(target)[0]
        assert item.stock == '20'
        assert item.category == 'Llantas'

    def test_edit_code(self, session, stock_workbook):
        """Test renaming an item through its code."""
        target = resolve_dataset('olav')
        StockImportService(session).import_buffer(stock_workbook, target)
        service = ItemService(session)

        assert service.update_item(target, 'A-2', {'code': 'A-2B'}) is True
        assert service.update_item(target, 'A-2', {'code': 'A-2C'}) is False

    def test_first_match_is_updated(self, session, make_workbook):
        """Test that only the first item with a duplicated code changes."""
        target = resolve_dataset('olav')
        StockImportService(session).import_buffer(
            make_workbook({'A10': 'DUP', 'H10': 1, 'A11': 'DUP', 'H11': 2}), target
        )
        service = ItemService(session)

        service.update_item(target, 'DUP', {'stock': '9'})

        assert [item.stock for item in service.list_stock(target)] == ['9', '2']

    def test_numeric_code_lookup(self, session, stock_workbook):
        """Test that numeric codes match their text form."""
        target = resolve_dataset('olav')
        StockImportService(session).import_buffer(stock_workbook, target)

        assert ItemService(session).update_item(target, 1234, {'stock': '1'}) is True

    def test_unknown_code(self, session, stock_workbook):
        """Test that an unknown code reports no match."""
        target = resolve_dataset('olav')
        StockImportService(session).import_buffer(stock_workbook, target)

        assert ItemService(session).update_item(target, 'NOPE', {'stock': '1'}) is False


class TestPriceStorage:
    """Test how prices are stored and read back."""

    def test_price_column_is_unconstrained(self):
        """Test that the price column carries no precision or scale."""
        price_type = PriceItem.__table__.c.price.type

        assert price_type.precision is None
        assert price_type.scale is None

    def test_large_price_round_trips(self, session, make_workbook):
        """Test that a price of 10**18 is stored and listed."""
        target = resolve_dataset('prices')
        StockImportService(session).import_buffer(
            make_workbook({'A1': 'BIG', 'B1': '1.000.000.000.000.000.000'}), target
        )

        assert ItemService(session).list_prices(target) == [{'code': 'BIG', 'price': 10 ** 18}]

    def test_integral_prices_listed_as_int(self, session, price_workbook):
        """Test that integral prices come back as int."""
        target = resolve_dataset('prices')
        StockImportService(session).import_buffer(price_workbook, target)

        prices = ItemService(session).list_prices(target)

        assert isinstance(prices[1]['price'], int)
        assert prices[1]['price'] == 102800

    def test_import_respects_row_cap(self, session, make_workbook):
        """Test that the service cap bounds the reader and the extractor."""
        values = {}
        for row in range(1, 41):
            values[f'A{row}'] = f'P{row}'
            values[f'B{row + 1}'] = row
        target = resolve_dataset('prices')

        result = StockImportService(session, max_rows=30).import_buffer(
            make_workbook(values), target
        )

        assert result['parsed'] == 30
        assert ItemService(session).list_prices(target)[-1] == {'code': 'P30', 'price': 30}
