"""
Tests for field coercion of single-record edits.
"""

from services.coercion_service import coerce_field, coerce_update
from services.dataset_service import DatasetKind


class TestCoerceField:
    """Test coercion of single values."""

    def test_price_is_normalized(self):
        """Test that prices follow the separator rules."""
        assert coerce_field('price', '1.234,50') == 1234.5
        assert coerce_field('price', '102.800') == 102800
        assert coerce_field('price', 99) == 99

    def test_unreadable_price_keeps_text(self):
        """Test that an unreadable price is stored as trimmed text."""
        assert coerce_field('price', 'not-a-number') == 'not-a-number'
        assert coerce_field('price', '  consultar ') == 'consultar'

    def test_other_fields_are_trimmed_text(self):
        """Test that non-price fields become trimmed strings."""
        assert coerce_field('category', '  Tires  ') == 'Tires'
        assert coerce_field('stock', 12) == '12'
        assert coerce_field('code', ' X-100') == 'X-100'


class TestCoerceUpdate:
    """Test coercion of whole edit requests."""

    def test_price_dataset_fields(self):
        """Test that price datasets keep only code and price."""
        update = {'code': ' X-1 ', 'price': '1.234,50', 'category': 'ignored'}

        assert coerce_update(DatasetKind.PRICE, update) == {'code': 'X-1', 'price': 1234.5}

    def test_inventory_dataset_fields(self):
        """Test that inventory datasets keep code, description, category and stock."""
        update = {
            'code': 'A-1', 'description': ' Cubierta ', 'category': 'Tires',
            'stock': 4, 'price': '10', 'id': 99
        }

        assert coerce_update(DatasetKind.INVENTORY, update) == {
            'code': 'A-1', 'description': 'Cubierta', 'category': 'Tires', 'stock': '4'
        }

    def test_none_values_are_skipped(self):
        """Test that None means 'not provided'."""
        assert coerce_update(DatasetKind.PRICE, {'code': None, 'price': '5'}) == {'price': 5}

    def test_empty_update(self):
        """Test that an empty update coerces to nothing."""
        assert coerce_update(DatasetKind.INVENTORY, {}) == {}

    def test_oversized_price_does_not_raise(self):
        """Test that a 5000-digit price falls back instead of failing the edit."""
        raw = '1' * 5000

        assert coerce_field('price', raw) in (raw, (10 ** 5000 - 1) // 9)
