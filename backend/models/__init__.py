"""Models package for the stock sheet import system."""
from backend.models.schema import Base, StockItem, PriceItem
from backend.models.import_run import ImportRun, ImportStatus

__all__ = ['Base', 'StockItem', 'PriceItem', 'ImportRun', 'ImportStatus']
