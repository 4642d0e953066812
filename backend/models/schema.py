"""
SQLAlchemy models for the stock sheet import system.

This module defines the database schema using SQLAlchemy ORM,
matching the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    JSON, Column, Integer, String, Text, Numeric, TIMESTAMP, Index, text
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), 'postgresql')


class StockItem(Base):
    """One inventory row imported from a stock sheet."""

    __tablename__ = 'stock_items'
    __table_args__ = (
        Index('idx_stock_items_dataset', 'dataset'),
        Index('idx_stock_items_dataset_code', 'dataset', 'code'),
        {'comment': 'Inventory rows, one dataset per warehouse'}
    )

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )
    dataset = Column(
        String(255),
        nullable=False,
        comment='Dataset name e.g., stock_olav'
    )
    row_num = Column(
        Integer,
        nullable=False,
        comment='1-based source row number'
    )
    code = Column(
        Text,
        nullable=False,
        server_default='',
        comment='Item code (column A)'
    )
    description = Column(
        Text,
        nullable=False,
        server_default='',
        comment='Item description (column C)'
    )
    category = Column(
        Text,
        nullable=False,
        server_default='',
        comment='Item category (column F)'
    )
    stock = Column(
        Text,
        nullable=False,
        server_default='',
        comment='Stock quantity as written in the sheet (column H)'
    )
    uploaded_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False,
        comment='Ingestion timestamp'
    )
    updated_at = Column(
        TIMESTAMP,
        nullable=True,
        comment='Last edit timestamp'
    )

    def to_dict(self) -> dict:
        """Convert item to its API representation."""
        return {
            'code': self.code,
            'description': self.description,
            'category': self.category,
            'stock': self.stock,
            'uploaded_at': self.uploaded_at.isoformat() if self.uploaded_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<StockItem(dataset='{self.dataset}', code='{self.code}', row={self.row_num})>"


class PriceItem(Base):
    """One (code, price) row imported from a price sheet."""

    __tablename__ = 'price_items'
    __table_args__ = (
        Index('idx_price_items_dataset', 'dataset'),
        Index('idx_price_items_dataset_code', 'dataset', 'code'),
        {'comment': 'Price rows'}
    )

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )
    dataset = Column(
        String(255),
        nullable=False,
        comment='Dataset name e.g., prices'
    )
    row_num = Column(
        Integer,
        nullable=False,
        comment='1-based source row number of the code'
    )
    code = Column(
        Text,
        nullable=False,
        server_default='',
        comment='Item code (column A)'
    )
    price = Column(
        Numeric(asdecimal=False),
        nullable=True,
        comment='Resolved price (NULL if the cell could not be read)'
    )
    price_text = Column(
        Text,
        nullable=True,
        comment='Raw text of an edited price that could not be normalized'
    )
    uploaded_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False,
        comment='Ingestion timestamp'
    )
    updated_at = Column(
        TIMESTAMP,
        nullable=True,
        comment='Last edit timestamp'
    )

    def __repr__(self):
        return f"<PriceItem(dataset='{self.dataset}', code='{self.code}', price={self.price})>"
