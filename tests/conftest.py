"""
Pytest configuration and fixtures for stock sheet import tests.
"""

import io
import os

# Keep the API off the production database and log file during tests
os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('LOG_FILE', '')

import openpyxl
import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.models.schema import Base

# Load environment
load_dotenv()

# Test database URL (in-memory SQLite unless overridden)
TEST_DATABASE_URL = os.getenv('TEST_DATABASE_URL', 'sqlite://')


@pytest.fixture(scope='function')
def engine():
    """Create a test database engine with a fresh schema."""
    if TEST_DATABASE_URL.startswith('sqlite'):
        eng = create_engine(
            TEST_DATABASE_URL,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool
        )
    else:
        eng = create_engine(TEST_DATABASE_URL)

    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture(scope='function')
def session(engine):
    """Create a new database session for a test."""
    Session = sessionmaker(bind=engine)
    sess = Session()

    yield sess

    sess.close()


@pytest.fixture
def client(session):
    """FastAPI test client whose requests share the test session."""
    from api.dependencies import get_db
    from api.main import app

    def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_workbook():
    """
    Build .xlsx bytes from an address → value mapping.

    Usage:
        data = make_workbook({'A1': 'X-100', 'B1': '1.234,50'})
    """
    def _make(values, title='Sheet1'):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = title
        for address, value in values.items():
            ws[address] = value
        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    return _make


@pytest.fixture
def stock_workbook(make_workbook):
    """Stock sheet with three items in rows 10-12."""
    return make_workbook({
        'A1': 'Inventario Olav',
        'A9': 'Codigo', 'C9': 'Descripcion', 'F9': 'Rubro', 'H9': 'Stock',
        'A10': 'A-1', 'C10': 'Cubierta 175/70', 'F10': 'Cubiertas', 'H10': 12,
        'A11': 'A-2', 'C11': 'Camara R14', 'F11': 'Camaras', 'H11': '3 (reservado)',
        'A12': 1234, 'C12': 'Protector', 'F12': 'Protectores', 'H12': 0,
    })


@pytest.fixture
def price_workbook(make_workbook):
    """Price sheet with each price one row below its code."""
    return make_workbook({
        'A1': 'X-100', 'B2': '1.234,50',
        'A2': 'X-200', 'B3': '102.800',
        'A3': 'X-300', 'B4': 'consultar',
    })
