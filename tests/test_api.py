"""
Tests for the HTTP API.

Requests go through FastAPI's TestClient against the in-memory test
database.
"""

from backend.models.schema import PriceItem


def upload(client, data, warehouse=None, filename='sheet.xlsx', custom_name=None):
    """Post a workbook to /upload."""
    form = {}
    if warehouse is not None:
        form['warehouse'] = warehouse
    if custom_name is not None:
        form['custom_name'] = custom_name
    return client.post(
        '/upload',
        files={'file': (filename, data, 'application/octet-stream')},
        data=form
    )


class TestUpload:
    """Test POST /upload."""

    def test_upload_stock(self, client, stock_workbook):
        """Test that a stock sheet upload reports its counts."""
        response = upload(client, stock_workbook, warehouse='olav')

        assert response.status_code == 200
        body = response.json()
        assert body['ok'] is True
        assert body['dataset'] == 'stock_olav'
        assert body['kind'] == 'inventory'
        assert body['parsed'] == 3
        assert body['inserted'] == 3
        assert body['run_id'] is not None

    def test_upload_prices(self, client, price_workbook):
        """Test that a price sheet upload uses the price layout."""
        response = upload(client, price_workbook, warehouse='prices')

        assert response.status_code == 200
        assert response.json()['kind'] == 'price'
        assert response.json()['parsed'] == 3

    def test_upload_custom(self, client, stock_workbook):
        """Test uploads to a custom dataset."""
        response = upload(client, stock_workbook, warehouse='custom', custom_name='Depósito Sur')

        assert response.status_code == 200
        assert response.json()['dataset'] == 'stock_depsito_sur'

    def test_missing_file(self, client):
        """Test that an upload without a file is a 400."""
        response = client.post('/upload', data={'warehouse': 'olav'})

        assert response.status_code == 400
        assert response.json()['ok'] is False
        assert response.json()['error'] == 'Missing file'

    def test_missing_warehouse(self, client, stock_workbook):
        """Test that an upload without a warehouse is a 400."""
        response = upload(client, stock_workbook)

        assert response.status_code == 400
        assert response.json()['error'] == 'Missing warehouse'

    def test_custom_without_name(self, client, stock_workbook):
        """Test that 'custom' without a name is a 400."""
        response = upload(client, stock_workbook, warehouse='custom')

        assert response.status_code == 400

    def test_disallowed_extension(self, client, stock_workbook):
        """Test that only workbook extensions are accepted."""
        response = upload(client, stock_workbook, warehouse='olav', filename='sheet.csv')

        assert response.status_code == 400
        assert '.csv' in response.json()['error']

    def test_unreadable_workbook(self, client):
        """Test that an unreadable workbook imports zero records."""
        response = upload(client, b'garbage', warehouse='olav')

        assert response.status_code == 200
        assert response.json()['parsed'] == 0


class TestListing:
    """Test GET /api/stock."""

    def test_list_inventory(self, client, stock_workbook):
        """Test that inventory listings come in an envelope."""
        upload(client, stock_workbook, warehouse='olav')

        response = client.get('/api/stock', params={'warehouse': 'olav'})

        assert response.status_code == 200
        body = response.json()
        assert body['dataset'] == 'stock_olav'
        assert [item['code'] for item in body['items']] == ['A-1', 'A-2', '1234']
        assert body['items'][0]['stock'] == '12'

    def test_list_prices(self, client, price_workbook):
        """Test that price listings are a flat array."""
        upload(client, price_workbook, warehouse='prices')

        response = client.get('/api/stock', params={'warehouse': 'prices'})

        assert response.status_code == 200
        assert response.json() == [
            {'code': 'X-100', 'price': 1234.5},
            {'code': 'X-200', 'price': 102800},
            {'code': 'X-300', 'price': None},
        ]
        assert isinstance(response.json()[1]['price'], int)

    def test_list_empty_dataset(self, client):
        """Test listing a dataset that was never uploaded."""
        response = client.get('/api/stock', params={'warehouse': 'polo'})

        assert response.status_code == 200
        assert response.json()['items'] == []

    def test_list_missing_warehouse(self, client):
        """Test that listing without a warehouse is a 400."""
        response = client.get('/api/stock')

        assert response.status_code == 400


class TestEdit:
    """Test PUT /api/stock/item."""

    def test_edit_price(self, client, session, price_workbook):
        """Test that an edited price is normalized before storage."""
        upload(client, price_workbook, warehouse='prices')

        response = client.put('/api/stock/item', json={
            'warehouse': 'prices',
            'original_code': 'X-100',
            'update': {'price': '1.500,25'}
        })

        assert response.status_code == 200
        assert response.json() == {'ok': True, 'updated': 1}
        assert session.query(PriceItem).filter_by(code='X-100').one().price == 1500.25

    def test_edit_inventory(self, client, stock_workbook):
        """Test an inventory edit followed by a listing."""
        upload(client, stock_workbook, warehouse='olav')

        client.put('/api/stock/item', json={
            'warehouse': 'olav',
            'original_code': 'A-1',
            'update': {'stock': ' 7 ', 'description': 'Cubierta 185/65'}
        })

        items = client.get('/api/stock', params={'warehouse': 'olav'}).json()['items']
        assert items[0]['stock'] == '7'
        assert items[0]['description'] == 'Cubierta 185/65'

    def test_unknown_code(self, client, stock_workbook):
        """Test that an unknown code is a 404."""
        upload(client, stock_workbook, warehouse='olav')

        response = client.put('/api/stock/item', json={
            'warehouse': 'olav',
            'original_code': 'NOPE',
            'update': {'stock': '1'}
        })

        assert response.status_code == 404
        assert response.json()['error'] == 'No item with that code'

    def test_missing_fields(self, client):
        """Test that missing warehouse, code or update are 400s."""
        payloads = [
            {'original_code': 'A-1', 'update': {}},
            {'warehouse': 'olav', 'update': {}},
            {'warehouse': 'olav', 'original_code': 'A-1'},
        ]

        for payload in payloads:
            response = client.put('/api/stock/item', json=payload)
            assert response.status_code == 400


class TestImportRuns:
    """Test GET /api/import/runs."""

    def test_runs_are_listed(self, client, stock_workbook, price_workbook):
        """Test that every upload leaves a run in the history."""
        upload(client, stock_workbook, warehouse='olav')
        upload(client, price_workbook, warehouse='prices')

        response = client.get('/api/import/runs')

        assert response.status_code == 200
        body = response.json()
        assert body['total'] == 2
        assert {run['dataset'] for run in body['items']} == {'stock_olav', 'prices'}

    def test_runs_filter_by_dataset(self, client, stock_workbook, price_workbook):
        """Test filtering the history by dataset."""
        upload(client, stock_workbook, warehouse='olav')
        upload(client, price_workbook, warehouse='prices')

        body = client.get('/api/import/runs', params={'dataset': 'prices'}).json()

        assert body['total'] == 1
        assert body['items'][0]['kind'] == 'price'

    def test_get_run(self, client, stock_workbook):
        """Test fetching a single run and a missing one."""
        run_id = upload(client, stock_workbook, warehouse='olav').json()['run_id']

        assert client.get(f'/api/import/runs/{run_id}').json()['status'] == 'success'
        assert client.get('/api/import/runs/9999').status_code == 404


class TestHealth:
    """Test health and utility endpoints."""

    def test_health(self, client):
        """Test the health check against the test database."""
        response = client.get('/health')

        assert response.status_code == 200
        assert response.json()['database'] == 'connected'

    def test_health_db(self, client):
        """Test the database ping."""
        assert client.get('/health/db').json() == {'ok': True, 'error': None}

    def test_ping(self, client):
        """Test the ping endpoint."""
        assert client.get('/api/ping').json() == {'ping': 'pong'}

    def test_unknown_route(self, client):
        """Test that unknown routes return a JSON 404."""
        response = client.get('/nope')

        assert response.status_code == 404
        assert response.json()['ok'] is False
        assert response.json()['error'] == 'Resource not found'
