def test_health(client):
    rv = client.get('/health')
    assert rv.status_code == 200
    assert rv.get_json()['status'] == 'healthy'


def test_static_pages(client):
    for path in ('/', '/about', '/contact'):
        rv = client.get(path)
        assert rv.status_code == 200


def test_security_headers(client):
    rv = client.get('/')
    assert rv.headers['X-Content-Type-Options'] == 'nosniff'
    assert rv.headers['X-Frame-Options'] == 'SAMEORIGIN'
    assert 'Content-Security-Policy' in rv.headers


def test_verify_valid_certificate(client):
    rv = client.post('/verify', data={'vehicle_number': ' tn-01-ab-1234 '})
    assert rv.status_code == 200
    assert b'Status: <strong>VALID</strong>' in rv.data
    assert b'/certificate/T-TODAY' in rv.data


def test_verify_expired_certificate(client):
    rv = client.post('/verify', data={'vehicle_number': 'TN-33-CD-5678'})
    assert b'Status: <strong>EXPIRED</strong>' in rv.data


def test_verify_unknown_vehicle(client):
    rv = client.post('/verify', data={'vehicle_number': 'XX-00-ZZ-0000'})
    assert b'No records found for this vehicle number.' in rv.data


def test_verify_store_failure(app, client, monkeypatch):
    repository = app.extensions['portal_repository']

    def broken(vehicle_number):
        raise ConnectionError('store unreachable')

    monkeypatch.setattr(repository, 'find_tests_by_vehicle', broken)
    rv = client.post('/verify', data={'vehicle_number': 'TN-01-AB-1234'})
    assert rv.status_code == 200
    assert b'An error occurred while searching. Please try again.' in rv.data


def test_certificate_page(client):
    rv = client.get('/certificate/T-OLD')
    assert rv.status_code == 200
    assert b'TN-33-CD-5678' in rv.data
    assert b'2023-01-15' in rv.data
    assert b'EXPIRED' in rv.data


def test_certificate_not_found(client):
    assert client.get('/certificate/nope').status_code == 404
