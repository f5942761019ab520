from sqlalchemy.exc import OperationalError

CREATE_URL = '/api/auth/pathway/pathway/'


def test_pathway_lifecycle(client, auth_headers):
    r = client.post(CREATE_URL, json={'name': 'Algebra I'}, headers=auth_headers)
    assert r.status_code == 200
    body = r.json()
    assert body['status'] == 'success'
    assert body['httpStatus'] == 200
    assert body['message'] == 'Pathway created successfully'
    assert body['data'] == 'created'
    assert body['error'] is None

    dup = client.post(CREATE_URL, json={'name': 'Algebra I'}, headers=auth_headers)
    assert dup.status_code == 400
    dup_body = dup.json()
    assert dup_body['status'] == 'error'
    assert "Pathway with name 'Algebra I' already exists" in dup_body['message']
    assert 'already exists' in dup_body['error']

    upd = client.put('/api/auth/pathway/1', json={'name': 'Algebra II'}, headers=auth_headers)
    assert upd.status_code == 200
    assert upd.json()['data'] == 'updated'

    fetched = client.get('/api/pathway/1').json()['data']
    assert fetched['name'] == 'Algebra II'

    d1 = client.delete('/api/auth/pathway/1', headers=auth_headers)
    assert d1.status_code == 200
    assert d1.json()['data'] == 'deleted'

    d2 = client.delete('/api/auth/pathway/1', headers=auth_headers)
    assert d2.status_code == 404
    assert d2.json()['data'] is None
    assert d2.json()['message'] == 'Pathway not found with ID: 1'


def test_missing_pathway_returns_404(client, auth_headers):
    for _ in range(2):
        r = client.delete('/api/auth/pathway/42', headers=auth_headers)
        assert r.status_code == 404
        assert r.json()['data'] is None
    r = client.put('/api/auth/pathway/42', json={'name': 'Geometry'}, headers=auth_headers)
    assert r.status_code == 404
    assert r.json()['data'] is None
    assert client.get('/api/pathway/42').status_code == 404


def test_update_keeps_own_name_but_rejects_anothers(client, auth_headers):
    client.post(CREATE_URL, json={'name': 'Biology'}, headers=auth_headers)
    client.post(CREATE_URL, json={'name': 'Chemistry'}, headers=auth_headers)
    same = client.put('/api/auth/pathway/1', json={'name': 'Biology', 'description': 'cells'}, headers=auth_headers)
    assert same.status_code == 200
    clash = client.put('/api/auth/pathway/2', json={'name': 'Biology'}, headers=auth_headers)
    assert clash.status_code == 400
    assert 'Biology' in clash.json()['message']


def test_invalid_payload_is_400_envelope(client, auth_headers):
    r = client.post(CREATE_URL, json={'name': ''}, headers=auth_headers)
    assert r.status_code == 400
    body = r.json()
    assert body['status'] == 'error'
    assert body['message'] == 'Validation failed'
    assert 'name' in body['error']


def test_write_endpoints_require_token(client):
    r = client.post(CREATE_URL, json={'name': 'Physics'})
    assert r.status_code == 401
    assert r.json()['status'] == 'error'
    r2 = client.delete('/api/auth/pathway/1', headers={'Authorization': 'Bearer not.a.token'})
    assert r2.status_code == 401


def test_database_constraint_is_400(client, auth_headers, monkeypatch):
    client.post(CREATE_URL, json={'name': 'History'}, headers=auth_headers)
    # Skip the pre-check so the unique index is what rejects the row.
    monkeypatch.setattr(
        "eduverse.repositories.PathwayRepository.exists_by_name",
        lambda self, name, exclude_id=None: False,
    )
    r = client.post(CREATE_URL, json={'name': 'History'}, headers=auth_headers)
    assert r.status_code == 400
    assert 'UNIQUE constraint failed' in r.json()['error']


def test_unexpected_failure_is_500_without_details(client, auth_headers, monkeypatch, caplog):
    def boom(self, dto):
        raise RuntimeError("connection string secret=hunter2")

    monkeypatch.setattr("eduverse.services.PathwayService.create", boom)
    r = client.post(CREATE_URL, json={'name': 'Music'}, headers=auth_headers)
    assert r.status_code == 500
    body = r.json()
    assert body['error'] == 'Internal server error'
    assert 'hunter2' not in r.text
    assert any(rec.getMessage() == 'Failed to create pathway' and rec.exc_info for rec in caplog.records)


def test_database_error_is_500(client, auth_headers, monkeypatch):
    def fail(self, pathway):
        raise OperationalError("INSERT INTO pathway", {}, Exception("disk I/O error"))

    monkeypatch.setattr("eduverse.repositories.PathwayRepository.create", fail)
    r = client.post(CREATE_URL, json={'name': 'Art'}, headers=auth_headers)
    assert r.status_code == 500
    assert 'disk' not in r.text


def test_public_listing_pages_by_id(client, auth_headers):
    for name in ('A', 'B', 'C'):
        client.post(CREATE_URL, json={'name': name}, headers=auth_headers)
    r = client.get('/api/pathway/', params={'limit': 2, 'offset': 1})
    assert r.status_code == 200
    page = r.json()['data']
    assert [p['name'] for p in page['items']] == ['B', 'C']
    assert page['total'] == 3
    assert page['limit'] == 2
    empty = client.get('/api/pathway/', params={'offset': 10}).json()['data']
    assert empty['items'] == []
    assert empty['limit'] == 10


def test_out_of_range_values_are_400(client, auth_headers):
    huge = 2**63
    assert client.get(f'/api/pathway/{huge}').status_code == 400
    r = client.put(f'/api/auth/pathway/{huge}', json={'name': 'Logic'}, headers=auth_headers)
    assert r.status_code == 400
    for _ in range(2):
        d = client.delete(f'/api/auth/pathway/{huge}', headers=auth_headers)
        assert d.status_code == 400
        assert d.json()['message'] == 'Validation failed'
    assert client.get('/api/pathway/', params={'offset': huge}).status_code == 400
    assert client.get('/api/pathway/', params={'limit': huge}).status_code == 400


def test_largest_offset_is_an_empty_page(client):
    r = client.get('/api/pathway/', params={'offset': 2**63 - 1})
    assert r.status_code == 200
    assert r.json()['data']['items'] == []
