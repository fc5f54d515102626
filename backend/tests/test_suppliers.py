from flask import Flask
from tests.test_utils_seed import tenant, item


def test_supplier_crud(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    resp = client.post('/purchase/suppliers', json={'name': 'Loom Works', 'category': 'Machinery',
                                                   'contact_email': 'sales@loom.example'}, headers=headers)
    assert resp.status_code == 201
    created = resp.get_json()['data']
    assert created['status'] == 'ACTIVE'
    assert created['company_id'] == company.id
    sid = created['id']
    got = client.get(f'/purchase/suppliers/{sid}', headers=headers).get_json()['data']
    assert got['name'] == 'Loom Works'
    resp = client.put(f'/purchase/suppliers/{sid}', json={'phone': '+1 555 0100', 'category': 'Spares'}, headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()['data']['category'] == 'Spares'
    listing = client.get('/purchase/suppliers?category=Spares', headers=headers).get_json()['data']
    assert [s['id'] for s in listing['data']] == [sid]


def test_supplier_validation(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    assert client.post('/purchase/suppliers', json={}, headers=headers).status_code == 400
    assert client.post('/purchase/suppliers', json={'name': 'Acme'}, headers=headers).status_code == 400
    resp = client.put(f'/purchase/suppliers/{supplier.id}', json={'status': 'INACTIVE'}, headers=headers)
    assert resp.status_code == 400
    assert client.get('/purchase/suppliers/abc', headers=headers).status_code == 400
    assert client.get('/purchase/suppliers/999999', headers=headers).status_code == 404
    assert client.get('/purchase/suppliers?status=GONE', headers=headers).status_code == 400


def test_supplier_names_are_per_tenant(app_context: Flask):
    client = app_context.test_client()
    _, _, _, headers = tenant()
    # every tenant is seeded with an 'Acme'; another tenant may reuse the name
    resp = client.post('/purchase/suppliers', json={'name': 'Shared Name'}, headers=headers)
    assert resp.status_code == 201
    _, _, _, other_headers = tenant()
    assert client.post('/purchase/suppliers', json={'name': 'Shared Name'}, headers=other_headers).status_code == 201


def test_deactivate_blocks_new_orders(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    resp = client.post(f'/purchase/suppliers/{supplier.id}/deactivate', headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()['data']['status'] == 'INACTIVE'
    assert client.post(f'/purchase/suppliers/{supplier.id}/deactivate', headers=headers).status_code == 400
    resp = client.post('/purchase/orders', json={'supplier_id': supplier.id, 'items': [item()]}, headers=headers)
    assert resp.status_code == 400
    assert client.post(f'/purchase/suppliers/{supplier.id}/activate', headers=headers).status_code == 200
    resp = client.post('/purchase/orders', json={'supplier_id': supplier.id, 'items': [item()]}, headers=headers)
    assert resp.status_code == 201


def test_supplier_search_is_literal(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    client.post('/purchase/suppliers', json={'name': 'Dye_House'}, headers=headers)
    client.post('/purchase/suppliers', json={'name': 'DyeXHouse'}, headers=headers)
    names = [s['name'] for s in client.get('/purchase/suppliers?name=Dye_', headers=headers).get_json()['data']['data']]
    assert names == ['Dye_House']
