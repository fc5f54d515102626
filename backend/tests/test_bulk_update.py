from flask import Flask
from tests.test_utils_seed import tenant, item, create_order


def _bulk(client, headers, order_ids, updates):
    return client.post('/purchase/orders/bulk-update', json={'order_ids': order_ids, 'updates': updates}, headers=headers)


def test_bulk_requires_ids(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    for ids in ([], None, 'all'):
        resp = _bulk(client, headers, ids, {'notes': 'x'})
        assert resp.status_code == 400


def test_bulk_rejects_unknown_fields(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    po = create_order(client, headers, supplier.id, [item()])
    resp = _bulk(client, headers, [po['id']], {'grand_total': 0})
    assert resp.status_code == 400
    resp = _bulk(client, headers, [po['id']], {})
    assert resp.status_code == 400


def test_bulk_update_applies_to_tenant_orders(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    a = create_order(client, headers, supplier.id, [item()])
    b = create_order(client, headers, supplier.id, [item()])
    _, _, foreign_supplier, foreign_headers = tenant()
    foreign = create_order(client, foreign_headers, foreign_supplier.id, [item()])
    resp = _bulk(client, headers, [a['id'], b['id'], foreign['id']], {'status': 'pending_approval', 'notes': 'batch'})
    assert resp.status_code == 200
    data = resp.get_json()['data']
    assert data['fields'] == ['notes', 'status']
    assert sorted(o['id'] for o in data['orders']) == sorted([a['id'], b['id']])
    assert all(o['status'] == 'pending_approval' for o in data['orders'])
    untouched = client.get(f'/purchase/orders/{foreign["id"]}', headers=foreign_headers).get_json()['data']
    assert untouched['status'] == 'draft'


def test_bulk_noop_is_conflict(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    po = create_order(client, headers, supplier.id, [item()])
    resp = _bulk(client, headers, [po['id']], {'status': 'draft'})
    assert resp.status_code == 409
    assert resp.get_json()['error']['kind'] == 'NoOp'
    # nothing matched in this tenant
    resp = _bulk(client, headers, [999999], {'notes': 'x'})
    assert resp.status_code == 409


def test_bulk_validates_every_order_before_writing(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    a = create_order(client, headers, supplier.id, [item()])
    b = create_order(client, headers, supplier.id, [item()])
    client.put(f'/purchase/orders/{b["id"]}', json={'status': 'cancelled'}, headers=headers)
    resp = _bulk(client, headers, [a['id'], b['id']], {'status': 'pending_approval'})
    assert resp.status_code == 400
    still = client.get(f'/purchase/orders/{a["id"]}', headers=headers).get_json()['data']
    assert still['status'] == 'draft'


def test_bulk_payment_status(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    po = create_order(client, headers, supplier.id, [item()])
    resp = _bulk(client, headers, [po['id']], {'payment_status': 'paid'})
    assert resp.status_code == 200
    assert resp.get_json()['data']['orders'][0]['payment_status'] == 'paid'
    assert _bulk(client, headers, [po['id']], {'payment_status': 'gratis'}).status_code == 400
