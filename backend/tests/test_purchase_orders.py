import re
from flask import Flask
from tests.test_utils_seed import tenant, item, create_order, ensure_company, ensure_supplier


def _advance(client, headers, order_id, *statuses):
    for status in statuses:
        resp = client.put(f'/purchase/orders/{order_id}', json={'status': status}, headers=headers)
        assert resp.status_code == 200, resp.get_json()
    return resp.get_json()['data']


def test_create_recomputes_totals(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    po = create_order(
        client, headers, supplier.id,
        [item(quantity=2, rate=50, tax_rate=10), item(name='Dye', quantity=1, rate=100)],
        discount=20, freight_charges=5, amounts={'grand_total': 1}, subtotal=9999,
    )
    assert re.match(r'^PO-\d+-[0-9a-f]{8}$', po['order_number'])
    assert po['status'] == 'draft'
    assert po['payment_status'] == 'pending'
    assert po['supplier_name'] == 'Acme'
    assert po['company_id'] == company.id
    amounts = po['amounts']
    assert amounts['subtotal'] == 200
    assert amounts['taxable_amount'] == 180
    assert amounts['grand_total'] == 195
    assert [i['line_total'] for i in po['items']] == [100, 100]


def test_get_and_list(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    po = create_order(client, headers, supplier.id, [item()])
    resp = client.get(f'/purchase/orders/{po["id"]}', headers=headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['success'] is True
    assert body['data']['order_number'] == po['order_number']
    listing = client.get('/purchase/orders', headers=headers).get_json()['data']
    assert listing['pagination']['total'] == 1
    assert listing['data'][0]['id'] == po['id']


def test_update_items_recomputes_amounts(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    po = create_order(client, headers, supplier.id, [item(rate=100)])
    resp = client.put(f'/purchase/orders/{po["id"]}', json={
        'items': [item(quantity=3, rate=40)], 'packing_charges': 10, 'notes': 'revised',
    }, headers=headers)
    assert resp.status_code == 200
    data = resp.get_json()['data']
    assert data['amounts']['subtotal'] == 120
    assert data['amounts']['grand_total'] == 130
    assert data['notes'] == 'revised'
    assert len(data['items']) == 1


def test_charges_only_update_keeps_items(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    po = create_order(client, headers, supplier.id, [item(quantity=2, rate=50, tax_rate=10)])
    resp = client.put(f'/purchase/orders/{po["id"]}', json={'discount': 10}, headers=headers)
    assert resp.status_code == 200
    amounts = resp.get_json()['data']['amounts']
    assert amounts['subtotal'] == 100
    assert amounts['total_discount'] == 10
    assert amounts['grand_total'] == 100


def test_status_lifecycle(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    po = create_order(client, headers, supplier.id, [item()])
    data = _advance(client, headers, po['id'], 'pending_approval', 'sent', 'acknowledged')
    assert data['status'] == 'acknowledged'
    # same status is accepted without a transition
    same = client.put(f'/purchase/orders/{po["id"]}', json={'status': 'acknowledged'}, headers=headers)
    assert same.status_code == 200


def test_invalid_transition(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    po = create_order(client, headers, supplier.id, [item()])
    resp = client.put(f'/purchase/orders/{po["id"]}', json={'status': 'received'}, headers=headers)
    assert resp.status_code == 400
    assert 'draft -> received' in resp.get_json()['message']
    resp = client.put(f'/purchase/orders/{po["id"]}', json={'status': 'archived'}, headers=headers)
    assert resp.status_code == 400
    # the failed update left the order untouched
    assert client.get(f'/purchase/orders/{po["id"]}', headers=headers).get_json()['data']['status'] == 'draft'


def test_cancelled_order_is_frozen(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    po = create_order(client, headers, supplier.id, [item()])
    _advance(client, headers, po['id'], 'cancelled')
    resp = client.put(f'/purchase/orders/{po["id"]}', json={'status': 'draft'}, headers=headers)
    assert resp.status_code == 400
    resp = client.put(f'/purchase/orders/{po["id"]}', json={'items': [item(rate=1)]}, headers=headers)
    assert resp.status_code == 400


def test_update_rejects_unknown_or_empty(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    po = create_order(client, headers, supplier.id, [item()])
    resp = client.put(f'/purchase/orders/{po["id"]}', json={'grand_total': 1}, headers=headers)
    assert resp.status_code == 400
    assert 'grand_total' in resp.get_json()['message']
    resp = client.put(f'/purchase/orders/{po["id"]}', json={}, headers=headers)
    assert resp.status_code == 400


def test_delete_then_missing(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    po = create_order(client, headers, supplier.id, [item()])
    resp = client.delete(f'/purchase/orders/{po["id"]}', headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()['data']['order_number'] == po['order_number']
    assert client.get(f'/purchase/orders/{po["id"]}', headers=headers).status_code == 404
    assert client.delete(f'/purchase/orders/{po["id"]}', headers=headers).status_code == 404


def test_cross_tenant_is_not_found(app_context: Flask):
    client = app_context.test_client()
    _, _, supplier_a, headers_a = tenant()
    _, _, _, headers_b = tenant()
    po = create_order(client, headers_a, supplier_a.id, [item()])
    assert client.get(f'/purchase/orders/{po["id"]}', headers=headers_b).status_code == 404
    resp = client.put(f'/purchase/orders/{po["id"]}', json={'notes': 'x'}, headers=headers_b)
    assert resp.status_code == 404
    # a non-admin cannot widen scope with company_id
    resp = client.get(f'/purchase/orders?company_id={po["company_id"]}', headers=headers_b)
    assert resp.get_json()['data']['pagination']['total'] == 0


def test_malformed_id(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    resp = client.get('/purchase/orders/not-an-id', headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()['error']['kind'] == 'InvalidArgument'
    for raw in ('²', '١٢'):
        resp = client.get(f'/purchase/orders/{raw}', headers=headers)
        assert resp.status_code == 400
        assert resp.get_json()['error']['kind'] == 'InvalidArgument'
    assert client.get('/purchase/suppliers/²', headers=headers).status_code == 400


def test_orders_by_status_and_supplier(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    other = ensure_supplier(company, name='Beta Mills')
    first = create_order(client, headers, supplier.id, [item()])
    create_order(client, headers, other.id, [item()])
    _advance(client, headers, first['id'], 'pending_approval')
    by_status = client.get('/purchase/orders/status/pending_approval', headers=headers).get_json()['data']
    assert [o['id'] for o in by_status['data']] == [first['id']]
    assert client.get('/purchase/orders/status/bogus', headers=headers).status_code == 400
    by_supplier = client.get(f'/purchase/orders/supplier/{other.id}', headers=headers).get_json()['data']
    assert by_supplier['pagination']['total'] == 1
    assert by_supplier['data'][0]['supplier_name'] == 'Beta Mills'
    assert client.get('/purchase/orders/supplier/xyz', headers=headers).status_code == 400


def test_list_filters(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    other = ensure_supplier(company, name='Zeta Trading')
    create_order(client, headers, supplier.id, [item(category='Fabric')], notes='first batch')
    create_order(client, headers, other.id, [item(category='Dyes')])
    resp = client.get('/purchase/orders?category=Dyes', headers=headers).get_json()['data']
    assert resp['pagination']['total'] == 1
    assert resp['data'][0]['supplier_name'] == 'Zeta Trading'
    resp = client.get(f'/purchase/orders?supplier_id={supplier.id}', headers=headers).get_json()['data']
    assert resp['pagination']['total'] == 1
    resp = client.get('/purchase/orders?search=zeta', headers=headers).get_json()['data']
    assert resp['pagination']['total'] == 1
    resp = client.get('/purchase/orders?search=batch', headers=headers).get_json()['data']
    assert resp['data'][0]['notes'] == 'first batch'
    resp = client.get('/purchase/orders?date_from=2000-01-01&date_to=2000-12-31', headers=headers).get_json()['data']
    assert resp['pagination']['total'] == 0
    assert client.get('/purchase/orders?date_from=junk', headers=headers).status_code == 400


def test_search_is_literal(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    create_order(client, headers, supplier.id, [item()], notes='ref PO-(1) 100% done')
    create_order(client, headers, supplier.id, [item()], notes='ref PO-11 1000 done')
    resp = client.get('/purchase/orders?search=PO-(1)', headers=headers).get_json()['data']
    assert resp['pagination']['total'] == 1
    resp = client.get('/purchase/orders?search=100%25', headers=headers).get_json()['data']
    assert resp['pagination']['total'] == 1
    resp = client.get('/purchase/orders?search=%25', headers=headers).get_json()['data']
    assert resp['pagination']['total'] == 1


def test_pagination_http(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    for _ in range(5):
        create_order(client, headers, supplier.id, [item()])
    page = client.get('/purchase/orders?page=2&limit=2', headers=headers).get_json()['data']
    assert page['pagination'] == {'page': 2, 'limit': 2, 'total': 5, 'pages': 3}
    assert len(page['data']) == 2
    beyond = client.get('/purchase/orders?page=9&limit=2', headers=headers).get_json()['data']
    assert beyond['data'] == []
    assert beyond['pagination']['total'] == 5
    fallback = client.get('/purchase/orders?page=x&limit=y', headers=headers).get_json()['data']
    assert fallback['pagination']['page'] == 1 and fallback['pagination']['limit'] == 10


def test_admin_targets_company(app_context: Flask):
    from tests.test_utils_seed import ensure_user, jwt_headers, unique
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    create_order(client, headers, supplier.id, [item()])
    home = ensure_company()
    admin = ensure_user(f'{unique("admin")}@example.com', home, is_admin=True)
    admin_headers = jwt_headers(admin.id, ['*'], home.id, is_admin=True)
    resp = client.get(f'/purchase/orders?company_id={company.id}', headers=admin_headers).get_json()['data']
    assert resp['pagination']['total'] == 1
    own = client.get('/purchase/orders', headers=admin_headers).get_json()['data']
    assert own['pagination']['total'] == 0
