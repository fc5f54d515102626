import pytest
from flask import Flask
from procurement import get_db
from procurement.errors import InvalidArgument, NotFound
from procurement.services.inventory import InventoryService
from tests.test_utils_seed import tenant, item, create_order, ensure_company

RECEIVE_PATH = ('pending_approval', 'sent', 'acknowledged', 'received')


def _receive(client, headers, order_id):
    for status in RECEIVE_PATH:
        resp = client.put(f'/purchase/orders/{order_id}', json={'status': status}, headers=headers)
        assert resp.status_code == 200, resp.get_json()
    return resp.get_json()['data']


def test_receiving_materializes_stock(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    first = create_order(client, headers, supplier.id, [item(name='Yarn', code='YRN-1', quantity=5, rate=10)])
    received = _receive(client, headers, first['id'])
    assert received['items'][0]['received_quantity'] == 5
    second = create_order(client, headers, supplier.id, [item(name='Yarn', code='YRN-1', quantity=5, rate=20)])
    _receive(client, headers, second['id'])
    items = client.get('/inventory/items?item_code=YRN-1', headers=headers).get_json()['data']
    assert items['pagination']['total'] == 1
    inv = items['data'][0]
    assert inv['current_stock'] == 10
    assert inv['average_cost'] == pytest.approx(15)
    moves = client.get(f'/inventory/items/{inv["id"]}/movements', headers=headers).get_json()['data']
    assert moves['pagination']['total'] == 2
    assert {m['reference'] for m in moves['data']} == {first['order_number'], second['order_number']}
    assert all(m['direction'] == 'in' for m in moves['data'])


def test_receiving_without_item_code(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    po = create_order(client, headers, supplier.id, [item(name='Buttons', quantity=100, rate=0.5)])
    _receive(client, headers, po['id'])
    items = client.get('/inventory/items?search=butt', headers=headers).get_json()['data']['data']
    assert [i['item_code'] for i in items] == [f'{po["order_number"]}-1']


def test_inventory_is_tenant_scoped(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    po = create_order(client, headers, supplier.id, [item(code='SCOPED-1')])
    _receive(client, headers, po['id'])
    inv_id = client.get('/inventory/items', headers=headers).get_json()['data']['data'][0]['id']
    _, _, _, other_headers = tenant()
    assert client.get('/inventory/items', headers=other_headers).get_json()['data']['pagination']['total'] == 0
    moves = client.get(f'/inventory/items/{inv_id}/movements', headers=other_headers).get_json()['data']
    assert moves['pagination']['total'] == 0


def test_inventory_service_rules(app_context: Flask):
    company = ensure_company()
    service = InventoryService(get_db())
    with pytest.raises(InvalidArgument):
        service.find_one({'colour': 'red'})
    with pytest.raises(InvalidArgument):
        service.create_inventory_item({'company_id': company.id, 'item_code': 'X'}, 1)
    inv = service.create_inventory_item({'company_id': company.id, 'item_code': 'BOLT', 'item_name': 'Bolt'}, 1)
    service.update_stock(inv.id, 'WH1', 4, 'in', 'manual', None, 1, unit_cost=2.0)
    with pytest.raises(InvalidArgument):
        service.update_stock(inv.id, 'WH1', 5, 'out', 'manual', None, 1)
    service.update_stock(inv.id, 'WH1', 3, 'out', 'manual', None, 1)
    assert inv.current_stock == 1
    assert inv.average_cost == 2.0
    with pytest.raises(InvalidArgument):
        service.update_stock(inv.id, None, 1, 'sideways', None, None, 1)
    with pytest.raises(NotFound):
        service.update_stock(999999, None, 1, 'in', None, None, 1)
    assert service.find_one({'company_id': company.id, 'item_code': 'BOLT'}).id == inv.id
    get_db().rollback()
