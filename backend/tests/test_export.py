from datetime import datetime
from flask import Flask
from procurement.services.exports import export_purchase_data
from tests.test_utils_seed import tenant, item, create_order


def test_export_csv(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    create_order(client, headers, supplier.id, [item()])
    create_order(client, headers, supplier.id, [item(category='Dyes')])
    resp = client.post('/purchase/export/csv', json={'filters': {'category': 'Dyes'}}, headers=headers)
    assert resp.status_code == 200
    data = resp.get_json()['data']
    assert data['format'] == 'csv'
    assert data['record_count'] == 1
    assert data['download_url'].startswith('/purchase/download/')
    assert data['download_url'].endswith('.csv')


def test_export_excel_without_filters(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    create_order(client, headers, supplier.id, [item()])
    resp = client.post('/purchase/export/excel', json={}, headers=headers)
    assert resp.status_code == 200
    data = resp.get_json()['data']
    assert data['download_url'].endswith('.xlsx')
    assert data['record_count'] == 1


def test_export_rejects_unknown_format_and_bad_filters(app_context: Flask):
    client = app_context.test_client()
    company, user, supplier, headers = tenant()
    resp = client.post('/purchase/export/pdf', json={}, headers=headers)
    assert resp.status_code == 400
    assert 'pdf' in resp.get_json()['message']
    resp = client.post('/purchase/export/csv', json={'filters': {'status': 'lost'}}, headers=headers)
    assert resp.status_code == 400
    resp = client.post('/purchase/export/csv', json={'filters': ['status']}, headers=headers)
    assert resp.status_code == 400


def test_export_url_uses_clock(app_context: Flask):
    from procurement import get_db
    company, user, supplier, headers = tenant()
    fixed = datetime(2024, 1, 2, 3, 4, 5)
    result = export_purchase_data(get_db(), company.id, 'csv', {}, clock=lambda: fixed)
    assert result['download_url'] == f'/purchase/download/{int(fixed.timestamp() * 1000)}.csv'
    assert result['record_count'] == 0
