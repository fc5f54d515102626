from tests.test_utils_seed import tenant


def test_unknown_path_returns_error_json(client):
    resp = client.get('/non-existent-path')
    # Flask default 404 should be wrapped by error handler
    assert resp.status_code == 404
    body = resp.get_json()
    assert body['success'] is False
    assert body['error']['status'] == 404
    assert body['error']['kind'] == 'NotFound'
    assert 'detail' in body['error']


def test_method_not_allowed_envelope(client):
    resp = client.patch('/purchase/stats')
    assert resp.status_code == 405
    assert resp.get_json()['error']['status'] == 405


def test_missing_token_is_unauthorized(client):
    resp = client.get('/purchase/stats')
    assert resp.status_code == 401
    body = resp.get_json()
    assert body['success'] is False
    assert body['error']['kind'] == 'Unauthorized'


def test_garbage_token_is_unauthorized(client):
    resp = client.get('/purchase/orders', headers={'Authorization': 'Bearer not.a.token'})
    assert resp.status_code == 401


def test_internal_error_shape(client, app_instance, monkeypatch):
    with app_instance.app_context():
        company, user, supplier, headers = tenant()
    import procurement.routes.purchase as purchase_mod

    def boom():
        raise RuntimeError('explode')
    monkeypatch.setattr(purchase_mod, '_reports', boom)
    resp = client.get('/purchase/stats', headers=headers)
    assert resp.status_code == 500
    body = resp.get_json()
    assert body['error']['status'] == 500
    assert body['error']['title'] == 'Internal Server Error'
    assert body['error']['kind'] == 'InternalError'
    # internals are not leaked
    assert 'explode' not in body['message']


def test_healthz(client):
    assert client.get('/healthz').get_json() == {'status': 'ok'}
