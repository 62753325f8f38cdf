# Overview: Pytest coverage for the envelope, CORS, error mapping and health.


class TestHttpSurface:
    def test_cors_headers_on_every_response(self, client, db_session):
        response = client.get('/api/auth?action=has-users')
        assert response.headers['Access-Control-Allow-Origin'] == '*'
        assert 'X-Session-Id' in response.headers['Access-Control-Allow-Headers']

    def test_preflight(self, client, db_session):
        response = client.options('/api/data?resource=products')

        assert response.status_code == 200
        assert response.headers['Access-Control-Allow-Origin'] == '*'
        assert 'PUT' in response.headers['Access-Control-Allow-Methods']

    def test_method_not_allowed_envelope(self, client, db_session):
        response = client.patch('/api/data?resource=products')

        assert response.status_code == 405
        assert response.json == {
            'success': False,
            'error': 'method_not_allowed',
            'message': 'Method not allowed',
        }

    def test_unknown_route_envelope(self, client, db_session):
        response = client.get('/api/nothing-here')

        assert response.status_code == 404
        assert response.json['error'] == 'not_found'

    def test_oversized_body(self, app, client, user_a, monkeypatch):
        monkeypatch.setitem(app.config, 'MAX_CONTENT_LENGTH', 1024)

        response = client.post(
            '/api/data?resource=products',
            json={'name': 'x', 'partnerPrice': 1, 'resalePrice': 2, 'photos': ['p' * 4096]},
            headers=user_a['headers'],
        )

        assert response.status_code == 400
        assert response.json['error'] == 'payload_too_large'

    def test_health(self, client, user_a):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.json['status'] == 'healthy'
        assert response.json['checks']['database']['details']['users'] == 1
        assert response.json['checks']['database']['details']['active_sessions'] == 1
