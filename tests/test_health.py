import redis


class TestHealth:

    def test_liveness(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json()['status'] == 'healthy'

    def test_dependencies_healthy(self, client):
        response = client.get('/api/health')

        assert response.status_code == 200
        body = response.get_json()
        assert body['status'] == 'healthy'
        assert body['database'] == 'connected'
        assert body['blockchain'] == 'connected'
        assert body['treasury_balance'] == 2.5

    def test_ledger_down_is_degraded(self, client, ledger):
        ledger.connected = False

        response = client.get('/api/health')

        assert response.status_code == 503
        body = response.get_json()
        assert body['status'] == 'degraded'
        assert body['blockchain'] == 'disconnected'

    def test_kv_store_down_is_reported_not_raised(self, client, kv_store, monkeypatch):
        def unavailable():
            raise redis.ConnectionError('down')

        monkeypatch.setattr(kv_store, 'ping', unavailable)

        response = client.get('/api/health')

        assert response.status_code == 200
        body = response.get_json()
        assert body['kv_store'] == 'disconnected'
        assert body['database'] == 'connected'


class TestErrorShape:

    def test_unknown_route(self, client):
        response = client.get('/api/nope')

        assert response.status_code == 404
        assert response.get_json() == {'success': False, 'error': '요청한 리소스를 찾을 수 없습니다.', 'code': 'C005'}

    def test_rate_limit_headers_on_ip_limited_routes(self, client):
        response = client.get('/api/leaderboard')

        assert response.headers['X-RateLimit-Limit'] == '100'
        assert response.headers['X-RateLimit-Remaining'] == '99'
