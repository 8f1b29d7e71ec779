from conftest import WALLET, OTHER_WALLET, THIRD_WALLET


class TestBalance:

    def test_first_query_creates_account(self, client):
        body = client.get(f'/api/user/balance?wallet={WALLET}').get_json()

        assert body['success'] is True
        assert body['balance'] == {'fiat': 0.0, 'token': 0.0}
        assert body['is_new_user'] is True
        assert body['welcome_bonus_received'] is False
        assert body['cached'] is False

    def test_second_query_is_served_from_cache_until_ttl(self, client, fund, clock):
        fund(WALLET, fiat=10)
        client.get(f'/api/user/balance?wallet={WALLET}')

        cached = client.get(f'/api/user/balance?wallet={WALLET}').get_json()
        clock.advance(5)
        expired = client.get(f'/api/user/balance?wallet={WALLET}').get_json()

        assert cached['cached'] is True
        assert cached['balance']['fiat'] == 10
        assert expired['cached'] is False

    def test_balance_change_invalidates_cache(self, client, fund):
        fund(WALLET, fiat=100)
        client.get(f'/api/user/balance?wallet={WALLET}')

        client.post('/api/charging/book', json={
            'station_id': 'STN-001', 'wallet': WALLET, 'kwh': 10, 'total_cost': 25
        })
        body = client.get(f'/api/user/balance?wallet={WALLET}').get_json()

        assert body['cached'] is False
        assert body['balance'] == {'fiat': 75.0, 'token': 10.0}

    def test_refresh_bypasses_cache(self, client, fund):
        fund(WALLET, fiat=10)
        client.get(f'/api/user/balance?wallet={WALLET}')
        fund(WALLET, fiat=5)

        body = client.post('/api/user/balance', json={'wallet': WALLET}).get_json()

        assert body['refreshed'] is True
        assert body['balance']['fiat'] == 15

    def test_invalid_wallet(self, client):
        response = client.get('/api/user/balance?wallet=0OIl')

        assert response.status_code == 400
        assert response.get_json()['success'] is False


class TestWelcomeBonus:

    def test_eligibility(self, client):
        body = client.get(f'/api/user/welcome-bonus?wallet={WALLET}').get_json()

        assert body['eligible'] is True
        assert body['already_claimed'] is False
        assert body['bonus_amount'] == {'fiat': 100.0, 'token': 50.0}

    def test_claim_once(self, client, ledger):
        first = client.post('/api/user/welcome-bonus', json={'wallet': WALLET})
        second = client.post('/api/user/welcome-bonus', json={'wallet': WALLET})

        assert first.status_code == 200
        assert first.get_json()['new_balance'] == {'fiat': 100.0, 'token': 50.0}
        assert second.status_code == 400
        assert second.get_json()['code'] == 'U005'
        assert [memo['type'] for memo in ledger.memos] == ['welcome_bonus']

        eligibility = client.get(f'/api/user/welcome-bonus?wallet={WALLET}').get_json()
        assert eligibility['eligible'] is False
        assert eligibility['already_claimed'] is True

    def test_claim_is_rate_limited(self, client):
        statuses = [client.post('/api/user/welcome-bonus', json={'wallet': WALLET}).status_code for _ in range(4)]

        assert statuses == [200, 400, 400, 429]

    def test_disabled(self, app, client):
        app.config['ENABLE_WELCOME_BONUS'] = False

        response = client.post('/api/user/welcome-bonus', json={'wallet': WALLET})

        assert response.status_code == 403
        assert response.get_json()['code'] == 'U006'


class TestStatsAndLeaderboard:

    def test_stats_for_unknown_wallet(self, client):
        response = client.get(f'/api/user/stats?wallet={WALLET}')

        assert response.status_code == 404
        assert response.get_json()['code'] == 'U002'

    def test_stats_exclude_cancelled_sessions(self, client, fund):
        fund(WALLET, fiat=100)
        booking = {'station_id': 'STN-001', 'wallet': WALLET, 'kwh': 10, 'total_cost': 20}
        client.post('/api/charging/book', json=booking)
        cancelled = client.post('/api/charging/book', json=booking).get_json()
        client.post('/api/charging/cancel', json={'charge_id': cancelled['charge_id'], 'wallet': WALLET})

        body = client.get(f'/api/user/stats?wallet={WALLET}').get_json()

        assert body['total_sessions'] == 1
        assert body['total_spent'] == 20
        assert body['lifetime_energy'] == 20
        assert body['emissions_offset'] == 17.0
        assert body['rank'] == 1

    def test_leaderboard(self, client, fund):
        for wallet, kwh in ((WALLET, 5), (OTHER_WALLET, 15), (THIRD_WALLET, 10)):
            fund(wallet, fiat=100)
            client.post('/api/charging/book', json={
                'station_id': 'STN-001', 'wallet': wallet, 'kwh': kwh, 'total_cost': 1
            })

        body = client.get('/api/leaderboard?limit=2').get_json()

        assert [(e['rank'], e['wallet']) for e in body['leaderboard']] == [(1, OTHER_WALLET), (2, THIRD_WALLET)]
        assert client.get('/api/leaderboard?limit=0').status_code == 400
