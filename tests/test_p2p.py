from datetime import datetime, timedelta

from app.models.mongodb.p2p_order import OrderSide, P2POrder, P2POrderRepository

from conftest import WALLET, OTHER_WALLET


def _create(client, wallet=WALLET, side='sell', amount=10, price=0.25):
    return client.post('/api/p2p/create', json={
        'wallet': wallet, 'side': side, 'amount': amount, 'price': price
    })


class TestCreateOrder:

    def test_create(self, client):
        response = _create(client)

        assert response.status_code == 200
        order = response.get_json()['order']
        assert order['status'] == 'open'
        assert order['side'] == 'sell'
        assert order['counterparty'] is None
        assert len(order['order_id']) == 24

    def test_rejects_non_positive_amount_and_unknown_side(self, client):
        assert _create(client, amount=0).status_code == 400
        assert _create(client, price=-1).status_code == 400
        assert _create(client, side='hold').status_code == 400


class TestListOrders:

    def test_lists_open_orders_of_the_opposite_side_newest_first(self, client, mongo_db):
        repo = P2POrderRepository(mongo_db)
        now = datetime.utcnow()
        for minutes_ago, side in ((20, OrderSide.SELL), (5, OrderSide.SELL), (1, OrderSide.BUY)):
            repo.insert(P2POrder(
                wallet=WALLET, side=side, amount=minutes_ago, price=1,
                created_at=now - timedelta(minutes=minutes_ago)
            ))

        body = client.get('/api/p2p/orders?side=buy').get_json()

        assert [o['amount'] for o in body['orders']] == [5, 20]
        assert all(o['side'] == 'sell' for o in body['orders'])

    def test_completed_orders_are_hidden(self, client):
        order_id = _create(client).get_json()['order']['order_id']
        client.post('/api/p2p/execute', json={'order_id': order_id, 'wallet': OTHER_WALLET})

        assert client.get('/api/p2p/orders?side=buy').get_json()['orders'] == []


class TestExecuteOrder:

    def test_execute(self, client):
        order_id = _create(client).get_json()['order']['order_id']

        response = client.post('/api/p2p/execute', json={'order_id': order_id, 'wallet': OTHER_WALLET})

        assert response.status_code == 200
        order = response.get_json()['order']
        assert order['status'] == 'completed'
        assert order['counterparty'] == OTHER_WALLET
        assert order['completed_at'] is not None

    def test_execute_twice(self, client):
        order_id = _create(client).get_json()['order']['order_id']
        payload = {'order_id': order_id, 'wallet': OTHER_WALLET}

        client.post('/api/p2p/execute', json=payload)
        response = client.post('/api/p2p/execute', json=payload)

        assert response.status_code == 404
        assert response.get_json()['code'] == 'P001'

    def test_owner_cannot_execute_own_order(self, client):
        order_id = _create(client).get_json()['order']['order_id']

        response = client.post('/api/p2p/execute', json={'order_id': order_id, 'wallet': WALLET})

        assert response.status_code == 400
        assert response.get_json()['code'] == 'P002'

    def test_unknown_order(self, client):
        for order_id in ('not-an-object-id', '65f0c0ffee0000000000beef'):
            response = client.post('/api/p2p/execute', json={'order_id': order_id, 'wallet': WALLET})
            assert response.status_code == 404
