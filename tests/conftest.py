import mongomock
import pytest

import common.extensions as extensions
from app import create_app
from app.models.mongodb.account import AccountRepository
from common.cache.key_value_store import MemoryKeyValueStore
from common.ledger import LedgerReceipt
from common.utils.charging_utils import create_explorer_link

WALLET = '7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU'
OTHER_WALLET = '9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM'
THIRD_WALLET = 'HN7cABqLq46Es1jh92dQQisAq662SmxELLLsHHe4YWrH'


class FakeClock:

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeLedger:
    """send_memo 호출을 기록하고 순번 서명을 돌려주는 원장"""

    def __init__(self):
        self.memos = []
        self.connected = True
        self.placeholder = False
        self.fail_with = None
        self.on_send = None

    def send_memo(self, memo):
        if self.fail_with is not None:
            raise self.fail_with
        self.memos.append(memo)
        if self.on_send is not None:
            self.on_send(memo)

        signature = f'FakeSignature{len(self.memos)}'
        return LedgerReceipt(
            signature=signature,
            explorer_link=create_explorer_link(signature),
            placeholder=self.placeholder
        )

    def health(self):
        if not self.connected:
            return {'connected': False}
        return {'connected': True, 'block_height': 123456, 'version': '1.18.0'}

    def treasury_balance(self):
        return 2.5


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def kv_store(clock):
    return MemoryKeyValueStore(clock=clock)


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def mongo_db():
    return mongomock.MongoClient()['dewatt_test']


@pytest.fixture
def app(mongo_db, ledger, kv_store):
    app = create_app('testing', mongo_db=mongo_db, ledger=ledger, kv_store=kv_store)
    yield app
    extensions.mongo_db = None
    extensions.kv_store = None
    extensions.ledger = None


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def fund(mongo_db):
    """지갑 계정을 만들고 잔액을 충전"""
    def _fund(wallet, fiat=0.0, token=0.0):
        repo = AccountRepository(mongo_db)
        repo.get_or_create(wallet)
        return repo.adjust_balance(wallet, fiat, token)
    return _fund
