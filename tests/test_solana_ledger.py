import json
from types import SimpleNamespace

import pytest
from solana.exceptions import SolanaRpcException
from solders.hash import Hash
from solders.keypair import Keypair
from solders.signature import Signature

from common.ledger.solana_ledger import SolanaMemoLedger, load_treasury_keypair


class FakeRpcClient:
    """send_transaction 이 errors 를 순서대로 던진 뒤 성공하는 RPC 클라이언트"""

    def __init__(self, errors=()):
        self.errors = list(errors)
        self.sent = []

    def get_latest_blockhash(self, commitment=None):
        return SimpleNamespace(value=SimpleNamespace(blockhash=Hash.default()))

    def send_transaction(self, transaction, opts=None):
        if self.errors:
            raise self.errors.pop(0)
        self.sent.append(transaction)
        return SimpleNamespace(value=Signature.default())

    def get_block_height(self):
        return SimpleNamespace(value=4242)

    def get_version(self):
        return SimpleNamespace(value=SimpleNamespace(solana_core='1.18.0'))

    def get_balance(self, pubkey):
        return SimpleNamespace(value=1_500_000_000)


@pytest.fixture
def sleeps():
    return []


def _ledger(client, sleeps, treasury=True, max_retries=3):
    return SolanaMemoLedger(
        rpc_url='http://localhost:8899',
        cluster='devnet',
        max_retries=max_retries,
        backoff_seconds=2.0,
        client=client,
        treasury=Keypair() if treasury else None,
        sleep=sleeps.append
    )


class TestSendMemo:

    def test_sends_signed_memo_transaction(self, sleeps):
        client = FakeRpcClient()

        receipt = _ledger(client, sleeps).send_memo({'type': 'charging_session', 'kwh': 10})

        assert receipt.placeholder is False
        assert receipt.signature == str(Signature.default())
        assert receipt.explorer_link.endswith('?cluster=devnet')
        assert len(client.sent) == 1
        assert sleeps == []

    def test_retries_transient_errors_with_linear_backoff(self, sleeps):
        client = FakeRpcClient(errors=[TimeoutError('timed out'), ConnectionError('connection reset')])

        receipt = _ledger(client, sleeps).send_memo({'type': 'x'})

        assert receipt.placeholder is False
        assert sleeps == [2.0, 4.0]

    def test_gives_up_with_placeholder_after_max_retries(self, sleeps):
        client = FakeRpcClient(errors=[SolanaRpcException('network down')] * 3)

        receipt = _ledger(client, sleeps).send_memo({'type': 'x'})

        assert receipt.placeholder is True
        assert len(receipt.signature) >= 64
        assert client.sent == []
        assert sleeps == [2.0, 4.0]

    def test_insufficient_funds_stops_retrying(self, sleeps):
        client = FakeRpcClient(errors=[RuntimeError('Attempt to debit an account but found no record of a prior credit: insufficient funds')])

        receipt = _ledger(client, sleeps).send_memo({'type': 'x'})

        assert receipt.placeholder is True
        assert sleeps == []
        assert client.errors == []

    def test_transient_error_mentioning_balance_is_retried(self, sleeps):
        client = FakeRpcClient(errors=[TimeoutError('timed out fetching fee payer balance')])

        receipt = _ledger(client, sleeps).send_memo({'type': 'x'})

        assert receipt.placeholder is False
        assert sleeps == [2.0]
        assert len(client.sent) == 1

    def test_non_transient_error_is_not_retried(self, sleeps):
        client = FakeRpcClient(errors=[RuntimeError('invalid instruction data')])

        receipt = _ledger(client, sleeps).send_memo({'type': 'x'})

        assert receipt.placeholder is True
        assert sleeps == []

    def test_without_treasury_uses_placeholder(self, sleeps):
        client = FakeRpcClient()

        receipt = _ledger(client, sleeps, treasury=False).send_memo({'type': 'x'})

        assert receipt.placeholder is True
        assert client.sent == []


class TestLedgerHealth:

    def test_health_and_treasury_balance(self, sleeps):
        ledger = _ledger(FakeRpcClient(), sleeps)

        assert ledger.health() == {'connected': True, 'block_height': 4242, 'version': '1.18.0'}
        assert ledger.treasury_balance() == 1.5

    def test_health_when_rpc_fails(self, sleeps):
        def refused():
            raise ConnectionError('refused')

        client = FakeRpcClient()
        client.get_block_height = refused

        assert _ledger(client, sleeps).health() == {'connected': False}


class TestLoadTreasuryKeypair:

    def test_loads_64_byte_json_array(self):
        keypair = Keypair()

        loaded = load_treasury_keypair(json.dumps(list(bytes(keypair))))

        assert loaded.pubkey() == keypair.pubkey()

    @pytest.mark.parametrize('secret', [None, '', '[1, 2, 3]', 'not json'])
    def test_invalid_secret(self, secret):
        assert load_treasury_keypair(secret) is None
