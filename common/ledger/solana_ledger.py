import json
import secrets
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.commitment import Confirmed, Finalized
from solana.rpc.types import TxOpts
from solders.keypair import Keypair
from solders.message import Message
from solders.signature import Signature
from solders.transaction import Transaction
from spl.memo.constants import MEMO_PROGRAM_ID
from spl.memo.instructions import MemoParams, create_memo

from common.utils.charging_utils import create_explorer_link
from common.utils.logging_utils import get_logger

logger = get_logger('solana_ledger')

LAMPORTS_PER_SOL = 1_000_000_000

TRANSIENT_MARKERS = ('timeout', 'timed out', 'network', 'connection', 'blockhash', '429')
FATAL_MARKERS = ('insufficient funds', 'insufficient lamports')


@dataclass
class LedgerReceipt:
    signature: str
    explorer_link: str
    # NOTE: True면 원장에 기록되지 못하고 로컬에서 만든 대체 서명
    placeholder: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'signature': self.signature,
            'explorer_link': self.explorer_link,
            'placeholder': self.placeholder
        }


def generate_placeholder_signature() -> str:
    return str(Signature(secrets.token_bytes(64)))


def load_treasury_keypair(secret_key: Optional[str]) -> Optional[Keypair]:
    if not secret_key:
        logger.warning("No treasury wallet configured")
        return None

    try:
        secret = json.loads(secret_key)
        if not isinstance(secret, list) or len(secret) != 64:
            raise ValueError('Invalid secret key format')
        return Keypair.from_bytes(bytes(secret))
    except (ValueError, TypeError) as e:
        logger.error(f"Failed to load treasury keypair: {e}")
        return None


class SolanaMemoLedger:
    """
    Solana memo 프로그램으로 충전/보너스 기록을 남기는 외부 원장 클라이언트

    일시적인 오류(타임아웃, 네트워크, blockhash 만료)는 max_retries까지
    attempt * backoff 초 간격으로 재시도한다. 트레저리 미설정이거나 모든 시도가
    실패하면 대체 서명을 돌려준다 (degraded mode).
    """

    def __init__(
        self,
        rpc_url: str,
        treasury_secret_key: Optional[str] = None,
        cluster: str = 'devnet',
        max_retries: int = 3,
        backoff_seconds: float = 2.0,
        client: Optional[Client] = None,
        treasury: Optional[Keypair] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.rpc_url = rpc_url
        self.cluster = cluster
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self.client = client or Client(rpc_url, commitment=Confirmed)
        self.treasury = treasury or load_treasury_keypair(treasury_secret_key)
        self._sleep = sleep

    @classmethod
    def from_config(cls, config) -> 'SolanaMemoLedger':
        return cls(
            rpc_url=config['SOLANA_RPC_URL'],
            treasury_secret_key=config.get('TREASURY_SECRET_KEY'),
            cluster=config.get('SOLANA_CLUSTER', 'devnet'),
            max_retries=config.get('LEDGER_MAX_RETRIES', 3),
            backoff_seconds=config.get('LEDGER_RETRY_BACKOFF', 2.0)
        )

    def explorer_link(self, signature: str) -> str:
        return create_explorer_link(signature, self.cluster)

    def _placeholder(self) -> LedgerReceipt:
        signature = generate_placeholder_signature()
        return LedgerReceipt(
            signature=signature,
            explorer_link=self.explorer_link(signature),
            placeholder=True
        )

    def _send_once(self, memo_bytes: bytes) -> str:
        payer = self.treasury.pubkey()
        blockhash = self.client.get_latest_blockhash(Finalized).value.blockhash

        instruction = create_memo(MemoParams(
            program_id=MEMO_PROGRAM_ID,
            signer=payer,
            message=memo_bytes
        ))
        message = Message.new_with_blockhash([instruction], payer, blockhash)
        transaction = Transaction([self.treasury], message, blockhash)

        response = self.client.send_transaction(
            transaction,
            opts=TxOpts(skip_confirmation=False, preflight_commitment=Confirmed)
        )
        return str(response.value)

    @staticmethod
    def _is_transient(error: Exception) -> bool:
        if isinstance(error, (SolanaRpcException, TimeoutError, ConnectionError)):
            return True
        text = str(error).lower()
        return any(marker in text for marker in TRANSIENT_MARKERS)

    @staticmethod
    def _is_fatal(error: Exception) -> bool:
        text = str(error).lower()
        return any(marker in text for marker in FATAL_MARKERS)

    def send_memo(self, memo_data: Dict[str, Any]) -> LedgerReceipt:
        if self.treasury is None:
            logger.warning("Treasury not configured, using placeholder signature")
            return self._placeholder()

        memo_bytes = json.dumps(memo_data, separators=(',', ':'), ensure_ascii=False).encode('utf-8')

        for attempt in range(1, self.max_retries + 1):
            try:
                logger.debug(f"Sending memo transaction (attempt {attempt}/{self.max_retries})")
                signature = self._send_once(memo_bytes)
                logger.info(f"Memo transaction confirmed: {signature}")
                return LedgerReceipt(
                    signature=signature,
                    explorer_link=self.explorer_link(signature),
                    placeholder=False
                )

            except Exception as e:
                logger.error(f"Memo transaction attempt {attempt} failed: {e}")

                if self._is_fatal(e):
                    logger.error(f"Treasury wallet needs SOL: {self.treasury.pubkey()}")
                    break

                if attempt < self.max_retries and self._is_transient(e):
                    delay = attempt * self.backoff_seconds
                    logger.info(f"Retrying memo transaction in {delay}s")
                    self._sleep(delay)
                    continue

                break

        logger.warning("Using placeholder signature (memo transaction failed)")
        return self._placeholder()

    def health(self) -> Dict[str, Any]:
        try:
            block_height = self.client.get_block_height().value
            version = self.client.get_version().value
            return {
                'connected': True,
                'block_height': block_height,
                'version': getattr(version, 'solana_core', None)
            }
        except Exception as e:
            logger.error(f"Solana health check failed: {e}")
            return {'connected': False}

    def treasury_balance(self) -> float:
        if self.treasury is None:
            return 0.0
        try:
            lamports = self.client.get_balance(self.treasury.pubkey()).value
            return lamports / LAMPORTS_PER_SOL
        except Exception as e:
            logger.error(f"Failed to get treasury balance: {e}")
            return 0.0
