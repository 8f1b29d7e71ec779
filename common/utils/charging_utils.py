import re
import secrets
import time

from common.enum.error_code import APIError
from common.exception.exceptions import BusinessError

# NOTE: base58 (0, O, I, l 제외) 32~44자
WALLET_PATTERN = re.compile(r'^[1-9A-HJ-NP-Za-km-z]{32,44}$')

_BASE36 = '0123456789abcdefghijklmnopqrstuvwxyz'


def is_valid_wallet(wallet) -> bool:
    return isinstance(wallet, str) and bool(WALLET_PATTERN.match(wallet))


def mask_wallet(wallet) -> str:
    if not wallet:
        return ''
    if len(wallet) <= 16:
        return wallet[:8] + '...'
    return wallet[:8] + '...' + wallet[-8:]


def to_base36(number: int) -> str:
    if number == 0:
        return '0'
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return ''.join(reversed(digits))


def random_base36(length: int) -> str:
    return ''.join(secrets.choice(_BASE36) for _ in range(length))


def generate_charge_id() -> str:
    timestamp = to_base36(int(time.time() * 1000))
    return f"CHG-{timestamp}-{random_base36(6)}".upper()


def generate_purchase_id() -> str:
    timestamp = int(time.time() * 1000)
    return f"PUR-{timestamp}-{random_base36(6)}".upper()


def create_explorer_link(signature: str, cluster: str = 'devnet') -> str:
    return f"https://explorer.solana.com/tx/{signature}?cluster={cluster}"


def ensure_valid_wallet(wallet) -> str:
    if not is_valid_wallet(wallet):
        raise BusinessError(APIError.INVALID_WALLET)
    return wallet
