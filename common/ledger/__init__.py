"""
외부 원장(Solana memo) 모듈
"""

from .solana_ledger import SolanaMemoLedger, LedgerReceipt, generate_placeholder_signature

__all__ = [
    'SolanaMemoLedger',
    'LedgerReceipt',
    'generate_placeholder_signature'
]
