"""
MongoDB Collections Models
MongoDB 콜렉션용 데이터 모델 및 Repository
"""

from .account import Account, AccountRepository
from .charging_session import ChargingSession, ChargingSessionRepository, SessionStatus
from .p2p_order import P2POrder, P2POrderRepository, OrderSide, OrderStatus
from .saga_transaction_log import SagaTransactionLog, SagaTransactionLogRepository, SagaStatus, StepStatus, BOOKING_SAGA_TYPE

__all__ = [
    'Account',
    'AccountRepository',
    'ChargingSession',
    'ChargingSessionRepository',
    'SessionStatus',
    'P2POrder',
    'P2POrderRepository',
    'OrderSide',
    'OrderStatus',
    'SagaTransactionLog',
    'SagaTransactionLogRepository',
    'SagaStatus',
    'StepStatus',
    'BOOKING_SAGA_TYPE'
]
