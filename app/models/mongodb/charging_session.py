from datetime import datetime
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum

from pymongo.errors import DuplicateKeyError

from common.enum.error_code import APIError
from common.exception.exceptions import BusinessError


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class ChargingSession:
    charge_id: str
    station_id: str
    wallet: str
    energy_kwh: float
    cost: float
    signature: str
    explorer_link: str
    status: SessionStatus = SessionStatus.ACTIVE
    ledger_placeholder: bool = False
    memo: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict:
        return {
            'charge_id': self.charge_id,
            'station_id': self.station_id,
            'wallet': self.wallet,
            'energy_kwh': self.energy_kwh,
            'cost': self.cost,
            'status': self.status.value,
            'signature': self.signature,
            'explorer_link': self.explorer_link,
            'ledger_placeholder': self.ledger_placeholder,
            'memo': self.memo,
            'created_at': self.created_at,
            'completed_at': self.completed_at
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'ChargingSession':
        return cls(
            charge_id=data['charge_id'],
            station_id=data['station_id'],
            wallet=data['wallet'],
            energy_kwh=data['energy_kwh'],
            cost=data['cost'],
            status=SessionStatus(data.get('status', 'active')),
            signature=data.get('signature', ''),
            explorer_link=data.get('explorer_link', ''),
            ledger_placeholder=data.get('ledger_placeholder', False),
            memo=data.get('memo') or {},
            created_at=data.get('created_at', datetime.utcnow()),
            completed_at=data.get('completed_at')
        )


class ChargingSessionRepository:

    COLLECTION_NAME = 'charging_sessions'

    def __init__(self, db):
        self.collection = db[self.COLLECTION_NAME]
        self.collection.create_index('charge_id', unique=True)
        self.collection.create_index([('wallet', 1), ('created_at', -1)])
        self.collection.create_index([('status', 1)])

    def insert(self, session: ChargingSession) -> ChargingSession:
        if session.energy_kwh <= 0 or session.cost <= 0:
            raise BusinessError(APIError.INVALID_INPUT_VALUE, message='kWh와 비용은 0보다 커야 합니다.')

        try:
            self.collection.insert_one(session.to_dict())
        except DuplicateKeyError:
            raise BusinessError(APIError.SESSION_DUPLICATE, data={'charge_id': session.charge_id})
        return session

    def find_by_charge_id(self, charge_id: str) -> Optional[ChargingSession]:
        doc = self.collection.find_one({'charge_id': charge_id})
        return ChargingSession.from_dict(doc) if doc else None

    def find_by_wallet(self, wallet: str, limit: int = 50) -> List[ChargingSession]:
        cursor = self.collection.find({'wallet': wallet}).sort('created_at', -1).limit(min(limit, 100))
        return [ChargingSession.from_dict(doc) for doc in cursor]

    def find_billable_by_wallet(self, wallet: str) -> List[ChargingSession]:
        cursor = self.collection.find({
            'wallet': wallet,
            'status': {'$in': [SessionStatus.ACTIVE.value, SessionStatus.COMPLETED.value]}
        })
        return [ChargingSession.from_dict(doc) for doc in cursor]

    def _finish(self, charge_id: str, status: SessionStatus, wallet: Optional[str] = None) -> bool:
        # NOTE: active 세션만 전이 가능 (completed / cancelled 는 종료 상태)
        query = {'charge_id': charge_id, 'status': SessionStatus.ACTIVE.value}
        if wallet is not None:
            query['wallet'] = wallet

        result = self.collection.update_one(
            query,
            {'$set': {'status': status.value, 'completed_at': datetime.utcnow()}}
        )
        return result.matched_count > 0

    def cancel(self, charge_id: str, wallet: Optional[str] = None) -> bool:
        return self._finish(charge_id, SessionStatus.CANCELLED, wallet)

    def complete(self, charge_id: str, wallet: Optional[str] = None) -> bool:
        return self._finish(charge_id, SessionStatus.COMPLETED, wallet)
