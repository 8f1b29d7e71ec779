from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from app.models.mongodb.charging_session import ChargingSession


@dataclass
class BalanceDto:
    fiat: float
    token: float

    def to_dict(self):
        return {
            'fiat': self.fiat,
            'token': self.token
        }


@dataclass
class BookingResultDto:
    charge_id: str
    explorer_link: str
    signature: str
    ledger_placeholder: bool
    tokens_earned: float
    co2_saved: float
    memo: Dict[str, Any]
    new_balance: BalanceDto
    processing_time: int  # ms

    def to_dict(self):
        return {
            'charge_id': self.charge_id,
            'explorer_link': self.explorer_link,
            'signature': self.signature,
            'ledger_placeholder': self.ledger_placeholder,
            'tokens_earned': self.tokens_earned,
            'co2_saved': self.co2_saved,
            'memo': self.memo,
            'new_balance': self.new_balance.to_dict(),
            'processing_time': self.processing_time
        }


@dataclass
class SessionDto:
    charge_id: str
    station_id: str
    wallet: str
    energy_kwh: float
    cost: float
    status: str
    signature: str
    explorer_link: str
    ledger_placeholder: bool
    created_at: str
    completed_at: Optional[str] = None

    @classmethod
    def from_model(cls, session: ChargingSession) -> 'SessionDto':
        return cls(
            charge_id=session.charge_id,
            station_id=session.station_id,
            wallet=session.wallet,
            energy_kwh=session.energy_kwh,
            cost=session.cost,
            status=session.status.value,
            signature=session.signature,
            explorer_link=session.explorer_link,
            ledger_placeholder=session.ledger_placeholder,
            created_at=session.created_at.isoformat() if session.created_at else None,
            completed_at=session.completed_at.isoformat() if session.completed_at else None
        )


@dataclass
class SessionListDto:
    sessions: List[SessionDto]
    total: int


@dataclass
class SessionStatusChangeDto:
    charge_id: str
    status: str
