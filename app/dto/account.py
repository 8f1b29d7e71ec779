from dataclasses import dataclass
from typing import List

from app.dto.charging import BalanceDto


@dataclass
class AccountBalanceDto:
    balance: BalanceDto
    is_new_user: bool
    welcome_bonus_received: bool
    cached: bool = False
    refreshed: bool = False
    processing_time: int = 0

    def to_dict(self):
        return {
            'balance': self.balance.to_dict(),
            'is_new_user': self.is_new_user,
            'welcome_bonus_received': self.welcome_bonus_received
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'AccountBalanceDto':
        return cls(
            balance=BalanceDto(**data['balance']),
            is_new_user=data['is_new_user'],
            welcome_bonus_received=data['welcome_bonus_received']
        )


@dataclass
class BonusEligibilityDto:
    eligible: bool
    already_claimed: bool
    bonus_amount: BalanceDto


@dataclass
class BonusGrantDto:
    fiat_bonus: float
    token_bonus: float
    signature: str
    explorer_link: str
    ledger_placeholder: bool
    new_balance: BalanceDto
    processing_time: int


@dataclass
class AccountStatsDto:
    total_sessions: int
    lifetime_energy: float
    total_spent: float
    emissions_offset: float
    rank: int


@dataclass
class LeaderboardEntryDto:
    rank: int
    wallet: str
    lifetime_energy: float
    emissions_offset: float


@dataclass
class LeaderboardDto:
    leaderboard: List[LeaderboardEntryDto]
