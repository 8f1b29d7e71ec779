import math
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from common.enum.error_code import APIError
from common.exception.exceptions import BusinessError
from common.utils.logging_utils import get_logger

logger = get_logger('account')

# NOTE: 충전 1kWh 당 절감 CO2 (kg)
CO2_KG_PER_KWH = 0.85


@dataclass
class Account:
    wallet: str
    fiat_balance: float = 0.0
    token_balance: float = 0.0
    lifetime_energy: float = 0.0
    emissions_offset: float = 0.0
    bonus_claimed: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict:
        return {
            'wallet': self.wallet,
            'fiat_balance': self.fiat_balance,
            'token_balance': self.token_balance,
            'lifetime_energy': self.lifetime_energy,
            'emissions_offset': self.emissions_offset,
            'bonus_claimed': self.bonus_claimed,
            'created_at': self.created_at,
            'updated_at': self.updated_at
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Account':
        return cls(
            wallet=data['wallet'],
            fiat_balance=data.get('fiat_balance', 0.0) or 0.0,
            token_balance=data.get('token_balance', 0.0) or 0.0,
            lifetime_energy=data.get('lifetime_energy', 0.0) or 0.0,
            emissions_offset=data.get('emissions_offset', 0.0) or 0.0,
            bonus_claimed=bool(data.get('bonus_claimed', False)),
            created_at=data.get('created_at', datetime.utcnow()),
            updated_at=data.get('updated_at', datetime.utcnow())
        )


class AccountRepository:

    COLLECTION_NAME = 'accounts'

    def __init__(self, db):
        self.collection = db[self.COLLECTION_NAME]
        self.collection.create_index('wallet', unique=True)
        self.collection.create_index([('emissions_offset', -1)])
        self.collection.create_index([('created_at', -1)])

    def find_by_wallet(self, wallet: str) -> Optional[Account]:
        doc = self.collection.find_one({'wallet': wallet})
        return Account.from_dict(doc) if doc else None

    def get_or_create(self, wallet: str) -> Tuple[Account, bool]:
        """계정 조회, 없으면 잔액 0으로 생성. (계정, 신규 여부) 반환"""
        account = self.find_by_wallet(wallet)
        if account:
            return account, False

        account = Account(wallet=wallet)
        try:
            self.collection.insert_one(account.to_dict())
        except DuplicateKeyError:
            #NOTE: 동시 첫 조회로 다른 요청이 먼저 만든 경우 - 기존 계정을 사용
            return self.find_by_wallet(wallet), False

        logger.info(f"Account created: {wallet[:8]}...")
        return account, True

    def adjust_balance(
        self,
        wallet: str,
        fiat_delta: float,
        token_delta: float,
        bypass_non_negative_check: bool = False,
        energy_kwh: float = 0.0,
        mark_bonus_claimed: bool = False
    ) -> Account:
        """
        두 잔액을 한 번의 update로 함께 증감한다.

        음수 잔액 검사는 update 필터 조건에 포함되므로 동시에 들어온 차감이
        서로의 검사를 통과해 잔액을 음수로 만드는 일이 없다.
        bypass_non_negative_check 는 보너스 지급에만 사용한다.
        """
        for value in (fiat_delta, token_delta, energy_kwh):
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise BusinessError(APIError.INVALID_INPUT_VALUE, message='잔액 변경 값이 올바르지 않습니다.')

        query = {'wallet': wallet}
        if not bypass_non_negative_check:
            if fiat_delta < 0:
                query['fiat_balance'] = {'$gte': -fiat_delta}
            if token_delta < 0:
                query['token_balance'] = {'$gte': -token_delta}
        if mark_bonus_claimed:
            query['bonus_claimed'] = {'$ne': True}

        energy = max(0.0, energy_kwh)
        update = {
            '$inc': {
                'fiat_balance': fiat_delta,
                'token_balance': token_delta,
                'lifetime_energy': energy,
                'emissions_offset': energy * CO2_KG_PER_KWH
            },
            '$set': {'updated_at': datetime.utcnow()}
        }
        if mark_bonus_claimed:
            update['$set']['bonus_claimed'] = True

        doc = self.collection.find_one_and_update(
            query,
            update,
            return_document=ReturnDocument.AFTER
        )
        if doc:
            return Account.from_dict(doc)

        raise self._rejection_reason(wallet, fiat_delta, token_delta, mark_bonus_claimed)

    def _rejection_reason(self, wallet, fiat_delta, token_delta, mark_bonus_claimed) -> BusinessError:
        current = self.find_by_wallet(wallet)
        if current is None:
            return BusinessError(APIError.USER_NOT_FOUND)

        if mark_bonus_claimed and current.bonus_claimed:
            return BusinessError(APIError.BONUS_ALREADY_CLAIMED)

        if fiat_delta < 0 and current.fiat_balance + fiat_delta < 0:
            return BusinessError(APIError.INSUFFICIENT_BALANCE, data={
                'required': round(-fiat_delta, 2),
                'available': round(current.fiat_balance, 2),
                'shortfall': round(-fiat_delta - current.fiat_balance, 2)
            })

        if token_delta < 0 and current.token_balance + token_delta < 0:
            return BusinessError(APIError.INSUFFICIENT_TOKENS, data={
                'required': round(-token_delta, 2),
                'available': round(current.token_balance, 2),
                'shortfall': round(-token_delta - current.token_balance, 2)
            })

        #NOTE: 필터 불일치 직후 다른 요청이 잔액을 바꾼 경우
        return BusinessError(APIError.INSUFFICIENT_BALANCE)

    def find_leaderboard(self, limit: int = 10) -> List[Account]:
        cursor = self.collection.find({}).sort('emissions_offset', -1).limit(min(limit, 100))
        return [Account.from_dict(doc) for doc in cursor]

    def get_rank(self, emissions_offset: float) -> int:
        return self.collection.count_documents({'emissions_offset': {'$gt': emissions_offset}}) + 1
