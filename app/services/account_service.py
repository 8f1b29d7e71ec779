import time
from datetime import datetime
from typing import Dict

from flask import current_app

import common.extensions as extensions
from common.cache.balance_cache import BalanceCache
from common.enum.error_code import APIError
from common.exception.exceptions import BusinessError
from common.utils.charging_utils import ensure_valid_wallet, mask_wallet
from common.utils.logging_utils import get_logger
from common.utils.rate_limiter import RateLimiter
from app.models.mongodb.account import Account, AccountRepository
from app.models.mongodb.charging_session import ChargingSessionRepository
from app.dto.charging import BalanceDto
from app.dto.account import (
    AccountBalanceDto, BonusEligibilityDto, BonusGrantDto,
    AccountStatsDto, LeaderboardEntryDto, LeaderboardDto
)

logger = get_logger('account_service')


def _balance_cache() -> BalanceCache:
    return BalanceCache(
        extensions.kv_store,
        ttl=current_app.config['BALANCE_CACHE_TTL'],
        prefix=current_app.config['KV_KEY_PREFIX']
    )


def _to_balance_dto(account: Account) -> BalanceDto:
    return BalanceDto(
        fiat=round(account.fiat_balance, 2),
        token=round(account.token_balance, 2)
    )


class AccountService:

    @staticmethod
    def get_balance(wallet: str) -> Dict:
        """
        현재 잔액 조회 (캐시 미사용). 계정이 없으면 잔액 0으로 생성한다.

        반환: {'fiat', 'token', 'is_new', 'bonus_claimed'}
        """
        ensure_valid_wallet(wallet)
        account, is_new = AccountRepository(extensions.mongo_db).get_or_create(wallet)
        return {
            'fiat': account.fiat_balance,
            'token': account.token_balance,
            'is_new': is_new,
            'bonus_claimed': account.bonus_claimed
        }

    @staticmethod
    def adjust_balance(
        wallet: str,
        fiat_delta: float,
        token_delta: float,
        bypass_non_negative_check: bool = False,
        energy_kwh: float = 0.0,
        mark_bonus_claimed: bool = False
    ) -> Account:
        ensure_valid_wallet(wallet)
        account = AccountRepository(extensions.mongo_db).adjust_balance(
            wallet,
            fiat_delta,
            token_delta,
            bypass_non_negative_check=bypass_non_negative_check,
            energy_kwh=energy_kwh,
            mark_bonus_claimed=mark_bonus_claimed
        )
        _balance_cache().invalidate(wallet)

        logger.info(
            f"Balance adjusted for {mask_wallet(wallet)}: "
            f"fiat {fiat_delta:+.2f}, token {token_delta:+.2f}"
        )
        return account

    @staticmethod
    def get_cached_balance(wallet: str) -> AccountBalanceDto:
        start_time = time.time()
        ensure_valid_wallet(wallet)
        cache = _balance_cache()

        cached = cache.get(wallet)
        if cached:
            logger.debug(f"Returning cached balance for {mask_wallet(wallet)}")
            dto = AccountBalanceDto.from_dict(cached)
            dto.cached = True
            dto.processing_time = int((time.time() - start_time) * 1000)
            return dto

        dto = AccountService._load_balance(wallet)
        cache.put(wallet, dto.to_dict())
        dto.processing_time = int((time.time() - start_time) * 1000)
        return dto

    @staticmethod
    def refresh_balance(wallet: str) -> AccountBalanceDto:
        start_time = time.time()
        ensure_valid_wallet(wallet)
        _balance_cache().invalidate(wallet)

        dto = AccountService._load_balance(wallet)
        dto.refreshed = True
        dto.processing_time = int((time.time() - start_time) * 1000)
        return dto

    @staticmethod
    def _load_balance(wallet: str) -> AccountBalanceDto:
        account, is_new = AccountRepository(extensions.mongo_db).get_or_create(wallet)
        return AccountBalanceDto(
            balance=_to_balance_dto(account),
            is_new_user=is_new,
            welcome_bonus_received=account.bonus_claimed
        )

    @staticmethod
    def get_bonus_eligibility(wallet: str) -> BonusEligibilityDto:
        balance = AccountService.get_balance(wallet)
        enabled = current_app.config['ENABLE_WELCOME_BONUS']
        return BonusEligibilityDto(
            eligible=enabled and not balance['bonus_claimed'],
            already_claimed=balance['bonus_claimed'],
            bonus_amount=BalanceDto(
                fiat=current_app.config['WELCOME_BONUS_FIAT'],
                token=current_app.config['WELCOME_BONUS_TOKEN']
            )
        )

    @staticmethod
    def claim_welcome_bonus(wallet: str) -> BonusGrantDto:
        start_time = time.time()
        ensure_valid_wallet(wallet)

        if not current_app.config['ENABLE_WELCOME_BONUS']:
            raise BusinessError(APIError.BONUS_DISABLED)

        RateLimiter(
            extensions.kv_store,
            scope='welcome_bonus',
            limit=current_app.config['BONUS_RATE_LIMIT'],
            window_seconds=current_app.config['BONUS_RATE_WINDOW'],
            prefix=current_app.config['KV_KEY_PREFIX']
        ).enforce(wallet)

        balance = AccountService.get_balance(wallet)
        if balance['bonus_claimed']:
            raise BusinessError(APIError.BONUS_ALREADY_CLAIMED, data={'already_claimed': True})

        fiat_bonus = current_app.config['WELCOME_BONUS_FIAT']
        token_bonus = current_app.config['WELCOME_BONUS_TOKEN']

        receipt = extensions.ledger.send_memo({
            'type': 'welcome_bonus',
            'amount': fiat_bonus,
            'currency': 'USD',
            'tokens': token_bonus,
            'wallet': mask_wallet(wallet),
            'timestamp': datetime.utcnow().isoformat() + 'Z',
            'network': current_app.config['SOLANA_CLUSTER'],
            'app': current_app.config['LEDGER_APP_NAME']
        })

        #NOTE: 보너스 지급은 음수 검사 예외 경로 - bonus_claimed 필터로 중복 지급만 막는다
        account = AccountService.adjust_balance(
            wallet,
            fiat_bonus,
            token_bonus,
            bypass_non_negative_check=True,
            mark_bonus_claimed=True
        )

        logger.info(f"Welcome bonus granted to {mask_wallet(wallet)}")

        return BonusGrantDto(
            fiat_bonus=fiat_bonus,
            token_bonus=token_bonus,
            signature=receipt.signature,
            explorer_link=receipt.explorer_link,
            ledger_placeholder=receipt.placeholder,
            new_balance=_to_balance_dto(account),
            processing_time=int((time.time() - start_time) * 1000)
        )

    @staticmethod
    def get_stats(wallet: str) -> AccountStatsDto:
        ensure_valid_wallet(wallet)
        account_repo = AccountRepository(extensions.mongo_db)

        account = account_repo.find_by_wallet(wallet)
        if not account:
            raise BusinessError(APIError.USER_NOT_FOUND)

        sessions = ChargingSessionRepository(extensions.mongo_db).find_billable_by_wallet(wallet)

        return AccountStatsDto(
            total_sessions=len(sessions),
            lifetime_energy=round(account.lifetime_energy, 2),
            total_spent=round(sum(s.cost for s in sessions), 2),
            emissions_offset=round(account.emissions_offset, 2),
            rank=account_repo.get_rank(account.emissions_offset)
        )

    @staticmethod
    def get_leaderboard(limit: int = 10) -> LeaderboardDto:
        accounts = AccountRepository(extensions.mongo_db).find_leaderboard(limit)
        return LeaderboardDto(leaderboard=[
            LeaderboardEntryDto(
                rank=idx + 1,
                wallet=account.wallet,
                lifetime_energy=round(account.lifetime_energy, 2),
                emissions_offset=round(account.emissions_offset, 2)
            )
            for idx, account in enumerate(accounts)
        ])
