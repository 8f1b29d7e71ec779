import math
import time
from datetime import datetime
from typing import Dict

from flask import current_app

import common.extensions as extensions
from common.enum.error_code import APIError
from common.exception.exceptions import BusinessError
from common.saga import SagaOrchestrator
from common.utils.charging_utils import ensure_valid_wallet, generate_charge_id, mask_wallet
from common.utils.logging_utils import get_logger
from common.utils.rate_limiter import RateLimiter
from app.models.mongodb.account import CO2_KG_PER_KWH
from app.models.mongodb.charging_session import ChargingSession, ChargingSessionRepository, SessionStatus
from app.models.mongodb.saga_transaction_log import SagaTransactionLogRepository, BOOKING_SAGA_TYPE
from app.services.account_service import AccountService
from app.dto.charging import (
    BalanceDto, BookingResultDto, SessionDto,
    SessionListDto, SessionStatusChangeDto
)

logger = get_logger('charging_service')


def _ensure_amount(value, upper_bound: float, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise BusinessError(APIError.INVALID_INPUT_VALUE, message=f'{field_name} 값이 올바르지 않습니다.')
    if value <= 0 or value > upper_bound:
        raise BusinessError(
            APIError.INVALID_INPUT_VALUE,
            message=f'{field_name} 값은 0 초과 {upper_bound:g} 이하여야 합니다.'
        )
    return float(value)


class ChargingService:

    @staticmethod
    def book_session(station_id: str, wallet: str, kwh: float, total_cost: float) -> BookingResultDto:
        """
        충전 예약 사가.

        1. 입력 검증, 지갑 단위 rate limit, 잔액 확인 (여기까지는 상태 변경 없음)
        2. record_ledger -> create_session -> adjust_balance 순서로 사가 실행
        3. adjust_balance 실패 시 세션을 cancelled 로 보상, 에러에는 항상 charge_id 포함
        """
        start_time = time.time()

        if not station_id:
            raise BusinessError(APIError.INVALID_INPUT_VALUE, message='충전소 ID가 필요합니다.')
        ensure_valid_wallet(wallet)
        kwh = _ensure_amount(kwh, current_app.config['MAX_CHARGING_KWH'], 'kWh')
        cost = _ensure_amount(total_cost, current_app.config['MAX_CHARGING_COST'], 'totalCost')

        RateLimiter(
            extensions.kv_store,
            scope='booking',
            limit=current_app.config['BOOKING_RATE_LIMIT'],
            window_seconds=current_app.config['BOOKING_RATE_WINDOW'],
            prefix=current_app.config['KV_KEY_PREFIX']
        ).enforce(wallet)

        balance = AccountService.get_balance(wallet)
        if balance['fiat'] < cost:
            raise BusinessError(APIError.INSUFFICIENT_BALANCE, data={
                'required': round(cost, 2),
                'available': round(balance['fiat'], 2),
                'shortfall': round(cost - balance['fiat'], 2)
            })

        charge_id = generate_charge_id()
        memo = ChargingService._build_memo(charge_id, station_id, wallet, kwh, cost)

        session_repo = ChargingSessionRepository(extensions.mongo_db)

        def record_ledger(context):
            return extensions.ledger.send_memo(memo)

        def create_session(context):
            receipt = context.get_result('record_ledger')
            return session_repo.insert(ChargingSession(
                charge_id=charge_id,
                station_id=station_id,
                wallet=wallet,
                energy_kwh=kwh,
                cost=cost,
                signature=receipt.signature,
                explorer_link=receipt.explorer_link,
                ledger_placeholder=receipt.placeholder,
                memo=memo
            ))

        def cancel_session(compensation_data):
            session_repo.cancel(compensation_data['charge_id'])
            logger.warning(f"Session cancelled by compensation: {compensation_data['charge_id']}")

        def adjust_balance(context):
            return AccountService.adjust_balance(wallet, -cost, kwh, energy_kwh=kwh)

        saga = SagaOrchestrator(
            SagaTransactionLogRepository(extensions.mongo_db),
            metadata={
                'type': BOOKING_SAGA_TYPE,
                'charge_id': charge_id,
                'wallet': wallet
            }
        )
        saga.add_step('record_ledger', record_ledger)
        saga.add_step(
            'create_session',
            create_session,
            compensate=cancel_session,
            extract_compensation_data=lambda session: {'charge_id': session.charge_id}
        )
        saga.add_step('adjust_balance', adjust_balance)

        success, error = saga.execute()
        if not success:
            raise ChargingService._booking_error(error, charge_id)

        receipt = saga.context.get_result('record_ledger')
        account = saga.context.get_result('adjust_balance')

        processing_time = int((time.time() - start_time) * 1000)
        logger.info(f"Booking {charge_id} completed for {mask_wallet(wallet)} in {processing_time}ms")

        return BookingResultDto(
            charge_id=charge_id,
            explorer_link=receipt.explorer_link,
            signature=receipt.signature,
            ledger_placeholder=receipt.placeholder,
            tokens_earned=kwh,
            co2_saved=round(kwh * CO2_KG_PER_KWH, 2),
            memo=memo,
            new_balance=BalanceDto(
                fiat=round(account.fiat_balance, 2),
                token=round(account.token_balance, 2)
            ),
            processing_time=processing_time
        )

    @staticmethod
    def _build_memo(charge_id: str, station_id: str, wallet: str, kwh: float, cost: float) -> Dict:
        return {
            'type': 'charging_session',
            'charge_id': charge_id,
            'station': station_id,
            'kwh': kwh,
            'cost': cost,
            'price_per_kwh': round(cost / kwh, 4),
            'wallet': mask_wallet(wallet),
            'timestamp': datetime.utcnow().isoformat() + 'Z',
            'network': current_app.config['SOLANA_CLUSTER'],
            'app': current_app.config['LEDGER_APP_NAME'],
            'version': current_app.config['LEDGER_APP_VERSION']
        }

    @staticmethod
    def _booking_error(error: Exception, charge_id: str) -> BusinessError:
        if isinstance(error, BusinessError):
            return BusinessError(error.error_enum, message=error.message, data={**error.data, 'charge_id': charge_id})

        data = {'charge_id': charge_id}
        if current_app.config['EXPOSE_ERROR_DETAILS']:
            data['details'] = str(error)
        return BusinessError(APIError.BOOKING_FAILED, data=data)

    @staticmethod
    def get_session(charge_id: str) -> SessionDto:
        session = ChargingSessionRepository(extensions.mongo_db).find_by_charge_id(charge_id)
        if not session:
            raise BusinessError(APIError.SESSION_NOT_FOUND)
        return SessionDto.from_model(session)

    @staticmethod
    def list_sessions(wallet: str, limit: int = 50) -> SessionListDto:
        ensure_valid_wallet(wallet)
        sessions = ChargingSessionRepository(extensions.mongo_db).find_by_wallet(wallet, limit)
        return SessionListDto(
            sessions=[SessionDto.from_model(s) for s in sessions],
            total=len(sessions)
        )

    @staticmethod
    def cancel_session(charge_id: str, wallet: str) -> SessionStatusChangeDto:
        #NOTE: 취소 시 환불 없음 - 결제된 금액과 적립 토큰은 그대로 유지
        ensure_valid_wallet(wallet)
        if not ChargingSessionRepository(extensions.mongo_db).cancel(charge_id, wallet):
            raise BusinessError(APIError.SESSION_NOT_FOUND)

        logger.info(f"Session cancelled: {charge_id} by {mask_wallet(wallet)}")
        return SessionStatusChangeDto(charge_id=charge_id, status=SessionStatus.CANCELLED.value)

    @staticmethod
    def complete_session(charge_id: str, wallet: str = None) -> SessionStatusChangeDto:
        if wallet is not None:
            ensure_valid_wallet(wallet)
        if not ChargingSessionRepository(extensions.mongo_db).complete(charge_id, wallet):
            raise BusinessError(APIError.SESSION_NOT_FOUND)

        logger.info(f"Session completed: {charge_id}")
        return SessionStatusChangeDto(charge_id=charge_id, status=SessionStatus.COMPLETED.value)
