import math
import time
from datetime import datetime

from flask import current_app

import common.extensions as extensions
from common.enum.error_code import APIError
from common.exception.exceptions import BusinessError
from common.utils.charging_utils import ensure_valid_wallet, generate_purchase_id, mask_wallet
from common.utils.logging_utils import get_logger
from common.utils.rate_limiter import RateLimiter
from app.services.account_service import AccountService
from app.dto.market import PurchaseResultDto

logger = get_logger('market_service')


class MarketService:

    @staticmethod
    def purchase(item_id: str, wallet: str, cost: float) -> PurchaseResultDto:
        start_time = time.time()
        ensure_valid_wallet(wallet)

        RateLimiter(
            extensions.kv_store,
            scope='market',
            limit=current_app.config['MARKET_RATE_LIMIT'],
            window_seconds=current_app.config['MARKET_RATE_WINDOW'],
            prefix=current_app.config['KV_KEY_PREFIX']
        ).enforce(wallet)

        if not isinstance(item_id, str) or not 0 < len(item_id) <= 100:
            raise BusinessError(APIError.INVALID_INPUT_VALUE, message='상품 ID 형식이 올바르지 않습니다.')

        max_cost = current_app.config['MAX_MARKETPLACE_COST']
        if isinstance(cost, bool) or not isinstance(cost, (int, float)) \
                or not math.isfinite(cost) or cost <= 0 or cost > max_cost:
            raise BusinessError(
                APIError.INVALID_INPUT_VALUE,
                message=f'cost 값은 0 초과 {max_cost:g} 이하여야 합니다.'
            )

        balance = AccountService.get_balance(wallet)
        if balance['token'] < cost:
            raise BusinessError(APIError.INSUFFICIENT_TOKENS, data={
                'required': cost,
                'available': balance['token'],
                'shortfall': round(cost - balance['token'], 2)
            })

        #NOTE: 조회 이후 다른 차감이 끼어들어도 필터 조건에서 다시 걸러진다
        account = AccountService.adjust_balance(wallet, 0, -cost)

        purchase_id = generate_purchase_id()
        logger.info(f"Purchase {purchase_id}: {item_id} for {cost} tokens by {mask_wallet(wallet)}")

        return PurchaseResultDto(
            purchase_id=purchase_id,
            item_id=item_id,
            cost=cost,
            new_token_balance=round(account.token_balance, 2),
            timestamp=datetime.utcnow().isoformat() + 'Z',
            processing_time=int((time.time() - start_time) * 1000)
        )
