import math

import common.extensions as extensions
from common.enum.error_code import APIError
from common.exception.exceptions import BusinessError
from common.utils.charging_utils import ensure_valid_wallet, mask_wallet
from common.utils.logging_utils import get_logger
from app.models.mongodb.p2p_order import OrderSide, P2POrder, P2POrderRepository
from app.dto.p2p import OrderDto, OrderResultDto, OrderListDto

logger = get_logger('p2p_service')


def _parse_side(side: str) -> OrderSide:
    try:
        return OrderSide(side)
    except ValueError:
        raise BusinessError(APIError.INVALID_INPUT_VALUE, message='side 는 buy 또는 sell 이어야 합니다.')


def _ensure_positive(value, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
        raise BusinessError(APIError.INVALID_INPUT_VALUE, message=f'{field_name} 값은 0보다 커야 합니다.')
    return float(value)


class P2PService:

    @staticmethod
    def create_order(wallet: str, side: str, amount: float, price: float) -> OrderResultDto:
        ensure_valid_wallet(wallet)
        order = P2POrderRepository(extensions.mongo_db).insert(P2POrder(
            wallet=wallet,
            side=_parse_side(side),
            amount=_ensure_positive(amount, 'amount'),
            price=_ensure_positive(price, 'price')
        ))

        logger.info(f"P2P order created: {order.order_id} ({order.side.value}) by {mask_wallet(wallet)}")
        return OrderResultDto(order=OrderDto.from_model(order))

    @staticmethod
    def list_counter_orders(side: str, limit: int = 50) -> OrderListDto:
        """요청한 side 의 반대편 open 주문 목록 (매수 요청이면 매도 주문)"""
        orders = P2POrderRepository(extensions.mongo_db).find_open_by_side(_parse_side(side).opposite, limit)
        return OrderListDto(orders=[OrderDto.from_model(o) for o in orders])

    @staticmethod
    def execute_order(order_id: str, wallet: str) -> OrderResultDto:
        ensure_valid_wallet(wallet)
        order_repo = P2POrderRepository(extensions.mongo_db)

        order = order_repo.execute(order_id, wallet)
        if order is None:
            existing = order_repo.find_by_id(order_id)
            if existing and existing.wallet == wallet:
                raise BusinessError(APIError.ORDER_SELF_EXECUTION)
            raise BusinessError(APIError.ORDER_NOT_FOUND)

        logger.info(f"P2P order executed: {order.order_id} by {mask_wallet(wallet)}")
        return OrderResultDto(order=OrderDto.from_model(order))
