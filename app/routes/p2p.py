from flask_smorest import Blueprint

from app.schemas.p2p import (
    CreateOrderRequestSchema, ExecuteOrderRequestSchema,
    OrderListRequestSchema, OrderResponseSchema, OrderListResponseSchema
)
from app.services.p2p_service import P2PService
from common.decorator.rate_limit_decorators import ip_rate_limited

p2p_blueprint = Blueprint(
    'p2p',
    __name__,
    url_prefix='/api/p2p',
    description='P2P 에너지 거래 API'
)


@p2p_blueprint.route('/create', methods=['POST'])
@ip_rate_limited()
@p2p_blueprint.arguments(CreateOrderRequestSchema)
@p2p_blueprint.response(200, OrderResponseSchema)
def create_order(data):
    return P2PService.create_order(data['wallet'], data['side'], data['amount'], data['price'])


@p2p_blueprint.route('/execute', methods=['POST'])
@ip_rate_limited()
@p2p_blueprint.arguments(ExecuteOrderRequestSchema)
@p2p_blueprint.response(200, OrderResponseSchema)
def execute_order(data):
    return P2PService.execute_order(data['order_id'], data['wallet'])


@p2p_blueprint.route('/orders', methods=['GET'])
@p2p_blueprint.arguments(OrderListRequestSchema, location='query')
@p2p_blueprint.response(200, OrderListResponseSchema)
def list_orders(args):
    return P2PService.list_counter_orders(args['side'], args.get('limit', 50))
