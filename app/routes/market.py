from flask_smorest import Blueprint

from app.schemas.market import PurchaseRequestSchema, PurchaseResponseSchema
from app.services.market_service import MarketService

market_blueprint = Blueprint(
    'market',
    __name__,
    url_prefix='/api/market',
    description='리워드 토큰 마켓 API'
)


@market_blueprint.route('/purchase', methods=['POST'])
@market_blueprint.arguments(PurchaseRequestSchema)
@market_blueprint.response(200, PurchaseResponseSchema)
def purchase(data):
    return MarketService.purchase(data['item_id'], data['wallet'], data['cost'])
