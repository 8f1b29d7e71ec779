from flask_smorest import Blueprint

from app.schemas.account import LeaderboardRequestSchema, LeaderboardResponseSchema
from app.services.account_service import AccountService
from common.decorator.rate_limit_decorators import ip_rate_limited

leaderboard_blueprint = Blueprint(
    'leaderboard',
    __name__,
    url_prefix='/api/leaderboard',
    description='CO2 절감량 리더보드 API'
)


@leaderboard_blueprint.route('', methods=['GET'])
@ip_rate_limited()
@leaderboard_blueprint.arguments(LeaderboardRequestSchema, location='query')
@leaderboard_blueprint.response(200, LeaderboardResponseSchema)
def get_leaderboard(args):
    return AccountService.get_leaderboard(args.get('limit', 10))
