from flask_smorest import Blueprint

from app.schemas.common_schema import WalletQuerySchema
from app.schemas.account import (
    WalletRequestSchema, BalanceResponseSchema,
    BonusEligibilityResponseSchema, BonusGrantResponseSchema,
    StatsResponseSchema
)
from app.services.account_service import AccountService

account_blueprint = Blueprint(
    'account',
    __name__,
    url_prefix='/api/user',
    description='잔액 / 웰컴 보너스 / 통계 API'
)


@account_blueprint.route('/balance', methods=['GET'])
@account_blueprint.arguments(WalletQuerySchema, location='query')
@account_blueprint.response(200, BalanceResponseSchema)
def get_balance(args):
    return AccountService.get_cached_balance(args['wallet'])


@account_blueprint.route('/balance', methods=['POST'])
@account_blueprint.arguments(WalletRequestSchema)
@account_blueprint.response(200, BalanceResponseSchema)
def refresh_balance(data):
    return AccountService.refresh_balance(data['wallet'])


@account_blueprint.route('/welcome-bonus', methods=['GET'])
@account_blueprint.arguments(WalletQuerySchema, location='query')
@account_blueprint.response(200, BonusEligibilityResponseSchema)
def get_bonus_eligibility(args):
    return AccountService.get_bonus_eligibility(args['wallet'])


@account_blueprint.route('/welcome-bonus', methods=['POST'])
@account_blueprint.arguments(WalletRequestSchema)
@account_blueprint.response(200, BonusGrantResponseSchema)
def claim_welcome_bonus(data):
    return AccountService.claim_welcome_bonus(data['wallet'])


@account_blueprint.route('/stats', methods=['GET'])
@account_blueprint.arguments(WalletQuerySchema, location='query')
@account_blueprint.response(200, StatsResponseSchema)
def get_stats(args):
    return AccountService.get_stats(args['wallet'])
