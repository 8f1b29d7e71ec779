from marshmallow import Schema, fields, validate

from app.schemas.common_schema import SuccessResponseSchema, BalanceSchema, wallet_field


class WalletRequestSchema(Schema):
    wallet = wallet_field()


class BalanceResponseSchema(SuccessResponseSchema):
    balance = fields.Nested(BalanceSchema)
    is_new_user = fields.Boolean()
    welcome_bonus_received = fields.Boolean()
    cached = fields.Boolean()
    refreshed = fields.Boolean()
    processing_time = fields.Integer()


class BonusEligibilityResponseSchema(SuccessResponseSchema):
    eligible = fields.Boolean()
    already_claimed = fields.Boolean()
    bonus_amount = fields.Nested(BalanceSchema)


class BonusGrantResponseSchema(SuccessResponseSchema):
    fiat_bonus = fields.Float()
    token_bonus = fields.Float()
    signature = fields.String()
    explorer_link = fields.String()
    ledger_placeholder = fields.Boolean()
    new_balance = fields.Nested(BalanceSchema)
    processing_time = fields.Integer()


class StatsResponseSchema(SuccessResponseSchema):
    total_sessions = fields.Integer()
    lifetime_energy = fields.Float()
    total_spent = fields.Float()
    emissions_offset = fields.Float(metadata={'description': '누적 CO2 절감량 (kg)'})
    rank = fields.Integer()


# ==================== 리더보드 ====================

class LeaderboardRequestSchema(Schema):
    limit = fields.Integer(load_default=10, validate=validate.Range(min=1, max=100))


class LeaderboardEntrySchema(Schema):
    rank = fields.Integer()
    wallet = fields.String()
    lifetime_energy = fields.Float()
    emissions_offset = fields.Float()


class LeaderboardResponseSchema(SuccessResponseSchema):
    leaderboard = fields.List(fields.Nested(LeaderboardEntrySchema))
