from marshmallow import Schema, fields, validate

from app.schemas.common_schema import SuccessResponseSchema, BalanceSchema, wallet_field


class BookSessionRequestSchema(Schema):
    station_id = fields.String(required=True, validate=validate.Length(min=1, max=100), metadata={'description': '충전소 ID'})
    wallet = wallet_field()
    kwh = fields.Float(required=True, metadata={'description': '충전량 (0 < kWh <= 1000)'})
    total_cost = fields.Float(required=True, metadata={'description': '결제 금액 (0 < cost <= 10000)'})


class BookSessionResponseSchema(SuccessResponseSchema):
    charge_id = fields.String()
    explorer_link = fields.String()
    signature = fields.String()
    ledger_placeholder = fields.Boolean(metadata={'description': '원장 연결 실패로 임시 서명을 사용했는지 여부'})
    tokens_earned = fields.Float()
    co2_saved = fields.Float()
    memo = fields.Dict()
    new_balance = fields.Nested(BalanceSchema)
    processing_time = fields.Integer(metadata={'description': '처리 시간 (ms)'})


class SessionChangeRequestSchema(Schema):
    charge_id = fields.String(required=True, metadata={'description': '충전 세션 ID'})
    wallet = wallet_field()


class CompleteSessionRequestSchema(Schema):
    charge_id = fields.String(required=True, metadata={'description': '충전 세션 ID'})
    wallet = wallet_field(required=False, load_default=None)


class SessionStatusChangeResponseSchema(SuccessResponseSchema):
    charge_id = fields.String()
    status = fields.String()


class SessionListRequestSchema(Schema):
    wallet = wallet_field()
    limit = fields.Integer(load_default=50, validate=validate.Range(min=1, max=100))


class SessionSchema(Schema):
    charge_id = fields.String()
    station_id = fields.String()
    wallet = fields.String()
    energy_kwh = fields.Float()
    cost = fields.Float()
    status = fields.String()
    signature = fields.String()
    explorer_link = fields.String()
    ledger_placeholder = fields.Boolean()
    created_at = fields.String()
    completed_at = fields.String(allow_none=True)


class SessionListResponseSchema(SuccessResponseSchema):
    sessions = fields.List(fields.Nested(SessionSchema))
    total = fields.Integer()


class SessionResponseSchema(SuccessResponseSchema):
    session = fields.Nested(SessionSchema)
