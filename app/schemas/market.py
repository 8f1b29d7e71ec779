from marshmallow import Schema, fields, validate

from app.schemas.common_schema import SuccessResponseSchema, wallet_field


class PurchaseRequestSchema(Schema):
    item_id = fields.String(required=True, validate=validate.Length(min=1, max=100))
    wallet = wallet_field()
    cost = fields.Float(required=True, metadata={'description': '토큰 가격 (0 < cost <= 1,000,000)'})


class PurchaseResponseSchema(SuccessResponseSchema):
    purchase_id = fields.String()
    item_id = fields.String()
    cost = fields.Float()
    new_token_balance = fields.Float()
    timestamp = fields.String()
    processing_time = fields.Integer()
