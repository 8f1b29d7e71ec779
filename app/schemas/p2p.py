from marshmallow import Schema, fields, validate

from app.schemas.common_schema import SuccessResponseSchema, wallet_field

SIDES = ['buy', 'sell']


class CreateOrderRequestSchema(Schema):
    wallet = wallet_field()
    side = fields.String(required=True, validate=validate.OneOf(SIDES))
    amount = fields.Float(required=True, validate=validate.Range(min=0, min_inclusive=False))
    price = fields.Float(required=True, validate=validate.Range(min=0, min_inclusive=False))


class ExecuteOrderRequestSchema(Schema):
    order_id = fields.String(required=True)
    wallet = wallet_field()


class OrderListRequestSchema(Schema):
    side = fields.String(required=True, validate=validate.OneOf(SIDES), metadata={'description': '내 주문 방향 (반대편 주문을 조회)'})
    limit = fields.Integer(load_default=50, validate=validate.Range(min=1, max=100))


class OrderSchema(Schema):
    order_id = fields.String()
    wallet = fields.String()
    side = fields.String()
    amount = fields.Float()
    price = fields.Float()
    status = fields.String()
    counterparty = fields.String(allow_none=True)
    created_at = fields.String()
    completed_at = fields.String(allow_none=True)


class OrderResponseSchema(SuccessResponseSchema):
    order = fields.Nested(OrderSchema)


class OrderListResponseSchema(SuccessResponseSchema):
    orders = fields.List(fields.Nested(OrderSchema))
