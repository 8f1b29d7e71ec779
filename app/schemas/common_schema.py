from marshmallow import Schema, fields, validate

from common.utils.charging_utils import WALLET_PATTERN


def wallet_field(required=True, **kwargs):
    return fields.String(
        required=required,
        validate=validate.Regexp(WALLET_PATTERN, error='유효하지 않은 지갑 주소입니다.'),
        metadata={'description': 'Solana 지갑 주소 (base58)'},
        **kwargs
    )


class SuccessResponseSchema(Schema):
    success = fields.Boolean(dump_default=True, metadata={'description': '성공 여부'})


class BalanceSchema(Schema):
    fiat = fields.Float(metadata={'description': '법정화폐 잔액 (USD)'})
    token = fields.Float(metadata={'description': '리워드 토큰 잔액 (EvT)'})


class WalletQuerySchema(Schema):
    wallet = wallet_field()
