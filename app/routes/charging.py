from flask_smorest import Blueprint

from app.schemas.charging import (
    BookSessionRequestSchema, BookSessionResponseSchema,
    SessionChangeRequestSchema, CompleteSessionRequestSchema, SessionStatusChangeResponseSchema,
    SessionListRequestSchema, SessionListResponseSchema,
    SessionResponseSchema
)
from app.services.charging_service import ChargingService

charging_blueprint = Blueprint(
    'charging',
    __name__,
    url_prefix='/api/charging',
    description='충전 예약 / 세션 API'
)


@charging_blueprint.route('/book', methods=['POST'])
@charging_blueprint.arguments(BookSessionRequestSchema)
@charging_blueprint.response(200, BookSessionResponseSchema)
def book(data):
    return ChargingService.book_session(
        data['station_id'],
        data['wallet'],
        data['kwh'],
        data['total_cost']
    )


@charging_blueprint.route('/cancel', methods=['POST'])
@charging_blueprint.arguments(SessionChangeRequestSchema)
@charging_blueprint.response(200, SessionStatusChangeResponseSchema)
def cancel(data):
    return ChargingService.cancel_session(data['charge_id'], data['wallet'])


@charging_blueprint.route('/complete', methods=['POST'])
@charging_blueprint.arguments(CompleteSessionRequestSchema)
@charging_blueprint.response(200, SessionStatusChangeResponseSchema)
def complete(data):
    return ChargingService.complete_session(data['charge_id'], data.get('wallet'))


@charging_blueprint.route('/sessions', methods=['GET'])
@charging_blueprint.arguments(SessionListRequestSchema, location='query')
@charging_blueprint.response(200, SessionListResponseSchema)
def list_sessions(args):
    return ChargingService.list_sessions(args['wallet'], args.get('limit', 50))


@charging_blueprint.route('/session/<string:charge_id>', methods=['GET'])
@charging_blueprint.response(200, SessionResponseSchema)
def get_session(charge_id):
    return {'session': ChargingService.get_session(charge_id)}
