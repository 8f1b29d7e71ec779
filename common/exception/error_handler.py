from flask import current_app, jsonify
from pymongo.errors import PyMongoError
from werkzeug.exceptions import HTTPException

from common.enum.error_code import APIError
from common.exception.exceptions import BusinessError
from common.utils.logging_utils import get_logger

logger = get_logger('error_handler')


def _fail_body(message, code, **extra):
    body = {
        "success": False,
        "error": message,
        "code": code,
    }
    body.update(extra)
    return body


def register_error_handlers(app):
    @app.errorhandler(BusinessError)
    def handle_business_error(e):
        response = jsonify(_fail_body(e.message, e.error_enum.code, **e.data))
        response.status_code = e.error_enum.status

        if e.error_enum is APIError.RATE_LIMIT_EXCEEDED and 'retry_after' in e.data:
            response.headers['Retry-After'] = str(e.data['retry_after'])

        return response

    @app.errorhandler(PyMongoError)
    def handle_db_error(e):
        logger.error(f"MongoDB error: {e}")
        extra = {}
        if current_app.config.get('EXPOSE_ERROR_DETAILS'):
            extra['details'] = str(e)
        return jsonify(_fail_body(APIError.DB_ERROR.message, APIError.DB_ERROR.code, **extra)), APIError.DB_ERROR.status

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        #NOTE: webargs 스키마 검증 실패는 422로 올라오므로 400으로 변환
        if e.code == 422:
            messages = getattr(e, 'data', {}).get('messages', {})
            return jsonify(_fail_body(
                APIError.INVALID_INPUT_VALUE.message,
                APIError.INVALID_INPUT_VALUE.code,
                details=messages
            )), APIError.INVALID_INPUT_VALUE.status

        if e.code == 404:
            return jsonify(_fail_body(
                APIError.RESOURCE_NOT_FOUND.message,
                APIError.RESOURCE_NOT_FOUND.code
            )), 404

        return jsonify(_fail_body(e.description or e.name, f"H{e.code}")), e.code

    @app.errorhandler(Exception)
    def handle_internal_error(e):
        logger.exception(f"Unhandled error: {e}")
        extra = {}
        if current_app.config.get('EXPOSE_ERROR_DETAILS'):
            extra['details'] = str(e)
        return jsonify(_fail_body(
            APIError.INTERNAL_SERVER_ERROR.message,
            APIError.INTERNAL_SERVER_ERROR.code,
            **extra
        )), 500
