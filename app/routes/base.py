from flask_smorest import Blueprint

from app.services.health_service import HealthService

base_blueprint = Blueprint(
    'base',
    __name__,
    url_prefix='/api',
    description='서비스 상태 점검'
)


@base_blueprint.route('/health', methods=['GET'])
def health():
    body, status = HealthService.check()
    return body, status
