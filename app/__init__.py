"""
DeWatt Charging API
Flask 기반 EV 충전 예약 / 리워드 토큰 백엔드
"""

from flask import Flask
from flask_cors import CORS
from pymongo import MongoClient
import redis
import logging
import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration
from sentry_sdk.integrations.redis import RedisIntegration
from common.extensions import api
import common.extensions as extensions
from common.cache.key_value_store import MemoryKeyValueStore, RedisKeyValueStore
from common.utils.logging_utils import setup_logger


def create_app(config_name='default', mongo_db=None, ledger=None, kv_store=None):
    """
    Application Factory Pattern

    mongo_db / ledger / kv_store 를 넘기면 외부 연결 대신 주입된 객체를 사용한다 (테스트용)
    """
    app = Flask(__name__)

    from common.config.config import config
    config_class = config.get(config_name, config['default'])
    app.config.from_object(config_class)

    app.json.ensure_ascii = False

    if app.config.get('SENTRY_DSN'):
        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[
                FlaskIntegration(),
                RedisIntegration(),
            ],
            environment=app.config.get('SENTRY_ENVIRONMENT', 'development'),
            traces_sample_rate=app.config.get('SENTRY_TRACES_SAMPLE_RATE', 1.0),
            send_default_pii=False,
            attach_stacktrace=True,
        )

    log_level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'))
    logger = setup_logger(app, log_level, log_to_file=app.config.get('LOG_TO_FILE', True))

    app.config['API_TITLE'] = 'DeWatt Charging API'
    app.config['API_VERSION'] = 'v1'
    app.config['OPENAPI_VERSION'] = '3.0.3'
    app.config['OPENAPI_URL_PREFIX'] = '/'
    app.config['OPENAPI_SWAGGER_UI_PATH'] = '/swagger'
    app.config['OPENAPI_SWAGGER_UI_URL'] = 'https://cdn.jsdelivr.net/npm/swagger-ui-dist/'

    CORS(app,
         origins=app.config.get('CORS_ORIGINS', []),
         allow_headers=["Content-Type", "Authorization", "Accept", "X-Requested-With"],
         expose_headers=["Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
         methods=["GET", "POST", "OPTIONS"],
         max_age=3600)

    api.init_app(app)

    if mongo_db is not None:
        extensions.mongo_db = mongo_db
    else:
        _init_mongo(app, logger)
    app.mongo = extensions.mongo_db

    if kv_store is not None:
        extensions.kv_store = kv_store
    else:
        extensions.kv_store = _init_kv_store(app, logger)

    if ledger is not None:
        extensions.ledger = ledger
    else:
        from common.ledger import SolanaMemoLedger
        extensions.ledger = SolanaMemoLedger.from_config(app.config)

    if app.config.get('SCHEDULER_ENABLED'):
        from common.scheduler import init_scheduler
        init_scheduler(app)

    from app.routes.base import base_blueprint
    from app.routes.charging import charging_blueprint
    from app.routes.account import account_blueprint
    from app.routes.leaderboard import leaderboard_blueprint
    from app.routes.p2p import p2p_blueprint
    from app.routes.market import market_blueprint

    api.register_blueprint(base_blueprint)
    api.register_blueprint(charging_blueprint)
    api.register_blueprint(account_blueprint)
    api.register_blueprint(leaderboard_blueprint)
    api.register_blueprint(p2p_blueprint)
    api.register_blueprint(market_blueprint)

    from common.decorator.rate_limit_decorators import apply_rate_limit_headers
    app.after_request(apply_rate_limit_headers)

    from common.exception.error_handler import register_error_handlers
    register_error_handlers(app)

    @app.route('/health')
    def health_check():
        return {
            'success': True,
            'status': 'healthy',
            'service': 'dewatt'
        }, 200

    return app


def _init_mongo(app, logger):
    mongo_host = app.config.get('MONGO_HOST', 'localhost')
    mongo_port = app.config.get('MONGO_PORT', 27017)
    mongo_username = app.config.get('MONGO_USERNAME')
    mongo_password = app.config.get('MONGO_PASSWORD')

    if app.config.get('MONGO_URI'):
        mongo_uri = app.config['MONGO_URI']
    elif mongo_username and mongo_password:
        from urllib.parse import quote_plus
        mongo_uri = f"mongodb://{quote_plus(mongo_username)}:{quote_plus(mongo_password)}@{mongo_host}:{mongo_port}/"
    else:
        mongo_uri = f"mongodb://{mongo_host}:{mongo_port}/"

    logger.info(f"MongoDB 연결 시도: {mongo_host}:{mongo_port}")

    try:
        mongo_connection = MongoClient(
            mongo_uri,
            maxPoolSize=10,
            minPoolSize=2,
            maxIdleTimeMS=30000,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
            socketTimeoutMS=45000
        )
        mongo_connection.admin.command('ping')
        logger.info("MongoDB 연결 성공")

        extensions.mongo_client = mongo_connection
        extensions.mongo_db = mongo_connection[app.config['MONGO_DB_NAME']]

    except Exception as e:
        logger.error(f"MongoDB 연결 실패: {e}")
        raise


def _init_kv_store(app, logger):
    if app.config.get('KV_BACKEND') != 'redis':
        logger.info("레이트 리밋 / 잔액 캐시: 메모리 저장소 사용")
        return MemoryKeyValueStore()

    try:
        if app.config.get('REDIS_URL'):
            logger.info("Redis 연결 시도: REDIS_URL 사용")
            extensions.redis_client = redis.from_url(
                app.config['REDIS_URL'],
                decode_responses=True,
                socket_connect_timeout=5
            )
        else:
            redis_password = app.config.get('REDIS_PASSWORD') or None
            extensions.redis_client = redis.Redis(
                host=app.config.get('REDIS_HOST', 'localhost'),
                port=app.config.get('REDIS_PORT', 6379),
                db=app.config.get('REDIS_DB', 0),
                password=redis_password,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5
            )

        extensions.redis_client.ping()
        logger.info("Redis 연결 성공")
        return RedisKeyValueStore(extensions.redis_client)

    except redis.AuthenticationError as e:
        logger.warning(f"Redis 인증 실패: {e}")
        logger.warning("Redis 설정에서 REDIS_PASSWORD를 확인하세요")
    except redis.ConnectionError as e:
        logger.warning(f"Redis 연결 실패: {e}")

    #NOTE: 단일 프로세스에서만 정확한 윈도우/캐시 - 다중 인스턴스 배포에서는 Redis 필요
    logger.warning("레이트 리밋 / 잔액 캐시가 프로세스 메모리로 동작합니다")
    extensions.redis_client = None
    return MemoryKeyValueStore()
