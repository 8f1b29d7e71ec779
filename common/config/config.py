import os


def _get_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY')
    FLASK_ENV = os.getenv('FLASK_ENV', 'development')

    MONGO_URI = os.getenv('MONGO_URI')
    MONGO_USERNAME = os.getenv('MONGO_USERNAME')
    MONGO_PASSWORD = os.getenv('MONGO_PASSWORD')
    MONGO_HOST = os.getenv('MONGO_HOST', 'localhost')
    MONGO_PORT = int(os.getenv('MONGO_PORT', 27017))
    MONGO_DB_NAME = os.getenv('MONGO_DB_NAME', 'dewatt')

    # NOTE: redis | memory
    KV_BACKEND = os.getenv('KV_BACKEND', 'redis')
    REDIS_HOST = os.getenv('REDIS_HOST', 'localhost')
    REDIS_PORT = int(os.getenv('REDIS_PORT', 6379))
    REDIS_DB = int(os.getenv('REDIS_DB', 0))
    REDIS_PASSWORD = os.getenv('REDIS_PASSWORD')
    REDIS_URL = os.getenv('REDIS_URL')
    KV_KEY_PREFIX = os.getenv('KV_KEY_PREFIX', 'dewatt')

    SOLANA_RPC_URL = os.getenv('SOLANA_RPC_URL', 'https://api.devnet.solana.com')
    SOLANA_CLUSTER = os.getenv('SOLANA_CLUSTER', 'devnet')
    TREASURY_SECRET_KEY = os.getenv('TREASURY_SECRET_KEY')
    LEDGER_MAX_RETRIES = int(os.getenv('LEDGER_MAX_RETRIES', 3))
    LEDGER_RETRY_BACKOFF = float(os.getenv('LEDGER_RETRY_BACKOFF', 2.0))
    LEDGER_APP_NAME = 'DeWatt'
    LEDGER_APP_VERSION = '1.0.0'

    MAX_CHARGING_KWH = float(os.getenv('MAX_CHARGING_KWH', 1000))
    MAX_CHARGING_COST = float(os.getenv('MAX_CHARGING_COST', 10000))
    MAX_MARKETPLACE_COST = float(os.getenv('MAX_MARKETPLACE_COST', 1000000))

    BOOKING_RATE_LIMIT = int(os.getenv('BOOKING_RATE_LIMIT', 10))
    BOOKING_RATE_WINDOW = int(os.getenv('BOOKING_RATE_WINDOW', 60))
    BONUS_RATE_LIMIT = int(os.getenv('BONUS_RATE_LIMIT', 3))
    BONUS_RATE_WINDOW = int(os.getenv('BONUS_RATE_WINDOW', 3600))
    MARKET_RATE_LIMIT = int(os.getenv('MARKET_RATE_LIMIT', 20))
    MARKET_RATE_WINDOW = int(os.getenv('MARKET_RATE_WINDOW', 60))
    DEFAULT_RATE_LIMIT = int(os.getenv('RATE_LIMIT_MAX', 100))
    DEFAULT_RATE_WINDOW = int(os.getenv('RATE_LIMIT_WINDOW', 900))

    BALANCE_CACHE_TTL = float(os.getenv('BALANCE_CACHE_TTL', 5))

    ENABLE_WELCOME_BONUS = _get_bool('ENABLE_WELCOME_BONUS', True)
    WELCOME_BONUS_FIAT = float(os.getenv('WELCOME_BONUS_FIAT', 100))
    WELCOME_BONUS_TOKEN = float(os.getenv('WELCOME_BONUS_TOKEN', 50))

    SAGA_RECOVERY_AGE_SECONDS = int(os.getenv('SAGA_RECOVERY_AGE_SECONDS', 300))
    SAGA_LOG_RETENTION_DAYS = int(os.getenv('SAGA_LOG_RETENTION_DAYS', 30))
    KV_PURGE_INTERVAL_SECONDS = int(os.getenv('KV_PURGE_INTERVAL_SECONDS', 60))
    SCHEDULER_ENABLED = _get_bool('SCHEDULER_ENABLED', True)

    SENTRY_DSN = os.getenv('SENTRY_DSN')
    SENTRY_ENVIRONMENT = os.getenv('SENTRY_ENVIRONMENT', 'development')
    SENTRY_TRACES_SAMPLE_RATE = float(os.getenv('SENTRY_TRACES_SAMPLE_RATE', 1.0))

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv('CORS_ORIGINS', 'http://localhost:3000').split(',')
        if origin.strip()
    ]

    EXPOSE_ERROR_DETAILS = True
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_TO_FILE = _get_bool('LOG_TO_FILE', True)


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = 'DEBUG'


class ProductionConfig(Config):
    DEBUG = False
    EXPOSE_ERROR_DETAILS = False
    LOG_LEVEL = 'WARNING'


class TestingConfig(Config):
    TESTING = True
    MONGO_DB_NAME = 'dewatt_test'
    KV_BACKEND = 'memory'
    TREASURY_SECRET_KEY = None
    LEDGER_RETRY_BACKOFF = 0.0
    SCHEDULER_ENABLED = False
    SENTRY_DSN = None
    LOG_TO_FILE = False


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}
