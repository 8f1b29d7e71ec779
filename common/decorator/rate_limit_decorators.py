from datetime import datetime, timedelta
from functools import wraps

from flask import current_app, g, request

import common.extensions as extensions
from common.utils.rate_limiter import RateLimiter


def get_client_ip():
    forwarded = request.headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip()

    real_ip = request.headers.get('X-Real-IP')
    if real_ip:
        return real_ip

    return request.remote_addr or 'unknown'


def ip_rate_limited(scope='default', limit_key='DEFAULT_RATE_LIMIT', window_key='DEFAULT_RATE_WINDOW'):
    """
    클라이언트 IP 기준 레이트 리밋

    초과 시 BusinessError(RATE_LIMIT_EXCEEDED)가 Retry-After 헤더와 함께 429로 응답되고,
    허용된 요청에는 X-RateLimit-* 헤더를 붙인다.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            limiter = RateLimiter(
                extensions.kv_store,
                scope=scope,
                limit=current_app.config[limit_key],
                window_seconds=current_app.config[window_key],
                prefix=current_app.config['KV_KEY_PREFIX']
            )
            g.rate_limit = limiter.enforce(get_client_ip())
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def apply_rate_limit_headers(response):
    result = getattr(g, 'rate_limit', None)
    if result is None:
        return response

    reset_at = datetime.utcnow() + timedelta(seconds=result.reset_after)
    response.headers['X-RateLimit-Limit'] = str(result.limit)
    response.headers['X-RateLimit-Remaining'] = str(result.remaining)
    response.headers['X-RateLimit-Reset'] = reset_at.strftime('%Y-%m-%dT%H:%M:%SZ')
    return response
