from slowapi import Limiter
from slowapi.util import get_remote_address
from loguru import logger

from portal.core.config import settings


# ----------------------------------------------------------------
# 1. CLIENT IP (behind reverse proxies)
# ----------------------------------------------------------------
def get_real_ip(request):
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Leftmost entry is the client
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return get_remote_address(request)


# ----------------------------------------------------------------
# 2. LIMITER (Redis when configured, otherwise in-memory)
# ----------------------------------------------------------------
if settings.REDIS_URL:
    logger.info("Initializing rate limiter with Redis storage")
    limiter = Limiter(
        key_func=get_real_ip,
        storage_uri=settings.REDIS_URL,
        strategy="fixed-window",
        enabled=settings.RATE_LIMIT_ENABLED,
        storage_options={"socket_connect_timeout": 5, "retry_on_timeout": True}
    )
else:
    logger.warning("REDIS_URL not set. Using in-memory rate limiting.")
    limiter = Limiter(key_func=get_real_ip, enabled=settings.RATE_LIMIT_ENABLED)
