from slowapi import Limiter
from slowapi.util import get_remote_address
from loguru import logger

from app.core.config import settings


# ----------------------------------------------------------------
# 1. CLIENT IP (behind proxies)
# ----------------------------------------------------------------
def get_real_ip(request):
    """
    Client IP for rate-limit keys.
    X-Forwarded-For (leftmost entry) first, then X-Real-IP, then the socket peer.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return get_remote_address(request)


# ----------------------------------------------------------------
# 2. STORAGE
# ----------------------------------------------------------------
# Managed Redis usually wants TLS ('rediss://'); local dev keeps plain redis://
storage_uri = settings.REDIS_URL

if storage_uri and storage_uri.startswith("redis://") and settings.ENV == "prod":
    storage_uri = storage_uri.replace("redis://", "rediss://", 1)


# ----------------------------------------------------------------
# 3. LIMITER
# ----------------------------------------------------------------
if not settings.RATE_LIMIT_ENABLED:
    logger.warning("⚠️ Rate limiting disabled (RATE_LIMIT_ENABLED=false)")
    limiter = Limiter(key_func=get_real_ip, enabled=False)

elif storage_uri:
    logger.info("⚡ Initializing Rate Limiter with Redis Storage")
    limiter = Limiter(
        key_func=get_real_ip,
        storage_uri=storage_uri,
        strategy="fixed-window",
        storage_options={"socket_connect_timeout": 5, "retry_on_timeout": True},
        # Keep serving if Redis goes away; limits fall back to memory
        in_memory_fallback_enabled=True,
    )

else:
    logger.warning("⚠️ REDIS_URL not found. Falling back to In-Memory rate limiting.")
    limiter = Limiter(key_func=get_real_ip)
