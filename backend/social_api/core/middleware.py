# social_api/core/middleware.py
import logging
import time
from fastapi import Request

logger = logging.getLogger("social_api.requests")

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


async def security_headers(request: Request, call_next):
    """Базовые заголовки безопасности на каждый ответ"""
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


async def request_logger(request: Request, call_next):
    """Лог запроса: метод, путь, статус, длительность, IP"""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        f"{request.method} {request.url.path} {response.status_code} "
        f"{duration_ms:.1f}ms ip={request.client.host if request.client else 'unknown'}"
    )
    return response
