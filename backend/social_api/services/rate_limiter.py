# social_api/services/rate_limiter.py
from typing import Callable, Dict, List, Optional
from datetime import datetime, timedelta, timezone
from social_api.core.config import settings
from social_api.core.exceptions import RateLimitError


class RateLimiter:
    """
    Скользящее окно попыток в памяти процесса.
    Словарь без блокировок: один event loop, между await его никто не трогает.
    """
    def __init__(
            self,
            max_attempts: int = 5,
            window: timedelta = timedelta(minutes=15),
            clock: Optional[Callable[[], datetime]] = None,
    ):
        self.attempts: Dict[str, List[datetime]] = {}  # {identifier: [timestamps]}
        self.max_attempts = max_attempts
        self.window = window
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def check_rate_limit(self, identifier: str) -> None:
        """Проверка лимита, при успехе попытка записывается"""
        now = self._clock()
        window_start = now - self.window

        # Очистка старых записей
        recent = [ts for ts in self.attempts.get(identifier, []) if ts > window_start]

        if len(recent) >= self.max_attempts:
            self.attempts[identifier] = recent
            retry_after = int((min(recent) + self.window - now).total_seconds()) + 1
            raise RateLimitError(f"Too many attempts. Try again in {retry_after} seconds")

        recent.append(now)
        self.attempts[identifier] = recent

    async def clear_attempts(self, identifier: str) -> None:
        """Очистка попыток после успешной аутентификации"""
        self.attempts.pop(identifier, None)


login_rate_limiter = RateLimiter(
    max_attempts=settings.rate_limit.LOGIN_MAX_ATTEMPTS,
    window=timedelta(seconds=settings.rate_limit.LOGIN_WINDOW_SECONDS),
)
