"""Rate limiting for the admin login endpoint."""

from collections import defaultdict
from datetime import UTC, datetime, timedelta
import threading


class RateLimiter:
    """
    Simple in-memory sliding-window rate limiter.

    State lives in the process; a multi-worker deployment limits per worker.
    """

    def __init__(self) -> None:
        self._attempts: dict[str, list] = defaultdict(list)
        self._lock = threading.Lock()

    def is_rate_limited(
        self, identifier: str, max_attempts: int, window_seconds: int
    ) -> tuple[bool, int | None]:
        """
        Check if an identifier is rate limited.

        Returns:
            Tuple of (is_limited, retry_after_seconds)
        """
        with self._lock:
            now = datetime.now(UTC)
            cutoff = now - timedelta(seconds=window_seconds)

            self._attempts[identifier] = [
                timestamp
                for timestamp in self._attempts[identifier]
                if timestamp > cutoff
            ]

            if len(self._attempts[identifier]) >= max_attempts:
                oldest_attempt = min(self._attempts[identifier])
                retry_after = (
                    oldest_attempt + timedelta(seconds=window_seconds) - now
                ).total_seconds()
                return True, int(max(1, retry_after))

            return False, None

    def record_attempt(self, identifier: str) -> None:
        """Record an attempt for the given identifier."""
        with self._lock:
            self._attempts[identifier].append(datetime.now(UTC))

    def reset(self, identifier: str) -> None:
        """Forget all attempts for an identifier."""
        with self._lock:
            self._attempts.pop(identifier, None)


class LoginRateLimiter:
    """Failed admin logins per client IP."""

    MAX_ATTEMPTS_PER_IP = 10
    WINDOW_SECONDS = 300  # 5 minutes

    def __init__(self) -> None:
        self.ip_limiter = RateLimiter()

    def check_login_allowed(self, ip_address: str | None) -> tuple[bool, str | None]:
        """
        Check if a login attempt is allowed.

        Returns:
            Tuple of (is_allowed, error_message)
        """
        if not ip_address:
            return True, None

        limited, retry_after = self.ip_limiter.is_rate_limited(
            ip_address, self.MAX_ATTEMPTS_PER_IP, self.WINDOW_SECONDS
        )
        if limited:
            return (
                False,
                f"Too many login attempts. Try again in {retry_after} seconds",
            )
        return True, None

    def record_failed_attempt(self, ip_address: str | None) -> None:
        if ip_address:
            self.ip_limiter.record_attempt(ip_address)

    def record_successful_login(self, ip_address: str | None) -> None:
        if ip_address:
            self.ip_limiter.reset(ip_address)


login_rate_limiter = LoginRateLimiter()
