"""Structured logging configuration for the application."""

from datetime import UTC, datetime
import json
import logging
import sys

from votetally.core.config import settings


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class StandardFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging() -> None:
    """Configure application logging based on environment."""
    log_level = logging.INFO
    if settings.ENVIRONMENT == "development":
        log_level = logging.DEBUG
    elif settings.ENVIRONMENT == "production":
        log_level = logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    if settings.ENVIRONMENT == "production":
        formatter = JSONFormatter()
    else:
        formatter = StandardFormatter()

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Quiet the noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)
    logging.getLogger("asyncpg").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


class SecurityLogger:
    """Specialized logger for admin authentication events."""

    def __init__(self) -> None:
        self.logger = get_logger("security")

    def log_login_attempt(
        self,
        success: bool,
        ip_address: str | None = None,
        user_agent: str | None = None,
        reason: str | None = None,
    ) -> None:
        """Log an admin login attempt."""
        extra_fields = {
            "event_type": "admin_login_attempt",
            "success": success,
            "ip_address": ip_address,
            "user_agent": user_agent,
        }

        if not success and reason:
            extra_fields["failure_reason"] = reason

        message = f"Admin login {'succeeded' if success else 'failed'} from {ip_address or 'unknown'}"

        if success:
            self.logger.info(message, extra={"extra_fields": extra_fields})
        else:
            self.logger.warning(message, extra={"extra_fields": extra_fields})

    def log_session_created(self, session_id: str, expires_at: datetime) -> None:
        """Log admin session creation."""
        self.logger.info(
            f"Admin session created: {session_id}",
            extra={
                "extra_fields": {
                    "event_type": "session_created",
                    "session_id": session_id,
                    "expires_at": expires_at.isoformat(),
                }
            },
        )

    def log_unauthorized_access(
        self,
        resource: str,
        ip_address: str | None = None,
        reason: str | None = None,
    ) -> None:
        """Log a request to an admin resource without a valid session."""
        self.logger.warning(
            f"Unauthorized access attempt to: {resource}",
            extra={
                "extra_fields": {
                    "event_type": "unauthorized_access",
                    "resource": resource,
                    "ip_address": ip_address,
                    "reason": reason,
                }
            },
        )

    def log_logout(self, session_id: str | None) -> None:
        """Log admin logout."""
        self.logger.info(
            f"Admin logged out: {session_id or 'no session'}",
            extra={
                "extra_fields": {
                    "event_type": "logout",
                    "session_id": session_id,
                }
            },
        )


class DataEntryLogger:
    """Records admin writes to the tally collections."""

    def __init__(self) -> None:
        self.logger = get_logger("data_entry")

    def log_entity_created(
        self, collection: str, entity_id: str, session_id: str | None = None
    ) -> None:
        self.logger.info(
            f"Created {collection} record {entity_id}",
            extra={
                "extra_fields": {
                    "event_type": "entity_created",
                    "collection": collection,
                    "entity_id": entity_id,
                    "session_id": session_id,
                }
            },
        )

    def log_votes_saved(
        self,
        center_id: str,
        total_votes: int,
        created: bool,
        session_id: str | None = None,
    ) -> None:
        self.logger.info(
            f"{'Created' if created else 'Updated'} vote record for center {center_id} "
            f"({total_votes} votes)",
            extra={
                "extra_fields": {
                    "event_type": "votes_saved",
                    "center_id": center_id,
                    "total_votes": total_votes,
                    "created": created,
                    "session_id": session_id,
                }
            },
        )


# Global logger instances
security_logger = SecurityLogger()
data_entry_logger = DataEntryLogger()
