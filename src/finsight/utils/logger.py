"""Logging infrastructure with user context."""
import logging
import os
import sys
from contextvars import ContextVar, Token
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional


def get_home_dir() -> Path:
    """Root directory for FinSight runtime files."""
    return Path(os.getenv("FINSIGHT_HOME", Path.home() / ".finsight"))


# User id of the request or thread being logged
_user_context: ContextVar[Optional[str]] = ContextVar("finsight_user_id", default=None)


class UserContextFilter(logging.Filter):
    """Add user context to log records."""

    def filter(self, record):
        """Add user_id to record."""
        record.user_id = _user_context.get() or "system"
        return True


class FinSightLogger:
    """Centralized logging manager."""

    def __init__(self, log_level: str = "INFO", max_file_size_mb: int = 10, backup_count: int = 30):
        self.log_dir = get_home_dir() / "logs"
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = self.log_dir / "service.log"
        self.user_filter = UserContextFilter()

        self.logger = logging.getLogger("finsight")
        self.logger.setLevel(getattr(logging, log_level.upper()))
        self.logger.handlers.clear()

        file_handler = RotatingFileHandler(
            self.log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)

        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] [user:%(user_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        file_handler.setFormatter(formatter)
        console_handler.setFormatter(formatter)

        file_handler.addFilter(self.user_filter)
        console_handler.addFilter(self.user_filter)

        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)

    def get_logger(self) -> logging.Logger:
        """Get the configured logger."""
        return self.logger


# Global logger instance
_logger_instance: Optional[FinSightLogger] = None


def get_logger(log_level: str = "INFO") -> logging.Logger:
    """Get or create global logger instance."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = FinSightLogger(log_level)
    return _logger_instance.get_logger()


def configure_logging(log_level: str, max_file_size_mb: int, backup_count: int) -> logging.Logger:
    """Rebuild the global logger from application settings."""
    global _logger_instance
    _logger_instance = FinSightLogger(log_level, max_file_size_mb, backup_count)
    return _logger_instance.get_logger()


def set_user_context(user_id: Optional[str]) -> Token:
    """Set user context for logging in the current context; returns a reset token."""
    return _user_context.set(user_id)


def reset_user_context(token: Token):
    """Restore the user context that was active before set_user_context."""
    _user_context.reset(token)
