# backend/config/logging.py
import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from config.settings import get_settings

settings = get_settings()


# Custom formatter with colors for console output
class ColoredFormatter(logging.Formatter):
    """Custom formatter with color coding for different log levels."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'       # Reset
    }

    def format(self, record):
        levelname = record.levelname
        color = self.COLORS.get(levelname, self.COLORS['RESET'])
        record.levelname = f"{color}{levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


# JSON formatter for structured logging
class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging in production."""

    EXTRA_FIELDS = ('user_id', 'request_id', 'duration', 'branch', 'ip_address')

    def format(self, record):
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        for field in self.EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def build_logging_config(log_directory: str = None) -> Dict[str, Any]:
    """Build the dictConfig for the current settings."""
    log_directory = log_directory or settings.LOG_DIRECTORY
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
            'detailed': {
                'format': '%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(funcName)s(): %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
            'colored': {
                '()': ColoredFormatter,
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
            'json': {
                '()': JSONFormatter
            }
        },
        'handlers': {
            'console': {
                'level': 'DEBUG' if settings.DEBUG else 'INFO',
                'class': 'logging.StreamHandler',
                'formatter': 'colored' if settings.DEBUG else 'standard',
                'stream': 'ext://sys.stdout'
            },
            'file': {
                'level': 'INFO',
                'class': 'logging.handlers.RotatingFileHandler',
                'formatter': 'detailed',
                'filename': os.path.join(log_directory, 'app.log'),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf8'
            },
            'security_file': {
                'level': 'WARNING',
                'class': 'logging.handlers.RotatingFileHandler',
                'formatter': 'json' if not settings.DEBUG else 'detailed',
                'filename': os.path.join(log_directory, 'security.log'),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 10,
                'encoding': 'utf8'
            },
            'api_file': {
                'level': 'INFO',
                'class': 'logging.handlers.RotatingFileHandler',
                'formatter': 'json' if not settings.DEBUG else 'detailed',
                'filename': os.path.join(log_directory, 'api.log'),
                'maxBytes': 20971520,  # 20MB
                'backupCount': 7,
                'encoding': 'utf8'
            }
        },
        'loggers': {
            '': {  # Root logger
                'handlers': ['console', 'file'],
                'level': settings.LOG_LEVEL,
            },
            'uvicorn': {
                'handlers': ['console', 'api_file'],
                'level': 'INFO',
                'propagate': False
            },
            'uvicorn.access': {
                'handlers': ['api_file'],
                'level': 'INFO',
                'propagate': False
            },
            'security': {
                'handlers': ['console', 'security_file'],
                'level': 'WARNING',
                'propagate': False
            },
            'api': {
                'handlers': ['console', 'api_file'],
                'level': 'INFO',
                'propagate': False
            }
        }
    }


def setup_logging(log_directory: str = None):
    """Setup logging configuration."""
    log_directory = log_directory or settings.LOG_DIRECTORY
    os.makedirs(log_directory, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_directory))

    logging.getLogger("multipart").setLevel(logging.WARNING)
    logging.getLogger("fontTools").setLevel(logging.WARNING)

    if not settings.DEBUG:
        # Reduce noise in production
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the specified name."""
    return logging.getLogger(name)


def log_api_request(request_id: str, method: str, path: str, user_id: str = None):
    """Log API request information."""
    logger = get_logger("api")
    extra = {'request_id': request_id}
    if user_id:
        extra['user_id'] = user_id
    logger.info(f"{method} {path}", extra=extra)


def log_api_response(request_id: str, status_code: int, duration: float):
    """Log API response information."""
    logger = get_logger("api")
    extra = {'request_id': request_id, 'duration': duration}
    logger.info(f"Response: {status_code} ({duration:.3f}s)", extra=extra)


def log_security_event(event_type: str, user_id: str = None, details: str = None,
                       ip_address: Optional[str] = None):
    """Log security-related events."""
    logger = get_logger("security")
    extra = {}
    if user_id:
        extra['user_id'] = user_id
    if ip_address:
        extra['ip_address'] = ip_address

    message = f"Security Event: {event_type}"
    if details:
        message += f" - {details}"

    logger.warning(message, extra=extra)


def log_remote_call(method: str, path: str, status_code: int = None, duration: float = None):
    """Log calls made to the remote restaurant API."""
    logger = get_logger("clients.restaurant_api")
    extra = {}
    if duration is not None:
        extra['duration'] = duration

    message = f"Remote {method} {path}"
    if status_code is not None:
        message += f" -> {status_code}"
    if duration is not None:
        message += f" ({duration:.3f}s)"

    logger.info(message, extra=extra)


# Performance logging decorator
def log_performance(logger_name: str = "performance"):
    """Decorator to log function performance."""
    def decorator(func):
        import functools
        import time

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(logger_name)
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
                duration = time.time() - start_time
                logger.info(f"{func.__name__} completed in {duration:.3f}s")
                return result
            except Exception as e:
                duration = time.time() - start_time
                logger.error(f"{func.__name__} failed after {duration:.3f}s: {str(e)}")
                raise
        return wrapper
    return decorator


# Export commonly used functions
__all__ = [
    "setup_logging",
    "get_logger",
    "log_api_request",
    "log_api_response",
    "log_security_event",
    "log_remote_call",
    "log_performance"
]
