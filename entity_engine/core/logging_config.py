import logging
import sys
import json
from datetime import datetime, timezone

from entity_engine.core.settings import settings


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per log record"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Attributes stamped by LogContext
        for key in ("operation", "model_name", "view_name"):
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        # Fields passed through the *_ctx helpers
        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info)
            }

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Colored formatter for local development"""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        message = super().format(record)
        if hasattr(record, 'extra_fields') and record.extra_fields:
            context = " ".join(f"{key}={value}" for key, value in record.extra_fields.items())
            message = f"{message} | {context}"
        return f"{color}{message}{self.RESET}"


def setup_logging(log_level: str = None, json_logs: bool = None) -> logging.Logger:
    """
    Configure the root logger for a host process.

    The engine itself never calls this; it only emits records through
    loggers obtained from get_logger().
    """
    if log_level is None:
        log_level = settings.LOG_LEVEL
    if json_logs is None:
        json_logs = settings.JSON_LOGS
    log_level = log_level.upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    if json_logs:
        formatter = StructuredFormatter()
    else:
        formatter = ColoredFormatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with additional context methods"""
    logger = logging.getLogger(name)

    def log_with_context(level: int, msg: str, **kwargs):
        extra = {}
        if kwargs:
            extra['extra_fields'] = kwargs
        logger.log(level, msg, extra=extra, stacklevel=3)

    logger.debug_ctx = lambda msg, **kw: log_with_context(logging.DEBUG, msg, **kw)
    logger.info_ctx = lambda msg, **kw: log_with_context(logging.INFO, msg, **kw)
    logger.warning_ctx = lambda msg, **kw: log_with_context(logging.WARNING, msg, **kw)
    logger.error_ctx = lambda msg, **kw: log_with_context(logging.ERROR, msg, **kw)

    return logger


class LogContext:
    """Context manager for adding context to all logs within a block"""

    def __init__(self, **kwargs):
        self.context = kwargs
        self.old_factory = None

    def __enter__(self):
        self.old_factory = logging.getLogRecordFactory()
        context = self.context
        old_factory = self.old_factory

        def record_factory(*args, **kwargs):
            record = old_factory(*args, **kwargs)
            for key, value in context.items():
                setattr(record, key, value)
            return record

        logging.setLogRecordFactory(record_factory)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        logging.setLogRecordFactory(self.old_factory)
