import inspect
import logging
from logging.handlers import RotatingFileHandler
import os
import json
from datetime import datetime, timezone
from functools import wraps
import traceback

from schoolportal.core.config import get_logging_config

class CustomJsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging"""
    def __init__(self, **kwargs):
        super().__init__()
        self.kwargs = kwargs

    def format(self, record):
        json_record = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        if hasattr(record, 'request_id'):
            json_record['request_id'] = record.request_id

        if record.exc_info:
            json_record['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }

        if hasattr(record, 'duration'):
            json_record['duration_ms'] = record.duration

        if self.kwargs.get('extra_fields'):
            for field in self.kwargs['extra_fields']:
                if hasattr(record, field):
                    json_record[field] = getattr(record, field)

        return json.dumps(json_record, default=str)

class LoggerFactory:
    """Factory class for creating and configuring loggers"""

    @staticmethod
    def create_logger(
        name: str,
        log_dir: str = None,
        level: str = "INFO",
        log_to_file: bool = False
    ) -> logging.Logger:
        logger = logging.getLogger(name)
        logger.setLevel(getattr(logging, level, logging.INFO))

        # Remove existing handlers if any
        if logger.handlers:
            logger.handlers.clear()

        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        logger.addHandler(console)

        if not log_to_file:
            return logger

        if log_dir is None:
            log_dir = os.path.join(os.getcwd(), 'logs')
        os.makedirs(log_dir, exist_ok=True)

        file_handlers = {
            'app': RotatingFileHandler(
                os.path.join(log_dir, 'app.log'),
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5
            ),
            'error': RotatingFileHandler(
                os.path.join(log_dir, 'error.log'),
                maxBytes=10 * 1024 * 1024,
                backupCount=5
            ),
        }
        for handler_name, handler in file_handlers.items():
            if handler_name == 'error':
                handler.setLevel(logging.ERROR)
            handler.setFormatter(CustomJsonFormatter(
                extra_fields=['request_id', 'user_id', 'school_id', 'cache_key']
            ))
            logger.addHandler(handler)

        return logger

def log_function_call(logger):
    """Decorator to log function entry, exit, and performance"""
    def decorator(func):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = datetime.now()
            func_name = func.__name__

            logger.debug(f"Entering function: {func_name}")
            try:
                result = await func(*args, **kwargs)
                duration = (datetime.now() - start_time).total_seconds() * 1000
                logger.debug(
                    f"Exiting function: {func_name}",
                    extra={'duration': duration}
                )
                return result
            except Exception:
                logger.error(f"Error in function: {func_name}", exc_info=True)
                raise

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = datetime.now()
            func_name = func.__name__

            logger.debug(f"Entering function: {func_name}")
            try:
                result = func(*args, **kwargs)
                duration = (datetime.now() - start_time).total_seconds() * 1000
                logger.debug(
                    f"Exiting function: {func_name}",
                    extra={'duration': duration}
                )
                return result
            except Exception:
                logger.error(f"Error in function: {func_name}", exc_info=True)
                raise

        return async_wrapper if inspect.iscoroutinefunction(func) else sync_wrapper
    return decorator

_config = get_logging_config()

# Create default logger instance
logger = LoggerFactory.create_logger(
    "SchoolPortalLogger",
    log_dir=_config["log_dir"],
    level=_config["log_level"],
    log_to_file=bool(_config["log_to_file"])
)
