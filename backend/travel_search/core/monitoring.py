"""
Monitoring helpers: JSON log formatting and operation timing.
"""

import time
from typing import Callable, Any
from functools import wraps
import logging
import json
from datetime import datetime

logger = logging.getLogger(__name__)

# LogRecord attributes passed via `extra=` that are worth keeping in JSON output
_EXTRA_FIELDS = ("duration_ms", "product_type", "results_count", "request_path")


class JSONFormatter(logging.Formatter):
    """One JSON object per line; used when settings.log_format == "json"."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcfromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        for name in _EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


def track_performance(operation_name: str, slow_ms: float = 1000.0):
    """
    Decorator that logs how long a synchronous operation took.
    Runs above `slow_ms` are logged at WARNING so slow store calls stand out.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                elapsed = (time.perf_counter() - start) * 1000
                level = logging.WARNING if elapsed >= slow_ms else logging.DEBUG
                logger.log(level, f"{operation_name} took {elapsed:.0f}ms",
                           extra={"duration_ms": round(elapsed, 1)})
        return wrapper

    return decorator
