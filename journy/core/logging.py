import sys
import json
import logging
from datetime import timezone
from typing import Optional

from loguru import logger as _logger

from journy.core.config import settings

_handler_id: Optional[int] = None


class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        _logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _json_sink(message):
    record = message.record
    ts = record["time"].astimezone(timezone.utc).isoformat()
    payload = {
        "time": ts,
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["extra"].get("logger", record["name"]),
        "module": record["module"],
        "function": record["function"],
        "line": record["line"],
        "extra": record.get("extra", {}),
    }
    if record.get("exception"):
        payload["exception"] = str(record["exception"])
    print(json.dumps(payload, ensure_ascii=False, default=str), file=sys.stderr)


def setup_logging(level: Optional[str] = None) -> None:
    """Route SDK and HTTP stack logs through a single JSON sink.

    Applications opt in by calling this once at startup; importing the SDK
    never touches global logging state.
    """
    global _handler_id
    level = (level or settings.LOG_LEVEL).upper()

    _logger.enable("journy")
    # only the sink added here; sinks owned by the application stay
    if _handler_id is not None:
        _logger.remove(_handler_id)
    _handler_id = _logger.add(
        _json_sink,
        level=level,
        backtrace=False,
        diagnose=False,
        enqueue=True,
    )

    for name in ("httpx", "httpcore", "asyncio"):
        logging_logger = logging.getLogger(name)
        logging_logger.handlers = [InterceptHandler()]
        logging_logger.propagate = False
        logging_logger.setLevel(level)


def get_logger(name: str):
    return _logger.bind(logger=name)
