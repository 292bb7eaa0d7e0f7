import logging
import os
import sys
import uuid
from logging.handlers import RotatingFileHandler


class RequestIdFilter(logging.Filter):
    def __init__(self, request_id: str | None = None) -> None:
        super().__init__()
        self.request_id = request_id or "-"

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "request_id"):
            record.request_id = self.request_id
        return True


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


def get_logger(
    name: str = "owner_resolution", request_id: str | None = None
) -> logging.Logger:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler(stream=sys.stdout)
        fmt = "%(asctime)s %(levelname)s %(request_id)s %(name)s - %(message)s"
        handler.setFormatter(logging.Formatter(fmt))
        handler.addFilter(RequestIdFilter(request_id))
        logger.addHandler(handler)
        logger.propagate = False

        # Optional file logging
        log_file = os.getenv("LOG_FILE")
        if log_file:
            try:
                file_handler = RotatingFileHandler(
                    log_file, maxBytes=2_000_000, backupCount=5
                )
                file_handler.setLevel(level)
                file_handler.setFormatter(logging.Formatter(fmt))
                file_handler.addFilter(RequestIdFilter(request_id))
                logger.addHandler(file_handler)
            except OSError as e:
                logger.warning(f"File logging disabled, cannot open {log_file}: {e}")
    return logger


def bind_request(
    logger: logging.Logger, request_id: str
) -> logging.LoggerAdapter:
    """Tag every record emitted through the adapter with one lookup's id."""
    return logging.LoggerAdapter(logger, {"request_id": request_id})
