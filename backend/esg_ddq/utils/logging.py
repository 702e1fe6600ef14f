# esg_ddq/utils/logging.py
"""Root JSON logger shared by every module (`from esg_ddq.utils.logging import logger`).

Correlation fields (request_id, company_name, stage) ride on `extra=`; the
filter fills them with None so the formatter never misses a key.
"""
import logging
import os
from logging.handlers import RotatingFileHandler
from pythonjsonlogger import jsonlogger
from esg_ddq.config import settings

SERVICE_NAME = os.getenv("SERVICE_NAME", "esg-ddq")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "true").lower() == "true"
LOG_FILE_NAME = "esg_ddq.log"

CORRELATION_FIELDS = ("request_id", "company_name", "stage")


class CorrelationFilter(logging.Filter):
    def filter(self, record):
        for name in CORRELATION_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, None)
        record.service = SERVICE_NAME
        return True


log_format = " ".join(
    ["%(asctime)s", "%(levelname)s", "%(service)s", "%(name)s", "%(message)s"]
    + [f"%({name})s" for name in CORRELATION_FIELDS]
)
json_formatter = jsonlogger.JsonFormatter(log_format)

logger = logging.getLogger()
logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
logger.addFilter(CorrelationFilter())

# stdout for containers
stream_handler = logging.StreamHandler()
stream_handler.setFormatter(json_formatter)
logger.addHandler(stream_handler)

if LOG_TO_FILE:
    file_handler = RotatingFileHandler(
        settings.log_dir / LOG_FILE_NAME,
        maxBytes=10_000_000,
        backupCount=5,
        encoding="utf-8"
    )
    file_handler.setFormatter(json_formatter)
    logger.addHandler(file_handler)

# SDK loggers echo every HTTP request at INFO
for noisy in ("httpx", "openai", "anthropic"):
    logging.getLogger(noisy).setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.INFO)
