"""Structured logging for the swap_pricer service."""

import json
import logging
from enum import Enum
from typing import Any, Dict, List, Optional


class EventType(str, Enum):
    SYSTEM_EVENT = "SYSTEM_EVENT"
    TRANSACTION = "TRANSACTION"
    INTEGRATION = "INTEGRATION"


class LogLevel(int, Enum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


_STRUCTURED_FIELDS = ("event_type", "entity", "user_id", "tags", "data")


class StructuredFormatter(logging.Formatter):
    """Append the structured fields of a record after the plain message."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        parts = []
        for field in _STRUCTURED_FIELDS:
            value = getattr(record, field, None)
            if value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            if isinstance(value, (dict, list)):
                value = json.dumps(value, default=str)
            parts.append(f"{field}={value}")
        if parts:
            message = f"{message} | {' '.join(parts)}"
        return message


class LogClient(logging.LoggerAdapter):
    """
    Logger adapter accepting the structured keywords used across the service.

    Usage:
        logger.info("Pricing deal", event_type=EventType.TRANSACTION,
                    tags=["swap", "price"], data={"deal_id": "SWP-004"})
    """

    def __init__(self, logger: logging.Logger, default_entity: Optional[str] = None):
        super().__init__(logger, {})
        self.default_entity = default_entity

    def process(self, msg: Any, kwargs: Dict[str, Any]):
        extra = dict(kwargs.pop("extra", None) or {})
        for field in _STRUCTURED_FIELDS:
            if field in kwargs:
                extra[field] = kwargs.pop(field)
        if extra.get("entity") is None and self.default_entity:
            extra["entity"] = self.default_entity
        kwargs["extra"] = extra
        return msg, kwargs

    def log_exception(
        self,
        exc: BaseException,
        message: Optional[str] = None,
        level: LogLevel = LogLevel.ERROR,
        tags: Optional[List[str]] = None,
        **kwargs: Any
    ) -> None:
        """Log an exception with its traceback at the given level."""
        self.log(
            int(level),
            message or str(exc),
            exc_info=(type(exc), exc, exc.__traceback__),
            event_type=kwargs.pop("event_type", EventType.SYSTEM_EVENT),
            tags=tags,
            **kwargs
        )


_CONFIGURED = False


def get_logger(name: str = "swap_pricer", level: str = "INFO", entity: Optional[str] = None) -> LogClient:
    """Return a structured logger, configuring the package handler once."""
    global _CONFIGURED
    base = logging.getLogger(name)
    if not _CONFIGURED:
        handler = logging.StreamHandler()
        handler.setFormatter(
            StructuredFormatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        root = logging.getLogger("swap_pricer")
        root.addHandler(handler)
        root.setLevel(level.upper())
        _CONFIGURED = True
    return LogClient(base, default_entity=entity)
