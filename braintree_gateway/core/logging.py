import logging
import re
import sys
from typing import Any

import structlog

SECRET_KEYS = frozenset({"number", "cvv", "verification_value", "private_key", "public_key", "client_side_encryption_key"})

# 13-19 digit runs, optionally grouped by spaces or dashes
CARD_NUMBER = re.compile(r"\b(?:\d[ -]?){9,15}(\d{4})\b")


def redact_card_data(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Mask card numbers and gateway credentials before rendering."""
    for key, value in event_dict.items():
        if key in SECRET_KEYS and value is not None:
            event_dict[key] = "[FILTERED]"
        elif isinstance(value, str):
            event_dict[key] = CARD_NUMBER.sub(r"************\1", value)
    return event_dict


def configure_logging(level: int = logging.INFO) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            redact_card_data,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
    # The SDK logs every HTTP round trip at INFO.
    logging.getLogger("braintree").setLevel(logging.WARNING)


def get_logger(*args: Any, **kwargs: Any) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(*args, **kwargs)
