from __future__ import annotations

import json
import logging
import sys
from typing import Final


_LOGGER_NAME: Final[str] = "jirae"
_MAX_VALUE_LEN: Final[int] = 120
_VERBOSE_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(verbose: bool) -> None:
    logger = logging.getLogger(_LOGGER_NAME)
    logger.propagate = False
    logger.handlers.clear()

    if not verbose:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.CRITICAL + 1)
        return

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter(_VERBOSE_FORMAT))
    logger.addHandler(stream_handler)
    logger.setLevel(logging.INFO)


def log_event(logger: logging.Logger, event: str, **fields: object) -> None:
    """Log ``event=<name> key=value ...`` with keys sorted.

    Callers pass identifiers, statuses and lengths only; issue text and
    credentials stay out of the log.
    """
    pairs = [("event", event), *sorted(fields.items())]
    logger.info(" ".join(f"{key}={_format_value(value)}" for key, value in pairs))


def _format_value(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    if not isinstance(value, str):
        return f"<{type(value).__name__}>"

    collapsed = " ".join(value.split())
    if not collapsed:
        return "<empty>"
    if len(collapsed) > _MAX_VALUE_LEN:
        collapsed = f"{collapsed[:_MAX_VALUE_LEN]}..."
    if any(ch.isspace() for ch in collapsed) or "=" in collapsed:
        return json.dumps(collapsed)
    return collapsed
