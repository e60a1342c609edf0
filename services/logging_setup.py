"""
Marathon Scoreboard - Logging
Loguru console sink; standard logging (streamlit, gspread, urllib3) is routed into it
"""

import logging
import sys
from typing import Any, Dict

from loguru import logger

SENSITIVE_KEYS = ["key", "token", "password", "secret", "private"]

_configured = False


def mask_sensitive(record: Dict[str, Any]) -> bool:
    """Mask extras whose names look like credentials"""
    extra = record.get("extra")
    if isinstance(extra, dict):
        for name, value in extra.items():
            if any(key in name.lower() for key in SENSITIVE_KEYS):
                if isinstance(value, str) and len(value) > 8:
                    extra[name] = value[:4] + "****" + value[-4:]
                else:
                    extra[name] = "********"
    return True


class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller outside the logging module
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO") -> None:
    """Configure loguru once per process (Streamlit reruns the script)"""
    global _configured
    if _configured:
        return

    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=True,
        diagnose=False,
        filter=mask_sensitive,
    )
    logging.basicConfig(handlers=[InterceptHandler()], level=logging.WARNING, force=True)

    _configured = True
    logger.info(f"Logging initialized with level: {level.upper()}")
