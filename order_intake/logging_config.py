"""Loguru setup for batch runs and the review client.

Every record carries an ``email`` extra naming the email being processed
("-" outside a batch), so one order's extraction, validation and render
lines can be grepped out of a whole run.
"""

from pathlib import Path
import sys
from typing import Union

from loguru import logger

NO_EMAIL = "-"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[email]}</cyan> | <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[email]} | {name}:{line} | {message}"

_configured = False


def configure_logging(level: str = "INFO", log_dir: Union[str, Path] = "logs") -> None:
    global _configured

    if _configured:
        return

    logger.remove()
    logger.configure(extra={"email": NO_EMAIL})

    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_path / "order_intake_{time:YYYY-MM-DD}.log",
        level=level,
        format=FILE_FORMAT,
        rotation="00:00",
        retention="30 days",
        encoding="utf-8",
    )
    # Failed emails only, with tracebacks, for follow-up review.
    logger.add(
        log_path / "failed_emails.log",
        level="ERROR",
        format=FILE_FORMAT,
        filter=lambda record: record["extra"].get("email", NO_EMAIL) != NO_EMAIL,
        backtrace=False,
        encoding="utf-8",
    )

    _configured = True
    logger.debug("Logging configured at {} into {}", level, log_path)
