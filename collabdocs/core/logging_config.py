"""
Logging for the CollabDocs API.

The app calls setup_logging() once while importing collabdocs.api.main.
Modules log through get_logger(__name__); services, the retriever and
the LLM client inherit LoggerMixin, whose logger sits under the
module's dotted name so `collabdocs.services` output can be filtered
as one tree.

Records go to stdout at the configured LOG_LEVEL and, at DEBUG, to
LOG_DIR/collabdocs_YYYYMMDD.log.
"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


_logging_configured = False

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Client libraries that log each HTTP round trip or parse step
QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "groq", "multipart", "MARKDOWN")


def setup_logging(log_level: str = "INFO", log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Attach the console and daily-file handlers to the root logger.

    Repeated calls are no-ops, so reloading the app module under uvicorn
    or importing it from several tests does not duplicate output.

    Args:
        log_level: Console threshold; unknown names fall back to INFO
        log_dir: Where the daily file goes (default: <repo>/logs)

    Returns:
        The root logger
    """
    global _logging_configured

    if _logging_configured:
        return logging.getLogger()

    if log_dir is None:
        log_dir = Path(__file__).parent.parent.parent / "logs"
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    log_file = log_dir / f"collabdocs_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.DEBUG)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _logging_configured = True

    root_logger.debug(f"Logging configured: level={log_level}, file={log_file}")

    return root_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LoggerMixin:
    """
    Gives a class `self.logger`, named `<module>.<ClassName>`.

    CreditService logs as `collabdocs.services.credit_service.CreditService`,
    so its records carry both the layer and the class.
    """

    @property
    def logger(self) -> logging.Logger:
        cls = type(self)
        return get_logger(f"{cls.__module__}.{cls.__qualname__}")
