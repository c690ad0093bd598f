import logging

from collabdocs.core.logging_config import QUIET_LOGGERS, setup_logging
from collabdocs.services.credit_service import CreditService


def test_mixin_logger_is_module_qualified():
    logger = CreditService().logger

    assert logger.name == "collabdocs.services.credit_service.CreditService"


def test_setup_is_idempotent(tmp_path):
    root = setup_logging("DEBUG", tmp_path)
    handlers = list(root.handlers)

    assert setup_logging("DEBUG", tmp_path) is root
    assert root.handlers == handlers
    assert all(logging.getLogger(name).level == logging.WARNING for name in QUIET_LOGGERS)
