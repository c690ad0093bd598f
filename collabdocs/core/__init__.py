"""
Core module - Configuration and cross-cutting concerns.

This module provides:
- config.py         : Environment-based configuration management
- logging_config.py : Centralized logging setup
- exceptions.py     : Application error hierarchy
- security.py       : Password hashing and auth tokens
- validators.py     : Input validation and text sanitization
- rate_limiter.py   : Per-user request throttling for AI routes
- audit.py          : Request audit and security header middleware
"""
from collabdocs.core.config import get_settings, Settings
from collabdocs.core.logging_config import setup_logging, get_logger, LoggerMixin

__all__ = [
    "get_settings",
    "Settings",
    "setup_logging",
    "get_logger",
    "LoggerMixin",
]
