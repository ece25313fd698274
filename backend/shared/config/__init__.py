"""
Configuration module: Settings, logging, constants.
"""

from shared.config.settings import settings
from shared.config.logging import get_logger, setup_logging
from shared.config.constants import (
    AuditFields,
    DeleteMode,
    ErrorMessages,
    KeyKind,
    Limits,
    Operation,
)

__all__ = [
    # settings
    "settings",
    # logging
    "get_logger",
    "setup_logging",
    # constants
    "AuditFields",
    "DeleteMode",
    "ErrorMessages",
    "KeyKind",
    "Limits",
    "Operation",
]
