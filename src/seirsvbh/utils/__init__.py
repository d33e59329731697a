"""Utility package to contain all utility modules."""

import logging

from . import log
from .custom_log_formatter import CustomLogFormatter
from .diagnostics import Diagnostic, DiagnosticLog
from .log import logging_level_name, use_logging
from .log_decorator import log_decorator

# Fetching the global logger called seirsvbh
logger = logging.getLogger("seirsvbh")

__all__ = [
    "log",
    "log_decorator",
    "use_logging",
    "logging_level_name",
    "CustomLogFormatter",
    "Diagnostic",
    "DiagnosticLog",
    "logger",
]
