"""
Logging for the Symbolic Engine

One `symbolic_engine` logger shared by every module, filtered by a LogLevel.
Reduction and evaluation only emit debug traces: an undefined result is a
value, not a failure, so nothing in the normal course of work warns.
"""

import logging
import sys
from typing import Optional
from enum import Enum


class LogLevel(Enum):
    """How much the engine reports"""
    SILENT = 0      # no handler at all
    MINIMAL = 1     # warnings
    VERBOSE = 2     # warnings and reduction/evaluation traces


class EngineLogger:
    """Level-aware front end to the `symbolic_engine` logger"""

    def __init__(self, log_level: LogLevel = LogLevel.MINIMAL):
        self.log_level = log_level
        self.logger = logging.getLogger('symbolic_engine')
        self.logger.setLevel(logging.DEBUG)
        self.logger.handlers.clear()

        if log_level != LogLevel.SILENT:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter('%(name)s %(levelname)s: %(message)s'))
            self.logger.addHandler(handler)

    def enabled_for(self, level: LogLevel) -> bool:
        return self.log_level.value >= level.value

    def warning(self, message: str):
        if self.enabled_for(LogLevel.MINIMAL):
            self.logger.warning(message)

    def debug(self, message: str):
        # traces are prefixed so they stand out among warnings in a shared stream
        if self.enabled_for(LogLevel.VERBOSE):
            self.logger.debug(f"DEBUG: {message}")


_global_logger: Optional[EngineLogger] = None


def get_logger() -> EngineLogger:
    global _global_logger
    if _global_logger is None:
        _global_logger = EngineLogger()
    return _global_logger


def set_log_level(level: LogLevel):
    """Change the level without touching the installed handler"""
    global _global_logger
    if _global_logger is None:
        _global_logger = EngineLogger(log_level=level)
    else:
        _global_logger.log_level = level


def configure_logging(log_level: LogLevel = LogLevel.MINIMAL) -> EngineLogger:
    """Replace the shared logger, reinstalling its handler for `log_level`"""
    global _global_logger
    _global_logger = EngineLogger(log_level=log_level)
    return _global_logger


def log_warning(message: str):
    get_logger().warning(message)


def log_debug(message: str):
    get_logger().debug(message)
