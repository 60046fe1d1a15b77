"""Utility modules for ThreatScope."""

from .config import Config, get_config, init_config
from .logger import get_logger, setup_logging, reset_logging
from .exceptions import (
    ThreatScopeError,
    ConfigurationError,
    AnalysisError,
    ReadError,
    EmptyInputError,
    NoCandidatesError,
    FileTooLargeError,
    UnsupportedFileError,
)

__all__ = [
    "Config",
    "get_config",
    "init_config",
    "get_logger",
    "setup_logging",
    "reset_logging",
    "ThreatScopeError",
    "ConfigurationError",
    "AnalysisError",
    "ReadError",
    "EmptyInputError",
    "NoCandidatesError",
    "FileTooLargeError",
    "UnsupportedFileError",
]
