"""Core types: results, exit codes and configuration."""

from .config import ConfigError, ReleaseConfig, load_config, validate_config
from .errors import ErrorCode
from .result import Err, Ok, Result, collect, is_err, is_ok

__all__ = [
    # config
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    "validate_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "collect",
    "is_err",
    "is_ok",
]
