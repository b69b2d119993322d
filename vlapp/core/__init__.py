"""Core types: results, error codes, configuration and build flags."""

from .config import BuildFlags, Config, ConfigError, load_config, load_flags
from .errors import ConfigurationFault, ErrorCode
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "BuildFlags",
    "Config",
    "ConfigError",
    "load_config",
    "load_flags",
    # errors
    "ConfigurationFault",
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
