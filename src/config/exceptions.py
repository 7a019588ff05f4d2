"""
Configuration Exceptions.

Raised while loading and validating ledger configuration files. They share
the LedgerError shape so callers can handle every ledger failure by code.
"""

from src.core.exceptions import ErrorCode, LedgerError


class ConfigError(LedgerError):
    """Base exception for configuration errors."""

    default_message = "Configuration error"


class ConfigFileNotFoundError(ConfigError):
    """Configuration file does not exist."""

    default_code = ErrorCode.CONFIG_NOT_FOUND

    def __init__(self, path: str):
        super().__init__(f"Configuration file not found: {path}", details={"path": path})
        self.path = path


class ConfigParseError(ConfigError):
    """Configuration file is not valid YAML or not a mapping."""

    default_code = ErrorCode.CONFIG_PARSE_ERROR

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to parse configuration file '{path}': {reason}")
        self.path = path
        self.reason = reason


class ConfigValidationError(ConfigError):
    """Configuration values failed validation."""

    default_code = ErrorCode.CONFIG_INVALID

    def __init__(self, errors: list[str]):
        message = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        super().__init__(message)
        self.errors = errors
