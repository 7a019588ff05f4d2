"""
Base Configuration Model.

Environment variable substitution and error translation shared by every
ledger configuration model.
"""

import os
import re
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ConfigValidationError

# ${VAR} or ${VAR:default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")

ConfigT = TypeVar("ConfigT", bound="BaseConfig")


def substitute_env_vars(value: str) -> str:
    """Replace ``${VAR}`` with VAR (empty if unset) and ``${VAR:default}`` with VAR or default."""
    return ENV_VAR_PATTERN.sub(
        lambda match: os.environ.get(match.group(1), match.group(2) or ""),
        value,
    )


def process_value(value: Any) -> Any:
    """Recursively substitute env vars in strings, dicts and lists."""
    if isinstance(value, str):
        return substitute_env_vars(value)
    elif isinstance(value, dict):
        return {k: process_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [process_value(item) for item in value]
    return value


class BaseConfig(BaseModel):
    """
    Base configuration model.

    Values are immutable once validated, and ``${VAR}`` references in any
    string are resolved from the environment first.

    Example:
        >>> class VaultConfig(BaseConfig):
        ...     endpoint: str
        ...
        >>> config = VaultConfig.from_mapping({"endpoint": "${VAULT_URL:http://localhost}"})
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        validate_default=True,
        str_strip_whitespace=True,
    )

    @model_validator(mode="before")
    @classmethod
    def substitute_environment_variables(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return process_value(data)
        return data

    @classmethod
    def from_mapping(cls: type[ConfigT], data: Mapping[str, Any]) -> ConfigT:
        """
        Validate a mapping into this model.

        Raises:
            ConfigValidationError: With one "field: message" line per problem
        """
        try:
            return cls(**data)
        except PydanticValidationError as e:
            errors = [
                f"{'.'.join(str(p) for p in err['loc']) or cls.__name__}: {err['msg']}"
                for err in e.errors()
            ]
            raise ConfigValidationError(errors) from e
