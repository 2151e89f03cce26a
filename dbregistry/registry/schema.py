# ==============================================
# Connection config schema
# ==============================================
#
# PURPOSE:
#   Validate-and-normalize step for one connection config.
#   The provisioning pipeline only depends on validate_config's
#   contract (mapping in, normalized dict out, ConfigError on bad
#   input), so hosts may plug in their own validator.
#
# MODELS (pydantic):
# ------------------
# - PoolConfig
# - MigrationsConfig
# - ProvisionConfig
#
#   Field names are snake_case; the camelCase spelling of every
#   field is accepted too ("snakeCaseMapping", "tableName", ...).
#
# ==============================================

from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ConfigError
from ..naming import to_camel, to_snake

DEFAULTS: Dict[str, Any] = {
    "name": "default",
    "connection": {},
    "snake_case_mapping": False,
}

_MODEL_CONFIG = ConfigDict(
    extra="forbid",
    populate_by_name=True,
    alias_generator=to_camel,
    arbitrary_types_allowed=True,
)


class PoolConfig(BaseModel):
    model_config = _MODEL_CONFIG

    min: int = 0
    max: int = 10
    acquire_timeout_millis: Optional[int] = None
    create_timeout_millis: Optional[int] = None
    idle_timeout_millis: Optional[int] = None
    reap_interval_millis: Optional[int] = None
    create_retry_interval_millis: Optional[int] = None
    propagate_create_error: Optional[bool] = None


class MigrationsConfig(BaseModel):
    model_config = _MODEL_CONFIG

    auto: bool = False
    directory: Optional[str] = None
    table_name: Optional[str] = None


class ProvisionConfig(BaseModel):
    """One named connection, as accepted by ConnectionRegistry.provision."""

    model_config = _MODEL_CONFIG

    name: str = Field("default", min_length=1)
    alias: List[str] = Field(default_factory=list)
    client: str
    connection: Dict[str, Any]
    pool: Optional[PoolConfig] = None
    migrations: Optional[MigrationsConfig] = None
    post_process_response: Optional[Callable[..., Any]] = None
    wrap_identifier: Optional[Callable[..., Any]] = None
    acquire_connection_timeout: Optional[int] = None
    use_null_as_default: Optional[bool] = None
    snake_case_mapping: bool = False

    @field_validator("alias", mode="before")
    @classmethod
    def _single_alias(cls, value):
        # "replica" is shorthand for ["replica"]
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value


def apply_to_defaults(defaults: Mapping[str, Any], options: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep-merge `options` over a copy of `defaults`."""
    merged = dict(defaults)
    for key, value in options.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = apply_to_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


def merge_with_defaults(config: Any) -> Dict[str, Any]:
    if isinstance(config, ProvisionConfig):
        config = config.model_dump(exclude_unset=True)
    if not isinstance(config, Mapping):
        raise ConfigError("Invalid database config", f"expected a mapping, got {type(config).__name__}")
    # Top-level camelCase keys must land on the same slot as the defaults
    return apply_to_defaults(DEFAULTS, {to_snake(key): value for key, value in config.items()})


def validate_config(options: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate a merged config and return it as a plain dict.

    Raises:
        ConfigError: with pydantic's message attached
    """
    try:
        settings = ProvisionConfig.model_validate(options)
    except ValidationError as e:
        raise ConfigError("Invalid database config", str(e)) from e
    return settings.model_dump()
