"""
Request options.

Options are validated once, when a request is built, and merged over the
defaults below. Both snake_case names and the camelCase spelling
(``totalRequestTimeLimit``) are accepted.
"""

import os
from typing import Annotated, Any, Callable, Dict, Mapping, Optional, Tuple, Union
import structlog
from pydantic import BaseModel, ConfigDict, Field, PlainValidator, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from stubborn.core.backoff import TIMING_FUNCTIONS
from stubborn.shared.exceptions import ConfigurationError, RequestError
from stubborn.shared.types import LOG_LEVELS, Logger, TimingFunctionName, UNLIMITED_RETRIES


def _default_logger() -> Logger:
    return structlog.get_logger("stubborn")


def _validate_logger(value: Any) -> Logger:
    # getattr, not isinstance: structlog proxies resolve their methods lazily
    missing = [level for level in LOG_LEVELS if not callable(getattr(value, level, None))]
    if missing:
        raise ValueError(f"logger must provide {', '.join(missing)} methods, got {type(value).__name__}")
    return value


class RequestOptions(BaseModel):
    """Retry, backoff and budget settings for one request. Delays are in milliseconds."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
        frozen=True,
        extra="forbid",
    )

    timing_function: str = Field(TimingFunctionName.EXPONENTIAL.value, description="Backoff strategy name")
    max_delay: float = Field(60000, ge=0, description="Upper bound on the backoff delay")
    total_request_time_limit: Optional[float] = Field(None, ge=0, description="Time limit across all attempts")
    retries: int = Field(3, ge=UNLIMITED_RETRIES, description="Maximum attempts, -1 for unlimited")
    minimum_status_code_for_retry: int = Field(400, description="Lowest HTTP status eligible for retry")
    unretryable_status_codes: Tuple[int, ...] = Field((401, 403, 422), description="Statuses never retried")
    retry_on_network_failure: bool = False
    max_errors: Optional[int] = Field(None, ge=0, description="Global error budget across all requests")
    on_error: Optional[Callable[[RequestError], Any]] = None
    should_retry: Optional[Callable[[RequestError, int], bool]] = None
    logger: Annotated[Logger, PlainValidator(_validate_logger)] = Field(default_factory=_default_logger)

    @field_validator("timing_function", mode="before")
    @classmethod
    def validate_timing_function(cls, value: Any) -> str:
        if isinstance(value, TimingFunctionName):
            value = value.value
        if value not in TIMING_FUNCTIONS:
            raise ValueError(f"must be one of {sorted(TIMING_FUNCTIONS)}, got {value!r}")
        return value

    @property
    def unlimited_retries(self) -> bool:
        return self.retries == UNLIMITED_RETRIES

    @classmethod
    def resolve(cls, options: Union["RequestOptions", Mapping[str, Any], None] = None) -> "RequestOptions":
        """
        Build options from an instance, a mapping of overrides, or nothing.

        Raises:
            ConfigurationError: If any override is invalid
        """
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if not isinstance(options, Mapping):
            raise ConfigurationError(f"Options must be a mapping, got {type(options).__name__}")
        try:
            return cls.model_validate(cls._normalize(options))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid request options: {e}", details={"errors": e.errors()}) from e

    def merged(self, overrides: Optional[Mapping[str, Any]] = None) -> "RequestOptions":
        """Return a copy of these options with ``overrides`` applied."""
        if not overrides:
            return self
        data = {name: getattr(self, name) for name in type(self).model_fields}
        data.update(self._normalize(overrides))
        return type(self).resolve(data)

    @classmethod
    def _normalize(cls, overrides: Mapping[str, Any]) -> Dict[str, Any]:
        """Map camelCase aliases onto field names."""
        names = {field.alias: name for name, field in cls.model_fields.items() if field.alias}
        return {names.get(key, key): value for key, value in overrides.items()}


# Environment variable name -> option name
ENV_OPTIONS = {
    "TIMING_FUNCTION": "timing_function",
    "MAX_DELAY": "max_delay",
    "TOTAL_REQUEST_TIME_LIMIT": "total_request_time_limit",
    "RETRIES": "retries",
    "MINIMUM_STATUS_CODE_FOR_RETRY": "minimum_status_code_for_retry",
    "UNRETRYABLE_STATUS_CODES": "unretryable_status_codes",
    "RETRY_ON_NETWORK_FAILURE": "retry_on_network_failure",
    "MAX_ERRORS": "max_errors",
}


def options_from_env(
    environ: Optional[Mapping[str, str]] = None,
    prefix: str = "STUBBORN_",
    **overrides: Any
) -> RequestOptions:
    """
    Build request options from environment variables.

    Args:
        environ: Mapping to read from, defaults to ``os.environ``
        prefix: Variable name prefix
        **overrides: Options applied on top of the environment

    Returns:
        Validated request options

    Raises:
        ConfigurationError: If a variable holds an invalid value
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    for suffix, name in ENV_OPTIONS.items():
        raw = environ.get(f"{prefix}{suffix}")
        if raw is None or raw.strip() == "":
            continue
        if name == "unretryable_status_codes":
            values[name] = [code.strip() for code in raw.split(",") if code.strip()]
        elif name == "retry_on_network_failure":
            values[name] = raw.strip().lower() in ("1", "true", "yes", "on")
        else:
            values[name] = raw.strip()

    values.update(RequestOptions._normalize(overrides))
    return RequestOptions.resolve(values)
