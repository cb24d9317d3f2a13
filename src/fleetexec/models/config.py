"""
Configuration data models.

This module contains the retry policy, the proxy configuration structures and
the application configuration loaded from `config.toml`.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from ..errors.validators import (
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
)

DEFAULT_ELEVATION_MESSAGE = (
    "Admin privileges required: you may be asked for your computer password to continue."
)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry with exponential backoff.

    A policy is consumed by one retry() call; the delay before retry number
    i + 1 is initial_delay_ms * backoff_multiplier ** i.
    """

    max_attempts: int = 3
    initial_delay_ms: float = 1000
    backoff_multiplier: float = 2
    label: str = "operation"

    def __post_init__(self) -> None:
        # Frozen: store the normalised numbers so "3" or 3.0 become usable values.
        object.__setattr__(self, "max_attempts", validate_positive_integer(
            self.max_attempts, min_value=1, field_name="max_attempts"))
        object.__setattr__(self, "initial_delay_ms", validate_positive_float(
            self.initial_delay_ms, min_value=0.0, field_name="initial_delay_ms"))
        object.__setattr__(self, "backoff_multiplier", validate_positive_float(
            self.backoff_multiplier, min_value=1.0, field_name="backoff_multiplier"))
        validate_non_empty_string(self.label, field_name="label")

    def delay_for_attempt(self, attempt: int) -> float:
        """Delay in milliseconds after the failed attempt with 0-based index ``attempt``."""
        return self.initial_delay_ms * self.backoff_multiplier ** attempt


@dataclass(frozen=True)
class TunnelConfig:
    """
    Process-wide proxy tunnel state, published by whatever installed the tunnel.

    proxy_auth holds the combined "user:pass" string when the tunnel
    authenticates.
    """

    host: str
    port: Union[int, str]
    proxy_auth: Optional[str] = None


@dataclass(frozen=True)
class ProxyConfig:
    """Proxy settings handed to commands that need to reach the network."""

    host: str
    port: str
    username: Optional[str] = None
    password: Optional[str] = None
    proxy_auth: Optional[str] = None


@dataclass
class ExecConfig:
    """
    Application configuration, loaded from `config.toml`.
    """

    # [execution]
    debug: bool = False
    detect_shell: bool = False
    log_level: str = "INFO"

    # [retry]
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    # [elevation]
    elevation_message: str = DEFAULT_ELEVATION_MESSAGE
