"""
Bitget Connector - Configuration.

============================================================
PURPOSE
============================================================
Credentials and client configuration.

Credentials are owned by the caller. The connector reads them
through an injected source and never persists them.

ENVIRONMENT VARIABLES (loaded via python-dotenv):
- BITGET_API_KEY
- BITGET_SECRET_KEY
- BITGET_PASSPHRASE
- BITGET_ENVIRONMENT        production | demo
- BITGET_BASE_URL
- BITGET_TIMEOUT_SECONDS
- BITGET_MAX_RETRY_ATTEMPTS

============================================================
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Union

from dotenv import load_dotenv

from .constants import BITGET_API_BASE_URL, DEFAULTS


# ============================================================
# CREDENTIALS
# ============================================================

class Environment(Enum):
    """Trading environment."""

    PRODUCTION = "production"
    DEMO = "demo"


@dataclass(frozen=True)
class BitgetCredentials:
    """
    API credentials for private endpoints.

    Secrets are excluded from repr so credentials never end up in logs.
    """

    api_key: str
    secret_key: str = field(repr=False)
    passphrase: str = field(repr=False)
    environment: Environment = Environment.PRODUCTION

    def __post_init__(self):
        if isinstance(self.environment, str):
            object.__setattr__(self, "environment", Environment(self.environment.lower()))

    @property
    def is_demo(self) -> bool:
        return self.environment is Environment.DEMO

    @classmethod
    def from_env(cls, prefix: str = "BITGET") -> "BitgetCredentials":
        """Load credentials from environment variables (and .env)."""
        load_dotenv()
        return cls(
            api_key=os.getenv(f"{prefix}_API_KEY", ""),
            secret_key=os.getenv(f"{prefix}_SECRET_KEY", ""),
            passphrase=os.getenv(f"{prefix}_PASSPHRASE", ""),
            environment=os.getenv(f"{prefix}_ENVIRONMENT", "production"),
        )

    def validate(self) -> List[str]:
        """Validate credentials, return list of errors."""
        errors = []
        if not self.api_key:
            errors.append("api_key is required")
        if not self.secret_key:
            errors.append("secret_key is required")
        if not self.passphrase:
            errors.append("passphrase is required")
        return errors


CredentialSource = Union[BitgetCredentials, Callable[[], BitgetCredentials]]


def as_credential_provider(source: CredentialSource) -> Callable[[], BitgetCredentials]:
    """Wrap a credentials instance into a zero-arg provider."""
    if isinstance(source, BitgetCredentials):
        return lambda: source
    if callable(source):
        return source
    raise TypeError(f"Unsupported credential source: {type(source).__name__}")


# ============================================================
# RETRY CONFIGURATION
# ============================================================

@dataclass
class RetryConfig:
    """
    Retry configuration for mutating calls.

    Limited attempts with exponential backoff.
    """

    max_attempts: int = DEFAULTS.MAX_RETRY_ATTEMPTS
    """Total attempts including the first call."""

    initial_delay_seconds: float = DEFAULTS.RETRY_DELAY_MS / 1000
    """Delay before the second attempt; doubles afterwards."""


# ============================================================
# PAGINATION CONFIGURATION
# ============================================================

@dataclass
class PaginationConfig:
    """Cursor pagination defaults."""

    default_limit: int = DEFAULTS.PAGE_SIZE
    """Page size assumed when the query carries no limit."""


# ============================================================
# CLIENT CONFIGURATION
# ============================================================

@dataclass
class ClientConfig:
    """
    Transport configuration.
    """

    base_url: str = BITGET_API_BASE_URL
    """API host."""

    timeout_seconds: float = 30.0
    """Total request timeout."""

    retry: RetryConfig = field(default_factory=RetryConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)

    @classmethod
    def from_env(cls, prefix: str = "BITGET") -> "ClientConfig":
        """Load configuration from environment variables."""
        load_dotenv()
        return cls(
            base_url=os.getenv(f"{prefix}_BASE_URL", BITGET_API_BASE_URL),
            timeout_seconds=float(os.getenv(f"{prefix}_TIMEOUT_SECONDS", "30")),
            retry=RetryConfig(
                max_attempts=int(
                    os.getenv(f"{prefix}_MAX_RETRY_ATTEMPTS", str(DEFAULTS.MAX_RETRY_ATTEMPTS))
                ),
            ),
        )

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []
        if not self.base_url.startswith(("http://", "https://")):
            errors.append(f"base_url must be an http(s) URL: {self.base_url}")
        if self.timeout_seconds <= 0:
            errors.append("timeout_seconds must be positive")
        if self.retry.max_attempts < 1:
            errors.append("retry.max_attempts must be at least 1")
        if self.retry.initial_delay_seconds < 0:
            errors.append("retry.initial_delay_seconds must not be negative")
        if self.pagination.default_limit < 1:
            errors.append("pagination.default_limit must be at least 1")
        return errors
