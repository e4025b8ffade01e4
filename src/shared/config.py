"""
Runtime configuration.

Credentials and endpoints are read from the environment so the same code
runs against the stage and production servers:

    ECPAY_LOGISTICS_SERVER            stage | production | https://...
    ECPAY_LOGISTICS_MERCHANT_ID
    ECPAY_LOGISTICS_HASH_KEY
    ECPAY_LOGISTICS_HASH_IV
    ECPAY_LOGISTICS_PLATFORM_ID       optional
    ECPAY_LOGISTICS_SERVER_REPLY_URL  optional default for builders
    ECPAY_LOGISTICS_CLIENT_REPLY_URL  optional default for builders
    ECPAY_LOGISTICS_HTTP_TIMEOUT      seconds
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .constants import Config
from .errors import PreconditionError


ENV_PREFIX = "ECPAY_LOGISTICS_"

SERVER_ALIASES = {
    "stage": Config.STAGE_SERVER_URL,
    "test": Config.STAGE_SERVER_URL,
    "production": Config.PRODUCTION_SERVER_URL,
    "prod": Config.PRODUCTION_SERVER_URL,
}


@dataclass
class Credentials:
    """Merchant identity and signing secrets."""
    merchant_id: str = ""
    hash_key: str = ""
    hash_iv: str = ""

    def require_signing_keys(self) -> "Credentials":
        """Raise PreconditionError unless both secrets are set."""
        if not self.hash_key:
            raise PreconditionError("HashKey must not be empty")
        if not self.hash_iv:
            raise PreconditionError("HashIV must not be empty")
        return self

    def __repr__(self) -> str:
        # Secrets stay out of reprs and tracebacks
        return f"Credentials(merchant_id={self.merchant_id!r}, hash_key='***', hash_iv='***')"


def resolve_server_url(value: Optional[str]) -> str:
    """Map "stage"/"production" to a base URL; URLs pass through."""
    if not value:
        return Config.DEFAULT_SERVER_URL
    value = value.strip()
    return SERVER_ALIASES.get(value.lower(), value).rstrip("/")


@dataclass
class LogisticsSettings:
    """Everything needed to build, sign and send requests."""
    credentials: Credentials = field(default_factory=Credentials)
    server_url: str = Config.DEFAULT_SERVER_URL
    platform_id: str = ""
    server_reply_url: str = ""
    client_reply_url: str = ""
    timeout: float = Config.HTTP_TIMEOUT_SECONDS
    retry_attempts: int = Config.HTTP_RETRY_ATTEMPTS
    retry_delay_ms: int = Config.HTTP_RETRY_DELAY_MS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ) -> "LogisticsSettings":
        """
        Build settings from ECPAY_LOGISTICS_* variables.

        Args:
            environ: Mapping to read from (defaults to the process environment)

        Returns:
            LogisticsSettings; unset variables keep their defaults
        """
        def env(name: str, default: str = "") -> str:
            return environ.get(ENV_PREFIX + name, default).strip()

        timeout = env("HTTP_TIMEOUT")
        try:
            timeout_value = float(timeout) if timeout else Config.HTTP_TIMEOUT_SECONDS
        except ValueError:
            raise PreconditionError(
                f"{ENV_PREFIX}HTTP_TIMEOUT must be a number, got {timeout!r}"
            )

        return cls(
            credentials=Credentials(
                merchant_id=env("MERCHANT_ID"),
                hash_key=env("HASH_KEY"),
                hash_iv=env("HASH_IV"),
            ),
            server_url=resolve_server_url(env("SERVER")),
            platform_id=env("PLATFORM_ID"),
            server_reply_url=env("SERVER_REPLY_URL"),
            client_reply_url=env("CLIENT_REPLY_URL"),
            timeout=timeout_value,
        )
