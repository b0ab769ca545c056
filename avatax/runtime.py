"""
AvaTax Runtime — configuration and the low-level HTTP transport.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests
from dotenv import load_dotenv

from avatax.credentials import CredentialProvider

logger = logging.getLogger(__name__)

DEFAULT_OPEN_TIMEOUT = 2.0
DEFAULT_READ_TIMEOUT = 6.0
DEFAULT_MAX_ATTEMPTS = 2


@dataclass(frozen=True)
class AvataxConfig:
    """Immutable configuration for the AvaTax client."""

    credentials: CredentialProvider
    open_timeout: float = DEFAULT_OPEN_TIMEOUT   # seconds to establish a connection
    read_timeout: float = DEFAULT_READ_TIMEOUT   # seconds to wait for the response
    max_attempts: int = DEFAULT_MAX_ATTEMPTS     # includes the first attempt
    verify_ssl: bool = True
    log_enabled: bool = True
    tax_service_path: str = "/tax/"
    address_service_path: str = "/address/"

    @classmethod
    def from_env(
        cls,
        credentials: CredentialProvider,
        env_file: Optional[str] = None,
        **overrides: Any,
    ) -> AvataxConfig:
        """
        Build a config from ``AVALARA_*`` environment variables.

        Args:
            credentials: Provider for account, license key and endpoint.
            env_file:    Optional ``.env`` file loaded before reading.
            overrides:   Field values that take precedence over the environment.
        """
        if env_file:
            load_dotenv(env_file)
        values: Dict[str, Any] = {
            "open_timeout": _env_float("AVALARA_OPEN_TIMEOUT", DEFAULT_OPEN_TIMEOUT),
            "read_timeout": _env_float("AVALARA_READ_TIMEOUT", DEFAULT_READ_TIMEOUT),
            "max_attempts": _env_int("AVALARA_RETRY", DEFAULT_MAX_ATTEMPTS),
            "verify_ssl": _env_bool("AVALARA_VERIFY_SSL", True),
            "log_enabled": _env_bool("AVALARA_LOG", True),
        }
        values.update(overrides)
        return cls(credentials=credentials, **values)

    @property
    def timeout(self) -> tuple:
        """``(connect, read)`` pair in the form ``requests`` expects."""
        return (self.open_timeout, self.read_timeout)


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        logger.warning("Ignoring non-numeric %s, using %s", key, default)
        return default


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        logger.warning("Ignoring non-integer %s, using %s", key, default)
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes", "on")


class AvataxError(Exception):
    """Base class for errors raised by the AvaTax client."""


class ResponseParseError(AvataxError):
    """Raised when the service answers with a body that is not JSON."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"ResponseParseError(status_code={self.status_code!r}, message={str(self)!r})"


@dataclass(frozen=True)
class HttpRequest:
    """A fully composed request, ready to be sent."""

    method: str
    url: str
    headers: Dict[str, str] = field(repr=False)
    body: Optional[str] = None


@dataclass(frozen=True)
class RawResponse:
    """Status and undecoded body of a single round trip."""

    status_code: int
    body: str

    def json(self) -> Any:
        try:
            return json.loads(self.body)
        except ValueError as exc:
            raise ResponseParseError(
                f"Response is not valid JSON: {exc}", status_code=self.status_code
            ) from exc


class AvataxRuntime:
    """
    Low-level HTTP transport for the AvaTax API.

    Responsibilities:
    - Opens a fresh TLS connection per request with the configured
      connect/read timeouts.
    - Honours the ``verify_ssl`` toggle for certificate verification. With
      verification off, urllib3 emits an ``InsecureRequestWarning`` on every
      request; silence it with ``urllib3.disable_warnings`` if that is
      intended. The runtime logs a single warning when it is created.
    - Returns the raw status and body; any ``requests`` exception is left
      to the caller, which decides whether it is worth retrying.
    """

    def __init__(self, config: AvataxConfig) -> None:
        self._config = config
        if not config.verify_ssl:
            logger.warning(
                "TLS certificate verification is disabled; urllib3 will warn on every request"
            )

    def send(self, request: HttpRequest) -> RawResponse:
        """
        Perform one round trip.

        Raises:
            requests.RequestException: On any transport-level failure.
        """
        logger.debug("HTTP Request: %s %s", request.method, request.url)
        response = requests.request(
            request.method,
            request.url,
            headers=request.headers,
            data=request.body,
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
        )
        logger.debug("HTTP Response: %d from %s", response.status_code, request.url)
        return RawResponse(status_code=response.status_code, body=response.text)
