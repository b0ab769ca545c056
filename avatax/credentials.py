"""
Credential provider interface and a static implementation.

Settings storage lives outside this package; the client only reads
credentials through the ``CredentialProvider`` protocol, so an
application can back it with its own settings store.
"""
from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@runtime_checkable
class CredentialProvider(Protocol):
    """Read-only view of the account settings used to reach AvaTax."""

    def endpoint(self) -> str: ...

    def account(self) -> str: ...

    def license_key(self) -> str: ...

    def tax_calculation_enabled(self) -> bool: ...


@dataclass(frozen=True)
class StaticCredentials:
    """Credentials fixed at construction time."""

    account_number: str
    key: str = field(repr=False)
    service_endpoint: str
    calculation_enabled: bool = True

    def endpoint(self) -> str:
        return self.service_endpoint.rstrip("/")

    def account(self) -> str:
        return self.account_number

    def license_key(self) -> str:
        return self.key

    def tax_calculation_enabled(self) -> bool:
        return self.calculation_enabled


def basic_auth(credentials: CredentialProvider) -> str:
    """Return the ``Authorization`` header value for *credentials*."""
    token = f"{credentials.account()}:{credentials.license_key()}".encode("utf-8")
    return "Basic " + base64.b64encode(token).decode("ascii")
