"""
AvaTax Python client.

Usage::

    from avatax import AvataxConfig, StaticCredentials, TaxService

    credentials = StaticCredentials(
        account_number="1100012345",
        key="your-license-key",
        service_endpoint="https://development.avalara.net",
    )
    service = TaxService(AvataxConfig.from_env(credentials))

    response = service.get_tax({"DocCode": "R123", "Lines": [...]})
    if response.is_error:
        print(response.summary)
    else:
        print(response.total_tax)
"""
from __future__ import annotations

from avatax.credentials import CredentialProvider, StaticCredentials
from avatax.interfaces.responses import (
    AddressValidationResponse,
    CancelTaxResponse,
    GetTaxResponse,
    ServiceResponse,
    classify,
)
from avatax.log import AvataxLog
from avatax.models.schemas import Coordinates
from avatax.retry import Outcome, RetryResult, execute_with_retry
from avatax.runtime import AvataxConfig, AvataxError, AvataxRuntime, ResponseParseError
from avatax.services.tax import TaxService

__all__ = [
    "TaxService",
    "AvataxConfig",
    "AvataxError",
    "ResponseParseError",
    "AvataxRuntime",
    "AvataxLog",
    # Credentials
    "CredentialProvider",
    "StaticCredentials",
    # Responses
    "ServiceResponse",
    "GetTaxResponse",
    "CancelTaxResponse",
    "AddressValidationResponse",
    "classify",
    # Inputs
    "Coordinates",
    # Retry
    "Outcome",
    "RetryResult",
    "execute_with_retry",
]
