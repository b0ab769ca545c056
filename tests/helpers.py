"""
Shared fixtures for the AvaTax client tests.
"""
from __future__ import annotations

import json
from typing import Any
from unittest.mock import MagicMock

from avatax.credentials import StaticCredentials
from avatax.log import AvataxLog
from avatax.runtime import AvataxConfig, RawResponse

ACCOUNT = "1100012345"
LICENSE_KEY = "1A2B3C4D5E6F7G8H"
ENDPOINT = "https://development.avalara.net"


def make_credentials(enabled: bool = True) -> StaticCredentials:
    return StaticCredentials(
        account_number=ACCOUNT,
        key=LICENSE_KEY,
        service_endpoint=ENDPOINT,
        calculation_enabled=enabled,
    )


def make_config(enabled: bool = True, **kwargs: Any) -> AvataxConfig:
    return AvataxConfig(credentials=make_credentials(enabled), **kwargs)


def json_response(payload: Any, status_code: int = 200) -> RawResponse:
    return RawResponse(status_code=status_code, body=json.dumps(payload))


def make_transport(*responses: Any) -> MagicMock:
    """A transport whose ``send`` returns or raises each item in turn."""
    transport = MagicMock()
    transport.send.side_effect = list(responses)
    return transport


def make_log() -> MagicMock:
    return MagicMock(spec=AvataxLog)


def tax_success(**extra: Any) -> dict:
    payload = {
        "ResultCode": "Success",
        "DocCode": "R123456789",
        "TotalTax": "4.00",
        "TaxLines": [{"LineNo": "1", "Tax": "4.00"}],
    }
    payload.update(extra)
    return payload


def tax_error(summary: str = "Invalid or missing state/province code (XX).") -> dict:
    return {
        "ResultCode": "Error",
        "Messages": [
            {
                "Summary": summary,
                "Details": "",
                "RefersTo": "Addresses[0]",
                "Severity": "Error",
                "Source": "Avalara.AvaTax.Services.Tax",
            }
        ],
    }
