"""
Request composition for each AvaTax operation.
"""
from __future__ import annotations

import json
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Tuple, Union
from urllib.parse import urlencode

from pydantic import BaseModel

from avatax.credentials import basic_auth
from avatax.models.schemas import Coordinates
from avatax.runtime import AvataxConfig, HttpRequest

TAX_OPERATIONS = frozenset({"get", "cancel"})


def to_query(params: Mapping[str, Any], namespace: str = "") -> str:
    """
    Encode *params* as a query string, Rails style: keys sorted, nested
    mappings as ``parent[child]`` and sequences as ``parent[]``.
    """
    return urlencode(_flatten(params, namespace))


def _flatten(value: Any, prefix: str) -> List[Tuple[str, str]]:
    if isinstance(value, Mapping):
        if not value and prefix:
            return [(prefix, "")]
        pairs: List[Tuple[str, str]] = []
        for key in sorted(value, key=str):
            name = f"{prefix}[{key}]" if prefix else str(key)
            pairs.extend(_flatten(value[key], name))
        return pairs
    if isinstance(value, (list, tuple)):
        if not value:
            return [(f"{prefix}[]", "")]
        pairs = []
        for item in value:
            pairs.extend(_flatten(item, f"{prefix}[]"))
        return pairs
    if value is None:
        return [(prefix, "")]
    if isinstance(value, bool):
        return [(prefix, "true" if value else "false")]
    return [(prefix, str(value))]


def _json_default(value: Any) -> Any:
    """Render amounts and dates the way the service expects them in JSON."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class RequestBuilder:
    """Builds :class:`HttpRequest` objects from a config and call arguments."""

    def __init__(self, config: AvataxConfig) -> None:
        self._config = config

    @property
    def _credentials(self):
        return self._config.credentials

    def _headers(self, *, json_body: bool = True) -> Dict[str, str]:
        headers = {"Authorization": basic_auth(self._credentials)}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _tax_url(self) -> str:
        return self._credentials.endpoint() + self._config.tax_service_path

    def _address_url(self) -> str:
        return self._credentials.endpoint() + self._config.address_service_path + "validate?"

    def tax(self, operation: str, payload: Union[Mapping[str, Any], BaseModel]) -> HttpRequest:
        """POST ``{endpoint}{tax path}{operation}`` with a JSON body."""
        if operation not in TAX_OPERATIONS:
            raise ValueError(f"Unknown tax operation: {operation!r}")
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(mode="json")
        return HttpRequest(
            method="POST",
            url=self._tax_url() + operation,
            headers=self._headers(),
            body=json.dumps(payload, default=_json_default),
        )

    def address_validation(self, address: Union[Mapping[str, Any], BaseModel]) -> HttpRequest:
        """GET ``{endpoint}{address path}validate?{address fields}``."""
        if isinstance(address, BaseModel):
            address = address.model_dump()
        return HttpRequest(
            method="GET",
            url=self._address_url() + to_query(address),
            headers=self._headers(json_body=False),
        )

    def estimate(
        self,
        coordinates: Union[Coordinates, Mapping[str, Any]],
        sale_amount: Any,
    ) -> HttpRequest:
        """GET ``{endpoint}{tax path}{lat},{lon}/get?saleamount={amount}``."""
        point = Coordinates.coerce(coordinates)
        return HttpRequest(
            method="GET",
            url=f"{self._tax_url()}{point.as_path()}/get?saleamount={sale_amount}",
            headers=self._headers(),
        )
