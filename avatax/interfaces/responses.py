"""
Response models: classification of AvaTax payloads into success or error.

Every variant keeps the parsed payload untouched in ``raw_result`` and
derives ``is_error`` from its shape, so calling code can branch on the
flag without digging through the service's envelope.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Type

from avatax.log import AvataxLog

SUCCESS = "Success"


@dataclass(frozen=True)
class ServiceResponse:
    """Common shape of every classified response."""

    raw_result: Any

    description: ClassVar[str] = ""

    def _envelope(self) -> Optional[Mapping[str, Any]]:
        """The mapping holding ``ResultCode`` and ``Messages``, if any."""
        return self.raw_result if isinstance(self.raw_result, Mapping) else None

    @property
    def result_code(self) -> Optional[str]:
        envelope = self._envelope()
        return envelope.get("ResultCode") if envelope is not None else None

    @property
    def is_error(self) -> bool:
        return self.result_code != SUCCESS

    @property
    def is_success(self) -> bool:
        return not self.is_error

    @property
    def messages(self) -> List[Dict[str, Any]]:
        envelope = self._envelope()
        if envelope is None:
            return []
        return list(envelope.get("Messages") or [])

    @property
    def summary(self) -> str:
        """Joined ``Summary`` lines of the service messages."""
        return "; ".join(m["Summary"] for m in self.messages if m.get("Summary"))


@dataclass(frozen=True)
class GetTaxResponse(ServiceResponse):
    description: ClassVar[str] = "Get Tax"

    @property
    def doc_code(self) -> Optional[str]:
        envelope = self._envelope()
        return envelope.get("DocCode") if envelope is not None else None

    @property
    def total_tax(self) -> Optional[Any]:
        envelope = self._envelope()
        return envelope.get("TotalTax") if envelope is not None else None

    @property
    def tax_lines(self) -> List[Dict[str, Any]]:
        envelope = self._envelope()
        if envelope is None:
            return []
        return list(envelope.get("TaxLines") or [])


@dataclass(frozen=True)
class CancelTaxResponse(ServiceResponse):
    description: ClassVar[str] = "Cancel Tax"

    def _envelope(self) -> Optional[Mapping[str, Any]]:
        if not isinstance(self.raw_result, Mapping):
            return None
        inner = self.raw_result.get("CancelTaxResult")
        return inner if isinstance(inner, Mapping) else self.raw_result

    @property
    def transaction_id(self) -> Optional[Any]:
        envelope = self._envelope()
        return envelope.get("TransactionId") if envelope is not None else None


@dataclass(frozen=True)
class AddressValidationResponse(ServiceResponse):
    description: ClassVar[str] = "Address Validation"

    @classmethod
    def from_body(cls, body: Optional[str]) -> AddressValidationResponse:
        """Parse a response body; malformed JSON classifies as an empty payload."""
        try:
            return cls(json.loads(body or "{}"))
        except ValueError:
            return cls({})

    @property
    def is_error(self) -> bool:
        if not self.raw_result or not isinstance(self.raw_result, Mapping):
            return True
        return super().is_error

    @property
    def address(self) -> Optional[Dict[str, Any]]:
        envelope = self._envelope()
        return envelope.get("Address") if envelope is not None else None


RESPONSE_TYPES: Dict[str, Type[ServiceResponse]] = {
    cls.description: cls
    for cls in (GetTaxResponse, CancelTaxResponse, AddressValidationResponse)
}


def classify(description: str, raw_payload: Any, log: AvataxLog) -> ServiceResponse:
    """
    Wrap *raw_payload* in the variant registered for *description* and log it.

    Service-reported errors are logged and returned, never raised.

    Raises:
        ValueError: If *description* names no known response type.
    """
    try:
        response_type = RESPONSE_TYPES[description]
    except KeyError:
        raise ValueError(f"Unknown response type: {description!r}") from None
    return handle_response(response_type(raw_payload), log)


def handle_response(response: ServiceResponse, log: AvataxLog) -> ServiceResponse:
    """Log *response* at error or debug level depending on its classification."""
    if response.is_error:
        log.error(response.raw_result, f"{response.description} Error")
    else:
        log.debug(response.raw_result, f"{response.description} Response")
    return response
