"""
TaxService: public entry point for tax calculation, cancellation,
point estimates and address validation.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel

from avatax.builder import RequestBuilder
from avatax.credentials import CredentialProvider
from avatax.interfaces.responses import (
    AddressValidationResponse,
    CancelTaxResponse,
    GetTaxResponse,
    ServiceResponse,
    classify,
    handle_response,
)
from avatax.log import AvataxLog
from avatax.models.schemas import Coordinates
from avatax.retry import RetryResult, execute_with_retry
from avatax.runtime import AvataxConfig, AvataxRuntime, HttpRequest

logger = logging.getLogger(__name__)

ESTIMATE_TAX_ERROR = "Estimate Tax Error"
REQUEST_ERROR = "Avalara Request Error"
ADDRESS_VALIDATION_ERROR = "Address Validation Error"

PING_COORDINATES = {"latitude": "40.714623", "longitude": "-74.006605"}


class TaxService:
    """
    Resilient client for the AvaTax tax and address services.

    Transient network failures are retried immediately up to
    ``config.max_attempts``; service-reported errors come back as
    responses with ``is_error`` set rather than as exceptions.

    Args:
        config:    Client configuration, including the credential provider.
        transport: Object with a ``send(HttpRequest) -> RawResponse`` method.
                   Defaults to :class:`AvataxRuntime`.
        log:       Logging collaborator. Defaults to an :class:`AvataxLog`
                   honouring ``config.log_enabled``.
    """

    def __init__(
        self,
        config: AvataxConfig,
        *,
        transport: Optional[AvataxRuntime] = None,
        log: Optional[AvataxLog] = None,
    ) -> None:
        self._config = config
        self._builder = RequestBuilder(config)
        self._transport = transport or AvataxRuntime(config)
        self._log = log or AvataxLog(
            "TaxService", "Call to tax service", enabled=config.log_enabled
        )

    @classmethod
    def from_env(
        cls, credentials: CredentialProvider, env_file: Optional[str] = None
    ) -> TaxService:
        return cls(AvataxConfig.from_env(credentials, env_file=env_file))

    # ------------------------------------------------------------------
    # Tax documents
    # ------------------------------------------------------------------

    def get_tax(self, request: Optional[Mapping[str, Any]]) -> ServiceResponse:
        """Calculate (and, depending on the payload, commit) tax for an order."""
        self._log_request("get_tax", request)
        return classify(GetTaxResponse.description, self._post("get", request), self._log)

    def cancel_tax(self, request: Optional[Mapping[str, Any]]) -> ServiceResponse:
        """Cancel a previously committed tax document."""
        self._log_request("cancel_tax", request)
        return classify(CancelTaxResponse.description, self._post("cancel", request), self._log)

    # ------------------------------------------------------------------
    # Estimates
    # ------------------------------------------------------------------

    def estimate_tax(
        self,
        coordinates: Optional[Union[Coordinates, Mapping[str, Any]]],
        sale_amount: Any = None,
    ) -> Any:
        """
        Estimate tax for a sale at a geographic point.

        Returns:
            The parsed estimate, ``None`` when tax calculation is disabled
            or no coordinates were given, or ``"Estimate Tax Error"`` once
            the retry budget is spent.
        """
        if not self._config.credentials.tax_calculation_enabled():
            return None
        if coordinates is None:
            return None
        if sale_amount is None:
            sale_amount = 0

        request = self._builder.estimate(coordinates, sale_amount)
        result = self._send(request, ESTIMATE_TAX_ERROR)
        if result.exhausted:
            return ESTIMATE_TAX_ERROR
        estimate = result.value.json()
        self._log.debug(estimate, "Estimate Tax Response")
        return estimate

    def ping(self) -> Any:
        """Check connectivity with a zero-amount estimate at a fixed point."""
        self._log.info("Ping Call")
        return self.estimate_tax(dict(PING_COORDINATES), 0)

    # ------------------------------------------------------------------
    # Addresses
    # ------------------------------------------------------------------

    def validate_address(
        self, address: Union[Mapping[str, Any], BaseModel]
    ) -> AddressValidationResponse:
        """
        Validate a mailing address.

        Exhausted retries yield the classification of an empty payload,
        which is flagged as an error.
        """
        request = self._builder.address_validation(address)
        result = self._send(request, ADDRESS_VALIDATION_ERROR)
        if result.exhausted:
            response = AddressValidationResponse({})
        else:
            response = AddressValidationResponse.from_body(result.value.body)
        return handle_response(response, self._log)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _post(self, operation: str, request: Optional[Mapping[str, Any]]) -> Any:
        """
        POST a tax document and return the parsed body, or ``None`` when
        every attempt failed transiently.
        """
        result = self._send(self._builder.tax(operation, request), REQUEST_ERROR)
        if result.exhausted:
            return None
        return result.value.json()

    def _send(self, request: HttpRequest, label: str) -> RetryResult:
        result = execute_with_retry(
            lambda: self._transport.send(request),
            self._config.max_attempts, label=label, log=self._log
        )
        if result.attempts > 1:
            logger.debug(
                "%s %s finished after %d attempts (%s)",
                request.method, request.url, result.attempts, result.outcome.value,
            )
        return result

    def _log_request(self, method: str, request: Optional[Mapping[str, Any]]) -> None:
        if request is None:
            return
        self._log.debug(request, f"{method} request hash")
