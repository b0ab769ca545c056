"""
AvataxLog: the logging collaborator shared by every service call.

Records go to the ``avatax`` logger, prefixed with the component that
produced them. Payloads are rendered as JSON so request and response
bodies stay readable in a single log line.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

LOGGER_NAME = "avatax"


def _render(payload: Any) -> str:
    if isinstance(payload, BaseException):
        return f"{type(payload).__name__}: {payload}"
    if isinstance(payload, str):
        return payload
    try:
        return json.dumps(payload, default=str, sort_keys=True)
    except (TypeError, ValueError):
        return repr(payload)


class AvataxLog:
    """
    Fire-and-forget logger used by the tax service.

    Args:
        component: Name of the owning component, e.g. ``"TaxService"``.
        context:   Short description of what the component does; logged
                   once at construction.
        enabled:   When ``False`` nothing is emitted.
    """

    def __init__(
        self,
        component: str,
        context: Optional[str] = None,
        *,
        enabled: bool = True,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.component = component
        self.enabled = enabled
        self._logger = logger or logging.getLogger(LOGGER_NAME)
        if context:
            self.info(context)

    def debug(self, payload: Any, label: Optional[str] = None) -> None:
        self._emit(logging.DEBUG, payload, label)

    def info(self, label: str) -> None:
        self._emit(logging.INFO, None, label)

    def error(self, payload: Any, label: Optional[str] = None) -> None:
        self._emit(logging.ERROR, payload, label)

    def _emit(self, level: int, payload: Any, label: Optional[str]) -> None:
        if not self.enabled or not self._logger.isEnabledFor(level):
            return
        if payload is None:
            self._logger.log(level, "[%s] %s", self.component, label or "")
        elif label:
            self._logger.log(level, "[%s] %s: %s", self.component, label, _render(payload))
        else:
            self._logger.log(level, "[%s] %s", self.component, _render(payload))
