from __future__ import annotations
from typing import Dict, Optional


class AgentError(Exception):
    """Base class for every domain error the service and CLI report to users."""


class ListingValidationError(AgentError):
    """Structured input failed validation; `errors` maps field name -> message."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        joined = "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        super().__init__(f"Dados inválidos: {joined}")


class UpstreamError(AgentError):
    """The text-completion service did not give us usable text."""

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class UpstreamEmptyError(UpstreamError):
    """Response was missing, empty, or lacked the expected string field."""


class UpstreamTransportError(UpstreamError):
    """The call itself failed (network, auth, quota, SDK error)."""


class UpstreamTimeoutError(UpstreamError):
    """The call did not finish within the configured timeout."""

    def __init__(self, timeout_s: float):
        super().__init__(f"failed: timed out after {timeout_s:g}s")
        self.timeout_s = timeout_s
