"""Exception hierarchy for aicmd.

Every failure a suggestion request can hit is one of these. The controller
turns them into a short status message and returns the session to idle;
none of them ever reaches the input buffer.
"""

from __future__ import annotations


class AICmdError(Exception):
    """Base class for all aicmd errors."""

    #: Short text shown in the status line.
    status = "error"

    def status_message(self) -> str:
        """Return the one-line message shown to the user."""
        detail = str(self)
        return f"aicmd: {detail}" if detail else f"aicmd: {self.status}"


class ConfigurationError(AICmdError):
    """Invalid configuration, e.g. an unknown provider name.

    Raised when the dispatcher is constructed. Never retried.
    """

    status = "configuration error"


class CredentialError(AICmdError):
    """No API key could be found for the configured provider.

    Attributes:
        provider: Provider identifier (e.g. "anthropic").
        remediation: Multi-line instructions describing how to supply a key.
    """

    status = "missing API key"

    def __init__(self, message: str, *, provider: str, remediation: str = "") -> None:
        super().__init__(message)
        self.provider = provider
        self.remediation = remediation


class ProviderError(AICmdError):
    """A provider call failed."""

    status = "request failed"


class NetworkError(ProviderError):
    """Transport or API level failure talking to a provider."""


class ProviderTimeoutError(ProviderError):
    """A provider call exceeded its time bound."""

    status = "request timed out"


class EmptyResponseError(ProviderError):
    """The provider returned no usable text."""

    status = "no suggestion"

    def status_message(self) -> str:
        return f"aicmd: {self.status}"


class CallInFlightError(AICmdError):
    """A background call was started while another one is pending."""
