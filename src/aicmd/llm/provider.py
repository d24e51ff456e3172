"""Provider adapter protocol and message types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable


class Role(Enum):
    """Message role in a completion request."""

    SYSTEM = "system"
    USER = "user"


@dataclass(frozen=True, slots=True)
class Message:
    """A message sent to a provider."""

    role: Role
    content: str


@runtime_checkable
class ProviderAdapter(Protocol):
    """Protocol for suggestion backends.

    One implementation per supported provider. Implementations enforce their
    own time bound and raise ProviderError subclasses on failure:
    ProviderTimeoutError when the bound is exceeded, NetworkError for
    transport or API errors, EmptyResponseError when no text came back.
    """

    @property
    def model(self) -> str:
        """The model identifier being used."""
        ...

    async def call(
        self,
        user_input: str,
        system_prompt: str,
        credential: str | None,
    ) -> str:
        """Request a command suggestion.

        Args:
            user_input: The user's natural-language request (single line).
            system_prompt: Instructions plus environment context.
            credential: API key, or None for backends that need none.

        Returns:
            Raw suggestion text as produced by the model.
        """
        ...
