"""Abstract base class for generative-model providers.

Every generation call site (tours, chips, preview, story intro, tour
preview) talks to an :class:`ILLMProvider`; only the concrete adapter in
``immuse/providers/llm/`` imports the vendor SDK.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any


# Concrete implementation: OpenAILLMProvider (immuse/providers/llm/)
class ILLMProvider(ABC):
    """Contract for the generative service used by the wizard."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> str:
        """Generate a plain-text completion.

        Parameters
        ----------
        system_prompt:
            Instruction message that sets the model's role.
        user_prompt:
            The request itself.
        temperature:
            Sampling temperature.
        max_tokens:
            Upper bound on response tokens.

        Returns
        -------
        str
            The model's text response.

        Raises
        ------
        immuse.utils.errors.ExternalServiceError
            If the call fails or returns nothing.
        """

    @abstractmethod
    async def complete_structured(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        schema_name: str,
        schema: dict[str, Any],
        temperature: float = 0.7,
        max_tokens: int = 1000,
        vector_store_ids: Sequence[str] | None = None,
    ) -> dict[str, Any]:
        """Generate a JSON object constrained to *schema*.

        Parameters
        ----------
        schema_name:
            Name attached to the schema in the request (e.g. ``"TourPlan"``).
        schema:
            Strict-mode JSON schema (see :mod:`immuse.utils.schema`).
        vector_store_ids:
            When given, the model may search these retrieval indexes
            before answering.

        Returns
        -------
        dict
            The decoded JSON object.  Callers still validate it against
            their own model.

        Raises
        ------
        immuse.utils.errors.ExternalServiceError
            On transport failure, empty output or undecodable JSON.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"openai"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are configured (no network call)."""

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Make a lightweight API call to confirm the credentials work."""
