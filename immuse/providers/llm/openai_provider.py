"""OpenAI LLM provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.

Two request shapes are used for structured output:

- **Responses API** (``client.responses.create``) when the caller passes
  ``vector_store_ids``: the ``file_search`` tool lets the model ground its
  answer in the museum's indexed archives.
- **Chat Completions** (``client.chat.completions.create``) otherwise:
  plain ``json_schema`` response format, no tools.

The client itself is built once in ``immuse/main.py`` (see
:func:`build_openai_client`) and shared with the vector-store adapter.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import openai
import structlog

from immuse.config.settings import Settings
from immuse.interfaces.llm_provider import ILLMProvider
from immuse.utils.errors import ExternalServiceError

logger = structlog.get_logger(logger_name=__name__)


def build_openai_client(settings: Settings) -> openai.AsyncOpenAI:
    """Construct the shared AsyncOpenAI client from settings.

    ``base_url`` is only passed for OpenAI-compatible endpoints.  An empty
    API key is replaced by a placeholder so the app can start without
    credentials; every call then fails and the fallbacks take over.
    """
    client_kwargs: dict[str, Any] = {
        "api_key": settings.openai_api_key or "not-configured",
        "timeout": openai.Timeout(settings.openai_timeout_seconds, connect=5.0),
        # Retries are a caller decision; none of the wizard operations retry.
        "max_retries": 0,
    }
    if settings.openai_base_url:
        client_kwargs["base_url"] = settings.openai_base_url
    return openai.AsyncOpenAI(**client_kwargs)


class OpenAILLMProvider(ILLMProvider):
    """LLM provider backed by an OpenAI (or OpenAI-compatible) API."""

    def __init__(self, settings: Settings, client: openai.AsyncOpenAI) -> None:
        self._api_key = settings.openai_api_key
        self._client = client
        self._text_model = settings.openai_text_model or "gpt-4o-mini"
        self._timeout = settings.openai_timeout_seconds
        self._provider_label = "openai-compatible" if settings.openai_base_url else "openai"

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> str:
        """Generate a plain-text chat completion."""
        try:
            response = await self._client.chat.completions.create(
                model=self._text_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APITimeoutError as exc:
            raise self._timeout_error() from exc
        except openai.APIError as exc:
            raise ExternalServiceError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ExternalServiceError(
                message=f"{self._provider_label} returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "openai_completion",
            model=self._text_model,
            provider=self._provider_label,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content

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
        """Generate a JSON object constrained to *schema* (strict mode)."""
        try:
            if vector_store_ids:
                content, tokens = await self._respond_with_file_search(
                    system_prompt,
                    user_prompt,
                    schema_name=schema_name,
                    schema=schema,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    vector_store_ids=list(vector_store_ids),
                )
            else:
                content, tokens = await self._chat_with_schema(
                    system_prompt,
                    user_prompt,
                    schema_name=schema_name,
                    schema=schema,
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
        except openai.APITimeoutError as exc:
            raise self._timeout_error() from exc
        except openai.APIError as exc:
            raise ExternalServiceError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not content:
            raise ExternalServiceError(
                message=f"{self._provider_label} returned empty {schema_name} response",
                provider_name=self.get_provider_name(),
            )
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise ExternalServiceError(
                message=f"{self._provider_label} returned invalid JSON for {schema_name}",
                provider_name=self.get_provider_name(),
            ) from exc
        if not isinstance(data, dict):
            raise ExternalServiceError(
                message=f"{self._provider_label} returned a non-object {schema_name}",
                provider_name=self.get_provider_name(),
            )

        logger.info(
            "openai_structured_completion",
            model=self._text_model,
            schema=schema_name,
            file_search=bool(vector_store_ids),
            tokens=tokens,
        )
        return data

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured (doesn't verify it works)."""
        return bool(self._api_key)

    async def validate_credentials(self) -> bool:
        """List models to verify the API key is accepted."""
        if not self.is_available():
            return False
        try:
            await self._client.models.list()
            return True
        except openai.APIError:
            return False

    def get_provider_name(self) -> str:
        return self._provider_label

    # ------------------------------------------------------------------
    # Request shapes
    # ------------------------------------------------------------------

    async def _chat_with_schema(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        schema_name: str,
        schema: dict[str, Any],
        temperature: float,
        max_tokens: int,
    ) -> tuple[str | None, int | None]:
        response = await self._client.chat.completions.create(
            model=self._text_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={
                "type": "json_schema",
                "json_schema": {"name": schema_name, "schema": schema, "strict": True},
            },
            temperature=temperature,
            max_tokens=max_tokens,
        )
        content = response.choices[0].message.content if response.choices else None
        return content, response.usage.total_tokens if response.usage else None

    async def _respond_with_file_search(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        schema_name: str,
        schema: dict[str, Any],
        temperature: float,
        max_tokens: int,
        vector_store_ids: list[str],
    ) -> tuple[str | None, int | None]:
        response = await self._client.responses.create(
            model=self._text_model,
            instructions=system_prompt,
            input=user_prompt,
            tools=[{"type": "file_search", "vector_store_ids": vector_store_ids}],
            text={
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "schema": schema,
                    "strict": True,
                }
            },
            temperature=temperature,
            max_output_tokens=max_tokens,
        )
        return response.output_text, response.usage.total_tokens if response.usage else None

    def _timeout_error(self) -> ExternalServiceError:
        return ExternalServiceError(
            message=f"{self._provider_label} timed out after {self._timeout:g}s",
            provider_name=self.get_provider_name(),
        )
