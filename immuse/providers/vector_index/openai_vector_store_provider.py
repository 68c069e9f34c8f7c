"""OpenAI vector store adapter.

Implements :class:`IVectorIndexProvider` with the ``vector_stores`` API of
the openai SDK.  ``upload_and_poll`` uploads the bytes as a file, attaches
it to the store and waits until OpenAI has chunked and embedded it, so a
returned id always refers to a searchable file.
"""

from __future__ import annotations

import openai
import structlog

from immuse.interfaces.vector_index_provider import IVectorIndexProvider
from immuse.utils.errors import ExternalServiceError

logger = structlog.get_logger(logger_name=__name__)


class OpenAIVectorStoreProvider(IVectorIndexProvider):
    """Per-museum retrieval index backed by an OpenAI vector store."""

    def __init__(self, client: openai.AsyncOpenAI) -> None:
        self._client = client

    async def create_index(self, name: str) -> str:
        try:
            store = await self._client.vector_stores.create(name=name)
        except openai.APIError as exc:
            raise ExternalServiceError(
                message=f"Could not create vector store: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("vector_store_created", vector_store_id=store.id, name=name)
        return store.id

    async def upload_file(
        self,
        index_id: str,
        filename: str,
        data: bytes,
        mime_type: str | None = None,
    ) -> str:
        file_payload = (filename, data, mime_type) if mime_type else (filename, data)
        try:
            indexed = await self._client.vector_stores.files.upload_and_poll(
                vector_store_id=index_id,
                file=file_payload,
            )
        except openai.APIError as exc:
            raise ExternalServiceError(
                message=f"Upload of {filename} failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if indexed.status != "completed":
            reason = indexed.last_error.message if indexed.last_error else indexed.status
            raise ExternalServiceError(
                message=f"Indexing of {filename} failed: {reason}",
                provider_name=self.get_provider_name(),
            )

        logger.info(
            "vector_store_file_indexed",
            vector_store_id=index_id,
            file_id=indexed.id,
            filename=filename,
            bytes=len(data),
        )
        return indexed.id

    def get_provider_name(self) -> str:
        return "openai-vector-store"
