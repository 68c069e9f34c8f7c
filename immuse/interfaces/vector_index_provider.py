"""Abstract base class for the external retrieval index.

One index per museum.  The index is created once, its handle stored on the
museum, and every archive file of that museum is uploaded into it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: OpenAIVectorStoreProvider (immuse/providers/vector_index/)
class IVectorIndexProvider(ABC):
    """Contract for creating per-museum indexes and feeding documents into them."""

    @abstractmethod
    async def create_index(self, name: str) -> str:
        """Create a new empty index and return its handle.

        Raises
        ------
        immuse.utils.errors.ExternalServiceError
            If the service refuses or cannot be reached.
        """

    @abstractmethod
    async def upload_file(
        self,
        index_id: str,
        filename: str,
        data: bytes,
        mime_type: str | None = None,
    ) -> str:
        """Upload *data* into the index and wait until it is searchable.

        Returns
        -------
        str
            The service's id for the indexed file.

        Raises
        ------
        immuse.utils.errors.ExternalServiceError
            If the upload or the indexing step fails.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"openai-vector-store"``."""
