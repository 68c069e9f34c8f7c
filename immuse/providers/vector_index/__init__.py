"""Retrieval index adapters (IVectorIndexProvider implementations)."""

from immuse.providers.vector_index.openai_vector_store_provider import OpenAIVectorStoreProvider

__all__ = ["OpenAIVectorStoreProvider"]
