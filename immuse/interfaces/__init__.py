"""Public interface definitions for storage and external services.

Business services only see these ABCs; concrete adapters are built in
``immuse/main.py`` and injected at startup.  Tests inject mocks instead.

    Interface               →  Concrete implementation (immuse/providers/)
    ──────────────────────────────────────────────────────────────────
    ILLMProvider            →  OpenAILLMProvider
    IVectorIndexProvider    →  OpenAIVectorStoreProvider
    IMuseumStore            →  SQLiteMuseumStore
"""

from immuse.interfaces.llm_provider import ILLMProvider
from immuse.interfaces.museum_store import IMuseumStore
from immuse.interfaces.vector_index_provider import IVectorIndexProvider

__all__ = ["ILLMProvider", "IMuseumStore", "IVectorIndexProvider"]
