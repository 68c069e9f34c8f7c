"""LLM provider adapters.

OpenAILLMProvider implements ILLMProvider (immuse/interfaces/llm_provider.py)
on top of the shared AsyncOpenAI client built by ``build_openai_client``.
"""

from immuse.providers.llm.openai_provider import OpenAILLMProvider, build_openai_client

__all__ = ["OpenAILLMProvider", "build_openai_client"]
