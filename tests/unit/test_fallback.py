"""Unit tests for the generate-or-fall-back strategy."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from immuse.models.content import ChipSets
from immuse.services.fallback import attempt
from immuse.utils.errors import ExternalServiceError

_FALLBACK = ChipSets(motivations=["m"], interests=["i"], levels=["l"], times=["t"])
_GOOD = {"motivations": ["a"], "interests": ["b"], "levels": ["c"], "times": ["d"]}


class TestAttempt:
    @pytest.mark.asyncio
    async def test_valid_dict_is_validated(self) -> None:
        outcome = await attempt(AsyncMock(return_value=_GOOD), fallback=_FALLBACK, schema=ChipSets, operation="t")
        assert outcome.used_fallback is False
        assert outcome.value.motivations == ["a"]
        assert outcome.error is None

    @pytest.mark.asyncio
    async def test_model_instance_passes_through(self) -> None:
        instance = ChipSets(**_GOOD)
        outcome = await attempt(AsyncMock(return_value=instance), fallback=_FALLBACK, schema=ChipSets, operation="t")
        assert outcome.value is instance

    @pytest.mark.asyncio
    async def test_primary_error_uses_fallback(self) -> None:
        primary = AsyncMock(side_effect=ExternalServiceError(message="boom", provider_name="openai"))
        outcome = await attempt(primary, fallback=_FALLBACK, schema=ChipSets, operation="t")
        assert outcome.used_fallback is True
        assert outcome.value is _FALLBACK
        assert "boom" in outcome.error

    @pytest.mark.asyncio
    async def test_schema_violation_uses_fallback_whole(self) -> None:
        partial = {"motivations": ["only this"]}
        outcome = await attempt(AsyncMock(return_value=partial), fallback=_FALLBACK, schema=ChipSets, operation="t")
        assert outcome.used_fallback is True
        assert outcome.value.motivations == ["m"]

    @pytest.mark.asyncio
    async def test_fallback_factory_called_only_on_failure(self) -> None:
        factory = MagicMock(return_value=_FALLBACK)

        await attempt(AsyncMock(return_value=_GOOD), fallback=factory, schema=ChipSets, operation="t")
        factory.assert_not_called()

        await attempt(AsyncMock(side_effect=RuntimeError("x")), fallback=factory, schema=ChipSets, operation="t")
        factory.assert_called_once()
