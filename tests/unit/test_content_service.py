"""Unit tests for ContentService and its fallback helpers."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from immuse.models.content import Selections
from immuse.services.content_service import (
    FALLBACK_INTERESTS,
    FALLBACK_MOTIVATIONS,
    FIXED_LEVELS,
    FIXED_TIMES,
    ContentService,
    dedupe_or_fallback,
    fallback_chips,
)
from immuse.utils.errors import ExternalServiceError, InputValidationError

_SELECTIONS = Selections(
    motivations=["First time here"],
    interests=["Icon painting", "Sculpture"],
    level="Basic",
    time="60 min",
)


@pytest.fixture
def service(store, mock_llm, mock_config) -> ContentService:
    return ContentService(store, mock_llm, mock_config, response_language="English")


# ─── dedupe_or_fallback ───────────────────────────────────────────

class TestDedupeOrFallback:
    def test_duplicates_removed_and_topped_up(self) -> None:
        result = dedupe_or_fallback(["A", "A", "B"], FALLBACK_MOTIVATIONS)
        assert result == ["A", "B", *FALLBACK_MOTIVATIONS[:3]]

    def test_empty_gives_full_fallback(self) -> None:
        assert dedupe_or_fallback([], FALLBACK_INTERESTS) == list(FALLBACK_INTERESTS)
        assert dedupe_or_fallback(["", "  "], FALLBACK_INTERESTS) == list(FALLBACK_INTERESTS)

    def test_fallback_items_already_present_skipped(self) -> None:
        first = FALLBACK_MOTIVATIONS[0]
        result = dedupe_or_fallback([first], FALLBACK_MOTIVATIONS)
        assert result == list(FALLBACK_MOTIVATIONS[:5])
        assert len(set(result)) == len(result)

    def test_enough_items_untouched(self) -> None:
        items = ["a", "b", "c", "d", "e", "f"]
        assert dedupe_or_fallback(items, FALLBACK_MOTIVATIONS) == items


# ─── Dynamic chips ────────────────────────────────────────────────

class TestDynamicChips:
    @pytest.mark.asyncio
    async def test_generated_chips_cleaned(self, service, mock_llm) -> None:
        mock_llm.complete_structured = AsyncMock(return_value={
            "motivations": ["A", "A", "B"],
            "interests": [f"topic {i}" for i in range(25)],
            "levels": ["model levels are ignored"],
            "times": ["5 min"],
        })

        chips = await service.dynamic_chips("m1", {"name": "Museum of Kyiv History"})

        assert chips.motivations == ["A", "B", *FALLBACK_MOTIVATIONS[:3]]
        assert len(chips.interests) == 20
        assert chips.levels == list(FIXED_LEVELS)
        assert chips.times == list(FIXED_TIMES)
        assert "Museum of Kyiv History" in mock_llm.complete_structured.await_args.args[1]

    @pytest.mark.asyncio
    async def test_error_returns_fallback(self, service, mock_llm) -> None:
        mock_llm.complete_structured = AsyncMock(side_effect=ExternalServiceError(message="down"))
        assert await service.dynamic_chips("m1", {}) == fallback_chips()

    @pytest.mark.asyncio
    async def test_museum_data_required(self, service) -> None:
        with pytest.raises(InputValidationError, match="Museum ID and museum data are required"):
            await service.dynamic_chips("m1", None)
        with pytest.raises(InputValidationError):
            await service.dynamic_chips("", {"name": "x"})


# ─── Preview & story intro ────────────────────────────────────────

class TestPreview:
    @pytest.mark.asyncio
    async def test_fallback_uses_museum_name(self, service, mock_llm) -> None:
        preview = await service.preview("m1", _SELECTIONS, {"name": "Hetman Museum"})

        assert "Hetman Museum" in preview.hero.title
        assert len(preview.what_to_expect) <= 6
        assert len(preview.route_preview) <= 4

    @pytest.mark.asyncio
    async def test_generated_preview_returned(self, service, mock_llm) -> None:
        generated = {
            "hero": {"title": "Icons up close", "subtitle": "For a first visit"},
            "what_to_expect": ["Gold leaf", "Tempera"],
            "route_preview": [{"room": "Hall 2", "focus": "Icons", "why": "Your interest", "minutes": 20}],
            "first_object": {
                "title": "St. George",
                "room": "Hall 2",
                "reason": "Oldest icon",
                "source_refs": ["guide.pdf"],
                "search_query": "St George icon",
                "preferred_sources": ["Wikimedia"],
                "image_urls": [],
            },
        }
        mock_llm.complete_structured = AsyncMock(return_value=generated)

        preview = await service.preview("m1", _SELECTIONS)

        assert preview.hero.title == "Icons up close"
        user_prompt = mock_llm.complete_structured.await_args.args[1]
        assert "Icon painting, Sculpture" in user_prompt
        assert "the museum" in user_prompt  # no stored museum, no client data

    @pytest.mark.asyncio
    async def test_selections_required(self, service) -> None:
        with pytest.raises(InputValidationError, match="Museum ID and selections are required"):
            await service.preview("m1", None)


class TestStoryIntro:
    @pytest.mark.asyncio
    async def test_fallback_mentions_interests_and_time(self, service) -> None:
        intro = await service.story_intro("m1", _SELECTIONS)

        assert "Icon painting" in intro.welcome.paragraph
        assert "60 min" in intro.time_note
        assert len(intro.outline) <= 5
        assert all(len(room.key_objects) <= 3 for room in intro.outline)

    @pytest.mark.asyncio
    async def test_too_long_outline_falls_back(self, service, mock_llm) -> None:
        room = {"room": "Hall", "summary": "s", "key_objects": [], "source_refs": []}
        mock_llm.complete_structured = AsyncMock(return_value={
            "welcome": {"title": "Hi", "paragraph": "p"},
            "outline": [room] * 6,
            "time_note": "t",
            "cta_label": "Go",
        })

        intro = await service.story_intro("m1", _SELECTIONS)

        assert intro.welcome.title == "Welcome!"


# ─── Tour preview ─────────────────────────────────────────────────

class TestTourPreview:
    @pytest.mark.asyncio
    async def test_text_trimmed_and_echoed(self, service, mock_llm) -> None:
        mock_llm.complete = AsyncMock(return_value="  Welcome to the first hall.  ")

        preview = await service.tour_preview("Hetman Museum", "adults", 45, ["maps"])

        assert preview.tour_content == "Welcome to the first hall."
        assert preview.museum_name == "Hetman Museum"
        assert preview.minutes == 45
        assert mock_llm.complete.await_args.kwargs["max_tokens"] == 500

    @pytest.mark.asyncio
    async def test_errors_propagate(self, service, mock_llm) -> None:
        mock_llm.complete = AsyncMock(side_effect=ExternalServiceError(message="down"))
        with pytest.raises(ExternalServiceError):
            await service.tour_preview("Hetman Museum", "adults", 45, [])


# ─── Profile resolution ───────────────────────────────────────────

class TestResolveProfile:
    @pytest.mark.asyncio
    async def test_client_data_then_store_then_defaults(self, service, store, museum_factory) -> None:
        await store.create_museum(museum_factory(website=None))

        profile = await service.resolve_profile("museum-1", {"name": "  Client name ", "description": ""})

        assert profile.name == "Client name"
        assert profile.description == "City history from the Kyivan Rus to today"
        assert profile.website == "—"
