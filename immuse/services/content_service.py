"""Stateless wizard content: chips, preview, story intro and tour preview.

Chips, preview and story intro never fail towards the client: each has a
fixed fallback document returned whole whenever generation fails in any
way.  The free-text tour preview has no fallback; its failures surface as
``ExternalServiceError``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

import structlog

from immuse.config.loader import generation_params
from immuse.interfaces.llm_provider import ILLMProvider
from immuse.interfaces.museum_store import IMuseumStore
from immuse.models.content import (
    ChipSets,
    FirstObject,
    Hero,
    MuseumProfile,
    OutlineRoom,
    Preview,
    RouteStep,
    Selections,
    StoryIntro,
    TourPreview,
    Welcome,
)
from immuse.services.fallback import attempt
from immuse.utils.errors import InputValidationError
from immuse.utils.schema import strict_json_schema

logger = structlog.get_logger(logger_name=__name__)

# ── Chip lists ────────────────────────────────────────────────────────

FALLBACK_MOTIVATIONS: tuple[str, ...] = (
    "Learn more about the artists",
    "Understand the collection",
    "First time here",
    "I'm a tourist",
    "Temporary exhibitions",
    "Atmosphere and space",
    "Photo opportunities",
    "For kids / family",
    "Recommended by friends",
    "Education / research",
)

FALLBACK_INTERESTS: tuple[str, ...] = (
    "European painting",
    "Renaissance",
    "Baroque / Rococo",
    "Portrait / Landscape / Still life",
    "Icon painting",
    "Sculpture",
    "Decorative arts",
    "Asian art",
    "Antiquity / Archaeology",
    "Religion and mythology",
    "History and society",
    "Techniques and materials",
    "Collectors and patrons",
)

FIXED_LEVELS: tuple[str, ...] = ("For children", "Basic", "In-depth", "Professional")
FIXED_TIMES: tuple[str, ...] = ("30 min", "60 min", "90 min", "120+ min")

MIN_CHIPS = 5
_MAX_MOTIVATIONS = 10
_MAX_INTERESTS = 20

_NOT_SPECIFIED = "not specified"

# ── Prompts ───────────────────────────────────────────────────────────

_CHIPS_SYSTEM = """\
You are a museum curator designing visitor onboarding. Answer in {language}.
Return ONLY JSON with lists of short chips tailored to this particular museum.
Every chip is 1-4 words. Base the options on the museum's type and collection.
motivations: why would people visit this museum, what attracts them?
interests: which topics, periods, styles or objects interest its visitors?
Be specific and relevant to this museum."""

_PREVIEW_SYSTEM = """\
You are a curator writing short previews for a mobile screen. Answer in {language}.
Create an engaging, personalised tour preview based on the visitor's choices.
Be enthusiastic and positive, greet the visitor's interests by name,
name concrete halls and objects that match those interests.
Be specific and relevant to this museum."""

_STORY_INTRO_SYSTEM = """\
You are a friendly museum storyteller. Answer in {language}.
Write a short warm introduction to a personal tour (120-180 words) plus a mini room plan.
Tone: welcoming, light but informative; address the visitor politely.
Align the focus of the introduction with the selected interests.
Give a route outline of 2-5 items (1-2 sentences each): room or hall, what the visitor
will see and why it matters for the chosen interests. At most 3 key objects per room."""

_TOUR_PREVIEW_SYSTEM = """\
You are an experienced museum guide. Answer in {language}.
Write the opening of a personalised tour: a short greeting, a description of the
first room, 2-3 key objects in it and how they connect to the visitor's interests.
Plain text, no markdown, at most 200 words."""


def dedupe_or_fallback(
    items: Iterable[str],
    fallback: Sequence[str],
    minimum: int = MIN_CHIPS,
) -> list[str]:
    """Remove duplicate chips, topping up from *fallback* when too few remain.

    An empty result gives the full fallback list.  Otherwise the first
    occurrence of every chip is kept and, while fewer than *minimum* remain,
    fallback chips are appended in their fixed order, skipping any already
    present.
    """
    unique = list(dict.fromkeys(item.strip() for item in items if item and item.strip()))
    if not unique:
        return list(fallback)
    for extra in fallback:
        if len(unique) >= minimum:
            break
        if extra not in unique:
            unique.append(extra)
    return unique


def fallback_chips() -> ChipSets:
    return ChipSets(
        motivations=list(FALLBACK_MOTIVATIONS),
        interests=list(FALLBACK_INTERESTS),
        levels=list(FIXED_LEVELS),
        times=list(FIXED_TIMES),
    )


def fallback_preview(profile: MuseumProfile) -> Preview:
    return Preview(
        hero=Hero(
            title=f"Personal tour of {profile.name}",
            subtitle="Shaped around your interests",
        ),
        what_to_expect=[
            "An interactive route through the key exhibits",
            "Clear explanations of the historical context",
            "Room to ask questions and get answers",
            "Personal recommendations for further exploration",
        ],
        route_preview=[
            RouteStep(
                room="Main hall",
                focus="Introduction to the museum's exhibition",
                why="Get to know the core collection",
                minutes=15,
            ),
            RouteStep(
                room="Special exhibition",
                focus="Exhibits matching your interests",
                why="Content picked for you",
                minutes=20,
            ),
        ],
        first_object=FirstObject(
            title="A remarkable exhibit",
            room="Main hall",
            reason="This exhibit matches your interests",
            source_refs=["museum_catalogue"],
            search_query=f"{profile.name} exhibit",
            preferred_sources=["Wikimedia", "official museum website"],
            image_urls=[],
        ),
    )


def fallback_story_intro(selections: Selections) -> StoryIntro:
    interests = ", ".join(selections.interests) or "general interests"
    return StoryIntro(
        welcome=Welcome(
            title="Welcome!",
            paragraph=(
                f"This route is tailored to your interests: {interests}. "
                "Start in the first room and follow the hints; at the end you can leave "
                "a rating and comments so we can make the tour even better."
            ),
        ),
        outline=[
            OutlineRoom(
                room="European painting hall",
                summary="Paintings from the Renaissance to the Baroque, including Italian and Flemish masters.",
                key_objects=["Portrait of an unknown nobleman", "Landscape with shepherds", "Still life with fruit"],
                source_refs=["european_painting_catalogue.pdf"],
            ),
            OutlineRoom(
                room="Sculpture hall",
                summary="Marble and bronze sculpture tracing the evolution of art from antiquity to today.",
                key_objects=["Bust of a Roman emperor", "Statue of Aphrodite", "Modern abstract composition"],
                source_refs=["sculpture_collection.txt"],
            ),
            OutlineRoom(
                room="Decorative arts hall",
                summary="Furniture, tableware and jewellery showing how crafts and design developed over centuries.",
                key_objects=["Inlaid casket", "Porcelain service", "Silver goblet"],
                source_refs=["decorative_arts.pdf"],
            ),
        ],
        time_note=f"Approximate route duration: {selections.time or '60 min'}.",
        cta_label="Start the tour",
    )


class ContentService:
    """Generates wizard content blocks for a museum."""

    def __init__(
        self,
        store: IMuseumStore,
        llm: ILLMProvider,
        config: dict[str, Any] | None = None,
        response_language: str = "Ukrainian",
    ) -> None:
        self._store = store
        self._llm = llm
        self._config = config or {}
        self._language = response_language

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def dynamic_chips(self, museum_id: str, museum_data: dict[str, Any] | None) -> ChipSets:
        if not museum_id or museum_data is None:
            raise InputValidationError(message="Museum ID and museum data are required")
        profile = await self.resolve_profile(museum_id, museum_data)

        user_prompt = (
            f"Museum: {profile.name}\n"
            f"Description: {profile.description}\n"
            f"Website: {profile.website}\n"
            "Create personalised options for this specific museum."
        )
        outcome = await attempt(
            lambda: self._structured("dynamic_chips", "ChipSets", ChipSets, _CHIPS_SYSTEM, user_prompt),
            fallback=fallback_chips,
            schema=ChipSets,
            operation="dynamic_chips",
        )
        if outcome.used_fallback:
            return outcome.value

        # Levels and times are fixed product options, never model-generated.
        return ChipSets(
            motivations=dedupe_or_fallback(outcome.value.motivations, FALLBACK_MOTIVATIONS)[:_MAX_MOTIVATIONS],
            interests=dedupe_or_fallback(outcome.value.interests, FALLBACK_INTERESTS)[:_MAX_INTERESTS],
            levels=list(FIXED_LEVELS),
            times=list(FIXED_TIMES),
        )

    async def preview(
        self,
        museum_id: str,
        selections: Selections | None,
        museum_data: dict[str, Any] | None = None,
    ) -> Preview:
        if not museum_id or selections is None:
            raise InputValidationError(message="Museum ID and selections are required")
        profile = await self.resolve_profile(museum_id, museum_data)

        user_prompt = (
            f"{self._profile_block(profile)}\n"
            f"Visitor choices:\n{self._selections_block(selections)}\n"
            "Create a personalised tour preview for this visitor."
        )
        outcome = await attempt(
            lambda: self._structured("preview", "Preview", Preview, _PREVIEW_SYSTEM, user_prompt),
            fallback=lambda: fallback_preview(profile),
            schema=Preview,
            operation="preview",
        )
        return outcome.value

    async def story_intro(
        self,
        museum_id: str,
        selections: Selections | None,
        museum_data: dict[str, Any] | None = None,
    ) -> StoryIntro:
        if not museum_id or selections is None:
            raise InputValidationError(message="Museum ID and selections are required")
        profile = await self.resolve_profile(museum_id, museum_data)

        user_prompt = (
            f"{self._profile_block(profile)}\n"
            f"Visitor choices:\n{self._selections_block(selections)}\n"
            "Write the introduction and the room outline."
        )
        outcome = await attempt(
            lambda: self._structured("story_intro", "StoryIntro", StoryIntro, _STORY_INTRO_SYSTEM, user_prompt),
            fallback=lambda: fallback_story_intro(selections),
            schema=StoryIntro,
            operation="story_intro",
        )
        return outcome.value

    async def tour_preview(
        self,
        museum_name: str,
        level: str,
        minutes: int,
        interests: list[str],
    ) -> TourPreview:
        """Free-text first-room teaser.  Errors propagate (no fallback)."""
        params = generation_params(self._config, "tour_preview")
        user_prompt = (
            f"Museum: {museum_name}\n"
            f"Level: {level}\n"
            f"Time: {minutes} min\n"
            f"Interests: {', '.join(interests) or _NOT_SPECIFIED}"
        )
        content = await self._llm.complete(
            _TOUR_PREVIEW_SYSTEM.format(language=self._language),
            user_prompt,
            temperature=params["temperature"],
            max_tokens=params["max_tokens"],
        )
        return TourPreview(
            museum_name=museum_name,
            tour_content=content.strip(),
            level=level,
            minutes=minutes,
            interests=interests,
        )

    async def resolve_profile(self, museum_id: str, museum_data: dict[str, Any] | None) -> MuseumProfile:
        """Merge client-sent museum data with the stored museum, then defaults.

        Values sent by the client win; blanks are filled from the stored
        museum when it exists, and from generic defaults otherwise.
        """
        data = museum_data or {}
        stored = await self._store.get_museum(museum_id) if museum_id else None
        defaults = MuseumProfile()

        def pick(key: str, stored_value: str | None, default: str) -> str:
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            return stored_value or default

        return MuseumProfile(
            name=pick("name", stored.name if stored else None, defaults.name),
            description=pick("description", stored.description if stored else None, defaults.description),
            website=pick("website", stored.website if stored else None, defaults.website),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _structured(
        self,
        operation: str,
        schema_name: str,
        model: type[ChipSets] | type[Preview] | type[StoryIntro],
        system_prompt: str,
        user_prompt: str,
    ) -> dict[str, Any]:
        params = generation_params(self._config, operation)
        return await self._llm.complete_structured(
            system_prompt.format(language=self._language),
            user_prompt,
            schema_name=schema_name,
            schema=strict_json_schema(model),
            temperature=params["temperature"],
            max_tokens=params["max_tokens"],
        )

    @staticmethod
    def _profile_block(profile: MuseumProfile) -> str:
        return (
            f"Museum: {profile.name}\n"
            f"Description: {profile.description}\n"
            f"Website: {profile.website}"
        )

    @staticmethod
    def _selections_block(selections: Selections) -> str:
        return (
            f"- Motivations: {', '.join(selections.motivations) or _NOT_SPECIFIED}\n"
            f"- Interests: {', '.join(selections.interests) or _NOT_SPECIFIED}\n"
            f"- Level: {selections.level or _NOT_SPECIFIED}\n"
            f"- Time: {selections.time or _NOT_SPECIFIED}"
        )
