"""Wizard content blocks: chips, preview, story intro and tour preview.

These are stateless documents.  The generation service asks the model for
``ChipSets`` / ``Preview`` / ``StoryIntro`` under a strict JSON schema and
validates the answer with the same class; list bounds declared here are
what makes an oversized answer fall back.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MuseumProfile(BaseModel):
    """Museum facts embedded in generation prompts."""

    model_config = ConfigDict(frozen=True)

    name: str = "the museum"
    description: str = "no description"
    website: str = "—"


class Selections(BaseModel):
    """What the visitor picked in the wizard so far."""

    model_config = ConfigDict(frozen=True)

    motivations: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    level: str | None = None
    time: str | None = None


# ─── Chips ───────────────────────────────────────────────────────────


class ChipSets(BaseModel):
    model_config = ConfigDict(frozen=True)

    motivations: list[str]
    interests: list[str]
    levels: list[str]
    times: list[str]


# ─── Preview ─────────────────────────────────────────────────────────


class Hero(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    subtitle: str


class RouteStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    room: str
    focus: str
    why: str
    minutes: int = Field(ge=0)


class FirstObject(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    room: str
    reason: str
    source_refs: list[str]
    search_query: str
    preferred_sources: list[str]
    image_urls: list[str]


class Preview(BaseModel):
    """Mobile-screen teaser of the personalised tour."""

    model_config = ConfigDict(frozen=True)

    hero: Hero
    what_to_expect: list[str] = Field(max_length=6)
    route_preview: list[RouteStep] = Field(max_length=4)
    first_object: FirstObject


# ─── Story intro ─────────────────────────────────────────────────────


class Welcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    paragraph: str


class OutlineRoom(BaseModel):
    model_config = ConfigDict(frozen=True)

    room: str
    summary: str
    key_objects: list[str] = Field(max_length=3)
    source_refs: list[str]


class StoryIntro(BaseModel):
    """Warm welcome text plus a short room-by-room outline."""

    model_config = ConfigDict(frozen=True)

    welcome: Welcome
    outline: list[OutlineRoom] = Field(max_length=5)
    time_note: str
    cta_label: str


# ─── Tour preview ────────────────────────────────────────────────────


class TourPreview(BaseModel):
    """Free-text first-room teaser."""

    model_config = ConfigDict(frozen=True)

    museum_name: str
    tour_content: str
    level: str
    minutes: int
    interests: list[str]
