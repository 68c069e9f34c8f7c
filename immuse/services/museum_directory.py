"""Directory of well-known museum names for the wizard's autocomplete.

Names are scraped from the headings of a public museum portal page.  When
the page cannot be fetched or yields nothing, a fixed list of Ukrainian
museums is served through the shared fallback strategy.
"""

from __future__ import annotations

import re

import httpx
import structlog
from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict, Field

from immuse.services.fallback import attempt
from immuse.utils.errors import ExternalServiceError

logger = structlog.get_logger(logger_name=__name__)

_SPACE_RE = re.compile(r"\s+")
# Museum, reserve (заповідник) or gallery, in Ukrainian.
_KEYWORD_RE = re.compile(r"музей|заповідник|галерея", re.IGNORECASE)

_MIN_NAME_LENGTH = 11
_MAX_NAME_LENGTH = 199

_REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; ImmuseBot/1.0)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

FALLBACK_MUSEUMS: tuple[str, ...] = (
    "Національний музей історії України",
    "Національний музей мистецтв імені Богдана та Варвари Ханенків",
    "Національний музей народного мистецтва Гуцульщини та Покуття імені Й. Кобринського",
    "Національний заповідник \"Києво-Печерська лавра\"",
    "Національний музей \"Чорнобиль\"",
    "Полтавський краєзнавчий музей імені Василя Кричевського",
    "Державний музей авіації імені О.К. Антонова",
    "Одеський історико-краєзнавчий музей",
    "Хмельницький обласний художній музей",
    "Львівський історичний музей",
    "Чернівецький обласний краєзнавчий музей",
    "Дніпровський історичний музей імені Д.І. Яворницького",
    "Запорізький обласний краєзнавчий музей",
    "Харківський історичний музей",
    "Київський музей народного декоративного мистецтва",
    "Музей історії Києва",
    "Національний музей українського народного декоративного мистецтва",
    "Музей гетьманства",
    "Музей книги та друкарства України",
    "Музей театрального, музичного та кіномистецтва України",
)


class MuseumNames(BaseModel):
    model_config = ConfigDict(frozen=True)

    names: list[str] = Field(min_length=1)


def extract_museum_names(page: str, limit: int = 20) -> list[str]:
    """Pull museum-like heading texts out of an HTML page.

    Headings must mention a museum, reserve or gallery and be between 11
    and 199 characters long once tags and extra whitespace are removed.
    Duplicates are dropped, order is kept, at most *limit* are returned.
    """
    names: list[str] = []
    soup = BeautifulSoup(page, "html.parser")
    for heading in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
        text = _SPACE_RE.sub(" ", heading.get_text(" ", strip=True))
        if not _KEYWORD_RE.search(text):
            continue
        if _MIN_NAME_LENGTH <= len(text) <= _MAX_NAME_LENGTH and text not in names:
            names.append(text)
        if len(names) >= limit:
            break
    return names


class MuseumDirectory:
    """Lists museum names from the configured portal."""

    def __init__(self, http_client: httpx.AsyncClient, url: str, limit: int = 20) -> None:
        self._http = http_client
        self._url = url
        self._limit = max(1, limit)

    async def list_museums(self) -> list[str]:
        outcome = await attempt(
            self._scrape,
            fallback=MuseumNames(names=list(FALLBACK_MUSEUMS[: self._limit])),
            schema=MuseumNames,
            operation="museum_directory",
        )
        logger.info("museum_directory_listed", count=len(outcome.value.names), fallback=outcome.used_fallback)
        return outcome.value.names

    async def _scrape(self) -> MuseumNames:
        try:
            response = await self._http.get(self._url, headers=_REQUEST_HEADERS, follow_redirects=True)
        except httpx.HTTPError as exc:
            raise ExternalServiceError(message=f"Museum portal unreachable: {exc}", provider_name="museum-portal") from exc
        if not response.is_success:
            raise ExternalServiceError(
                message=f"Museum portal answered HTTP {response.status_code}",
                provider_name="museum-portal",
            )
        return MuseumNames(names=extract_museum_names(response.text, self._limit))
