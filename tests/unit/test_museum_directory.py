"""Unit tests for the museum directory scraper."""

from __future__ import annotations

import httpx
import pytest

from immuse.services.museum_directory import FALLBACK_MUSEUMS, MuseumDirectory, extract_museum_names

_PAGE = """
<html><body>
  <h1>Музеї України</h1>
  <h2 class="title">Національний художній <b>музей</b> України</h2>
  <h3>Новини культури та мистецтва</h3>
  <h2>Національний художній музей України</h2>
  <h4>Шевченківський національний заповідник</h4>
  <h2>Музей &amp; галерея сучасного мистецтва</h2>
</body></html>
"""


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestExtractMuseumNames:
    def test_filters_and_dedupes(self) -> None:
        names = extract_museum_names(_PAGE)
        assert names == [
            "Національний художній музей України",
            "Шевченківський національний заповідник",
            "Музей & галерея сучасного мистецтва",
        ]

    def test_short_headings_skipped(self) -> None:
        assert extract_museum_names("<h2>Музей</h2>") == []

    def test_limit(self) -> None:
        assert len(extract_museum_names(_PAGE, limit=1)) == 1


class TestMuseumDirectory:
    @pytest.mark.asyncio
    async def test_scraped_names(self) -> None:
        async with _client(lambda request: httpx.Response(200, text=_PAGE)) as client:
            names = await MuseumDirectory(client, "https://museums.example.org").list_museums()
        assert names[0] == "Національний художній музей України"

    @pytest.mark.asyncio
    async def test_http_error_status_falls_back(self) -> None:
        async with _client(lambda request: httpx.Response(503)) as client:
            names = await MuseumDirectory(client, "https://museums.example.org").list_museums()
        assert names == list(FALLBACK_MUSEUMS)

    @pytest.mark.asyncio
    async def test_network_error_falls_back(self) -> None:
        def _boom(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(_boom) as client:
            names = await MuseumDirectory(client, "https://museums.example.org", limit=5).list_museums()
        assert names == list(FALLBACK_MUSEUMS[:5])

    @pytest.mark.asyncio
    async def test_page_without_museums_falls_back(self) -> None:
        async with _client(lambda request: httpx.Response(200, text="<h1>Hello</h1>")) as client:
            names = await MuseumDirectory(client, "https://museums.example.org").list_museums()
        assert names == list(FALLBACK_MUSEUMS)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, -3])
    async def test_non_positive_limit_still_lists_one(self, limit: int) -> None:
        async with _client(lambda request: httpx.Response(503)) as client:
            names = await MuseumDirectory(client, "https://museums.example.org", limit=limit).list_museums()
        assert names == [FALLBACK_MUSEUMS[0]]
