"""Tests for LRCLIB client implementation."""

import httpx
import pytest

from lyricspot.config.settings import LrclibSettings
from lyricspot.domain.exceptions import DecodeError
from lyricspot.infrastructure.integrations.lrclib_client import LrclibClient


@pytest.fixture
def seen() -> list[httpx.Request]:
    return []


def make_client(handler) -> tuple[LrclibClient, httpx.AsyncClient]:
    settings = LrclibSettings(base_url="https://lrclib.test")
    http = httpx.AsyncClient(base_url=settings.base_url, transport=httpx.MockTransport(handler))
    return LrclibClient(settings, client=http), http


class TestLrclibClientGet:
    """Test LrclibClient.get()."""

    @pytest.mark.asyncio
    async def test_full_query(self, seen: list[httpx.Request]):
        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": 1, "syncedLyrics": "[00:01.00]hi"})

        client, http = make_client(handler)
        data = await client.get("Artist", "Title", "Album", 233)
        await http.aclose()

        assert data == {"id": 1, "syncedLyrics": "[00:01.00]hi"}
        assert seen[0].url.path == "/api/get"
        assert dict(seen[0].url.params) == {
            "artist_name": "Artist",
            "track_name": "Title",
            "album_name": "Album",
            "duration": "233",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("album,duration", [(None, None), ("", 0), (None, -3)])
    async def test_optional_fields_omitted(self, seen, album, duration):
        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": 1})

        client, http = make_client(handler)
        await client.get("Artist", "Title", album, duration)
        await http.aclose()

        params = seen[0].url.params
        assert "album_name" not in params
        assert "duration" not in params

    @pytest.mark.asyncio
    async def test_not_found_returns_none(self):
        client, http = make_client(lambda r: httpx.Response(404, json={"code": 404}))
        assert await client.get("Artist", "Title") is None
        await http.aclose()

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        client, http = make_client(lambda r: httpx.Response(502))
        with pytest.raises(httpx.HTTPStatusError):
            await client.get("Artist", "Title")
        await http.aclose()

    @pytest.mark.asyncio
    async def test_non_object_payload_raises_decode_error(self):
        client, http = make_client(lambda r: httpx.Response(200, json=["a"]))
        with pytest.raises(DecodeError):
            await client.get("Artist", "Title")
        await http.aclose()

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self):
        client, http = make_client(lambda r: httpx.Response(404))
        await client.close()
        assert not http.is_closed
        await http.aclose()
