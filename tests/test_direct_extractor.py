import httpx
import pytest

from media_scraper.app.schemas.media import MediaType
from media_scraper.app.services.media_extraction.errors import ExtractionFailedError
from media_scraper.app.services.media_extraction.extractors.direct import DirectExtractor


@pytest.mark.asyncio
async def test_trusted_host_skips_probe(upstream, make_client):
    async with make_client() as client:
        media = await DirectExtractor(client).extract("https://pbs.twimg.com/media/ABC.jpg?name=large")
    assert media[0].metadata["source"] == "direct-trusted"
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_head_probe_reads_content_type(upstream, make_client):
    def handler(request):
        assert request.method == "HEAD"
        return httpx.Response(200, headers={"content-type": "video/mp4", "content-length": "1048576"})

    upstream.handler = handler
    async with make_client() as client:
        media = await DirectExtractor(client).extract("https://cdn.example.com/clip")

    assert media[0].media_type is MediaType.VIDEO
    assert media[0].metadata == {
        "source": "direct",
        "verified": True,
        "content_type": "video/mp4",
        "content_length": 1048576,
    }


@pytest.mark.asyncio
async def test_head_not_allowed_falls_back_to_get(upstream, make_client):
    def handler(request):
        if request.method == "HEAD":
            return httpx.Response(405)
        return httpx.Response(200, headers={"content-type": "image/gif"}, content=b"GIF89a")

    upstream.handler = handler
    async with make_client() as client:
        media = await DirectExtractor(client).extract("https://cdn.example.com/funny.gif")

    assert media[0].media_type is MediaType.GIF
    assert [r.method for r in upstream.requests] == ["HEAD", "GET"]


@pytest.mark.asyncio
async def test_missing_resource_fails(upstream, make_client):
    upstream.handler = lambda request: httpx.Response(404)
    async with make_client() as client:
        with pytest.raises(ExtractionFailedError) as excinfo:
            await DirectExtractor(client).extract("https://cdn.example.com/gone.png")
    assert "URL returned 404" in excinfo.value.message


@pytest.mark.asyncio
async def test_non_media_content_fails(upstream, make_client):
    upstream.handler = lambda request: httpx.Response(200, headers={"content-type": "text/html; charset=utf-8"})
    async with make_client() as client:
        with pytest.raises(ExtractionFailedError) as excinfo:
            await DirectExtractor(client).extract("https://cdn.example.com/article")
    assert "text/html" in excinfo.value.message


@pytest.mark.asyncio
async def test_unreachable_host_returns_unverified_url(upstream, make_client):
    def handler(request):
        raise httpx.ConnectError("name resolution failed", request=request)

    upstream.handler = handler
    async with make_client() as client:
        media = await DirectExtractor(client).extract("https://cdn.example.com/photo.webp")

    assert media[0].media_url == "https://cdn.example.com/photo.webp"
    assert media[0].media_type is MediaType.IMAGE
    assert media[0].metadata["verified"] is False
    assert media[0].metadata["source"] == "direct-unverified"
