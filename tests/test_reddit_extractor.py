import httpx
import pytest

from media_scraper.app.schemas.media import MediaType
from media_scraper.app.services.media_extraction.errors import ExtractionFailedError
from media_scraper.app.services.media_extraction.extractors.reddit import (
    RedditExtractor,
    collect_post_media,
    is_short_link,
    to_json_url,
)

POST_URL = "https://www.reddit.com/r/videos/comments/abc123/some_title/"


def _listing(post):
    return [{"kind": "Listing", "data": {"children": [{"kind": "t3", "data": post}]}}]


class UnreadBody(httpx.AsyncByteStream):
    """Page body that fails the test if anything tries to read it."""

    async def __aiter__(self):
        raise AssertionError("short-link page body should not be downloaded")
        yield b""


def test_to_json_url_strips_query_fragment_and_trailing_slash():
    assert to_json_url(POST_URL + "?utm_source=share#comments") == (
        "https://www.reddit.com/r/videos/comments/abc123/some_title.json"
    )


def test_short_link_detection():
    assert is_short_link("https://redd.it/abc123")
    assert is_short_link("https://v.redd.it/abc123")
    assert is_short_link("https://www.reddit.com/r/pics/s/XyZ")
    assert not is_short_link(POST_URL)


@pytest.mark.asyncio
async def test_video_post_yields_preview_variant_and_fallback(upstream, make_client):
    post = {
        "title": "clip",
        "subreddit": "videos",
        "author": "someone",
        "permalink": "/r/videos/comments/abc123/some_title/",
        "url": "https://v.redd.it/abc123",
        "preview": {
            "images": [
                {
                    "variants": {
                        "mp4": {"source": {"url": "https://preview.redd.it/abc.gif?format=mp4&amp;s=1"}},
                    }
                }
            ]
        },
        "media": {
            "reddit_video": {
                "fallback_url": "https://v.redd.it/abc123/DASH_720.mp4?source=fallback",
                "duration": 14,
            }
        },
    }

    def handler(request):
        assert str(request.url) == "https://www.reddit.com/r/videos/comments/abc123/some_title.json"
        return httpx.Response(200, json=_listing(post))

    upstream.handler = handler
    async with make_client() as client:
        media = await RedditExtractor(client).extract(POST_URL)

    assert [(m.media_url, m.media_type) for m in media] == [
        ("https://preview.redd.it/abc.gif?format=mp4&s=1", MediaType.VIDEO),
        ("https://v.redd.it/abc123/DASH_720.mp4?source=fallback", MediaType.VIDEO),
    ]
    assert media[1].metadata["duration"] == 14
    assert media[0].metadata["permalink"] == "https://reddit.com/r/videos/comments/abc123/some_title/"


def test_image_post_decodes_entities_and_dedupes():
    post = {
        "url": "https://i.redd.it/pic.jpg",
        "url_overridden_by_dest": "https://i.redd.it/pic.jpg",
        "preview": {
            "images": [
                {"source": {"url": "https://preview.redd.it/pic.jpg?width=1080&amp;auto=webp", "width": 1080}}
            ]
        },
    }
    media = collect_post_media(post)
    assert [m.media_url for m in media] == [
        "https://i.redd.it/pic.jpg",
        "https://preview.redd.it/pic.jpg?width=1080&auto=webp",
    ]
    assert media[1].metadata["width"] == 1080


def test_gallery_items_in_order():
    post = {
        "url": "https://www.reddit.com/gallery/abc123",
        "gallery_data": {"items": [{"media_id": "one"}, {"media_id": "two"}]},
        "media_metadata": {
            "one": {"e": "Image", "s": {"u": "https://preview.redd.it/one.jpg?s=1", "x": 800, "y": 600}},
            "two": {"e": "AnimatedImage", "s": {"gif": "https://i.redd.it/two.gif", "x": 400, "y": 300}},
        },
    }
    media = collect_post_media(post)
    assert [m.media_type for m in media] == [MediaType.IMAGE, MediaType.GIF]
    assert [m.metadata["gallery_index"] for m in media] == [0, 1]
    assert media[1].media_url == "https://i.redd.it/two.gif"


def test_crosspost_parent_used_when_post_has_no_media():
    post = {
        "url": "https://www.reddit.com/r/pics/comments/xyz/",
        "crosspost_parent_list": [{"url": "https://i.redd.it/parent.png", "subreddit": "pics"}],
    }
    media = collect_post_media(post)
    assert [m.media_url for m in media] == ["https://i.redd.it/parent.png"]
    assert media[0].metadata["source"] == "reddit-crosspost"


@pytest.mark.asyncio
async def test_short_link_is_expanded_before_fetching_json(upstream, make_client):
    post = {"url": "https://i.redd.it/expanded.jpg"}

    def handler(request):
        if request.url.host == "redd.it":
            return httpx.Response(301, headers={"Location": "https://www.reddit.com/r/pics/comments/zz9/title/"})
        if request.url.path.endswith(".json"):
            return httpx.Response(200, json=_listing(post))
        return httpx.Response(200, stream=UnreadBody())

    upstream.handler = handler
    async with make_client() as client:
        media = await RedditExtractor(client).extract("https://redd.it/zz9")

    assert media[0].media_url == "https://i.redd.it/expanded.jpg"
    assert upstream.urls[-1] == "https://www.reddit.com/r/pics/comments/zz9/title.json"


@pytest.mark.asyncio
async def test_text_post_fails_with_hint(upstream, make_client):
    upstream.handler = lambda request: httpx.Response(200, json=_listing({"selftext": "just words"}))
    async with make_client() as client:
        with pytest.raises(ExtractionFailedError) as excinfo:
            await RedditExtractor(client).extract(POST_URL)
    assert "No media found in Reddit post" in excinfo.value.message


@pytest.mark.asyncio
async def test_reddit_error_status_fails(upstream, make_client):
    upstream.handler = lambda request: httpx.Response(403)
    async with make_client() as client:
        with pytest.raises(ExtractionFailedError) as excinfo:
            await RedditExtractor(client).extract(POST_URL)
    assert "403" in excinfo.value.message
