from media_scraper.app.schemas.media import MediaReference, MediaType
from media_scraper.app.services.media_extraction.normalizer import coerce_media_type, normalize_media


def test_removes_duplicates_preserving_first_seen_order():
    items = [
        MediaReference(media_url="https://cdn.example.com/b.png", media_type=MediaType.IMAGE, metadata={"n": 1}),
        MediaReference(media_url="https://cdn.example.com/a.mp4", media_type=MediaType.VIDEO),
        MediaReference(media_url="https://cdn.example.com/b.png", media_type=MediaType.IMAGE, metadata={"n": 2}),
    ]
    result = normalize_media(items)
    assert [m.media_url for m in result] == ["https://cdn.example.com/b.png", "https://cdn.example.com/a.mp4"]
    assert result[0].metadata == {"n": 1}


def test_accepts_adapter_dicts_and_strips_extra_fields():
    result = normalize_media(
        [
            {
                "mediaUrl": "https://video.twimg.com/a.mp4",
                "mediaType": "video",
                "thumbnail": "https://pbs.twimg.com/thumb.jpg",
                "internal_score": 12,
                "metadata": {"author": "jack", "duration": None},
            }
        ]
    )
    assert len(result) == 1
    dumped = result[0].model_dump(by_alias=True)
    assert set(dumped) == {"mediaUrl", "mediaType", "metadata"}
    assert dumped["metadata"] == {"author": "jack", "thumbnail_url": "https://pbs.twimg.com/thumb.jpg"}


def test_unknown_media_type_is_guessed_from_url():
    assert coerce_media_type("animated", "https://cdn.example.com/a.gif") is MediaType.GIF
    assert coerce_media_type(None, "https://cdn.example.com/a.webm") is MediaType.VIDEO
    assert coerce_media_type("PHOTO", "https://cdn.example.com/a") is MediaType.IMAGE


def test_drops_non_http_urls():
    result = normalize_media(
        [
            {"mediaUrl": "data:image/png;base64,AAAA", "mediaType": "image"},
            {"mediaUrl": "/relative/path.png", "mediaType": "image"},
            {"mediaUrl": "https://cdn.example.com/ok.png", "mediaType": "image"},
        ]
    )
    assert [m.media_url for m in result] == ["https://cdn.example.com/ok.png"]


def test_empty_input():
    assert normalize_media([]) == []
