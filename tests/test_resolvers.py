import pytest

from media_api import (
    AllApisExhaustedError,
    AllProxiesExhaustedError,
    InstagramResolver,
    InvalidIdError,
    NotFoundError,
    PlatformKind,
    TikTokResolver,
    TwitterResolver,
    YouTubeResolver,
    extract_youtube_id,
)
from media_api import resolvers
from media_api.relay import encode_component
from media_api.resolvers import STOCK_THUMBNAIL, STOCK_THUMBNAIL_ALT

from tests.conftest import FakeResponse, json_response

TIKTOK_URL = "https://vm.tiktok.com/ZMabc123/"
ENC = encode_component(TIKTOK_URL)
API_1 = f"https://api.tiklydown.eu.org/api/download?url={ENC}"
API_2 = f"https://www.tikwm.com/api/?url={ENC}"
API_3 = f"https://tikdown.org/api?url={ENC}"


@pytest.fixture(autouse=True)
def frozen_clock(monkeypatch):
    monkeypatch.setattr(resolvers, "timestamp_ms", lambda: 1700000000000)


@pytest.mark.asyncio
async def test_tiktok_videos_shape_watermarked_only(session, direct_relay):
    session.routes[API_1] = json_response({"videos": {"wm": "https://cdn.example/wm.mp4"}})
    descriptor = await TikTokResolver(direct_relay).resolve(TIKTOK_URL)
    assert descriptor.download_url == "https://cdn.example/wm.mp4"
    assert descriptor.platform is PlatformKind.TIKTOK
    assert descriptor.title == "TikTok Video"
    assert descriptor.thumbnail_url == STOCK_THUMBNAIL
    assert descriptor.author == "TikTok User"
    assert descriptor.duration == "Unknown"
    assert descriptor.filename == "tiktok_1700000000000.mp4"


@pytest.mark.asyncio
@pytest.mark.parametrize("videos,expected", [
    ({"hd": "https://c/hd", "sd": "https://c/sd", "wm": "https://c/wm"}, "https://c/hd"),
    ({"sd": "https://c/sd", "wm": "https://c/wm"}, "https://c/sd"),
    ({"hd": "", "sd": None, "wm": "https://c/wm"}, "https://c/wm"),
])
async def test_tiktok_quality_precedence(session, direct_relay, videos, expected):
    session.routes[API_1] = json_response({
        "videos": videos,
        "title": "Dance",
        "cover": "https://c/cover.jpg",
        "author": {"nickname": "dancer"},
    })
    descriptor = await TikTokResolver(direct_relay).resolve(TIKTOK_URL)
    assert descriptor.download_url == expected
    assert descriptor.title == "Dance"
    assert descriptor.thumbnail_url == "https://c/cover.jpg"
    assert descriptor.author == "dancer"


@pytest.mark.asyncio
async def test_tiktok_second_api_after_network_error(session, direct_relay):
    # API_1 is not routed: the fake fails it like an unreachable host
    session.routes[API_2] = json_response({
        "code": 0,
        "data": {
            "play": "https://c/play.mp4",
            "wmplay": "https://c/wmplay.mp4",
            "title": "From tikwm",
            "cover": "https://c/tikwm.jpg",
            "author": {"nickname": "tw"},
        },
    })
    session.routes[API_3] = json_response({"url": "https://c/never.mp4"})
    descriptor = await TikTokResolver(direct_relay).resolve(TIKTOK_URL)
    assert descriptor.download_url == "https://c/play.mp4"
    assert descriptor.title == "From tikwm"
    assert descriptor.author == "tw"
    assert API_3 not in session.calls
    assert session.calls == [API_1, API_2]


@pytest.mark.asyncio
async def test_tiktok_unusable_shapes_move_on(session, direct_relay):
    session.routes[API_1] = json_response({"videos": {"hd": ""}, "data": {"play": "https://c/ignored"}})
    session.routes[API_2] = FakeResponse(200, b"<html>not json</html>", "text/html")
    session.routes[API_3] = json_response({
        "url": "https://c/flat.mp4",
        "title": "Flat",
        "thumbnail": "https://c/flat.jpg",
        "author": "flat author",
    })
    descriptor = await TikTokResolver(direct_relay).resolve(TIKTOK_URL)
    assert descriptor.download_url == "https://c/flat.mp4"
    assert descriptor.author == "flat author"
    assert descriptor.thumbnail_url == "https://c/flat.jpg"


@pytest.mark.asyncio
async def test_tiktok_all_apis_exhausted(session, direct_relay):
    session.routes[API_1] = json_response({"message": "rate limited"})
    session.routes[API_2] = json_response({"data": {"play": "not a url"}})
    with pytest.raises(AllApisExhaustedError) as exc_info:
        await TikTokResolver(direct_relay).resolve(TIKTOK_URL)
    assert [a.name for a in exc_info.value.attempts] == ["TikTok API 1", "TikTok API 2", "TikTok API 3"]
    assert "All TikTok APIs failed" in str(exc_info.value)


@pytest.mark.asyncio
async def test_tiktok_custom_api_list(session, direct_relay):
    template = "https://tt.example/resolve?link={url}"
    session.routes[f"https://tt.example/resolve?link={ENC}"] = json_response({"url": "https://c/x.mp4"})
    descriptor = await TikTokResolver(direct_relay, [template]).resolve(TIKTOK_URL)
    assert descriptor.download_url == "https://c/x.mp4"


INSTAGRAM_URL = "https://www.instagram.com/reel/ABC1234567/"
INSTAGRAM_API = (
    "https://instagram-downloader-download-instagram-videos-stories.p.rapidapi.com/index?url="
    + encode_component(INSTAGRAM_URL)
)


@pytest.mark.asyncio
async def test_instagram_media(session, direct_relay):
    session.routes[INSTAGRAM_API] = json_response({"media": "https://ig.example/v.mp4", "title": "Reel"})
    descriptor = await InstagramResolver(direct_relay).resolve(INSTAGRAM_URL)
    assert descriptor.download_url == "https://ig.example/v.mp4"
    assert descriptor.title == "Reel"
    assert descriptor.author == "Instagram User"
    assert descriptor.thumbnail_url == STOCK_THUMBNAIL_ALT
    assert descriptor.filename == "instagram_1700000000000.mp4"


@pytest.mark.asyncio
async def test_instagram_missing_media(session, direct_relay):
    session.routes[INSTAGRAM_API] = json_response({"title": "no media"})
    with pytest.raises(NotFoundError, match="^Instagram: Video not found$"):
        await InstagramResolver(direct_relay).resolve(INSTAGRAM_URL)


@pytest.mark.asyncio
async def test_instagram_relay_exhausted_keeps_class_and_attempts(direct_relay):
    with pytest.raises(AllProxiesExhaustedError, match="^Instagram: ") as exc_info:
        await InstagramResolver(direct_relay).resolve(INSTAGRAM_URL)
    assert len(exc_info.value.attempts) == 1
    assert isinstance(exc_info.value.__cause__, AllProxiesExhaustedError)


@pytest.mark.asyncio
async def test_instagram_invalid_json(session, direct_relay):
    session.routes[INSTAGRAM_API] = FakeResponse(200, b"{broken")
    with pytest.raises(NotFoundError, match="^Instagram: "):
        await InstagramResolver(direct_relay).resolve(INSTAGRAM_URL)


TWITTER_URL = "https://x.com/user/status/123456789"
TWITTER_API = "https://twitsave.com/info?url=" + encode_component(TWITTER_URL)


@pytest.mark.asyncio
async def test_twitter_first_video(session, direct_relay):
    session.routes[TWITTER_API] = json_response({
        "videos": [{"url": "https://tw.example/720.mp4"}, {"url": "https://tw.example/360.mp4"}],
        "media": "https://tw.example/media.mp4",
        "author": "someone",
    })
    descriptor = await TwitterResolver(direct_relay).resolve(TWITTER_URL)
    assert descriptor.download_url == "https://tw.example/720.mp4"
    assert descriptor.author == "someone"
    assert descriptor.title == "Twitter Video"
    assert descriptor.filename == "twitter_1700000000000.mp4"


@pytest.mark.asyncio
async def test_twitter_media_fallback(session, direct_relay):
    session.routes[TWITTER_API] = json_response({"videos": [], "media": "https://tw.example/media.mp4"})
    descriptor = await TwitterResolver(direct_relay).resolve(TWITTER_URL)
    assert descriptor.download_url == "https://tw.example/media.mp4"


@pytest.mark.asyncio
async def test_twitter_not_found(session, direct_relay):
    session.routes[TWITTER_API] = json_response({"videos": [{}]})
    with pytest.raises(NotFoundError, match="^Twitter: Download link not found$"):
        await TwitterResolver(direct_relay).resolve(TWITTER_URL)


@pytest.mark.parametrize("url,video_id", [
    ("https://youtu.be/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=42", "dQw4w9WgXcQ"),
    ("https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://www.youtube.com/embed/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://www.youtube.com/v/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://www.youtube.com/channel/UC/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
])
def test_extract_youtube_id(url, video_id):
    assert extract_youtube_id(url) == video_id


@pytest.mark.parametrize("url", [
    "https://www.youtube.com/",
    "https://www.youtube.com/watch?v=short",
    "https://youtu.be/",
])
def test_extract_youtube_id_missing(url):
    assert extract_youtube_id(url) is None


@pytest.mark.asyncio
async def test_youtube_descriptor(session, direct_relay):
    url = "https://youtu.be/dQw4w9WgXcQ"
    descriptor = await YouTubeResolver(direct_relay).resolve(url)
    assert descriptor.thumbnail_url == "https://img.youtube.com/vi/dQw4w9WgXcQ/hqdefault.jpg"
    assert descriptor.filename == "youtube_dQw4w9WgXcQ.mp4"
    assert descriptor.download_url == "https://ytdl.shipit.workers.dev/?url=https%3A%2F%2Fyoutu.be%2FdQw4w9WgXcQ"
    assert descriptor.title == "YouTube Video"
    assert descriptor.author == "YouTube Channel"
    # No API is called for YouTube
    assert session.calls == []


@pytest.mark.asyncio
async def test_youtube_invalid_id():
    with pytest.raises(InvalidIdError, match="^YouTube: "):
        await YouTubeResolver().resolve("https://www.youtube.com/feed/trending")


@pytest.mark.asyncio
async def test_tiktok_empty_videos_object_moves_to_next_api(session, direct_relay):
    session.routes[API_1] = json_response({"videos": {}, "data": {"play": "https://c/data.mp4"}})
    session.routes[API_2] = json_response({"data": {"play": "https://c/api2.mp4"}})
    descriptor = await TikTokResolver(direct_relay).resolve(TIKTOK_URL)
    assert descriptor.download_url == "https://c/api2.mp4"
    assert session.calls == [API_1, API_2]
