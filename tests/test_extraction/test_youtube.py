"""Tests for YouTube extraction (mocked Data API and youtube-transcript-api)."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
import respx
from youtube_transcript_api._errors import TranscriptsDisabled

from brain_enricher.exceptions import ExtractorError
from brain_enricher.extraction.youtube import VIDEOS_API_URL, YouTubeExtractor, select_transcript
from brain_enricher.models.content import FullTextType

VIDEO_ID = "dQw4w9WgXcQ"

VIDEO_RESPONSE = {
    "items": [
        {
            "id": VIDEO_ID,
            "snippet": {
                "title": "Never Gonna Give You Up",
                "description": "The official video",
                "channelId": "UCuAXFkgsw1L7xaCfnd5JJOw",
                "channelTitle": "Rick Astley",
                "publishedAt": "2009-10-25T06:57:33Z",
                "thumbnails": {
                    "default": {"url": "https://i.ytimg.com/vi/x/default.jpg"},
                    "medium": {"url": "https://i.ytimg.com/vi/x/mqdefault.jpg"},
                    "high": {"url": "https://i.ytimg.com/vi/x/hqdefault.jpg"},
                },
                "tags": ["rick astley", "80s"],
                "categoryId": "10",
                "liveBroadcastContent": "none",
                "defaultAudioLanguage": "en",
            },
            "contentDetails": {"duration": "PT3M33S", "definition": "hd", "caption": "true"},
            "statistics": {"viewCount": "1500000000", "likeCount": "17000000", "commentCount": "2300000"},
            "topicDetails": {"topicCategories": ["https://en.wikipedia.org/wiki/Music"]},
            "status": {"license": "youtube", "embeddable": True},
        }
    ]
}


def track(language_code: str, is_generated: bool, snippets=()):
    return SimpleNamespace(
        language_code=language_code,
        is_generated=is_generated,
        fetch=MagicMock(return_value=list(snippets)),
    )


def snippet(text: str, start: float, duration: float = 1.5):
    return SimpleNamespace(text=text, start=start, duration=duration)


# --- Track selection (sync) ---


def test_select_prefers_manual_over_generated():
    manual = track("en", False)
    generated = track("en", True)
    assert select_transcript([generated, manual], "en") is manual


def test_select_prefers_matching_language_within_manual():
    german = track("de", False)
    english = track("en", False)
    assert select_transcript([german, english], "en") is english


def test_select_matches_base_language():
    british = track("en-GB", False)
    assert select_transcript([track("fr", False), british], "en") is british


def test_select_generated_match_beats_manual_in_other_language():
    """Language match wins over track kind when no manual track matches."""
    french_manual = track("fr", False)
    english_generated = track("en", True)
    assert select_transcript([french_manual, english_generated], "en") is english_generated


def test_select_falls_back_to_first_manual():
    first = track("fr", False)
    assert select_transcript([first, track("de", False)], "ja") is first


def test_select_empty():
    assert select_transcript([], "en") is None


# --- Extractor (async) ---


@pytest.fixture
def transcript_api():
    api = MagicMock()
    api.list.return_value = [
        track("en", True, [snippet("auto text", 0.0)]),
        track("en", False, [snippet("Never gonna", 0.0, 2.0), snippet("give you up", 2.0, 1.8)]),
    ]
    return api


@pytest.mark.asyncio
async def test_extract_maps_video_fields(fetcher, transcript_api):
    extractor = YouTubeExtractor(fetcher, api_key="key-123", transcript_api=transcript_api)
    with respx.mock() as mock:
        route = mock.get(VIDEOS_API_URL).mock(return_value=httpx.Response(200, json=VIDEO_RESPONSE))
        metadata = await extractor.extract(f"https://youtu.be/{VIDEO_ID}", VIDEO_ID)

    params = route.calls.last.request.url.params
    assert params["id"] == VIDEO_ID
    assert params["part"] == "snippet,contentDetails,statistics,topicDetails,status"
    assert params["key"] == "key-123"

    assert metadata.title == "Never Gonna Give You Up"
    assert metadata.author == "Rick Astley"
    assert metadata.author_url == "https://www.youtube.com/channel/UCuAXFkgsw1L7xaCfnd5JJOw"
    assert metadata.thumbnail_url == "https://i.ytimg.com/vi/x/hqdefault.jpg"
    assert metadata.published_date == "2009-10-25T06:57:33Z"
    assert metadata.tags == ["rick astley", "80s"]
    assert metadata.language == "en"
    assert metadata.provider_data["duration"] == "PT3M33S"
    assert metadata.provider_data["caption_available"] is True
    assert metadata.provider_data["view_count"] == "1500000000"
    assert metadata.provider_data["topic_categories"] == ["https://en.wikipedia.org/wiki/Music"]
    assert metadata.provider_data["embeddable"] is True


@pytest.mark.asyncio
async def test_extract_stores_manual_transcript(fetcher, transcript_api):
    extractor = YouTubeExtractor(fetcher, api_key="key-123", transcript_api=transcript_api)
    with respx.mock() as mock:
        mock.get(VIDEOS_API_URL).mock(return_value=httpx.Response(200, json=VIDEO_RESPONSE))
        metadata = await extractor.extract(f"https://youtu.be/{VIDEO_ID}", VIDEO_ID)

    transcript_api.list.assert_called_once_with(VIDEO_ID)
    assert metadata.full_text == "Never gonna give you up"
    assert metadata.full_text_type == FullTextType.TRANSCRIPT
    assert [(s.text, s.start, s.duration) for s in metadata.transcript_segments] == [
        ("Never gonna", 0.0, 2.0),
        ("give you up", 2.0, 1.8),
    ]


@pytest.mark.asyncio
async def test_transcript_failure_is_not_fatal(fetcher):
    api = MagicMock()
    api.list.side_effect = TranscriptsDisabled(VIDEO_ID)
    extractor = YouTubeExtractor(fetcher, api_key="key-123", transcript_api=api)
    with respx.mock() as mock:
        mock.get(VIDEOS_API_URL).mock(return_value=httpx.Response(200, json=VIDEO_RESPONSE))
        metadata = await extractor.extract(f"https://youtu.be/{VIDEO_ID}", VIDEO_ID)

    assert metadata.title == "Never Gonna Give You Up"
    assert metadata.full_text is None
    assert metadata.transcript_segments == []


@pytest.mark.asyncio
async def test_transcript_network_error_is_not_fatal(fetcher):
    api = MagicMock()
    api.list.side_effect = ConnectionError("blocked")
    extractor = YouTubeExtractor(fetcher, api_key="key-123", transcript_api=api)
    with respx.mock() as mock:
        mock.get(VIDEOS_API_URL).mock(return_value=httpx.Response(200, json=VIDEO_RESPONSE))
        metadata = await extractor.extract(f"https://youtu.be/{VIDEO_ID}", VIDEO_ID)

    assert metadata.title == "Never Gonna Give You Up"
    assert metadata.full_text is None


@pytest.mark.asyncio
async def test_video_not_found_raises(fetcher, transcript_api):
    extractor = YouTubeExtractor(fetcher, api_key="key-123", transcript_api=transcript_api)
    with respx.mock() as mock:
        mock.get(VIDEOS_API_URL).mock(return_value=httpx.Response(200, json={"items": []}))
        with pytest.raises(ExtractorError, match="YouTube video not found"):
            await extractor.extract(f"https://youtu.be/{VIDEO_ID}", VIDEO_ID)

    transcript_api.list.assert_not_called()


@pytest.mark.asyncio
async def test_api_error_raises(fetcher, transcript_api):
    extractor = YouTubeExtractor(fetcher, api_key="bad-key", transcript_api=transcript_api)
    with respx.mock() as mock:
        mock.get(VIDEOS_API_URL).mock(
            return_value=httpx.Response(403, json={"error": {"message": "forbidden"}})
        )
        with pytest.raises(ExtractorError, match="YouTube API error: 403") as exc_info:
            await extractor.extract(f"https://youtu.be/{VIDEO_ID}", VIDEO_ID)

    assert exc_info.value.provider == "youtube"


def test_not_configured_without_api_key(fetcher):
    assert YouTubeExtractor(fetcher, api_key="", transcript_api=MagicMock()).is_configured() is False
    assert YouTubeExtractor(fetcher, api_key="k", transcript_api=MagicMock()).is_configured() is True
