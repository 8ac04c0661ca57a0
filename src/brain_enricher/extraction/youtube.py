"""YouTube extraction: Data API v3 metadata plus transcript.

Metadata comes from ``videos?part=snippet,contentDetails,statistics,...``
and requires ``YOUTUBE_API_KEY``. Transcripts come from
youtube-transcript-api, which reads the watch page for the Innertube key and
asks the player API (ANDROID client) for caption tracks. A missing
transcript never fails the item.
"""

import asyncio
import logging
from collections.abc import Iterable

from youtube_transcript_api import YouTubeTranscriptApi
from youtube_transcript_api._errors import CouldNotRetrieveTranscript

from brain_enricher.extraction.base import ContentExtractor
from brain_enricher.fetch import SafeFetcher
from brain_enricher.models.content import ExtractedMetadata, FullTextType, TranscriptSegment
from brain_enricher.models.provider import ProviderType

logger = logging.getLogger(__name__)

VIDEOS_API_URL = "https://www.googleapis.com/youtube/v3/videos"
VIDEO_PARTS = "snippet,contentDetails,statistics,topicDetails,status"


def select_transcript(transcripts: Iterable, language: str | None = None):
    """Pick the best caption track.

    Manually created tracks beat auto-generated ones; within each group a
    track in ``language`` (exact code, then base code like ``en`` for
    ``en-GB``) wins. Falls back to the first manual, then first generated track.
    """
    tracks = list(transcripts)
    manual = [t for t in tracks if not t.is_generated]
    generated = [t for t in tracks if t.is_generated]

    if language:
        base = language.split("-")[0].lower()
        for group in (manual, generated):
            for track in group:
                if track.language_code.lower() == language.lower():
                    return track
            for track in group:
                if track.language_code.split("-")[0].lower() == base:
                    return track

    if manual:
        return manual[0]
    if generated:
        return generated[0]
    return None


def _thumbnail(thumbnails: dict) -> str | None:
    for size in ("high", "medium", "default"):
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return None


class YouTubeExtractor(ContentExtractor):
    provider = ProviderType.YOUTUBE
    display_name = "YouTube"

    def __init__(
        self,
        fetcher: SafeFetcher,
        api_key: str = "",
        transcript_language: str = "en",
        transcript_api: YouTubeTranscriptApi | None = None,
    ) -> None:
        super().__init__(fetcher)
        self.api_key = api_key
        self.transcript_language = transcript_language
        self.transcript_api = transcript_api or YouTubeTranscriptApi()

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def extract(self, url: str, content_id: str) -> ExtractedMetadata:
        response, data = await self.fetcher.fetch_json(
            VIDEOS_API_URL,
            params={"id": content_id, "part": VIDEO_PARTS, "key": self.api_key},
            skip_ssrf_check=True,
        )
        if not response.is_success:
            raise self.error(f"YouTube API error: {response.status_code} {response.reason_phrase}")

        items = (data or {}).get("items") or []
        if not items:
            raise self.error(f"YouTube video not found: {content_id}")
        video = items[0]

        snippet = video.get("snippet") or {}
        details = video.get("contentDetails") or {}
        statistics = video.get("statistics") or {}
        topics = video.get("topicDetails") or {}
        status = video.get("status") or {}

        language = snippet.get("defaultAudioLanguage") or snippet.get("defaultLanguage")
        channel_id = snippet.get("channelId")

        segments = await self.fetch_transcript(content_id, language or self.transcript_language)

        return self.metadata(
            title=snippet.get("title"),
            description=snippet.get("description"),
            author=snippet.get("channelTitle"),
            author_url=f"https://www.youtube.com/channel/{channel_id}" if channel_id else None,
            thumbnail_url=_thumbnail(snippet.get("thumbnails") or {}),
            published_date=snippet.get("publishedAt"),
            tags=snippet.get("tags") or [],
            language=language,
            full_text=" ".join(s.text for s in segments) if segments else None,
            full_text_type=FullTextType.TRANSCRIPT if segments else None,
            transcript_segments=segments,
            provider_data={
                "channel_id": channel_id,
                "category_id": snippet.get("categoryId"),
                "duration": details.get("duration"),
                "definition": details.get("definition"),
                "caption_available": details.get("caption") == "true",
                "view_count": statistics.get("viewCount"),
                "like_count": statistics.get("likeCount"),
                "comment_count": statistics.get("commentCount"),
                "topic_categories": topics.get("topicCategories") or [],
                "live_broadcast_content": snippet.get("liveBroadcastContent"),
                "license": status.get("license"),
                "embeddable": status.get("embeddable"),
            },
        )

    async def fetch_transcript(self, video_id: str, language: str | None) -> list[TranscriptSegment]:
        """Fetch caption segments. Any failure is logged and yields an empty list."""
        try:
            # Sync library calls, run in thread pool
            return await asyncio.to_thread(self._fetch_transcript_sync, video_id, language)
        except CouldNotRetrieveTranscript as exc:
            logger.info("YouTube transcript unavailable for %s: %s", video_id, exc.__class__.__name__)
        except Exception as exc:
            # Catch-all for IP blocks, request errors, etc.
            logger.warning("YouTube transcript fetch failed for %s: %s", video_id, exc)
        return []

    def _fetch_transcript_sync(self, video_id: str, language: str | None) -> list[TranscriptSegment]:
        track = select_transcript(self.transcript_api.list(video_id), language)
        if track is None:
            return []
        return [
            TranscriptSegment(text=snippet.text, start=snippet.start, duration=snippet.duration or 0.0)
            for snippet in track.fetch()
            if snippet.text and snippet.text.strip()
        ]
