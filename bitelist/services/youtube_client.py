from __future__ import annotations

import logging
import re
from typing import Any, Optional

import httpx

from .errors import (
    InvalidURLError,
    NetworkTimeoutError,
    NoContentFoundError,
    QuotaExceededError,
    UpstreamUnavailableError,
)
from .types import CaptionTrack

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.googleapis.com/youtube/v3"
DEFAULT_TIMEOUT_SECONDS = 15.0
THUMBNAIL_PRIORITY = ("maxres", "high", "medium", "standard", "default")

TRANSCRIPT_SEGMENT_PATTERN = re.compile(r"<text\b[^>]*>(.*?)</text>", re.DOTALL)
MARKUP_TAG_PATTERN = re.compile(r"<[^>]+>")
WHITESPACE_PATTERN = re.compile(r"\s+")
XML_ENTITIES = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&amp;", "&"),
)


def _unescape_entities(text: str) -> str:
    # &amp; goes last so "&amp;lt;" decodes to "&lt;" and not "<".
    for entity, char in XML_ENTITIES:
        text = text.replace(entity, char)
    return text


def transcript_xml_to_text(xml: str) -> str:
    segments: list[str] = []
    for raw_segment in TRANSCRIPT_SEGMENT_PATTERN.findall(xml):
        stripped = MARKUP_TAG_PATTERN.sub("", raw_segment)
        cleaned = WHITESPACE_PATTERN.sub(" ", _unescape_entities(stripped)).strip()
        if cleaned:
            segments.append(cleaned)
    return " ".join(segments)


def _first_snippet(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise UpstreamUnavailableError("YouTube response is not a JSON object")
    items = payload.get("items")
    if not isinstance(items, list) or not items:
        raise UpstreamUnavailableError("YouTube response has no items")
    first = items[0]
    snippet = first.get("snippet") if isinstance(first, dict) else None
    if not isinstance(snippet, dict):
        raise UpstreamUnavailableError("YouTube item has no snippet")
    return snippet


def _parse_description(payload: Any) -> str:
    description = _first_snippet(payload).get("description")
    if not isinstance(description, str):
        raise UpstreamUnavailableError("YouTube snippet has no description")
    return description


def _parse_thumbnail(payload: Any) -> str:
    thumbnails = _first_snippet(payload).get("thumbnails")
    if not isinstance(thumbnails, dict):
        raise UpstreamUnavailableError("YouTube snippet has no thumbnails")

    for key in THUMBNAIL_PRIORITY:
        entry = thumbnails.get(key)
        if isinstance(entry, dict) and isinstance(entry.get("url"), str) and entry["url"]:
            logger.debug("Selected thumbnail quality: %s", key)
            return entry["url"]

    raise NoContentFoundError("No thumbnail available for this video")


def _parse_caption_tracks(payload: Any) -> list[CaptionTrack]:
    if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
        raise UpstreamUnavailableError("Caption list response has no items")

    tracks: list[CaptionTrack] = []
    for item in payload["items"]:
        if not isinstance(item, dict):
            continue
        snippet = item.get("snippet") if isinstance(item.get("snippet"), dict) else {}
        track_id = snippet.get("id") or item.get("id")
        if not isinstance(track_id, str) or not track_id:
            continue
        tracks.append(
            CaptionTrack(
                id=track_id,
                language=str(snippet.get("language") or ""),
                name=str(snippet.get("name") or ""),
            )
        )
    return tracks


class YouTubeMetadataClient:
    """
    Read-only client for the YouTube Data API v3.

    Every operation issues plain GET requests and maps HTTP failures to
    service errors: 403 means the quota (or key) is exhausted, anything else
    that is not a 200 is an upstream failure. Nothing is retried here.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def fetch_description(self, video_id: str, *, timeout: Optional[float] = None) -> str:
        payload = self._get_json("/videos", {"part": "snippet", "id": self._require_id(video_id)}, timeout)
        return _parse_description(payload)

    def fetch_thumbnail(self, video_id: str, *, timeout: Optional[float] = None) -> str:
        payload = self._get_json("/videos", {"part": "snippet", "id": self._require_id(video_id)}, timeout)
        return _parse_thumbnail(payload)

    def list_caption_tracks(self, video_id: str, *, timeout: Optional[float] = None) -> list[CaptionTrack]:
        payload = self._get_json(
            "/captions",
            {"part": "snippet", "videoId": self._require_id(video_id)},
            timeout,
        )
        return _parse_caption_tracks(payload)

    def fetch_transcript(self, video_id: str, *, timeout: Optional[float] = None) -> str:
        tracks = self.list_caption_tracks(video_id, timeout=timeout)
        if not tracks:
            logger.info("No caption tracks for video %s", video_id)
            raise NoContentFoundError(f"No caption tracks available for video {video_id}")

        track = tracks[0]
        logger.info("Using caption track %s (%s - %s)", track.id, track.language, track.name)
        return self.download_caption(track.id, timeout=timeout)

    def download_caption(self, track_id: str, *, timeout: Optional[float] = None) -> str:
        if not track_id:
            raise NoContentFoundError("Missing caption track id")
        response = self._get(f"/captions/{track_id}", {}, timeout, accept="application/xml")
        return transcript_xml_to_text(response.text)

    @staticmethod
    def _require_id(video_id: str) -> str:
        if not video_id or not video_id.strip():
            raise InvalidURLError("Missing YouTube video id")
        return video_id

    def _get_json(self, path: str, params: dict[str, str], timeout: Optional[float]) -> Any:
        response = self._get(path, params, timeout, accept="application/json")
        try:
            return response.json()
        except ValueError as error:
            raise UpstreamUnavailableError(f"Invalid JSON from YouTube {path}: {error}") from error

    def _get(
        self,
        path: str,
        params: dict[str, str],
        timeout: Optional[float],
        accept: str,
    ) -> httpx.Response:
        effective_timeout = self.timeout if timeout is None else min(self.timeout, timeout)
        url = f"{self.base_url}{path}"
        logger.debug("GET %s params=%s", url, params)

        try:
            with httpx.Client(timeout=effective_timeout, transport=self._transport) as client:
                response = client.get(
                    url,
                    params={**params, "key": self.api_key},
                    headers={"Accept": accept},
                )
        except httpx.TimeoutException as error:
            raise NetworkTimeoutError(url, effective_timeout) from error
        except httpx.RequestError as error:
            raise UpstreamUnavailableError(f"Network error calling YouTube {path}: {error}") from error

        if response.status_code == 200:
            return response
        if response.status_code == 403:
            raise QuotaExceededError("YouTube API quota exceeded", status_code=403)
        raise UpstreamUnavailableError(
            f"YouTube API error with status code: {response.status_code}",
            status_code=response.status_code,
        )
