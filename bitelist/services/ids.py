# bitelist/services/ids.py
import re
from typing import Optional

from bitelist.services.types import Platform, VideoReference

_ID = r"([A-Za-z0-9_-]+)"

# Evaluated in order; the first match wins.
URL_PATTERNS: tuple[tuple[Platform, re.Pattern[str]], ...] = (
    (Platform.YOUTUBE, re.compile(r"youtube\.com/watch\?(?:[^#\s]*&)?v=" + _ID)),
    (Platform.YOUTUBE, re.compile(r"youtu\.be/" + _ID)),
    (Platform.YOUTUBE, re.compile(r"youtube\.com/embed/" + _ID)),
    (Platform.YOUTUBE, re.compile(r"youtube\.com/v/" + _ID)),
    (Platform.YOUTUBE, re.compile(r"youtube\.com/shorts/" + _ID)),
    (Platform.YOUTUBE, re.compile(r"youtube\.com/live/" + _ID)),
    (Platform.INSTAGRAM, re.compile(r"instagram\.com/reels?/" + _ID)),
    (Platform.INSTAGRAM, re.compile(r"instagram\.com/p/" + _ID)),
)


def resolve(url: Optional[str]) -> VideoReference:
    """Return the platform and video id for a URL; unrecognised URLs map to Platform.UNKNOWN."""
    original = url or ""
    for platform, pattern in URL_PATTERNS:
        m = pattern.search(original)
        if m:
            return VideoReference(platform=platform, video_id=m.group(1), original_url=original)
    return VideoReference(platform=Platform.UNKNOWN, video_id="", original_url=original)
