from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Platform(str, Enum):
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    UNKNOWN = "unknown"


class TextSource(str, Enum):
    """Provenance of the text an ingredient list was extracted from."""
    CAPTION = "caption"
    PINNED_COMMENT = "pinned_comment"
    PLATFORM_DESCRIPTION = "platform_description"
    TRANSCRIPT = "transcript"
    USER_PROVIDED = "user_provided"
    GENERIC_PROMPT = "generic_prompt"


@dataclass(frozen=True)
class VideoReference:
    platform: Platform
    video_id: str
    original_url: str

    def __post_init__(self) -> None:
        if bool(self.video_id) == (self.platform is Platform.UNKNOWN):
            raise ValueError(
                f"video_id must be set only for known platforms: {self.platform.value!r}, {self.video_id!r}"
            )

    @property
    def is_known(self) -> bool:
        return self.platform is not Platform.UNKNOWN


@dataclass(frozen=True)
class ExtractionRequest:
    video_url: str
    user_description: Optional[str] = None


@dataclass(frozen=True)
class SourceText:
    source: TextSource
    text: str


@dataclass(frozen=True)
class CaptionTrack:
    id: str
    language: str
    name: str


@dataclass
class ExtractionResult:
    ingredients: list[str] = field(default_factory=list)
    source: TextSource = TextSource.GENERIC_PROMPT
    used_model: bool = False
