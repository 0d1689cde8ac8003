from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, TypeVar, Union

from bitelist.app.config import Settings, get_settings
from bitelist.services.cancellation import CancellationToken
from bitelist.services.errors import (
    InvalidURLError,
    NoContentFoundError,
    QuotaExceededError,
    ServiceError,
    UpstreamUnavailableError,
)
from bitelist.services.ids import resolve
from bitelist.services.llm_client import ChatCompletionClient
from bitelist.services.prompts import GENERIC_VIDEO_CONTEXT, build_placeholder_description
from bitelist.services.text_parser import (
    extract_ingredients as parse_structured_ingredients,
    find_ingredient_section,
)
from bitelist.services.types import (
    ExtractionRequest,
    ExtractionResult,
    Platform,
    SourceText,
    TextSource,
    VideoReference,
)
from bitelist.services.youtube_client import YouTubeMetadataClient

logger = logging.getLogger(__name__)

DEFAULT_MIN_DESCRIPTION_CHARS = 50
DEFAULT_MIN_TRANSCRIPT_CHARS = 32
DEFAULT_CALL_TO_ACTION_PHRASES = ("subscribe", "like and comment")

# Upstream failures a stage recovers from by moving to its fallback stage.
RECOVERABLE_ERRORS = (
    InvalidURLError,
    NoContentFoundError,
    QuotaExceededError,
    UpstreamUnavailableError,
)

T = TypeVar("T")


class Stage(str, Enum):
    USER_TEXT = "user_text"
    PLATFORM_TEXT = "platform_text"
    TRANSCRIPT = "transcript"
    GENERIC_PROMPT = "generic_prompt"
    FINAL = "final"


StageOutcome = Union[ExtractionResult, Stage]


@dataclass(frozen=True)
class ExtractionThresholds:
    min_description_chars: int = DEFAULT_MIN_DESCRIPTION_CHARS
    min_transcript_chars: int = DEFAULT_MIN_TRANSCRIPT_CHARS
    call_to_action_phrases: tuple[str, ...] = DEFAULT_CALL_TO_ACTION_PHRASES


@dataclass
class ExtractionContext:
    request: ExtractionRequest
    reference: VideoReference
    token: CancellationToken
    errors: list[ServiceError] = field(default_factory=list)


def is_meaningful_description(text: Optional[str], thresholds: ExtractionThresholds) -> bool:
    if not text:
        return False
    stripped = text.strip()
    if len(stripped) <= thresholds.min_description_chars:
        return False
    lowered = stripped.lower()
    return not any(phrase.lower() in lowered for phrase in thresholds.call_to_action_phrases)


def _has_sufficient_text(text: Optional[str], min_chars: int) -> bool:
    if not text:
        return False
    return len(text.strip()) > min_chars


class IngredientExtractor:
    """
    Fallback chain that turns a video URL into an ingredient list.

    Stages run strictly in sequence; each returns either a final
    ExtractionResult or the next Stage to run. Upstream failures inside a
    stage become transitions, so only the FINAL stage can raise
    UpstreamUnavailableError. Cancellation is checked before every stage and
    around every network call.
    """

    def __init__(
        self,
        model_client: Optional[ChatCompletionClient],
        metadata_client: Optional[YouTubeMetadataClient] = None,
        thresholds: ExtractionThresholds = ExtractionThresholds(),
    ) -> None:
        self.model_client = model_client
        self.metadata_client = metadata_client
        self.thresholds = thresholds
        self._handlers: dict[Stage, Callable[[ExtractionContext], StageOutcome]] = {
            Stage.USER_TEXT: self._user_text_stage,
            Stage.PLATFORM_TEXT: self._platform_text_stage,
            Stage.TRANSCRIPT: self._transcript_stage,
            Stage.GENERIC_PROMPT: self._generic_prompt_stage,
            Stage.FINAL: self._final_stage,
        }

    def extract(
        self,
        url: str,
        user_description: Optional[str] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ExtractionResult:
        token = cancel_token or CancellationToken()
        request = ExtractionRequest(video_url=url, user_description=user_description)
        context = ExtractionContext(request=request, reference=resolve(url), token=token)

        logger.info(
            "Extracting ingredients: platform=%s, video_id=%s, has_user_text=%s",
            context.reference.platform.value,
            context.reference.video_id or "-",
            bool(user_description and user_description.strip()),
        )
        if not context.reference.is_known:
            logger.info("Unrecognised video URL, platform lookups will be skipped: %s", url)

        stage = Stage.USER_TEXT
        visited: set[Stage] = set()

        while True:
            if stage in visited:
                raise RuntimeError(f"Extraction stage visited twice: {stage.value}")
            visited.add(stage)

            token.raise_if_cancelled(stage.value)
            logger.debug("Running stage %s", stage.value)
            outcome = self._handlers[stage](context)

            if isinstance(outcome, ExtractionResult):
                logger.info(
                    "Extraction finished: stage=%s, source=%s, used_model=%s, ingredients=%d, recovered_errors=%d",
                    stage.value,
                    outcome.source.value,
                    outcome.used_model,
                    len(outcome.ingredients),
                    len(context.errors),
                )
                return outcome

            stage = outcome

    def _user_text_stage(self, context: ExtractionContext) -> StageOutcome:
        user_text = (context.request.user_description or "").strip()
        if not user_text:
            return Stage.PLATFORM_TEXT

        try:
            return self._analyze(context, Stage.USER_TEXT, SourceText(TextSource.USER_PROVIDED, user_text))
        except RECOVERABLE_ERRORS as error:
            return self._recover(context, Stage.USER_TEXT, error, Stage.FINAL)

    def _platform_text_stage(self, context: ExtractionContext) -> StageOutcome:
        if self.metadata_client is None:
            logger.info("Metadata client not configured, skipping platform text")
            return Stage.FINAL
        if context.reference.platform is not Platform.YOUTUBE:
            logger.info("No metadata API for platform %s", context.reference.platform.value)
            return Stage.FINAL

        try:
            description = self._call(
                context,
                Stage.PLATFORM_TEXT,
                self.metadata_client.fetch_description,
                context.reference.video_id,
            )
        except RECOVERABLE_ERRORS as error:
            return self._recover(context, Stage.PLATFORM_TEXT, error, Stage.FINAL)

        if not is_meaningful_description(description, self.thresholds):
            logger.info("Description not meaningful (%d chars), trying transcript", len(description.strip()))
            return Stage.TRANSCRIPT

        source_text = SourceText(TextSource.PLATFORM_DESCRIPTION, description)
        parsed = parse_structured_ingredients(source_text.text)
        if parsed:
            return ExtractionResult(ingredients=parsed, source=source_text.source, used_model=False)

        if find_ingredient_section(source_text.text):
            logger.info("Ingredient heading found but no items parsed, asking the model")
        else:
            logger.info("No ingredient section in description, asking the model")
        try:
            return self._analyze(context, Stage.PLATFORM_TEXT, source_text)
        except RECOVERABLE_ERRORS as error:
            return self._recover(context, Stage.PLATFORM_TEXT, error, Stage.FINAL)

    def _transcript_stage(self, context: ExtractionContext) -> StageOutcome:
        if self.metadata_client is None:
            return Stage.FINAL

        # Listing and download are bounded separately by the time left.
        try:
            tracks = self._call(
                context,
                Stage.TRANSCRIPT,
                self.metadata_client.list_caption_tracks,
                context.reference.video_id,
            )
            if not tracks:
                raise NoContentFoundError(f"No caption tracks available for video {context.reference.video_id}")
            transcript = self._call(
                context,
                Stage.TRANSCRIPT,
                self.metadata_client.download_caption,
                tracks[0].id,
            )
        except NoContentFoundError as error:
            return self._recover(context, Stage.TRANSCRIPT, error, Stage.GENERIC_PROMPT)
        except RECOVERABLE_ERRORS as error:
            return self._recover(context, Stage.TRANSCRIPT, error, Stage.FINAL)

        if not _has_sufficient_text(transcript, self.thresholds.min_transcript_chars):
            logger.info("Transcript too short (%d chars)", len(transcript.strip()))
            return Stage.GENERIC_PROMPT

        try:
            return self._analyze(context, Stage.TRANSCRIPT, SourceText(TextSource.TRANSCRIPT, transcript))
        except RECOVERABLE_ERRORS as error:
            return self._recover(context, Stage.TRANSCRIPT, error, Stage.FINAL)

    def _generic_prompt_stage(self, context: ExtractionContext) -> StageOutcome:
        try:
            return self._analyze(
                context,
                Stage.GENERIC_PROMPT,
                SourceText(TextSource.GENERIC_PROMPT, GENERIC_VIDEO_CONTEXT),
            )
        except RECOVERABLE_ERRORS as error:
            return self._recover(context, Stage.GENERIC_PROMPT, error, Stage.FINAL)

    def _final_stage(self, context: ExtractionContext) -> StageOutcome:
        placeholder = build_placeholder_description(context.reference.platform.value)

        try:
            return self._analyze(context, Stage.FINAL, SourceText(TextSource.GENERIC_PROMPT, placeholder))
        except RECOVERABLE_ERRORS as error:
            logger.error("Final extraction stage failed: %s", error)
            raise UpstreamUnavailableError(
                f"Ingredient extraction unavailable: {error}",
                status_code=getattr(error, "status_code", None),
            ) from error

    def _analyze(self, context: ExtractionContext, stage: Stage, source_text: SourceText) -> ExtractionResult:
        if self.model_client is None:
            raise UpstreamUnavailableError("Language model client is not configured")
        ingredients = self._call(context, stage, self.model_client.analyze_for_ingredients, source_text.text)
        return ExtractionResult(ingredients=ingredients, source=source_text.source, used_model=True)

    def _call(self, context: ExtractionContext, stage: Stage, operation: Callable[..., T], argument: str) -> T:
        context.token.raise_if_cancelled(stage.value)
        value = operation(argument, timeout=context.token.remaining())
        context.token.raise_if_cancelled(stage.value)
        return value

    def _recover(
        self,
        context: ExtractionContext,
        stage: Stage,
        error: ServiceError,
        next_stage: Stage,
    ) -> Stage:
        # A timeout caused by the caller's deadline is a cancellation, not a fallback.
        context.token.raise_if_cancelled(next_stage.value)
        context.errors.append(error)
        logger.warning(
            "Stage %s failed (%s: %s), falling back to %s",
            stage.value,
            type(error).__name__,
            error,
            next_stage.value,
        )
        return next_stage


def build_extractor(settings: Settings) -> IngredientExtractor:
    model_client = None
    if settings.is_openai_configured:
        model_client = ChatCompletionClient(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            base_url=settings.OPENAI_BASE_URL,
            max_tokens=settings.OPENAI_MAX_TOKENS,
            temperature=settings.OPENAI_TEMPERATURE,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
        )
    else:
        logger.warning("OPENAI_API_KEY not set; model-based extraction is disabled")

    metadata_client = None
    if settings.is_youtube_configured:
        metadata_client = YouTubeMetadataClient(
            api_key=settings.YOUTUBE_API_KEY,
            base_url=settings.YOUTUBE_API_BASE_URL,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
        )
    else:
        logger.info("YOUTUBE_API_KEY not set; platform metadata is disabled")

    thresholds = ExtractionThresholds(
        min_description_chars=settings.MIN_DESCRIPTION_CHARS,
        min_transcript_chars=settings.MIN_TRANSCRIPT_CHARS,
        call_to_action_phrases=tuple(settings.CALL_TO_ACTION_PHRASES),
    )
    return IngredientExtractor(model_client, metadata_client, thresholds)


def extract_ingredients(
    url: str,
    user_description: Optional[str] = None,
    *,
    cancel_token: Optional[CancellationToken] = None,
    settings: Optional[Settings] = None,
) -> ExtractionResult:
    extractor = build_extractor(settings or get_settings())
    return extractor.extract(url, user_description, cancel_token=cancel_token)
