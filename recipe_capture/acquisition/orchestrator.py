"""
Content acquisition pipeline.

Given a post/recipe URL, tries progressively more expensive sources until a
recipe is found:

    CAPTION_FETCH -> CAPTION_CLEAN -> CAPTION_EXTRACT
        -> AUDIO_FETCH -> AUDIO_TRANSCRIBE -> CONTENT_CLASSIFY -> TRANSCRIPT_EXTRACT
        -> VIDEO_FRAME_EXTRACT

Each stage handler returns a StageResult tagged success / empty_result /
hard_failure; the driver loop looks the next stage up in TRANSITIONS.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from ..ai.classifier import ContentClassifier
from ..ai.extractor import RecipeExtractor
from ..core.errors import AcquisitionFailed, InvalidAcquisitionMode, UnsupportedPlatform
from ..core.text import basic_caption_cleanup, preview
from ..models import (
    AcquisitionMode,
    AcquisitionResult,
    AcquisitionSource,
    ExtractedRecipe,
    SourceKind,
    Stage,
    StageOutcome,
    StageReport,
)
from ..parsing.titles import recipe_title
from ..settings import Settings, settings as default_settings
from .collaborators import AudioBlob, Collaborators
from .platforms import Platform, detect_platform, has_media

logger = logging.getLogger("recipe_capture.acquisition")


class Terminal(str, Enum):
    SUCCESS = "success"
    NEEDS_FULL_ANALYSIS = "needs_full_analysis"
    FAILURE = "failure"


@dataclass
class StageResult:
    stage: Stage
    outcome: StageOutcome
    payload: Any = None
    detail: Optional[str] = None

    @classmethod
    def success(cls, stage: Stage, payload: Any = None, detail: Optional[str] = None) -> "StageResult":
        return cls(stage, StageOutcome.SUCCESS, payload, detail)

    @classmethod
    def empty(cls, stage: Stage, detail: Optional[str] = None) -> "StageResult":
        return cls(stage, StageOutcome.EMPTY_RESULT, None, detail)

    @classmethod
    def failure(cls, stage: Stage, detail: str) -> "StageResult":
        return cls(stage, StageOutcome.HARD_FAILURE, None, detail)

    def report(self) -> StageReport:
        return StageReport(stage=self.stage, outcome=self.outcome, detail=self.detail)


S, O = Stage, StageOutcome

TRANSITIONS: dict[tuple[Stage, StageOutcome], Union[Stage, Terminal]] = {
    # A failed caption fetch is read as an empty caption
    (S.CAPTION_FETCH, O.SUCCESS): S.CAPTION_CLEAN,
    (S.CAPTION_FETCH, O.EMPTY_RESULT): S.CAPTION_CLEAN,
    (S.CAPTION_FETCH, O.HARD_FAILURE): S.CAPTION_CLEAN,

    (S.CAPTION_CLEAN, O.SUCCESS): S.CAPTION_EXTRACT,
    (S.CAPTION_CLEAN, O.EMPTY_RESULT): S.CAPTION_EXTRACT,
    (S.CAPTION_CLEAN, O.HARD_FAILURE): S.CAPTION_EXTRACT,

    (S.CAPTION_EXTRACT, O.SUCCESS): Terminal.SUCCESS,
    (S.CAPTION_EXTRACT, O.EMPTY_RESULT): S.AUDIO_FETCH,
    (S.CAPTION_EXTRACT, O.HARD_FAILURE): S.AUDIO_FETCH,

    (S.AUDIO_FETCH, O.SUCCESS): S.AUDIO_TRANSCRIBE,
    (S.AUDIO_FETCH, O.EMPTY_RESULT): S.VIDEO_FRAME_EXTRACT,
    (S.AUDIO_FETCH, O.HARD_FAILURE): S.VIDEO_FRAME_EXTRACT,

    (S.AUDIO_TRANSCRIBE, O.SUCCESS): S.CONTENT_CLASSIFY,
    (S.AUDIO_TRANSCRIBE, O.EMPTY_RESULT): S.VIDEO_FRAME_EXTRACT,
    (S.AUDIO_TRANSCRIBE, O.HARD_FAILURE): S.VIDEO_FRAME_EXTRACT,

    # empty_result = music / non-cooking; hard_failure fails open
    (S.CONTENT_CLASSIFY, O.SUCCESS): S.TRANSCRIPT_EXTRACT,
    (S.CONTENT_CLASSIFY, O.EMPTY_RESULT): S.VIDEO_FRAME_EXTRACT,
    (S.CONTENT_CLASSIFY, O.HARD_FAILURE): S.TRANSCRIPT_EXTRACT,

    (S.TRANSCRIPT_EXTRACT, O.SUCCESS): Terminal.SUCCESS,
    (S.TRANSCRIPT_EXTRACT, O.EMPTY_RESULT): S.VIDEO_FRAME_EXTRACT,
    (S.TRANSCRIPT_EXTRACT, O.HARD_FAILURE): S.VIDEO_FRAME_EXTRACT,

    (S.VIDEO_FRAME_EXTRACT, O.SUCCESS): Terminal.SUCCESS,
    (S.VIDEO_FRAME_EXTRACT, O.EMPTY_RESULT): Terminal.FAILURE,
    (S.VIDEO_FRAME_EXTRACT, O.HARD_FAILURE): Terminal.FAILURE,
}

SUCCESS_SOURCES = {
    S.CAPTION_EXTRACT: AcquisitionSource.CAPTIONS,
    S.TRANSCRIPT_EXTRACT: AcquisitionSource.AUDIO_TRANSCRIPT,
    S.VIDEO_FRAME_EXTRACT: AcquisitionSource.VIDEO_ANALYSIS_FALLBACK,
}

MEDIA_STAGES = [
    S.AUDIO_FETCH,
    S.AUDIO_TRANSCRIBE,
    S.CONTENT_CLASSIFY,
    S.TRANSCRIPT_EXTRACT,
    S.VIDEO_FRAME_EXTRACT,
]

FAST_MODE_MESSAGE = "No recipe found in captions. Enable full analysis for audio/video processing."


@dataclass
class PipelineContext:
    url: str
    platform: Platform
    mode: AcquisitionMode
    caption: str = ""
    cleaned_caption: Optional[str] = None
    audio: Optional[AudioBlob] = None
    transcript: str = ""
    music_detected: bool = False
    recipe: Optional[ExtractedRecipe] = None
    reports: list[StageReport] = field(default_factory=list)


def next_step(stage: Stage, outcome: StageOutcome, mode: AcquisitionMode, platform: Platform) -> Union[Stage, Terminal]:
    nxt = TRANSITIONS[(stage, outcome)]
    if stage == S.CAPTION_EXTRACT and nxt == S.AUDIO_FETCH:
        # a full pass cannot help a platform without media
        if not has_media(platform):
            return Terminal.FAILURE
        if mode == AcquisitionMode.FAST:
            return Terminal.NEEDS_FULL_ANALYSIS
    return nxt


class ContentAcquisitionOrchestrator:
    def __init__(
        self,
        collaborators: Collaborators,
        extractor: RecipeExtractor,
        classifier: ContentClassifier,
        settings: Optional[Settings] = None,
    ):
        self.collaborators = collaborators
        self.extractor = extractor
        self.classifier = classifier
        self.settings = settings or default_settings

        self._handlers: dict[Stage, Callable[[PipelineContext], Awaitable[StageResult]]] = {
            S.CAPTION_FETCH: self._caption_fetch,
            S.CAPTION_CLEAN: self._caption_clean,
            S.CAPTION_EXTRACT: self._caption_extract,
            S.AUDIO_FETCH: self._audio_fetch,
            S.AUDIO_TRANSCRIBE: self._audio_transcribe,
            S.CONTENT_CLASSIFY: self._content_classify,
            S.TRANSCRIPT_EXTRACT: self._transcript_extract,
            S.VIDEO_FRAME_EXTRACT: self._video_frame_extract,
        }

    async def acquire_and_extract(
        self, url: str, mode: Union[AcquisitionMode, str] = AcquisitionMode.FAST
    ) -> AcquisitionResult:
        """
        Run the pipeline for url.

        Returns an AcquisitionResult on success, or in fast mode when the
        captions hold no recipe (needs_full_analysis=True).
        Raises InvalidAcquisitionMode for an unknown mode, UnsupportedPlatform
        before any fetch for unusable URLs and AcquisitionFailed once every
        stage is exhausted.
        """
        try:
            mode = AcquisitionMode(mode)
        except ValueError:
            raise InvalidAcquisitionMode(mode) from None
        platform = detect_platform(url)
        if self.collaborators.caption_fetcher_for(platform) is None:
            raise UnsupportedPlatform(url, f"No caption source configured for {platform.value}")

        ctx = PipelineContext(url=url.strip(), platform=platform, mode=mode)
        logger.info(f"Acquiring recipe from {platform.value} url={ctx.url} mode={mode.value}")

        stage: Union[Stage, Terminal] = S.CAPTION_FETCH
        last: Optional[StageResult] = None
        while isinstance(stage, Stage):
            last = await self._run_stage(stage, ctx)
            ctx.reports.append(last.report())
            stage = next_step(last.stage, last.outcome, mode, platform)
            logger.info(
                f"Stage {last.stage.value} -> {last.outcome.value}"
                + (f" ({last.detail})" if last.detail else "")
                + f"; next: {stage.value}"
            )

        if stage == Terminal.SUCCESS:
            recipe: ExtractedRecipe = last.payload
            source = SUCCESS_SOURCES[last.stage]
            title = recipe_title(ctx.caption, platform.value, recipe.ingredients, recipe.instructions)
            logger.info(f"Recipe found via {source.value}: {len(recipe.ingredients)} ingredients")
            return AcquisitionResult(
                platform=platform.value,
                source=source,
                title=title,
                ingredients=list(recipe.ingredients),
                instructions=list(recipe.instructions),
                stages=ctx.reports,
            )

        if stage == Terminal.NEEDS_FULL_ANALYSIS:
            return AcquisitionResult(
                platform=platform.value,
                source=AcquisitionSource.CAPTIONS_ONLY,
                needs_full_analysis=True,
                message=FAST_MODE_MESSAGE,
                stages=ctx.reports,
            )

        if not has_media(platform):
            ctx.reports.extend(
                StageReport(stage=s, outcome=O.SKIPPED, detail="platform has no media") for s in MEDIA_STAGES
            )
        message = self._failure_message(ctx)
        logger.warning(f"Acquisition failed for {ctx.url}: {message}")
        raise AcquisitionFailed(message, stages=ctx.reports, platform=platform.value)

    async def _run_stage(self, stage: Stage, ctx: PipelineContext) -> StageResult:
        try:
            return await self._handlers[stage](ctx)
        except asyncio.TimeoutError:
            return StageResult.failure(stage, "timed out")
        except Exception as e:
            logger.warning(f"Stage {stage.value} failed: {e}")
            return StageResult.failure(stage, f"{e.__class__.__name__}: {e}")

    @staticmethod
    async def _bounded(awaitable: Awaitable, timeout: float):
        return await asyncio.wait_for(awaitable, timeout=timeout)

    # --- Stage handlers ---

    async def _caption_fetch(self, ctx: PipelineContext) -> StageResult:
        fetcher = self.collaborators.caption_fetcher_for(ctx.platform)
        ctx.caption = await self._bounded(fetcher.fetch_caption(ctx.url), self.settings.caption_timeout_seconds) or ""
        if not ctx.caption.strip():
            return StageResult.empty(S.CAPTION_FETCH, "no caption text")
        return StageResult.success(S.CAPTION_FETCH, ctx.caption, f"{len(ctx.caption)} chars")

    async def _caption_clean(self, ctx: PipelineContext) -> StageResult:
        if not ctx.caption.strip():
            ctx.cleaned_caption = ""
            return StageResult.empty(S.CAPTION_CLEAN)
        ctx.cleaned_caption = await self._bounded(
            self.extractor.clean_caption(ctx.caption), self.settings.clean_timeout_seconds
        )
        return StageResult.success(S.CAPTION_CLEAN, ctx.cleaned_caption)

    async def _caption_extract(self, ctx: PipelineContext) -> StageResult:
        text = ctx.cleaned_caption if ctx.cleaned_caption is not None else basic_caption_cleanup(ctx.caption)
        if not text.strip():
            return StageResult.empty(S.CAPTION_EXTRACT, "no caption text")
        recipe = await self._bounded(
            self.extractor.extract(text, SourceKind.CAPTION), self.settings.extract_timeout_seconds
        )
        if recipe.is_empty:
            return StageResult.empty(S.CAPTION_EXTRACT, "no recipe in captions")
        return StageResult.success(S.CAPTION_EXTRACT, recipe)

    async def _audio_fetch(self, ctx: PipelineContext) -> StageResult:
        fetcher = self.collaborators.audio_fetcher
        if fetcher is None:
            return StageResult.failure(S.AUDIO_FETCH, "no audio fetcher configured")
        ctx.audio = await self._bounded(fetcher.fetch_audio(ctx.url), self.settings.audio_timeout_seconds)
        if ctx.audio is None:
            return StageResult.empty(S.AUDIO_FETCH, "no audio")
        return StageResult.success(S.AUDIO_FETCH, ctx.audio, f"{len(ctx.audio.data)} bytes")

    async def _audio_transcribe(self, ctx: PipelineContext) -> StageResult:
        transcriber = self.collaborators.transcriber
        if transcriber is None:
            return StageResult.failure(S.AUDIO_TRANSCRIBE, "no transcriber configured")
        ctx.transcript = await self._bounded(
            transcriber.transcribe(ctx.audio), self.settings.transcribe_timeout_seconds
        ) or ""
        if not ctx.transcript.strip():
            return StageResult.empty(S.AUDIO_TRANSCRIBE, "empty transcript")
        logger.debug(f"Transcript preview: {preview(ctx.transcript)!r}")
        return StageResult.success(S.AUDIO_TRANSCRIBE, ctx.transcript, f"{len(ctx.transcript)} chars")

    async def _content_classify(self, ctx: PipelineContext) -> StageResult:
        non_cooking = await self._bounded(
            self.classifier.is_non_cooking(ctx.transcript), self.settings.classify_timeout_seconds
        )
        if non_cooking:
            ctx.music_detected = True
            ctx.transcript = ""
            return StageResult.empty(S.CONTENT_CLASSIFY, "music or non-cooking content")
        return StageResult.success(S.CONTENT_CLASSIFY)

    async def _transcript_extract(self, ctx: PipelineContext) -> StageResult:
        recipe = await self._bounded(
            self.extractor.extract(ctx.transcript, SourceKind.TRANSCRIPT), self.settings.extract_timeout_seconds
        )
        if recipe.is_empty:
            return StageResult.empty(S.TRANSCRIPT_EXTRACT, "no recipe in transcript")
        return StageResult.success(S.TRANSCRIPT_EXTRACT, recipe)

    async def _video_frame_extract(self, ctx: PipelineContext) -> StageResult:
        analyzer = self.collaborators.frame_analyzer
        if analyzer is None:
            return StageResult.failure(S.VIDEO_FRAME_EXTRACT, "no frame analyzer configured")
        analysis = await self._bounded(
            analyzer.extract_text_from_video_frames(ctx.url), self.settings.video_timeout_seconds
        ) or ""
        if not analysis.strip():
            return StageResult.empty(S.VIDEO_FRAME_EXTRACT, "no frame observations")
        recipe = await self._bounded(
            self.extractor.extract(analysis, SourceKind.FRAME_ANALYSIS), self.settings.extract_timeout_seconds
        )
        if recipe.is_empty:
            return StageResult.empty(S.VIDEO_FRAME_EXTRACT, "no recipe in video")
        return StageResult.success(S.VIDEO_FRAME_EXTRACT, recipe)

    # --- Messages ---

    @staticmethod
    def _failure_message(ctx: PipelineContext) -> str:
        if not has_media(ctx.platform):
            base = "No recipe found on the page."
        elif ctx.music_detected:
            base = "Audio contained music/non-cooking content. Video analysis found no recipe."
        else:
            base = "No recipe found in captions, audio transcription, or video analysis."

        errors = [
            f"{r.stage.value}: {r.detail}"
            for r in ctx.reports
            if r.outcome == O.HARD_FAILURE and r.detail
        ]
        if errors:
            base += " Errors: " + "; ".join(errors)
        return base
