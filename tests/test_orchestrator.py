import asyncio

import pytest

from recipe_capture.acquisition.collaborators import Collaborators
from recipe_capture.acquisition.orchestrator import (
    FAST_MODE_MESSAGE,
    ContentAcquisitionOrchestrator,
    Terminal,
    next_step,
)
from recipe_capture.acquisition.platforms import Platform
from recipe_capture.ai.classifier import ContentClassifier
from recipe_capture.core.errors import (
    AcquisitionFailed,
    AIServiceError,
    InvalidAcquisitionMode,
    UnsupportedPlatform,
)
from recipe_capture.models import (
    AcquisitionMode,
    AcquisitionSource,
    ExtractedRecipe,
    SourceKind,
    Stage,
    StageOutcome,
)
from recipe_capture.settings import Settings


TIKTOK = "https://www.tiktok.com/@chef/video/123"
CAPTION_RECIPE = ExtractedRecipe(
    ingredients=["2 cups flour", "1 tsp salt"],
    instructions=["Mix everything together."],
)
TRANSCRIPT_RECIPE = ExtractedRecipe(
    ingredients=["1 lb pasta", "2 cups tomato sauce"],
    instructions=["Boil the pasta.", "Stir in the sauce."],
)
VIDEO_RECIPE = ExtractedRecipe(ingredients=["3 eggs"], instructions=["Scramble the eggs."])


def _outcomes(result_or_error):
    return {r.stage: r.outcome for r in result_or_error.stages}


@pytest.mark.asyncio
async def test_caption_success_skips_media(make_pipeline):
    p = make_pipeline(
        caption="Ingredients: 2 cups flour, 1 tsp salt",
        recipes={SourceKind.CAPTION: CAPTION_RECIPE},
    )

    result = await p.orchestrator.acquire_and_extract(TIKTOK, AcquisitionMode.FULL)

    assert result.source == AcquisitionSource.CAPTIONS
    assert result.platform == "tiktok"
    assert result.ingredients == CAPTION_RECIPE.ingredients
    assert result.instructions == CAPTION_RECIPE.instructions
    assert not result.needs_full_analysis
    p.audio_fetcher.fetch_audio.assert_not_awaited()
    p.frame_analyzer.extract_text_from_video_frames.assert_not_awaited()
    assert [r.stage for r in result.stages] == [
        Stage.CAPTION_FETCH, Stage.CAPTION_CLEAN, Stage.CAPTION_EXTRACT,
    ]


@pytest.mark.asyncio
async def test_caption_title_is_used_for_video_posts(make_pipeline):
    p = make_pipeline(
        caption="Crispy garlic chicken thighs! Recipe below\n2 cups flour, 1 tsp salt",
        recipes={SourceKind.CAPTION: CAPTION_RECIPE},
    )

    result = await p.orchestrator.acquire_and_extract(TIKTOK)

    assert result.title == "Crispy Garlic Chicken Thighs"


@pytest.mark.asyncio
async def test_audio_transcript_success(make_pipeline):
    p = make_pipeline(
        caption="",
        transcript="okay so first boil the pasta then add two cups of tomato sauce",
        non_cooking=False,
        recipes={SourceKind.TRANSCRIPT: TRANSCRIPT_RECIPE},
    )

    result = await p.orchestrator.acquire_and_extract(TIKTOK, AcquisitionMode.FULL)

    assert result.source == AcquisitionSource.AUDIO_TRANSCRIPT
    assert result.ingredients == TRANSCRIPT_RECIPE.ingredients
    assert result.title == "Simmered Pasta & Tomato"
    p.audio_fetcher.fetch_audio.assert_awaited_once()
    p.transcriber.transcribe.assert_awaited_once()
    p.classifier.is_non_cooking.assert_awaited_once()
    p.frame_analyzer.extract_text_from_video_frames.assert_not_awaited()
    p.extractor.extract.assert_awaited_once()
    assert p.extractor.extract.await_args.args[1] == SourceKind.TRANSCRIPT
    assert _outcomes(result)[Stage.CAPTION_EXTRACT] == StageOutcome.EMPTY_RESULT


@pytest.mark.asyncio
async def test_fast_mode_stops_after_captions(make_pipeline):
    p = make_pipeline(caption="")

    result = await p.orchestrator.acquire_and_extract(TIKTOK, AcquisitionMode.FAST)

    assert result.needs_full_analysis
    assert result.source == AcquisitionSource.CAPTIONS_ONLY
    assert result.message == FAST_MODE_MESSAGE
    assert result.ingredients == []
    assert not result.attempted(Stage.AUDIO_FETCH)
    p.audio_fetcher.fetch_audio.assert_not_awaited()
    p.transcriber.transcribe.assert_not_awaited()
    p.frame_analyzer.extract_text_from_video_frames.assert_not_awaited()


@pytest.mark.asyncio
async def test_fast_mode_is_the_default(make_pipeline):
    p = make_pipeline(caption="just vibes")

    result = await p.orchestrator.acquire_and_extract(TIKTOK)

    assert result.needs_full_analysis
    p.audio_fetcher.fetch_audio.assert_not_awaited()


@pytest.mark.asyncio
async def test_classifier_failure_fails_open(make_pipeline, fake_ai, no_wait_retry):
    p = make_pipeline(
        transcript="add the pasta to boiling water",
        recipes={SourceKind.TRANSCRIPT: TRANSCRIPT_RECIPE},
    )
    fake_ai.generate_text.side_effect = AIServiceError("classifier down")
    p.orchestrator.classifier = ContentClassifier(fake_ai, no_wait_retry)

    result = await p.orchestrator.acquire_and_extract(TIKTOK, AcquisitionMode.FULL)

    assert result.source == AcquisitionSource.AUDIO_TRANSCRIPT


@pytest.mark.asyncio
async def test_classifier_unexpected_answer_is_cooking(make_pipeline, fake_ai, no_wait_retry):
    p = make_pipeline(
        transcript="add the pasta to boiling water",
        recipes={SourceKind.TRANSCRIPT: TRANSCRIPT_RECIPE},
    )
    fake_ai.generate_text.return_value = "UNEXPECTED RESPONSE"
    p.orchestrator.classifier = ContentClassifier(fake_ai, no_wait_retry)

    result = await p.orchestrator.acquire_and_extract(TIKTOK, AcquisitionMode.FULL)

    assert result.source == AcquisitionSource.AUDIO_TRANSCRIPT


@pytest.mark.asyncio
async def test_classifier_crash_is_hard_failure_that_continues(make_pipeline):
    p = make_pipeline(
        transcript="add the pasta to boiling water",
        non_cooking=RuntimeError("unexpected"),
        recipes={SourceKind.TRANSCRIPT: TRANSCRIPT_RECIPE},
    )

    result = await p.orchestrator.acquire_and_extract(TIKTOK, AcquisitionMode.FULL)

    assert result.source == AcquisitionSource.AUDIO_TRANSCRIPT
    assert _outcomes(result)[Stage.CONTENT_CLASSIFY] == StageOutcome.HARD_FAILURE


@pytest.mark.asyncio
async def test_music_skips_transcript_and_uses_video(make_pipeline):
    p = make_pipeline(
        transcript="♪ baby baby baby oh ♪",
        non_cooking=True,
        frames="FRAME 1: OBSERVATIONS: cracking eggs into a pan",
        recipes={
            SourceKind.TRANSCRIPT: TRANSCRIPT_RECIPE,
            SourceKind.FRAME_ANALYSIS: VIDEO_RECIPE,
        },
    )

    result = await p.orchestrator.acquire_and_extract(TIKTOK, AcquisitionMode.FULL)

    assert result.source == AcquisitionSource.VIDEO_ANALYSIS_FALLBACK
    assert result.ingredients == ["3 eggs"]
    kinds = [call.args[1] for call in p.extractor.extract.await_args_list]
    assert SourceKind.TRANSCRIPT not in kinds
    assert _outcomes(result)[Stage.CONTENT_CLASSIFY] == StageOutcome.EMPTY_RESULT


@pytest.mark.asyncio
async def test_music_and_no_video_recipe_fails_with_music_message(make_pipeline):
    p = make_pipeline(transcript="♪ la la ♪", non_cooking=True, frames="")

    with pytest.raises(AcquisitionFailed) as exc:
        await p.orchestrator.acquire_and_extract(TIKTOK, AcquisitionMode.FULL)

    assert "music" in exc.value.message.lower()
    assert exc.value.platform == "tiktok"


@pytest.mark.asyncio
async def test_everything_empty_raises_acquisition_failed(make_pipeline):
    p = make_pipeline(caption="", transcript="", frames="")

    with pytest.raises(AcquisitionFailed) as exc:
        await p.orchestrator.acquire_and_extract(TIKTOK, AcquisitionMode.FULL)

    assert exc.value.message.startswith("No recipe found in captions, audio transcription, or video analysis.")
    assert [r.stage for r in exc.value.stages][-1] == Stage.VIDEO_FRAME_EXTRACT


@pytest.mark.asyncio
async def test_failure_message_lists_stage_errors(make_pipeline):
    p = make_pipeline(caption="", frames="")
    p.transcriber.transcribe.side_effect = AIServiceError("quota gone")

    with pytest.raises(AcquisitionFailed) as exc:
        await p.orchestrator.acquire_and_extract(TIKTOK, AcquisitionMode.FULL)

    assert "audio_transcribe: AIServiceError: quota gone" in exc.value.message
    p.classifier.is_non_cooking.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_audio_fetcher_goes_to_video(make_pipeline):
    p = make_pipeline(
        audio_fetcher=False,
        frames="FRAME 1: OBSERVATIONS: eggs",
        recipes={SourceKind.FRAME_ANALYSIS: VIDEO_RECIPE},
    )

    result = await p.orchestrator.acquire_and_extract(TIKTOK, AcquisitionMode.FULL)

    assert result.source == AcquisitionSource.VIDEO_ANALYSIS_FALLBACK
    assert _outcomes(result)[Stage.AUDIO_FETCH] == StageOutcome.HARD_FAILURE
    p.transcriber.transcribe.assert_not_awaited()


@pytest.mark.asyncio
async def test_caption_fetch_error_reads_as_empty(make_pipeline):
    p = make_pipeline()
    p.caption_fetcher.fetch_caption.side_effect = RuntimeError("blocked")

    result = await p.orchestrator.acquire_and_extract(TIKTOK, AcquisitionMode.FAST)

    assert result.needs_full_analysis
    assert _outcomes(result)[Stage.CAPTION_FETCH] == StageOutcome.HARD_FAILURE


@pytest.mark.asyncio
async def test_stage_timeout_is_hard_failure(make_pipeline):
    async def slow_caption(url):
        await asyncio.sleep(1)
        return "too late"

    p = make_pipeline(settings=Settings(retry_delay_seconds=0, caption_timeout_seconds=0.01))
    p.caption_fetcher.fetch_caption.side_effect = slow_caption

    result = await p.orchestrator.acquire_and_extract(TIKTOK, AcquisitionMode.FAST)

    caption_report = result.stages[0]
    assert caption_report.outcome == StageOutcome.HARD_FAILURE
    assert caption_report.detail == "timed out"


@pytest.mark.asyncio
async def test_website_without_recipe_skips_media(make_pipeline):
    p = make_pipeline(caption="Welcome to my blog!")

    with pytest.raises(AcquisitionFailed) as exc:
        await p.orchestrator.acquire_and_extract("https://example.com/about", AcquisitionMode.FULL)

    outcomes = _outcomes(exc.value)
    assert outcomes[Stage.AUDIO_FETCH] == StageOutcome.SKIPPED
    assert outcomes[Stage.VIDEO_FRAME_EXTRACT] == StageOutcome.SKIPPED
    assert exc.value.platform == "website"
    p.audio_fetcher.fetch_audio.assert_not_awaited()
    p.frame_analyzer.extract_text_from_video_frames.assert_not_awaited()


@pytest.mark.asyncio
async def test_website_without_recipe_fails_in_fast_mode(make_pipeline):
    p = make_pipeline(caption="Welcome to my blog!")

    with pytest.raises(AcquisitionFailed) as exc:
        await p.orchestrator.acquire_and_extract("https://example.com/about", AcquisitionMode.FAST)

    assert exc.value.message == "No recipe found on the page."
    assert _outcomes(exc.value)[Stage.AUDIO_FETCH] == StageOutcome.SKIPPED
    p.audio_fetcher.fetch_audio.assert_not_awaited()


@pytest.mark.asyncio
async def test_website_recipe_from_page_text(make_pipeline):
    p = make_pipeline(caption="Ingredients:\n- 2 cups flour", recipes={SourceKind.CAPTION: CAPTION_RECIPE})

    result = await p.orchestrator.acquire_and_extract("https://example.com/bread", AcquisitionMode.FULL)

    assert result.platform == "website"
    assert result.source == AcquisitionSource.CAPTIONS
    assert result.title == "Flour & Salt Recipe"


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["", "not a url", "ftp://example.com/recipe"])
async def test_unsupported_urls_are_rejected_before_fetching(make_pipeline, url):
    p = make_pipeline()

    with pytest.raises(UnsupportedPlatform):
        await p.orchestrator.acquire_and_extract(url, AcquisitionMode.FULL)

    p.caption_fetcher.fetch_caption.assert_not_awaited()


@pytest.mark.asyncio
async def test_platform_without_caption_source_is_unsupported(make_pipeline):
    p = make_pipeline()
    orchestrator = ContentAcquisitionOrchestrator(
        Collaborators(),
        extractor=p.extractor,
        classifier=p.classifier,
    )

    with pytest.raises(UnsupportedPlatform):
        await orchestrator.acquire_and_extract(TIKTOK)


@pytest.mark.asyncio
async def test_invalid_mode_is_rejected_before_fetching(make_pipeline):
    p = make_pipeline()

    with pytest.raises(InvalidAcquisitionMode):
        await p.orchestrator.acquire_and_extract(TIKTOK, "slow")

    p.caption_fetcher.fetch_caption.assert_not_awaited()


@pytest.mark.asyncio
async def test_mode_accepts_strings(make_pipeline):
    p = make_pipeline(caption="", frames="")

    with pytest.raises(AcquisitionFailed):
        await p.orchestrator.acquire_and_extract(TIKTOK, "full")


def test_next_step_fast_mode_never_reaches_media():
    for outcome in (StageOutcome.EMPTY_RESULT, StageOutcome.HARD_FAILURE):
        assert next_step(Stage.CAPTION_EXTRACT, outcome, AcquisitionMode.FAST, Platform.TIKTOK) == (
            Terminal.NEEDS_FULL_ANALYSIS
        )


@pytest.mark.parametrize("mode", [AcquisitionMode.FAST, AcquisitionMode.FULL])
@pytest.mark.parametrize("platform", [Platform.WEBSITE, Platform.PINTEREST])
def test_next_step_non_media_platform_fails_after_captions(mode, platform):
    assert next_step(Stage.CAPTION_EXTRACT, StageOutcome.EMPTY_RESULT, mode, platform) == Terminal.FAILURE


def test_next_step_full_mode_media_platform():
    assert next_step(
        Stage.CAPTION_EXTRACT, StageOutcome.EMPTY_RESULT, AcquisitionMode.FULL, Platform.YOUTUBE
    ) == Stage.AUDIO_FETCH
    assert next_step(
        Stage.CAPTION_EXTRACT, StageOutcome.SUCCESS, AcquisitionMode.FAST, Platform.YOUTUBE
    ) == Terminal.SUCCESS
