"""
Analysis pipeline tests: real path, fallback paths and the duration ceiling
"""

import json

import httpx
import openai
import pytest

from athleon.models.analysis import AnalysisRequest, TEXT_SKILLS, VIDEO_SKILLS
from athleon.services.analysis_pipeline import (
    TEXT_ANALYSIS_TEMPERATURE,
    VIDEO_ANALYSIS_TEMPERATURE,
    AnalysisPipeline,
)
from athleon.services.video_processing import DurationExceededError, FrameExtractionService


@pytest.fixture
def configured_pipeline(frame_service, configured_client, synthesizer):
    return AnalysisPipeline(frame_service, configured_client, synthesizer)


@pytest.mark.asyncio
async def test_video_analysis_uses_model_reply(configured_pipeline, openai_stub, make_completion, model_document, video_file):
    openai_stub.chat.completions.create.return_value = make_completion(json.dumps(model_document))

    result = await configured_pipeline.analyze_video(video_file, "Sprint start")

    assert result.source == "model"
    assert result.score == 82
    kwargs = openai_stub.chat.completions.create.call_args.kwargs
    assert kwargs["temperature"] == VIDEO_ANALYSIS_TEMPERATURE
    user_content = kwargs["messages"][1]["content"]
    assert 'titled "Sprint start"' in user_content[0]["text"]
    assert len(user_content) == 6


@pytest.mark.asyncio
async def test_unconfigured_pipeline_never_calls_out(pipeline, openai_stub, video_file):
    result = await pipeline.analyze_video(video_file, "Sprint start")

    openai_stub.chat.completions.create.assert_not_called()
    assert result.source == "fallback"
    assert [s.skill for s in result.skill_breakdown] == list(VIDEO_SKILLS)


@pytest.mark.asyncio
async def test_no_video_path_synthesizes(configured_pipeline, openai_stub):
    result = await configured_pipeline.analyze_video(None, "Anything")

    openai_stub.chat.completions.create.assert_not_called()
    assert result.source == "fallback"


@pytest.mark.asyncio
async def test_long_video_rejected_before_judgment(processor_factory, configured_client, synthesizer, openai_stub, video_file):
    processor = processor_factory(duration=650.0)
    pipeline = AnalysisPipeline(FrameExtractionService(processor, max_duration=600), configured_client, synthesizer)

    with pytest.raises(DurationExceededError):
        await pipeline.analyze_video(video_file, "Marathon")

    assert processor.requested == []
    openai_stub.chat.completions.create.assert_not_called()


@pytest.mark.asyncio
async def test_long_video_rejected_without_credential(processor_factory, unconfigured_client, synthesizer, video_file):
    processor = processor_factory(duration=650.0)
    pipeline = AnalysisPipeline(FrameExtractionService(processor, max_duration=600), unconfigured_client, synthesizer)

    with pytest.raises(DurationExceededError):
        await pipeline.analyze_video(video_file, "Marathon")


@pytest.mark.asyncio
async def test_upstream_failure_falls_back(configured_pipeline, openai_stub, video_file):
    request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
    response = httpx.Response(500, request=request)
    openai_stub.chat.completions.create.side_effect = openai.InternalServerError(
        "boom", response=response, body=None
    )

    result = await configured_pipeline.analyze_video(video_file, "Sprint start")

    assert result.source == "fallback"
    assert 60 <= result.score <= 95


@pytest.mark.asyncio
async def test_extraction_failure_falls_back(processor_factory, configured_client, synthesizer, openai_stub, video_file):
    processor = processor_factory(duration=10.0, failing_timestamps={1.0, 3.0, 5.0, 7.0, 9.0})
    pipeline = AnalysisPipeline(FrameExtractionService(processor), configured_client, synthesizer)

    result = await pipeline.analyze_video(video_file, "Drill")

    assert result.source == "fallback"
    openai_stub.chat.completions.create.assert_not_called()


@pytest.mark.asyncio
async def test_prose_reply_is_not_a_fallback(configured_pipeline, openai_stub, make_completion, video_file):
    openai_stub.chat.completions.create.return_value = make_completion("Great form overall.\nKeep your head up.")

    result = await configured_pipeline.analyze_video(video_file, "Drill")

    assert result.source == "model"
    assert result.score == 75
    assert result.insights == ["Great form overall.", "Keep your head up."]


@pytest.mark.asyncio
async def test_unrelated_video(configured_pipeline, openai_stub, make_completion, video_file):
    openai_stub.chat.completions.create.return_value = make_completion(
        '{"isRelated": false, "rejectionReason": "This is a cat video."}'
    )

    result = await configured_pipeline.analyze_video(video_file, "Cat")

    assert result.is_related is False
    assert result.score == 0
    assert result.insights == ["This is a cat video."]


@pytest.mark.asyncio
async def test_text_analysis(configured_pipeline, openai_stub, make_completion):
    openai_stub.chat.completions.create.return_value = make_completion(json.dumps({
        "score": 85,
        "insights": ["Solid serve toss"],
        "skillBreakdown": [{"skill": "Technique", "value": 80, "fullMark": 100}],
        "improvement": 12,
        "isRelated": True,
    }))

    result = await configured_pipeline.analyze_performance_text("tennis", "Served 20 aces")

    kwargs = openai_stub.chat.completions.create.call_args.kwargs
    assert kwargs["temperature"] == TEXT_ANALYSIS_TEMPERATURE
    assert "tennis performance" in kwargs["messages"][0]["content"]
    assert kwargs["messages"][1]["content"][0]["text"] == "Served 20 aces"
    assert result.score == 85
    assert result.improvement == 0


@pytest.mark.asyncio
async def test_text_analysis_unparsable_reply_falls_back(configured_pipeline, openai_stub, make_completion):
    openai_stub.chat.completions.create.return_value = make_completion("I cannot rate this.")

    result = await configured_pipeline.analyze_performance_text("golf", "Shot 72")

    assert result.source == "fallback"
    assert [s.skill for s in result.skill_breakdown] == list(TEXT_SKILLS)


@pytest.mark.asyncio
async def test_text_analysis_without_credential(pipeline, openai_stub):
    result = await pipeline.analyze_performance_text("golf", "Shot 72")

    openai_stub.chat.completions.create.assert_not_called()
    assert [s.skill for s in result.skill_breakdown] == list(TEXT_SKILLS)


@pytest.mark.asyncio
async def test_request_dispatch(pipeline, video_file):
    video_result = await pipeline.analyze(AnalysisRequest(video_path=video_file, title="Drill"))
    text_result = await pipeline.analyze(AnalysisRequest(sport="golf", description="Shot 72"))

    assert [s.skill for s in video_result.skill_breakdown] == list(VIDEO_SKILLS)
    assert [s.skill for s in text_result.skill_breakdown] == list(TEXT_SKILLS)


@pytest.mark.asyncio
async def test_request_with_both_inputs_is_rejected(pipeline, video_file):
    with pytest.raises(ValueError):
        await pipeline.analyze(AnalysisRequest(video_path=video_file, description="Shot 72"))


@pytest.mark.asyncio
async def test_deeply_nested_reply_does_not_fail_the_request(configured_pipeline, openai_stub, make_completion, video_file):
    nested = '{"score": 80, "insights": ' + "[" * 100000 + "]" * 100000 + "}"
    openai_stub.chat.completions.create.return_value = make_completion(nested)

    video_result = await configured_pipeline.analyze_video(video_file, "Drill")
    text_result = await configured_pipeline.analyze_performance_text("golf", "Shot 72")

    assert video_result.source == "model"
    assert video_result.score == 75
    assert text_result.source == "fallback"


@pytest.mark.asyncio
async def test_opencv_crash_falls_back(monkeypatch, configured_client, synthesizer, openai_stub, video_file):
    cv2 = pytest.importorskip("cv2")
    from athleon.services.video_processing import OpenCVProcessor, opencv_processor

    def failing_capture(*args, **kwargs):
        raise cv2.error("backend crashed while opening")

    monkeypatch.setattr(opencv_processor.cv2, "VideoCapture", failing_capture)
    pipeline = AnalysisPipeline(FrameExtractionService(OpenCVProcessor()), configured_client, synthesizer)

    result = await pipeline.analyze_video(video_file, "Drill")

    assert result.source == "fallback"
    openai_stub.chat.completions.create.assert_not_called()
