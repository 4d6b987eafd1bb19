"""
Performance analysis pipeline
Video -> key frames -> multimodal judgment -> normalized result, with a
synthetic result whenever the real path is unavailable or fails
"""

from typing import Optional

from athleon.models.analysis import AnalysisRequest, AnalysisResult, VIDEO_SKILLS, TEXT_SKILLS
from athleon.services.fallback_synthesizer import FallbackSynthesizer, fallback_synthesizer
from athleon.services.judgment_client import JudgmentClient, JudgmentError, judgment_client
from athleon.services.result_parser import (
    AnalysisParseError,
    extract_json_document,
    normalize_analysis,
    parse_analysis_response,
)
from athleon.services.video_processing import (
    DurationExceededError,
    FrameExtractionService,
    ProcessingError,
    get_frame_extraction_service,
)
from athleon.utils.logger import get_logger, PerformanceLogger

logger = get_logger(__name__)

VIDEO_ANALYSIS_TEMPERATURE = 0.2
TEXT_ANALYSIS_TEMPERATURE = 0.3

VIDEO_SYSTEM_PROMPT = """You are an expert sports performance analyst.
Your task is to analyze the visual content of the provided video frames to determine if it depicts a sports performance.

1. **Relevance Check**: First, determine if the images show a sport, athlete, or physical exercise.
   - If NO: Return JSON with "isRelated": false and a "rejectionReason".
   - If YES: Proceed to full analysis.

2. **Full Analysis**:
   - Provide an overall performance score (0-100).
   - List 4-5 specific insights based on the VISUAL evidence (posture, form, technique).
   - Break down skills (Speed, Technique, Endurance, Accuracy, Power, Agility).
   - Suggest improvements.

Response Format (JSON ONLY):
{
  "isRelated": boolean,
  "rejectionReason": string (optional, only if isRelated is false),
  "score": number (0-100),
  "insights": ["insight1", "insight2", ...],
  "skillBreakdown": [
    {"skill": "Speed", "value": number},
    {"skill": "Technique", "value": number},
    {"skill": "Endurance", "value": number},
    {"skill": "Accuracy", "value": number},
    {"skill": "Power", "value": number},
    {"skill": "Agility", "value": number}
  ],
  "improvement": number (-20 to 20)
}"""

TEXT_SYSTEM_PROMPT = """You are an AI Sports Coach. Analyze the {sport} performance described by the user.

Provide a JSON response with:
1. An overall performance score (0-100)
2. 4-5 key insights about the performance
3. A skill breakdown for: Technique, Power, Speed, Accuracy, Consistency

Respond ONLY with valid JSON in this exact format:
{{
  "score": 85,
  "insights": ["insight1", "insight2", "insight3", "insight4"],
  "skillBreakdown": [
    {{"skill": "Technique", "value": 80, "fullMark": 100}},
    {{"skill": "Power", "value": 75, "fullMark": 100}},
    {{"skill": "Speed", "value": 85, "fullMark": 100}},
    {{"skill": "Accuracy", "value": 70, "fullMark": 100}},
    {{"skill": "Consistency", "value": 78, "fullMark": 100}}
  ],
  "improvement": 0,
  "isRelated": true
}}"""


def video_user_text(title: Optional[str]) -> str:
    return f'Analyze this video titled "{title or "Unknown"}". These are key frames from the video.'


class AnalysisPipeline:
    def __init__(
        self,
        frame_service: Optional[FrameExtractionService] = None,
        client: Optional[JudgmentClient] = None,
        synthesizer: Optional[FallbackSynthesizer] = None
    ):
        self._frame_service = frame_service
        self.client = client or judgment_client
        self.synthesizer = synthesizer or fallback_synthesizer

    @property
    def frame_service(self) -> FrameExtractionService:
        if self._frame_service is None:
            self._frame_service = get_frame_extraction_service()
        return self._frame_service

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Run whichever analysis the request describes: a description or a video"""
        if request.description is not None:
            if request.video_path is not None:
                raise ValueError("An analysis request takes a video or a description, not both")
            return await self.analyze_performance_text(request.sport or "", request.description)
        return await self.analyze_video(request.video_path, request.title)

    async def analyze_video(self, video_path: Optional[str] = None, title: Optional[str] = None) -> AnalysisResult:
        """
        Analyze a stored video.

        Only DurationExceededError escapes; every other failure yields a
        synthetic result so callers always get a well-formed analysis.
        """
        perf = PerformanceLogger("video_analysis")

        if not video_path:
            logger.info("No video file supplied - using synthetic analysis")
            return self.synthesizer.synthesize(VIDEO_SKILLS)

        if not self.client.is_configured:
            logger.warning("AI credential not configured - using synthetic analysis")
            try:
                await self.frame_service.check_duration(video_path)
            except DurationExceededError:
                raise
            except ProcessingError as e:
                logger.warning(f"Video probe failed ({e.error_code}): {e}")
            return self.synthesizer.synthesize(VIDEO_SKILLS)

        logger.info(f"Processing video: {title}")
        perf.start("frame extraction")
        try:
            frames = await self.frame_service.extract_frames(video_path)
        except DurationExceededError:
            raise
        except ProcessingError as e:
            logger.error(f"Video processing error ({e.error_code}): {e}")
            return self.synthesizer.synthesize(VIDEO_SKILLS)
        perf.end(f"{len(frames)} frames")

        perf.start("remote judgment")
        try:
            text = await self.client.judge(
                VIDEO_SYSTEM_PROMPT,
                video_user_text(title),
                frames,
                VIDEO_ANALYSIS_TEMPERATURE
            )
        except JudgmentError as e:
            logger.error(f"AI analysis error: {type(e).__name__}: {e}")
            return self.synthesizer.synthesize(VIDEO_SKILLS)
        perf.end()

        result = parse_analysis_response(text, VIDEO_SKILLS)
        perf.metric("analysis_score", result.score)
        return result

    async def analyze_performance_text(self, sport: str, description: str) -> AnalysisResult:
        """Analyze a free-text performance description"""
        if not self.client.is_configured:
            logger.warning("AI credential not configured - using synthetic text analysis")
            return self.synthesizer.synthesize(TEXT_SKILLS)

        try:
            text = await self.client.judge(
                TEXT_SYSTEM_PROMPT.format(sport=sport),
                description,
                temperature=TEXT_ANALYSIS_TEMPERATURE
            )
            document = extract_json_document(text)
        except (JudgmentError, AnalysisParseError) as e:
            logger.error(f"Text analysis error: {type(e).__name__}: {e}")
            return self.synthesizer.synthesize(TEXT_SKILLS)

        result = normalize_analysis(document, TEXT_SKILLS)
        if result.is_related:
            result.improvement = 0
        return result


analysis_pipeline = AnalysisPipeline()
