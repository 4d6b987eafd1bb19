"""
Turns free-form model output into a typed AnalysisResult.

Every default and clamp rule for the analysis document lives in
``normalize_analysis``; the other helpers only locate and decode the JSON
object, or degrade to prose when there is none.
"""

import json
import math
from typing import Any, List, Mapping, Optional, Sequence

from athleon.models.analysis import (
    AnalysisResult,
    SkillScore,
    VIDEO_SKILLS,
    DEFAULT_SKILL_VALUE,
    default_skill_breakdown,
)
from athleon.utils.logger import get_logger

logger = get_logger(__name__)

SCORE_RANGE = (0, 100)
IMPROVEMENT_RANGE = (-20, 20)
SKILL_RANGE = (0, 100)

DEFAULT_SCORE = 75
DEFAULT_IMPROVEMENT = 0
MAX_PROSE_INSIGHTS = 4

UNRELATED_REASON = "Video content does not appear to be sports-related."
COMPLETED_INSIGHT = "Performance analysis completed"
PROSE_FALLBACK_INSIGHT = "AI analysis completed successfully"


class AnalysisParseError(ValueError):
    """The model output holds no decodable JSON object"""


def find_json_span(text: str) -> Optional[str]:
    """Return the first balanced top-level ``{...}`` span in ``text``"""
    start = text.find('{')
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return text[start:index + 1]
    return None


def extract_json_document(text: str) -> Mapping[str, Any]:
    """Decode the first JSON object embedded in ``text``"""
    span = find_json_span(text or "")
    if span is None:
        raise AnalysisParseError("No JSON object found in AI response")
    try:
        document = json.loads(span)
    except json.JSONDecodeError as e:
        raise AnalysisParseError(f"Invalid JSON in AI response: {e}") from e
    except RecursionError as e:
        raise AnalysisParseError("AI response JSON is nested too deeply") from e
    if not isinstance(document, dict):
        raise AnalysisParseError("AI response JSON is not an object")
    return document


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def _clamp(value: Any, bounds: Sequence[float], default: float):
    number = _number(value)
    if number is None:
        return default
    low, high = bounds
    return max(low, min(high, number))


def _insights(value: Any) -> List[str]:
    if not isinstance(value, list):
        return [COMPLETED_INSIGHT]
    insights = [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return insights or [COMPLETED_INSIGHT]


def _skill_breakdown(value: Any, default_skills: Sequence[str]) -> List[SkillScore]:
    if not isinstance(value, list) or not value or not all(isinstance(entry, dict) for entry in value):
        return default_skill_breakdown(default_skills)

    breakdown = []
    for entry in value:
        name = entry.get('skill')
        breakdown.append(SkillScore(
            skill=name.strip() if isinstance(name, str) and name.strip() else "Unknown",
            value=_clamp(entry.get('value'), SKILL_RANGE, DEFAULT_SKILL_VALUE)
        ))
    return breakdown


def normalize_analysis(
    document: Mapping[str, Any],
    default_skills: Sequence[str] = VIDEO_SKILLS
) -> AnalysisResult:
    """
    Build an AnalysisResult from an untyped analysis document.

    Accepts the wire field names (isRelated, rejectionReason, score,
    insights, skillBreakdown[{skill, value}], improvement). Out-of-range
    numbers are clamped, missing ones defaulted. A document that declares
    ``isRelated: false`` becomes a zero-score result carrying the rejection
    reason as its only insight. Feeding the serialized result back in
    yields the same result.
    """
    if not isinstance(document, Mapping):
        raise TypeError(f"Analysis document must be a mapping, got {type(document).__name__}")

    if document.get('isRelated') is False:
        reason = document.get('rejectionReason')
        reason = reason.strip() if isinstance(reason, str) and reason.strip() else None
        return AnalysisResult(
            score=0,
            insights=[reason or UNRELATED_REASON],
            skill_breakdown=default_skill_breakdown(default_skills, value=0),
            improvement=0,
            is_related=False,
            rejection_reason=reason
        )

    return AnalysisResult(
        score=_clamp(document.get('score'), SCORE_RANGE, DEFAULT_SCORE),
        insights=_insights(document.get('insights')),
        skill_breakdown=_skill_breakdown(document.get('skillBreakdown'), default_skills),
        improvement=_clamp(document.get('improvement'), IMPROVEMENT_RANGE, DEFAULT_IMPROVEMENT),
        is_related=True
    )


def prose_analysis(text: str, default_skills: Sequence[str] = VIDEO_SKILLS) -> AnalysisResult:
    """Best-effort result around the first non-empty lines of plain text"""
    lines = [line.strip() for line in (text or "").splitlines() if line.strip()]
    return AnalysisResult(
        score=DEFAULT_SCORE,
        insights=lines[:MAX_PROSE_INSIGHTS] or [PROSE_FALLBACK_INSIGHT],
        skill_breakdown=default_skill_breakdown(default_skills),
        improvement=DEFAULT_IMPROVEMENT,
        is_related=True
    )


def parse_analysis_response(text: str, default_skills: Sequence[str] = VIDEO_SKILLS) -> AnalysisResult:
    """JSON path when the text embeds an object, prose degradation otherwise"""
    try:
        document = extract_json_document(text)
    except AnalysisParseError as e:
        logger.warning(f"Falling back to prose insights: {e}")
        logger.debug(f"Raw AI response: {text}")
        return prose_analysis(text, default_skills)

    return normalize_analysis(document, default_skills)
