"""
Analysis data models
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Union
from datetime import datetime

Number = Union[int, float]

# Canonical skill axes
VIDEO_SKILLS = ("Speed", "Technique", "Endurance", "Accuracy", "Power", "Agility")
TEXT_SKILLS = ("Technique", "Power", "Speed", "Accuracy", "Consistency")

SKILL_SCALE_MAX = 100
DEFAULT_SKILL_VALUE = 75


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SkillScore(CamelModel):
    skill: str
    value: Number
    full_mark: int = SKILL_SCALE_MAX


class AnalysisResult(CamelModel):
    score: Number
    insights: List[str]
    skill_breakdown: List[SkillScore]
    improvement: Number = 0
    is_related: bool = True
    rejection_reason: Optional[str] = None
    # "model" or "fallback"; kept out of API payloads
    source: str = Field(default="model", exclude=True)


class AnalysisRequest(BaseModel):
    """One analysis call: either a stored video or a free-text description"""

    video_path: Optional[str] = None
    title: Optional[str] = None
    sport: Optional[str] = None
    description: Optional[str] = None


class TextAnalysisRequest(BaseModel):
    sport: str = ""
    description: str = ""


class VideoAnalysisSummary(CamelModel):
    id: int
    score: Number
    improvement: Number
    insights: List[str]
    skill_breakdown: List[SkillScore]
    is_related: bool = True
    rejection_reason: Optional[str] = None


class VideoAnalysisResponse(BaseModel):
    message: str
    analysis: VideoAnalysisSummary


class AnalysisRecord(CamelModel):
    id: int
    video_title: str
    video_url: Optional[str] = None
    score: Number
    insights: List[str]
    skill_breakdown: List[SkillScore]
    analyzed_at: datetime


class TrendPoint(BaseModel):
    score: Number
    date: datetime


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class AnalysisHistory(CamelModel):
    results: List[AnalysisRecord]
    performance_trend: List[TrendPoint]
    pagination: Pagination


def default_skill_breakdown(skills=VIDEO_SKILLS, value: Number = DEFAULT_SKILL_VALUE) -> List[SkillScore]:
    """Canonical breakdown with every skill at the same value"""
    return [SkillScore(skill=skill, value=value) for skill in skills]
