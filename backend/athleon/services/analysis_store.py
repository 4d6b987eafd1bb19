"""
Persistence of accepted video analyses and the chat context built from them
"""

import math
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from athleon.db.models import AIUsageLog, PerformanceSnapshot
from athleon.models.analysis import AnalysisResult, SkillScore
from athleon.models.chat import ChatContext
from athleon.utils.logger import get_logger

logger = get_logger(__name__)

TREND_POINTS = 12

# Snapshot column per canonical video skill
SNAPSHOT_COLUMNS = {
    "Speed": "speed_score",
    "Technique": "technique_score",
    "Endurance": "endurance_score",
    "Accuracy": "accuracy_score",
    "Power": "power_score",
    "Agility": "agility_score",
}


def record_video_analysis(
    db: Session,
    user_id: str,
    video_title: str,
    video_url: Optional[str],
    result: AnalysisResult
) -> AIUsageLog:
    """Write the usage log and the per-skill snapshot for one analysis"""
    skill_breakdown = [skill.model_dump(by_alias=True) for skill in result.skill_breakdown]

    usage_log = AIUsageLog(
        user_id=user_id,
        video_title=video_title,
        video_url=video_url,
        score=result.score,
        improvement=result.improvement,
        insights=list(result.insights),
        skill_breakdown=skill_breakdown,
        source=result.source,
    )
    db.add(usage_log)

    values = {}
    for skill in result.skill_breakdown:
        column = SNAPSHOT_COLUMNS.get(skill.skill)
        # First entry wins when the model repeats a skill
        if column and column not in values:
            values[column] = skill.value
    for column in SNAPSHOT_COLUMNS.values():
        values.setdefault(column, 0)
    db.add(PerformanceSnapshot(user_id=user_id, overall_score=result.score, **values))

    db.commit()
    db.refresh(usage_log)
    logger.info(f"Stored analysis {usage_log.id} for user {user_id} (score={result.score}, source={result.source})")
    return usage_log


def latest_analysis(db: Session, user_id: str) -> Optional[AIUsageLog]:
    statement = (
        select(AIUsageLog)
        .where(AIUsageLog.user_id == user_id)
        .order_by(AIUsageLog.created_at.desc(), AIUsageLog.id.desc())
        .limit(1)
    )
    return db.execute(statement).scalar_one_or_none()


def list_analyses(db: Session, user_id: str, page: int, limit: int) -> Tuple[List[AIUsageLog], int]:
    """One page of a user's analyses, newest first, plus the total count"""
    statement = (
        select(AIUsageLog)
        .where(AIUsageLog.user_id == user_id)
        .order_by(AIUsageLog.created_at.desc(), AIUsageLog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    results = list(db.execute(statement).scalars())
    total = db.execute(
        select(func.count()).select_from(AIUsageLog).where(AIUsageLog.user_id == user_id)
    ).scalar_one()
    return results, total


def performance_trend(db: Session, user_id: str, points: int = TREND_POINTS) -> List[AIUsageLog]:
    """The user's first ``points`` analyses in chronological order"""
    statement = (
        select(AIUsageLog)
        .where(AIUsageLog.user_id == user_id)
        .order_by(AIUsageLog.created_at.asc(), AIUsageLog.id.asc())
        .limit(points)
    )
    return list(db.execute(statement).scalars())


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def plain_number(value):
    """Whole floats read back from Float columns as ints"""
    return int(value) if isinstance(value, float) and value.is_integer() else value


def build_chat_context(db: Session, user_id: str, user_name: str) -> ChatContext:
    """Chat context from the user's most recent analysis, if any"""
    latest = latest_analysis(db, user_id)
    if latest is None:
        return ChatContext(user_name=user_name)

    return ChatContext(
        user_name=user_name,
        recent_score=plain_number(latest.score),
        skills=[SkillScore.model_validate(entry) for entry in latest.skill_breakdown or []],
        video_title=latest.video_title,
        insights=list(latest.insights or []),
    )
