from datetime import datetime, timezone

from sqlalchemy import Integer, Float, String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from athleon.db.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AIUsageLog(Base):
    """One accepted video analysis"""

    __tablename__ = "ai_usage_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)

    video_title: Mapped[str] = mapped_column(String(255))
    video_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    score: Mapped[float] = mapped_column(Float)
    improvement: Mapped[float] = mapped_column(Float, default=0)
    # ["insight", ...]
    insights: Mapped[list] = mapped_column(JSON, default=list)
    # [{"skill": "Speed", "value": 70, "fullMark": 100}, ...]
    skill_breakdown: Mapped[list] = mapped_column(JSON, default=list)

    # "model" or "fallback"
    source: Mapped[str] = mapped_column(String(16), default="model")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)


class PerformanceSnapshot(Base):
    """Per-skill scores denormalized from an AIUsageLog"""

    __tablename__ = "performance_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)

    overall_score: Mapped[float] = mapped_column(Float)
    speed_score: Mapped[float] = mapped_column(Float, default=0)
    technique_score: Mapped[float] = mapped_column(Float, default=0)
    endurance_score: Mapped[float] = mapped_column(Float, default=0)
    accuracy_score: Mapped[float] = mapped_column(Float, default=0)
    power_score: Mapped[float] = mapped_column(Float, default=0)
    agility_score: Mapped[float] = mapped_column(Float, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
