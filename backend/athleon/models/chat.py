"""
Chat data models
"""

from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

from athleon.models.analysis import SkillScore, Number


class ChatRequest(BaseModel):
    message: str = ""


class ChatReply(BaseModel):
    reply: str
    timestamp: datetime


class ChatContext(BaseModel):
    """What the coach knows about the user for one chat turn"""

    user_name: str
    recent_score: Optional[Number] = None
    skills: Optional[List[SkillScore]] = None
    video_title: Optional[str] = None
    insights: Optional[List[str]] = None

    @property
    def first_name(self) -> str:
        parts = self.user_name.split()
        return parts[0] if parts else "Athlete"
