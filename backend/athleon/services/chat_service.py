"""
AI coach chat
Remote reply when the judgment service is reachable, rule-based otherwise
"""

import re
from typing import Optional

from athleon.models.chat import ChatContext
from athleon.services.judgment_client import (
    EmptyResponseError,
    JudgmentClient,
    JudgmentError,
    judgment_client,
)
from athleon.utils.logger import get_logger

logger = get_logger(__name__)

EMPTY_REPLY = "I couldn't process that request right now."

GREETING_PATTERN = re.compile(r"\b(hello|hi|hey)\b")


def build_system_prompt(context: ChatContext) -> str:
    prompt = f"You are an AI Sports Coach helping {context.first_name}. "

    if context.recent_score is not None:
        prompt += f'\nMost recent video analysis: "{context.video_title or "Untitled Video"}"'
        prompt += f"\n- Score: {context.recent_score}/100"

    if context.skills:
        skill_details = ", ".join(f"{s.skill}: {s.value}%" for s in context.skills)
        prompt += f"\n- Skill Breakdown: {skill_details}"

    if context.insights:
        prompt += f"\n- Key Insights: {'; '.join(context.insights)}"

    return (
        f"{prompt}\n"
        "Provide a helpful, encouraging, and specific response as their AI Sports Coach. "
        "Be conversational, supportive, and provide actionable advice. "
        "Keep your response concise (2-4 sentences) but informative."
    )


def rule_based_reply(message: str, context: ChatContext) -> str:
    """Offline coach reply keyed on what the message asks about"""
    name = context.first_name
    text = message.lower()

    if "improve" in text or "better" in text:
        if context.skills:
            weakest = min(context.skills, key=lambda s: s.value).skill.lower()
            return (
                f"Hi {name}! Based on your recent analysis, I'd recommend focusing on {weakest}. "
                f"Here are some exercises:\n\n"
                f"1. Start with warm-up drills\n"
                f"2. Practice specific {weakest} exercises for 20 minutes daily\n"
                f"3. Record yourself and compare with previous sessions\n\n"
                f"Would you like me to suggest specific drills?"
            )
        return (
            f"Hi {name}! To improve, I recommend uploading your performance videos for AI analysis. "
            f"This will help me give you personalized advice based on your actual performance data."
        )

    if "score" in text or "performance" in text or "how am i" in text:
        if context.recent_score is not None:
            score = context.recent_score
            if score >= 80:
                assessment = "excellent"
            elif score >= 65:
                assessment = "good with room for growth"
            else:
                assessment = "showing steady progress"
            return (
                f"Your recent performance score is {score}, which is {assessment}. "
                f"Keep up your training routine and we should see continued improvement!"
            )
        return "I don't have recent performance data for you. Upload a video for AI analysis to get your performance score!"

    if "drill" in text or "exercise" in text or "practice" in text:
        return (
            "Here are some recommended drills based on your profile:\n\n"
            "**Speed Drills**\n- Sprint intervals (6x50m)\n- Ladder drills\n\n"
            "**Technique Work**\n- Slow-motion form practice\n- Mirror training\n\n"
            "**Accuracy Training**\n- Target practice\n- Precision exercises\n\n"
            "Want me to create a weekly training plan for you?"
        )

    if GREETING_PATTERN.search(text):
        return (
            f"Hello {name}! I'm your AI Coach. I can help you with:\n\n"
            f"- Analyzing your performance videos\n"
            f"- Suggesting improvement areas\n"
            f"- Creating training plans\n"
            f"- Answering sports-related questions\n\n"
            f"How can I help you today?"
        )

    return (
        f"Thanks for your message, {name}! I'm here to help with your athletic performance. "
        f"You can ask me about:\n\n"
        f"- Your performance scores and trends\n"
        f"- Improvement suggestions\n"
        f"- Training drills and exercises\n"
        f"- Analyzing your uploaded videos\n\n"
        f"What would you like to know?"
    )


class ChatService:
    def __init__(self, client: Optional[JudgmentClient] = None):
        self.client = client or judgment_client

    async def respond(self, message: str, context: ChatContext) -> str:
        if not self.client.is_configured:
            return rule_based_reply(message, context)

        try:
            return await self.client.judge(build_system_prompt(context), message)
        except EmptyResponseError:
            return EMPTY_REPLY
        except JudgmentError as e:
            logger.error(f"AI chat error: {type(e).__name__}: {e}")
            return rule_based_reply(message, context)


chat_service = ChatService()
