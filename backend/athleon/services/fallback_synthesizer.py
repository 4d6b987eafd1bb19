"""
Synthetic analysis used whenever no real model judgment is available
"""

import random
from typing import List, Optional, Sequence

from athleon.models.analysis import AnalysisResult, SkillScore, VIDEO_SKILLS

TRAINING_TIPS = (
    "Consider working on your footwork drills for better agility",
    "Your form shows good fundamentals - maintain consistency",
    "Recovery time between sessions is important for progress",
    "Video analysis suggests focusing on core stability exercises",
    "Reaction time can be improved with specific training drills",
)


class FallbackSynthesizer:
    """Plausible, well-formed results from an injectable random source"""

    BASE_SCORE_RANGE = (60, 95)
    SKILL_SPREAD = 15
    SKILL_BOUNDS = (30, 100)
    IMPROVEMENT_RANGE = (-5, 10)
    FOCUS_THRESHOLD = 70

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def synthesize(self, skills: Sequence[str] = VIDEO_SKILLS) -> AnalysisResult:
        base = self.rng.uniform(*self.BASE_SCORE_RANGE)
        score = round(base)
        breakdown = [SkillScore(skill=skill, value=self._skill_value(base)) for skill in skills]
        insights = self._insights(score, breakdown)
        improvement = round(self.rng.uniform(*self.IMPROVEMENT_RANGE))

        return AnalysisResult(
            score=score,
            insights=insights,
            skill_breakdown=breakdown,
            improvement=improvement,
            is_related=True,
            source="fallback"
        )

    def _skill_value(self, base: float) -> int:
        low, high = self.SKILL_BOUNDS
        variation = self.rng.uniform(-self.SKILL_SPREAD, self.SKILL_SPREAD)
        return max(low, min(high, round(base + variation)))

    def _insights(self, score: int, breakdown: List[SkillScore]) -> List[str]:
        ranked = sorted(breakdown, key=lambda s: s.value, reverse=True)
        best, worst = ranked[0], ranked[-1]

        insights = [f"Your {best.skill.lower()} is your strongest attribute at {best.value}%"]
        if worst.value < self.FOCUS_THRESHOLD:
            insights.append(f"Focus on improving your {worst.skill.lower()} which is currently at {worst.value}%")

        if score >= 80:
            insights.append("Excellent overall performance! You are performing above average.")
        elif score >= 65:
            insights.append("Good performance with room for improvement in specific areas.")
        else:
            insights.append("Continue practicing consistently to see improvements.")

        insights.append(self.rng.choice(TRAINING_TIPS))
        return insights


fallback_synthesizer = FallbackSynthesizer()
