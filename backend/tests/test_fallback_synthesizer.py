"""
Synthetic analysis tests
"""

import random

from athleon.models.analysis import TEXT_SKILLS, VIDEO_SKILLS
from athleon.services.fallback_synthesizer import TRAINING_TIPS, FallbackSynthesizer


def test_same_seed_gives_same_result():
    first = FallbackSynthesizer(rng=random.Random(1234)).synthesize()
    second = FallbackSynthesizer(rng=random.Random(1234)).synthesize()

    assert first == second


def test_values_stay_in_range():
    synthesizer = FallbackSynthesizer(rng=random.Random(99))

    for _ in range(200):
        result = synthesizer.synthesize()
        assert 60 <= result.score <= 95
        assert -5 <= result.improvement <= 10
        assert all(30 <= s.value <= 100 for s in result.skill_breakdown)
        assert all(s.full_mark == 100 for s in result.skill_breakdown)
        assert result.is_related is True
        assert result.rejection_reason is None
        assert result.source == "fallback"


def test_video_axes_by_default():
    result = FallbackSynthesizer(rng=random.Random(5)).synthesize()
    assert [s.skill for s in result.skill_breakdown] == list(VIDEO_SKILLS)


def test_text_axes_on_request():
    result = FallbackSynthesizer(rng=random.Random(5)).synthesize(TEXT_SKILLS)
    assert [s.skill for s in result.skill_breakdown] == list(TEXT_SKILLS)


def test_insights_name_strongest_skill_and_end_with_a_tip():
    result = FallbackSynthesizer(rng=random.Random(21)).synthesize()
    strongest = max(result.skill_breakdown, key=lambda s: s.value)

    assert result.insights[0] == f"Your {strongest.skill.lower()} is your strongest attribute at {strongest.value}%"
    assert result.insights[-1] in TRAINING_TIPS
    assert 3 <= len(result.insights) <= 4


def test_weak_skill_is_called_out_below_threshold():
    synthesizer = FallbackSynthesizer(rng=random.Random(3))

    for _ in range(100):
        result = synthesizer.synthesize()
        weakest = min(result.skill_breakdown, key=lambda s: s.value)
        focus = [i for i in result.insights if i.startswith("Focus on improving")]
        assert bool(focus) == (weakest.value < 70)
