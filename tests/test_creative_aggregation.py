"""
Unit tests for judge score aggregation in the creative sandbox.
"""

import pytest

from realtime_broker.creative.aggregation import (
    REASON_FASTER,
    REASON_ORDER,
    REASON_SHORTER,
    aggregate_judge_scores,
)
from realtime_broker.errors import InsufficientParticipantsError
from realtime_broker.models.creative import JudgeResult, JudgeScore, ParallelCandidate


def candidate(candidate_id, text="text", latency_ms=100):
    return ParallelCandidate(candidateId=candidate_id, text=text, latencyMs=latency_ms, model="m")


def judge(judge_id, **scores):
    return JudgeResult(
        judgeId=judge_id,
        candidateScores=[
            JudgeScore(candidateId=cid, score=value, rationale="r") for cid, value in scores.items()
        ],
    )


def test_clear_lead_decides_early():
    candidates = [candidate("c1"), candidate("c2"), candidate("c3")]
    judges = [judge("judgeA", c1=9, c2=6, c3=5), judge("judgeB", c1=8, c2=7, c3=5)]

    outcome = aggregate_judge_scores(candidates, judges)

    assert outcome.winnerId == "c1"
    assert outcome.runnerUpId == "c2"
    assert outcome.winnerAverage == 8.5
    assert outcome.runnerUpAverage == 6.5
    assert outcome.scoreGap == 2.0
    assert "早期決定" in outcome.decisionReason
    assert [a.candidateId for a in outcome.averages] == ["c1", "c2", "c3"]
    assert outcome.averages[0].votes == 2


def test_narrow_lead_prefers_shorter_text():
    candidates = [candidate("c1", text="a much longer answer"), candidate("c2", text="short")]
    judges = [judge("judgeA", c1=8.0, c2=7.6)]

    outcome = aggregate_judge_scores(candidates, judges)

    assert outcome.winnerId == "c2"
    assert outcome.runnerUpId == "c1"
    assert outcome.decisionReason == REASON_SHORTER


def test_narrow_lead_with_equal_length_prefers_faster():
    candidates = [candidate("c1", latency_ms=900), candidate("c2", latency_ms=300)]
    judges = [judge("judgeA", c1=8.0, c2=7.5)]

    outcome = aggregate_judge_scores(candidates, judges)

    assert outcome.winnerId == "c2"
    assert outcome.decisionReason == REASON_FASTER


def test_complete_tie_keeps_generation_order():
    candidates = [candidate("c1"), candidate("c2")]
    judges = [judge("judgeA", c1=7, c2=7)]

    outcome = aggregate_judge_scores(candidates, judges)

    assert outcome.winnerId == "c1"
    assert outcome.decisionReason == REASON_ORDER


def test_custom_margin():
    candidates = [candidate("c1", text="longer text"), candidate("c2", text="short")]
    judges = [judge("judgeA", c1=8.0, c2=7.5)]

    outcome = aggregate_judge_scores(candidates, judges, early_win_margin=0.25)

    assert outcome.winnerId == "c1"


def test_unknown_and_unscored_candidates_are_ignored():
    candidates = [candidate("c1"), candidate("c2"), candidate("c3")]
    judges = [judge("judgeA", c1=9, c2=5, ghost=10)]

    outcome = aggregate_judge_scores(candidates, judges)

    assert {a.candidateId for a in outcome.averages} == {"c1", "c2"}


def test_requires_two_scored_candidates():
    candidates = [candidate("c1"), candidate("c2")]
    with pytest.raises(InsufficientParticipantsError, match="At least two candidates"):
        aggregate_judge_scores(candidates, [judge("judgeA", c1=9)])
