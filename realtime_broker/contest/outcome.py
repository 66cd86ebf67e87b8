"""
Winner selection for expert contests.

Scores are joined to submissions by expert id, ranked by total score, then
confidence, then latency, and the top two become winner and runner-up. The
ranking is a pure function with no shared state.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List

from realtime_broker.config.constants import MIN_CONTEST_PARTICIPANTS
from realtime_broker.errors import InsufficientParticipantsError
from realtime_broker.models.contest import (
    ExpertContestDecision,
    ExpertContestSubmission,
    ExpertPanelScore,
)

INSUFFICIENT_MESSAGE = "Expert contest requires at least two expert submissions"


@dataclass(frozen=True)
class RankedExpert:
    """A score annotated with the latency of its matching submission."""

    expert_id: str
    total_score: float
    confidence: float
    latency_ms: float


def build_latency_lookup(submissions: Iterable[ExpertContestSubmission]) -> Dict[str, float]:
    """Map expert id to latency; a repeated id keeps its last latency."""
    lookup: Dict[str, float] = {}
    for submission in submissions:
        lookup[submission.expertId] = submission.latencyMs
    return lookup


def join_scores(
    scores: Iterable[ExpertPanelScore], latency_by_expert: Dict[str, float]
) -> List[RankedExpert]:
    """Keep only scores whose expert submitted something, in input order."""
    return [
        RankedExpert(
            expert_id=score.expertId,
            total_score=score.totalScore,
            confidence=score.confidence,
            latency_ms=latency_by_expert[score.expertId],
        )
        for score in scores
        if score.expertId in latency_by_expert
    ]


def _rank_key(expert: RankedExpert):
    return (-expert.total_score, -expert.confidence, expert.latency_ms)


def decide_expert_contest_outcome(
    submissions: Iterable[ExpertContestSubmission],
    scores: Iterable[ExpertPanelScore],
) -> ExpertContestDecision:
    """
    Pick the winner and runner-up of a contest.

    Args:
        submissions: Expert outputs with their latencies
        scores: Judge scores, possibly including experts without a submission

    Returns:
        ExpertContestDecision with ``tieBreaker`` set only when the total scores
        of the top two are equal

    Raises:
        InsufficientParticipantsError: If fewer than two scores match a submission
    """
    comparable = join_scores(scores, build_latency_lookup(submissions))
    if len(comparable) < MIN_CONTEST_PARTICIPANTS:
        raise InsufficientParticipantsError(INSUFFICIENT_MESSAGE)

    # sorted() is stable: experts tied on all three keys keep input order
    ranked = sorted(comparable, key=_rank_key)
    winner = ranked[0]
    runner_up = ranked[1] if len(ranked) > 1 else None
    if runner_up is None:
        raise InsufficientParticipantsError(INSUFFICIENT_MESSAGE)

    tie_breaker = None
    if winner.total_score == runner_up.total_score:
        tie_breaker = "latency" if winner.confidence == runner_up.confidence else "confidence"

    return ExpertContestDecision(
        winnerId=winner.expert_id,
        runnerUpId=runner_up.expert_id,
        tieBreaker=tie_breaker,
    )
