"""
Combines the scores of several judges into a single creative sandbox outcome.

Each candidate's judge scores are averaged. A clear lead (gap at or above the
early-win margin) decides outright; a narrow lead is settled by shorter text,
then lower latency, then generation order.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from realtime_broker.config.constants import MIN_CONTEST_PARTICIPANTS
from realtime_broker.errors import InsufficientParticipantsError
from realtime_broker.models.creative import (
    AggregationOutcome,
    CandidateAverageScore,
    JudgeResult,
    ParallelCandidate,
)

DEFAULT_EARLY_WIN_MARGIN = 1.0

REASON_SHORTER = "平均差が小さいため、より短い回答を優先。"
REASON_FASTER = "回答時間が速い方を優先。"
REASON_ORDER = "差が極小のため生成順で決定。"


@dataclass
class _Aggregate:
    candidate: ParallelCandidate
    scores: List[float] = field(default_factory=list)

    @property
    def average(self) -> float:
        return sum(self.scores) / len(self.scores)


def _break_tie(winner: _Aggregate, runner_up: _Aggregate) -> Tuple[_Aggregate, _Aggregate, str]:
    winner_length = len(winner.candidate.text)
    runner_length = len(runner_up.candidate.text)
    if winner_length != runner_length:
        if winner_length > runner_length:
            return runner_up, winner, REASON_SHORTER
        return winner, runner_up, REASON_SHORTER

    if winner.candidate.latencyMs != runner_up.candidate.latencyMs:
        if winner.candidate.latencyMs > runner_up.candidate.latencyMs:
            return runner_up, winner, REASON_FASTER
        return winner, runner_up, REASON_FASTER

    return winner, runner_up, REASON_ORDER


def aggregate_judge_scores(
    candidates: Sequence[ParallelCandidate],
    judge_results: Sequence[JudgeResult],
    early_win_margin: float = DEFAULT_EARLY_WIN_MARGIN,
) -> AggregationOutcome:
    """
    Average judge scores per candidate and pick a winner and runner-up.

    Scores for unknown candidate ids are ignored, as are candidates nobody scored.

    Raises:
        InsufficientParticipantsError: If fewer than two candidates received a score
    """
    by_id: Dict[str, _Aggregate] = {
        candidate.candidateId: _Aggregate(candidate) for candidate in candidates
    }
    for judge in judge_results:
        for score in judge.candidateScores:
            record = by_id.get(score.candidateId)
            if record is not None:
                record.scores.append(score.score)

    scored = [record for record in by_id.values() if record.scores]
    if len(scored) < MIN_CONTEST_PARTICIPANTS:
        raise InsufficientParticipantsError("At least two candidates need valid judge scores")

    scored.sort(key=lambda record: record.average, reverse=True)
    averages = [
        CandidateAverageScore(
            candidateId=record.candidate.candidateId,
            average=round(record.average, 3),
            votes=len(record.scores),
        )
        for record in scored
    ]

    winner, runner_up = scored[0], scored[1]
    diff = winner.average - runner_up.average
    if diff >= early_win_margin:
        reason = f"平均差 {diff:.2f} >= しきい値 {early_win_margin:.2f} のため早期決定。"
    else:
        winner, runner_up, reason = _break_tie(winner, runner_up)

    return AggregationOutcome(
        winnerId=winner.candidate.candidateId,
        runnerUpId=runner_up.candidate.candidateId,
        decisionReason=reason,
        averages=averages,
        winnerAverage=round(winner.average, 3),
        runnerUpAverage=round(runner_up.average, 3),
        scoreGap=round(diff, 3),
    )
