"""
Runs a full expert contest against the OpenAI Responses API.

Every expert answers concurrently, a judge panel scores the answers in one
structured call, and the outcome decider picks the winner.
"""

import asyncio
import logging
import time
from typing import List

from openai import AsyncOpenAI

from realtime_broker.config.constants import (
    CONTEST_MODEL,
    LOGGER_NAME,
    MIN_CONTEST_PARTICIPANTS,
)
from realtime_broker.contest.outcome import decide_expert_contest_outcome
from realtime_broker.contest.prompts import (
    JUDGE_SYSTEM_PROMPT,
    build_expert_system_prompt,
    build_expert_user_prompt,
    build_judge_prompt,
)
from realtime_broker.errors import InsufficientParticipantsError, UpstreamError
from realtime_broker.models.contest import (
    ExpertContestRequest,
    ExpertContestResponse,
    ExpertContestRoleDefinition,
    ExpertContestSubmission,
    ExpertPanelScore,
    JudgePanelOutput,
)
from realtime_broker.services.openai_client import (
    extract_output_text,
    map_token_usage,
    timed_text_response,
)

logger = logging.getLogger(LOGGER_NAME)


class ExpertContestRunner:
    """Orchestrates submissions, judging and ranking for one contest."""

    def __init__(self, client: AsyncOpenAI, model: str = CONTEST_MODEL):
        self.client = client
        self.model = model

    async def run_submission(
        self, request: ExpertContestRequest, expert: ExpertContestRoleDefinition
    ) -> ExpertContestSubmission:
        response, latency_ms = await timed_text_response(
            self.client,
            self.model,
            build_expert_system_prompt(request, expert),
            build_expert_user_prompt(request, expert),
        )
        return ExpertContestSubmission(
            expertId=expert.id,
            outputText=extract_output_text(response),
            latencyMs=latency_ms,
            tokenUsage=map_token_usage(getattr(response, "usage", None)),
        )

    async def run_judge_panel(
        self, request: ExpertContestRequest, submissions: List[ExpertContestSubmission]
    ) -> JudgePanelOutput:
        response = await self.client.responses.parse(
            model=self.model,
            input=[
                {"role": "system", "content": JUDGE_SYSTEM_PROMPT},
                {"role": "user", "content": build_judge_prompt(request, submissions)},
            ],
            text_format=JudgePanelOutput,
        )
        parsed = getattr(response, "output_parsed", None)
        if parsed is None:
            raise UpstreamError("Judge panel returned no structured output")
        return JudgePanelOutput.model_validate(parsed, from_attributes=True)

    async def run(self, request: ExpertContestRequest) -> ExpertContestResponse:
        """
        Run the contest end to end.

        Raises:
            InsufficientParticipantsError: If fewer than two judge scores match a submission
            UpstreamError: If the judge panel output is unusable
        """
        contest_start = time.perf_counter()
        logger.info(
            f"Starting expert contest {request.contestId} with {len(request.experts)} experts"
        )

        submissions = list(
            await asyncio.gather(
                *(self.run_submission(request, expert) for expert in request.experts)
            )
        )
        judge_output = await self.run_judge_panel(request, submissions)

        submitted = {submission.expertId for submission in submissions}
        scores: List[ExpertPanelScore] = [
            score for score in judge_output.scores if score.expertId in submitted
        ]
        if len(scores) < MIN_CONTEST_PARTICIPANTS:
            raise InsufficientParticipantsError(
                "Judge response did not contain enough valid scores"
            )

        decision = decide_expert_contest_outcome(submissions, scores)
        total_latency_ms = round((time.perf_counter() - contest_start) * 1000, 1)
        logger.info(
            f"Contest {request.contestId} won by {decision.winnerId} "
            f"(runner-up {decision.runnerUpId}, tie-break {decision.tieBreaker})"
        )

        metadata = {
            "evaluationRubric": request.evaluationRubric,
            "sharedContextCount": len(request.sharedContext or []),
            "relaySummaryIncluded": bool(request.relaySummary),
        }
        if decision.tieBreaker:
            metadata["tieBreaker"] = decision.tieBreaker

        return ExpertContestResponse(
            contestId=request.contestId,
            scenario=request.scenario,
            winnerId=decision.winnerId,
            runnerUpId=decision.runnerUpId,
            judgeSummary=judge_output.judgeSummary,
            totalLatencyMs=total_latency_ms,
            submissions=submissions,
            scores=scores,
            metadata=metadata,
        )
