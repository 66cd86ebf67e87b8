"""
Creative sandbox runner.

``run_single`` asks one persona for an answer. ``run_parallel`` fans the same
prompt out to several candidates, lets the judge panel score them concurrently,
aggregates the scores and optionally merges the runner-up into the winner.
"""

import asyncio
import logging
import random
import time
from typing import List, Optional

from openai import AsyncOpenAI

from realtime_broker.config.constants import CREATIVE_MODEL, LOGGER_NAME
from realtime_broker.creative.aggregation import aggregate_judge_scores
from realtime_broker.creative.judges import CreativeJudgeProfile, get_creative_judge_profiles
from realtime_broker.creative.prompts import (
    JUDGE_SYSTEM_PROMPT,
    MERGE_SYSTEM_PROMPT,
    build_creative_user_prompt,
    build_judge_prompt,
    build_merge_prompt,
    create_shuffled_indices,
    evaluate_merge_decision,
)
from realtime_broker.creative.roles import CreativeRoleProfile, get_creative_role_profile
from realtime_broker.errors import UpstreamError
from realtime_broker.models.creative import (
    CreativeModelResponse,
    CreativeParallelResult,
    CreativePromptPayload,
    CreativeSingleResult,
    JudgeResult,
    MergedAnswer,
    ParallelCandidate,
    ParallelEvaluation,
)
from realtime_broker.services.openai_client import (
    extract_output_text,
    map_token_usage,
    timed_text_response,
)

logger = logging.getLogger(LOGGER_NAME)

CREATIVE_PARALLEL_COUNT = 4


def create_candidate_id(index: int) -> str:
    return f"candidate_{index + 1}"


class CreativeSandboxRunner:
    """Runs creative prompts against the Responses API."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = CREATIVE_MODEL,
        parallel_count: int = CREATIVE_PARALLEL_COUNT,
        judges: Optional[List[CreativeJudgeProfile]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.client = client
        self.model = model
        self.parallel_count = parallel_count
        self.judges = judges if judges is not None else get_creative_judge_profiles()
        self.rng = rng

    async def _answer(self, profile: CreativeRoleProfile, user_prompt: str) -> CreativeModelResponse:
        response, latency_ms = await timed_text_response(
            self.client, self.model, profile.instructions, user_prompt
        )
        return CreativeModelResponse(
            text=extract_output_text(response),
            latencyMs=latency_ms,
            model=self.model,
            tokenUsage=map_token_usage(getattr(response, "usage", None)),
        )

    async def run_single(self, payload: CreativePromptPayload) -> CreativeSingleResult:
        profile = get_creative_role_profile(payload.role)
        answer = await self._answer(profile, build_creative_user_prompt(payload))
        return CreativeSingleResult(role=payload.role, prompt=payload.userPrompt, answer=answer)

    async def _candidate(
        self, index: int, profile: CreativeRoleProfile, user_prompt: str
    ) -> ParallelCandidate:
        answer = await self._answer(profile, user_prompt)
        return ParallelCandidate(candidateId=create_candidate_id(index), **answer.model_dump())

    async def _judge(
        self,
        judge: CreativeJudgeProfile,
        profile: CreativeRoleProfile,
        payload: CreativePromptPayload,
        candidates: List[ParallelCandidate],
    ) -> JudgeResult:
        order = create_shuffled_indices(len(candidates), self.rng)
        response = await self.client.responses.parse(
            model=self.model,
            input=[
                {"role": "system", "content": JUDGE_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": build_judge_prompt(judge, profile, payload, candidates, order),
                },
            ],
            text_format=JudgeResult,
        )
        parsed = getattr(response, "output_parsed", None)
        if parsed is None:
            raise UpstreamError(f"Judge {judge.id} returned no structured output")
        result = JudgeResult.model_validate(parsed, from_attributes=True)
        # The judge id and focus come from our profile, not the model
        return result.model_copy(update={"judgeId": judge.id, "focus": judge.focus})

    async def _merge(
        self,
        profile: CreativeRoleProfile,
        payload: CreativePromptPayload,
        winner: ParallelCandidate,
        runner_up: ParallelCandidate,
    ) -> CreativeModelResponse:
        response, latency_ms = await timed_text_response(
            self.client,
            self.model,
            MERGE_SYSTEM_PROMPT,
            build_merge_prompt(profile, payload, winner.text, runner_up.text),
        )
        return CreativeModelResponse(
            text=extract_output_text(response),
            latencyMs=latency_ms,
            model=self.model,
            tokenUsage=map_token_usage(getattr(response, "usage", None)),
        )

    async def run_parallel(self, payload: CreativePromptPayload) -> CreativeParallelResult:
        """
        Generate candidates, judge them and assemble the final answer.

        Raises:
            InsufficientParticipantsError: If fewer than two candidates were scored
            UpstreamError: If a judge returns unusable output
        """
        profile = get_creative_role_profile(payload.role)
        user_prompt = build_creative_user_prompt(payload)
        contest_start = time.perf_counter()

        candidates = list(
            await asyncio.gather(
                *(self._candidate(i, profile, user_prompt) for i in range(self.parallel_count))
            )
        )
        judge_results = list(
            await asyncio.gather(
                *(self._judge(judge, profile, payload, candidates) for judge in self.judges)
            )
        )

        outcome = aggregate_judge_scores(candidates, judge_results)
        by_id = {candidate.candidateId: candidate for candidate in candidates}
        winner = by_id[outcome.winnerId]
        merge = evaluate_merge_decision(
            outcome.averages, outcome.winnerId, outcome.runnerUpId, outcome.scoreGap
        )
        logger.info(
            f"Creative run for {payload.role}: winner {outcome.winnerId}, "
            f"runner-up {outcome.runnerUpId}, merge={merge.shouldMerge}"
        )

        if merge.shouldMerge and outcome.runnerUpId:
            merged = await self._merge(profile, payload, winner, by_id[outcome.runnerUpId])
            merged_answer = MergedAnswer(**merged.model_dump(), sourceCandidateId=outcome.winnerId)
        else:
            merged_answer = MergedAnswer(
                text=winner.text,
                latencyMs=winner.latencyMs,
                model=winner.model,
                tokenUsage=winner.tokenUsage,
                sourceCandidateId=outcome.winnerId,
            )

        total_latency_ms = round((time.perf_counter() - contest_start) * 1000, 1)
        judge_summary = " / ".join(
            f"{result.judgeId}: {result.notes}" for result in judge_results if result.notes
        )

        return CreativeParallelResult(
            role=payload.role,
            prompt=payload.userPrompt,
            candidates=candidates,
            mergedAnswer=merged_answer,
            evaluation=ParallelEvaluation(
                winnerId=outcome.winnerId,
                runnerUpId=outcome.runnerUpId,
                judgeSummary=judge_summary,
                decisionReason=outcome.decisionReason,
                totalLatencyMs=total_latency_ms,
                rubric=profile.evaluation_rubric,
                averages=outcome.averages,
                judges=judge_results,
                merge=merge,
            ),
        )
