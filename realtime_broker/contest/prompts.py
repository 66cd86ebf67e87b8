"""
Prompt builders for expert submissions and the judge panel.
"""

from typing import List, Optional

from realtime_broker.config.constants import EMPTY_CONTEXT_PLACEHOLDER
from realtime_broker.models.contest import (
    ExpertContestRequest,
    ExpertContestRoleDefinition,
    ExpertContestSubmission,
)

JUDGE_SYSTEM_PROMPT = (
    "You are the chair of an expert review board. Score each expert on relevance, "
    "depth, safety, and overall execution. Output JSON only."
)


def format_shared_context(shared_context: Optional[List[str]]) -> str:
    if not shared_context:
        return EMPTY_CONTEXT_PLACEHOLDER
    return "\n".join(f"{index}. {item}" for index, item in enumerate(shared_context, start=1))


def build_expert_system_prompt(
    request: ExpertContestRequest, expert: ExpertContestRoleDefinition
) -> str:
    compliance = ""
    if expert.complianceNotes:
        notes = "\n".join(f"- {note}" for note in expert.complianceNotes)
        compliance = f"\n# Compliance\n{notes}"
    return (
        f'You are "{expert.title}" for the {request.scenario} contest. '
        f"Focus area: {expert.focus}.\n{expert.instructions}\n"
        f"Respond in {request.language} with concise, actionable guidance.{compliance}"
    )


def build_expert_user_prompt(
    request: ExpertContestRequest, expert: ExpertContestRoleDefinition
) -> str:
    relay = request.relaySummary or EMPTY_CONTEXT_PLACEHOLDER
    return (
        f"User request: {request.userPrompt}\n\n"
        f"Relay summary: {relay}\n\n"
        f"Shared context:\n{format_shared_context(request.sharedContext)}\n\n"
        f"Evaluation rubric: {request.evaluationRubric}\n\n"
        f"Deliverable: Provide the best possible answer from the perspective of "
        f"{expert.title}. Emphasize unique expertise in {expert.focus} and avoid "
        f"referencing other experts."
    )


def build_judge_prompt(
    request: ExpertContestRequest, submissions: List[ExpertContestSubmission]
) -> str:
    blocks = "\n\n".join(
        f"Expert {index}: {submission.expertId}\n"
        f"Latency: {submission.latencyMs}ms\n"
        f"Answer:\n{submission.outputText}"
        for index, submission in enumerate(submissions, start=1)
    )
    return (
        f"Scenario: {request.scenario}\n"
        f"Language expectation: {request.language}\n"
        f"User prompt: {request.userPrompt}\n"
        f"Relay summary: {request.relaySummary or EMPTY_CONTEXT_PLACEHOLDER}\n"
        f"Shared context:\n{format_shared_context(request.sharedContext)}\n"
        f"Evaluation rubric: {request.evaluationRubric}\n\n"
        f"Submissions:\n{blocks}\n\n"
        "Instructions:\n"
        "- Score every expert on a 0-10 scale for totalScore.\n"
        "- confidence is a 0-1 float describing certainty.\n"
        "- Provide a short rationale referencing their unique insight or risks.\n"
        "- categoryBreakdown should include the keys relevance, depth, safety (0-10 each).\n"
        "- Also give a judgeSummary that compares the top entries."
    )
