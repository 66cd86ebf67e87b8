"""
Pydantic models for the expert contest.

Field names follow the camelCase JSON used on the wire so request bodies and
responses round-trip without aliases.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from realtime_broker.config.constants import MIN_CONTEST_PARTICIPANTS

TieBreaker = Literal["score", "confidence", "latency"]


class TokenUsage(BaseModel):
    """Token accounting reported by the Responses API."""

    promptTokens: Optional[int] = None
    completionTokens: Optional[int] = None
    totalTokens: Optional[int] = None


class ExpertContestRoleDefinition(BaseModel):
    """One expert persona taking part in a contest."""

    id: str = Field(..., min_length=1, description="Expert identifier")
    title: str = Field(..., description="Display title used in prompts")
    instructions: str = Field(..., description="Persona instructions")
    focus: str = Field(..., description="Area of expertise")
    complianceNotes: Optional[List[str]] = Field(
        None, description="Guardrail keywords or disclaimers the expert must include"
    )


class ExpertContestRequest(BaseModel):
    """Body of POST /api/expertContest."""

    contestId: str
    scenario: str
    language: str
    userPrompt: str
    evaluationRubric: str
    relaySummary: Optional[str] = None
    sharedContext: Optional[List[str]] = None
    experts: List[ExpertContestRoleDefinition]
    metadata: Optional[Dict[str, object]] = None

    @field_validator("contestId", "scenario", "language", "userPrompt", "evaluationRubric")
    def validate_required_text(cls, v, info):
        """Required text fields must not be blank."""
        if not v or not v.strip():
            raise ValueError(f"Missing or invalid field: {info.field_name}")
        return v

    @field_validator("experts")
    def validate_experts(cls, v):
        """A contest needs at least two experts."""
        if len(v) < MIN_CONTEST_PARTICIPANTS:
            raise ValueError("At least two experts are required")
        return v


class ExpertContestSubmission(BaseModel):
    """Output and latency produced by one expert."""

    expertId: str
    outputText: str
    latencyMs: float
    tokenUsage: Optional[TokenUsage] = None


class ExpertPanelScore(BaseModel):
    """A judge's evaluation of one expert's submission."""

    expertId: str
    totalScore: float
    confidence: float
    rationale: str
    categoryBreakdown: Optional[Dict[str, float]] = None


class ExpertContestDecision(BaseModel):
    """Winner and runner-up with the criterion that separated them."""

    winnerId: str
    runnerUpId: str
    tieBreaker: Optional[TieBreaker] = None


class JudgePanelOutput(BaseModel):
    """Structured output expected from the judge panel model."""

    judgeSummary: str
    scores: List[ExpertPanelScore] = Field(..., min_length=MIN_CONTEST_PARTICIPANTS)


class ExpertContestResponse(BaseModel):
    contestId: str
    scenario: str
    winnerId: str
    runnerUpId: str
    judgeSummary: str
    totalLatencyMs: float
    submissions: List[ExpertContestSubmission]
    scores: List[ExpertPanelScore]
    metadata: Dict[str, object] = Field(default_factory=dict)
