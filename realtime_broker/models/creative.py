"""
Pydantic models for the creative sandbox.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from realtime_broker.models.contest import TokenUsage

CreativeRoleKey = Literal["filmCritic", "literaryCritic", "copywriter"]


class CreativePromptPayload(BaseModel):
    """Body of the creative sandbox endpoints."""

    role: CreativeRoleKey
    userPrompt: str = Field(..., min_length=1)
    contextHint: Optional[str] = None

    @field_validator("userPrompt")
    def validate_user_prompt(cls, v):
        """The prompt must contain more than whitespace."""
        if not v.strip():
            raise ValueError("userPrompt is required")
        return v


class CreativeModelResponse(BaseModel):
    text: str
    latencyMs: float
    model: str
    tokenUsage: Optional[TokenUsage] = None


class ParallelCandidate(CreativeModelResponse):
    candidateId: str


class MergedAnswer(CreativeModelResponse):
    sourceCandidateId: Optional[str] = None


class JudgeScore(BaseModel):
    candidateId: str
    score: float
    rationale: str


class JudgeResult(BaseModel):
    """Scores from a single judge."""

    judgeId: str
    focus: str = ""
    notes: str = ""
    candidateScores: List[JudgeScore]


class CandidateAverageScore(BaseModel):
    candidateId: str
    average: float
    votes: int


class AggregationOutcome(BaseModel):
    """Result of averaging judge scores and separating the top two."""

    winnerId: str
    runnerUpId: Optional[str] = None
    decisionReason: str
    averages: List[CandidateAverageScore]
    winnerAverage: float
    runnerUpAverage: Optional[float] = None
    scoreGap: Optional[float] = None


class MergeDecision(BaseModel):
    shouldMerge: bool
    reason: str


class ParallelEvaluation(BaseModel):
    winnerId: str
    runnerUpId: Optional[str] = None
    judgeSummary: str
    decisionReason: str
    totalLatencyMs: float
    rubric: str
    averages: List[CandidateAverageScore]
    judges: List[JudgeResult]
    merge: Optional[MergeDecision] = None


class CreativeSingleResult(BaseModel):
    role: CreativeRoleKey
    prompt: str
    answer: CreativeModelResponse


class CreativeParallelResult(BaseModel):
    role: CreativeRoleKey
    prompt: str
    candidates: List[ParallelCandidate]
    mergedAnswer: MergedAnswer
    evaluation: ParallelEvaluation
