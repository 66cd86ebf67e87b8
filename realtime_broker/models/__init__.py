"""
Models module for the payloads exchanged by the realtime broker.

Key components:
- contest: Expert contest requests, submissions, judge scores and decisions.
- creative: Creative sandbox payloads, candidates, judge results and outcomes.
- realtime: Client events accepted by the relay WebSocket.
- auth: Dev token request/response and verified identity context.

Usage examples:
```python
from realtime_broker.models.contest import ExpertContestSubmission, ExpertPanelScore

submission = ExpertContestSubmission(expertId="expA", outputText="...", latencyMs=900)
score = ExpertPanelScore(expertId="expA", totalScore=8.2, confidence=0.77, rationale="...")
```
"""

from realtime_broker.models.auth import AuthContext, DevTokenRequest, DevTokenResponse
from realtime_broker.models.contest import (
    ExpertContestDecision,
    ExpertContestRequest,
    ExpertContestResponse,
    ExpertContestRoleDefinition,
    ExpertContestSubmission,
    ExpertPanelScore,
    JudgePanelOutput,
    TokenUsage,
)
from realtime_broker.models.creative import (
    AggregationOutcome,
    CandidateAverageScore,
    CreativeModelResponse,
    CreativeParallelResult,
    CreativePromptPayload,
    CreativeSingleResult,
    JudgeResult,
    JudgeScore,
    MergeDecision,
    ParallelCandidate,
)
from realtime_broker.models.realtime import (
    AudioChunkEvent,
    AudioCommitEvent,
    InterruptEvent,
    MuteEvent,
    TextMessageEvent,
    parse_client_event,
)
from realtime_broker.models.session import RelaySession, SessionRegistry
