"""
Contest module for ranking expert answers.

Key components:
- outcome: The pure ranking function that turns submissions and judge scores into
  a winner, runner-up and tie-break reason.
- prompts: Prompt builders for experts and the judge panel.
- runner: End-to-end contest orchestration over the Responses API.

Usage examples:
```python
from realtime_broker.contest import decide_expert_contest_outcome

decision = decide_expert_contest_outcome(submissions, scores)
print(decision.winnerId, decision.runnerUpId, decision.tieBreaker)
```
"""

from realtime_broker.contest.outcome import decide_expert_contest_outcome
from realtime_broker.contest.runner import ExpertContestRunner

__all__ = ["decide_expert_contest_outcome", "ExpertContestRunner"]
