"""
Creative sandbox module: persona answers judged by a panel of model judges.

Key components:
- roles / judges: Persona and judge profiles.
- prompts: Prompt builders and the merge policy.
- aggregation: Averages judge scores and separates the top two candidates.
- runner: Single and parallel runs against the Responses API.
- event_log: JSON lines record of every run.
"""

from realtime_broker.creative.aggregation import aggregate_judge_scores
from realtime_broker.creative.event_log import CreativeEventLog
from realtime_broker.creative.runner import CreativeSandboxRunner

__all__ = ["aggregate_judge_scores", "CreativeEventLog", "CreativeSandboxRunner"]
