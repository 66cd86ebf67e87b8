"""
Judge personas that score creative sandbox candidates.
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class CreativeJudgeProfile:
    id: str
    label: str
    focus: str
    instructions: str


CREATIVE_JUDGE_PROFILES: List[CreativeJudgeProfile] = [
    CreativeJudgeProfile(
        id="judgeA",
        label="Judge A (正確さ重視)",
        focus="ファクト整合性と指示順守",
        instructions=(
            "候補文がユーザー指示に忠実か、事実や制約から逸脱していないかを主眼に採点します。"
            "短い根拠を必ず添えてください。"
        ),
    ),
    CreativeJudgeProfile(
        id="judgeB",
        label="Judge B (構成・論理重視)",
        focus="論理展開と情報構造",
        instructions=(
            "候補文の論理の筋道・段落構成・説得力を評価します。"
            "主張と根拠が噛み合っているか確認し、端的なコメントを返してください。"
        ),
    ),
    CreativeJudgeProfile(
        id="judgeC",
        label="Judge C (表現とトーン重視)",
        focus="文体の切れ味と簡潔さ",
        instructions=(
            "候補文の日本語表現、簡潔さ、創造的なフレーズを重視します。"
            "冗長さやトーンのズレがあれば減点理由に含めてください。"
        ),
    ),
]


def get_creative_judge_profiles() -> List[CreativeJudgeProfile]:
    return list(CREATIVE_JUDGE_PROFILES)
