"""
Prompt builders and merge policy for the creative sandbox.
"""

import random
from typing import List, Optional, Sequence

from realtime_broker.config.constants import EMPTY_CONTEXT_PLACEHOLDER
from realtime_broker.creative.judges import CreativeJudgeProfile
from realtime_broker.creative.roles import CreativeRoleProfile
from realtime_broker.models.creative import (
    CandidateAverageScore,
    CreativePromptPayload,
    MergeDecision,
    ParallelCandidate,
)

MERGE_SCORE_GAP_THRESHOLD = 0.5
MERGE_RUNNER_MIN_SCORE = 8.0

JUDGE_SYSTEM_PROMPT = "あなたは採点専用の審査員です。出力はJSONのみ。"

MERGE_SYSTEM_PROMPT = "あなたは編集者です。指示に従い、短く統合した回答だけを返してください。"


def build_creative_user_prompt(payload: CreativePromptPayload) -> str:
    context = (payload.contextHint or "").strip() or EMPTY_CONTEXT_PLACEHOLDER
    return "\n".join(
        [
            f"ロール: {payload.role}",
            f"ユーザー質問: {payload.userPrompt.strip()}",
            f"補足情報: {context}",
            "回答は最大4行で表現し、必要なら箇条書きを使う。",
        ]
    )


def create_shuffled_indices(count: int, rng: Optional[random.Random] = None) -> List[int]:
    """Random permutation of ``range(count)`` so judges see candidates in different orders."""
    indices = list(range(count))
    (rng or random).shuffle(indices)
    return indices


def build_judge_prompt(
    judge: CreativeJudgeProfile,
    profile: CreativeRoleProfile,
    payload: CreativePromptPayload,
    candidates: Sequence[ParallelCandidate],
    shuffled_indices: Sequence[int],
) -> str:
    blocks = "\n\n".join(
        f"提示{order} (ID: {candidates[index].candidateId}, "
        f"latency={candidates[index].latencyMs}ms):\n{candidates[index].text}"
        for order, index in enumerate(shuffled_indices, start=1)
    )
    return (
        f"あなたは {judge.label} です。フォーカス: {judge.focus}。{judge.instructions}\n\n"
        f"質問: {payload.userPrompt}\nロール: {profile.label}\n"
        f"共有ルーブリック: {profile.evaluation_rubric}\n\n"
        f"候補一覧 (順番は毎回ランダムです):\n{blocks}\n\n"
        "タスク:\n"
        "- 各候補に0-10点でスコアを付け、短い理由を示す。\n"
        "- JSONのみで出力し、candidateScores配列に {candidateId, score, rationale} を列挙する。\n"
        "- judgeId には自分のIDを入れる。notes には一言コメントを書く。\n"
        "- runner-up を決めたり回答を生成したりはしない。採点のみ。"
    )


def evaluate_merge_decision(
    averages: Sequence[CandidateAverageScore],
    winner_id: str,
    runner_up_id: Optional[str],
    score_gap: Optional[float],
    gap_threshold: float = MERGE_SCORE_GAP_THRESHOLD,
    min_runner_score: float = MERGE_RUNNER_MIN_SCORE,
) -> MergeDecision:
    """
    Decide whether the runner-up is close and strong enough to merge into the winner.
    """
    if not runner_up_id:
        return MergeDecision(shouldMerge=False, reason="Runner-up が存在しないためマージ不可。")

    by_id = {item.candidateId: item for item in averages}
    winner_score = by_id.get(winner_id)
    runner_score = by_id.get(runner_up_id)
    if winner_score is None or runner_score is None:
        return MergeDecision(shouldMerge=False, reason="スコア情報が不足しているためマージ不可。")

    if score_gap is None or score_gap >= gap_threshold:
        gap_text = "N/A" if score_gap is None else f"{score_gap}"
        return MergeDecision(
            shouldMerge=False,
            reason=f"平均差 {gap_text} がしきい値 {gap_threshold} 以上のため勝者のみ採用。",
        )

    if runner_score.average < min_runner_score:
        return MergeDecision(
            shouldMerge=False,
            reason=(
                f"Runner-up 平均 {runner_score.average:.2f} が基準 {min_runner_score} "
                "を下回るため勝者のみ採用。"
            ),
        )

    return MergeDecision(
        shouldMerge=True,
        reason=(
            f"平均差 {score_gap:.2f} < {gap_threshold} 且つ Runner-up 平均 "
            f"{runner_score.average:.2f} ≥ {min_runner_score} のためマージ実施。"
        ),
    )


def build_merge_prompt(
    profile: CreativeRoleProfile,
    payload: CreativePromptPayload,
    winner_text: str,
    runner_text: str,
) -> str:
    return (
        f"ロール: {profile.label}\n質問: {payload.userPrompt}\n"
        "目的: 勝者回答の骨格を維持しつつ、Runner-up が提供したユニークな洞察を1行だけ追加して品質を底上げする。\n"
        "ルール: できるだけ短く答える/長文にしない。勝者文のトーンを維持し、Runner-up の要素は重複を避ける。\n"
        "出力は最大2段落or4行まで。JSONにせず生テキストで返す。\n\n"
        f"勝者テキスト:\n{winner_text}\n\nRunner-up テキスト:\n{runner_text}\n\n"
        "統合方針:\n- 勝者の骨格は残す\n- Runner-up の唯一の強みを1行で吸収\n- 余分な前置きは禁止"
    )
