"""
メッセージ表示用の変換（副作用なし）
"""

from dataclasses import dataclass

from schema import ChatMessage


# これらのロールの本文はMarkdown（見出し・リスト・コード）として表示する
MARKDOWN_ROLES = frozenset({"user", "assistant"})


@dataclass(frozen=True)
class RenderedMessage:
    role: str
    label: str
    body: str
    markdown: bool


def render_message(message: ChatMessage) -> RenderedMessage:
    """メッセージを表示用に変換
    user / assistant 以外（system など）は書式を解釈せずプレーンテキストで表示する
    """
    return RenderedMessage(
        role=message.role,
        label=f"**{message.role}:**",
        body=message.content,
        markdown=message.role in MARKDOWN_ROLES,
    )


def format_cost(cost) -> str:
    return f"${cost:.6f}"


MODEL_LABELS = {
    "gpt-4": "GPT-4💸💸",
    "o1-preview": "GPT-o1💸",
    "gpt-4o-2024-08-06": "GPT-4o",
    "gpt-4o-mini": "GPT-4o-mini",
}


def model_options(current: str) -> dict[str, str]:
    """モデル選択肢（モデルID -> 表示名）
    現在のモデルが一覧に無い場合は末尾に追加し、選択が勝手に切り替わらないようにする
    """
    options = dict(MODEL_LABELS)
    options.setdefault(current, current)
    return options
