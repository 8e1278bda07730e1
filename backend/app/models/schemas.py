"""
APIスキーマ定義
FastAPIのリクエスト/レスポンスモデルの定義
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr


__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "ErrorResponse",
    "HealthResponse",
]


class ChatMessage(BaseModel):
    """会話履歴の1メッセージ（追加後は変更しない）"""

    model_config = ConfigDict(frozen=True)

    role: StrictStr = Field(
        ..., min_length=1, description="発言者 (user / assistant / system)"
    )
    content: StrictStr = Field(..., min_length=1, description="メッセージ本文")


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(
        ..., min_length=1, description="これまでの会話履歴（全件）"
    )
    model: StrictStr | None = Field(
        None, description="使用するモデル。未指定なら既定モデル"
    )


class ChatResponse(BaseModel):
    """上流の choices / usage をそのまま返す"""

    choices: list[dict[str, Any]] = Field(..., description="候補となる応答")
    usage: dict[str, Any] | None = Field(None, description="トークン使用量")


class ErrorResponse(BaseModel):
    error: str = Field(..., description="エラーメッセージ")


class HealthResponse(BaseModel):
    status: str = Field(..., description="サービス状態")
    version: str = Field(..., description="APIバージョン")
    timestamp: str = Field(..., description="レスポンス時刻")
