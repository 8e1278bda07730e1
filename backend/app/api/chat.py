"""
チャットリレーのエンドポイント
"""

import logging

from fastapi import APIRouter, Depends

from ..core.services.chat_relay import ChatRelay
from ..core.web.dependencies import get_chat_relay
from ..models.schemas import ChatRequest, ChatResponse, ErrorResponse


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat(
    request: ChatRequest, relay: ChatRelay = Depends(get_chat_relay)
) -> ChatResponse:
    """会話履歴を上流プロバイダへ転送
    Args:
        request: 検証済みのチャットリクエスト
        relay: チャットリレーインスタンス

    Returns:
        上流の choices と usage

    Raises:
        UpstreamError: 上流呼び出しに失敗した場合（500 に変換される）
    """
    result = await relay.complete(request.messages, request.model)
    return ChatResponse(choices=result["choices"], usage=result["usage"])
