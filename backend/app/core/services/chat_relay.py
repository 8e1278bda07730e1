"""
チャットリレーモジュール
検証済みの会話履歴に認証情報を付与して上流の補完APIへ転送し、
choices / usage をそのまま返す
"""

import logging
from typing import Any

import httpx
import openai
from openai import AsyncOpenAI

from ..config import Settings
from ..exceptions import UpstreamError
from ...models.schemas import ChatMessage


logger = logging.getLogger(__name__)


class ChatRelay:
    """チャットリレークラス
    リクエストごとの状態は持たず、起動時に作成した上流クライアントを共有する
    """

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None):
        self.settings = settings
        self.client: AsyncOpenAI | None = client

    @property
    def ready(self) -> bool:
        return self.client is not None

    async def initialize(self, http_client: httpx.AsyncClient | None = None) -> None:
        """上流クライアントを初期化
        APIキーが無い場合はクライアントを作らず、リクエスト時に UpstreamError とする
        Args:
            http_client: 上流との通信に使うHTTPクライアント。未指定ならSDK既定
        """
        if self.client is not None:
            return

        api_key = self.settings.openai_api_key
        if api_key is None or not api_key.get_secret_value():
            logger.warning("OPENAI_API_KEY が未設定のため上流クライアントを作成しません")
            return

        # リトライなし・タイムアウトはトランスポート既定値のまま
        self.client = AsyncOpenAI(
            api_key=api_key.get_secret_value(),
            base_url=self.settings.openai_base_url,
            default_headers=self.settings.upstream_headers,
            max_retries=0,
            http_client=http_client,
        )
        logger.info(f"上流クライアントを初期化しました: {self.settings.openai_base_url}")

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
            self.client = None

    async def complete(
        self, messages: list[ChatMessage], model: str | None = None
    ) -> dict[str, Any]:
        """会話履歴を上流へ転送して応答を取得
        Args:
            messages: 検証済みの会話履歴（全件）
            model: 使用するモデル。未指定なら既定モデル

        Returns:
            上流レスポンスの choices と usage

        Raises:
            UpstreamError: 上流に到達できない、非2xx、レスポンスが不正な場合
        """
        if self.client is None:
            logger.error("上流クライアントが初期化されていません")
            raise UpstreamError("upstream client is not initialized")

        used_model = model or self.settings.default_model
        logger.info(f"チャット転送開始: messages={len(messages)} model={used_model}")

        try:
            raw = await self.client.chat.completions.with_raw_response.create(
                model=used_model,
                messages=[m.model_dump() for m in messages],
            )
            body = raw.http_response.json()
        except openai.APIStatusError as e:
            logger.error(
                f"上流プロバイダがエラーを返しました: status={e.status_code} body={e.body}"
            )
            raise UpstreamError(f"upstream returned {e.status_code}") from e
        except openai.APIError as e:
            logger.error(f"上流プロバイダへの接続に失敗しました: {e}")
            raise UpstreamError("upstream unreachable") from e
        except ValueError as e:
            logger.error(f"上流レスポンスのJSON解析に失敗しました: {e}")
            raise UpstreamError("malformed upstream body") from e

        if (
            not isinstance(body, dict)
            or not isinstance(body.get("choices"), list)
            or not all(isinstance(c, dict) for c in body["choices"])
        ):
            logger.error(f"上流レスポンスに choices がありません: {body!r}")
            raise UpstreamError("malformed upstream body")

        usage = body.get("usage")
        if usage is not None and not isinstance(usage, dict):
            logger.error(f"上流レスポンスの usage が不正です: {usage!r}")
            raise UpstreamError("malformed upstream body")

        logger.info(
            "チャット転送完了: "
            f"prompt_tokens={(usage or {}).get('prompt_tokens')} "
            f"completion_tokens={(usage or {}).get('completion_tokens')}"
        )
        return {"choices": body["choices"], "usage": usage}
