"""
チャットセッション（メモリ内のみ、ページ再読み込みで消える）

状態は IDLE -> SENDING -> IDLE の順に遷移し、送信中は次の送信とモデル変更を受け付けない。
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import Callable

from pricing import PRICE_TABLE, PriceTable
from relay_client import RelayError
from schema import ChatMessage, ChatRequest, ChatResponse


logger = logging.getLogger(__name__)

Sender = Callable[[ChatRequest], ChatResponse]


class SessionState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"


class ChatSession:
    def __init__(
        self,
        send: Sender,
        model: str,
        price_table: PriceTable = PRICE_TABLE,
    ):
        self._send = send
        self._messages: list[ChatMessage] = []
        self.model = model
        self.price_table = price_table
        self.state = SessionState.IDLE
        self.error: str | None = None
        self.current_cost = Decimal("0")
        self.total_cost = Decimal("0")

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def busy(self) -> bool:
        return self.state is SessionState.SENDING

    def select_model(self, model: str) -> bool:
        """次の送信から使うモデルを変更（送信中は無効、履歴は書き換えない）"""
        if self.busy:
            return False
        self.model = model
        return True

    def submit(self, text: str) -> bool:
        """ユーザーのメッセージを追加し、会話履歴全体をリレーへ送信
        Returns:
            送信した場合 True。空文字・空白のみ・送信中の場合は無視して False
        """
        if not text.strip() or self.busy:
            return False

        self._messages.append(ChatMessage(role="user", content=text))
        self.state = SessionState.SENDING
        self.error = None
        model = self.model

        try:
            response = self._send(
                ChatRequest(messages=list(self._messages), model=model)
            )
        except RelayError as e:
            # ユーザーのメッセージは残す（ロールバックしない）
            logger.warning(f"submission failed: {e}")
            self.error = str(e)
        else:
            reply = response.choices[0].message.content
            self._messages.append(ChatMessage(role="assistant", content=reply))
            self.current_cost = self.price_table.cost(model, response.usage)
            self.total_cost += self.current_cost
        finally:
            self.state = SessionState.IDLE
        return True
