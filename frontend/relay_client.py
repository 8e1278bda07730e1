"""
リレーサービス (/api/chat) のクライアント
"""

import logging

import requests
from pydantic import ValidationError

from schema import ChatRequest, ChatResponse


logger = logging.getLogger(__name__)

GENERIC_ERROR = "Failed to get a reply from the chat relay"


class RelayError(Exception):
    """ユーザーに表示できるメッセージを持つ送信失敗"""


class RelayClient:
    def __init__(self, base_url: str, timeout: float | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def chat(self, data: ChatRequest) -> ChatResponse:
        try:
            resp = requests.post(
                self.base_url + "/api/chat",
                headers={"Content-Type": "application/json"},
                json=data.model_dump(mode="json", exclude_none=True),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"relay unreachable: {e}")
            raise RelayError(GENERIC_ERROR) from e

        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            logger.error(f"relay returned {resp.status_code}: {resp.text}")
            raise RelayError(_error_message(resp)) from e

        try:
            return ChatResponse.model_validate(resp.json())
        except (ValidationError, ValueError) as e:
            logger.error(f"malformed relay response: {e}")
            raise RelayError(GENERIC_ERROR) from e


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return GENERIC_ERROR
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return GENERIC_ERROR
