import os
from contextlib import asynccontextmanager
from typing import Any

import pytest
from fastapi.testclient import TestClient

# テスト時は先に最低限の環境変数を設定（app.main を import する前に行う）
os.environ.setdefault("DEBUG", "true")


UPSTREAM_CHOICES = [
    {
        "index": 0,
        "message": {"role": "assistant", "content": "## こんにちは\n- 元気です"},
        "finish_reason": "stop",
    }
]
UPSTREAM_USAGE = {"prompt_tokens": 1000, "completion_tokens": 500, "total_tokens": 1500}


class FakeChatRelay:
    """外部依存(OpenAI)を使わないテスト用スタブ"""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls: list[tuple[list[Any], str | None]] = []

    @property
    def ready(self) -> bool:
        return True

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def complete(self, messages, model=None) -> dict[str, Any]:
        self.calls.append((messages, model))
        if self.error is not None:
            raise self.error
        return {"choices": UPSTREAM_CHOICES, "usage": UPSTREAM_USAGE}


@asynccontextmanager
async def dummy_lifespan(app):
    # 起動時初期化を無効化
    yield


@pytest.fixture()
def test_settings():
    from app.core.config import Settings

    return Settings(debug=True, openai_api_key="sk-test-secret")


@pytest.fixture()
def fake_relay() -> FakeChatRelay:
    return FakeChatRelay()


@pytest.fixture()
def app(monkeypatch, test_settings, fake_relay):
    # 起動時の実初期化を無効化
    import app.main as main_mod

    monkeypatch.setattr(main_mod, "lifespan", dummy_lifespan)
    from app.main import create_app

    application = create_app(test_settings)

    # 依存関係をスタブに差し替え
    from app.core.web.dependencies import get_chat_relay

    application.dependency_overrides[get_chat_relay] = lambda: fake_relay

    return application


@pytest.fixture()
def client(app):
    return TestClient(app)
