"""
依存性注入のためのヘルパー関数
"""

from fastapi import Request

from ..config import Settings
from ..services.chat_relay import ChatRelay


def get_app_settings(request: Request) -> Settings:
    """起動時にアプリへ注入された設定を取得"""
    return request.app.state.settings


def get_chat_relay(request: Request) -> ChatRelay:
    """チャットリレーインスタンスを取得
    この関数は依存性注入のために使用されます
    """
    return request.app.state.chat_relay
