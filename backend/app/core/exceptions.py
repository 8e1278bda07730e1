"""
リレー処理で発生する例外
クライアントへは汎用メッセージのみ返し、詳細はサーバーログにのみ残す
"""


class ChatRelayError(Exception):
    """リレー処理の基底例外"""

    status_code: int = 500
    public_message: str = "Internal server error"


class InvalidInputError(ChatRelayError):
    """会話履歴の形式が不正（クライアント側の誤り）"""

    status_code = 400
    public_message = "Invalid input"


class UpstreamError(ChatRelayError):
    """上流プロバイダ呼び出しの失敗（到達不能・非2xx・不正なレスポンス）"""

    status_code = 500
    public_message = "Failed to fetch response from upstream provider"
