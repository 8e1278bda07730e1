"""
FastAPIアプリケーションのメインエントリーポイント
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from zoneinfo import ZoneInfo

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .api import router as api_router
from .core.config import Settings, get_settings
from .core.exceptions import ChatRelayError, InvalidInputError
from .core.services.chat_relay import ChatRelay
from .core.web.dependencies import get_app_settings, get_chat_relay
from .models.schemas import HealthResponse

# タイムゾーン設定
JST = ZoneInfo("Asia/Tokyo")

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """ロギング設定"""
    logging.basicConfig(
        level=logging.INFO if not settings.debug else logging.DEBUG,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """アプリケーションのライフサイクル管理
    起動時に上流クライアントを初期化し、終了時にクローズする
    """

    logger.info("アプリケーションを起動中...")
    relay: ChatRelay = app.state.chat_relay
    try:
        await relay.initialize()
        logger.info("チャットリレーの初期化が完了しました")
    except Exception as e:
        logger.error(f"チャットリレーの初期化に失敗しました: {e}")
        raise

    yield

    logger.info("アプリケーション終了中...")
    await relay.close()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """セキュリティヘッダーを追加するミドルウェア"""

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        # 基本的なセキュリティヘッダー
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # 本番環境のみの追加ヘッダー
        if not self.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


async def invalid_input_handler(request: Request, exc: Exception) -> JSONResponse:
    """スキーマ検証エラーを InvalidInputError に変換する（400と汎用メッセージのみ返す）"""
    logger.info(f"不正な入力を拒否しました: {request.url.path}: {exc}")
    return await chat_relay_error_handler(request, InvalidInputError(str(exc)))


async def chat_relay_error_handler(
    request: Request, exc: ChatRelayError
) -> JSONResponse:
    """リレーエラーは詳細を返さず、状態コードと汎用メッセージのみ返す"""
    logger.warning(f"リクエスト失敗: {request.url.path}: {type(exc).__name__}")
    return JSONResponse(
        status_code=exc.status_code, content={"error": exc.public_message}
    )


def create_app(
    app_settings: Settings | None = None, relay: ChatRelay | None = None
) -> FastAPI:
    """FastAPIアプリケーションを作成
    Args:
        app_settings: 起動時に注入する設定。未指定なら環境変数から読み込む
        relay: 使用するチャットリレー。未指定なら設定から作成する

    Returns:
        設定済みのFastAPIアプリケーション
    """
    app_settings = app_settings or get_settings()
    configure_logging(app_settings)

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        description="LLM補完APIへのチャットリレー",
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.chat_relay = relay or ChatRelay(app_settings)

    # CORS設定
    if app_settings.debug:
        # デバッグ時は全オリジンを許可
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=".*",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        # 本番は許可リストのみ
        app.add_middleware(
            CORSMiddleware,
            allow_origins=app_settings.allowed_origins_list,
            allow_credentials=True,
            allow_methods=["POST", "GET"],
            allow_headers=["*"],
        )

    # セキュリティヘッダー（全環境で適用）
    app.add_middleware(SecurityHeadersMiddleware, debug=app_settings.debug)

    # セキュリティ設定
    if not app_settings.debug:
        app.add_middleware(
            TrustedHostMiddleware, allowed_hosts=app_settings.allowed_hosts_list
        )

    app.add_exception_handler(RequestValidationError, invalid_input_handler)
    app.add_exception_handler(ChatRelayError, chat_relay_error_handler)

    app.include_router(api_router, prefix="/api")

    @app.get("/", response_model=HealthResponse)
    async def root(settings: Settings = Depends(get_app_settings)):
        """ルートエンドポイント（ヘルスチェック）"""
        return HealthResponse(
            status="healthy",
            version=settings.app_version,
            timestamp=datetime.now(JST).isoformat(),
        )

    @app.get("/health", response_model=HealthResponse)
    async def health_check(
        settings: Settings = Depends(get_app_settings),
        relay: ChatRelay = Depends(get_chat_relay),
    ):
        """詳細なヘルスチェック"""
        return HealthResponse(
            status="healthy" if relay.ready else "degraded",
            version=settings.app_version,
            timestamp=datetime.now(JST).isoformat(),
        )

    return app


def main() -> None:
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
