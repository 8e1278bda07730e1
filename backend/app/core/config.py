"""
設定管理モジュール
アプリケーションの設定を一元管理する
"""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    アプリケーション設定クラス
    pydantic_settingsを使用することで、環境変数から自動的に設定を読み込み、
    型チェックとバリデーションを行う
    起動時に一度だけ読み込み、以降は変更しない（frozen）
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    app_name: str = "chat relay API"
    app_version: str = "0.1.0"
    debug: bool = False

    host: str = "0.0.0.0"
    port: int = 5000

    # 上流プロバイダ設定
    openai_api_key: SecretStr | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    default_model: str = "gpt-4o-2024-08-06"
    # X-OpenAI-Data-Usage: off を付与するか
    data_usage_opt_out: bool = True

    # CORS / ホスト制限
    allowed_origins: str | None = None
    allowed_hosts: str = "localhost,127.0.0.1"

    @property
    def allowed_origins_list(self) -> list[str]:
        raw = self.allowed_origins or ""
        items = [o.strip() for o in raw.split(",") if o.strip()]
        if self.debug:
            return items or ["*"]
        # production: empty means no cross-origin access, wildcard is not allowed
        if "*" in items:
            raise ValueError("Wildcard '*' is not allowed in production")
        return items

    @property
    def allowed_hosts_list(self) -> list[str]:
        """許可するホストのリストを取得"""
        return [h.strip() for h in self.allowed_hosts.split(",") if h.strip()]

    @property
    def upstream_headers(self) -> dict[str, str]:
        """上流呼び出しに常に付与するヘッダー"""
        if self.data_usage_opt_out:
            return {"X-OpenAI-Data-Usage": "off"}
        return {}

    def model_post_init(self, __context):
        """本番環境での必須チェック"""
        if not self.debug:
            if self.openai_api_key is None or not self.openai_api_key.get_secret_value():
                raise ValueError("OPENAI_API_KEY is required in production")


@lru_cache
def get_settings() -> Settings:
    """プロセス全体で共有する設定を取得（初回のみ環境変数を読む）"""
    return Settings()
