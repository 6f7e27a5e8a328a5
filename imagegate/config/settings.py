"""Runtime settings."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="IMAGEGATE_", extra="ignore")

    app_name: str = "ImageGate"
    env: str = "dev"
    log_level: str = "info"
    # DEBUG 下是否打印请求正文；data URI 始终截断
    log_full_request_body: bool = False

    ark_api_url: str = "https://ark.cn-beijing.volces.com/api/v3/images/generations"
    siliconflow_api_url: str = "https://api.siliconflow.cn/v1/images/generations"
    ark_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("IMAGEGATE_ARK_API_KEY", "ARK_API_KEY"),
    )
    siliconflow_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("IMAGEGATE_SILICONFLOW_API_KEY", "SILICONFLOW_API_KEY"),
    )
    ark_default_model: str = "doubao-seedream-4-0-250828"
    siliconflow_default_model: str = "Qwen/Qwen-Image"

    upstream_timeout_seconds: float = 120.0
    upstream_max_connections: int = 100
    upstream_max_keepalive_connections: int = 20

    # 参考图以 data URI 内联，默认上限放宽到 20MB
    max_request_body_bytes: int = 20_000_000
    cors_allow_origins: str = "*"
    completion_note: str = "图像生成完成"


settings = Settings()
