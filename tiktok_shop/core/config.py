# 环境变量和配置
# pydantic‑settings 读取 .env = core/config.py

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from tiktok_shop.client.errors import ConfigError


DEFAULT_ENDPOINT = "https://open-api.tiktokglobalshop.com"


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="",
        case_sensitive=False,
    )

    # ========= TikTok Shop 凭证 =========
    # app_key / app_secret 可以留空，由 new(credential=...) 传入
    TIKTOK_SHOP_APP_KEY: Optional[str] = Field(None, alias="TIKTOK_SHOP_APP_KEY")
    TIKTOK_SHOP_APP_SECRET: Optional[SecretStr] = Field(None, alias="TIKTOK_SHOP_APP_SECRET")
    TIKTOK_SHOP_ACCESS_TOKEN: Optional[SecretStr] = Field(None, alias="TIKTOK_SHOP_ACCESS_TOKEN")
    TIKTOK_SHOP_SHOP_ID: Optional[str] = Field(None, alias="TIKTOK_SHOP_SHOP_ID")

    # ========= 网络/HTTP 层 =========
    TIKTOK_SHOP_ENDPOINT: str = Field(DEFAULT_ENDPOINT, alias="TIKTOK_SHOP_ENDPOINT")
    TIKTOK_SHOP_PROXY: Optional[str] = Field(None, alias="TIKTOK_SHOP_PROXY")          # 例：http://127.0.0.1:9090
    TIKTOK_SHOP_TIMEOUT: float = Field(30, gt=0, alias="TIKTOK_SHOP_TIMEOUT")          # 秒

    # ========= 签名 / 响应处理 =========
    # 新版接口（202309+）要求把 JSON body 拼进签名串；旧版只签 path + query
    TIKTOK_SHOP_SIGN_BODY: bool = Field(False, alias="TIKTOK_SHOP_SIGN_BODY")
    # 自定义响应处理器，格式 "package.module:attr" 或 "package.module.attr"
    TIKTOK_SHOP_RESPONSE_HANDLER: Optional[str] = Field(None, alias="TIKTOK_SHOP_RESPONSE_HANDLER")

    # ========= 日志 =========
    LOG_LEVEL: str = Field("INFO", alias="LOG_LEVEL")

    def default_credential(self) -> dict:
        """把环境里的凭证拼成 dict，只保留有值的字段。兼容 SecretStr 或 str。"""
        raw = {
            "app_key": self.TIKTOK_SHOP_APP_KEY,
            "app_secret": self.TIKTOK_SHOP_APP_SECRET,
            "access_token": self.TIKTOK_SHOP_ACCESS_TOKEN,
            "shop_id": self.TIKTOK_SHOP_SHOP_ID,
        }
        out = {}
        for key, value in raw.items():
            if hasattr(value, "get_secret_value"):
                value = value.get_secret_value()
            if value is not None:
                out[key] = value
        return out


settings = Settings()  # 只从环境读取（含 .env）


@dataclass(frozen=True)
class ClientConfig:
    """
    构造 Client 时用到的进程级默认值。
    new() 读取一次后拷贝进 Client，之后 settings 再变也不影响已建好的 client。
    """

    response_handler: Any
    credential: Mapping[str, Any] = field(default_factory=dict)
    proxy: Optional[str] = None
    timeout: float = 30
    endpoint: str = DEFAULT_ENDPOINT
    sign_body: bool = False

    def __post_init__(self) -> None:
        # 冻结 credential，避免外部持有的 dict 被改后影响到 client
        object.__setattr__(self, "credential", MappingProxyType(dict(self.credential)))


def import_response_handler(path: str) -> Any:
    """
    按 dotted path 导入响应处理器。
    支持 "pkg.mod:attr" 与 "pkg.mod.attr"；若导入到的是类则无参实例化。
    """
    if ":" in path:
        module_path, _, attr = path.partition(":")
    else:
        module_path, _, attr = path.rpartition(".")
    if not module_path or not attr:
        raise ConfigError(f"invalid response handler path: {path!r}")

    try:
        module = importlib.import_module(module_path)
        handler = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ConfigError(f"cannot import response handler {path!r}: {e}") from e

    if isinstance(handler, type):
        handler = handler()
    if not callable(getattr(handler, "handle_response", None)):
        raise ConfigError(f"response handler {path!r} has no handle_response()")
    return handler


def load_config(source: Optional[Settings] = None) -> ClientConfig:
    """从 Settings 生成 ClientConfig（唯一的加载点）。"""
    from tiktok_shop.client.response import DefaultResponseHandler

    source = source or settings
    handler_path = source.TIKTOK_SHOP_RESPONSE_HANDLER
    handler = import_response_handler(handler_path) if handler_path else DefaultResponseHandler()

    return ClientConfig(
        response_handler=handler,
        credential=source.default_credential(),
        proxy=source.TIKTOK_SHOP_PROXY,
        timeout=source.TIKTOK_SHOP_TIMEOUT,
        endpoint=source.TIKTOK_SHOP_ENDPOINT,
        sign_body=source.TIKTOK_SHOP_SIGN_BODY,
    )
