"""
   TikTok Shop 客户端专用异常类型。
   凭证/签名/配置/载荷错误与业务层解耦；系统错误与业务错误不抛异常，走 Err 结果。
"""

from __future__ import annotations

from typing import Iterable


class TiktokShopError(Exception):
    """Base for all TikTok Shop client errors."""


class CredentialValidationError(TiktokShopError):
    """Credential is missing a required field or a field has the wrong type."""

    def __init__(self, violations: Iterable) -> None:
        # violations: list[tiktok_shop.client.credential.Violation]
        self.violations = list(violations)
        detail = "; ".join(f"{v.field}: {v.kind}" for v in self.violations)
        super().__init__(f"invalid credential: {detail}")


class SigningError(TiktokShopError):
    """Request cannot be signed (e.g. app_secret absent); it is never dispatched."""


class ConfigError(TiktokShopError):
    """Process-wide configuration is unusable (e.g. response handler path)."""


class PayloadEncodeError(TiktokShopError):
    """Request body cannot be serialized to JSON."""


class PayloadDecodeError(TiktokShopError):
    """Response declared JSON but could not be parsed."""
