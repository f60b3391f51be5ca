"""
TikTok Shop 请求签名：
  - 每次调用取新的 timestamp（秒）；
  - 签名串 = secret + path + 按 key 升序拼接的 key+value（排除 sign/access_token）[+ JSON body] + secret；
  - sign = hex(HMAC-SHA256(secret, 签名串))；
  - app_key / timestamp / sign 写入 query，body 不动，留给后面的 JSON 中间件序列化。
"""

from __future__ import annotations

import hashlib
import hmac
import time
from dataclasses import replace
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple
from urllib.parse import urlsplit

from tiktok_shop.client.errors import PayloadEncodeError, SigningError
from tiktok_shop.client.models import QueryPairs, Request
from tiktok_shop.utils.serialization import serialize_body

# 不参与签名的参数
EXCLUDED_KEYS = frozenset({"sign", "access_token"})
# 由签名器写入的参数，调用方传入的同名参数会被替换
INJECTED_KEYS = frozenset({"app_key", "timestamp", "sign"})


def build_canonical_string(
    path: str,
    params: Iterable[Tuple[str, Any]],
    secret: str,
    body: Optional[str] = None,
) -> str:
    """纯函数：相同的 path/params/body/secret 永远得到相同的签名串。"""
    pairs = [(k, v) for k, v in params if k not in EXCLUDED_KEYS and v is not None]
    # sorted 是稳定排序，同名 key 保持原有先后
    pairs.sort(key=lambda kv: kv[0])
    joined = "".join(f"{k}{v}" for k, v in pairs)
    return f"{secret}{path}{joined}{body or ''}{secret}"


def compute_sign(secret: str, canonical: str) -> str:
    return hmac.new(secret.encode("utf-8"), canonical.encode("utf-8"), hashlib.sha256).hexdigest()


class RequestSigner:
    """给 Request 注入 app_key / timestamp / sign。clock 可注入，便于测试固定时间戳。"""

    def __init__(self, *, sign_body: bool = False, clock: Callable[[], float] = time.time) -> None:
        self.sign_body = sign_body
        self.clock = clock

    def sign(self, request: Request, credential: Optional[Mapping[str, Any]]) -> Request:
        credential = credential or {}
        secret = credential.get("app_secret")
        app_key = credential.get("app_key")
        # 没有 secret 宁可失败也不发未签名请求
        if not secret:
            raise SigningError("app_secret is missing; refusing to send unsigned request")
        if not app_key:
            raise SigningError("app_key is missing; refusing to send unsigned request")

        timestamp = int(self.clock())
        query = self._base_query(request.query, credential)
        query += (("app_key", app_key), ("timestamp", timestamp))

        body = _body_text(serialize_body(request.body)) if self.sign_body else None
        canonical = build_canonical_string(urlsplit(request.url).path, query, secret, body)
        query += (("sign", compute_sign(secret, canonical)),)

        return replace(request, query=query)

    @staticmethod
    def _base_query(query: QueryPairs, credential: Mapping[str, Any]) -> QueryPairs:
        # requests 会丢掉值为 None 的参数，签名时也必须丢掉
        pairs = tuple((k, v) for k, v in query if k not in INJECTED_KEYS and v is not None)
        keys = {k for k, _ in pairs}
        extra = tuple(
            (name, credential[name])
            for name in ("shop_id", "access_token")
            if credential.get(name) and name not in keys
        )
        return pairs + extra


def _body_text(body: Any) -> Optional[str]:
    # bytes 按 UTF-8 拼进签名串，和线上发出的字节一致
    if isinstance(body, (bytes, bytearray)):
        try:
            return bytes(body).decode("utf-8")
        except UnicodeDecodeError as e:
            raise PayloadEncodeError("body bytes are not valid UTF-8; cannot sign") from e
    return body
