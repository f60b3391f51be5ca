"""
TikTok Shop 客户端：签名后发请求，并把平台响应归一成 Ok / Err。

    from tiktok_shop import new, get, post, Ok

    result = new(credential={"app_key": "...", "app_secret": "..."})
    if isinstance(result, Ok):
        client = result.value
        client.get("/api/orders/search", query={"shop_id": "123"})
        post(client, "/api/products/search", {"page_size": 20})

凭证默认取自环境变量（TIKTOK_SHOP_APP_KEY / TIKTOK_SHOP_APP_SECRET ...），
new(credential=...) 传入的字段逐个覆盖默认值。
代理、超时、自定义响应处理器见 core/config.py。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from tiktok_shop.client.adapter import RequestsAdapter
from tiktok_shop.client.credential import merge_credentials, validate
from tiktok_shop.client.errors import CredentialValidationError, SigningError, TiktokShopError
from tiktok_shop.client.middleware import (
    BaseUrlMiddleware,
    JsonMiddleware,
    LoggerMiddleware,
    Middleware,
    OptsMiddleware,
    SaveRequestBodyMiddleware,
    SignRequestMiddleware,
    TimeoutMiddleware,
)
from tiktok_shop.client.models import RawResponse, Request, as_query_pairs, split_path_query
from tiktok_shop.client.result import Err, Ok, Result
from tiktok_shop.client.signer import RequestSigner
from tiktok_shop.core.config import ClientConfig, load_config

logger = logging.getLogger(__name__)

SIGNING_ERROR = "signing_error"


@dataclass(frozen=True)
class Client:
    """不可变：构造后没有可变状态，可在多个线程间复用。"""

    endpoint: str
    timeout: float
    proxy: Optional[str]
    credential: Mapping[str, Any]
    middlewares: Tuple[Middleware, ...]
    adapter: Any
    response_handler: Any

    # ---------- Public ----------
    def get(self, path: str, *, query: Any = None, body: Any = None, **opts: Any) -> Result:
        """
        get("/api/orders/search")
        get("/api/orders/search", query={"shop_id": "123"})
        """
        return self.request("GET", path, query=query, body=body, **opts)

    def post(self, path: str, body: Any, *, query: Any = None, **opts: Any) -> Result:
        """
        post("/api/products/search", {"page_size": 20})
        post("/api/products/search", {"page_size": 20}, query={"shop_id": "123"})
        """
        return self.request("POST", path, query=query, body=body, **opts)

    # ---------- Internals ----------
    def request(self, method: str, path: str, *, query: Any = None, body: Any = None, **opts: Any) -> Result:
        """把请求按顺序推过中间件链 → 传输层 → 逆序中间件 → 响应处理器。"""
        url, path_query = split_path_query(path)
        request = Request(
            method=method.upper(),
            url=url,
            query=path_query + as_query_pairs(query),
            body=body,
            opts={"api_name": url, **opts},
        )

        try:
            for middleware in self.middlewares:
                request = middleware.transform_request(request)
        except SigningError as e:
            # 签不了名就不发，直接返回给调用方
            return Err({"type": SIGNING_ERROR, "message": str(e)})
        except TiktokShopError as e:
            # 例如 body 无法序列化：按传输失败交给响应处理器
            return self.response_handler.handle_response(RawResponse.failure(e))

        response = self.adapter.call(request)
        for middleware in reversed(self.middlewares):
            response = middleware.transform_response(request, response)

        return self.response_handler.handle_response(response)


def build_middlewares(
    config: ClientConfig,
    credential: Mapping[str, Any],
    endpoint: str,
    signer: Optional[RequestSigner] = None,
) -> Tuple[Middleware, ...]:
    """固定顺序的中间件链，顺序不可调整（见 middleware.py 说明）。"""
    return (
        TimeoutMiddleware(config.timeout),
        BaseUrlMiddleware(endpoint),
        OptsMiddleware(config.proxy, credential),
        SignRequestMiddleware(signer or RequestSigner(sign_body=config.sign_body)),
        SaveRequestBodyMiddleware(),
        JsonMiddleware(),
        LoggerMiddleware(),
    )


def new(
    credential: Optional[Mapping[str, Any]] = None,
    endpoint: Optional[str] = None,
    *,
    config: Optional[ClientConfig] = None,
    adapter: Any = None,
    signer: Optional[RequestSigner] = None,
) -> Result:
    """
    构造 Client。
      - credential：部分覆盖，按字段合并到默认凭证之上；
      - endpoint：自定义 API 域名，默认 https://open-api.tiktokglobalshop.com；
      - config：显式传入 ClientConfig，不传则从环境读取一次；
      - adapter：替换默认的 requests 传输层。
    凭证校验失败返回 Err(CredentialValidationError)，不会构造出半成品 client。
    """
    config = config or load_config()
    merged = merge_credentials(config.credential, credential)

    validated = validate(merged)
    if isinstance(validated, Err):
        return Err(CredentialValidationError(validated.error))

    resolved = MappingProxyType(dict(validated.value))
    resolved_endpoint = endpoint or config.endpoint

    client = Client(
        endpoint=resolved_endpoint,
        timeout=config.timeout,
        proxy=config.proxy,
        credential=resolved,
        middlewares=build_middlewares(config, resolved, resolved_endpoint, signer),
        adapter=adapter or RequestsAdapter(recv_timeout=config.timeout),
        response_handler=config.response_handler,
    )
    logger.debug("tiktok.client.created endpoint=%s app_key=%s", resolved_endpoint, resolved.get("app_key"))
    return Ok(client)


def get(client: Client, path: str, *, query: Any = None, body: Any = None, **opts: Any) -> Result:
    return client.get(path, query=query, body=body, **opts)


def post(client: Client, path: str, body: Any, *, query: Any = None, **opts: Any) -> Result:
    return client.post(path, body, query=query, **opts)
