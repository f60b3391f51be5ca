"""
中间件链：每个中间件实现 transform_request / transform_response。
出站按列表顺序执行，入站按相反顺序执行。顺序约束：
  - 签名必须在序列化之前（签的是结构化 body 对应的 JSON）；
  - 保存 body 必须在序列化覆盖 body 之前。
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Any, Callable, Mapping, Optional, Protocol, Tuple
from urllib.parse import urljoin, urlsplit

from tiktok_shop.client.errors import PayloadDecodeError
from tiktok_shop.client.models import RawResponse, Request
from tiktok_shop.client.signer import RequestSigner
from tiktok_shop.utils.serialization import decode_json, serialize_body

logger = logging.getLogger(__name__)

# 日志里需要打码的参数
REDACTED_KEYS = frozenset({"sign", "access_token", "app_secret"})


class Middleware(Protocol):
    def transform_request(self, request: Request) -> Request:
        ...

    def transform_response(self, request: Request, response: RawResponse) -> RawResponse:
        ...


class _PassThrough:
    """默认入站不做处理。"""

    def transform_response(self, request: Request, response: RawResponse) -> RawResponse:
        return response


# 1. 超时：给请求打上 timeout，入站时超过截止时间的按传输失败处理
class TimeoutMiddleware:
    def __init__(self, timeout: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.timeout = timeout
        self.clock = clock

    def transform_request(self, request: Request) -> Request:
        return request.with_opts(timeout=self.timeout, deadline=self.clock() + self.timeout)

    def transform_response(self, request: Request, response: RawResponse) -> RawResponse:
        deadline = request.opts.get("deadline")
        if response.ok and deadline is not None and self.clock() > deadline:
            return RawResponse.failure(TimeoutError(f"request exceeded {self.timeout}s"))
        return response


# 2. BaseUrl：相对路径拼到 endpoint 上；已是绝对 URL 的保持不变
class BaseUrlMiddleware(_PassThrough):
    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/") + "/"

    def transform_request(self, request: Request) -> Request:
        if urlsplit(request.url).scheme:
            return request
        return replace(request, url=urljoin(self.base_url, request.url.lstrip("/")))


# 3. Opts：注入 proxy / credential / api_name（调用方传入的 api_name 优先）
class OptsMiddleware(_PassThrough):
    def __init__(self, proxy: Optional[str], credential: Mapping[str, Any]) -> None:
        self.proxy = proxy
        self.credential = credential

    def transform_request(self, request: Request) -> Request:
        api_name = request.opts.get("api_name") or urlsplit(request.url).path
        return request.with_opts(proxy=self.proxy, credential=self.credential, api_name=api_name)


# 4. 签名
class SignRequestMiddleware(_PassThrough):
    def __init__(self, signer: RequestSigner) -> None:
        self.signer = signer

    def transform_request(self, request: Request) -> Request:
        return self.signer.sign(request, request.opts.get("credential"))


# 5. 保存序列化之前的结构化 body，供日志/排查引用
class SaveRequestBodyMiddleware(_PassThrough):
    def transform_request(self, request: Request) -> Request:
        return request.with_opts(request_body=request.body)


# 6. JSON：出站编码 body，入站按 Content-Type 解码
class JsonMiddleware:
    content_type = "application/json"

    def transform_request(self, request: Request) -> Request:
        encoded = serialize_body(request.body)
        if encoded is request.body:
            return request
        return replace(request.with_headers(**{"Content-Type": self.content_type}), body=encoded)

    def transform_response(self, request: Request, response: RawResponse) -> RawResponse:
        if not response.ok or not isinstance(response.body, (str, bytes, bytearray)):
            return response
        if "json" not in (response.header("Content-Type") or "").lower():
            return response
        if not response.body:
            return response
        try:
            decoded = decode_json(response.body)
        except PayloadDecodeError as e:
            return RawResponse(status=response.status, headers=response.headers, body=response.body, error=e)
        return RawResponse(status=response.status, headers=response.headers, body=decoded)


# 7. 观测日志：DEBUG 级别，sign / access_token 打码，不输出 secret
class LoggerMiddleware:
    def transform_request(self, request: Request) -> Request:
        logger.debug(
            "tiktok.http.request method=%s api=%s url=%s query=%s",
            request.method, request.opts.get("api_name"), request.url, redact_query(request.query),
        )
        return request.with_opts(started_at=time.perf_counter())

    def transform_response(self, request: Request, response: RawResponse) -> RawResponse:
        started = request.opts.get("started_at")
        latency_ms = int((time.perf_counter() - started) * 1000) if started is not None else None
        if response.ok:
            logger.debug(
                "tiktok.http.response api=%s status=%s latency_ms=%s",
                request.opts.get("api_name"), response.status, latency_ms,
            )
        else:
            logger.debug(
                "tiktok.http.failed api=%s latency_ms=%s err=%s",
                request.opts.get("api_name"), latency_ms, type(response.error).__name__,
            )
        return response


def redact_query(query: Tuple[Tuple[str, Any], ...]) -> list:
    return [(k, "***" if k in REDACTED_KEYS else v) for k, v in query]
