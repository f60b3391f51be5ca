"""
默认传输层：基于 requests.Session 发出已签名、已序列化的 Request。
只负责一次 HTTP 往返；不重试、不限流。连接/超时等异常转成 RawResponse.failure。
任何实现了 call(request) -> RawResponse 的对象都可以替换它。
"""

from __future__ import annotations

from typing import Optional

import requests

from tiktok_shop.client.models import RawResponse, Request


class RequestsAdapter:

    def __init__(self, session: Optional[requests.Session] = None, recv_timeout: Optional[float] = None) -> None:
        self._session = session or requests.Session()
        self.recv_timeout = recv_timeout

    def call(self, request: Request) -> RawResponse:
        timeout = request.opts.get("timeout") or self.recv_timeout
        proxy = request.opts.get("proxy")
        proxies = {"http": proxy, "https": proxy} if proxy else None
        headers = {"Accept": "application/json", **request.headers}

        try:
            resp = self._session.request(
                request.method,
                request.url,
                params=list(request.query),
                data=request.body,
                headers=headers,
                timeout=timeout,
                proxies=proxies,
            )
        except requests.RequestException as e:
            # 连接/超时等异常：交给响应处理器归为 system_error
            return RawResponse.failure(e)

        return RawResponse(status=resp.status_code, headers=resp.headers, body=resp.text)

    def close(self) -> None:
        self._session.close()
