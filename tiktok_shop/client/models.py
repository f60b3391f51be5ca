"""请求/响应在中间件链里流转的值对象。每个中间件返回新对象，不原地修改。"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, urlsplit, urlunsplit

QueryPairs = Tuple[Tuple[str, Any], ...]


@dataclass(frozen=True)
class Request:
    method: str
    url: str
    query: QueryPairs = ()
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    opts: Mapping[str, Any] = field(default_factory=dict)

    def with_opts(self, **opts: Any) -> "Request":
        return replace(self, opts={**self.opts, **opts})

    def with_headers(self, **headers: str) -> "Request":
        return replace(self, headers={**self.headers, **headers})

    def query_value(self, key: str) -> Any:
        """返回 query 中 key 最后一次出现的值；没有则 None。"""
        found = None
        for k, v in self.query:
            if k == key:
                found = v
        return found


@dataclass(frozen=True)
class RawResponse:
    """
    传输层的原始结果：
      - error 为 None：HTTP 往返完成（不论状态码），body 为原文或已解码的值；
      - error 不为 None：连接/超时/编解码等失败。
    """

    status: Optional[int] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, error: BaseException) -> "RawResponse":
        return cls(error=error)

    def header(self, name: str) -> Optional[str]:
        """大小写不敏感地读取响应头。"""
        lname = name.lower()
        for k, v in self.headers.items():
            if k.lower() == lname:
                return v
        return None


def as_query_pairs(query: Any) -> QueryPairs:
    """dict / list[tuple] / None 统一成有序的 (key, value) 元组。"""
    if not query:
        return ()
    items: Iterable = query.items() if isinstance(query, Mapping) else query
    return tuple((str(k), v) for k, v in items)


def split_path_query(path: str) -> Tuple[str, QueryPairs]:
    """
    "/api/orders?page=1" → ("/api/orders", (("page", "1"),))
    路径里自带的 query 挪进 query 对，才能参与签名；片段（#...）丢弃。
    """
    parts = urlsplit(path)
    if not parts.query and not parts.fragment:
        return path, ()
    bare = urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
    return bare, tuple(parse_qsl(parts.query, keep_blank_values=True))
