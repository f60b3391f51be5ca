from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any
import json
import math
import uuid

from tiktok_shop.client.errors import PayloadDecodeError, PayloadEncodeError


def to_jsonable(value: Any):
    """
    Recursively convert arbitrary Python values into JSON-serializable primitives.
    """
    if isinstance(value, Decimal):
        f = float(value)
        if math.isnan(f) or math.isinf(f):
            return None
        return f
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (list, tuple, set)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
    return value


def encode_json(value: Any) -> str:
    """
    请求体编码成 JSON 字符串（紧凑格式）。
    签名串里的 body 与真正发出去的 body 都走这里，保证逐字节一致。
    """
    try:
        return json.dumps(to_jsonable(value), ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise PayloadEncodeError(f"body is not JSON serializable: {e}") from e


def decode_json(text: Any) -> Any:
    if isinstance(text, (bytes, bytearray)):
        text = text.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except ValueError as e:
        snippet = (text or "")[:300]  # 截断，避免日志/异常过大
        raise PayloadDecodeError(f"non-JSON response: {snippet}") from e


def serialize_body(body: Any) -> Any:
    """
    出站 body 的唯一编码入口：None 原样返回；str / bytes 视为已编码，不再动；
    其余走 encode_json。签名和 JSON 中间件都调它。
    """
    if body is None or isinstance(body, (str, bytes, bytearray)):
        return body
    return encode_json(body)
