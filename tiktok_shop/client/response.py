"""
响应归一化：传输层原始结果 → Ok(body) / Err(payload)。
自定义处理器只要实现 handle_response(raw) -> Result，在配置 TIKTOK_SHOP_RESPONSE_HANDLER 中指定即可。
"""

from __future__ import annotations

import logging
from typing import Mapping, Protocol

from tiktok_shop.client.models import RawResponse
from tiktok_shop.client.result import Err, Ok, Result

logger = logging.getLogger(__name__)

SYSTEM_ERROR = "system_error"


class ResponseHandler(Protocol):
    def handle_response(self, raw: RawResponse) -> Result:
        ...


class DefaultResponseHandler:
    """
    默认处理：
      1) 传输失败（连接/超时等）→ Err({"type": "system_error", "response": raw})，打一条日志；
      2) body.code == 0 → Ok(body)；
      3) 其它 code 或缺失 code → Err(body)，业务错误不打日志。
    """

    def handle_response(self, raw: RawResponse) -> Result:
        if not raw.ok:
            # 异常文本里带完整 URL（含 sign / access_token），只记类型
            logger.warning("tiktok.connection_error err=%s status=%s", type(raw.error).__name__, raw.status)
            return Err({"type": SYSTEM_ERROR, "response": raw})

        body = raw.body
        if isinstance(body, Mapping) and _is_success_code(body.get("code")):
            return Ok(body)
        return Err(body)


def _is_success_code(code) -> bool:
    # JSON 的 false 在 Python 里也 == 0，需排除
    return isinstance(code, int) and not isinstance(code, bool) and code == 0
