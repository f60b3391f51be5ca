"""
日志入口：库代码只用 logging.getLogger(__name__)，不碰 handler；
脚本 / 应用在启动时调一次 configure_logging()。
级别默认取 settings.LOG_LEVEL（环境变量 LOG_LEVEL 或 .env）。
"""

import logging
import sys
from typing import Optional

from tiktok_shop.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
PACKAGE_LOGGER = "tiktok_shop"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """给根 logger 装上 stdout handler 并设定级别，返回本包的 logger。"""
    resolved_level = (level or settings.LOG_LEVEL).upper()
    root_logger = logging.getLogger()

    if not root_logger.handlers:
        logging.basicConfig(
            level=resolved_level,
            format=LOG_FORMAT,
            handlers=[logging.StreamHandler(sys.stdout)],
        )
    else:
        root_logger.setLevel(resolved_level)

    return logging.getLogger(PACKAGE_LOGGER)
