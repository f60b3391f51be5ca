"""调用结果：Ok(body) / Err(payload)，调用方按类型分支即可。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Ok:
    value: Any


@dataclass(frozen=True)
class Err:
    error: Any


Result = Union[Ok, Err]
