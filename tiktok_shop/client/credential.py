"""
凭证校验（纯函数）：
  - merge_credentials：按字段合并，调用方传入的值覆盖进程级默认值；
  - validate：按 pydantic schema 校验必填/类型，返回 Ok(合并后的凭证) 或 Err(违规列表)。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, StrictStr
from pydantic import ValidationError as PydanticValidationError

from tiktok_shop.client.result import Err, Ok, Result


MISSING_FIELD = "missing_field"
TYPE_MISMATCH = "type_mismatch"

# pydantic 错误类型 → 违规类型；其余一律视为类型不符
_MISSING_ERROR_TYPES = {"missing", "string_too_short"}


class CredentialSchema(BaseModel):
    """app_key / app_secret 必填且非空；access_token / shop_id 可选。"""

    model_config = ConfigDict(extra="allow")

    app_key: StrictStr = Field(min_length=1)
    app_secret: StrictStr = Field(min_length=1)
    access_token: Optional[StrictStr] = None
    shop_id: Optional[StrictStr] = None


@dataclass(frozen=True)
class Violation:
    field: str
    kind: str        # MISSING_FIELD / TYPE_MISMATCH
    message: str = ""


def merge_credentials(
    default: Optional[Mapping[str, Any]],
    override: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    """逐字段合并：override 中非 None 的字段优先，其余取 default。"""
    merged = dict(default or {})
    for key, value in (override or {}).items():
        if value is not None:
            merged[key] = value
    return merged


def validate(
    candidate: Mapping[str, Any],
    schema: Type[BaseModel] = CredentialSchema,
) -> Result:
    """
    输入: 候选凭证 dict + schema
    输出: Ok(dict) 校验通过，schema 字段覆盖在原值之上（多余字段保留）；
          Err(list[Violation]) 有必填缺失或类型不符
    """
    # None 与缺失同义
    present = {k: v for k, v in candidate.items() if v is not None}

    try:
        model = schema.model_validate(present)
    except PydanticValidationError as e:
        return Err(_to_violations(e))

    return Ok({**present, **model.model_dump(exclude_unset=True)})


def _to_violations(exc: PydanticValidationError) -> List[Violation]:
    violations: List[Violation] = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
        kind = MISSING_FIELD if err.get("type") in _MISSING_ERROR_TYPES else TYPE_MISMATCH
        violations.append(Violation(field=field, kind=kind, message=err.get("msg", "")))
    return violations
