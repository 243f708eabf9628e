"""
请求载荷校验：在编排层边界把任意 dict 转换为类型化请求，返回成功/失败结果而不抛异常。
"""
from dataclasses import dataclass, field
from typing import Any, Generic, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ai_readme.schemas.guidance import GuidanceRequest, UpdateRequest

T = TypeVar("T", bound=BaseModel)


@dataclass
class FieldError:
    field: str
    message: str


@dataclass
class ValidationResult(Generic[T]):
    value: Optional[T] = None
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors

    def describe(self) -> str:
        """将字段错误拼接为单行描述"""
        return "; ".join(f"{e.field}: {e.message}" for e in self.errors)


def _field_name(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "<root>"


def validate_request(model: Type[T], payload: Mapping[str, Any]) -> ValidationResult[T]:
    """按给定模型校验载荷；None 值视为未提供"""
    if not isinstance(payload, Mapping):
        return ValidationResult(errors=[FieldError("<root>", "payload must be an object")])

    cleaned = {k: v for k, v in payload.items() if v is not None}
    try:
        return ValidationResult(value=model.model_validate(cleaned))
    except ValidationError as e:
        return ValidationResult(errors=[
            FieldError(_field_name(err["loc"]), err["msg"]) for err in e.errors()
        ])


def validate_guidance_request(payload: Mapping[str, Any]) -> ValidationResult[GuidanceRequest]:
    return validate_request(GuidanceRequest, payload)


def validate_update_request(payload: Mapping[str, Any]) -> ValidationResult[UpdateRequest]:
    return validate_request(UpdateRequest, payload)
