"""服务层返回值：Ok / Err 标签联合"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, List, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    """错误类别"""
    VALIDATION = "validation"
    INVALID_IDENTIFIER = "invalid_identifier"
    NOT_FOUND = "not_found"
    STORE_INTEGRITY = "store_integrity"
    STORE_FAILURE = "store_failure"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    details: List[str] = field(default_factory=list)

    @property
    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
