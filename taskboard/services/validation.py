"""任务请求校验规则

创建与更新共用的纯函数校验，不访问存储。
"""

import re
from typing import Any, Mapping

from ..models.task import TITLE_MAX_LENGTH, TaskCreate, TaskStatus, TaskUpdate
from ..models.result import Err, ErrorKind, Ok, Result

_IDENTIFIER_RE = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)

_STATUSES = {status.value for status in TaskStatus}

TITLE_LENGTH_MESSAGE = f"Title must be between 1 and {TITLE_MAX_LENGTH} characters"


def is_valid_identifier(value: Any) -> bool:
    """是否为规范的 UUID 字符串（8-4-4-4-12）"""
    return isinstance(value, str) and _IDENTIFIER_RE.fullmatch(value) is not None


def is_valid_status(value: Any) -> bool:
    """是否为合法状态，区分大小写，不做任何规范化"""
    return isinstance(value, str) and value in _STATUSES


# 与 JavaScript String.prototype.trim 相同的空白集合，不含 \x1c-\x1f 等控制字符
_TRIM_CHARS = (
    " \t\n\r\v\f"
    "\u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def normalize_text(value: str) -> str:
    """去除首尾空白，内部空白、控制字符和标记原样保留"""
    return value.strip(_TRIM_CHARS)


def validation_error(message: str, *details: str) -> Err:
    return Err(ErrorKind.VALIDATION, message, list(details))


def validate_create(payload: Any) -> Result[TaskCreate]:
    """
    校验创建请求

    Args:
        payload: 已解码的 JSON 请求体

    Returns:
        Ok(TaskCreate) 或 Err(VALIDATION)
    """
    if not isinstance(payload, Mapping):
        return validation_error("Validation error", "Request body must be a JSON object")

    title = payload.get("title")
    if title is None:
        return validation_error("Title is required")
    if not isinstance(title, str):
        return validation_error("Validation error", "Title must be a string")
    title = normalize_text(title)
    if not title:
        return validation_error("Title is required")
    if len(title) > TITLE_MAX_LENGTH:
        return validation_error("Validation error", TITLE_LENGTH_MESSAGE)

    description = payload.get("description")
    if description is None:
        description = ""
    elif not isinstance(description, str):
        return validation_error("Validation error", "Description must be a string")

    status = payload.get("status")
    if status is None:
        status = TaskStatus.PENDING.value
    elif not is_valid_status(status):
        return validation_error("Invalid status")

    return Ok(TaskCreate(
        title=title,
        description=normalize_text(description),
        status=TaskStatus(status),
    ))


def validate_update(payload: Any) -> Result[TaskUpdate]:
    """
    校验部分更新请求

    只处理请求中出现的字段。标题允许更新为空字符串，但仍受最大长度限制。
    """
    if not isinstance(payload, Mapping):
        return validation_error("Validation error", "Request body must be a JSON object")

    changes = {}

    if "title" in payload:
        title = payload["title"]
        if not isinstance(title, str):
            return validation_error("Validation error", "Title must be a string")
        title = normalize_text(title)
        if len(title) > TITLE_MAX_LENGTH:
            return validation_error("Validation error", TITLE_LENGTH_MESSAGE)
        changes["title"] = title

    if "description" in payload:
        description = payload["description"]
        if not isinstance(description, str):
            return validation_error("Validation error", "Description must be a string")
        changes["description"] = normalize_text(description)

    if "status" in payload:
        status = payload["status"]
        if not is_valid_status(status):
            return validation_error("Invalid status")
        changes["status"] = TaskStatus(status)

    return Ok(TaskUpdate(**changes))
