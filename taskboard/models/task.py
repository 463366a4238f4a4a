from enum import Enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


TITLE_MAX_LENGTH = 255


class TaskStatus(str, Enum):
    """任务状态枚举"""
    PENDING = "pending"
    COMPLETED = "completed"


class Task(BaseModel):
    """任务模型（JSON 字段使用 camelCase）"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="任务ID（UUID）")
    title: str = Field(..., description="任务标题")
    description: str = Field(default="", description="任务描述")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="任务状态")
    created_at: datetime = Field(..., description="创建时间")
    updated_at: datetime = Field(..., description="最后更新时间")


class TaskCreate(BaseModel):
    """已校验、已规范化的创建数据"""
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING


class TaskUpdate(BaseModel):
    """已校验、已规范化的部分更新数据，None 表示不修改"""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)


class TaskListing(BaseModel):
    """序列化后的任务列表快照"""
    payload: str = Field(..., description="JSON 数组文本")
    cached: bool = Field(default=False, description="是否来自缓存")


class DeleteConfirmation(BaseModel):
    """删除确认"""
    message: str = Field(default="Task deleted successfully", description="响应消息")


class ErrorResponse(BaseModel):
    """错误响应"""
    error: str = Field(..., description="错误描述")
    details: Optional[List[str]] = Field(None, description="校验错误明细")
    message: Optional[str] = Field(None, description="附加信息")


class HealthResponse(BaseModel):
    """健康检查响应"""
    status: str = "OK"
    timestamp: datetime
