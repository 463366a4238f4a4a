from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Request, Response
from fastapi.responses import JSONResponse

from ..models.result import Err, ErrorKind, Result
from ..models.task import DeleteConfirmation, ErrorResponse, Task
from ..services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["任务管理"])

_ERROR_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.INVALID_IDENTIFIER: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STORE_INTEGRITY: 400,
    ErrorKind.STORE_FAILURE: 500,
}

_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "ID 非法或请求校验失败"},
    404: {"model": ErrorResponse, "description": "任务不存在"},
    500: {"model": ErrorResponse, "description": "存储错误"},
}


def get_task_service(request: Request) -> TaskService:
    """从应用状态中取出注入的 TaskService"""
    return request.app.state.task_service


def error_response(err: Err, show_message: bool = False) -> JSONResponse:
    """将 Err 转换为 HTTP 错误响应"""
    status_code = _ERROR_STATUS[err.kind]

    if err.kind == ErrorKind.STORE_INTEGRITY:
        body = ErrorResponse(error="Database error", message=err.message)
    elif err.kind == ErrorKind.STORE_FAILURE:
        body = ErrorResponse(
            error="Internal server error",
            message=err.message if show_message else "Something went wrong",
        )
    else:
        body = ErrorResponse(error=err.message, details=err.details or None)

    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _respond(request: Request, result: Result, status_code: int = 200) -> Response:
    if isinstance(result, Err):
        return error_response(result, request.app.state.settings.is_development)
    return JSONResponse(
        status_code=status_code,
        content=result.value.model_dump(mode="json", by_alias=True),
    )


@router.get(
    "",
    response_model=List[Task],
    responses={500: _ERROR_RESPONSES[500]},
    summary="任务列表",
    description="按创建时间倒序返回全部任务，结果经过列表缓存"
)
async def list_tasks(request: Request, service: TaskService = Depends(get_task_service)):
    """
    列出所有任务

    - 缓存命中时原样返回缓存快照，响应头 X-Cache: HIT
    - 未命中时读取存储并回填缓存，响应头 X-Cache: MISS
    """
    result = await service.list_tasks()
    if isinstance(result, Err):
        return error_response(result, request.app.state.settings.is_development)

    listing = result.value
    return Response(
        content=listing.payload,
        media_type="application/json",
        headers={"X-Cache": "HIT" if listing.cached else "MISS"},
    )


@router.get(
    "/{task_id}",
    response_model=Task,
    responses={400: _ERROR_RESPONSES[400], 404: _ERROR_RESPONSES[404]},
    summary="查询任务",
)
async def get_task(task_id: str, request: Request, service: TaskService = Depends(get_task_service)):
    """
    查询单个任务

    - **task_id**: 任务 UUID
    """
    return _respond(request, await service.get_task(task_id))


@router.post(
    "",
    response_model=Task,
    status_code=201,
    responses={400: _ERROR_RESPONSES[400]},
    summary="创建任务",
)
async def create_task(
    request: Request,
    payload: Any = Body(..., examples=[{"title": "Buy milk", "description": "", "status": "pending"}]),
    service: TaskService = Depends(get_task_service),
):
    """
    创建任务

    - **title**: 必填，去除首尾空白后 1-255 字符
    - **description**: 可选，默认空字符串
    - **status**: 可选，pending / completed，默认 pending
    """
    return _respond(request, await service.create_task(payload), status_code=201)


@router.patch(
    "/{task_id}",
    response_model=Task,
    responses=_ERROR_RESPONSES,
    summary="更新任务",
)
async def update_task(
    task_id: str,
    request: Request,
    payload: Any = Body(..., examples=[{"status": "completed"}]),
    service: TaskService = Depends(get_task_service),
):
    """
    部分更新任务

    - 只修改请求中出现的字段（title / description / status）
    """
    return _respond(request, await service.update_task(task_id, payload))


@router.delete(
    "/{task_id}",
    response_model=DeleteConfirmation,
    responses={400: _ERROR_RESPONSES[400], 404: _ERROR_RESPONSES[404]},
    summary="删除任务",
)
async def delete_task(task_id: str, request: Request, service: TaskService = Depends(get_task_service)):
    """
    删除任务

    - 删除后该 ID 的查询、更新、删除均返回 404
    """
    return _respond(request, await service.delete_task(task_id))
