"""Taskboard 自定义异常"""


class TaskboardError(Exception):
    """Taskboard 基础异常"""
    pass


class StoreError(TaskboardError):
    """存储层错误（连接失败、查询失败等）"""
    pass


class StoreIntegrityError(StoreError):
    """存储层数据完整性错误（约束冲突、非法数据）"""
    pass


class CacheError(TaskboardError):
    """缓存后端错误，调用方按未命中处理，不向客户端暴露"""
    pass
