"""Taskboard - 任务管理 CRUD 服务，任务列表带读穿缓存"""

__version__ = "1.0.0"
