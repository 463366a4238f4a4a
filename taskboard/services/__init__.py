from .task_service import TaskService
from .validation import is_valid_identifier, is_valid_status, normalize_text

__all__ = ["TaskService", "is_valid_identifier", "is_valid_status", "normalize_text"]
