"""Domain errors raised by the task services and their HTTP translation.

Services raise these instead of ``HTTPException`` so the same rules apply
to the request layer and to the reminder worker.
"""

from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class TaskhubError(Exception):
    status_code = 400
    field: Optional[str] = None

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if field is not None:
            self.field = field


class TaskNotFound(TaskhubError):
    status_code = 404

    def __init__(self, task_id: Optional[str] = None, message: str = "Task not found"):
        super().__init__(message)
        self.task_id = task_id


class ParentNotFound(TaskNotFound):
    field = "parent_id"

    def __init__(self, task_id: Optional[str] = None):
        super().__init__(task_id, message="Parent task not found")


class OwnerNotFound(TaskhubError):
    status_code = 404

    def __init__(self, task_id: str):
        super().__init__("Task owner not found")
        self.task_id = task_id


class InvalidTransition(TaskhubError):
    """A status change failed the direct-subtask consistency check."""
    status_code = 422
    field = "status"

    def __init__(self, target_status, message: str):
        super().__init__(message)
        self.target_status = target_status


class InvalidParent(TaskhubError):
    """Moving a task under itself or one of its descendants."""
    status_code = 422
    field = "parent_id"


def error_body(exc: TaskhubError) -> dict:
    body = {"detail": exc.message}
    if exc.field:
        body["errors"] = {exc.field: [exc.message]}
    return body


def register_error_handlers(app: FastAPI) -> None:
    """Translate domain errors into JSON responses."""

    @app.exception_handler(TaskhubError)
    async def taskhub_error_handler(request: Request, exc: TaskhubError) -> JSONResponse:
        logger.warning(
            "request_rejected",
            error=type(exc).__name__,
            status_code=exc.status_code,
            path=request.url.path,
            message=exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content=error_body(exc))
