from fastapi import Request, status
from fastapi.responses import JSONResponse


class ClassroomError(Exception):
    """Base for failures surfaced to API callers as ``{kind, detail}``."""

    kind = "error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ClassroomError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class NotAuthorizedError(ClassroomError):
    kind = "not_authorized"
    status_code = status.HTTP_403_FORBIDDEN


class ValidationError(ClassroomError):
    kind = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_CONTENT


class DeadlinePassedError(ClassroomError):
    kind = "deadline_passed"
    status_code = status.HTTP_400_BAD_REQUEST


class AIServiceError(ClassroomError):
    kind = "ai_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


async def classroom_error_handler(request: Request, exc: ClassroomError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"kind": exc.kind, "detail": exc.message},
    )
