"""
Обработчики ошибок (Exception Handlers) для API.

Сервисы выбрасывают доменные исключения (core.exceptions), здесь они
превращаются в HTTP ответы единого формата ErrorResponse:

    ValidationFailedError  -> 422 VALIDATION_ERROR
    ForbiddenError         -> 403 FORBIDDEN
    NotFoundError          -> 404 NOT_FOUND
    RequestValidationError -> 422 VALIDATION_ERROR (ошибки формы запроса)
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.exceptions import DomainError, ForbiddenError, NotFoundError, ValidationFailedError
from ..core.logging import get_logger
from .schemas import ErrorBody, ErrorDetail, ErrorResponse

logger = get_logger(__name__)

# Starlette renamed the 422 constant; the literal works with every version
HTTP_422_UNPROCESSABLE = 422

STATUS_CODES: dict[type[DomainError], int] = {
    ValidationFailedError: HTTP_422_UNPROCESSABLE,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
}


def error_response(
    status_code: int, code: str, message: str, details: list[dict] | None = None
) -> JSONResponse:
    """Собрать JSONResponse в формате ErrorResponse."""
    body = ErrorResponse(
        error=ErrorBody(
            code=code,
            message=message,
            details=[ErrorDetail(**d) for d in details] if details else None,
        )
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def status_code_for(exc: DomainError) -> int:
    for exc_type, code in STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_400_BAD_REQUEST


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """
    Обработчик доменных ошибок сервисного слоя.

    Пример ответа (403):
    {
        "error": {
            "code": "FORBIDDEN",
            "message": "Not allowed to update Project with id=1",
            "details": null
        }
    }
    """
    logger.warning(
        "Domain error",
        extra={"code": exc.code, "error_message": exc.message, "path": request.url.path},
    )
    return error_response(status_code_for(exc), exc.code, exc.message, exc.details)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Обработчик для ошибок валидации Pydantic (422).

    Pydantic возвращает ошибки в своём формате:
        {"type": "enum", "loc": ["body", "priority"], "msg": "..."}

    Мы преобразуем это в наш формат:
        {"field": "priority", "message": "..."}
    """
    details = []
    for error in exc.errors():
        # loc - путь к полю, например ["body", "name"] или ["query", "page"]
        field_path = error.get("loc", [])
        field_name = field_path[-1] if field_path else "unknown"

        if len(field_path) > 1 and field_path[0] == "body":
            field_name = ".".join(str(p) for p in field_path[1:])

        details.append({"field": str(field_name), "message": error.get("msg", "Invalid value")})

    logger.warning(
        "Request validation failed", extra={"path": request.url.path, "errors": details}
    )
    return error_response(
        HTTP_422_UNPROCESSABLE,
        ValidationFailedError.code,
        "Validation failed",
        details,
    )


def register_error_handlers(app: FastAPI) -> None:
    """
    Регистрирует все error handlers в приложении FastAPI.

    Вызывается из main.py:
        register_error_handlers(app)
    """
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
