"""HTTP middleware for request logging and tracing."""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.logging import actor_id_var, generate_request_id, get_logger, request_id_var

logger = get_logger("taskflow.requests")

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware для логирования HTTP запросов.

    - Берёт X-Request-ID из запроса (или генерирует новый) и возвращает его
      в заголовке ответа
    - Логирует метод, путь, статус и время выполнения
    - 4xx/5xx логируются как WARNING
    - actor_id берётся из request.state (его кладёт get_current_user):
      endpoint выполняется в копии контекста, его ContextVar сюда не доходит

    Пример лога (JSON):
    {
        "level": "INFO",
        "logger": "taskflow.requests",
        "message": "Request completed",
        "request_id": "abc-123",
        "actor_id": 7,
        "extra": {"method": "GET", "path": "/api/v1/tasks", "status": 200, "duration_ms": 45}
    }
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        request_token = request_id_var.set(request_id)
        actor_token = actor_id_var.set(None)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        try:
            try:
                response = await call_next(request)
            except Exception as e:
                duration_ms = int((time.perf_counter() - start_time) * 1000)
                logger.error(
                    "Request failed",
                    extra={
                        "method": request.method,
                        "path": request.url.path,
                        "duration_ms": duration_ms,
                        "client_ip": client_ip,
                        "error": str(e),
                    },
                    exc_info=True,
                )
                raise

            duration_ms = int((time.perf_counter() - start_time) * 1000)
            actor_id_var.set(getattr(request.state, "actor_id", None))
            response.headers[REQUEST_ID_HEADER] = request_id

            if request.url.path not in QUIET_PATHS:
                log = logger.info if response.status_code < 400 else logger.warning
                log(
                    "Request completed",
                    extra={
                        "method": request.method,
                        "path": request.url.path,
                        "status": response.status_code,
                        "duration_ms": duration_ms,
                        "client_ip": client_ip,
                    },
                )

            return response
        finally:
            request_id_var.reset(request_token)
            actor_id_var.reset(actor_token)
