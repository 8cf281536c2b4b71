"""
Domain errors.

Сервисы выбрасывают эти исключения, API слой (api/errors.py) превращает их
в единый формат ErrorResponse. Сами исключения ничего не знают про HTTP.
"""


class DomainError(Exception):
    """Base class for expected, request-scoped failures."""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def details(self) -> list[dict[str, str]] | None:
        return None


class NotFoundError(DomainError):
    """
    Ресурс не существует.

    Использование:
        raise NotFoundError("Project", 123)
        # "Project with id=123 not found"
    """

    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: int | str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} with id={resource_id} not found")


class ForbiddenError(DomainError):
    """
    Ресурс существует, но у пользователя нет прав на действие.

    Отличается от NotFoundError: вызывающий код сам решает,
    схлопывать ли их в 404 чтобы не раскрывать существование записи.
    """

    code = "FORBIDDEN"

    def __init__(
        self,
        action: str,
        resource: str,
        resource_id: int | str | None = None,
        reason: str | None = None,
    ):
        self.action = action
        self.resource = resource
        self.resource_id = resource_id
        target = resource if resource_id is None else f"{resource} with id={resource_id}"
        message = f"Not allowed to {action} {target}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ValidationFailedError(DomainError):
    """
    Нарушение правил валидации полей.

    Содержит ВСЕ ошибки сразу (по полям), а не только первую:
        {"name": ["The project name is required."],
         "end_date": ["The end date must be on or after the start date."]}
    """

    code = "VALIDATION_ERROR"

    def __init__(self, errors: dict[str, list[str]], message: str = "Validation failed"):
        self.errors = errors
        super().__init__(message)

    @property
    def details(self) -> list[dict[str, str]]:
        return [
            {"field": field, "message": message}
            for field, messages in self.errors.items()
            for message in messages
        ]
