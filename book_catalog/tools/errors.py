from typing import List, Optional


class ApiError(Exception):
    """Базовая ошибка при обращении к внешнему API."""


class NetworkError(ApiError):
    """Сетевая ошибка: сервер недоступен, соединение разорвано и т.п."""


class UpstreamStatusError(ApiError):
    """Ответ с кодом, отличным от 2xx."""

    def __init__(self, status: int, message: Optional[str] = None) -> None:
        self.status = status
        super().__init__(message or f"Upstream error: {status}")


class UnexpectedResponseError(ApiError):
    """Ответ не прошел проверку формы данных."""


class GraphQLRequestError(ApiError):
    """GraphQL сервер вернул непустой массив errors."""

    def __init__(self, messages: List[str]) -> None:
        self.messages = messages
        super().__init__("; ".join(messages) or "GraphQL error")
