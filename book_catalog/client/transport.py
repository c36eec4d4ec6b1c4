from typing import Any, Dict, Optional

from book_catalog.config import settings
from book_catalog.interface.base_api_client import BaseApiClient
from book_catalog.tools.errors import GraphQLRequestError, UnexpectedResponseError
from book_catalog.tools.logger import setup_logger

logger = setup_logger(__name__)


class GraphQLTransport(BaseApiClient):
    """HTTP транспорт до GraphQL сервера каталога."""

    def __init__(self, endpoint: Optional[str] = None, timeout: Optional[float] = None) -> None:
        """
        Args:
            endpoint: Полный URL GraphQL сервера (по умолчанию зависит от APP_ENV)
            timeout: Таймаут запроса в секундах
        """
        super().__init__(base_url=endpoint or settings.graphql_endpoint, timeout=timeout)

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Выполнить GraphQL операцию.

        Args:
            query: Текст запроса или мутации
            variables: Переменные операции

        Returns:
            Dict[str, Any]: Поле data ответа

        Raises:
            GraphQLRequestError: Если в ответе есть errors
            UnexpectedResponseError: Если в ответе нет data
            NetworkError, UpstreamStatusError: Ошибки HTTP уровня
        """
        payload = await self._make_request(
            "POST",
            "",
            headers={"Content-Type": "application/json"},
            data={"query": query, "variables": variables or {}},
        )
        if not isinstance(payload, dict):
            raise UnexpectedResponseError("GraphQL response is not an object")

        errors = payload.get("errors")
        if errors:
            messages = [str(err.get("message", err)) if isinstance(err, dict) else str(err) for err in errors]
            logger.warning(f"GraphQL ошибки: {messages}")
            raise GraphQLRequestError(messages)

        data = payload.get("data")
        if not isinstance(data, dict):
            raise UnexpectedResponseError("GraphQL response has no data")
        return data
