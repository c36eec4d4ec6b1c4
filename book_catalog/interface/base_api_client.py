import aiohttp
import ssl
import certifi
from typing import Optional, Dict, Any, Self

from book_catalog.tools.errors import NetworkError, UnexpectedResponseError, UpstreamStatusError
from book_catalog.tools.logger import setup_logger

logger = setup_logger(__name__)


class BaseApiClient:
    def __init__(self, base_url: str, timeout: Optional[float] = None) -> None:
        """
        Инициализация базового API клиента.

        Args:
            base_url: Базовый URL API
            timeout: Общий таймаут запроса в секундах (None - значение aiohttp по умолчанию)
        """
        self.base_url = base_url
        self.ssl_context = ssl.create_default_context(cafile=certifi.where())
        self.timeout = aiohttp.ClientTimeout(total=timeout) if timeout else None
        self._session: aiohttp.ClientSession | None = None
        logger.info(f"Инициализация API клиента для {base_url}")

    async def open(self) -> None:
        """Создает сессию, если она еще не создана"""
        if self._session is None:
            if self.timeout is not None:
                self._session = aiohttp.ClientSession(timeout=self.timeout)
            else:
                self._session = aiohttp.ClientSession()
            logger.debug(f"Сессия для {self.base_url} открыта")

    async def close(self) -> None:
        """Закрывает сессию"""
        if self._session:
            await self._session.close()
            self._session = None
            logger.debug(f"Сессия для {self.base_url} закрыта")

    async def __aenter__(self) -> Self:
        """Создает сессию при входе в контекст"""
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Закрывает сессию при выходе из контекста"""
        await self.close()

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Базовый метод для выполнения HTTP-запросов

        Args:
            method: HTTP метод (GET, POST, PUT, DELETE)
            endpoint: Конечная точка API
            params: Параметры запроса
            headers: Заголовки запроса
            data: Тело запроса

        Returns:
            Разобранное JSON тело ответа

        Raises:
            RuntimeError: Если сессия не открыта
            UpstreamStatusError: Если сервер вернул код, отличный от 2xx
            NetworkError: В случае ошибок сети
            UnexpectedResponseError: Если тело ответа не является JSON
        """
        if self._session is None:
            raise RuntimeError("Сессия не инициализирована. Используйте контекстный менеджер (async with) или open()")

        url = f"{self.base_url}{endpoint}"
        try:
            logger.debug(
                f"Making {method} request to {url} "
                f"with params: {params}, headers: {headers}"
            )
            async with self._session.request(
                method,
                url,
                params=params,
                headers=headers,
                json=data,
                ssl=self.ssl_context
            ) as response:
                if response.status >= 400:
                    logger.warning(f"{method} {url} вернул статус {response.status}")
                    raise UpstreamStatusError(response.status)
                return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            logger.error(f"Ошибка при выполнении запроса {method} {url}: {str(e)}")
            raise NetworkError(f"Network error: {str(e)}") from e
        except ValueError as e:
            logger.error(f"Некорректный JSON в ответе {method} {url}: {str(e)}")
            raise UnexpectedResponseError(f"Invalid JSON from {url}") from e
