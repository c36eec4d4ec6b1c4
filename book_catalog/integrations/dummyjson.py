from typing import Optional, Dict, Any, List, Union

from pydantic import ValidationError

from book_catalog.config import settings
from book_catalog.interface.base_api_client import BaseApiClient
from book_catalog.schemas.book import Book
from book_catalog.schemas.dummy import DummyProduct, DummyProductUpdate
from book_catalog.tools.errors import UnexpectedResponseError, UpstreamStatusError
from book_catalog.tools.logger import setup_logger

logger = setup_logger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def is_dummy_product(value: Any) -> bool:
    """Проверяет, что значение похоже на продукт DummyJSON (целый id и строковый title)."""
    return (
        isinstance(value, dict)
        and isinstance(value.get("id"), int)
        and not isinstance(value.get("id"), bool)
        and isinstance(value.get("title"), str)
    )


def parse_product(value: Any) -> Optional[DummyProduct]:
    if not is_dummy_product(value):
        return None
    try:
        return DummyProduct.model_validate(value)
    except ValidationError as e:
        logger.warning(f"Продукт не прошел валидацию: {str(e)}")
        return None


def to_book(product: DummyProduct) -> Book:
    """
    Преобразует продукт DummyJSON в книгу.

    brand становится author, недостающие поля заполняются значениями по умолчанию.
    """
    return Book(
        id=product.id,
        title=product.title,
        author=product.brand if product.brand is not None else "Unknown",
        description=product.description if product.description is not None else "",
        rating=product.rating if product.rating is not None else 0.0,
    )


class DummyJsonClient(BaseApiClient):
    """Клиент для работы с API DummyJSON (/products)."""

    def __init__(self, base_url: Optional[str] = None) -> None:
        """Инициализация клиента DummyJSON."""
        super().__init__(base_url=base_url or settings.DUMMY_BASE_URL)
        logger.info("Инициализация DummyJsonClient")

    async def list_products(
            self,
            search: Optional[str] = None,
            limit: int = 100,
            skip: int = 0
    ) -> List[DummyProduct]:
        """
        Получить срез продуктов, с поиском или без.

        Args:
            search: Строка поиска (опционально)
            limit: Размер среза
            skip: Смещение

        Returns:
            List[DummyProduct]: Продукты, прошедшие проверку формы

        Raises:
            UpstreamStatusError: Если DummyJSON вернул код, отличный от 2xx
            NetworkError: В случае ошибок сети
        """
        params: Dict[str, Any] = {"limit": limit, "skip": skip}
        if search:
            endpoint = "/products/search"
            params = {"q": search, **params}
        else:
            endpoint = "/products"

        logger.info(f"Запрос продуктов: search={search!r}, limit={limit}, skip={skip}")
        try:
            data = await self._make_request("GET", endpoint, params=params)
        except UpstreamStatusError as e:
            raise UpstreamStatusError(e.status, f"DummyJSON error: {e.status}") from e

        raw_list = data.get("products") if isinstance(data, dict) else None
        if not isinstance(raw_list, list):
            logger.warning("В ответе DummyJSON нет списка products")
            return []

        products = [p for p in (parse_product(item) for item in raw_list) if p is not None]
        if len(products) != len(raw_list):
            logger.debug(f"Отброшено {len(raw_list) - len(products)} некорректных продуктов")
        return products

    async def get_product(self, product_id: Union[int, str]) -> Optional[DummyProduct]:
        """
        Получить продукт по ID.

        Args:
            product_id: Идентификатор продукта

        Returns:
            Optional[DummyProduct]: Продукт или None, если не найден или ответ некорректен
        """
        logger.info(f"Получение продукта с ID: {product_id}")
        try:
            data = await self._make_request("GET", f"/products/{product_id}")
        except UpstreamStatusError as e:
            logger.info(f"Продукт {product_id} не получен, статус {e.status}")
            return None

        product = parse_product(data)
        if product is None:
            logger.warning(f"Некорректный ответ для продукта {product_id}")
        return product

    async def add_product(self, payload: DummyProductUpdate) -> DummyProduct:
        """
        Создать продукт.

        Args:
            payload: Данные нового продукта

        Returns:
            DummyProduct: Созданный продукт (DummyJSON не сохраняет его на самом деле)

        Raises:
            UpstreamStatusError: Если создание не удалось
            UnexpectedResponseError: Если ответ не похож на продукт
        """
        logger.info(f"Создание продукта: {payload.title}")
        try:
            data = await self._make_request(
                "POST", "/products/add", headers=JSON_HEADERS, data=payload.model_dump()
            )
        except UpstreamStatusError as e:
            raise UpstreamStatusError(e.status, f"Create failed: {e.status}") from e
        return self._require_product(data)

    async def update_product(self, product_id: Union[int, str], payload: DummyProductUpdate) -> DummyProduct:
        """
        Обновить продукт. Отправляются только заданные поля.

        Args:
            product_id: Идентификатор продукта
            payload: Изменяемые поля

        Returns:
            DummyProduct: Обновленный продукт

        Raises:
            UpstreamStatusError: Если обновление не удалось
            UnexpectedResponseError: Если ответ не похож на продукт
        """
        logger.info(f"Обновление продукта с ID: {product_id}")
        try:
            data = await self._make_request(
                "PUT",
                f"/products/{product_id}",
                headers=JSON_HEADERS,
                data=payload.model_dump(exclude_unset=True),
            )
        except UpstreamStatusError as e:
            raise UpstreamStatusError(e.status, f"Update failed: {e.status}") from e
        return self._require_product(data)

    async def delete_product(self, product_id: Union[int, str]) -> None:
        """
        Удалить продукт.

        Raises:
            UpstreamStatusError: Если удаление не удалось
        """
        logger.info(f"Удаление продукта с ID: {product_id}")
        try:
            await self._make_request("DELETE", f"/products/{product_id}")
        except UpstreamStatusError as e:
            raise UpstreamStatusError(e.status, f"Delete failed: {e.status}") from e

    @staticmethod
    def _require_product(data: Any) -> DummyProduct:
        product = parse_product(data)
        if product is None:
            logger.error(f"Неожиданная форма ответа DummyJSON: {data!r}")
            raise UnexpectedResponseError("Unexpected response shape from DummyJSON")
        return product
