from typing import Any, Dict, Literal, Optional, Union

from book_catalog.client import documents
from book_catalog.client.cache import MISSING, InMemoryCache, create_cache
from book_catalog.client.transport import GraphQLTransport
from book_catalog.schemas.book import Book, BookCreate, BookUpdate, BooksPage, SortField, SortOrder
from book_catalog.tools.logger import setup_logger

logger = setup_logger(__name__)

FetchPolicy = Literal["cache-first", "network-only", "cache-only"]


def books_variables(
        limit: int,
        skip: int = 0,
        search: Optional[str] = None,
        sort_field: SortField = SortField.RATING,
        sort_order: SortOrder = SortOrder.DESC
) -> Dict[str, Any]:
    """Переменные запроса Books в том виде, в котором они уходят на сервер."""
    return {
        "limit": limit,
        "skip": skip,
        "search": search or None,
        "sort": {"field": SortField(sort_field).value, "order": SortOrder(sort_order).value},
    }


class BooksApi:
    """
    Доступ к книгам через GraphQL с нормализованным кэшем.

    Результаты запросов и мутаций записываются в кэш, поэтому детальная
    страница только что созданной книги читается из кэша без запроса.
    """

    def __init__(self, transport: GraphQLTransport, cache: Optional[InMemoryCache] = None) -> None:
        self.transport = transport
        self.cache = cache if cache is not None else create_cache()

    def read_books(self, variables: Dict[str, Any]) -> Optional[BooksPage]:
        cached = self.cache.read_query("books", variables)
        if cached is MISSING or cached is None:
            return None
        return BooksPage.model_validate(cached)

    async def fetch_books(self, variables: Dict[str, Any], fetch_policy: FetchPolicy = "network-only") -> BooksPage:
        """
        Получить страницу книг.

        Args:
            variables: Переменные запроса (см. books_variables)
            fetch_policy: cache-first, network-only или cache-only

        Returns:
            BooksPage: Страница книг (пустая при cache-only промахе)
        """
        if fetch_policy != "network-only":
            cached = self.read_books(variables)
            if cached is not None:
                return cached
            if fetch_policy == "cache-only":
                return BooksPage(limit=variables.get("limit") or 0)

        try:
            data = await self.transport.execute(documents.BOOKS_QUERY, variables)
        except Exception as e:
            logger.error(f"Ошибка загрузки списка книг: {str(e)}", exc_info=True)
            raise

        self.cache.write_query("books", variables, data["books"])
        return BooksPage.model_validate(data["books"])

    def read_book(self, book_id: Union[int, str]) -> Optional[Book]:
        cached = self.cache.read_query("book", {"id": str(book_id)}, fields=documents.BOOK_DETAIL_FIELDS)
        if cached is MISSING or cached is None:
            return None
        return Book.model_validate(cached)

    async def fetch_book(self, book_id: Union[int, str], fetch_policy: FetchPolicy = "cache-first") -> Optional[Book]:
        """
        Получить книгу по ID.

        Returns:
            Optional[Book]: Книга или None, если сервер ее не нашел
        """
        if fetch_policy != "network-only":
            cached = self.read_book(book_id)
            if cached is not None:
                logger.debug(f"Книга {book_id} прочитана из кэша")
                return cached
            if fetch_policy == "cache-only":
                return None

        variables = {"id": str(book_id)}
        try:
            data = await self.transport.execute(documents.BOOK_QUERY, variables)
        except Exception as e:
            logger.error(f"Ошибка загрузки книги {book_id}: {str(e)}", exc_info=True)
            raise

        self.cache.write_query("book", variables, data.get("book"))
        return Book.model_validate(data["book"]) if data.get("book") else None

    async def create_book(self, values: BookCreate) -> Book:
        try:
            data = await self.transport.execute(documents.CREATE_BOOK, {"input": values.model_dump()})
        except Exception as e:
            logger.error(f"Ошибка создания книги: {str(e)}", exc_info=True)
            raise

        created = data["createBook"]
        self.cache.write_entity(created)
        logger.info(f"Книга создана с ID: {created.get('id')}")
        return Book.model_validate(created)

    async def update_book(self, values: BookUpdate) -> Book:
        """
        Обновить книгу и записать результат в кэш.

        Списки ссылаются на нормализованную сущность, поэтому обновляются
        вместе с детальной записью.
        """
        book_input = {"id": str(values.id), **values.model_dump(exclude={"id"}, exclude_none=True)}
        try:
            data = await self.transport.execute(documents.UPDATE_BOOK, {"input": book_input})
        except Exception as e:
            logger.error(f"Ошибка обновления книги {values.id}: {str(e)}", exc_info=True)
            raise

        updated = data["updateBook"]
        self.cache.write_query("book", {"id": str(updated["id"])}, updated)
        logger.info(f"Книга {updated['id']} обновлена в кэше")
        return Book.model_validate(updated)

    async def delete_book(self, book_id: Union[int, str], list_variables: Optional[Dict[str, Any]] = None) -> bool:
        """
        Удалить книгу.

        Если передан list_variables, строка сразу убирается из закэшированной
        страницы (total уменьшается на 1), а при ошибке страница восстанавливается.
        """
        previous = MISSING
        if list_variables is not None:
            previous = self.cache.update_query(
                "books", list_variables, lambda page: _without_book(page, book_id)
            )

        try:
            data = await self.transport.execute(documents.DELETE_BOOK, {"id": str(book_id)})
        except Exception as e:
            if list_variables is not None and previous is not MISSING:
                self.cache.restore_query("books", list_variables, previous)
            logger.error(f"Ошибка удаления книги {book_id}: {str(e)}", exc_info=True)
            raise

        return bool(data.get("deleteBook"))


def _without_book(page: Dict[str, Any], book_id: Union[int, str]) -> Dict[str, Any]:
    items = [item for item in page.get("items", []) if str(item.get("id")) != str(book_id)]
    return {**page, "items": items, "total": max(0, page.get("total", 0) - 1)}
