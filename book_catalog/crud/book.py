import unicodedata
from typing import List, Optional, Union

from book_catalog.config import settings
from book_catalog.integrations.dummyjson import DummyJsonClient, to_book
from book_catalog.interface.book import BaseBookRepository
from book_catalog.schemas.book import (
    Book,
    BookCreate,
    BookUpdate,
    BooksPage,
    BooksSort,
    SortField,
    SortOrder,
)
from book_catalog.schemas.dummy import DummyProductUpdate
from book_catalog.tools.logger import setup_logger

# Настройка логирования
logger = setup_logger(__name__)


def _title_key(title: str) -> str:
    """Ключ сравнения названий без учета регистра и диакритики."""
    decomposed = unicodedata.normalize("NFKD", title)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold()


def sort_books(books: List[Book], field: SortField, order: SortOrder) -> List[Book]:
    """
    Отсортировать книги по названию или рейтингу.

    Сортировка устойчивая: книги с равными ключами сохраняют исходный порядок
    в обоих направлениях.

    Args:
        books: Книги для сортировки
        field: TITLE или RATING
        order: ASC или DESC

    Returns:
        List[Book]: Новый отсортированный список
    """
    def key(book: Book) -> Union[str, float]:
        if field == SortField.TITLE:
            return _title_key(book.title)
        return book.rating or 0.0

    return sorted(books, key=key, reverse=order == SortOrder.DESC)


def last_page_start(total: int, limit: int) -> int:
    """Начало последней страницы: floor((total-1)/limit)*limit, 0 для пустого списка."""
    if total <= 0 or limit <= 0:
        return 0
    return ((total - 1) // limit) * limit


def paginate(books: List[Book], skip: int, limit: int) -> BooksPage:
    """
    Вырезать страницу из отсортированного списка.

    Смещение, выходящее за последнюю страницу, ограничивается ее началом.
    limit=0 дает пустую страницу, но total остается равным числу книг.

    Args:
        books: Отфильтрованный и отсортированный список
        skip: Запрошенное смещение
        limit: Размер страницы

    Returns:
        BooksPage: Страница с фактическим смещением
    """
    safe_limit = max(0, limit)
    total = len(books)

    if safe_limit == 0:
        return BooksPage(items=[], total=total, skip=0, limit=0)

    start = max(0, min(skip, last_page_start(total, safe_limit)))
    return BooksPage(
        items=books[start:start + safe_limit],
        total=total,
        skip=start,
        limit=safe_limit,
    )


class BookRepository(BaseBookRepository):
    """Репозиторий книг поверх DummyJSON /products."""

    def __init__(self, api_client: DummyJsonClient, fetch_limit: int = settings.FETCH_LIMIT) -> None:
        """
        Инициализация репозитория.

        Args:
            api_client: Клиент для работы с DummyJSON
            fetch_limit: Сколько продуктов загружать для сортировки на сервере
        """
        super().__init__()
        self.api_client: DummyJsonClient = api_client
        self.fetch_limit = fetch_limit

    async def get_page(
            self,
            search: Optional[str] = None,
            limit: Optional[int] = None,
            skip: Optional[int] = None,
            sort: Optional[BooksSort] = None
    ) -> BooksPage:
        limit = max(0, limit) if limit is not None else settings.DEFAULT_LIMIT
        skip = max(0, skip) if skip is not None else 0
        sort = sort or BooksSort()

        try:
            logger.debug(
                f"Извлечение страницы книг: search={search!r}, limit={limit}, skip={skip}, "
                f"sort={sort.field.value} {sort.order.value}"
            )
            # DummyJSON не умеет сортировать, поэтому берем срез побольше
            products = await self.api_client.list_products(search=search, limit=self.fetch_limit, skip=0)
            books = sort_books([to_book(p) for p in products], sort.field, sort.order)
            page = paginate(books, skip=skip, limit=limit)
            logger.info(f"Найдено {page.total} книг, возвращено {len(page.items)} (skip={page.skip})")
            return page
        except Exception as e:
            logger.error(f"Ошибка извлечения книг: {str(e)}", exc_info=True)
            raise

    async def get(self, id: Union[int, str]) -> Optional[Book]:
        try:
            logger.debug(f"Извлечение книги с ID: {id}")
            product = await self.api_client.get_product(id)
            if product is None:
                logger.debug(f"Книга не найдена с ID: {id}")
                return None
            return to_book(product)
        except Exception as e:
            logger.error(f"Ошибка извлечения книги {id}: {str(e)}", exc_info=True)
            raise

    async def create(self, obj_in: BookCreate) -> Book:
        try:
            logger.info(f"Создание книги: {obj_in.title}")
            payload = DummyProductUpdate(
                title=obj_in.title,
                brand=obj_in.author,
                description=obj_in.description,
                rating=obj_in.rating if obj_in.rating is not None else 0.0,
            )
            book = to_book(await self.api_client.add_product(payload))
            logger.info(f"Книга создана с ID: {book.id}")
            return book
        except Exception as e:
            logger.error(f"Ошибка создания книги: {str(e)}", exc_info=True)
            raise

    async def update(self, obj_in: BookUpdate) -> Book:
        try:
            logger.info(f"Обновление книги с ID: {obj_in.id}")
            changes = {
                "title": obj_in.title,
                "brand": obj_in.author,
                "description": obj_in.description,
                "rating": obj_in.rating,
            }
            payload = DummyProductUpdate(**{k: v for k, v in changes.items() if v is not None})
            book = to_book(await self.api_client.update_product(obj_in.id, payload))
            logger.info(f"Данные книги с ID {obj_in.id} обновлены")
            return book
        except Exception as e:
            logger.error(f"Ошибка обновления книги {obj_in.id}: {str(e)}", exc_info=True)
            raise

    async def delete(self, id: Union[int, str]) -> bool:
        try:
            logger.info(f"Удаление книги с ID: {id}")
            await self.api_client.delete_product(id)
            logger.info(f"Книга с ID: {id} удалена")
            return True
        except Exception as e:
            logger.error(f"Ошибка удаления книги {id}: {str(e)}", exc_info=True)
            raise


# Инициализация репозиториев
try:
    book_repository = BookRepository(api_client=DummyJsonClient())
    logger.info("Репозиторий книг инициализирован успешно")
except Exception as e:
    logger.critical(f"Не удалось инициализировать репозиторий книг: {str(e)}", exc_info=True)
    raise
