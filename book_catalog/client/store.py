from typing import List, Optional, Union

from pydantic import BaseModel, Field

from book_catalog.client.api import BooksApi, books_variables
from book_catalog.client.reactive import ReactiveVar, make_var
from book_catalog.schemas.book import Book, SortField, SortOrder
from book_catalog.tools.logger import setup_logger

logger = setup_logger(__name__)

INITIAL_LIMIT = 10


class BooksStore(BaseModel):
    items: List[Book] = Field(default_factory=list)
    total: int = 0
    # True после первой попытки загрузки, даже неудачной
    initialized: bool = False


class ReactiveBooksStore:
    """
    Единый источник данных для списка книг в памяти.

    Все изменения синхронные и записывают в books_var новый снимок
    состояния; читатели видят последнее записанное значение.
    """

    def __init__(self, api: BooksApi, books_var: Optional[ReactiveVar[BooksStore]] = None) -> None:
        self.api = api
        self.books_var: ReactiveVar[BooksStore] = books_var if books_var is not None else make_var(BooksStore())

    @property
    def state(self) -> BooksStore:
        return self.books_var()

    async def initialize(self) -> None:
        """
        Один раз загрузить первую страницу.

        При ошибке хранилище все равно помечается инициализированным, чтобы
        не уйти в цикл повторов: список останется пустым до ручного обновления.
        """
        if self.books_var().initialized:
            return

        variables = books_variables(
            limit=INITIAL_LIMIT,
            skip=0,
            sort_field=SortField.TITLE,
            sort_order=SortOrder.ASC,
        )
        try:
            page = await self.api.fetch_books(variables, fetch_policy="network-only")
            self.books_var(BooksStore(items=page.items, total=page.total, initialized=True))
            logger.info(f"Хранилище книг инициализировано: {len(page.items)} из {page.total}")
        except Exception as e:
            logger.error(f"Ошибка инициализации хранилища книг: {str(e)}", exc_info=True)
            self.books_var(self.books_var().model_copy(update={"initialized": True}))

    def add(self, book: Book) -> None:
        cur = self.books_var()
        self.books_var(cur.model_copy(update={"items": [book, *cur.items], "total": cur.total + 1}))

    def remove_by_id(self, book_id: Union[int, str]) -> List[Book]:
        """Удалить книги с данным id (сравнение строкой). Возвращает удаленные."""
        cur = self.books_var()
        kept = [b for b in cur.items if str(b.id) != str(book_id)]
        removed = [b for b in cur.items if str(b.id) == str(book_id)]
        self.books_var(cur.model_copy(update={
            "items": kept,
            "total": max(0, cur.total - len(removed)),
        }))
        return removed

    def replace(self, book: Book) -> None:
        cur = self.books_var()
        items = [book if str(b.id) == str(book.id) else b for b in cur.items]
        self.books_var(cur.model_copy(update={"items": items}))

    def index_of(self, book_id: Union[int, str]) -> int:
        for index, book in enumerate(self.books_var().items):
            if str(book.id) == str(book_id):
                return index
        return -1

    def insert_at(self, index: int, book: Book, total: Optional[int] = None) -> None:
        """Вставить книгу на позицию index. total задает итог явно (откат удаления), иначе +1."""
        cur = self.books_var()
        items = list(cur.items)
        items.insert(max(0, min(index, len(items))), book)
        new_total = cur.total + 1 if total is None else total
        self.books_var(cur.model_copy(update={"items": items, "total": new_total}))
