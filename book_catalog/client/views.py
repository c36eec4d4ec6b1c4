"""
Состояние страниц списка, детального просмотра, создания и редактирования
без отрисовки: что показывать, какие кнопки активны и куда переходить.
"""
import asyncio
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from book_catalog.client.api import BooksApi, books_variables
from book_catalog.client.mutations import LIST_PATH, BookMutations, Mutation
from book_catalog.config import settings
from book_catalog.schemas.book import Book, BookCreate, BookUpdate, BooksPage, SortField, SortOrder
from book_catalog.tools.errors import NetworkError
from book_catalog.tools.logger import setup_logger

logger = setup_logger(__name__)

CREATE_PATH = f"{LIST_PATH}/new"


@dataclass(frozen=True)
class EmptyState:
    title: str
    description: str
    # (подпись, путь); путь None - действие без перехода
    actions: Tuple[Tuple[str, Optional[str]], ...] = ()


def describe_error(error: Exception) -> str:
    if isinstance(error, NetworkError) or "Network" in str(error):
        return "Network error"
    return str(error)


class ListView:
    """
    Список книг с поиском, сортировкой и пагинацией.

    Поиск применяется с задержкой; ответ на устаревший запрос
    отбрасывается, побеждает последний.
    """

    def __init__(
            self,
            api: BooksApi,
            mutations: BookMutations,
            page_size: int = settings.PAGE_SIZE,
            debounce_seconds: float = settings.SEARCH_DEBOUNCE_SECONDS
    ) -> None:
        self.api = api
        self.mutations = mutations
        self.page_size = page_size
        self.debounce_seconds = debounce_seconds

        self.search = ""
        self.debounced_search = ""
        self.page = 1
        self.sort_field = SortField.RATING
        self.sort_order = SortOrder.DESC

        self.data: Optional[BooksPage] = None
        self.error: Optional[Exception] = None
        self.loading = False
        self.deleting_id: Union[int, str, None] = None

        self._request_seq = 0
        self._debounce_task: Optional[asyncio.Task] = None

    def variables(self) -> Dict[str, Any]:
        return books_variables(
            limit=self.page_size,
            skip=(self.page - 1) * self.page_size,
            search=self.debounced_search or None,
            sort_field=self.sort_field,
            sort_order=self.sort_order,
        )

    @property
    def items(self) -> List[Book]:
        return self.data.items if self.data else []

    @property
    def total(self) -> int:
        return self.data.total if self.data else 0

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))

    @property
    def show_pagination(self) -> bool:
        return self.total_pages > 1 and len(self.items) > 0

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return f"Error loading books: {describe_error(self.error)}"

    @property
    def empty_state(self) -> Optional[EmptyState]:
        if self.loading or self.error is not None or self.total > 0:
            return None
        if self.debounced_search:
            return EmptyState(
                title="No search results",
                description="No books match your query. Try a different search or clear the query.",
                actions=(("Clear search", None), ("Create book", CREATE_PATH)),
            )
        return EmptyState(
            title="No books yet",
            description="You don't have any books yet. Create one to get started.",
            actions=(("Create book", CREATE_PATH),),
        )

    def is_row_disabled(self, book_id: Union[int, str]) -> bool:
        return self.deleting_id is not None and str(self.deleting_id) == str(book_id)

    async def refresh(self) -> None:
        """Загрузить текущую страницу: сначала из кэша, затем из сети."""
        self._request_seq += 1
        seq = self._request_seq
        variables = self.variables()

        cached = self.api.read_books(variables)
        if cached is not None:
            self.data = cached
        self.loading = True
        self.error = None

        try:
            page = await self.api.fetch_books(variables, fetch_policy="network-only")
        except Exception as e:
            if seq == self._request_seq:
                self.error = e
                self.loading = False
            return

        if seq != self._request_seq:
            logger.debug(f"Ответ на устаревший запрос {seq} отброшен")
            return

        self.data = page
        self.loading = False
        if self._clamp_page():
            await self.refresh()

    def _clamp_page(self) -> bool:
        """Вернуть страницу в допустимый диапазон. True, если страница изменилась."""
        if self.page > self.total_pages:
            self.page = self.total_pages
            return True
        # Страница пустая, хотя книги есть: шаг назад
        if self.page > 1 and not self.items and self.total > 0:
            self.page = max(1, self.page - 1)
            return True
        return False

    def set_search(self, value: str) -> asyncio.Task:
        """Изменить строку поиска; запрос уйдет после паузы во вводе."""
        self.search = value
        self.page = 1
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = asyncio.create_task(self._apply_search())
        return self._debounce_task

    async def _apply_search(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        self.debounced_search = self.search
        await self.refresh()

    async def clear_search(self) -> None:
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self.search = ""
        self.debounced_search = ""
        self.page = 1
        await self.refresh()

    async def set_sort_field(self, field: SortField) -> None:
        self.sort_field = SortField(field)
        self.page = 1
        await self.refresh()

    async def set_sort_order(self, order: SortOrder) -> None:
        self.sort_order = SortOrder(order)
        self.page = 1
        await self.refresh()

    async def set_page(self, page: int) -> None:
        self.page = max(1, min(page, self.total_pages))
        await self.refresh()

    async def retry(self) -> None:
        await self.refresh()

    async def delete(self, book_id: Union[int, str]) -> Optional[Mutation]:
        """Удалить строку. Пока удаление идет, кнопки этой строки неактивны."""
        if self.is_row_disabled(book_id):
            return None
        variables = self.variables()
        self.deleting_id = book_id
        try:
            mutation = await self.mutations.delete(book_id, list_variables=variables)
        finally:
            self.deleting_id = None
        cached = self.api.read_books(variables)
        if cached is not None:
            self.data = cached
        return mutation


class DetailStatus(str, Enum):
    LOADING = "loading"
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


class DetailView:
    """Одна книга. Сначала ищется в кэше, затем на сервере."""

    not_found_state = EmptyState(
        title="Book not found",
        description=(
            "This book doesn't appear to exist (it may not have been saved). "
            "You can browse the list or create a new book."
        ),
        actions=(("Back to list", LIST_PATH), ("Create book", CREATE_PATH)),
    )

    def __init__(self, api: BooksApi, book_id: Union[int, str]) -> None:
        self.api = api
        self.book_id = book_id
        self.status = DetailStatus.LOADING
        self.book: Optional[Book] = None
        self.error: Optional[Exception] = None

    @property
    def edit_path(self) -> str:
        return f"{LIST_PATH}/{self.book_id}/edit"

    async def load(self, fetch_policy: str = "cache-first") -> DetailStatus:
        self.status = DetailStatus.LOADING
        self.error = None
        try:
            self.book = await self.api.fetch_book(self.book_id, fetch_policy=fetch_policy)
        except Exception as e:
            self.error = e
            self.status = DetailStatus.ERROR
            return self.status

        self.status = DetailStatus.FOUND if self.book is not None else DetailStatus.NOT_FOUND
        return self.status

    async def retry(self) -> DetailStatus:
        return await self.load(fetch_policy="network-only")


class EditView(DetailView):
    not_found_state = EmptyState(
        title="Can't edit",
        description="That book wasn't found. It may have been removed or never saved.",
        actions=(("Back to list", LIST_PATH),),
    )

    def __init__(self, api: BooksApi, mutations: BookMutations, book_id: Union[int, str]) -> None:
        super().__init__(api, book_id)
        self.mutations = mutations
        self.saving = False

    async def submit(self, title: str, author: str, description: str, rating: Optional[float]) -> Mutation:
        """Сохранить форму. При ошибке пользователь остается на форме (redirect=None)."""
        self.saving = True
        try:
            return await self.mutations.update(
                BookUpdate(id=self.book_id, title=title, author=author, description=description, rating=rating)
            )
        finally:
            self.saving = False


class CreateView:
    initial = BookCreate(title="", author="", description="", rating=0)

    def __init__(self, mutations: BookMutations) -> None:
        self.mutations = mutations
        self.loading = False

    async def submit(self, values: BookCreate) -> Mutation:
        """Создать книгу; при успехе redirect указывает на ее страницу."""
        self.loading = True
        try:
            return await self.mutations.create(values)
        finally:
            self.loading = False
