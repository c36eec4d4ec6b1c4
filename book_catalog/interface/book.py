from abc import ABC, abstractmethod
from typing import Optional, Union

from book_catalog.schemas.book import Book, BookCreate, BookUpdate, BooksPage, BooksSort
from book_catalog.tools.logger import setup_logger

logger = setup_logger(__name__)


class BaseBookRepository(ABC):
    """Абстрактный базовый класс для репозитория книг"""

    def __init__(self) -> None:
        logger.info(f"Initializing {self.__class__.__name__}")

    @abstractmethod
    async def get_page(
            self,
            search: Optional[str] = None,
            limit: Optional[int] = None,
            skip: Optional[int] = None,
            sort: Optional[BooksSort] = None
    ) -> BooksPage:
        """
        Получить страницу книг с поиском, сортировкой и пагинацией

        Args:
            search: Строка поиска
            limit: Размер страницы
            skip: Смещение (будет ограничено началом последней страницы)
            sort: Поле и порядок сортировки

        Returns:
            BooksPage: Страница книг

        Raises:
            ApiError: В случае ошибки источника данных
        """

    @abstractmethod
    async def get(self, id: Union[int, str]) -> Optional[Book]:
        """
        Получить книгу по ID

        Returns:
            Optional[Book]: Найденная книга или None
        """

    @abstractmethod
    async def create(self, obj_in: BookCreate) -> Book:
        """
        Создать новую книгу

        Raises:
            ApiError: В случае ошибки источника данных
        """

    @abstractmethod
    async def update(self, obj_in: BookUpdate) -> Book:
        """
        Обновить существующую книгу

        Raises:
            ApiError: В случае ошибки источника данных
        """

    @abstractmethod
    async def delete(self, id: Union[int, str]) -> bool:
        """
        Удалить книгу

        Raises:
            ApiError: В случае ошибки источника данных
        """
