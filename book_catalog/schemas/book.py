from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class SortField(str, Enum):
    RATING = "RATING"
    TITLE = "TITLE"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class BooksSort(BaseModel):
    field: SortField = SortField.RATING
    order: SortOrder = SortOrder.DESC


class Book(BaseModel):
    """
    Книга в каталоге.

    Сервер всегда заполняет author, description и rating. Оптимистичные
    записи на клиенте могут содержать только id и title.
    """
    id: Union[int, str]
    title: str
    author: Optional[str] = None
    rating: Optional[float] = None
    description: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "id": 1,
                "title": "Essence Mascara Lash Princess",
                "author": "Essence",
                "rating": 4.94,
                "description": "The Essence Mascara Lash Princess is a popular mascara"
            }
        }


class BookCreate(BaseModel):
    title: str
    author: str
    description: str
    rating: Optional[float] = None


class BookUpdate(BaseModel):
    id: Union[int, str]
    title: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    rating: Optional[float] = None


class BooksPage(BaseModel):
    """Страница списка книг. Пересчитывается при каждом запросе."""
    items: List[Book] = Field(default_factory=list)
    total: int = 0
    skip: int = 0
    limit: int = 0
