"""
GraphQL типы каталога книг.

Book соответствует продукту DummyJSON (brand -> author), BooksPage -
страница списка, которая пересчитывается при каждом запросе.
"""
from typing import List, Optional

import strawberry

from book_catalog.schemas.book import Book, BooksPage, BooksSort, SortField, SortOrder

BookSortField = strawberry.enum(SortField, name="BookSortField")
SortOrderEnum = strawberry.enum(SortOrder, name="SortOrder")


@strawberry.type(name="Book")
class BookType:
    id: strawberry.ID
    title: str
    author: str
    description: str
    rating: float

    @classmethod
    def from_model(cls, book: Book) -> "BookType":
        return cls(
            id=strawberry.ID(str(book.id)),
            title=book.title,
            author=book.author or "Unknown",
            description=book.description or "",
            rating=book.rating or 0.0,
        )


@strawberry.type(name="BooksPage")
class BooksPageType:
    items: List[BookType]
    total: int
    skip: int
    limit: int

    @classmethod
    def from_model(cls, page: BooksPage) -> "BooksPageType":
        return cls(
            items=[BookType.from_model(book) for book in page.items],
            total=page.total,
            skip=page.skip,
            limit=page.limit,
        )


@strawberry.input(name="BooksSort")
class BooksSortInput:
    field: BookSortField = SortField.RATING
    order: SortOrderEnum = SortOrder.DESC

    def to_model(self) -> BooksSort:
        return BooksSort(field=self.field, order=self.order)


@strawberry.input
class BookCreateInput:
    title: str
    author: str
    description: str
    rating: Optional[float] = None


@strawberry.input
class BookUpdateInput:
    id: strawberry.ID
    title: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    rating: Optional[float] = None
