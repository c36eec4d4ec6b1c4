from typing import Optional

import strawberry
from strawberry.fastapi import GraphQLRouter

from book_catalog.crud.book import book_repository
from book_catalog.schemas.graphql_types import (
    BookCreateInput,
    BooksPageType,
    BooksSortInput,
    BookType,
    BookUpdateInput,
)
from book_catalog.schemas.book import BookCreate, BookUpdate
from book_catalog.tools.logger import setup_logger

logger = setup_logger(__name__)


@strawberry.type
class Query:
    @strawberry.field
    async def books(
        self,
        search: Optional[str] = None,
        limit: Optional[int] = 20,
        skip: Optional[int] = 0,
        sort: Optional[BooksSortInput] = None,
    ) -> BooksPageType:
        logger.debug(f"Query.books search={search!r} limit={limit} skip={skip}")
        page = await book_repository.get_page(
            search=search or None,
            limit=limit,
            skip=skip,
            sort=sort.to_model() if sort else None,
        )
        return BooksPageType.from_model(page)

    @strawberry.field
    async def book(self, id: strawberry.ID) -> Optional[BookType]:
        logger.debug(f"Query.book id={id}")
        book = await book_repository.get(id)
        return BookType.from_model(book) if book else None


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def create_book(self, input: BookCreateInput) -> BookType:
        book = await book_repository.create(
            BookCreate(
                title=input.title,
                author=input.author,
                description=input.description,
                rating=input.rating,
            )
        )
        return BookType.from_model(book)

    @strawberry.mutation
    async def update_book(self, input: BookUpdateInput) -> BookType:
        book = await book_repository.update(
            BookUpdate(
                id=str(input.id),
                title=input.title,
                author=input.author,
                description=input.description,
                rating=input.rating,
            )
        )
        return BookType.from_model(book)

    @strawberry.mutation
    async def delete_book(self, id: strawberry.ID) -> bool:
        return await book_repository.delete(id)


schema = strawberry.Schema(query=Query, mutation=Mutation)

graphql_router = GraphQLRouter(schema)
