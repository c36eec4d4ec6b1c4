import sys
from pathlib import Path
from typing import List

import pytest

# Ensure the project root is on sys.path for direct pytest runs
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from book_catalog.schemas.book import Book  # noqa: E402


def make_book(id, title=None, author="Unknown Author", rating=0.0, description="") -> Book:
    return Book(
        id=id,
        title=title if title is not None else f"Book {id}",
        author=author,
        rating=rating,
        description=description,
    )


def make_books(n: int = 3) -> List[Book]:
    return [make_book(str(i + 1)) for i in range(n)]


def book_payload(id, title=None, author="Unknown Author", rating=0.0, description="") -> dict:
    """Книга в том виде, в котором ее возвращает GraphQL сервер."""
    return {
        "__typename": "Book",
        "id": str(id),
        "title": title if title is not None else f"Book {id}",
        "author": author,
        "rating": rating,
        "description": description,
    }


def page_payload(items, total=None, skip=0, limit=10) -> dict:
    return {
        "__typename": "BooksPage",
        "items": items,
        "total": len(items) if total is None else total,
        "skip": skip,
        "limit": limit,
    }


@pytest.fixture
def books():
    return make_books(3)
