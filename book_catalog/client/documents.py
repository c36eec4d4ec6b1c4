"""
GraphQL операции клиента.

Фрагменты запрашивают __typename, чтобы кэш мог нормализовать книги по id.
"""

BOOK_CORE = """
fragment BookCore on Book {
  __typename
  id
  title
  author
  rating
}
"""

BOOK_DETAIL = """
fragment BookDetail on Book {
  ...BookCore
  description
}
""" + BOOK_CORE

# Поля, которые детальная страница читает из кэша
BOOK_DETAIL_FIELDS = ("id", "title", "author", "rating", "description")

BOOKS_QUERY = """
query Books($limit: Int!, $skip: Int, $search: String, $sort: BooksSort) {
  books(limit: $limit, skip: $skip, search: $search, sort: $sort) {
    __typename
    items {
      ...BookCore
    }
    total
    skip
    limit
  }
}
""" + BOOK_CORE

BOOK_QUERY = """
query Book($id: ID!) {
  book(id: $id) {
    ...BookDetail
  }
}
""" + BOOK_DETAIL

CREATE_BOOK = """
mutation CreateBook($input: BookCreateInput!) {
  createBook(input: $input) {
    ...BookDetail
  }
}
""" + BOOK_DETAIL

UPDATE_BOOK = """
mutation UpdateBook($input: BookUpdateInput!) {
  updateBook(input: $input) {
    ...BookDetail
  }
}
""" + BOOK_DETAIL

DELETE_BOOK = """
mutation DeleteBook($id: ID!) {
  deleteBook(id: $id)
}
"""
