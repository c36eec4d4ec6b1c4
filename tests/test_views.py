import asyncio
from unittest.mock import AsyncMock, MagicMock

from book_catalog.client.api import BooksApi
from book_catalog.client.mutations import BookMutations
from book_catalog.client.notifications import Notifier
from book_catalog.client.store import BooksStore, ReactiveBooksStore
from book_catalog.client.views import CreateView, DetailStatus, DetailView, EditView, ListView
from book_catalog.schemas.book import BookCreate, BooksPage, SortField, SortOrder
from book_catalog.tools.errors import NetworkError
from conftest import book_payload, page_payload


def _catalog(total=25):
    """BooksApi поверх фейкового сервера с total книгами."""
    transport = MagicMock()
    rows = [book_payload(i + 1) for i in range(total)]

    async def execute(query, variables=None):
        variables = variables or {}
        if "deleteBook" in query:
            return {"deleteBook": True}
        if "createBook" in query:
            return {"createBook": book_payload(195, title=variables["input"]["title"])}
        if "book(id" in query:
            match = [row for row in rows if row["id"] == variables["id"]]
            return {"book": match[0] if match else None}
        skip, limit = variables["skip"], variables["limit"]
        last = max(0, ((len(rows) - 1) // limit) * limit) if rows and limit else 0
        skip = min(skip, last)
        return {"books": page_payload(rows[skip:skip + limit], total=len(rows), skip=skip, limit=limit)}

    transport.execute = AsyncMock(side_effect=execute)
    api = BooksApi(transport)
    store = ReactiveBooksStore(api)
    store.books_var(BooksStore(initialized=True))
    mutations = BookMutations(store, api, Notifier())
    return api, mutations, transport


def test_list_loads_first_page_with_default_sort():
    api, mutations, transport = _catalog()
    view = ListView(api, mutations, page_size=10, debounce_seconds=0)

    asyncio.run(view.refresh())

    variables = transport.execute.await_args.args[1]
    assert variables["sort"] == {"field": "RATING", "order": "DESC"}
    assert [b.id for b in view.items][:2] == ["1", "2"]
    assert view.total == 25
    assert view.total_pages == 3
    assert view.show_pagination
    assert view.empty_state is None


def test_page_beyond_last_is_clamped():
    api, mutations, _ = _catalog(total=20)
    view = ListView(api, mutations, page_size=10, debounce_seconds=0)
    view.page = 3

    asyncio.run(view.refresh())

    assert view.page == 2
    assert [b.id for b in view.items][0] == "11"


def test_sort_change_resets_page():
    api, mutations, transport = _catalog()
    view = ListView(api, mutations, page_size=10, debounce_seconds=0)
    view.page = 2

    asyncio.run(view.set_sort_field(SortField.TITLE))
    asyncio.run(view.set_sort_order(SortOrder.ASC))

    assert view.page == 1
    assert transport.execute.await_args.args[1]["sort"] == {"field": "TITLE", "order": "ASC"}


def test_search_is_debounced_and_last_value_wins():
    api, mutations, transport = _catalog()
    view = ListView(api, mutations, page_size=10, debounce_seconds=0.01)
    view.page = 2

    async def scenario():
        view.set_search("a")
        view.set_search("ab")
        task = view.set_search("abc")
        await task

    asyncio.run(scenario())

    assert transport.execute.await_count == 1
    assert transport.execute.await_args.args[1]["search"] == "abc"
    assert view.page == 1


def test_stale_response_is_discarded():
    api, mutations, _ = _catalog()
    view = ListView(api, mutations, page_size=10, debounce_seconds=0)
    api.fetch_books = AsyncMock()

    async def scenario():
        slow_gate = asyncio.Event()

        async def fetch(variables, fetch_policy="network-only"):
            if variables["search"] == "old":
                await slow_gate.wait()
                return BooksPage.model_validate(page_payload([book_payload(1, title="Old")]))
            return BooksPage.model_validate(page_payload([book_payload(2, title="New")]))

        api.fetch_books.side_effect = fetch
        view.debounced_search = "old"
        first = asyncio.create_task(view.refresh())
        await asyncio.sleep(0)
        view.debounced_search = "new"
        await view.refresh()
        slow_gate.set()
        await first

    asyncio.run(scenario())

    assert [b.title for b in view.items] == ["New"]


def test_empty_states():
    api, mutations, _ = _catalog(total=0)
    view = ListView(api, mutations, page_size=10, debounce_seconds=0)

    asyncio.run(view.refresh())
    assert view.empty_state.title == "No books yet"
    assert not view.show_pagination

    view.debounced_search = "zzz"
    asyncio.run(view.refresh())
    assert view.empty_state.title == "No search results"
    assert ("Clear search", None) in view.empty_state.actions


def test_error_message_and_retry():
    api, mutations, transport = _catalog()
    view = ListView(api, mutations, page_size=10, debounce_seconds=0)
    original = transport.execute.side_effect
    transport.execute.side_effect = NetworkError("connection refused")

    asyncio.run(view.refresh())

    assert view.error_message == "Error loading books: Network error"
    assert view.empty_state is None

    transport.execute.side_effect = original
    asyncio.run(view.retry())

    assert view.error_message is None
    assert view.total == 25


def test_delete_disables_row_while_pending_and_updates_page():
    api, mutations, transport = _catalog(total=3)
    view = ListView(api, mutations, page_size=10, debounce_seconds=0)
    asyncio.run(view.refresh())
    seen = {}
    original = transport.execute.side_effect

    async def execute(query, variables=None):
        if "deleteBook" in query:
            seen["disabled"] = view.is_row_disabled("2")
        return await original(query, variables)

    transport.execute.side_effect = execute

    mutation = asyncio.run(view.delete("2"))

    assert mutation.ok
    assert seen["disabled"] is True
    assert not view.is_row_disabled("2")
    assert [b.id for b in view.items] == ["1", "3"]
    assert view.total == 2


def test_detail_found_and_not_found():
    api, _, _ = _catalog(total=3)

    found = DetailView(api, "2")
    missing = DetailView(api, "404")

    assert asyncio.run(found.load()) == DetailStatus.FOUND
    assert found.book.title == "Book 2"
    assert found.edit_path == "/books/2/edit"
    assert asyncio.run(missing.load()) == DetailStatus.NOT_FOUND
    assert missing.not_found_state.title == "Book not found"


def test_detail_error_then_retry():
    api, _, transport = _catalog(total=3)
    original = transport.execute.side_effect
    transport.execute.side_effect = NetworkError("down")
    view = DetailView(api, "1")

    assert asyncio.run(view.load()) == DetailStatus.ERROR

    transport.execute.side_effect = original
    assert asyncio.run(view.retry()) == DetailStatus.FOUND


def test_edit_view_not_found_copy():
    api, mutations, _ = _catalog(total=0)
    view = EditView(api, mutations, "9")

    assert asyncio.run(view.load()) == DetailStatus.NOT_FOUND
    assert view.not_found_state.title == "Can't edit"


def test_create_then_detail_reads_from_cache():
    api, mutations, transport = _catalog(total=0)
    create = CreateView(mutations)

    mutation = asyncio.run(create.submit(BookCreate(title="Fresh", author="A", description="")))
    calls = transport.execute.await_count
    detail = DetailView(api, mutation.book.id)

    assert mutation.redirect == "/books/195"
    assert asyncio.run(detail.load()) == DetailStatus.FOUND
    assert detail.book.title == "Fresh"
    assert transport.execute.await_count == calls
    assert not create.loading


def test_detail_after_list_fetches_missing_description():
    transport = MagicMock()
    row = book_payload(1, description="Real text")
    list_row = {k: v for k, v in row.items() if k != "description"}

    async def execute(query, variables=None):
        if "book(id" in query:
            return {"book": row}
        return {"books": page_payload([list_row], total=1)}

    transport.execute = AsyncMock(side_effect=execute)
    api = BooksApi(transport)
    asyncio.run(api.fetch_books({"limit": 10, "skip": 0, "search": None, "sort": {"field": "RATING", "order": "DESC"}}))

    view = DetailView(api, "1")

    assert asyncio.run(view.load()) == DetailStatus.FOUND
    assert view.book.description == "Real text"
    assert transport.execute.await_count == 2


def test_edit_view_goes_to_network_for_incomplete_entity():
    api, mutations, transport = _catalog(total=3)
    asyncio.run(ListView(api, mutations, page_size=10, debounce_seconds=0).refresh())
    calls = transport.execute.await_count
    api.cache.write_query(
        "books",
        {"search": None, "sort": {"field": "RATING", "order": "DESC"}},
        page_payload([{k: v for k, v in book_payload(4).items() if k != "description"}]),
    )

    view = EditView(api, mutations, "4")

    assert asyncio.run(view.load()) == DetailStatus.NOT_FOUND
    assert transport.execute.await_count == calls + 1
