from typing import Optional, Self

from book_catalog.client.api import BooksApi
from book_catalog.client.cache import InMemoryCache, create_cache
from book_catalog.client.mutations import BookMutations
from book_catalog.client.notifications import Notifier
from book_catalog.client.store import ReactiveBooksStore
from book_catalog.client.transport import GraphQLTransport
from book_catalog.client.views import CreateView, DetailView, EditView, ListView
from book_catalog.tools.logger import setup_logger

logger = setup_logger(__name__)


class BookCatalogClient:
    """
    Клиент каталога целиком: транспорт, кэш, хранилище, мутации и уведомления.

    При входе в контекст открывает HTTP сессию и один раз загружает
    хранилище книг.
    """

    def __init__(
            self,
            transport: Optional[GraphQLTransport] = None,
            cache: Optional[InMemoryCache] = None
    ) -> None:
        self.transport = transport if transport is not None else GraphQLTransport()
        self.cache = cache if cache is not None else create_cache()
        self.api = BooksApi(self.transport, self.cache)
        self.store = ReactiveBooksStore(self.api)
        self.notifier = Notifier()
        self.mutations = BookMutations(self.store, self.api, self.notifier)

    async def __aenter__(self) -> Self:
        await self.transport.open()
        await self.store.initialize()
        logger.info("Клиент каталога готов")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.transport.close()

    def list_view(self) -> ListView:
        return ListView(self.api, self.mutations)

    def detail_view(self, book_id) -> DetailView:
        return DetailView(self.api, book_id)

    def edit_view(self, book_id) -> EditView:
        return EditView(self.api, self.mutations, book_id)

    def create_view(self) -> CreateView:
        return CreateView(self.mutations)
