"""
Оптимистичные мутации книг.

Каждая мутация проходит состояния
IDLE -> OPTIMISTIC -> PENDING -> COMMITTED | ROLLED_BACK.
Создание и удаление меняют хранилище сразу и откатывают изменение при
ошибке сети. Обновление ничего не меняет заранее: при ошибке пользователь
просто остается на форме редактирования.
"""
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Union

from book_catalog.client.api import BooksApi
from book_catalog.client.notifications import Notifier
from book_catalog.client.store import ReactiveBooksStore
from book_catalog.schemas.book import Book, BookCreate, BookUpdate
from book_catalog.tools.logger import setup_logger

logger = setup_logger(__name__)

LIST_PATH = "/books"


class MutationState(str, Enum):
    IDLE = "idle"
    OPTIMISTIC = "optimistic"
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


TRANSITIONS: Dict[MutationState, Set[MutationState]] = {
    MutationState.IDLE: {MutationState.OPTIMISTIC, MutationState.PENDING},
    MutationState.OPTIMISTIC: {MutationState.PENDING},
    MutationState.PENDING: {MutationState.COMMITTED, MutationState.ROLLED_BACK},
    MutationState.COMMITTED: set(),
    MutationState.ROLLED_BACK: set(),
}


class InvalidTransition(RuntimeError):
    pass


@dataclass
class Mutation:
    """Одна мутация в полете и ее история состояний."""
    kind: str
    book_id: Union[int, str, None] = None
    state: MutationState = MutationState.IDLE
    history: List[MutationState] = field(default_factory=lambda: [MutationState.IDLE])
    book: Optional[Book] = None
    error: Optional[Exception] = None
    redirect: Optional[str] = None

    def transition(self, new_state: MutationState) -> None:
        if new_state not in TRANSITIONS[self.state]:
            raise InvalidTransition(f"{self.kind}: {self.state.value} -> {new_state.value}")
        logger.debug(f"Мутация {self.kind} {self.book_id}: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    @property
    def ok(self) -> bool:
        return self.state == MutationState.COMMITTED


def temp_id() -> int:
    """Временный id для оптимистичной записи, до ответа сервера."""
    return random.randint(1_000_000, 9_999_999)


class BookMutations:
    def __init__(
            self,
            store: ReactiveBooksStore,
            api: BooksApi,
            notifier: Optional[Notifier] = None
    ) -> None:
        self.store = store
        self.api = api
        self.notifier = notifier if notifier is not None else Notifier()
        self._in_flight: Set[str] = set()

    def is_pending(self, book_id: Union[int, str]) -> bool:
        return str(book_id) in self._in_flight

    async def create(self, values: BookCreate) -> Mutation:
        """
        Создать книгу оптимистично.

        Временная запись добавляется в начало списка; при успехе - переход на
        детальную страницу новой книги, при ошибке запись удаляется и
        пользователь остается на форме.
        """
        optimistic = Book(id=temp_id(), **values.model_dump())
        mutation = Mutation(kind="create", book_id=optimistic.id, book=optimistic)

        self.store.add(optimistic)
        mutation.transition(MutationState.OPTIMISTIC)
        mutation.transition(MutationState.PENDING)
        try:
            created = await self.api.create_book(values)
        except Exception as e:
            self.store.remove_by_id(optimistic.id)
            mutation.error = e
            mutation.transition(MutationState.ROLLED_BACK)
            self.notifier.error("Create failed", str(e))
            logger.error(f"Создание книги отменено: {str(e)}")
            return mutation

        mutation.book = created
        mutation.redirect = f"{LIST_PATH}/{created.id}" if created.id is not None else LIST_PATH
        mutation.transition(MutationState.COMMITTED)
        self.notifier.success("Book created", created.title)
        return mutation

    async def delete(self, book_id: Union[int, str], list_variables: Optional[Dict[str, Any]] = None) -> Mutation:
        """
        Удалить книгу оптимистично.

        Строка исчезает сразу; при ошибке она возвращается на прежнее место,
        total восстанавливается. Повторный вызов для той же книги, пока
        первый не завершен, игнорируется.
        """
        mutation = Mutation(kind="delete", book_id=book_id)
        if self.is_pending(book_id):
            logger.info(f"Удаление книги {book_id} уже выполняется")
            return mutation

        self._in_flight.add(str(book_id))
        try:
            index = self.store.index_of(book_id)
            previous_total = self.store.state.total
            removed = self.store.remove_by_id(book_id)
            mutation.book = removed[0] if removed else None
            mutation.transition(MutationState.OPTIMISTIC)
            mutation.transition(MutationState.PENDING)
            try:
                await self.api.delete_book(book_id, list_variables=list_variables)
            except Exception as e:
                for offset, book in enumerate(removed):
                    self.store.insert_at(index + offset, book, total=previous_total)
                mutation.error = e
                mutation.transition(MutationState.ROLLED_BACK)
                self.notifier.error("Delete failed", str(e))
                logger.error(f"Удаление книги {book_id} отменено: {str(e)}")
                return mutation

            mutation.transition(MutationState.COMMITTED)
            self.notifier.success("Book deleted", mutation.book.title if mutation.book else str(book_id))
            return mutation
        finally:
            self._in_flight.discard(str(book_id))

    async def update(self, values: BookUpdate) -> Mutation:
        """
        Обновить книгу.

        Оптимистичных изменений нет: при успехе книга пишется в кэш и в
        хранилище, при ошибке показывается уведомление.
        """
        mutation = Mutation(kind="update", book_id=values.id)
        if self.is_pending(values.id):
            logger.info(f"Обновление книги {values.id} уже выполняется")
            return mutation

        self._in_flight.add(str(values.id))
        try:
            mutation.transition(MutationState.PENDING)
            try:
                updated = await self.api.update_book(values)
            except Exception as e:
                mutation.error = e
                mutation.transition(MutationState.ROLLED_BACK)
                self.notifier.error("Update failed", str(e))
                return mutation

            self.store.replace(updated)
            mutation.book = updated
            mutation.redirect = f"{LIST_PATH}/{updated.id}"
            mutation.transition(MutationState.COMMITTED)
            self.notifier.success("Book updated", updated.title)
            return mutation
        finally:
            self._in_flight.discard(str(values.id))
