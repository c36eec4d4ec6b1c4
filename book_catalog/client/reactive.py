from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")

Listener = Callable[[T], None]


class ReactiveVar(Generic[T]):
    """
    Изменяемая ячейка с подписчиками.

    var() возвращает текущее значение, var(value) записывает новое и
    синхронно оповещает подписчиков. Чтение всегда видит последнее
    записанное значение.
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._listeners: List[Listener] = []

    def __call__(self, *args: T) -> T:
        if args:
            self.set(args[0])
        return self._value

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        if value is self._value:
            return
        self._value = value
        for listener in list(self._listeners):
            listener(value)

    def on_change(self, listener: Listener) -> Callable[[], None]:
        """Подписаться на изменения. Возвращает функцию отписки."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


def make_var(value: T) -> ReactiveVar[T]:
    return ReactiveVar(value)
