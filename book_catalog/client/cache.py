"""
Нормализованный кэш GraphQL клиента.

Сущности с ключевыми полями (Book по id) хранятся один раз под ключом
"Book:<id>", а результаты запросов содержат ссылки на них. Как ключевать
и сливать значения полей Query, задают политики полей:

* ``books`` ключуется только по (search, sort.field, sort.order), новая
  страница всегда заменяет закэшированную;
* ``book(id)`` при отсутствии значения в кэше возвращает ссылку на
  сущность Book:<id>, поэтому только что созданную книгу можно показать
  без запроса к серверу. Если сущности нет или в ней не хватает полей,
  которые просит читающий, чтение считается промахом.
"""
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

from book_catalog.tools.logger import setup_logger

logger = setup_logger(__name__)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

KeyArg = Union[str, Tuple[str, ...]]


@dataclass(frozen=True)
class Reference:
    key: str


@dataclass
class ReadOptions:
    args: Dict[str, Any]
    to_reference: Callable[[str, Any], Reference]


@dataclass
class FieldPolicy:
    key_args: Optional[Sequence[KeyArg]] = None
    merge: Optional[Callable[[Any, Any], Any]] = None
    read: Optional[Callable[[Any, ReadOptions], Any]] = None


@dataclass
class TypePolicy:
    # False - тип не нормализуется (контейнер страницы, а не сущность)
    key_fields: Union[Sequence[str], bool] = ("id",)


def _dig(args: Mapping[str, Any], path: Tuple[str, ...]) -> Any:
    value: Any = args
    for part in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def _assign(target: Dict[str, Any], path: Tuple[str, ...], value: Any) -> None:
    for part in path[:-1]:
        target = target.setdefault(part, {})
    target[path[-1]] = value


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return str(value)


class InMemoryCache:
    def __init__(
            self,
            type_policies: Optional[Dict[str, TypePolicy]] = None,
            field_policies: Optional[Dict[str, FieldPolicy]] = None
    ) -> None:
        self.type_policies: Dict[str, TypePolicy] = type_policies or {}
        self.field_policies: Dict[str, FieldPolicy] = field_policies or {}
        self._entities: Dict[str, Dict[str, Any]] = {}
        self._root: Dict[str, Any] = {}

    # Ключи

    def identify(self, obj: Mapping[str, Any]) -> Optional[str]:
        """Ключ сущности вида "Book:1" или None, если объект не нормализуется."""
        typename = obj.get("__typename")
        if not typename:
            return None
        key_fields = self.type_policies.get(typename, TypePolicy()).key_fields
        if not key_fields:
            return None
        values = [obj.get(name) for name in key_fields]
        if any(value is None for value in values):
            return None
        return ":".join([typename, *(str(value) for value in values)])

    def to_reference(self, typename: str, id: Any) -> Reference:
        return Reference(f"{typename}:{id}")

    def field_key(self, field_name: str, args: Optional[Mapping[str, Any]] = None) -> str:
        """Ключ хранения поля Query с учетом key_args политики."""
        args = args or {}
        policy = self.field_policies.get(field_name)
        if policy is not None and policy.key_args is not None:
            selected: Dict[str, Any] = {}
            for key_arg in policy.key_args:
                path = (key_arg,) if isinstance(key_arg, str) else tuple(key_arg)
                value = _dig(args, path)
                if value is not None:
                    _assign(selected, path, value)
        else:
            selected = {k: v for k, v in args.items() if v is not None}
        if not selected:
            return field_name
        return f"{field_name}({json.dumps(selected, sort_keys=True, default=_json_default)})"

    # Запись и чтение

    def write_query(self, field_name: str, args: Optional[Mapping[str, Any]], data: Any) -> None:
        key = self.field_key(field_name, args)
        incoming = self._normalize(data)
        policy = self.field_policies.get(field_name)
        if policy is not None and policy.merge is not None:
            existing = self._root.get(key)
            incoming = policy.merge(existing, incoming)
        self._root[key] = incoming
        logger.debug(f"Кэш: записано поле {key}")

    def read_query(
            self,
            field_name: str,
            args: Optional[Mapping[str, Any]] = None,
            fields: Optional[Sequence[str]] = None
    ) -> Any:
        """
        Прочитать поле Query.

        Args:
            field_name: Имя поля Query
            args: Аргументы поля
            fields: Поля объекта, которые нужны вызывающему. Если хотя бы
                одного нет (сущность записана более узким запросом), чтение
                считается промахом

        Returns:
            Денормализованную копию значения или MISSING при промахе
        """
        args = dict(args or {})
        key = self.field_key(field_name, args)
        value = self._root.get(key, MISSING)
        policy = self.field_policies.get(field_name)
        if policy is not None and policy.read is not None:
            value = policy.read(value, ReadOptions(args=args, to_reference=self.to_reference))
        result = self._denormalize(value)
        if fields and isinstance(result, dict) and any(name not in result for name in fields):
            logger.debug(f"Кэш: у {key} нет части полей {list(fields)}")
            return MISSING
        return result

    def update_query(
            self,
            field_name: str,
            args: Optional[Mapping[str, Any]],
            updater: Callable[[Any], Any]
    ) -> Any:
        """
        Переписать закэшированное значение поля без merge политики.

        Returns:
            Прежнее сырое значение (для restore_query) или MISSING, если
            значения не было и ничего не изменено
        """
        key = self.field_key(field_name, args)
        previous = self._root.get(key, MISSING)
        current = self._denormalize(previous)
        if current is MISSING:
            return MISSING
        self._root[key] = self._normalize(updater(current))
        return previous

    def restore_query(self, field_name: str, args: Optional[Mapping[str, Any]], raw: Any) -> None:
        key = self.field_key(field_name, args)
        if raw is MISSING:
            self._root.pop(key, None)
        else:
            self._root[key] = raw
        logger.debug(f"Кэш: поле {key} восстановлено")

    def write_entity(self, obj: Mapping[str, Any]) -> Optional[str]:
        """Нормализовать объект. Возвращает ключ сущности или None."""
        ref = self._normalize(obj)
        return ref.key if isinstance(ref, Reference) else None

    def read_entity(self, typename: str, id: Any) -> Any:
        return self._denormalize(self.to_reference(typename, id))

    def evict(self, typename: str, id: Any) -> bool:
        return self._entities.pop(self.to_reference(typename, id).key, None) is not None

    # Нормализация

    def _normalize(self, value: Any) -> Any:
        if isinstance(value, list):
            return [self._normalize(item) for item in value]
        if isinstance(value, Mapping):
            normalized = {k: self._normalize(v) for k, v in value.items()}
            key = self.identify(value)
            if key is None:
                return normalized
            self._entities.setdefault(key, {}).update(normalized)
            return Reference(key)
        return value

    def _denormalize(self, value: Any) -> Any:
        if isinstance(value, Reference):
            entity = self._entities.get(value.key)
            if entity is None:
                return MISSING
            return self._denormalize(entity)
        if isinstance(value, list):
            items = [self._denormalize(item) for item in value]
            return MISSING if any(item is MISSING for item in items) else items
        if isinstance(value, dict):
            result = {k: self._denormalize(v) for k, v in value.items()}
            return MISSING if any(v is MISSING for v in result.values()) else result
        return value


def merge_replace(existing: Any, incoming: Any) -> Any:
    return incoming


def read_book(existing: Any, options: ReadOptions) -> Any:
    if existing is not MISSING and existing is not None:
        return existing
    book_id = options.args.get("id")
    if not book_id:
        return existing
    return options.to_reference("Book", str(book_id))


def create_cache() -> InMemoryCache:
    """Кэш с политиками приложения каталога."""
    return InMemoryCache(
        type_policies={
            "Book": TypePolicy(key_fields=("id",)),
            "BooksPage": TypePolicy(key_fields=False),
        },
        field_policies={
            "books": FieldPolicy(
                key_args=("search", ("sort", "field"), ("sort", "order")),
                merge=merge_replace,
            ),
            "book": FieldPolicy(key_args=("id",), read=read_book),
        },
    )
