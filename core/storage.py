import threading
from typing import Callable, Generic, Hashable, Optional, Protocol, TypeVar

from pydantic import BaseModel

from .errors import NotFoundError, ValidationError

T = TypeVar("T", bound=BaseModel)


class Repository(Protocol[T]):
    def insert(self, record: T) -> T: ...

    def find_by_id(self, record_id: Hashable) -> Optional[T]: ...

    def find_by_predicate(self, predicate: Callable[[T], bool]) -> list[T]: ...

    def update(self, record: T) -> T: ...

    def delete(self, record_id: Hashable) -> None: ...


class InMemoryRepository(Generic[T]):
    """Dict-backed repository keyed by ``record.id``, iterating in insertion order."""

    def __init__(self):
        self._records: dict[Hashable, T] = {}
        self._lock = threading.Lock()

    def insert(self, record: T) -> T:
        with self._lock:
            if record.id in self._records:
                raise ValidationError(f"Record {record.id} already exists")
            self._records[record.id] = record
        return record

    def find_by_id(self, record_id: Hashable) -> Optional[T]:
        with self._lock:
            return self._records.get(record_id)

    def find_by_predicate(self, predicate: Callable[[T], bool]) -> list[T]:
        with self._lock:
            records = list(self._records.values())
        return [r for r in records if predicate(r)]

    def update(self, record: T) -> T:
        with self._lock:
            if record.id not in self._records:
                raise NotFoundError(f"Record {record.id} not found")
            self._records[record.id] = record
        return record

    def delete(self, record_id: Hashable) -> None:
        with self._lock:
            if record_id not in self._records:
                raise NotFoundError(f"Record {record_id} not found")
            del self._records[record_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
