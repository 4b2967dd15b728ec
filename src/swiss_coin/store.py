"""Abstract store interface the split engine reads from and writes to."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TypeVar
from uuid import UUID

from pydantic import BaseModel

R = TypeVar("R", bound=BaseModel)


class Store(ABC):
    """
    Repository-style persistence boundary.

    Mutations (`create`, `update`, `delete`) are staged until `save()`;
    `rollback()` discards everything staged since the last save. One user
    action maps to one save, so a commit's records land together or not at all.
    """

    @abstractmethod
    def fetch(self, record_type: type[R], **where: Any) -> list[R]:
        """Return records of `record_type` whose fields equal the given values."""
        pass

    @abstractmethod
    def get(self, record_type: type[R], record_id: UUID) -> R | None:
        """Get a single record by id."""
        pass

    @abstractmethod
    def create(self, record: BaseModel) -> None:
        """Stage a new record."""
        pass

    @abstractmethod
    def update(self, record: BaseModel) -> None:
        """Stage changes to an existing record."""
        pass

    @abstractmethod
    def delete(self, record: BaseModel) -> None:
        """Stage deletion of a record."""
        pass

    @abstractmethod
    def save(self) -> None:
        """
        Persist all staged mutations.

        Raises:
            StoreWriteFailedError: If persisting fails; staged writes are rolled back
        """
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Discard all staged mutations."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection."""
        pass

    @abstractmethod
    def get_config(self, key: str) -> str | None:
        """Get a config value by key."""
        pass

    @abstractmethod
    def set_config(self, key: str, value: str) -> None:
        """Stage a config value."""
        pass

    @contextmanager
    def atomic(self) -> Iterator["Store"]:
        """
        Scope one user action: save on success, roll back on any error.

        Usage:
            with store.atomic():
                store.create(transaction)
                store.create(split)
        """
        try:
            yield self
            self.save()
        except Exception:
            self.rollback()
            raise
