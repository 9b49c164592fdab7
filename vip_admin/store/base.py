"""
Abstract document store the list views and mutations talk to.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel

from vip_admin.listing.query import StoreQuery, Where
from vip_admin.models.records import ListableRecord


class DocumentStore(ABC):
    """
    Async document store over the named collections.

    Ids and ``created_at`` are assigned by the store on ``add``. Every
    method either returns its result or raises ``StoreQueryError`` /
    ``StoreWriteError``; callers never see driver exceptions.
    """

    @abstractmethod
    async def query(self, query: StoreQuery) -> list[ListableRecord]:
        """
        Run an ordered, filtered, bounded query.

        Raises:
            StoreQueryError: if the store rejects or fails the query.
        """

    @abstractmethod
    async def get(self, collection: str, record_id: str) -> ListableRecord:
        """
        Fetch one record by id.

        Raises:
            RecordNotFoundError: if no record has that id.
        """

    @abstractmethod
    async def add(self, collection: str, document: BaseModel) -> ListableRecord:
        """
        Insert a validated document and return the stored record.

        Raises:
            RecordValidationError: if the document type is not accepted by the collection.
            StoreWriteError: if the write fails.
        """

    @abstractmethod
    async def update(self, collection: str, record_id: str, document: BaseModel) -> ListableRecord:
        """
        Overwrite the fields present in ``document`` on an existing record.
        """

    @abstractmethod
    async def delete(self, collection: str, record_id: str) -> None:
        """
        Remove a record by id.
        """

    @abstractmethod
    async def count(self, collection: str, wheres: tuple[Where, ...] = ()) -> int:
        """
        Count records matching equality/range predicates.
        """
