"""
Document Store Interface - Abstract base class for all document store implementations.
Documents live in nested collections addressed by slash-separated paths,
e.g. "users/{uid}/dailyHealthLogs" with key "2024-05-01".
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, List, Dict, Any

if TYPE_CHECKING:
    from .subscription import CollectionSubscription


class _ServerTimestamp:
    """Sentinel replaced with the store's current UTC time on write."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass
class DocumentSnapshot:
    """A document read from a collection."""
    id: str
    path: str
    data: Dict[str, Any] = field(default_factory=dict)


class DocumentStore(ABC):
    """
    Abstract document store that defines the contract for all implementations.
    A single set/update/add is atomic per document; sequences of calls are not
    transactional and the last write wins.
    """

    @abstractmethod
    async def get_document(self, collection_path: str, key: str) -> Optional[Dict[str, Any]]:
        """
        Read a document.

        Args:
            collection_path: Collection path (e.g., "users/123/dailyToDoLists")
            key: Document key within the collection

        Returns:
            Optional[Dict]: Document data, or None if it doesn't exist
        """
        pass

    @abstractmethod
    async def set_document(
        self,
        collection_path: str,
        key: str,
        value: Dict[str, Any],
        merge: bool = False
    ) -> None:
        """
        Write a document.

        Args:
            collection_path: Collection path
            key: Document key
            value: Document data
            merge: Keep fields of an existing document that are absent from value
        """
        pass

    @abstractmethod
    async def update_document(
        self,
        collection_path: str,
        key: str,
        partial_value: Dict[str, Any]
    ) -> None:
        """
        Update fields of an existing document.

        Raises:
            PersistenceError: If the document does not exist
        """
        pass

    @abstractmethod
    async def add_document(self, collection_path: str, value: Dict[str, Any]) -> str:
        """
        Create a document under a generated key.

        Returns:
            str: The generated document key
        """
        pass

    @abstractmethod
    async def list_documents(
        self,
        collection_path: str,
        order_by: Optional[str] = None
    ) -> List[DocumentSnapshot]:
        """
        List the documents of a collection.

        Args:
            collection_path: Collection path
            order_by: Field to sort ascending by; documents lacking it are left out

        Returns:
            List[DocumentSnapshot]: Documents in order
        """
        pass

    @abstractmethod
    def subscribe(
        self,
        collection_path: str,
        order_by: Optional[str] = None
    ) -> "CollectionSubscription":
        """
        Watch a collection for changes.

        Returns:
            CollectionSubscription: async iterator of ordered snapshots, starting
            with the current contents; call unsubscribe() to stop it
        """
        pass

