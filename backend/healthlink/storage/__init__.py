"""Storage module - document store interface and implementations."""

from .interface import DocumentStore, DocumentSnapshot, SERVER_TIMESTAMP
from .subscription import CollectionSubscription
from .local_storage import LocalDocumentStore, init_document_store, get_document_store
from .account_storage import AccountStorage

__all__ = [
    'DocumentStore', 'DocumentSnapshot', 'SERVER_TIMESTAMP', 'CollectionSubscription',
    'LocalDocumentStore', 'init_document_store', 'get_document_store', 'AccountStorage',
]
