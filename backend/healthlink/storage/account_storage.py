"""
Account Storage - login credentials kept apart from the user's profile document.
"""

import uuid
from typing import Optional, Dict, Any

from .interface import DocumentStore, SERVER_TIMESTAMP


class AccountStorage:
    """
    Manages account documents in the "accounts" collection, keyed by the
    lower-cased email. The profile lives separately at users/{uid}.
    """

    accounts_collection = "accounts"
    users_collection = "users"

    def __init__(self, store: DocumentStore):
        """
        Initialize account storage.

        Args:
            store: DocumentStore implementation
        """
        self.store = store

    @staticmethod
    def _key(email: str) -> str:
        return email.strip().lower()

    async def get_account(self, email: str) -> Optional[Dict[str, Any]]:
        """
        Get an account by email.

        Returns:
            Optional[Dict]: Account data or None if not found
        """
        return await self.store.get_document(self.accounts_collection, self._key(email))

    async def create_account(self, name: str, email: str, hashed_password: str) -> Dict[str, Any]:
        """
        Create an account and its profile document.

        Args:
            name: Display name
            email: Email address (login identifier, immutable afterwards)
            hashed_password: bcrypt hash of the password

        Returns:
            Dict: The new profile document
        """
        uid = uuid.uuid4().hex
        key = self._key(email)

        # The profile keeps the address as entered; only the lookup key is normalized
        await self.store.set_document(self.accounts_collection, key, {
            "uid": uid,
            "email": key,
            "hashedPassword": hashed_password,
            "createdAt": SERVER_TIMESTAMP,
        })

        profile = {"uid": uid, "name": name, "email": email}
        await self.store.set_document(self.users_collection, uid, profile)
        return profile
