"""
Service Interface Layer

Abstract contracts the listing controller depends on
"""

from abc import ABC, abstractmethod
from typing import Any


class ICatalogTransport(ABC):
    """Remote catalog service: list, create, update and delete listings."""

    @abstractmethod
    async def list_listings(self) -> list[Any]:
        """
        Fetch the full listing collection

        Returns:
            List[Listing] in server order

        Raises:
            NetworkFailure, ServerRejection, UnexpectedFailure
        """
        pass

    @abstractmethod
    async def create_listing(self, request: Any) -> Any:
        """
        Create a listing

        Args:
            request: MutationRequest without a listing identifier

        Returns:
            Listing: the persisted entity

        Raises:
            NetworkFailure, ValidationRejected, UnexpectedFailure
        """
        pass

    @abstractmethod
    async def update_listing(self, listing_id: str, request: Any) -> Any:
        """
        Update a listing

        Args:
            listing_id: listing identifier
            request: MutationRequest

        Returns:
            Listing: the persisted entity

        Raises:
            NetworkFailure, ValidationRejected, NotFound, UnexpectedFailure
        """
        pass

    @abstractmethod
    async def delete_listing(self, listing_id: str) -> None:
        """
        Delete a listing

        Args:
            listing_id: listing identifier

        Raises:
            NetworkFailure, NotFound, UnexpectedFailure
        """
        pass
