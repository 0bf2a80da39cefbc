from abc import ABC, abstractmethod

from marketplace.domain.entities.listing import Listing, ListingPage
from marketplace.domain.value_objects.references import ListingRef


class ListingRepository(ABC):
    """Port for the listings collection, keyed by (listing_id, creation_time)."""

    @abstractmethod
    async def create_listing(self, listing: Listing) -> None:
        ...

    @abstractmethod
    async def get_listings(
        self, start_key: str | None = None, limit: int | None = None
    ) -> ListingPage:
        """One page of a full scan plus the continuation token for the next."""
        ...

    @abstractmethod
    async def get_listings_by_ids(self, keys: list[ListingRef]) -> list[Listing]:
        """Batch get. Result order is not tied to the order of ``keys``."""
        ...

    @abstractmethod
    async def get_listing(self, listing_id: str, creation_time: str) -> Listing | None:
        ...

    @abstractmethod
    async def search_listings(self, search_term: str) -> list[Listing]:
        ...

    @abstractmethod
    async def mark_as_sold(self, listing_id: str, creation_time: str, buyer_id: str) -> None:
        ...

    @abstractmethod
    async def increment_saved_count(self, listing_id: str, creation_time: str) -> None:
        ...

    @abstractmethod
    async def decrement_saved_count(self, listing_id: str, creation_time: str) -> None:
        ...

    @abstractmethod
    async def add_tag(self, listing_id: str, creation_time: str, tag: str) -> None:
        ...

    @abstractmethod
    async def delete_tag(self, listing_id: str, creation_time: str, tag: str) -> bool:
        ...

    @abstractmethod
    async def add_picture(self, listing_id: str, creation_time: str, picture: str) -> None:
        ...

    @abstractmethod
    async def delete_picture(self, listing_id: str, creation_time: str, picture: str) -> bool:
        ...

    @abstractmethod
    async def delete_listing(self, listing_id: str, creation_time: str) -> bool:
        ...
