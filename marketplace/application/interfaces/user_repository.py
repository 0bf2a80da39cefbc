from abc import ABC, abstractmethod

from marketplace.domain.entities.user_profile import UserProfile
from marketplace.domain.value_objects.references import ListingToRateRef


class UserRepository(ABC):
    """
    Port for the users collection.

    Every mutation touches exactly one record and only the field it names,
    so concurrent updates to different fields of the same user never clobber
    each other.
    """

    @abstractmethod
    async def create_profile(
        self,
        user_id: str,
        name: str,
        email: str,
        picture: str,
        phone: str | None = None,
    ) -> None:
        """Insert a new profile. Raises ConflictError if one already exists."""
        ...

    @abstractmethod
    async def get_profile(self, user_id: str) -> UserProfile | None:
        ...

    @abstractmethod
    async def search_profiles(self, name: str) -> list[UserProfile]:
        ...

    @abstractmethod
    async def search_profiles_by_email(self, email: str) -> list[UserProfile]:
        ...

    @abstractmethod
    async def update_phone(self, user_id: str, phone: str) -> None:
        ...

    @abstractmethod
    async def update_picture(self, user_id: str, picture: str) -> None:
        ...

    @abstractmethod
    async def update_name(self, user_id: str, name: str) -> None:
        ...

    @abstractmethod
    async def update_email(self, user_id: str, email: str) -> None:
        ...

    @abstractmethod
    async def add_rating(self, user_id: str, rating: float) -> None:
        ...

    @abstractmethod
    async def add_saved_listing(self, user_id: str, listing_id: str, creation_time: str) -> bool:
        """Returns False when the listing was already saved."""
        ...

    @abstractmethod
    async def remove_saved_listing(
        self, user_id: str, listing_id: str, creation_time: str
    ) -> bool:
        """Returns False when there was nothing to remove."""
        ...

    @abstractmethod
    async def add_active_listing(self, user_id: str, listing_id: str, creation_time: str) -> bool:
        ...

    @abstractmethod
    async def remove_active_listing(
        self, user_id: str, listing_id: str, creation_time: str
    ) -> bool:
        ...

    @abstractmethod
    async def add_listing_to_rate(self, user_id: str, entry: ListingToRateRef) -> bool:
        ...

    @abstractmethod
    async def remove_listing_to_rate(
        self, user_id: str, listing_id: str, creation_time: str
    ) -> bool:
        ...
