from abc import ABC, abstractmethod

from marketplace.domain.entities.tag import Tag


class TagRepository(ABC):
    """
    Port for the tags collection.

    Single-record operations only. Keeping a tag present exactly while some
    listing references it is the caller's job.
    """

    @abstractmethod
    async def get_tag(self, name: str) -> Tag | None:
        ...

    @abstractmethod
    async def create_tag(self, name: str) -> bool:
        """Create an empty tag. Returns False if it already existed."""
        ...

    @abstractmethod
    async def add_listing(self, name: str, listing_id: str, creation_time: str) -> bool:
        ...

    @abstractmethod
    async def remove_listing(self, name: str, listing_id: str, creation_time: str) -> bool:
        ...

    @abstractmethod
    async def delete_tag(self, name: str) -> None:
        ...
