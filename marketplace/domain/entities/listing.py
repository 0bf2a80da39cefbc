import time
from dataclasses import dataclass, field
from typing import Any

from marketplace.domain.value_objects.references import ListingRef


def normalize_title(title: str) -> str:
    """Search form of a title: surrounding whitespace stripped, lowercased."""
    return title.strip().lower()


def current_creation_time() -> str:
    """Epoch milliseconds as a string, the format of server-assigned keys."""
    return str(int(time.time() * 1000))


@dataclass
class Listing:
    """
    An item offered for sale, keyed by ``(listing_id, creation_time)``.

    ``search_title`` is always derived from ``title`` and never set directly
    by callers; ``saved_count`` mirrors how many users have the listing in
    their saved list.
    """

    # Identity
    listing_id: str
    creation_time: str
    user_id: str

    # Offer details
    title: str
    price: float
    description: str
    location: str
    tags: list[str] = field(default_factory=list)
    pictures: list[str] = field(default_factory=list)

    # Derived / lifecycle
    search_title: str = ""
    sold: bool = False
    sold_to: str | None = None
    saved_count: int = 0
    comments: list[Any] = field(default_factory=list)

    @property
    def ref(self) -> ListingRef:
        return ListingRef(self.listing_id, self.creation_time)

    @classmethod
    def create(
        cls,
        *,
        listing_id: str,
        user_id: str,
        title: str,
        price: float,
        description: str,
        location: str,
        tags: list[str],
        pictures: list[str],
        creation_time: str | None = None,
    ) -> "Listing":
        return cls(
            listing_id=listing_id,
            creation_time=creation_time or current_creation_time(),
            user_id=user_id,
            title=title,
            search_title=normalize_title(title),
            price=price,
            description=description,
            location=location,
            tags=list(tags),
            pictures=list(pictures),
        )


@dataclass
class ListingPage:
    items: list[Listing]
    next_key: str | None = None
