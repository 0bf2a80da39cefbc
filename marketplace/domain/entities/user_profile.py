from dataclasses import dataclass, field

from marketplace.domain.value_objects.references import ListingRef, ListingToRateRef


@dataclass
class UserProfile:
    """
    A marketplace member.

    ``rating`` is the running mean of every rating received and
    ``rating_count`` the number of ratings folded into it.
    """

    user_id: str
    name: str
    email: str
    picture: str
    phone: str | None = None

    rating: float = 0.0
    rating_count: int = 0

    saved_listings: list[ListingRef] = field(default_factory=list)
    active_listings: list[ListingRef] = field(default_factory=list)
    listings_to_rate: list[ListingToRateRef] = field(default_factory=list)
