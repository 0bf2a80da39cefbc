from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ListingRef:
    """
    Value-equality pointer to a listing, stored inside user and tag records.

    Two references are the same reference iff both key parts match.
    """

    listing_id: str
    creation_time: str

    def to_document(self) -> dict[str, str]:
        return {"listingId": self.listing_id, "creationTime": self.creation_time}

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "ListingRef":
        return cls(listing_id=str(doc["listingId"]), creation_time=str(doc["creationTime"]))


@dataclass(frozen=True)
class ListingToRateRef:
    """A sold listing the holder of this reference may rate the other party for."""

    buyer_id: str
    listing_id: str
    creation_time: str
    seller_id: str

    @property
    def listing(self) -> ListingRef:
        return ListingRef(self.listing_id, self.creation_time)

    def to_document(self) -> dict[str, str]:
        return {
            "buyerId": self.buyer_id,
            "listingId": self.listing_id,
            "creationTime": self.creation_time,
            "sellerId": self.seller_id,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "ListingToRateRef":
        return cls(
            buyer_id=str(doc["buyerId"]),
            listing_id=str(doc["listingId"]),
            creation_time=str(doc["creationTime"]),
            seller_id=str(doc["sellerId"]),
        )
