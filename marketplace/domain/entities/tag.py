from dataclasses import dataclass, field

from marketplace.domain.value_objects.references import ListingRef


@dataclass
class Tag:
    """Reverse index entry: every listing currently carrying this tag."""

    name: str
    listings: list[ListingRef] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.listings
