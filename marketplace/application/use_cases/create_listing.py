from dataclasses import dataclass, field

import structlog

from marketplace.application.interfaces.listing_repository import ListingRepository
from marketplace.application.interfaces.tag_repository import TagRepository
from marketplace.application.interfaces.user_repository import UserRepository
from marketplace.application.orchestration import StepSequence
from marketplace.application.use_cases.tag_index import index_listing, unindex_listing
from marketplace.domain.entities.listing import Listing

logger = structlog.get_logger(__name__)


@dataclass
class CreateListingInput:
    listing_id: str
    creation_time: str
    user_id: str
    title: str
    price: float
    description: str
    location: str
    tags: list[str] = field(default_factory=list)
    pictures: list[str] = field(default_factory=list)


@dataclass
class CreateListingOutput:
    listing: Listing
    steps: list[str]


class CreateListing:
    """
    Use case: Persist a new listing and hook it into the secondary indexes.

    Order of writes:
      1. the listing record,
      2. the owner's active-listing list,
      3. for each tag, the tag record (created when absent) and its reference.

    The writes are independent. A failure in step 2 or 3 leaves the listing
    stored with incomplete indexes and propagates to the caller.
    """

    def __init__(
        self,
        listing_repo: ListingRepository,
        user_repo: UserRepository,
        tag_repo: TagRepository,
        *,
        compensate_on_failure: bool = False,
    ) -> None:
        self._listing_repo = listing_repo
        self._user_repo = user_repo
        self._tag_repo = tag_repo
        self._compensate_on_failure = compensate_on_failure

    async def execute(self, input_data: CreateListingInput) -> CreateListingOutput:
        listing = Listing.create(
            listing_id=input_data.listing_id,
            creation_time=input_data.creation_time,
            user_id=input_data.user_id,
            title=input_data.title,
            price=input_data.price,
            description=input_data.description,
            location=input_data.location,
            tags=input_data.tags,
            pictures=input_data.pictures,
        )
        ref = listing.ref

        sequence = StepSequence(
            "create_listing",
            compensate_on_failure=self._compensate_on_failure,
            listing_id=ref.listing_id,
            creation_time=ref.creation_time,
        )
        sequence.add(
            "write_listing",
            lambda: self._listing_repo.create_listing(listing),
            lambda: self._listing_repo.delete_listing(ref.listing_id, ref.creation_time),
        )
        sequence.add(
            "add_active_listing",
            lambda: self._user_repo.add_active_listing(
                listing.user_id, ref.listing_id, ref.creation_time
            ),
            lambda: self._user_repo.remove_active_listing(
                listing.user_id, ref.listing_id, ref.creation_time
            ),
        )
        for tag in listing.tags:
            sequence.add(
                f"index_tag:{tag}",
                lambda tag=tag: index_listing(self._tag_repo, tag, ref),
                lambda tag=tag: unindex_listing(self._tag_repo, tag, ref),
            )

        await sequence.run()

        logger.info(
            "listing_created",
            listing_id=ref.listing_id,
            creation_time=ref.creation_time,
            user_id=listing.user_id,
            tags=listing.tags,
        )
        return CreateListingOutput(listing=listing, steps=sequence.step_names)
