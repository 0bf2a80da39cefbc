from dataclasses import dataclass, field

import structlog

from marketplace.application.errors import ForbiddenError
from marketplace.application.interfaces.listing_repository import ListingRepository
from marketplace.application.interfaces.tag_repository import TagRepository
from marketplace.application.interfaces.user_repository import UserRepository
from marketplace.application.orchestration import StepSequence
from marketplace.application.use_cases.tag_index import index_listing, unindex_listing
from marketplace.domain.value_objects.references import ListingRef

logger = structlog.get_logger(__name__)


@dataclass
class DeleteListingInput:
    listing_id: str
    creation_time: str
    user_id: str
    tags: list[str] = field(default_factory=list)


@dataclass
class DeleteListingOutput:
    deleted: bool
    steps: list[str]


class DeleteListing:
    """
    Use case: Remove a listing and tear down its secondary index entries.

    Mirror image of CreateListing: the listing record goes first, then the
    owner's active-listing reference, then each tag reference (deleting any
    tag left with no listings). The tag list comes from the caller.

    Only the owner may delete a stored listing. When the record is already
    gone the index cleanup still runs against the caller's own references.
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

    async def execute(self, input_data: DeleteListingInput) -> DeleteListingOutput:
        ref = ListingRef(input_data.listing_id, input_data.creation_time)
        stored = await self._listing_repo.get_listing(ref.listing_id, ref.creation_time)
        if stored is not None and stored.user_id != input_data.user_id:
            raise ForbiddenError("Listing belongs to another user.", code="NotOwner")
        deleted = False

        async def delete_record() -> None:
            nonlocal deleted
            deleted = await self._listing_repo.delete_listing(ref.listing_id, ref.creation_time)

        sequence = StepSequence(
            "delete_listing",
            compensate_on_failure=self._compensate_on_failure,
            listing_id=ref.listing_id,
            creation_time=ref.creation_time,
        )
        # The deleted record is not kept, so this step cannot be undone
        sequence.add("delete_listing", delete_record)
        sequence.add(
            "remove_active_listing",
            lambda: self._user_repo.remove_active_listing(
                input_data.user_id, ref.listing_id, ref.creation_time
            ),
            lambda: self._user_repo.add_active_listing(
                input_data.user_id, ref.listing_id, ref.creation_time
            ),
        )
        for tag in input_data.tags:
            sequence.add(
                f"unindex_tag:{tag}",
                lambda tag=tag: unindex_listing(self._tag_repo, tag, ref),
                lambda tag=tag: index_listing(self._tag_repo, tag, ref),
            )

        await sequence.run()

        logger.info(
            "listing_deleted",
            listing_id=ref.listing_id,
            creation_time=ref.creation_time,
            user_id=input_data.user_id,
            record_existed=deleted,
        )
        return DeleteListingOutput(deleted=deleted, steps=sequence.step_names)
