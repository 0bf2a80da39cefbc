from dataclasses import dataclass

import structlog

from marketplace.application.errors import ForbiddenError, NotFoundError
from marketplace.application.interfaces.listing_repository import ListingRepository
from marketplace.application.interfaces.tag_repository import TagRepository
from marketplace.application.orchestration import StepSequence
from marketplace.application.use_cases.tag_index import index_listing, unindex_listing
from marketplace.domain.entities.listing import Listing

logger = structlog.get_logger(__name__)


async def require_owned_listing(
    listing_repo: ListingRepository, listing_id: str, creation_time: str, user_id: str
) -> Listing:
    """Load a listing and check the caller owns it."""
    listing = await listing_repo.get_listing(listing_id, creation_time)
    if listing is None:
        raise NotFoundError("Listing Not Found.", code="NotFound")
    if listing.user_id != user_id:
        raise ForbiddenError("Listing belongs to another user.", code="NotOwner")
    return listing


@dataclass
class ListingTagInput:
    user_id: str
    listing_id: str
    creation_time: str
    tag: str


class AddListingTag:
    """
    Use case: Append a tag to a listing, then register the listing under it.

    Same two-record shape as the tag step of CreateListing: the listing's tag
    list is written first, the tag index second.
    """

    def __init__(
        self,
        listing_repo: ListingRepository,
        tag_repo: TagRepository,
        *,
        compensate_on_failure: bool = False,
    ) -> None:
        self._listing_repo = listing_repo
        self._tag_repo = tag_repo
        self._compensate_on_failure = compensate_on_failure

    async def execute(self, input_data: ListingTagInput) -> None:
        listing = await require_owned_listing(
            self._listing_repo, input_data.listing_id, input_data.creation_time, input_data.user_id
        )
        ref = listing.ref

        await (
            StepSequence(
                "add_listing_tag",
                compensate_on_failure=self._compensate_on_failure,
                listing_id=ref.listing_id,
                tag=input_data.tag,
            )
            .add(
                "append_listing_tag",
                lambda: self._listing_repo.add_tag(
                    ref.listing_id, ref.creation_time, input_data.tag
                ),
                lambda: self._listing_repo.delete_tag(
                    ref.listing_id, ref.creation_time, input_data.tag
                ),
            )
            .add(
                f"index_tag:{input_data.tag}",
                lambda: index_listing(self._tag_repo, input_data.tag, ref),
            )
            .run()
        )
        logger.info("listing_tag_added", listing_id=ref.listing_id, tag=input_data.tag)


class RemoveListingTag:
    """Use case: Drop a tag from a listing and the listing from the tag index."""

    def __init__(
        self,
        listing_repo: ListingRepository,
        tag_repo: TagRepository,
        *,
        compensate_on_failure: bool = False,
    ) -> None:
        self._listing_repo = listing_repo
        self._tag_repo = tag_repo
        self._compensate_on_failure = compensate_on_failure

    async def execute(self, input_data: ListingTagInput) -> None:
        listing = await require_owned_listing(
            self._listing_repo, input_data.listing_id, input_data.creation_time, input_data.user_id
        )
        ref = listing.ref
        removed = False

        async def remove_from_listing() -> None:
            nonlocal removed
            removed = await self._listing_repo.delete_tag(
                ref.listing_id, ref.creation_time, input_data.tag
            )

        async def restore_on_listing() -> None:
            if removed:
                await self._listing_repo.add_tag(ref.listing_id, ref.creation_time, input_data.tag)

        async def unindex() -> None:
            # Another copy of the tag may still be on the listing
            if listing.tags.count(input_data.tag) > 1:
                return
            await unindex_listing(self._tag_repo, input_data.tag, ref)

        await (
            StepSequence(
                "remove_listing_tag",
                compensate_on_failure=self._compensate_on_failure,
                listing_id=ref.listing_id,
                tag=input_data.tag,
            )
            .add("delete_listing_tag", remove_from_listing, restore_on_listing)
            .add(f"unindex_tag:{input_data.tag}", unindex)
            .run()
        )
        logger.info(
            "listing_tag_removed", listing_id=ref.listing_id, tag=input_data.tag, changed=removed
        )
