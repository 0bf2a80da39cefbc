from dataclasses import dataclass

import structlog

from marketplace.application.interfaces.listing_repository import ListingRepository
from marketplace.application.interfaces.user_repository import UserRepository
from marketplace.application.orchestration import StepSequence

logger = structlog.get_logger(__name__)


@dataclass
class SavedListingInput:
    user_id: str
    listing_id: str
    creation_time: str


@dataclass
class SavedListingOutput:
    changed: bool


class SaveListing:
    """
    Use case: Add a listing to a user's saved list and bump its saved count.

    The reference is written before the count. Saving an already saved
    listing changes nothing, so the count keeps matching the number of users
    holding the reference.
    """

    def __init__(
        self,
        listing_repo: ListingRepository,
        user_repo: UserRepository,
        *,
        compensate_on_failure: bool = False,
    ) -> None:
        self._listing_repo = listing_repo
        self._user_repo = user_repo
        self._compensate_on_failure = compensate_on_failure

    async def execute(self, input_data: SavedListingInput) -> SavedListingOutput:
        added = False

        async def add_reference() -> None:
            nonlocal added
            added = await self._user_repo.add_saved_listing(
                input_data.user_id, input_data.listing_id, input_data.creation_time
            )

        async def remove_reference() -> None:
            if added:
                await self._user_repo.remove_saved_listing(
                    input_data.user_id, input_data.listing_id, input_data.creation_time
                )

        async def increment() -> None:
            if added:
                await self._listing_repo.increment_saved_count(
                    input_data.listing_id, input_data.creation_time
                )

        async def decrement() -> None:
            if added:
                await self._listing_repo.decrement_saved_count(
                    input_data.listing_id, input_data.creation_time
                )

        await (
            StepSequence(
                "save_listing",
                compensate_on_failure=self._compensate_on_failure,
                user_id=input_data.user_id,
                listing_id=input_data.listing_id,
            )
            .add("add_saved_listing", add_reference, remove_reference)
            .add("increment_saved_count", increment, decrement)
            .run()
        )

        logger.info(
            "listing_saved",
            user_id=input_data.user_id,
            listing_id=input_data.listing_id,
            creation_time=input_data.creation_time,
            changed=added,
        )
        return SavedListingOutput(changed=added)


class UnsaveListing:
    """Use case: Inverse of SaveListing. Only decrements when a reference was removed."""

    def __init__(
        self,
        listing_repo: ListingRepository,
        user_repo: UserRepository,
        *,
        compensate_on_failure: bool = False,
    ) -> None:
        self._listing_repo = listing_repo
        self._user_repo = user_repo
        self._compensate_on_failure = compensate_on_failure

    async def execute(self, input_data: SavedListingInput) -> SavedListingOutput:
        removed = False

        async def remove_reference() -> None:
            nonlocal removed
            removed = await self._user_repo.remove_saved_listing(
                input_data.user_id, input_data.listing_id, input_data.creation_time
            )

        async def restore_reference() -> None:
            if removed:
                await self._user_repo.add_saved_listing(
                    input_data.user_id, input_data.listing_id, input_data.creation_time
                )

        async def decrement() -> None:
            if removed:
                await self._listing_repo.decrement_saved_count(
                    input_data.listing_id, input_data.creation_time
                )

        async def increment() -> None:
            if removed:
                await self._listing_repo.increment_saved_count(
                    input_data.listing_id, input_data.creation_time
                )

        await (
            StepSequence(
                "unsave_listing",
                compensate_on_failure=self._compensate_on_failure,
                user_id=input_data.user_id,
                listing_id=input_data.listing_id,
            )
            .add("remove_saved_listing", remove_reference, restore_reference)
            .add("decrement_saved_count", decrement, increment)
            .run()
        )

        logger.info(
            "listing_unsaved",
            user_id=input_data.user_id,
            listing_id=input_data.listing_id,
            creation_time=input_data.creation_time,
            changed=removed,
        )
        return SavedListingOutput(changed=removed)
