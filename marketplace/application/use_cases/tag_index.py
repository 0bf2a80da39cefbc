"""
Maintenance of the tag → listings reverse index.

A tag record exists exactly while at least one listing references it: it is
created on first use and deleted once its last reference is removed. Each
helper is a short run of independent store calls with no lock around them.
"""
import structlog

from marketplace.application.errors import NotFoundError
from marketplace.application.interfaces.tag_repository import TagRepository
from marketplace.domain.value_objects.references import ListingRef

logger = structlog.get_logger(__name__)


async def index_listing(tag_repo: TagRepository, tag: str, ref: ListingRef) -> None:
    if await tag_repo.get_tag(tag) is None:
        await tag_repo.create_tag(tag)
    await tag_repo.add_listing(tag, ref.listing_id, ref.creation_time)


async def unindex_listing(tag_repo: TagRepository, tag: str, ref: ListingRef) -> None:
    try:
        await tag_repo.remove_listing(tag, ref.listing_id, ref.creation_time)
    except NotFoundError:
        logger.info("tag_already_absent", tag=tag, listing_id=ref.listing_id)
        return

    remaining = await tag_repo.get_tag(tag)
    if remaining is not None and remaining.is_empty:
        await tag_repo.delete_tag(tag)
        logger.info("tag_deleted", tag=tag)
