from fastapi import APIRouter, Body, Depends, Query

from marketplace.api.dependencies import (
    CallerIdentity,
    get_add_listing_tag_use_case,
    get_caller,
    get_listing_repo,
    get_remove_listing_tag_use_case,
)
from marketplace.api.schemas.common import MessageResponse, missing_body
from marketplace.api.schemas.listing_schemas import (
    BatchGetRequest,
    ListingPageResponse,
    ListingPictureRequest,
    ListingResponse,
    ListingTagRequest,
    MarkSoldRequest,
)
from marketplace.application.errors import InvalidRequestError, NotFoundError
from marketplace.application.interfaces.listing_repository import ListingRepository
from marketplace.application.use_cases.edit_listing import (
    AddListingTag,
    ListingTagInput,
    RemoveListingTag,
    require_owned_listing,
)
from marketplace.domain.entities.listing import Listing
from marketplace.domain.value_objects.references import ListingRef

router = APIRouter(prefix="/listings", tags=["listings"])


def _listing_to_response(listing: Listing) -> ListingResponse:
    return ListingResponse(
        listing_id=listing.listing_id,
        creation_time=listing.creation_time,
        user_id=listing.user_id,
        title=listing.title,
        search_title=listing.search_title,
        price=listing.price,
        description=listing.description,
        location=listing.location,
        tags=listing.tags,
        pictures=listing.pictures,
        sold=listing.sold,
        sold_to=listing.sold_to,
        saved_count=listing.saved_count,
        comments=listing.comments,
    )


@router.get("", response_model=ListingPageResponse)
async def list_listings(
    limit: int | None = Query(default=None, ge=1),
    start_key: str | None = Query(default=None, alias="startKey"),
    repo: ListingRepository = Depends(get_listing_repo),
) -> ListingPageResponse:
    """One page of listings; pass ``nextKey`` back as ``startKey`` for the next."""
    page = await repo.get_listings(start_key=start_key, limit=limit)
    return ListingPageResponse(
        items=[_listing_to_response(l) for l in page.items],
        next_key=page.next_key,
    )


@router.get("/search", response_model=list[ListingResponse])
async def search_listings(
    search_term: str | None = Query(default=None, alias="searchTerm"),
    repo: ListingRepository = Depends(get_listing_repo),
) -> list[ListingResponse]:
    if not search_term or not search_term.strip():
        raise InvalidRequestError("Missing searchTerm")
    return [_listing_to_response(l) for l in await repo.search_listings(search_term)]


@router.get("/listing", response_model=ListingResponse)
async def get_listing(
    listing_id: str | None = Query(default=None, alias="listingId"),
    creation_time: str | None = Query(default=None, alias="creationTime"),
    repo: ListingRepository = Depends(get_listing_repo),
) -> ListingResponse:
    if not listing_id:
        raise InvalidRequestError("Missing listingId")
    if not creation_time:
        raise InvalidRequestError("Missing creationTime")
    listing = await repo.get_listing(listing_id, creation_time)
    if listing is None:
        raise NotFoundError("Listing Not Found.")
    return _listing_to_response(listing)


@router.post("/batch", response_model=list[ListingResponse])
async def get_listings_by_ids(
    body: BatchGetRequest | None = Body(default=None),
    repo: ListingRepository = Depends(get_listing_repo),
) -> list[ListingResponse]:
    """Fetch many listings at once. The response order is unrelated to ``keys``."""
    if body is None:
        raise missing_body()
    body.require("keys")
    keys = [ListingRef(k.listing_id, k.creation_time) for k in body.keys or []]
    return [_listing_to_response(l) for l in await repo.get_listings_by_ids(keys)]


@router.put("/mark-sold", response_model=MessageResponse)
async def mark_as_sold(
    body: MarkSoldRequest | None = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    repo: ListingRepository = Depends(get_listing_repo),
) -> MessageResponse:
    if body is None:
        raise missing_body()
    body.require("listing_id", "creation_time", "buyer_id")
    await require_owned_listing(repo, body.listing_id, body.creation_time, caller.user_id)
    await repo.mark_as_sold(body.listing_id, body.creation_time, body.buyer_id)
    return MessageResponse()


@router.post("/add-tag", response_model=MessageResponse)
async def add_tag(
    body: ListingTagRequest | None = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    use_case: AddListingTag = Depends(get_add_listing_tag_use_case),
) -> MessageResponse:
    if body is None:
        raise missing_body()
    body.require("listing_id", "creation_time", "tag")
    await use_case.execute(
        ListingTagInput(
            user_id=caller.user_id,
            listing_id=body.listing_id,
            creation_time=body.creation_time,
            tag=body.tag,
        )
    )
    return MessageResponse()


@router.delete("/delete-tag", response_model=MessageResponse)
async def delete_tag(
    body: ListingTagRequest | None = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    use_case: RemoveListingTag = Depends(get_remove_listing_tag_use_case),
) -> MessageResponse:
    if body is None:
        raise missing_body()
    body.require("listing_id", "creation_time", "tag")
    await use_case.execute(
        ListingTagInput(
            user_id=caller.user_id,
            listing_id=body.listing_id,
            creation_time=body.creation_time,
            tag=body.tag,
        )
    )
    return MessageResponse()


@router.post("/add-picture", response_model=MessageResponse)
async def add_picture(
    body: ListingPictureRequest | None = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    repo: ListingRepository = Depends(get_listing_repo),
) -> MessageResponse:
    if body is None:
        raise missing_body()
    body.require("listing_id", "creation_time", "picture")
    await require_owned_listing(repo, body.listing_id, body.creation_time, caller.user_id)
    await repo.add_picture(body.listing_id, body.creation_time, body.picture)
    return MessageResponse()


@router.delete("/delete-picture", response_model=MessageResponse)
async def delete_picture(
    body: ListingPictureRequest | None = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    repo: ListingRepository = Depends(get_listing_repo),
) -> MessageResponse:
    if body is None:
        raise missing_body()
    body.require("listing_id", "creation_time", "picture")
    await require_owned_listing(repo, body.listing_id, body.creation_time, caller.user_id)
    await repo.delete_picture(body.listing_id, body.creation_time, body.picture)
    return MessageResponse()
