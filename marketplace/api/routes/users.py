from fastapi import APIRouter, Body, Depends, Query

from marketplace.api.dependencies import (
    CallerIdentity,
    get_caller,
    get_create_listing_use_case,
    get_delete_listing_use_case,
    get_save_listing_use_case,
    get_sign_up_use_case,
    get_unsave_listing_use_case,
    get_update_profile_use_case,
    get_user_repo,
)
from marketplace.api.schemas.common import ListingRefResponse, MessageResponse, missing_body
from marketplace.api.schemas.user_schemas import (
    AddListingToRateRequest,
    DeleteListingRequest,
    ListingKeyRequest,
    ListingToRateResponse,
    MakeListingRequest,
    RateUserRequest,
    SignUpRequest,
    UpdateProfileRequest,
    UserProfileResponse,
)
from marketplace.application.errors import InvalidRequestError, NotFoundError
from marketplace.application.interfaces.user_repository import UserRepository
from marketplace.application.use_cases.create_listing import CreateListing, CreateListingInput
from marketplace.application.use_cases.delete_listing import DeleteListing, DeleteListingInput
from marketplace.application.use_cases.save_listing import (
    SavedListingInput,
    SaveListing,
    UnsaveListing,
)
from marketplace.application.use_cases.sign_up import SignUp, SignUpInput
from marketplace.application.use_cases.update_profile import UpdateProfile, UpdateProfileInput
from marketplace.domain.entities.user_profile import UserProfile
from marketplace.domain.value_objects.references import ListingToRateRef

router = APIRouter(prefix="/users", tags=["users"])


def _profile_to_response(profile: UserProfile) -> UserProfileResponse:
    return UserProfileResponse(
        user_id=profile.user_id,
        name=profile.name,
        email=profile.email,
        phone=profile.phone,
        picture=profile.picture,
        rating=profile.rating,
        rating_count=profile.rating_count,
        saved_listings=[
            ListingRefResponse(listing_id=r.listing_id, creation_time=r.creation_time)
            for r in profile.saved_listings
        ],
        active_listings=[
            ListingRefResponse(listing_id=r.listing_id, creation_time=r.creation_time)
            for r in profile.active_listings
        ],
        listings_to_rate=[
            ListingToRateResponse(
                buyer_id=r.buyer_id,
                listing_id=r.listing_id,
                creation_time=r.creation_time,
                seller_id=r.seller_id,
            )
            for r in profile.listings_to_rate
        ],
    )


@router.get("/profile", response_model=UserProfileResponse)
async def get_profile(
    target_user_id: str | None = Query(default=None, alias="targetUserId"),
    caller: CallerIdentity = Depends(get_caller),
    repo: UserRepository = Depends(get_user_repo),
) -> UserProfileResponse:
    """Profile of ``targetUserId``, or of the caller when none is given."""
    profile = await repo.get_profile(target_user_id or caller.user_id)
    if profile is None:
        raise NotFoundError("User Not Found.")
    return _profile_to_response(profile)


@router.post("/rate-user", response_model=MessageResponse)
async def rate_user(
    body: RateUserRequest | None = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    repo: UserRepository = Depends(get_user_repo),
) -> MessageResponse:
    if body is None:
        raise missing_body()
    body.require("rating", "to_rate_user_id")
    await repo.add_rating(body.to_rate_user_id, body.rating)
    return MessageResponse()


@router.get("/search", response_model=list[UserProfileResponse])
async def search_profiles(
    name: str | None = Query(default=None),
    email: str | None = Query(default=None),
    caller: CallerIdentity = Depends(get_caller),
    repo: UserRepository = Depends(get_user_repo),
) -> list[UserProfileResponse]:
    if name:
        profiles = await repo.search_profiles(name)
    elif email:
        profiles = await repo.search_profiles_by_email(email)
    else:
        raise InvalidRequestError("Missing query params.")
    return [_profile_to_response(p) for p in profiles]


@router.put("/update", response_model=MessageResponse)
async def update_profile(
    body: UpdateProfileRequest | None = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    use_case: UpdateProfile = Depends(get_update_profile_use_case),
) -> MessageResponse:
    if body is None:
        raise missing_body()
    await use_case.execute(
        UpdateProfileInput(
            user_id=caller.user_id,
            phone=body.phone,
            picture=body.picture,
            name=body.name,
            email=body.email,
        )
    )
    return MessageResponse()


@router.post("/signup", response_model=MessageResponse)
async def sign_up(
    body: SignUpRequest | None = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    use_case: SignUp = Depends(get_sign_up_use_case),
) -> MessageResponse:
    if body is None:
        raise missing_body()
    await use_case.execute(
        SignUpInput(
            user_id=caller.user_id,
            custom_name=body.custom_name,
            custom_email=body.custom_email,
            custom_picture=body.custom_picture,
            phone=body.phone,
            provider_name=caller.name,
            provider_email=caller.email,
            provider_picture=caller.picture,
        )
    )
    return MessageResponse()


@router.post("/save-listing", response_model=MessageResponse)
async def save_listing(
    body: ListingKeyRequest | None = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    use_case: SaveListing = Depends(get_save_listing_use_case),
) -> MessageResponse:
    if body is None:
        raise missing_body()
    body.require("listing_id", "creation_time")
    await use_case.execute(
        SavedListingInput(
            user_id=caller.user_id,
            listing_id=body.listing_id,
            creation_time=body.creation_time,
        )
    )
    return MessageResponse()


@router.delete("/unsave-listing", response_model=MessageResponse)
async def unsave_listing(
    body: ListingKeyRequest | None = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    use_case: UnsaveListing = Depends(get_unsave_listing_use_case),
) -> MessageResponse:
    if body is None:
        raise missing_body()
    body.require("listing_id", "creation_time")
    await use_case.execute(
        SavedListingInput(
            user_id=caller.user_id,
            listing_id=body.listing_id,
            creation_time=body.creation_time,
        )
    )
    return MessageResponse()


@router.post("/add-listing-to-rate", response_model=MessageResponse)
async def add_listing_to_rate(
    body: AddListingToRateRequest | None = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    repo: UserRepository = Depends(get_user_repo),
) -> MessageResponse:
    """The buyer gets a pending rating entry naming the caller as seller."""
    if body is None:
        raise missing_body()
    body.require("buyer_id", "listing_id", "creation_time")
    entry = ListingToRateRef(
        buyer_id=body.buyer_id,
        listing_id=body.listing_id,
        creation_time=body.creation_time,
        seller_id=caller.user_id,
    )
    await repo.add_listing_to_rate(entry.buyer_id, entry)
    return MessageResponse()


@router.delete("/remove-listing-to-rate", response_model=MessageResponse)
async def remove_listing_to_rate(
    body: ListingKeyRequest | None = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    repo: UserRepository = Depends(get_user_repo),
) -> MessageResponse:
    if body is None:
        raise missing_body()
    body.require("listing_id", "creation_time")
    await repo.remove_listing_to_rate(caller.user_id, body.listing_id, body.creation_time)
    return MessageResponse()


@router.post("/make-listing", response_model=MessageResponse)
async def make_listing(
    body: MakeListingRequest | None = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    use_case: CreateListing = Depends(get_create_listing_use_case),
) -> MessageResponse:
    if body is None:
        raise missing_body()
    body.require(
        "listing_id",
        "creation_time",
        "title",
        "price",
        "description",
        "location",
        "tags",
        "pictures",
    )
    await use_case.execute(
        CreateListingInput(
            listing_id=body.listing_id,
            creation_time=body.creation_time,
            user_id=caller.user_id,
            title=body.title,
            price=body.price,
            description=body.description,
            location=body.location,
            tags=body.tags,
            pictures=body.pictures,
        )
    )
    return MessageResponse()


@router.delete("/delete-listing", response_model=MessageResponse)
async def delete_listing(
    body: DeleteListingRequest | None = Body(default=None),
    caller: CallerIdentity = Depends(get_caller),
    use_case: DeleteListing = Depends(get_delete_listing_use_case),
) -> MessageResponse:
    if body is None:
        raise missing_body()
    body.require("listing_id", "creation_time", "tags")
    await use_case.execute(
        DeleteListingInput(
            listing_id=body.listing_id,
            creation_time=body.creation_time,
            user_id=caller.user_id,
            tags=body.tags,
        )
    )
    return MessageResponse()
