from pydantic import Field

from marketplace.api.schemas.common import (
    CamelModel,
    KeyPart,
    ListingRefResponse,
    Price,
    RequestBody,
    TagName,
)


class RateUserRequest(RequestBody):
    # Star rating; keeps the running mean on the same 1-5 scale
    rating: float | None = Field(default=None, ge=1, le=5)
    to_rate_user_id: str | None = None


class UpdateProfileRequest(RequestBody):
    phone: str | None = None
    picture: str | None = None
    name: str | None = None
    email: str | None = None


class SignUpRequest(RequestBody):
    phone: str | None = None
    custom_name: str | None = None
    custom_email: str | None = None
    custom_picture: str | None = None


class ListingKeyRequest(RequestBody):
    listing_id: str | None = None
    creation_time: KeyPart | None = None


class AddListingToRateRequest(RequestBody):
    buyer_id: str | None = None
    listing_id: str | None = None
    creation_time: KeyPart | None = None


class MakeListingRequest(RequestBody):
    listing_id: str | None = None
    creation_time: KeyPart | None = None
    title: str | None = None
    price: Price | None = None
    description: str | None = None
    location: str | None = None
    tags: list[TagName] | None = None
    pictures: list[str] | None = None


class DeleteListingRequest(RequestBody):
    listing_id: str | None = None
    creation_time: KeyPart | None = None
    tags: list[str] | None = None


class ListingToRateResponse(CamelModel):
    buyer_id: str
    listing_id: str
    creation_time: str
    seller_id: str


class UserProfileResponse(CamelModel):
    user_id: str
    name: str
    email: str
    phone: str | None = None
    picture: str
    rating: float
    rating_count: int
    saved_listings: list[ListingRefResponse]
    active_listings: list[ListingRefResponse]
    listings_to_rate: list[ListingToRateResponse]
