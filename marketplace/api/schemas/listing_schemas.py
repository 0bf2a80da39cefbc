from typing import Any

from marketplace.api.schemas.common import (
    CamelModel,
    KeyPart,
    ListingKey,
    ListingRefResponse,
    RequestBody,
    TagName,
)


class ListingResponse(CamelModel):
    listing_id: str
    creation_time: str
    user_id: str
    title: str
    search_title: str
    price: float
    description: str
    location: str
    tags: list[str]
    pictures: list[str]
    sold: bool
    sold_to: str | None = None
    saved_count: int
    comments: list[Any]


class ListingPageResponse(CamelModel):
    items: list[ListingResponse]
    next_key: str | None = None


class BatchGetRequest(RequestBody):
    keys: list[ListingKey] | None = None


class MarkSoldRequest(RequestBody):
    listing_id: str | None = None
    creation_time: KeyPart | None = None
    buyer_id: str | None = None


class ListingTagRequest(RequestBody):
    listing_id: str | None = None
    creation_time: KeyPart | None = None
    tag: TagName | None = None


class ListingPictureRequest(RequestBody):
    listing_id: str | None = None
    creation_time: KeyPart | None = None
    picture: str | None = None


class TagResponse(CamelModel):
    name: str
    listings: list[ListingRefResponse]
