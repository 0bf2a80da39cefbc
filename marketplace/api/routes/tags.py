from fastapi import APIRouter, Depends

from marketplace.api.dependencies import get_tag_repo
from marketplace.api.schemas.common import ListingRefResponse
from marketplace.api.schemas.listing_schemas import TagResponse
from marketplace.application.errors import NotFoundError
from marketplace.application.interfaces.tag_repository import TagRepository

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/{name}", response_model=TagResponse)
async def get_tag(name: str, repo: TagRepository = Depends(get_tag_repo)) -> TagResponse:
    tag = await repo.get_tag(name)
    if tag is None:
        raise NotFoundError("Tag Not Found.")
    return TagResponse(
        name=tag.name,
        listings=[
            ListingRefResponse(listing_id=r.listing_id, creation_time=r.creation_time)
            for r in tag.listings
        ],
    )
