import structlog
from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace.application.errors import ConflictError, InvalidRequestError
from marketplace.application.interfaces.listing_repository import ListingRepository
from marketplace.domain.entities.listing import Listing, ListingPage, normalize_title
from marketplace.domain.value_objects.references import ListingRef
from marketplace.infrastructure.database.models import ListingModel
from marketplace.infrastructure.database.pagination import decode_key, encode_key
from marketplace.infrastructure.database.repositories.document_repository import (
    DocumentRepository,
)

logger = structlog.get_logger(__name__)


def _to_domain(model: ListingModel) -> Listing:
    return Listing(
        listing_id=model.listing_id,
        creation_time=model.creation_time,
        user_id=model.user_id,
        title=model.title,
        search_title=model.search_title,
        price=float(model.price),
        description=model.description,
        location=model.location,
        tags=list(model.tags),
        pictures=list(model.pictures),
        sold=model.sold,
        sold_to=model.sold_to,
        saved_count=model.saved_count,
        comments=list(model.comments),
    )


def _to_model(listing: Listing) -> ListingModel:
    return ListingModel(
        listing_id=listing.listing_id,
        creation_time=listing.creation_time,
        user_id=listing.user_id,
        title=listing.title,
        search_title=normalize_title(listing.title),
        price=listing.price,
        description=listing.description,
        location=listing.location,
        tags=list(listing.tags),
        pictures=list(listing.pictures),
        sold=False,
        sold_to=None,
        saved_count=0,
        comments=[],
    )


def _key(listing_id: str, creation_time: str) -> dict[str, str]:
    return {"listing_id": listing_id, "creation_time": creation_time}


class SqlAlchemyListingRepository(DocumentRepository, ListingRepository):
    """SQLAlchemy implementation for the listings collection."""

    model = ListingModel
    entity_name = "Listing"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        default_page_size: int = 20,
        max_page_size: int = 100,
    ) -> None:
        super().__init__(session_factory)
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    async def create_listing(self, listing: Listing) -> None:
        try:
            async with self._session_factory() as session, session.begin():
                session.add(_to_model(listing))
        except IntegrityError as exc:
            raise ConflictError("Listing already exists.", code="ListingExists") from exc

    async def get_listings(
        self, start_key: str | None = None, limit: int | None = None
    ) -> ListingPage:
        page_size = min(limit or self._default_page_size, self._max_page_size)
        if page_size < 1:
            raise InvalidRequestError("Invalid limit")

        query = select(ListingModel).order_by(
            ListingModel.listing_id.asc(), ListingModel.creation_time.asc()
        )
        if start_key:
            after = decode_key(start_key)
            query = query.where(
                or_(
                    ListingModel.listing_id > after.listing_id,
                    and_(
                        ListingModel.listing_id == after.listing_id,
                        ListingModel.creation_time > after.creation_time,
                    ),
                )
            )
        # One extra row tells us whether another page exists
        query = query.limit(page_size + 1)

        async with self._session_factory() as session:
            result = await session.execute(query)
            rows = result.scalars().all()

        items = [_to_domain(m) for m in rows[:page_size]]
        next_key = encode_key(items[-1].ref) if len(rows) > page_size else None
        return ListingPage(items=items, next_key=next_key)

    async def get_listings_by_ids(self, keys: list[ListingRef]) -> list[Listing]:
        if not keys:
            return []
        query = select(ListingModel).where(
            or_(
                *(
                    and_(
                        ListingModel.listing_id == ref.listing_id,
                        ListingModel.creation_time == ref.creation_time,
                    )
                    for ref in set(keys)
                )
            )
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [_to_domain(m) for m in result.scalars().all()]

    async def get_listing(self, listing_id: str, creation_time: str) -> Listing | None:
        async with self._session_factory() as session:
            model = await session.get(ListingModel, (listing_id, creation_time))
            return _to_domain(model) if model is not None else None

    async def search_listings(self, search_term: str) -> list[Listing]:
        query = select(ListingModel).where(
            ListingModel.search_title.contains(normalize_title(search_term), autoescape=True)
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [_to_domain(m) for m in result.scalars().all()]

    async def mark_as_sold(self, listing_id: str, creation_time: str, buyer_id: str) -> None:
        await self._update_fields(_key(listing_id, creation_time), sold=True, sold_to=buyer_id)

    async def increment_saved_count(self, listing_id: str, creation_time: str) -> None:
        await self._update_fields(
            _key(listing_id, creation_time), saved_count=ListingModel.saved_count + 1
        )

    async def decrement_saved_count(self, listing_id: str, creation_time: str) -> None:
        key = _key(listing_id, creation_time)
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                update(ListingModel)
                .where(self._where(key), ListingModel.saved_count > 0)
                .values(saved_count=ListingModel.saved_count - 1)
            )
            if result.rowcount:
                return
            exists = await session.scalar(select(ListingModel.listing_id).where(self._where(key)))
        if exists is None:
            raise self._not_found()
        logger.warning(
            "saved_count_already_zero", listing_id=listing_id, creation_time=creation_time
        )

    async def add_tag(self, listing_id: str, creation_time: str, tag: str) -> None:
        await self._append(_key(listing_id, creation_time), "tags", tag)

    async def delete_tag(self, listing_id: str, creation_time: str, tag: str) -> bool:
        return await self._remove_first(
            _key(listing_id, creation_time), "tags", lambda value: value == tag
        )

    async def add_picture(self, listing_id: str, creation_time: str, picture: str) -> None:
        await self._append(_key(listing_id, creation_time), "pictures", picture)

    async def delete_picture(self, listing_id: str, creation_time: str, picture: str) -> bool:
        return await self._remove_first(
            _key(listing_id, creation_time), "pictures", lambda value: value == picture
        )

    async def delete_listing(self, listing_id: str, creation_time: str) -> bool:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                delete(ListingModel).where(self._where(_key(listing_id, creation_time)))
            )
            return result.rowcount > 0
