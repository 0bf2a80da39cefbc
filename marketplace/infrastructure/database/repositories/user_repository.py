from collections.abc import Callable
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from marketplace.application.errors import ConflictError
from marketplace.application.interfaces.user_repository import UserRepository
from marketplace.domain.entities.user_profile import UserProfile
from marketplace.domain.value_objects.references import ListingRef, ListingToRateRef
from marketplace.infrastructure.database.models import UserModel
from marketplace.infrastructure.database.repositories.document_repository import (
    DocumentRepository,
)


def _to_domain(model: UserModel) -> UserProfile:
    return UserProfile(
        user_id=model.user_id,
        name=model.name,
        email=model.email,
        phone=model.phone,
        picture=model.picture,
        rating=model.rating,
        rating_count=model.rating_count,
        saved_listings=[ListingRef.from_document(d) for d in model.saved_listings],
        active_listings=[ListingRef.from_document(d) for d in model.active_listings],
        listings_to_rate=[ListingToRateRef.from_document(d) for d in model.listings_to_rate],
    )


def _key(user_id: str) -> dict[str, str]:
    return {"user_id": user_id}


def _same_listing(listing_id: str, creation_time: str) -> Callable[[dict[str, Any]], bool]:
    def predicate(doc: dict[str, Any]) -> bool:
        return (
            str(doc.get("listingId")) == listing_id
            and str(doc.get("creationTime")) == creation_time
        )

    return predicate


class SqlAlchemyUserRepository(DocumentRepository, UserRepository):
    """SQLAlchemy implementation for the users collection."""

    model = UserModel
    entity_name = "User"

    async def create_profile(
        self,
        user_id: str,
        name: str,
        email: str,
        picture: str,
        phone: str | None = None,
    ) -> None:
        try:
            async with self._session_factory() as session, session.begin():
                session.add(
                    UserModel(
                        user_id=user_id,
                        name=name,
                        email=email,
                        picture=picture,
                        phone=phone,
                        rating=0.0,
                        rating_count=0,
                        saved_listings=[],
                        active_listings=[],
                        listings_to_rate=[],
                    )
                )
        except IntegrityError as exc:
            raise ConflictError("User already exists.", code="UserExists") from exc

    async def get_profile(self, user_id: str) -> UserProfile | None:
        async with self._session_factory() as session:
            model = await session.get(UserModel, user_id)
            return _to_domain(model) if model is not None else None

    async def search_profiles(self, name: str) -> list[UserProfile]:
        query = select(UserModel).where(
            func.lower(UserModel.name).contains(name.strip().lower(), autoescape=True)
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [_to_domain(m) for m in result.scalars().all()]

    async def search_profiles_by_email(self, email: str) -> list[UserProfile]:
        async with self._session_factory() as session:
            result = await session.execute(select(UserModel).where(UserModel.email == email))
            return [_to_domain(m) for m in result.scalars().all()]

    async def update_phone(self, user_id: str, phone: str) -> None:
        await self._update_fields(_key(user_id), phone=phone)

    async def update_picture(self, user_id: str, picture: str) -> None:
        await self._update_fields(_key(user_id), picture=picture)

    async def update_name(self, user_id: str, name: str) -> None:
        await self._update_fields(_key(user_id), name=name)

    async def update_email(self, user_id: str, email: str) -> None:
        await self._update_fields(_key(user_id), email=email)

    async def add_rating(self, user_id: str, rating: float) -> None:
        # Running mean; both SET expressions see the pre-update row
        await self._update_fields(
            _key(user_id),
            rating=(UserModel.rating * UserModel.rating_count + rating)
            / (UserModel.rating_count + 1),
            rating_count=UserModel.rating_count + 1,
        )

    async def add_saved_listing(self, user_id: str, listing_id: str, creation_time: str) -> bool:
        ref = ListingRef(listing_id, creation_time)
        return await self._append(_key(user_id), "saved_listings", ref.to_document(), unique=True)

    async def remove_saved_listing(
        self, user_id: str, listing_id: str, creation_time: str
    ) -> bool:
        return await self._remove_first(
            _key(user_id), "saved_listings", _same_listing(listing_id, creation_time)
        )

    async def add_active_listing(self, user_id: str, listing_id: str, creation_time: str) -> bool:
        ref = ListingRef(listing_id, creation_time)
        return await self._append(_key(user_id), "active_listings", ref.to_document(), unique=True)

    async def remove_active_listing(
        self, user_id: str, listing_id: str, creation_time: str
    ) -> bool:
        return await self._remove_first(
            _key(user_id), "active_listings", _same_listing(listing_id, creation_time)
        )

    async def add_listing_to_rate(self, user_id: str, entry: ListingToRateRef) -> bool:
        return await self._append(
            _key(user_id), "listings_to_rate", entry.to_document(), unique=True
        )

    async def remove_listing_to_rate(
        self, user_id: str, listing_id: str, creation_time: str
    ) -> bool:
        return await self._remove_first(
            _key(user_id), "listings_to_rate", _same_listing(listing_id, creation_time)
        )
