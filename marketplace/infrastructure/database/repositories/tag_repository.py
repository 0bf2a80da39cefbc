from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError

from marketplace.application.interfaces.tag_repository import TagRepository
from marketplace.domain.entities.tag import Tag
from marketplace.domain.value_objects.references import ListingRef
from marketplace.infrastructure.database.models import TagModel
from marketplace.infrastructure.database.repositories.document_repository import (
    DocumentRepository,
)


def _key(name: str) -> dict[str, str]:
    return {"name": name}


class SqlAlchemyTagRepository(DocumentRepository, TagRepository):
    """SQLAlchemy implementation for the tag → listings index."""

    model = TagModel
    entity_name = "Tag"

    async def get_tag(self, name: str) -> Tag | None:
        async with self._session_factory() as session:
            model = await session.get(TagModel, name)
            if model is None:
                return None
            return Tag(
                name=model.name,
                listings=[ListingRef.from_document(d) for d in model.listings],
            )

    async def create_tag(self, name: str) -> bool:
        try:
            async with self._session_factory() as session, session.begin():
                session.add(TagModel(name=name, listings=[]))
        except IntegrityError:
            # Another request created it first
            return False
        return True

    async def add_listing(self, name: str, listing_id: str, creation_time: str) -> bool:
        ref = ListingRef(listing_id, creation_time)
        return await self._append(_key(name), "listings", ref.to_document(), unique=True)

    async def remove_listing(self, name: str, listing_id: str, creation_time: str) -> bool:
        target = ListingRef(listing_id, creation_time)
        return await self._remove_first(
            _key(name), "listings", lambda doc: ListingRef.from_document(doc) == target
        )

    async def delete_tag(self, name: str) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(delete(TagModel).where(TagModel.name == name))
