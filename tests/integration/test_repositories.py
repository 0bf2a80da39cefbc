"""
Integration tests for the SQLAlchemy repositories against in-memory SQLite.

Every repository call runs in its own session, so these tests exercise the
same one-write-per-call behaviour the use cases rely on.
"""
import pytest

from marketplace.application.errors import ConflictError, InvalidRequestError, NotFoundError
from marketplace.domain.entities.listing import Listing
from marketplace.domain.value_objects.references import ListingRef, ListingToRateRef
from marketplace.infrastructure.database.repositories.listing_repository import (
    SqlAlchemyListingRepository,
)
from marketplace.infrastructure.database.repositories.tag_repository import (
    SqlAlchemyTagRepository,
)
from marketplace.infrastructure.database.repositories.user_repository import (
    SqlAlchemyUserRepository,
)


def _listing(listing_id: str, title: str = "Desk Lamp", creation_time: str = "1000") -> Listing:
    return Listing.create(
        listing_id=listing_id,
        creation_time=creation_time,
        user_id="seller-1",
        title=title,
        price=12.5,
        description="Works fine",
        location="Revelle",
        tags=["lamp"],
        pictures=["p1", "p2"],
    )


async def _sign_up(repo: SqlAlchemyUserRepository, user_id: str = "u1", name: str = "Ann") -> None:
    await repo.create_profile(user_id, name, f"{user_id}@example.edu", "https://pic", None)


class TestListingRepository:
    @pytest.mark.asyncio
    async def test_create_and_get(self, listing_repo: SqlAlchemyListingRepository) -> None:
        await listing_repo.create_listing(_listing("L1", title="  Mini Fridge "))

        stored = await listing_repo.get_listing("L1", "1000")

        assert stored is not None
        assert stored.title == "  Mini Fridge "
        assert stored.search_title == "mini fridge"
        assert stored.price == 12.5
        assert stored.pictures == ["p1", "p2"]
        assert (stored.sold, stored.sold_to, stored.saved_count) == (False, None, 0)

    @pytest.mark.asyncio
    async def test_get_requires_both_key_parts(
        self, listing_repo: SqlAlchemyListingRepository
    ) -> None:
        await listing_repo.create_listing(_listing("L1"))
        assert await listing_repo.get_listing("L1", "999") is None

    @pytest.mark.asyncio
    async def test_duplicate_key_conflicts(
        self, listing_repo: SqlAlchemyListingRepository
    ) -> None:
        await listing_repo.create_listing(_listing("L1"))

        with pytest.raises(ConflictError):
            await listing_repo.create_listing(_listing("L1"))

    @pytest.mark.asyncio
    async def test_search_matches_normalized_substring(
        self, listing_repo: SqlAlchemyListingRepository
    ) -> None:
        await listing_repo.create_listing(_listing("L1", title="Mini Fridge"))
        await listing_repo.create_listing(_listing("L2", title="Desk Lamp"))
        await listing_repo.create_listing(_listing("L3", title="100% cotton"))

        assert [l.listing_id for l in await listing_repo.search_listings(" FRIDGE ")] == ["L1"]
        assert [l.listing_id for l in await listing_repo.search_listings("%")] == ["L3"]
        assert await listing_repo.search_listings("sofa") == []

    @pytest.mark.asyncio
    async def test_pages_cover_every_listing_once(
        self, listing_repo: SqlAlchemyListingRepository
    ) -> None:
        for listing_id in ("L3", "L1", "L5", "L2", "L4"):
            await listing_repo.create_listing(_listing(listing_id))

        seen: list[str] = []
        page = await listing_repo.get_listings()
        seen += [l.listing_id for l in page.items]
        while page.next_key:
            page = await listing_repo.get_listings(start_key=page.next_key)
            seen += [l.listing_id for l in page.items]

        assert seen == ["L1", "L2", "L3", "L4", "L5"]

    @pytest.mark.asyncio
    async def test_limit_is_capped(self, listing_repo: SqlAlchemyListingRepository) -> None:
        for i in range(7):
            await listing_repo.create_listing(_listing(f"L{i}"))

        page = await listing_repo.get_listings(limit=50)

        assert len(page.items) == 5
        assert page.next_key is not None

    @pytest.mark.asyncio
    async def test_last_page_has_no_next_key(
        self, listing_repo: SqlAlchemyListingRepository
    ) -> None:
        await listing_repo.create_listing(_listing("L1"))
        await listing_repo.create_listing(_listing("L2"))

        page = await listing_repo.get_listings(limit=2)

        assert len(page.items) == 2
        assert page.next_key is None

    @pytest.mark.asyncio
    async def test_invalid_start_key(self, listing_repo: SqlAlchemyListingRepository) -> None:
        with pytest.raises(InvalidRequestError):
            await listing_repo.get_listings(start_key="garbage")

    @pytest.mark.asyncio
    async def test_batch_get_skips_missing_keys(
        self, listing_repo: SqlAlchemyListingRepository
    ) -> None:
        await listing_repo.create_listing(_listing("L1"))
        await listing_repo.create_listing(_listing("L2"))

        found = await listing_repo.get_listings_by_ids(
            [ListingRef("L1", "1000"), ListingRef("L2", "1000"), ListingRef("L9", "1000")]
        )

        assert sorted(l.listing_id for l in found) == ["L1", "L2"]
        assert await listing_repo.get_listings_by_ids([]) == []

    @pytest.mark.asyncio
    async def test_mark_as_sold(self, listing_repo: SqlAlchemyListingRepository) -> None:
        await listing_repo.create_listing(_listing("L1"))

        await listing_repo.mark_as_sold("L1", "1000", "buyer-1")

        stored = await listing_repo.get_listing("L1", "1000")
        assert stored is not None
        assert stored.sold is True
        assert stored.sold_to == "buyer-1"

    @pytest.mark.asyncio
    async def test_update_on_missing_listing_is_not_found(
        self, listing_repo: SqlAlchemyListingRepository
    ) -> None:
        with pytest.raises(NotFoundError, match="Listing Not Found."):
            await listing_repo.mark_as_sold("nope", "1", "buyer-1")
        with pytest.raises(NotFoundError):
            await listing_repo.increment_saved_count("nope", "1")
        with pytest.raises(NotFoundError):
            await listing_repo.decrement_saved_count("nope", "1")

    @pytest.mark.asyncio
    async def test_saved_count_never_goes_negative(
        self, listing_repo: SqlAlchemyListingRepository
    ) -> None:
        await listing_repo.create_listing(_listing("L1"))

        await listing_repo.increment_saved_count("L1", "1000")
        await listing_repo.increment_saved_count("L1", "1000")
        await listing_repo.decrement_saved_count("L1", "1000")
        await listing_repo.decrement_saved_count("L1", "1000")
        await listing_repo.decrement_saved_count("L1", "1000")

        stored = await listing_repo.get_listing("L1", "1000")
        assert stored is not None
        assert stored.saved_count == 0

    @pytest.mark.asyncio
    async def test_delete_tag_removes_first_match_only(
        self, listing_repo: SqlAlchemyListingRepository
    ) -> None:
        await listing_repo.create_listing(_listing("L1"))
        await listing_repo.add_tag("L1", "1000", "desk")
        await listing_repo.add_tag("L1", "1000", "lamp")

        assert await listing_repo.delete_tag("L1", "1000", "lamp") is True
        assert await listing_repo.delete_tag("L1", "1000", "sofa") is False

        stored = await listing_repo.get_listing("L1", "1000")
        assert stored is not None
        assert stored.tags == ["desk", "lamp"]

    @pytest.mark.asyncio
    async def test_pictures_append_and_remove(
        self, listing_repo: SqlAlchemyListingRepository
    ) -> None:
        await listing_repo.create_listing(_listing("L1"))

        await listing_repo.add_picture("L1", "1000", "p3")
        assert await listing_repo.delete_picture("L1", "1000", "p1") is True

        stored = await listing_repo.get_listing("L1", "1000")
        assert stored is not None
        assert stored.pictures == ["p2", "p3"]

    @pytest.mark.asyncio
    async def test_remove_at_skips_when_entry_moved(
        self, listing_repo: SqlAlchemyListingRepository
    ) -> None:
        await listing_repo.create_listing(_listing("L1"))
        key = {"listing_id": "L1", "creation_time": "1000"}

        # Index 0 was read as "p2" but the list now holds "p1" there
        assert await listing_repo._remove_at(key, "pictures", 0, "p2") is False
        assert await listing_repo._remove_at(key, "pictures", 5, "p1") is False

        stored = await listing_repo.get_listing("L1", "1000")
        assert stored is not None
        assert stored.pictures == ["p1", "p2"]

    @pytest.mark.asyncio
    async def test_delete_listing(self, listing_repo: SqlAlchemyListingRepository) -> None:
        await listing_repo.create_listing(_listing("L1"))

        assert await listing_repo.delete_listing("L1", "1000") is True
        assert await listing_repo.delete_listing("L1", "1000") is False
        assert await listing_repo.get_listing("L1", "1000") is None


class TestUserRepository:
    @pytest.mark.asyncio
    async def test_new_profile_defaults(self, user_repo: SqlAlchemyUserRepository) -> None:
        await _sign_up(user_repo)

        profile = await user_repo.get_profile("u1")

        assert profile is not None
        assert (profile.rating, profile.rating_count) == (0.0, 0)
        assert profile.saved_listings == []
        assert profile.active_listings == []
        assert profile.listings_to_rate == []

    @pytest.mark.asyncio
    async def test_signup_twice_conflicts(self, user_repo: SqlAlchemyUserRepository) -> None:
        await _sign_up(user_repo)

        with pytest.raises(ConflictError):
            await _sign_up(user_repo, name="Other")

        profile = await user_repo.get_profile("u1")
        assert profile is not None
        assert profile.name == "Ann"

    @pytest.mark.asyncio
    async def test_rating_is_running_mean(self, user_repo: SqlAlchemyUserRepository) -> None:
        await _sign_up(user_repo)

        for value in (5, 3, 4):
            await user_repo.add_rating("u1", value)

        profile = await user_repo.get_profile("u1")
        assert profile is not None
        assert profile.rating_count == 3
        assert profile.rating == pytest.approx(4.0)

    @pytest.mark.asyncio
    async def test_rating_unknown_user(self, user_repo: SqlAlchemyUserRepository) -> None:
        with pytest.raises(NotFoundError, match="User Not Found."):
            await user_repo.add_rating("ghost", 5)

    @pytest.mark.asyncio
    async def test_field_updates_touch_one_field(
        self, user_repo: SqlAlchemyUserRepository
    ) -> None:
        await _sign_up(user_repo)

        await user_repo.update_phone("u1", "555-0100")
        await user_repo.update_name("u1", "Annie")

        profile = await user_repo.get_profile("u1")
        assert profile is not None
        assert profile.phone == "555-0100"
        assert profile.name == "Annie"
        assert profile.email == "u1@example.edu"

    @pytest.mark.asyncio
    async def test_search_by_name_and_email(self, user_repo: SqlAlchemyUserRepository) -> None:
        await _sign_up(user_repo, "u1", "Ann Lee")
        await _sign_up(user_repo, "u2", "Bob")

        assert [p.user_id for p in await user_repo.search_profiles("ann")] == ["u1"]
        assert [p.user_id for p in await user_repo.search_profiles_by_email("u2@example.edu")] == [
            "u2"
        ]
        assert await user_repo.search_profiles_by_email("U2@example.edu") == []

    @pytest.mark.asyncio
    async def test_saved_listing_references_are_unique(
        self, user_repo: SqlAlchemyUserRepository
    ) -> None:
        await _sign_up(user_repo)

        assert await user_repo.add_saved_listing("u1", "L1", "1000") is True
        assert await user_repo.add_saved_listing("u1", "L1", "1000") is False
        assert await user_repo.add_saved_listing("u1", "L1", "2000") is True

        profile = await user_repo.get_profile("u1")
        assert profile is not None
        assert profile.saved_listings == [ListingRef("L1", "1000"), ListingRef("L1", "2000")]

    @pytest.mark.asyncio
    async def test_remove_saved_listing_by_value(
        self, user_repo: SqlAlchemyUserRepository
    ) -> None:
        await _sign_up(user_repo)
        await user_repo.add_saved_listing("u1", "L1", "1000")
        await user_repo.add_saved_listing("u1", "L2", "1000")

        assert await user_repo.remove_saved_listing("u1", "L1", "1000") is True
        assert await user_repo.remove_saved_listing("u1", "L1", "1000") is False

        profile = await user_repo.get_profile("u1")
        assert profile is not None
        assert profile.saved_listings == [ListingRef("L2", "1000")]

    @pytest.mark.asyncio
    async def test_list_ops_on_unknown_user(self, user_repo: SqlAlchemyUserRepository) -> None:
        with pytest.raises(NotFoundError):
            await user_repo.add_active_listing("ghost", "L1", "1000")
        with pytest.raises(NotFoundError):
            await user_repo.remove_active_listing("ghost", "L1", "1000")

    @pytest.mark.asyncio
    async def test_listings_to_rate(self, user_repo: SqlAlchemyUserRepository) -> None:
        await _sign_up(user_repo, "buyer")
        entry = ListingToRateRef(
            buyer_id="buyer", listing_id="L1", creation_time="1000", seller_id="seller"
        )

        assert await user_repo.add_listing_to_rate("buyer", entry) is True
        assert await user_repo.add_listing_to_rate("buyer", entry) is False
        profile = await user_repo.get_profile("buyer")
        assert profile is not None
        assert profile.listings_to_rate == [entry]

        assert await user_repo.remove_listing_to_rate("buyer", "L1", "1000") is True
        profile = await user_repo.get_profile("buyer")
        assert profile is not None
        assert profile.listings_to_rate == []


class TestTagRepository:
    @pytest.mark.asyncio
    async def test_create_is_idempotent(self, tag_repo: SqlAlchemyTagRepository) -> None:
        assert await tag_repo.create_tag("books") is True
        assert await tag_repo.create_tag("books") is False

        tag = await tag_repo.get_tag("books")
        assert tag is not None
        assert tag.is_empty

    @pytest.mark.asyncio
    async def test_add_and_remove_listing(self, tag_repo: SqlAlchemyTagRepository) -> None:
        await tag_repo.create_tag("books")
        await tag_repo.add_listing("books", "L1", "1000")
        await tag_repo.add_listing("books", "L2", "1000")
        assert await tag_repo.add_listing("books", "L1", "1000") is False

        assert await tag_repo.remove_listing("books", "L1", "1000") is True

        tag = await tag_repo.get_tag("books")
        assert tag is not None
        assert tag.listings == [ListingRef("L2", "1000")]

    @pytest.mark.asyncio
    async def test_add_to_missing_tag(self, tag_repo: SqlAlchemyTagRepository) -> None:
        with pytest.raises(NotFoundError, match="Tag Not Found."):
            await tag_repo.add_listing("nope", "L1", "1000")

    @pytest.mark.asyncio
    async def test_delete_tag(self, tag_repo: SqlAlchemyTagRepository) -> None:
        await tag_repo.create_tag("books")

        await tag_repo.delete_tag("books")
        await tag_repo.delete_tag("books")

        assert await tag_repo.get_tag("books") is None
