"""
FastAPI dependency injection wiring.

Each dependency function returns a fully-constructed object with its
collaborators injected, so the route handlers stay thin. The session
factory is built once in the application lifespan and read from
``app.state``; tests swap any layer through ``app.dependency_overrides``.
"""
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace.application.errors import UnauthorizedError
from marketplace.application.interfaces.listing_repository import ListingRepository
from marketplace.application.interfaces.tag_repository import TagRepository
from marketplace.application.interfaces.user_repository import UserRepository
from marketplace.application.use_cases.create_listing import CreateListing
from marketplace.application.use_cases.delete_listing import DeleteListing
from marketplace.application.use_cases.edit_listing import AddListingTag, RemoveListingTag
from marketplace.application.use_cases.save_listing import SaveListing, UnsaveListing
from marketplace.application.use_cases.sign_up import SignUp
from marketplace.application.use_cases.update_profile import UpdateProfile
from marketplace.config import Settings
from marketplace.infrastructure.database.repositories.listing_repository import (
    SqlAlchemyListingRepository,
)
from marketplace.infrastructure.database.repositories.tag_repository import (
    SqlAlchemyTagRepository,
)
from marketplace.infrastructure.database.repositories.user_repository import (
    SqlAlchemyUserRepository,
)


@dataclass(frozen=True)
class CallerIdentity:
    """Identity asserted by the upstream authentication layer, trusted as-is."""

    user_id: str
    name: str | None = None
    email: str | None = None
    picture: str | None = None


# ---- Low-level dependencies ------------------------------------------------

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.session_factory


def get_caller(request: Request, settings: Settings = Depends(get_settings)) -> CallerIdentity:
    user_id = request.headers.get(settings.user_id_header)
    if not user_id:
        raise UnauthorizedError("Missing caller identity.", code="Unauthenticated")
    return CallerIdentity(
        user_id=user_id,
        name=request.headers.get(settings.user_name_header),
        email=request.headers.get(settings.user_email_header),
        picture=request.headers.get(settings.user_picture_header),
    )


def get_user_repo(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> UserRepository:
    return SqlAlchemyUserRepository(session_factory)


def get_listing_repo(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    settings: Settings = Depends(get_settings),
) -> ListingRepository:
    return SqlAlchemyListingRepository(
        session_factory,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )


def get_tag_repo(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> TagRepository:
    return SqlAlchemyTagRepository(session_factory)


# ---- Use-case dependencies -------------------------------------------------

def get_create_listing_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
    user_repo: UserRepository = Depends(get_user_repo),
    tag_repo: TagRepository = Depends(get_tag_repo),
    settings: Settings = Depends(get_settings),
) -> CreateListing:
    return CreateListing(
        listing_repo, user_repo, tag_repo, compensate_on_failure=settings.compensate_on_failure
    )


def get_delete_listing_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
    user_repo: UserRepository = Depends(get_user_repo),
    tag_repo: TagRepository = Depends(get_tag_repo),
    settings: Settings = Depends(get_settings),
) -> DeleteListing:
    return DeleteListing(
        listing_repo, user_repo, tag_repo, compensate_on_failure=settings.compensate_on_failure
    )


def get_save_listing_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
    user_repo: UserRepository = Depends(get_user_repo),
    settings: Settings = Depends(get_settings),
) -> SaveListing:
    return SaveListing(
        listing_repo, user_repo, compensate_on_failure=settings.compensate_on_failure
    )


def get_unsave_listing_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
    user_repo: UserRepository = Depends(get_user_repo),
    settings: Settings = Depends(get_settings),
) -> UnsaveListing:
    return UnsaveListing(
        listing_repo, user_repo, compensate_on_failure=settings.compensate_on_failure
    )


def get_add_listing_tag_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
    tag_repo: TagRepository = Depends(get_tag_repo),
    settings: Settings = Depends(get_settings),
) -> AddListingTag:
    return AddListingTag(
        listing_repo, tag_repo, compensate_on_failure=settings.compensate_on_failure
    )


def get_remove_listing_tag_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
    tag_repo: TagRepository = Depends(get_tag_repo),
    settings: Settings = Depends(get_settings),
) -> RemoveListingTag:
    return RemoveListingTag(
        listing_repo, tag_repo, compensate_on_failure=settings.compensate_on_failure
    )


def get_sign_up_use_case(user_repo: UserRepository = Depends(get_user_repo)) -> SignUp:
    return SignUp(user_repo)


def get_update_profile_use_case(
    user_repo: UserRepository = Depends(get_user_repo),
) -> UpdateProfile:
    return UpdateProfile(user_repo)
