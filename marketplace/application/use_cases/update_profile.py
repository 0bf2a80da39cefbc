from dataclasses import dataclass

import structlog

from marketplace.application.interfaces.user_repository import UserRepository

logger = structlog.get_logger(__name__)


@dataclass
class UpdateProfileInput:
    user_id: str
    phone: str | None = None
    picture: str | None = None
    name: str | None = None
    email: str | None = None


class UpdateProfile:
    """
    Use case: Apply each supplied profile field as its own single-field update.

    Fields are written in a fixed order (phone, picture, name, email); a failure
    stops the remaining updates and keeps those already applied.
    """

    def __init__(self, user_repo: UserRepository) -> None:
        self._user_repo = user_repo

    async def execute(self, input_data: UpdateProfileInput) -> list[str]:
        updated: list[str] = []
        if input_data.phone:
            await self._user_repo.update_phone(input_data.user_id, input_data.phone)
            updated.append("phone")
        if input_data.picture:
            await self._user_repo.update_picture(input_data.user_id, input_data.picture)
            updated.append("picture")
        if input_data.name:
            await self._user_repo.update_name(input_data.user_id, input_data.name)
            updated.append("name")
        if input_data.email:
            await self._user_repo.update_email(input_data.user_id, input_data.email)
            updated.append("email")

        logger.info("profile_updated", user_id=input_data.user_id, fields=updated)
        return updated
