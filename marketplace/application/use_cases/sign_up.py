from dataclasses import dataclass

import structlog

from marketplace.application.errors import InvalidRequestError
from marketplace.application.interfaces.user_repository import UserRepository

logger = structlog.get_logger(__name__)


@dataclass
class SignUpInput:
    user_id: str
    # Values chosen by the user in the signup form
    custom_name: str | None = None
    custom_email: str | None = None
    custom_picture: str | None = None
    phone: str | None = None
    # Values asserted by the identity provider
    provider_name: str | None = None
    provider_email: str | None = None
    provider_picture: str | None = None


class SignUp:
    """
    Use case: Create the caller's profile.

    Custom values win over identity-provider values. Name, email and picture
    must come from one of the two; all checks run before the store is touched.
    """

    def __init__(self, user_repo: UserRepository) -> None:
        self._user_repo = user_repo

    async def execute(self, input_data: SignUpInput) -> None:
        name = input_data.custom_name or input_data.provider_name
        if not name:
            raise InvalidRequestError("Missing name")
        email = input_data.custom_email or input_data.provider_email
        if not email:
            raise InvalidRequestError("Missing email")
        picture = input_data.custom_picture or input_data.provider_picture
        if not picture:
            raise InvalidRequestError("Missing picture")

        await self._user_repo.create_profile(
            input_data.user_id, name, email, picture, input_data.phone
        )
        logger.info("user_signed_up", user_id=input_data.user_id)
