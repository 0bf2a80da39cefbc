import math
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from marketplace.application.errors import InvalidRequestError


def _key_part_to_str(value: Any) -> Any:
    # Clients send creation times both as "1000" and as 1000
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


KeyPart = Annotated[str, BeforeValidator(_key_part_to_str)]


# Largest value the listings.price NUMERIC(12, 2) column holds
MAX_PRICE = 9_999_999_999.99


def _check_price(value: float) -> float:
    if not math.isfinite(value) or value < 0 or value > MAX_PRICE:
        raise ValueError(f"price must be between 0 and {MAX_PRICE}")
    if round(value, 2) != value:
        raise ValueError("price must have at most two decimal places")
    return value


def _check_tag(value: str) -> str:
    # Tag names are path segments in /api/tags/{name}
    if not value.strip() or "/" in value:
        raise ValueError("tag must be non-blank and must not contain '/'")
    return value


Price = Annotated[float, AfterValidator(_check_price)]
TagName = Annotated[str, AfterValidator(_check_tag)]


class CamelModel(BaseModel):
    """JSON in and out uses camelCase; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestBody(CamelModel):
    """
    Base for request bodies whose fields are all declared optional.

    Presence is checked explicitly with ``require`` so a missing field yields
    a 400 naming it, in declaration order, before any store access.
    """

    def require(self, *fields: str) -> None:
        for name in fields:
            value = getattr(self, name)
            if value is None or value == "":
                alias = type(self).model_fields[name].alias or name
                raise InvalidRequestError(f"Missing {alias}")


class MessageResponse(BaseModel):
    message: str = "Success"


class ErrorResponse(BaseModel):
    message: str
    code: str | None = None


class ListingKey(CamelModel):
    listing_id: str
    creation_time: KeyPart


class ListingRefResponse(CamelModel):
    listing_id: str
    creation_time: str


def missing_body() -> InvalidRequestError:
    return InvalidRequestError("Missing body")
