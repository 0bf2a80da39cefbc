"""Unit tests for continuation tokens, request-body presence checks and field bounds."""
import base64

import pytest
from pydantic import ValidationError

from marketplace.api.schemas.listing_schemas import BatchGetRequest, ListingTagRequest
from marketplace.api.schemas.user_schemas import MakeListingRequest, RateUserRequest
from marketplace.application.errors import InvalidRequestError
from marketplace.domain.value_objects.references import ListingRef
from marketplace.infrastructure.database.pagination import decode_key, encode_key


class TestContinuationKey:
    def test_decodes_what_it_encodes(self) -> None:
        ref = ListingRef("L/1 ?", "1700000000000")
        token = encode_key(ref)

        assert "/" not in token and "+" not in token
        assert decode_key(token) == ref

    @pytest.mark.parametrize(
        "token",
        [
            "not base64!",
            base64.urlsafe_b64encode(b"not json").decode(),
            base64.urlsafe_b64encode(b'{"listingId": "L1"}').decode(),
            base64.urlsafe_b64encode(b"[1, 2]").decode(),
        ],
    )
    def test_rejects_malformed_tokens(self, token: str) -> None:
        with pytest.raises(InvalidRequestError) as exc_info:
            decode_key(token)
        assert exc_info.value.code == "InvalidStartKey"


class TestRequestBodies:
    def test_accepts_camel_case_and_numeric_creation_time(self) -> None:
        body = MakeListingRequest.model_validate(
            {"listingId": "L1", "creationTime": 1000, "title": "Lamp", "price": 0}
        )
        assert body.listing_id == "L1"
        assert body.creation_time == "1000"
        assert body.price == 0

    def test_require_names_first_missing_field_by_alias(self) -> None:
        body = MakeListingRequest.model_validate({"listingId": "L1", "creationTime": "1"})

        with pytest.raises(InvalidRequestError, match="Missing title"):
            body.require("listing_id", "creation_time", "title", "price")

    def test_empty_string_counts_as_missing(self) -> None:
        body = RateUserRequest.model_validate({"rating": 4, "toRateUserId": ""})

        with pytest.raises(InvalidRequestError, match="Missing toRateUserId"):
            body.require("rating", "to_rate_user_id")

    def test_zero_price_is_present(self) -> None:
        body = MakeListingRequest.model_validate({"price": 0})
        body.require("price")

    def test_empty_key_list_is_present(self) -> None:
        body = BatchGetRequest.model_validate({"keys": []})
        body.require("keys")
        assert body.keys == []


class TestFieldBounds:
    @pytest.mark.parametrize("rating", [1, 3.5, 5])
    def test_rating_within_scale(self, rating: float) -> None:
        assert RateUserRequest.model_validate({"rating": rating}).rating == rating

    @pytest.mark.parametrize("rating", [0, 5.01, -1, 1e308])
    def test_rating_outside_scale(self, rating: float) -> None:
        with pytest.raises(ValidationError):
            RateUserRequest.model_validate({"rating": rating})

    @pytest.mark.parametrize("price", [0, 19.99, 9_999_999_999.99])
    def test_price_fits_money_column(self, price: float) -> None:
        assert MakeListingRequest.model_validate({"price": price}).price == price

    @pytest.mark.parametrize("price", [-0.01, 1e10, 12.345, float("inf")])
    def test_price_outside_money_column(self, price: float) -> None:
        with pytest.raises(ValidationError):
            MakeListingRequest.model_validate({"price": price})

    @pytest.mark.parametrize("tag", ["", "  ", "home/garden"])
    def test_unusable_tag_names(self, tag: str) -> None:
        with pytest.raises(ValidationError):
            MakeListingRequest.model_validate({"tags": ["books", tag]})
        with pytest.raises(ValidationError):
            ListingTagRequest.model_validate({"tag": tag})

    def test_ordinary_tag_names(self) -> None:
        body = MakeListingRequest.model_validate({"tags": ["books", "Mini Fridge"]})
        assert body.tags == ["books", "Mini Fridge"]
