"""Opaque continuation tokens for keyset scans over the listings table."""
import base64
import binascii
import json

from marketplace.application.errors import InvalidRequestError
from marketplace.domain.value_objects.references import ListingRef


def encode_key(ref: ListingRef) -> str:
    raw = json.dumps(ref.to_document(), separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def decode_key(token: str) -> ListingRef:
    try:
        raw = base64.urlsafe_b64decode(token.encode("ascii"))
        return ListingRef.from_document(json.loads(raw))
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as exc:
        raise InvalidRequestError("Invalid startKey", code="InvalidStartKey") from exc
