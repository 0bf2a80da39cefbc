"""
SQLAlchemy ORM models.

These are purely infrastructure concerns. Domain entities are mapped to/from
these models inside the repository implementations. List-valued fields are
JSON documents (JSONB on PostgreSQL); references inside them are stored as
camelCase objects such as ``{"listingId": "L1", "creationTime": "1000"}``.
"""
from typing import Any

from sqlalchemy import JSON, Boolean, Float, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.infrastructure.database.connection import Base

_Document = JSON().with_variant(JSONB(), "postgresql")


class UserModel(Base):
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    picture: Mapped[str] = mapped_column(String(2048), nullable=False)

    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    saved_listings: Mapped[list[dict[str, Any]]] = mapped_column(
        _Document, nullable=False, default=list
    )
    active_listings: Mapped[list[dict[str, Any]]] = mapped_column(
        _Document, nullable=False, default=list
    )
    listings_to_rate: Mapped[list[dict[str, Any]]] = mapped_column(
        _Document, nullable=False, default=list
    )


class ListingModel(Base):
    __tablename__ = "listings"

    listing_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    creation_time: Mapped[str] = mapped_column(String(32), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(512), nullable=False)
    search_title: Mapped[str] = mapped_column(String(512), nullable=False, index=True)
    price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(String(512), nullable=False)
    tags: Mapped[list[str]] = mapped_column(_Document, nullable=False, default=list)
    pictures: Mapped[list[str]] = mapped_column(_Document, nullable=False, default=list)

    sold: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sold_to: Mapped[str | None] = mapped_column(String(128), nullable=True)
    saved_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comments: Mapped[list[Any]] = mapped_column(_Document, nullable=False, default=list)


class TagModel(Base):
    __tablename__ = "tags"

    name: Mapped[str] = mapped_column(String(256), primary_key=True)
    listings: Mapped[list[dict[str, Any]]] = mapped_column(
        _Document, nullable=False, default=list
    )
