"""Sponsor <-> City: tabla de asociación"""

from sqlalchemy import Column, ForeignKey, Table

from app.db.base import Base, IdType

sponsor_cities = Table(
    "sponsor_cities",
    Base.metadata,
    Column(
        "sponsor_id",
        IdType,
        ForeignKey("sponsors.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "city_id",
        IdType,
        ForeignKey("cities.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)
