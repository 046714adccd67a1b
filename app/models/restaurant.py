"""Restaurante"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, IdType, JSONType


class Restaurant(Base):
    __tablename__ = "restaurants"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)

    official_name: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    representative: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    table_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    city_id: Mapped[Optional[int]] = mapped_column(
        IdType,
        ForeignKey("cities.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Contacto
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    instagram: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    logo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Sede principal
    location_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    schedule: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Lista libre de sedes (cualquier valor JSON), p. ej. [{"nombre": ..., "direccion": ...}]
    branches: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)

    proposals: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    editions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    awards: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
