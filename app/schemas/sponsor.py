"""Esquemas de Patrocinador"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.common import CamelModel, RecordId


class SponsorWrite(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    representative: Optional[str] = None
    logo_light: Optional[str] = None
    logo_dark: Optional[str] = None
    # None y [] significan lo mismo: el patrocinador queda sin ciudades
    city_ids: Optional[List[RecordId]] = None


class SponsorRead(CamelModel):
    """Vista agregada: patrocinador + ciudades asociadas en listas paralelas"""

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    representative: Optional[str] = None
    logo_light: Optional[str] = None
    logo_dark: Optional[str] = None
    created_at: Optional[datetime] = None
    city_names: List[str] = Field(default_factory=list)
    city_ids: List[int] = Field(default_factory=list)
