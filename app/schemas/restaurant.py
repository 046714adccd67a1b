"""Esquemas de Restaurante"""
import json
from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import Field, field_validator

from app.schemas.common import CamelModel, RecordId


def _parse_branches(v, strict: bool = True):
    """
    Las sedes pueden llegar serializadas como texto JSON.

    Al escribir, un texto que no es una lista JSON es un error de entrada.
    Al leer filas antiguas guardadas como texto se devuelve [] si no se
    puede interpretar.
    """
    if v is None:
        return []
    if not isinstance(v, str):
        return v
    try:
        parsed = json.loads(v)
    except ValueError:
        if strict:
            raise ValueError("Las sedes no son JSON válido")
        return []
    if not isinstance(parsed, list):
        if strict:
            raise ValueError("Las sedes deben ser una lista")
        return []
    return parsed


class RestaurantFields(CamelModel):
    description: Optional[str] = None
    representative: Optional[str] = None
    table_count: Optional[Annotated[int, Field(ge=0, le=2**31 - 1)]] = None
    city_id: Optional[RecordId] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    instagram: Optional[str] = None
    logo: Optional[str] = None
    location_summary: Optional[str] = None
    schedule: Optional[str] = None
    # Lista libre: objetos, textos o cualquier valor JSON
    branches: List[Any] = Field(default_factory=list)
    proposals: Optional[str] = None
    editions: Optional[str] = None
    awards: Optional[str] = None


class RestaurantWrite(RestaurantFields):
    official_name: Optional[str] = None
    display_name: Optional[str] = None

    @field_validator("branches", mode="before")
    @classmethod
    def parse_branches(cls, v):
        return _parse_branches(v)


class RestaurantRead(RestaurantFields):
    id: int
    official_name: str
    display_name: str
    # Nombre de la ciudad (LEFT JOIN), None si no tiene
    city_name: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("branches", mode="before")
    @classmethod
    def parse_branches(cls, v):
        return _parse_branches(v, strict=False)
