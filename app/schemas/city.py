"""Esquemas de Ciudad"""
from datetime import datetime
from typing import Optional

from app.schemas.common import CamelModel


class CityWrite(CamelModel):
    name: Optional[str] = None


class CityRead(CamelModel):
    id: int
    name: str
    created_at: Optional[datetime] = None
