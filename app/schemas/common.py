"""Esquemas Pydantic compartidos"""
from typing import Annotated

from fastapi import Path
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

# Rango de BIGINT; fuera de él el driver falla antes de llegar a la base
MAX_ID = 2**63 - 1

RecordId = Annotated[int, Field(ge=1, le=MAX_ID)]
PathId = Annotated[int, Path(ge=1, le=MAX_ID)]


class CamelModel(BaseModel):
    """camelCase en el JSON, snake_case en Python; acepta ambos al entrar"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    message: str
