"""Base declarativa y tipos compartidos por los modelos"""
from sqlalchemy import JSON, BigInteger, Integer
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

# SQLite solo autoincrementa columnas INTEGER PRIMARY KEY
IdType = BigInteger().with_variant(Integer(), "sqlite")

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """SQLAlchemy 2.0 Declarative Base"""


__all__ = ["Base", "IdType", "JSONType"]
