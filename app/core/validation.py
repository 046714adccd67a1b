"""Validaciones de presencia y formato compartidas por los endpoints"""
import re
from typing import Optional

from app.core.errors import InvalidInputError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def clean(value: Optional[str]) -> Optional[str]:
    """Recorta espacios; cadena vacía -> None"""
    if value is None:
        return None
    value = value.strip()
    return value or None


def require(message: str, *values: Optional[str]) -> None:
    if any(v is None for v in values):
        raise InvalidInputError(message)


def validate_email(email: str) -> None:
    if not EMAIL_RE.match(email):
        raise InvalidInputError("El formato del email no es válido")
