"""Modelos de base de datos"""

from app.models.city import City
from app.models.restaurant import Restaurant
from app.models.sponsor import Sponsor
from app.models.sponsor_city import sponsor_cities

__all__ = [
    "City",
    "Sponsor",
    "sponsor_cities",
    "Restaurant",
]
