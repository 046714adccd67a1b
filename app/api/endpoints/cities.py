"""Endpoints de Ciudades"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import delete, desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, translate_integrity_error
from app.core.validation import clean, require
from app.db.session import get_db
from app.models.city import City
from app.schemas.city import CityRead, CityWrite
from app.schemas.common import MessageResponse, PathId
from app.services.notifier import ChangeNotifier, get_notifier

logger = logging.getLogger(__name__)

router = APIRouter()

CONFLICT_MESSAGE = "Ya existe una ciudad con ese nombre"


def _city_payload(city: City) -> dict:
    return CityRead.model_validate(city).model_dump(mode="json", by_alias=True)


@router.get("", response_model=List[CityRead])
async def get_cities(db: AsyncSession = Depends(get_db)):
    """Todas las ciudades, las más recientes primero"""
    result = await db.execute(select(City).order_by(desc(City.created_at), desc(City.id)))
    return result.scalars().all()


@router.get("/search", response_model=List[CityRead])
async def search_cities(
    q: Optional[str] = Query(None, description="Texto a buscar en el nombre"),
    db: AsyncSession = Depends(get_db),
):
    """Búsqueda por subcadena; sin ``q`` devuelve lista vacía"""
    if not q:
        return []
    result = await db.execute(
        select(City).where(City.name.icontains(q, autoescape=True)).order_by(City.name)
    )
    return result.scalars().all()


@router.get("/{city_id}", response_model=CityRead)
async def get_city(city_id: PathId, db: AsyncSession = Depends(get_db)):
    city = await db.get(City, city_id)
    if city is None:
        raise NotFoundError("Ciudad no encontrada")
    return city


@router.post("", response_model=CityRead, status_code=201)
async def create_city(
    payload: CityWrite,
    db: AsyncSession = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    name = clean(payload.name)
    require("El nombre de la ciudad es requerido", name)

    city = City(name=name)
    db.add(city)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise translate_integrity_error(e, CONFLICT_MESSAGE, CONFLICT_MESSAGE)
    await db.refresh(city)

    logger.info(f"Ciudad creada: {city.id} {city.name}")
    notifier.publish("ciudad_agregada", _city_payload(city))
    return city


@router.put("/{city_id}", response_model=CityRead)
async def update_city(
    city_id: PathId,
    payload: CityWrite,
    db: AsyncSession = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    name = clean(payload.name)
    require("El nombre de la ciudad es requerido", name)

    city = await db.get(City, city_id)
    if city is None:
        raise NotFoundError("Ciudad no encontrada")

    city.name = name
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise translate_integrity_error(e, CONFLICT_MESSAGE, CONFLICT_MESSAGE)
    await db.refresh(city)

    logger.info(f"Ciudad actualizada: {city.id} {city.name}")
    notifier.publish("ciudad_actualizada", _city_payload(city))
    return city


@router.delete("/{city_id}", response_model=MessageResponse)
async def delete_city(
    city_id: PathId,
    db: AsyncSession = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    """
    Elimina la ciudad. La base de datos borra sus asociaciones con
    patrocinadores y deja en NULL la ciudad de los restaurantes.
    """
    result = await db.execute(delete(City).where(City.id == city_id))
    if result.rowcount == 0:
        await db.rollback()
        raise NotFoundError("Ciudad no encontrada")
    await db.commit()

    logger.info(f"Ciudad eliminada: {city_id}")
    notifier.publish("ciudad_eliminada", {"id": city_id, "message": "Ciudad eliminada"})
    return {"message": "Ciudad eliminada correctamente"}
