"""Endpoints de Restaurantes"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import Select, delete, desc, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.decorators import profile_endpoint
from app.core.errors import NotFoundError, ParentNotFoundError, translate_integrity_error
from app.core.validation import clean, require
from app.db.session import get_db
from app.models.city import City
from app.models.restaurant import Restaurant
from app.schemas.common import MessageResponse, PathId
from app.schemas.restaurant import RestaurantRead, RestaurantWrite
from app.services.notifier import ChangeNotifier, get_notifier

logger = logging.getLogger(__name__)

router = APIRouter()

PARENT_MESSAGE = "La ciudad indicada no existe"


def _with_city() -> Select:
    return (
        select(Restaurant, City.name)
        .outerjoin(City, Restaurant.city_id == City.id)
        .execution_options(populate_existing=True)
    )


def _build_restaurant_data(restaurant: Restaurant, city_name: Optional[str]) -> RestaurantRead:
    data = RestaurantRead.model_validate(restaurant)
    data.city_name = city_name
    return data


async def _fetch_restaurant(db: AsyncSession, restaurant_id: int) -> Optional[RestaurantRead]:
    row = (await db.execute(_with_city().where(Restaurant.id == restaurant_id))).first()
    if row is None:
        return None
    return _build_restaurant_data(*row)


async def _clean_fields(db: AsyncSession, payload: RestaurantWrite) -> dict:
    fields = {
        "official_name": clean(payload.official_name),
        "display_name": clean(payload.display_name),
        "description": clean(payload.description),
        "representative": clean(payload.representative),
        "table_count": payload.table_count,
        "city_id": payload.city_id,
        "email": clean(payload.email),
        "phone": clean(payload.phone),
        "instagram": clean(payload.instagram),
        "logo": clean(payload.logo),
        "location_summary": clean(payload.location_summary),
        "schedule": clean(payload.schedule),
        "branches": payload.branches,
        "proposals": clean(payload.proposals),
        "editions": clean(payload.editions),
        "awards": clean(payload.awards),
    }
    require(
        "El nombre oficial y nombre para mostrar son requeridos",
        fields["official_name"],
        fields["display_name"],
    )
    if fields["city_id"] is not None and await db.get(City, fields["city_id"]) is None:
        raise ParentNotFoundError(PARENT_MESSAGE)
    return fields


@router.get("", response_model=List[RestaurantRead])
@profile_endpoint
async def get_restaurants(db: AsyncSession = Depends(get_db)):
    """Todos los restaurantes con el nombre de su ciudad, los más recientes primero"""
    result = await db.execute(
        _with_city().order_by(desc(Restaurant.created_at), desc(Restaurant.id))
    )
    return [_build_restaurant_data(restaurant, city_name) for restaurant, city_name in result.all()]


@router.get("/search", response_model=List[RestaurantRead])
async def search_restaurants(
    q: Optional[str] = Query(None, description="Texto a buscar en nombres, representante o email"),
    db: AsyncSession = Depends(get_db),
):
    if not q:
        return []
    query = _with_city().where(
        or_(
            Restaurant.official_name.icontains(q, autoescape=True),
            Restaurant.display_name.icontains(q, autoescape=True),
            Restaurant.representative.icontains(q, autoescape=True),
            Restaurant.email.icontains(q, autoescape=True),
        )
    ).order_by(Restaurant.official_name)
    result = await db.execute(query)
    return [_build_restaurant_data(restaurant, city_name) for restaurant, city_name in result.all()]


@router.get("/{restaurant_id}", response_model=RestaurantRead)
@profile_endpoint
async def get_restaurant(restaurant_id: PathId, db: AsyncSession = Depends(get_db)):
    restaurant = await _fetch_restaurant(db, restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurante no encontrado")
    return restaurant


@router.post("", response_model=RestaurantRead, status_code=201)
async def create_restaurant(
    payload: RestaurantWrite,
    db: AsyncSession = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    fields = await _clean_fields(db, payload)
    logger.debug(f"📦 Sedes recibidas: {fields['branches']}")

    restaurant = Restaurant(**fields)
    db.add(restaurant)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise translate_integrity_error(e, PARENT_MESSAGE, PARENT_MESSAGE)

    data = await _fetch_restaurant(db, restaurant.id)
    logger.info(f"Restaurante creado: {data.id} {data.display_name}")
    notifier.publish("restaurante_agregado", data.model_dump(mode="json", by_alias=True))
    return data


@router.put("/{restaurant_id}", response_model=RestaurantRead)
async def update_restaurant(
    restaurant_id: PathId,
    payload: RestaurantWrite,
    db: AsyncSession = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    fields = await _clean_fields(db, payload)

    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurante no encontrado")
    for key, value in fields.items():
        setattr(restaurant, key, value)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise translate_integrity_error(e, PARENT_MESSAGE, PARENT_MESSAGE)

    data = await _fetch_restaurant(db, restaurant_id)
    logger.info(f"Restaurante actualizado: {data.id} {data.display_name}")
    notifier.publish("restaurante_actualizado", data.model_dump(mode="json", by_alias=True))
    return data


@router.delete("/{restaurant_id}", response_model=MessageResponse)
async def delete_restaurant(
    restaurant_id: PathId,
    db: AsyncSession = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    result = await db.execute(delete(Restaurant).where(Restaurant.id == restaurant_id))
    if result.rowcount == 0:
        await db.rollback()
        raise NotFoundError("Restaurante no encontrado")
    await db.commit()

    logger.info(f"Restaurante eliminado: {restaurant_id}")
    notifier.publish("restaurante_eliminado", {"id": restaurant_id, "message": "Restaurante eliminado"})
    return {"message": "Restaurante eliminado correctamente"}
