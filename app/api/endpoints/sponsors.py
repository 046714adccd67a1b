"""Endpoints de Patrocinadores"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.decorators import profile_endpoint
from app.core.errors import AppError, NotFoundError, translate_integrity_error
from app.core.validation import clean, require, validate_email
from app.db.session import get_db
from app.models.sponsor import Sponsor
from app.schemas.common import MessageResponse, PathId
from app.schemas.sponsor import SponsorRead, SponsorWrite
from app.services.aggregator import fetch_sponsor_with_cities, fetch_sponsors_with_cities
from app.services.associations import set_sponsor_cities
from app.services.notifier import ChangeNotifier, get_notifier

logger = logging.getLogger(__name__)

router = APIRouter()

CONFLICT_MESSAGE = "Ya existe un patrocinador con ese email"
PARENT_MESSAGE = "Una o más ciudades indicadas no existen"


def _clean_fields(payload: SponsorWrite) -> dict:
    """Valida y normaliza el cuerpo antes de tocar la base de datos"""
    fields = {
        "name": clean(payload.name),
        "email": clean(payload.email),
        "phone": clean(payload.phone),
        "representative": clean(payload.representative),
        # Los logos se guardan tal cual (pueden ser data URI)
        "logo_light": payload.logo_light or None,
        "logo_dark": payload.logo_dark or None,
    }
    require("El nombre y email son requeridos", fields["name"], fields["email"])
    validate_email(fields["email"])
    return fields


@router.get("", response_model=List[SponsorRead])
@profile_endpoint
async def get_sponsors(db: AsyncSession = Depends(get_db)):
    """Todos los patrocinadores con sus ciudades"""
    return await fetch_sponsors_with_cities(db)


@router.get("/search", response_model=List[SponsorRead])
async def search_sponsors(
    q: Optional[str] = Query(None, description="Texto a buscar en nombre, email o representante"),
    db: AsyncSession = Depends(get_db),
):
    if not q:
        return []
    return await fetch_sponsors_with_cities(db, search=q)


@router.get("/{sponsor_id}", response_model=SponsorRead)
async def get_sponsor(sponsor_id: PathId, db: AsyncSession = Depends(get_db)):
    sponsor = await fetch_sponsor_with_cities(db, sponsor_id)
    if sponsor is None:
        raise NotFoundError("Patrocinador no encontrado")
    return sponsor


@router.post("", response_model=SponsorRead, status_code=201)
async def create_sponsor(
    payload: SponsorWrite,
    db: AsyncSession = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    """
    Crea el patrocinador y sus asociaciones en una sola transacción.

    - **cityIds**: ids de ciudades; si alguna no existe no se crea nada
    """
    fields = _clean_fields(payload)

    try:
        sponsor = Sponsor(**fields)
        db.add(sponsor)
        await db.flush()
        await set_sponsor_cities(db, sponsor.id, payload.city_ids or [])
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise translate_integrity_error(e, CONFLICT_MESSAGE, PARENT_MESSAGE)
    except AppError:
        await db.rollback()
        raise

    view = await fetch_sponsor_with_cities(db, sponsor.id)
    logger.info(f"Patrocinador creado: {view.id} {view.email} ({len(view.city_ids)} ciudades)")
    notifier.publish("patrocinador_agregado", view.model_dump(mode="json", by_alias=True))
    return view


@router.put("/{sponsor_id}", response_model=SponsorRead)
async def update_sponsor(
    sponsor_id: PathId,
    payload: SponsorWrite,
    db: AsyncSession = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    """
    Actualiza el patrocinador y reemplaza por completo sus ciudades.

    Sin ``cityIds`` el patrocinador queda sin ciudades. Si dos requests
    actualizan a la vez, gana el último commit.
    """
    fields = _clean_fields(payload)

    try:
        sponsor = await db.get(Sponsor, sponsor_id)
        if sponsor is None:
            raise NotFoundError("Patrocinador no encontrado")
        for key, value in fields.items():
            setattr(sponsor, key, value)
        await db.flush()
        await set_sponsor_cities(db, sponsor_id, payload.city_ids or [])
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise translate_integrity_error(e, CONFLICT_MESSAGE, PARENT_MESSAGE)
    except AppError:
        await db.rollback()
        raise

    view = await fetch_sponsor_with_cities(db, sponsor_id)
    logger.info(f"Patrocinador actualizado: {view.id} ({len(view.city_ids)} ciudades)")
    notifier.publish("patrocinador_actualizado", view.model_dump(mode="json", by_alias=True))
    return view


@router.delete("/{sponsor_id}", response_model=MessageResponse)
async def delete_sponsor(
    sponsor_id: PathId,
    db: AsyncSession = Depends(get_db),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    result = await db.execute(delete(Sponsor).where(Sponsor.id == sponsor_id))
    if result.rowcount == 0:
        await db.rollback()
        raise NotFoundError("Patrocinador no encontrado")
    await db.commit()

    logger.info(f"Patrocinador eliminado: {sponsor_id}")
    notifier.publish("patrocinador_eliminado", {"id": sponsor_id, "message": "Patrocinador eliminado"})
    return {"message": "Patrocinador eliminado correctamente"}
