"""Vista agregada de patrocinadores con sus ciudades"""
from typing import Dict, List, Optional

from sqlalchemy import Select, desc, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.city import City
from app.models.sponsor import Sponsor
from app.models.sponsor_city import sponsor_cities
from app.schemas.sponsor import SponsorRead


def _base_query() -> Select:
    # LEFT JOIN: un patrocinador sin ciudades aparece una vez con City.id NULL
    return (
        select(Sponsor, City.id, City.name)
        .outerjoin(sponsor_cities, Sponsor.id == sponsor_cities.c.sponsor_id)
        .outerjoin(City, sponsor_cities.c.city_id == City.id)
        # La sesión puede tener ya el objeto (recién creado o actualizado)
        .execution_options(populate_existing=True)
    )


def _group_rows(rows) -> List[SponsorRead]:
    """
    Agrupa las filas del JOIN en un registro por patrocinador.

    Las filas deben venir contiguas por patrocinador. Las filas con ciudad
    NULL no aportan nada, así que un patrocinador sin ciudades queda con
    listas vacías.
    """
    grouped: Dict[int, SponsorRead] = {}
    for sponsor, city_id, city_name in rows:
        view = grouped.get(sponsor.id)
        if view is None:
            view = SponsorRead.model_validate(sponsor)
            grouped[sponsor.id] = view
        if city_id is not None:
            view.city_ids.append(city_id)
            view.city_names.append(city_name)
    return list(grouped.values())


async def fetch_sponsor_with_cities(session: AsyncSession, sponsor_id: int) -> Optional[SponsorRead]:
    query = _base_query().where(Sponsor.id == sponsor_id).order_by(City.id)
    rows = (await session.execute(query)).all()
    views = _group_rows(rows)
    return views[0] if views else None


async def fetch_sponsors_with_cities(
    session: AsyncSession,
    search: Optional[str] = None,
) -> List[SponsorRead]:
    """
    Lista patrocinadores con sus ciudades.

    - **search**: subcadena sin distinguir mayúsculas sobre nombre, email y
      representante; el resultado se ordena por nombre. Sin filtro se
      ordena del más reciente al más antiguo.
    """
    query = _base_query()
    if search:
        query = query.where(
            or_(
                Sponsor.name.icontains(search, autoescape=True),
                Sponsor.email.icontains(search, autoescape=True),
                Sponsor.representative.icontains(search, autoescape=True),
            )
        ).order_by(Sponsor.name, Sponsor.id, City.id)
    else:
        query = query.order_by(desc(Sponsor.created_at), desc(Sponsor.id), City.id)

    rows = (await session.execute(query)).all()
    return _group_rows(rows)
