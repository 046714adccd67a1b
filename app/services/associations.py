"""Sincronización patrocinador <-> ciudades"""
import logging
from typing import Iterable, List

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ParentNotFoundError
from app.models.city import City
from app.models.sponsor_city import sponsor_cities

logger = logging.getLogger(__name__)


async def set_sponsor_cities(
    session: AsyncSession,
    sponsor_id: int,
    city_ids: Iterable[int],
) -> List[int]:
    """
    Deja las ciudades del patrocinador exactamente iguales a ``city_ids``.

    Se ejecuta dentro de la transacción del llamador y no hace commit: si
    algo falla, el rollback del llamador restaura el conjunto anterior
    completo. El patrocinador debe existir (lo verifica el llamador).

    - Duplicados en ``city_ids`` se colapsan
    - Lista vacía elimina todas las asociaciones
    - Una ciudad inexistente lanza ParentNotFoundError antes de escribir nada

    Returns:
        Los ids deseados, sin duplicados y en el orden recibido
    """
    desired = list(dict.fromkeys(city_ids))

    if desired:
        found = set(
            (await session.execute(select(City.id).where(City.id.in_(desired)))).scalars()
        )
        missing = [cid for cid in desired if cid not in found]
        if missing:
            raise ParentNotFoundError(
                f"Las siguientes ciudades no existen: {', '.join(str(cid) for cid in missing)}"
            )

    current = set(
        (
            await session.execute(
                select(sponsor_cities.c.city_id).where(sponsor_cities.c.sponsor_id == sponsor_id)
            )
        ).scalars()
    )

    # Reconciliación por diferencia de conjuntos, equivalente a borrar todo y reinsertar
    stale = current.difference(desired)
    if stale:
        await session.execute(
            delete(sponsor_cities)
            .where(sponsor_cities.c.sponsor_id == sponsor_id)
            .where(sponsor_cities.c.city_id.in_(stale))
        )

    fresh = [cid for cid in desired if cid not in current]
    if fresh:
        await session.execute(
            insert(sponsor_cities),
            [{"sponsor_id": sponsor_id, "city_id": cid} for cid in fresh],
        )

    logger.debug(
        f"Patrocinador {sponsor_id}: -{len(stale)} +{len(fresh)} ciudades (total {len(desired)})"
    )
    return desired
